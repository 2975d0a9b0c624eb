"""
Asyncio reader/writer lock guarding one cache table.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Generic, TypeVar

T = TypeVar('T')


class RwLock(Generic[T]):
    """
    Owns a value and hands it out under shared or exclusive access.

    Any number of readers may hold the lock together; a writer waits until
    the readers are gone and excludes everyone else. Waiting writers block
    new readers so a stream of reads cannot starve an update.

    Example:
        users = RwLock({})
        async with users.write() as table:
            table[user.id] = user
    """

    def __init__(self, value: T):
        self._value = value
        self._cond = asyncio.Condition()
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @asynccontextmanager
    async def read(self) -> AsyncIterator[T]:
        async with self._cond:
            await self._cond.wait_for(lambda: not self._writer and self._waiting_writers == 0)
            self._readers += 1
        try:
            yield self._value
        finally:
            async with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @asynccontextmanager
    async def write(self) -> AsyncIterator[T]:
        async with self._cond:
            self._waiting_writers += 1
            try:
                await self._cond.wait_for(lambda: not self._writer and self._readers == 0)
            except asyncio.CancelledError:
                self._waiting_writers -= 1
                # readers may be parked behind this writer
                self._cond.notify_all()
                raise
            self._waiting_writers -= 1
            self._writer = True
        try:
            yield self._value
        finally:
            async with self._cond:
                self._writer = False
                self._cond.notify_all()

    @property
    def locked(self) -> bool:
        return self._writer or self._readers > 0
