"""
Typing indicators.

The server drops a typing indicator after a few seconds, so the connection
keeps re-sending ``BeginTyping`` for every channel with an open session.
Handlers never touch the socket directly; they post requests through a
:class:`ConnectionMessenger` and the connection loop acts on them.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, Iterator, Optional

from Robespierre.core.models import ChannelId

logger = logging.getLogger(__name__)


class ConnectionMessageKind(Enum):
    START_TYPING = auto()
    STOP_TYPING = auto()
    CLOSE = auto()


@dataclass(frozen=True)
class ConnectionMessage:
    """A request from handler code to the running connection."""
    kind: ConnectionMessageKind
    channel: Optional[ChannelId] = None

    @classmethod
    def start_typing(cls, channel: ChannelId) -> 'ConnectionMessage':
        return cls(ConnectionMessageKind.START_TYPING, channel)

    @classmethod
    def stop_typing(cls, channel: ChannelId) -> 'ConnectionMessage':
        return cls(ConnectionMessageKind.STOP_TYPING, channel)

    @classmethod
    def close(cls) -> 'ConnectionMessage':
        return cls(ConnectionMessageKind.CLOSE)


class ConnectionMessenger:
    """Queue of :class:`ConnectionMessage` consumed by ``Connection.run``."""

    def __init__(self):
        self.queue: asyncio.Queue = asyncio.Queue()

    def send(self, message: ConnectionMessage) -> None:
        self.queue.put_nowait(message)

    def close(self) -> None:
        """Ask the connection to close the socket and stop running."""
        self.send(ConnectionMessage.close())


class TypingSession:
    """
    Async context manager that keeps a channel's typing indicator on.

    Sessions nest: the indicator stops once the last session for the channel
    is closed.
    """

    def __init__(self, channel_id: ChannelId, messenger: ConnectionMessenger):
        self.channel_id = channel_id
        self.messenger = messenger

    async def __aenter__(self) -> 'TypingSession':
        self.messenger.send(ConnectionMessage.start_typing(self.channel_id))
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.messenger.send(ConnectionMessage.stop_typing(self.channel_id))


class TypingSessionManager:
    """Reference counts open typing sessions per channel."""

    def __init__(self):
        self._sessions: Dict[ChannelId, int] = {}

    def start_typing(self, channel_id: ChannelId) -> None:
        self._sessions[channel_id] = self._sessions.get(channel_id, 0) + 1

    def stop_typing(self, channel_id: ChannelId) -> bool:
        """
        Close one session for ``channel_id``.

        Returns:
            True when that was the last session and ``EndTyping`` should be sent
        """
        count = self._sessions.get(channel_id)
        if count is None:
            logger.debug("Trying to stop typing, but no session for channel %s", channel_id)
            return False

        if count <= 1:
            del self._sessions[channel_id]
            return True

        self._sessions[channel_id] = count - 1
        return False

    def current_sessions(self) -> Iterator[ChannelId]:
        return iter(list(self._sessions))


__all__ = [
    'ConnectionMessageKind',
    'ConnectionMessage',
    'ConnectionMessenger',
    'TypingSession',
    'TypingSessionManager',
]
