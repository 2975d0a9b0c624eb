"""
In-memory mirror of the entities the client has seen.

The cache is best-effort: entries are written whenever a fresh copy of an
entity arrives (from a fetch or a pushed event), patched in place when the
server announces partial updates, and only removed on explicit delete
events. Each table sits behind its own :class:`RwLock`; no operation spans
two tables except message commits, which always lock the queue first.
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Deque, Dict, Hashable, Mapping, Optional, TypeVar

from Robespierre.core.cache.lock import RwLock
from Robespierre.core.models import (
    Channel,
    ChannelField,
    ChannelId,
    Member,
    MemberField,
    MemberId,
    Message,
    MessageId,
    Role,
    RoleField,
    RoleId,
    Server,
    ServerField,
    ServerId,
    User,
    UserField,
    UserId,
)

logger = logging.getLogger(__name__)

T = TypeVar('T')


@dataclass
class CacheConfig:
    """
    Attributes:
        messages: Messages kept per channel; 0 disables message caching
    """
    messages: int = 0


class Cache:
    """
    Per-table locked store of users, servers, roles, members, channels and
    a bounded number of messages per channel.

    Getters return deep copies; use the ``get_*_data`` variants to read a
    single attribute without copying the whole entity.
    """

    def __init__(self, config: Optional[CacheConfig] = None):
        self.config = config or CacheConfig()

        self.users: RwLock[Dict[UserId, User]] = RwLock({})
        self.servers: RwLock[Dict[ServerId, Server]] = RwLock({})
        self.roles: RwLock[Dict[RoleId, Role]] = RwLock({})
        self.members: RwLock[Dict[MemberId, Member]] = RwLock({})
        self.channels: RwLock[Dict[ChannelId, Channel]] = RwLock({})
        self.messages: RwLock[Dict[ChannelId, Dict[MessageId, Message]]] = RwLock({})
        self.message_queue: RwLock[Dict[ChannelId, Deque[MessageId]]] = RwLock({})

    # generic table helpers

    @staticmethod
    async def _get_data(table: RwLock, key: Hashable, f: Callable[[Any], T]) -> Optional[T]:
        async with table.read() as entries:
            entity = entries.get(key)
            if entity is None:
                return None
            return f(entity)

    @staticmethod
    async def _commit(table: RwLock, key: Hashable, entity) -> None:
        async with table.write() as entries:
            entries[key] = entity.model_copy(deep=True)

    @staticmethod
    async def _patch(table: RwLock, key: Hashable, data: Mapping[str, Any], remove) -> None:
        async with table.write() as entries:
            entity = entries.get(key)
            if entity is None:
                logger.debug("Dropping patch for uncached entity %s", key)
                return
            entity.patch(data)
            entity.clear(remove)

    @staticmethod
    def _copy(entity):
        return entity.model_copy(deep=True)

    # users

    async def get_user(self, user_id: UserId) -> Optional[User]:
        return await self._get_data(self.users, user_id, self._copy)

    async def get_user_data(self, user_id: UserId, f: Callable[[User], T]) -> Optional[T]:
        return await self._get_data(self.users, user_id, f)

    async def commit_user(self, user: User) -> None:
        await self._commit(self.users, user.id, user)

    async def patch_user(
        self,
        user_id: UserId,
        data: Mapping[str, Any],
        remove: Optional[UserField] = None,
    ) -> None:
        await self._patch(self.users, user_id, data, remove)

    # servers

    async def get_server(self, server_id: ServerId) -> Optional[Server]:
        return await self._get_data(self.servers, server_id, self._copy)

    async def get_server_data(self, server_id: ServerId, f: Callable[[Server], T]) -> Optional[T]:
        return await self._get_data(self.servers, server_id, f)

    async def commit_server(self, server: Server) -> None:
        await self._commit(self.servers, server.id, server)

    async def patch_server(
        self,
        server_id: ServerId,
        data: Mapping[str, Any],
        remove: Optional[ServerField] = None,
    ) -> None:
        await self._patch(self.servers, server_id, data, remove)

    async def delete_server(self, server_id: ServerId) -> None:
        async with self.servers.write() as servers:
            servers.pop(server_id, None)

    # roles

    async def get_role(self, role_id: RoleId) -> Optional[Role]:
        return await self._get_data(self.roles, role_id, self._copy)

    async def get_role_data(self, role_id: RoleId, f: Callable[[Role], T]) -> Optional[T]:
        return await self._get_data(self.roles, role_id, f)

    async def commit_role(self, role_id: RoleId, role: Role) -> None:
        await self._commit(self.roles, role_id, role)

    async def patch_role(
        self,
        role_id: RoleId,
        data: Mapping[str, Any],
        remove: Optional[RoleField] = None,
    ) -> None:
        await self._patch(self.roles, role_id, data, remove)

    # members

    async def get_member(self, member_id: MemberId) -> Optional[Member]:
        return await self._get_data(self.members, member_id, self._copy)

    async def get_member_data(self, member_id: MemberId, f: Callable[[Member], T]) -> Optional[T]:
        return await self._get_data(self.members, member_id, f)

    async def commit_member(self, member: Member) -> None:
        await self._commit(self.members, member.id, member)

    async def patch_member(
        self,
        member_id: MemberId,
        data: Mapping[str, Any],
        remove: Optional[MemberField] = None,
    ) -> None:
        await self._patch(self.members, member_id, data, remove)

    # channels

    async def get_channel(self, channel_id: ChannelId) -> Optional[Channel]:
        return await self._get_data(self.channels, channel_id, self._copy)

    async def get_channel_data(self, channel_id: ChannelId, f: Callable[[Channel], T]) -> Optional[T]:
        return await self._get_data(self.channels, channel_id, f)

    async def commit_channel(self, channel: Channel) -> None:
        await self._commit(self.channels, channel.id, channel)

    async def patch_channel(
        self,
        channel_id: ChannelId,
        data: Mapping[str, Any],
        remove: Optional[ChannelField] = None,
    ) -> None:
        await self._patch(self.channels, channel_id, data, remove)

    async def delete_channel(self, channel_id: ChannelId) -> None:
        async with self.channels.write() as channels:
            channels.pop(channel_id, None)

        async with self.message_queue.write() as queues:
            async with self.messages.write() as messages:
                queues.pop(channel_id, None)
                messages.pop(channel_id, None)

    # messages

    async def get_message(self, channel_id: ChannelId, message_id: MessageId) -> Optional[Message]:
        return await self.get_message_data(channel_id, message_id, self._copy)

    async def get_message_data(
        self,
        channel_id: ChannelId,
        message_id: MessageId,
        f: Callable[[Message], T],
    ) -> Optional[T]:
        async with self.messages.read() as messages:
            message = messages.get(channel_id, {}).get(message_id)
            if message is None:
                return None
            return f(message)

    async def commit_message(self, message: Message) -> None:
        """
        Store ``message`` in its channel's table.

        When the channel then holds more than ``config.messages`` entries the
        oldest inserted message is evicted. Does nothing when message caching
        is disabled.
        """
        capacity = self.config.messages
        if capacity == 0:
            return

        async with self.message_queue.write() as queues:
            async with self.messages.write() as messages:
                queue = queues.setdefault(message.channel, deque())
                table = messages.setdefault(message.channel, {})

                if message.id not in table:
                    queue.append(message.id)
                table[message.id] = message.model_copy(deep=True)

                while len(queue) > capacity:
                    oldest = queue.popleft()
                    table.pop(oldest, None)

    async def patch_message(
        self,
        channel_id: ChannelId,
        message_id: MessageId,
        data: Mapping[str, Any],
    ) -> None:
        async with self.messages.write() as messages:
            message = messages.get(channel_id, {}).get(message_id)
            if message is not None:
                message.patch(data)

    async def delete_message(self, channel_id: ChannelId, message_id: MessageId) -> None:
        async with self.message_queue.write() as queues:
            async with self.messages.write() as messages:
                table = messages.get(channel_id)
                if table is None or table.pop(message_id, None) is None:
                    return
                queue = queues.get(channel_id)
                if queue is not None:
                    queue.remove(message_id)


__all__ = ['CacheConfig', 'Cache']
