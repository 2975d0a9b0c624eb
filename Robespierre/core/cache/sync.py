"""
Applies inbound events to a :class:`Cache`.
"""

import logging
from typing import Optional

from Robespierre.core.cache.cache import Cache
from Robespierre.core.models.events import (
    ChannelCreateEvent,
    ChannelDeleteEvent,
    ChannelUpdateEvent,
    MessageDeleteEvent,
    MessageEvent,
    MessageUpdateEvent,
    ReadyEvent,
    ServerDeleteEvent,
    ServerMemberUpdateEvent,
    ServerRoleUpdateEvent,
    ServerToClientEvent,
    ServerUpdateEvent,
    UserUpdateEvent,
)

logger = logging.getLogger(__name__)


async def commit_to_cache(cache: Optional[Cache], event: ServerToClientEvent) -> None:
    """
    Mirror the state change carried by ``event`` into ``cache``.

    Events without a cache effect (typing, acks, group joins, role deletes,
    relationship changes...) are ignored, as is a ``None`` cache.
    """
    if cache is None:
        return

    match event:
        case ReadyEvent():
            for user in event.users:
                await cache.commit_user(user)
            for server in event.servers:
                await cache.commit_server(server)
                for role_id, role in server.roles.items():
                    await cache.commit_role(role_id, role)
            for channel in event.channels:
                await cache.commit_channel(channel)
            for member in event.members:
                await cache.commit_member(member)
            logger.debug(
                "Cached ready snapshot: %d users, %d servers, %d channels, %d members",
                len(event.users), len(event.servers), len(event.channels), len(event.members)
            )

        case MessageEvent():
            await cache.commit_message(event.message)

        case MessageUpdateEvent():
            await cache.patch_message(event.channel, event.id, event.data)

        case MessageDeleteEvent():
            await cache.delete_message(event.channel, event.id)

        case ChannelCreateEvent():
            await cache.commit_channel(event.channel)

        case ChannelUpdateEvent():
            await cache.patch_channel(event.id, event.data, event.clear)

        case ChannelDeleteEvent():
            await cache.delete_channel(event.id)

        case ServerUpdateEvent():
            await cache.patch_server(event.id, event.data, event.clear)

        case ServerDeleteEvent():
            await cache.delete_server(event.id)

        case ServerMemberUpdateEvent():
            await cache.patch_member(event.id, event.data, event.clear)

        case ServerRoleUpdateEvent():
            await cache.patch_role(event.role_id, event.data, event.clear)

        case UserUpdateEvent():
            await cache.patch_user(event.id, event.data, event.clear)

        case _:
            pass


__all__ = ['commit_to_cache']
