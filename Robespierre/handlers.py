"""
Event handlers.

:class:`EventHandler` is the typed, one-method-per-event interface bots
implement. The wrappers below adapt it to the connection's
:class:`RawEventHandler` interface and layer behaviour on top:

* :class:`EventHandlerWrap` routes raw events to :class:`EventHandler` methods
* :class:`CacheWrap` applies events to the cache before they are handled
* :class:`FrameworkWrap` runs a command framework on every message
* :class:`CacheServersMaintainer` keeps servers the bot joins or leaves in
  the cache

Typical composition::

    handler = CacheWrap(EventHandlerWrap(FrameworkWrap(framework, MyHandler())))
"""

import logging
from typing import Any, Dict, Optional

from Robespierre.core.cache import commit_to_cache
from Robespierre.core.context import Context, fetch_server
from Robespierre.core.events import RawEventHandler
from Robespierre.core.http import HttpError
from Robespierre.core.models import (
    Channel,
    ChannelField,
    ChannelId,
    MemberField,
    MemberId,
    Message,
    MessageId,
    RelationshipStatus,
    RoleField,
    RoleId,
    ServerField,
    ServerId,
    UserField,
    UserId,
)
from Robespierre.core.models.events import (
    AuthenticatedEvent,
    ChannelAckEvent,
    ChannelCreateEvent,
    ChannelDeleteEvent,
    ChannelGroupJoinEvent,
    ChannelGroupLeaveEvent,
    ChannelStartTypingEvent,
    ChannelStopTypingEvent,
    ChannelUpdateEvent,
    ErrorEvent,
    MessageDeleteEvent,
    MessageEvent,
    MessageUpdateEvent,
    PongEvent,
    ReadyEvent,
    ServerDeleteEvent,
    ServerMemberJoinEvent,
    ServerMemberLeaveEvent,
    ServerMemberUpdateEvent,
    ServerRoleDeleteEvent,
    ServerRoleUpdateEvent,
    ServerToClientEvent,
    ServerUpdateEvent,
    UserRelationshipEvent,
    UserUpdateEvent,
)

logger = logging.getLogger(__name__)


class EventHandler:
    """
    Override the callbacks you need; the rest do nothing.

    Every callback receives the :class:`~Robespierre.core.context.Context`
    first. ``data`` arguments are the partial objects sent by the server and
    ``clear`` names a field that was removed.
    """

    async def on_ready(self, ctx: Context, ready: ReadyEvent) -> None:
        pass

    async def on_message(self, ctx: Context, message: Message) -> None:
        pass

    async def on_message_update(self, ctx: Context, channel: ChannelId, id: MessageId,
                                data: Dict[str, Any]) -> None:
        pass

    async def on_message_delete(self, ctx: Context, channel_id: ChannelId, message_id: MessageId) -> None:
        pass

    async def on_channel_create(self, ctx: Context, channel: Channel) -> None:
        pass

    async def on_channel_update(self, ctx: Context, id: ChannelId, data: Dict[str, Any],
                                clear: Optional[ChannelField]) -> None:
        pass

    async def on_channel_delete(self, ctx: Context, id: ChannelId) -> None:
        pass

    async def on_group_join(self, ctx: Context, id: ChannelId, user: UserId) -> None:
        pass

    async def on_group_leave(self, ctx: Context, id: ChannelId, user: UserId) -> None:
        pass

    async def on_start_typing(self, ctx: Context, channel: ChannelId, user: UserId) -> None:
        pass

    async def on_stop_typing(self, ctx: Context, channel: ChannelId, user: UserId) -> None:
        pass

    async def on_server_update(self, ctx: Context, id: ServerId, data: Dict[str, Any],
                               clear: Optional[ServerField]) -> None:
        pass

    async def on_server_delete(self, ctx: Context, id: ServerId) -> None:
        pass

    async def on_server_member_join(self, ctx: Context, server: ServerId, user: UserId) -> None:
        pass

    async def on_server_member_update(self, ctx: Context, id: MemberId, data: Dict[str, Any],
                                      clear: Optional[MemberField]) -> None:
        pass

    async def on_server_member_leave(self, ctx: Context, server: ServerId, user: UserId) -> None:
        pass

    async def on_server_role_update(self, ctx: Context, server: ServerId, role_id: RoleId,
                                    data: Dict[str, Any], clear: Optional[RoleField]) -> None:
        pass

    async def on_server_role_delete(self, ctx: Context, server: ServerId, role_id: RoleId) -> None:
        pass

    async def on_user_update(self, ctx: Context, id: UserId, data: Dict[str, Any],
                             clear: Optional[UserField]) -> None:
        pass

    async def on_user_relationship_update(self, ctx: Context, id: UserId, user: UserId,
                                          status: RelationshipStatus) -> None:
        pass


class EventHandlerWrap(RawEventHandler):
    """Routes raw events to the matching :class:`EventHandler` callback."""

    def __init__(self, inner: EventHandler):
        self.inner = inner

    async def handle(self, ctx: Context, event: ServerToClientEvent) -> None:
        inner = self.inner
        match event:
            case ErrorEvent():
                logger.error("Error event: %s", event.error)
            case AuthenticatedEvent():
                pass
            case PongEvent():
                logger.debug("Pong: %s", event.data)
            case ReadyEvent():
                await inner.on_ready(ctx, event)
            case MessageEvent():
                await inner.on_message(ctx, event.message)
            case MessageUpdateEvent():
                await inner.on_message_update(ctx, event.channel, event.id, event.data)
            case MessageDeleteEvent():
                await inner.on_message_delete(ctx, event.channel, event.id)
            case ChannelCreateEvent():
                await inner.on_channel_create(ctx, event.channel)
            case ChannelUpdateEvent():
                await inner.on_channel_update(ctx, event.id, event.data, event.clear)
            case ChannelDeleteEvent():
                await inner.on_channel_delete(ctx, event.id)
            case ChannelGroupJoinEvent():
                await inner.on_group_join(ctx, event.id, event.user)
            case ChannelGroupLeaveEvent():
                await inner.on_group_leave(ctx, event.id, event.user)
            case ChannelStartTypingEvent():
                await inner.on_start_typing(ctx, event.id, event.user)
            case ChannelStopTypingEvent():
                await inner.on_stop_typing(ctx, event.id, event.user)
            case ChannelAckEvent():
                logger.debug("Channel %s acknowledged up to %s", event.id, event.message_id)
            case ServerUpdateEvent():
                await inner.on_server_update(ctx, event.id, event.data, event.clear)
            case ServerDeleteEvent():
                await inner.on_server_delete(ctx, event.id)
            case ServerMemberUpdateEvent():
                await inner.on_server_member_update(ctx, event.id, event.data, event.clear)
            case ServerMemberJoinEvent():
                await inner.on_server_member_join(ctx, event.id, event.user)
            case ServerMemberLeaveEvent():
                await inner.on_server_member_leave(ctx, event.id, event.user)
            case ServerRoleUpdateEvent():
                await inner.on_server_role_update(ctx, event.id, event.role_id, event.data, event.clear)
            case ServerRoleDeleteEvent():
                await inner.on_server_role_delete(ctx, event.id, event.role_id)
            case UserUpdateEvent():
                await inner.on_user_update(ctx, event.id, event.data, event.clear)
            case UserRelationshipEvent():
                await inner.on_user_relationship_update(ctx, event.id, event.user, event.status)
            case _:
                logger.debug("No callback for %s", type(event).__name__)


class CacheWrap(RawEventHandler):
    """Commits every event to ``ctx.cache`` before the inner handler sees it."""

    def __init__(self, inner: RawEventHandler):
        self.inner = inner

    async def prepare(self, ctx: Context, event: ServerToClientEvent) -> None:
        if ctx.cache is not None:
            await commit_to_cache(ctx.cache, event)
        await self.inner.prepare(ctx, event)

    async def handle(self, ctx: Context, event: ServerToClientEvent) -> None:
        await self.inner.handle(ctx, event)


class FrameworkWrap(EventHandler):
    """
    Runs ``framework`` on every message, then forwards to ``inner``.

    Args:
        framework: Anything with ``async handle(ctx, message)``, usually a
            :class:`~Robespierre.framework.StandardFramework`
        inner: Handler receiving every event afterwards
    """

    def __init__(self, framework: Any, inner: EventHandler):
        self.framework = framework
        self.inner = inner

    async def on_message(self, ctx, message):
        await self.framework.handle(ctx, message)
        await self.inner.on_message(ctx, message)

    async def on_ready(self, ctx, ready):
        await self.inner.on_ready(ctx, ready)

    async def on_message_update(self, ctx, channel, id, data):
        await self.inner.on_message_update(ctx, channel, id, data)

    async def on_message_delete(self, ctx, channel_id, message_id):
        await self.inner.on_message_delete(ctx, channel_id, message_id)

    async def on_channel_create(self, ctx, channel):
        await self.inner.on_channel_create(ctx, channel)

    async def on_channel_update(self, ctx, id, data, clear):
        await self.inner.on_channel_update(ctx, id, data, clear)

    async def on_channel_delete(self, ctx, id):
        await self.inner.on_channel_delete(ctx, id)

    async def on_group_join(self, ctx, id, user):
        await self.inner.on_group_join(ctx, id, user)

    async def on_group_leave(self, ctx, id, user):
        await self.inner.on_group_leave(ctx, id, user)

    async def on_start_typing(self, ctx, channel, user):
        await self.inner.on_start_typing(ctx, channel, user)

    async def on_stop_typing(self, ctx, channel, user):
        await self.inner.on_stop_typing(ctx, channel, user)

    async def on_server_update(self, ctx, id, data, clear):
        await self.inner.on_server_update(ctx, id, data, clear)

    async def on_server_delete(self, ctx, id):
        await self.inner.on_server_delete(ctx, id)

    async def on_server_member_join(self, ctx, server, user):
        await self.inner.on_server_member_join(ctx, server, user)

    async def on_server_member_update(self, ctx, id, data, clear):
        await self.inner.on_server_member_update(ctx, id, data, clear)

    async def on_server_member_leave(self, ctx, server, user):
        await self.inner.on_server_member_leave(ctx, server, user)

    async def on_server_role_update(self, ctx, server, role_id, data, clear):
        await self.inner.on_server_role_update(ctx, server, role_id, data, clear)

    async def on_server_role_delete(self, ctx, server, role_id):
        await self.inner.on_server_role_delete(ctx, server, role_id)

    async def on_user_update(self, ctx, id, data, clear):
        await self.inner.on_user_update(ctx, id, data, clear)

    async def on_user_relationship_update(self, ctx, id, user, status):
        await self.inner.on_user_relationship_update(ctx, id, user, status)


class CacheServersMaintainer(RawEventHandler):
    """
    Adds servers the bot joins to the cache and drops servers it leaves.

    ``ServerMemberJoin`` only carries ids, so the joined server is fetched
    (unless already cached) while the event is being prepared.
    """

    def __init__(self, user_id: UserId, inner: RawEventHandler):
        self.user_id = user_id
        self.inner = inner

    async def prepare(self, ctx: Context, event: ServerToClientEvent) -> None:
        if ctx.cache is not None:
            match event:
                case ServerMemberJoinEvent() if event.user == self.user_id:
                    try:
                        await fetch_server(ctx, event.id)
                    except HttpError as e:
                        logger.warning("Could not fetch joined server %s: %s", event.id, e)
                case ServerMemberLeaveEvent() if event.user == self.user_id:
                    await ctx.cache.delete_server(event.id)
        await self.inner.prepare(ctx, event)

    async def handle(self, ctx: Context, event: ServerToClientEvent) -> None:
        await self.inner.handle(ctx, event)


__all__ = [
    'EventHandler',
    'RawEventHandler',
    'EventHandlerWrap',
    'CacheWrap',
    'FrameworkWrap',
    'CacheServersMaintainer',
]
