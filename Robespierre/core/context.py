"""
Per-connection context handed to every handler, plus the cache-or-network
helpers built on it.

Each ``fetch_*`` helper returns the cached copy when there is one, and
otherwise fetches the entity over HTTP, stores it in the cache and returns
it. Without a cache they always go to the network.
"""

import logging
import uuid
from dataclasses import dataclass, replace
from typing import Any, Optional

from Robespierre.core.cache import Cache
from Robespierre.core.events.typing_sessions import ConnectionMessenger, TypingSession
from Robespierre.core.http import HttpClient
from Robespierre.core.models import (
    Channel,
    ChannelId,
    Member,
    MemberId,
    Message,
    Server,
    ServerId,
    User,
    UserId,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Context:
    """
    What handlers need to talk back to the service.

    Attributes:
        http: REST client
        cache: Entity cache, or None when caching is disabled
        state: Application state object built once at startup and shared by
            every handler (counters, configuration, database handles...)
        messenger: Channel to the running connection, set by the connection
            before handlers run
    """
    http: HttpClient
    cache: Optional[Cache] = None
    state: Any = None
    messenger: Optional[ConnectionMessenger] = None

    def with_messenger(self, messenger: ConnectionMessenger) -> 'Context':
        return replace(self, messenger=messenger)

    def typing(self, channel_id: ChannelId) -> TypingSession:
        """
        Show "typing..." in ``channel_id`` while the returned session is open.

        Example:
            async with ctx.typing(message.channel):
                await slow_work()
        """
        if self.messenger is None:
            raise RuntimeError("context is not attached to a running connection")
        return TypingSession(channel_id, self.messenger)


async def fetch_user(ctx: Context, user_id: UserId) -> User:
    if ctx.cache is not None:
        user = await ctx.cache.get_user(user_id)
        if user is not None:
            return user

    user = await ctx.http.fetch_user(user_id)
    if ctx.cache is not None:
        await ctx.cache.commit_user(user)
    return user


async def fetch_channel(ctx: Context, channel_id: ChannelId) -> Channel:
    if ctx.cache is not None:
        channel = await ctx.cache.get_channel(channel_id)
        if channel is not None:
            return channel

    channel = await ctx.http.fetch_channel(channel_id)
    if ctx.cache is not None:
        await ctx.cache.commit_channel(channel)
    return channel


async def fetch_server(ctx: Context, server_id: ServerId) -> Server:
    if ctx.cache is not None:
        server = await ctx.cache.get_server(server_id)
        if server is not None:
            return server

    server = await ctx.http.fetch_server(server_id)
    if ctx.cache is not None:
        await ctx.cache.commit_server(server)
    return server


async def fetch_member(ctx: Context, member_id: MemberId) -> Member:
    if ctx.cache is not None:
        member = await ctx.cache.get_member(member_id)
        if member is not None:
            return member

    member = await ctx.http.fetch_member(member_id.server, member_id.user)
    if ctx.cache is not None:
        await ctx.cache.commit_member(member)
    return member


async def channel_server_id(ctx: Context, channel_id: ChannelId) -> Optional[ServerId]:
    """Server owning ``channel_id``, or None for DMs, groups and saved messages."""
    if ctx.cache is not None:
        cached = await ctx.cache.get_channel_data(channel_id, lambda channel: (channel.server_id,))
        if cached is not None:
            return cached[0]

    return (await fetch_channel(ctx, channel_id)).server_id


async def message_author(ctx: Context, message: Message) -> User:
    return await fetch_user(ctx, message.author)


async def message_channel(ctx: Context, message: Message) -> Channel:
    return await fetch_channel(ctx, message.channel)


async def message_server_id(ctx: Context, message: Message) -> Optional[ServerId]:
    return await channel_server_id(ctx, message.channel)


async def message_member(ctx: Context, message: Message) -> Optional[Member]:
    """The author's membership record, or None outside a server."""
    server_id = await message_server_id(ctx, message)
    if server_id is None:
        return None
    return await fetch_member(ctx, MemberId(server=server_id, user=message.author))


async def reply(ctx: Context, message: Message, content: str) -> Message:
    """Send ``content`` to the message's channel as a non-mentioning reply."""
    return await ctx.http.send_message(
        message.channel,
        content,
        nonce=uuid.uuid4().hex,
        attachments=[],
        replies=[{"id": message.id, "mention": False}],
    )


__all__ = [
    'Context',
    'fetch_user',
    'fetch_channel',
    'fetch_server',
    'fetch_member',
    'channel_server_id',
    'message_author',
    'message_channel',
    'message_server_id',
    'message_member',
    'reply',
]
