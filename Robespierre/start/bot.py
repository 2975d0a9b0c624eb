"""
Example bot module for Robespierre.
Wires the connection, cache, handlers and command framework together and
provides the entry point used by ``python -m``.
"""

import asyncio
import logging
from typing import Iterable, Optional

from Robespierre.config import config
from Robespierre.core import Authentication, Cache, CacheConfig, Connection, Context, HttpClient
from Robespierre.core.context import reply
from Robespierre.core.events import AuthError, ConnectionClosedError
from Robespierre.core.models import Mention, User
from Robespierre.framework import (
    Author,
    Command,
    CommandError,
    Option,
    Rest,
    StandardFramework,
    command,
)
from Robespierre.handlers import (
    CacheServersMaintainer,
    CacheWrap,
    EventHandler,
    EventHandlerWrap,
    FrameworkWrap,
)

logger = logging.getLogger(__name__)

__all__ = ['bot', 'build_framework']


@command
async def ping(ctx, message):
    """Check that the bot is alive."""
    await reply(ctx, message, "pong")


@command
async def echo(ctx, message, text: Rest[str]):
    """Repeat the given text."""
    await reply(ctx, message, text.value)


@command
async def whois(ctx, message, user: Option[User], author: Author):
    """Show who a user is; defaults to yourself."""
    target = user if user is not None else author.value
    kind = "a bot" if target.is_bot else "a user"
    await reply(ctx, message, f"{Mention.user(target)} is {target.username}, {kind}")


@command
async def add(ctx, message, a: str, b: str):
    """Add two integers."""
    async with ctx.typing(message.channel):
        total = int(a) + int(b)
    await reply(ctx, message, f"{a} + {b} = {total}")


@command
async def shutdown(ctx, message):
    """Disconnect the bot."""
    await reply(ctx, message, "Shutting down")
    ctx.messenger.close()


async def report_errors(ctx: Context, message, error: Optional[CommandError]) -> None:
    if error is None:
        return
    logger.info("Command failed: %s", error)
    await reply(ctx, message, f"Error: {error}")


def build_framework(prefix: str = config.COMMAND_PREFIX, owners: Iterable[str] = ()) -> StandardFramework:
    """Create the command framework with the example commands registered."""
    return (StandardFramework()
            .configure(lambda c: c.prefix(prefix).owners(owners))
            .group(lambda g: g.with_name("General")
                   .command(lambda: Command.new("ping", ping))
                   .command(lambda: Command.new("echo", echo).alias("say"))
                   .command(lambda: Command.new("whois", whois))
                   .command(lambda: Command.new("shutdown", shutdown).with_owners_only())
                   .subgroup(lambda g: g.with_name("math")
                             .command(lambda: Command.new("add", add))))
            .after(report_errors))


class LoggingHandler(EventHandler):
    """Logs connection milestones."""

    async def on_ready(self, ctx, ready):
        logger.info(
            "Ready: %d servers, %d channels, %d users",
            len(ready.servers), len(ready.channels), len(ready.users)
        )

    async def on_server_member_join(self, ctx, server, user):
        logger.debug("User %s joined server %s", user, server)


async def _run(token: str, prefix: str, cache_messages: int, owners: Iterable[str]) -> None:
    auth = Authentication.bot(token)
    http = HttpClient(auth)
    try:
        me = await http.fetch_self()
        logger.info("Logged in as %s (%s)", me.username, me.id)

        ctx = Context(http=http, cache=Cache(CacheConfig(messages=cache_messages)))
        handler = CacheServersMaintainer(
            me.id,
            CacheWrap(EventHandlerWrap(FrameworkWrap(build_framework(prefix, owners), LoggingHandler())))
        )

        connection = await Connection.connect(auth)
        try:
            await connection.run(ctx, handler)
        finally:
            await connection.close()
    finally:
        await http.close()


def bot(
    token: str = config.BOT_TOKEN,
    prefix: str = config.COMMAND_PREFIX,
    cache_messages: int = config.CACHE_MESSAGES,
    owners: Iterable[str] = (),
) -> None:
    """
    Run the example bot until the connection closes.

    Args:
        token: Bot token
        prefix: Command prefix
        cache_messages: Messages cached per channel, 0 to disable
        owners: User ids allowed to run owners-only commands
    """
    if not token:
        raise SystemExit("No bot token given; pass --token or set ROBESPIERRE_TOKEN")

    try:
        asyncio.run(_run(token, prefix, cache_messages, list(owners)))
    except AuthError as e:
        logger.error("%s", e)
        raise SystemExit(1) from e
    except ConnectionClosedError:
        logger.warning("Connection closed by server")
    except KeyboardInterrupt:
        logger.info("Interrupted")
