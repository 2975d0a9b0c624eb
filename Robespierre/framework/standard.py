"""
The standard command framework: prefix matching, registry lookup and
invocation with an ``after`` hook that sees every outcome.
"""

import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Iterable, Optional, Set

from Robespierre.core.context import Context
from Robespierre.core.logging.utils import LogTimer
from Robespierre.core.models import Message, UserId
from Robespierre.framework.exceptions import CommandError, CommandInvokeError
from Robespierre.framework.groups import Command, Group, RootGroup

logger = logging.getLogger(__name__)

MessageHook = Callable[[Context, Message], Awaitable[None]]
AfterHook = Callable[[Context, Message, Optional[CommandError]], Awaitable[None]]


@dataclass
class StdFwConfig:
    """
    Framework settings.

    Attributes:
        prefix_text: Text a message must start with to be a command
        owners_set: Users allowed to run owners-only commands
    """
    prefix_text: str = ""
    owners_set: Set[UserId] = field(default_factory=set)

    def prefix(self, prefix: str) -> 'StdFwConfig':
        self.prefix_text = prefix
        return self

    def owners(self, owners: Iterable[UserId]) -> 'StdFwConfig':
        self.owners_set = set(owners)
        return self


class StandardFramework:
    """
    Routes prefixed messages to registered commands.

    Example:
        fw = (StandardFramework()
              .configure(lambda c: c.prefix("!"))
              .group(lambda g: g.with_name("General")
                     .command(lambda: Command.new("ping", ping)))
              .after(report_errors))
    """

    def __init__(self):
        self.root_group = RootGroup()
        self.config = StdFwConfig()
        self.normal_message_hook: Optional[MessageHook] = None
        self.unknown_command_hook: Optional[MessageHook] = None
        self.after_hook: Optional[AfterHook] = None

    def configure(self, f: Callable[[StdFwConfig], StdFwConfig]) -> 'StandardFramework':
        self.config = f(self.config)
        return self

    def normal_message(self, hook: MessageHook) -> 'StandardFramework':
        """Called for messages that do not start with the prefix."""
        self.normal_message_hook = hook
        return self

    def unknown_command(self, hook: MessageHook) -> 'StandardFramework':
        """Called for prefixed messages no command matches."""
        self.unknown_command_hook = hook
        return self

    def after(self, hook: AfterHook) -> 'StandardFramework':
        """Called after every command run with None on success or the error."""
        self.after_hook = hook
        return self

    def group(self, f: Callable[[Group], Group]) -> 'StandardFramework':
        self.root_group.add(f(Group()))
        return self

    def find_command(self, text: str):
        return self.root_group.find_command(text)

    async def invoke(self, ctx: Context, message: Message, command: Command, args: str) -> Optional[CommandError]:
        """
        Run ``command`` and return its failure, if any.

        Extraction failures are returned as raised. Anything else the command
        body raises is wrapped in :class:`CommandInvokeError`.
        """
        try:
            with LogTimer(f"command {command.name}", logger):
                await command.code(ctx, message, args)
        except CommandError as e:
            if e.command is None:
                e.command = command.name
            return e
        except Exception as e:
            logger.debug("Command %s raised %s", command.name, type(e).__name__)
            return CommandInvokeError(e, command.name)
        return None

    async def handle(self, ctx: Context, message: Message) -> None:
        if message.is_system:
            return

        content = message.text
        prefix = self.config.prefix_text
        if content is None or not content.startswith(prefix):
            if self.normal_message_hook is not None:
                await self.normal_message_hook(ctx, message)
            return

        found = self.find_command(content[len(prefix):])
        if found is None:
            logger.debug("Unknown command: %r", content)
            if self.unknown_command_hook is not None:
                await self.unknown_command_hook(ctx, message)
            return

        command, args = found
        if command.owners_only and message.author not in self.config.owners_set:
            logger.info("User %s is not allowed to run %s", message.author, command.name)
            if self.unknown_command_hook is not None:
                await self.unknown_command_hook(ctx, message)
            return

        logger.debug("Invoking %s with args %r", command.name, args)
        result = await self.invoke(ctx, message, command, args)
        if self.after_hook is not None:
            await self.after_hook(ctx, message, result)


__all__ = ['StdFwConfig', 'StandardFramework']
