"""
Command registry: a tree of named groups holding commands.

Resolution is first-match-wins in declaration order, so when names overlap
the one registered first takes the input.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Awaitable, Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)

# (ctx, message, args) -> None; failures are raised
CommandCode = Callable[..., Awaitable[None]]


def _split_after(text: str, prefix: str) -> Optional[str]:
    """
    Return what follows ``prefix`` in ``text`` if ``prefix`` ends at a word
    boundary (end of text or whitespace), else None.
    """
    if not text.startswith(prefix):
        return None
    rest = text[len(prefix):]
    if rest.strip() == "" or rest[0].isspace():
        return rest
    return None


@dataclass
class Command:
    """
    A named command and the code it runs.

    Attributes:
        name: Primary name
        code: Handler, usually produced by the ``@command`` decorator
        aliases: Alternative names, tried after ``name``
        owners_only: Only configured owners may invoke it
        description: Human readable description
        usage: Usage line for help output
        examples: Example invocations
    """
    name: str
    code: CommandCode
    aliases: List[str] = field(default_factory=list)
    owners_only: bool = False
    description: Optional[str] = None
    usage: Optional[str] = None
    examples: List[str] = field(default_factory=list)

    @classmethod
    def new(cls, name: str, code: CommandCode) -> 'Command':
        description = getattr(code, "description", None)
        return cls(name=name, code=code, description=description)

    def alias(self, alias: str) -> 'Command':
        return replace(self, aliases=[*self.aliases, alias])

    def with_owners_only(self, owners_only: bool = True) -> 'Command':
        return replace(self, owners_only=owners_only)

    def describe(
        self,
        description: Optional[str] = None,
        usage: Optional[str] = None,
        examples: Optional[List[str]] = None,
    ) -> 'Command':
        return replace(
            self,
            description=description if description is not None else self.description,
            usage=usage if usage is not None else self.usage,
            examples=list(examples) if examples is not None else self.examples,
        )

    @property
    def names(self) -> List[str]:
        return [self.name, *self.aliases]

    def match(self, text: str) -> Optional[str]:
        """
        Match ``text`` against this command's names.

        The first name that prefixes ``text`` decides; if it does not end at
        a word boundary the command does not match. Returns the left-trimmed
        remainder on a match.
        """
        for name in self.names:
            if text.startswith(name):
                rest = _split_after(text, name)
                if rest is None:
                    return None
                return rest.lstrip() if rest.strip() else ""
        return None


@dataclass
class Group:
    """
    A named set of commands and subgroups, with an optional default command.

    Built fluently::

        Group("admin")
            .command(lambda: Command.new("kick", kick))
            .subgroup(lambda g: g.with_name("roles").default_command(lambda: Command.new("list", roles)))
    """
    name: str = ""
    subgroups: List['Group'] = field(default_factory=list)
    commands: List[Command] = field(default_factory=list)
    default_invoke: Optional[Command] = None

    def with_name(self, name: str) -> 'Group':
        self.name = name
        return self

    def subgroup(self, f: Callable[['Group'], 'Group']) -> 'Group':
        group = f(Group())
        assert group.name != "", 'Name of group is ""; did you forget to set name of group?'
        self.subgroups.append(group)
        return self

    def command(self, f: Callable[[], Command]) -> 'Group':
        self.commands.append(f())
        return self

    def default_command(self, f: Callable[[], Command]) -> 'Group':
        self.default_invoke = f()
        return self

    def find_command(self, text: str) -> Optional[Tuple[Command, str]]:
        """
        Resolve ``text`` (the invocation without prefix) inside this group.

        Returns:
            The matched command and its argument text, or None
        """
        for group in self.subgroups:
            rest = _split_after(text, group.name)
            if rest is None:
                continue

            if rest.strip() == "":
                if group.default_invoke is not None:
                    return group.default_invoke, ""
                continue

            found = group.find_command(rest.lstrip())
            if found is not None:
                return found

        for command in self.commands:
            rest = command.match(text)
            if rest is not None:
                return command, rest

        if self.default_invoke is not None:
            return self.default_invoke, text.lstrip()

        return None

    def walk(self):
        """Yield ``(path, command)`` for every command below this group."""
        for command in self.commands:
            yield (self.name,), command
        if self.default_invoke is not None:
            yield (self.name,), self.default_invoke
        for group in self.subgroups:
            for path, command in group.walk():
                yield (self.name, *path), command


@dataclass
class RootGroup:
    """
    Top of the registry. Holds only groups; their names are labels and are
    not part of the invocation text.
    """
    subgroups: List[Group] = field(default_factory=list)

    def add(self, group: Group) -> None:
        assert group.name != "", 'Name of group is ""; did you forget to set name of group?'
        self.subgroups.append(group)
        logger.debug("Registered command group: %s", group.name)

    def find_command(self, text: str) -> Optional[Tuple[Command, str]]:
        for group in self.subgroups:
            found = group.find_command(text)
            if found is not None:
                return found
        return None


__all__ = ['CommandCode', 'Command', 'Group', 'RootGroup']
