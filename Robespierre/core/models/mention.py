"""Helpers that format user and channel mentions."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Mention:
    """
    A mention that renders as ``<@id>`` for users or ``<#id>`` for channels.

    Example:
        await reply(ctx, message, f"hello {Mention.user(message.author)}")
    """
    sigil: str
    id: str

    @classmethod
    def user(cls, target: Any) -> "Mention":
        return cls("@", getattr(target, "id", target))

    @classmethod
    def channel(cls, target: Any) -> "Mention":
        return cls("#", getattr(target, "id", target))

    def __str__(self) -> str:
        return f"<{self.sigil}{self.id}>"
