"""
Exception classes for the command framework.

Every failure a command can produce, from argument extraction or from the
command body, reaches the ``after`` hook as a :class:`CommandError`.
"""

from typing import Optional


class CommandError(Exception):
    """Base exception for all command failures."""

    def __init__(self, message: str, command: Optional[str] = None):
        """
        Args:
            message: Error message
            command: Name of the command that failed, when known
        """
        self.command = command
        super().__init__(message)

    def __str__(self) -> str:
        if self.command:
            return f"[{self.command}] {super().__str__()}"
        return super().__str__()


class NeedArgValueError(CommandError):
    """Raised when the arguments run out before every parameter has a value."""

    def __init__(self, message: str = "need arg value error", command: Optional[str] = None):
        super().__init__(message, command)


class ParseUserIdError(CommandError):
    """Base for failures parsing a user id or ``<@id>`` mention."""
    pass


class UserIdDoesNotEnd(ParseUserIdError):
    def __init__(self):
        super().__init__("the user id mention starts with `<@` but never ends with `>`")


class InvalidUserId(ParseUserIdError):
    def __init__(self, inner: Exception):
        self.inner = inner
        super().__init__(f"parsing inner id: {inner}")


class ParseChannelIdError(CommandError):
    """Base for failures parsing a channel id or ``<#id>`` mention."""
    pass


class ChannelIdDoesNotEnd(ParseChannelIdError):
    def __init__(self):
        super().__init__("the channel id mention starts with `<#` but never ends with `>`")


class InvalidChannelId(ParseChannelIdError):
    def __init__(self, inner: Exception):
        self.inner = inner
        super().__init__(f"parsing inner id: {inner}")


class FetchError(CommandError):
    """Raised when an entity could be neither found in the cache nor fetched."""

    def __init__(self, original: Exception):
        self.original = original
        super().__init__(f"other: {original}")


class NotInServer(CommandError):
    """Raised when a server-only extractor runs on a message outside a server."""

    def __init__(self):
        super().__init__("not in server")


class CommandInvokeError(CommandError):
    """Wraps an exception raised by a command body."""

    def __init__(self, original: Exception, command: Optional[str] = None):
        self.original = original
        super().__init__(f"{type(original).__name__}: {original}", command)


__all__ = [
    'CommandError',
    'NeedArgValueError',
    'ParseUserIdError',
    'UserIdDoesNotEnd',
    'InvalidUserId',
    'ParseChannelIdError',
    'ChannelIdDoesNotEnd',
    'InvalidChannelId',
    'FetchError',
    'NotInServer',
    'CommandInvokeError',
]
