"""
Entity identifiers.

Every Revolt entity is addressed by a 26 character ULID made of digits and
upper case letters. Ids are plain ``str`` subclasses so they hash, compare
and serialize like the strings the server sends.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, GetCoreSchemaHandler
from pydantic_core import core_schema

ID_LENGTH = 26
_ID_ALPHABET = frozenset("0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ")


class IdError(ValueError):
    """Base exception for malformed ids."""


class IncorrectLength(IdError):
    """Raised when an id does not have exactly 26 characters."""

    def __init__(self, length: int, expected: int = ID_LENGTH):
        self.length = length
        self.expected = expected
        super().__init__(f"incorrect length: is {length}, expected {expected}")


class InvalidCharacter(IdError):
    """Raised on the first character outside ``[0-9A-Z]``."""

    def __init__(self, pos: int, c: str):
        self.pos = pos
        self.c = c
        super().__init__(f"invalid character '{c}' at position {pos}")


class IdString(str):
    """A validated entity id."""

    __slots__ = ()

    @staticmethod
    def check(s: str) -> None:
        """
        Validate ``s`` as an id.

        Raises:
            IncorrectLength: If ``s`` is not 26 characters long
            InvalidCharacter: On the first character that is not a digit
                or an upper case ASCII letter
        """
        if len(s) != ID_LENGTH:
            raise IncorrectLength(len(s))

        for pos, c in enumerate(s):
            if c not in _ID_ALPHABET:
                raise InvalidCharacter(pos, c)

    @classmethod
    def parse(cls, s: str):
        cls.check(s)
        return cls(s)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str.__repr__(self)})"

    @classmethod
    def __get_pydantic_core_schema__(cls, source: Any, handler: GetCoreSchemaHandler):
        # ids coming from the server are trusted as-is
        return core_schema.no_info_after_validator_function(
            cls,
            core_schema.str_schema(),
            serialization=core_schema.plain_serializer_function_ser_schema(str),
        )


class UserId(IdString):
    __slots__ = ()


class ChannelId(IdString):
    __slots__ = ()


class ServerId(IdString):
    __slots__ = ()


class RoleId(IdString):
    __slots__ = ()


class MessageId(IdString):
    __slots__ = ()


class AttachmentId(IdString):
    __slots__ = ()


class MemberId(BaseModel):
    """Composite key of a server member."""

    model_config = ConfigDict(frozen=True)

    server: ServerId
    user: UserId


__all__ = [
    'ID_LENGTH',
    'IdError',
    'IncorrectLength',
    'InvalidCharacter',
    'IdString',
    'UserId',
    'ChannelId',
    'ServerId',
    'RoleId',
    'MessageId',
    'AttachmentId',
    'MemberId',
]
