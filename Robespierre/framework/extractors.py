"""
Typed extraction of command parameters.

Two kinds of extractable types exist:

* :class:`Arg` types consume one token of the argument text (or the whole
  rest of it when ``IS_REST`` is set) and parse it into a value. Several of
  them are extracted together, left to right over one lexer, by
  :func:`extract_args`.
* :class:`FromMessage` types derive a value from the whole invocation: the
  raw argument text, the author, or a tuple of :class:`Arg` values
  (:class:`Args`).

Plain Python types are accepted wherever an :class:`Arg` is expected and are
mapped through :func:`resolve_arg` (``str`` -> :class:`String`, ``User`` ->
:class:`UserArg`, ...). Combinators are written with subscripts:
``Option[User]``, ``Rest[str]``, ``UnwrapQuote[str]``, ``Args[str, int]``.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Any, ClassVar, Dict, Optional, Tuple, Type

from Robespierre.core.context import (
    Context,
    fetch_channel,
    fetch_member,
    fetch_user,
    message_server_id,
)
from Robespierre.core.http import HttpError
from Robespierre.core.models import (
    Channel,
    ChannelId,
    IdError,
    Member,
    MemberId,
    Message,
    User,
    UserId,
)
from Robespierre.framework.exceptions import (
    ChannelIdDoesNotEnd,
    CommandError,
    FetchError,
    InvalidChannelId,
    InvalidUserId,
    NeedArgValueError,
    NotInServer,
    UserIdDoesNotEnd,
)
from Robespierre.framework.lexer import ArgsConfig, ArgsLexer, ArgsLexerWrap

logger = logging.getLogger(__name__)


class PushBack(Enum):
    """Whether the token an :class:`Arg` just parsed should be handed back."""
    NO = 0
    YES = 1


@dataclass(frozen=True)
class Msg:
    """
    One command invocation as seen by extractors.

    Attributes:
        message: The message that invoked the command
        args: Text after the command name
    """
    message: Message
    args: str


class Arg:
    """
    A type parsed from a single argument token.

    Attributes:
        TRIM: Strip whitespace off the token before parsing
        IS_REST: Consume the rest of the text instead of one token
    """

    TRIM: ClassVar[bool] = True
    IS_REST: ClassVar[bool] = False

    @classmethod
    def default_arg_value(cls) -> Any:
        """Value used when no token is left. Fails unless overridden."""
        raise NeedArgValueError()

    @classmethod
    async def parse_arg(cls, ctx: Context, msg: Msg, s: str) -> Tuple[Any, PushBack]:
        raise NotImplementedError


class String(Arg):
    """The token, verbatim."""

    TRIM = False

    @classmethod
    async def parse_arg(cls, ctx, msg, s):
        return s, PushBack.NO


class UserIdArg(Arg):
    """A user id, either raw or as a ``<@id>`` mention."""

    @classmethod
    def parse_id(cls, s: str) -> UserId:
        if s.startswith("<@"):
            if not s.endswith(">"):
                raise UserIdDoesNotEnd()
            s = s[2:-1]
        try:
            return UserId.parse(s)
        except IdError as e:
            raise InvalidUserId(e) from e

    @classmethod
    async def parse_arg(cls, ctx, msg, s):
        return cls.parse_id(s), PushBack.NO


class ChannelIdArg(Arg):
    """A channel id, either raw or as a ``<#id>`` mention."""

    @classmethod
    def parse_id(cls, s: str) -> ChannelId:
        if s.startswith("<#"):
            if not s.endswith(">"):
                raise ChannelIdDoesNotEnd()
            s = s[2:-1]
        try:
            return ChannelId.parse(s)
        except IdError as e:
            raise InvalidChannelId(e) from e

    @classmethod
    async def parse_arg(cls, ctx, msg, s):
        return cls.parse_id(s), PushBack.NO


class UserArg(Arg):
    """A full user, looked up by id or mention through the cache or the API."""

    @classmethod
    async def parse_arg(cls, ctx, msg, s):
        user_id = UserIdArg.parse_id(s)
        try:
            return await fetch_user(ctx, user_id), PushBack.NO
        except HttpError as e:
            raise FetchError(e) from e


class ChannelArg(Arg):
    """A full channel, looked up by id or mention through the cache or the API."""

    @classmethod
    async def parse_arg(cls, ctx, msg, s):
        channel_id = ChannelIdArg.parse_id(s)
        try:
            return await fetch_channel(ctx, channel_id), PushBack.NO
        except HttpError as e:
            raise FetchError(e) from e


ARG_TYPES: Dict[Any, Type[Arg]] = {
    str: String,
    UserId: UserIdArg,
    ChannelId: ChannelIdArg,
    User: UserArg,
    Channel: ChannelArg,
}


def is_arg_type(tp: Any) -> bool:
    return tp in ARG_TYPES or (isinstance(tp, type) and issubclass(tp, Arg))


def resolve_arg(tp: Any) -> Type[Arg]:
    """Map a plain type to its :class:`Arg`; :class:`Arg` subclasses pass through."""
    if isinstance(tp, type) and issubclass(tp, Arg):
        return tp
    try:
        return ARG_TYPES[tp]
    except (KeyError, TypeError):
        raise TypeError(f"{tp!r} cannot be extracted from command arguments") from None


@lru_cache(maxsize=None)
def _specialize(base: type, inner: Type[Arg]) -> type:
    attrs = {"inner": inner, "TRIM": inner.TRIM, "IS_REST": inner.IS_REST}
    attrs.update(base._overrides(inner))
    return type(f"{base.__name__}[{inner.__name__}]", (base,), attrs)


class _Combinator(Arg):
    inner: ClassVar[Optional[Type[Arg]]] = None

    @classmethod
    def _overrides(cls, inner: Type[Arg]) -> Dict[str, Any]:
        return {}

    def __class_getitem__(cls, item):
        return _specialize(cls, resolve_arg(item))

    @classmethod
    def _inner(cls) -> Type[Arg]:
        if cls.inner is None:
            raise TypeError(f"{cls.__name__} must be parameterized, e.g. {cls.__name__}[str]")
        return cls.inner


class Option(_Combinator):
    """
    ``T`` if the token parses as one, else ``None``.

    A token that fails to parse is pushed back for the next parameter, and
    running out of tokens yields ``None`` instead of an error.

    Over a :class:`FromMessage` type it yields ``None`` when deriving the
    value fails, e.g. ``Option[AuthorMember]`` in a DM.
    """

    def __class_getitem__(cls, item):
        if is_from_message_type(item):
            return _optional_from_message(item)
        return super().__class_getitem__(item)

    @classmethod
    def default_arg_value(cls):
        return None

    @classmethod
    async def parse_arg(cls, ctx, msg, s):
        inner = cls._inner()
        try:
            value, _ = await inner.parse_arg(ctx, msg, s)
        except CommandError as e:
            logger.debug("Optional %s did not match %r: %s", inner.__name__, s, e)
            return None, PushBack.YES
        return value, PushBack.NO


@dataclass(frozen=True)
class Rest(_Combinator):
    """``T`` parsed from all remaining text instead of one token."""

    value: Any = None

    @classmethod
    def _overrides(cls, inner):
        return {"IS_REST": True}

    @classmethod
    def default_arg_value(cls):
        return cls(cls._inner().default_arg_value())

    @classmethod
    async def parse_arg(cls, ctx, msg, s):
        value, push_back = await cls._inner().parse_arg(ctx, msg, s)
        return cls(value), push_back


@dataclass(frozen=True)
class UnwrapQuote(_Combinator):
    """``T`` parsed from the token with one pair of surrounding quotes removed."""

    value: Any = None

    @classmethod
    def _overrides(cls, inner):
        # the token is trimmed before the quotes are looked at
        return {"TRIM": True, "IS_REST": False}

    @classmethod
    async def parse_arg(cls, ctx, msg, s):
        if len(s) >= 2 and s.startswith('"') and s.endswith('"'):
            s = s[1:-1]
        value, push_back = await cls._inner().parse_arg(ctx, msg, s)
        return cls(value), push_back


async def extract_args(ctx: Context, msg: Msg, arg_types, config: Optional[ArgsConfig] = None) -> tuple:
    """
    Extract one value per entry of ``arg_types`` from ``msg.args``.

    Tokens are consumed left to right from a single lexer. A parameter that
    asks for push-back leaves its token for the next one; a parameter with no
    token left gets its ``default_arg_value``.

    Raises:
        CommandError: The first extraction failure
    """
    config = (config or ArgsConfig()).or_default_delimiters()
    lexer = ArgsLexerWrap(ArgsLexer(msg.args, config))

    values = []
    for arg_type in arg_types:
        arg_type = resolve_arg(arg_type)

        if arg_type.IS_REST:
            token = lexer.rest().to_opt_str()
        else:
            token = lexer.next()

        if token is None:
            values.append(arg_type.default_arg_value())
            continue

        if arg_type.TRIM:
            token = token.strip()
        value, push_back = await arg_type.parse_arg(ctx, msg, token)
        if push_back is PushBack.YES:
            lexer.push_back()
        values.append(value)

    return tuple(values)


class FromMessage:
    """A type derived from a whole command invocation."""

    @classmethod
    def default_config(cls) -> Any:
        return None

    @classmethod
    async def from_message(cls, ctx: Context, msg: Msg, config: Any = None):
        raise NotImplementedError


@dataclass(frozen=True)
class RawArgs(FromMessage):
    """The unparsed argument text."""

    value: str

    @classmethod
    async def from_message(cls, ctx, msg, config=None):
        return cls(msg.args)


@dataclass(frozen=True)
class Author(FromMessage):
    """The invoking user."""

    value: User

    @classmethod
    async def from_message(cls, ctx, msg, config=None):
        try:
            return cls(await fetch_user(ctx, msg.message.author))
        except HttpError as e:
            raise FetchError(e) from e


@dataclass(frozen=True)
class AuthorMember(FromMessage):
    """The invoking user's membership in the server the command was sent in."""

    value: Member

    @classmethod
    async def from_message(cls, ctx, msg, config=None):
        try:
            server_id = await message_server_id(ctx, msg.message)
            if server_id is None:
                raise NotInServer()
            member_id = MemberId(server=server_id, user=msg.message.author)
            return cls(await fetch_member(ctx, member_id))
        except HttpError as e:
            raise FetchError(e) from e


@lru_cache(maxsize=None)
def _specialize_tuple(base: type, arg_types: Tuple[Type[Arg], ...]) -> type:
    name = ", ".join(t.__name__ for t in arg_types)
    return type(f"{base.__name__}[{name}]", (base,), {"arg_types": arg_types})


@dataclass(frozen=True)
class Args(FromMessage):
    """
    A tuple of :class:`Arg` values extracted together.

    Unpacks like the tuple it holds::

        async def add(ctx, message, args: Args[str, str]):
            a, b = args
    """

    values: tuple

    arg_types: ClassVar[Tuple[Type[Arg], ...]] = ()

    def __class_getitem__(cls, items):
        if not isinstance(items, tuple):
            items = (items,)
        return _specialize_tuple(cls, tuple(resolve_arg(item) for item in items))

    def __iter__(self):
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)

    def __getitem__(self, index):
        return self.values[index]

    @classmethod
    def default_config(cls) -> ArgsConfig:
        return ArgsConfig()

    @classmethod
    def _prepare_config(cls, config: Optional[ArgsConfig]) -> ArgsConfig:
        return config or ArgsConfig()

    @classmethod
    async def from_message(cls, ctx, msg, config=None):
        config = cls._prepare_config(config)
        return cls(await extract_args(ctx, msg, cls.arg_types, config))


class QuoteRespectingArgs(Args):
    """:class:`Args` with the quote-aware lexer forced on."""

    @classmethod
    def _prepare_config(cls, config):
        return (config or ArgsConfig()).with_quote_parser(True)


class OptionalFromMessage(FromMessage):
    """Result of ``Option[T]`` for a :class:`FromMessage` type ``T``."""

    inner: ClassVar[Optional[Type[FromMessage]]] = None

    @classmethod
    def default_config(cls):
        return cls.inner.default_config()

    @classmethod
    async def from_message(cls, ctx, msg, config=None):
        try:
            return await cls.inner.from_message(ctx, msg, config)
        except CommandError as e:
            logger.debug("Optional %s could not be derived: %s", cls.inner.__name__, e)
            return None


@lru_cache(maxsize=None)
def _optional_from_message(inner: Type[FromMessage]) -> type:
    return type(f"Option[{inner.__name__}]", (OptionalFromMessage,), {"inner": inner})


def is_from_message_type(tp: Any) -> bool:
    return isinstance(tp, type) and issubclass(tp, FromMessage)


__all__ = [
    'PushBack',
    'Msg',
    'Arg',
    'String',
    'UserIdArg',
    'ChannelIdArg',
    'UserArg',
    'ChannelArg',
    'ARG_TYPES',
    'is_arg_type',
    'resolve_arg',
    'Option',
    'Rest',
    'UnwrapQuote',
    'extract_args',
    'FromMessage',
    'RawArgs',
    'Author',
    'AuthorMember',
    'Args',
    'QuoteRespectingArgs',
    'OptionalFromMessage',
    'is_from_message_type',
]
