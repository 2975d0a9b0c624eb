"""
Command framework: argument lexing, typed extraction, command groups and the
standard prefix-based dispatcher.
"""

from .decorators import command
from .exceptions import (
    ChannelIdDoesNotEnd,
    CommandError,
    CommandInvokeError,
    FetchError,
    InvalidChannelId,
    InvalidUserId,
    NeedArgValueError,
    NotInServer,
    ParseChannelIdError,
    ParseUserIdError,
    UserIdDoesNotEnd,
)
from .extractors import (
    Arg,
    Args,
    Author,
    AuthorMember,
    ChannelArg,
    ChannelIdArg,
    FromMessage,
    Msg,
    Option,
    PushBack,
    OptionalFromMessage,
    QuoteRespectingArgs,
    RawArgs,
    Rest,
    String,
    UnwrapQuote,
    UserArg,
    UserIdArg,
    extract_args,
)
from .groups import Command, Group, RootGroup
from .lexer import ArgsConfig, ArgsLexer, ArgsLexerWrap, Argument
from .standard import StandardFramework, StdFwConfig

__all__ = [
    'command',
    'CommandError',
    'CommandInvokeError',
    'NeedArgValueError',
    'ParseUserIdError',
    'UserIdDoesNotEnd',
    'InvalidUserId',
    'ParseChannelIdError',
    'ChannelIdDoesNotEnd',
    'InvalidChannelId',
    'FetchError',
    'NotInServer',
    'Arg',
    'Args',
    'Author',
    'AuthorMember',
    'ChannelArg',
    'ChannelIdArg',
    'FromMessage',
    'Msg',
    'Option',
    'PushBack',
    'OptionalFromMessage',
    'QuoteRespectingArgs',
    'RawArgs',
    'Rest',
    'String',
    'UnwrapQuote',
    'UserArg',
    'UserIdArg',
    'extract_args',
    'Command',
    'Group',
    'RootGroup',
    'ArgsConfig',
    'ArgsLexer',
    'ArgsLexerWrap',
    'Argument',
    'StandardFramework',
    'StdFwConfig',
]
