"""
Tokenizer for command arguments.

:class:`ArgsLexer` walks the argument text left to right and yields one
token per step. Adjacent delimiters produce explicit empty tokens so that
``"a  b"`` (two spaces) can be told apart from ``"a b"``. With the quote
parser enabled, delimiters inside ``"..."`` do not split; the quotes are
kept in the token and stripped later by ``UnwrapQuote`` if wanted.

The lexer can re-present the last token once (:meth:`ArgsLexer.push_back`),
which is how optional parameters hand back a token they could not parse.
"""

from dataclasses import dataclass, replace
from typing import Iterable, Iterator, Optional, Tuple


@dataclass(frozen=True)
class ArgsConfig:
    """
    How argument text is split. The builders return new configs.

    Attributes:
        delimiters: Token separators, tried in order; a single space when empty
        quote_parser: Whether ``"..."`` protects delimiters
    """
    delimiters: Tuple[str, ...] = ()
    quote_parser: bool = False

    def delimiter(self, delimiter: str) -> 'ArgsConfig':
        return replace(self, delimiters=self.delimiters + (delimiter,))

    def with_delimiters(self, delimiters: Iterable[str]) -> 'ArgsConfig':
        return replace(self, delimiters=self.delimiters + tuple(delimiters))

    def with_quote_parser(self, quote_parser: bool = True) -> 'ArgsConfig':
        return replace(self, quote_parser=quote_parser)

    def or_default_delimiters(self) -> 'ArgsConfig':
        if self.delimiters:
            return self
        return replace(self, delimiters=(" ",))


@dataclass(frozen=True)
class Argument:
    """One lexer step: a token (``text``) or an empty token (``text is None``)."""
    text: Optional[str] = None

    @classmethod
    def simple(cls, text: str) -> 'Argument':
        return cls(text)

    @property
    def is_empty(self) -> bool:
        return self.text is None

    def to_opt_str(self) -> Optional[str]:
        return self.text


EMPTY = Argument()


class ArgsLexer:
    """Yields :class:`Argument` values until the input is exhausted."""

    def __init__(self, args: str, config: ArgsConfig):
        self.args = args.strip()
        self.config = config
        self.current_pos = 0
        self.pushed_back: Optional[Tuple[int, int]] = None
        self.last_arg_indices: Optional[Tuple[int, int]] = None

    def push_back(self) -> None:
        """Re-present the most recently returned token on the next call."""
        self.pushed_back = self.last_arg_indices

    def rest(self) -> Argument:
        """
        Consume everything left (starting at a pushed-back token if there
        is one) as a single token.
        """
        if self.pushed_back is None:
            if self.current_pos == len(self.args):
                return EMPTY
            start = self.current_pos
        else:
            start = self.pushed_back[0]
            self.pushed_back = None

        self.current_pos = len(self.args)
        return Argument.simple(self.args[start:])

    def _emit(self, start: int, end: int, advance_to: int) -> Argument:
        self.last_arg_indices = (start, end)
        self.current_pos = advance_to
        return Argument.simple(self.args[start:end])

    def _find_delimiter(self, s: str) -> Optional[Tuple[int, str]]:
        best = None
        for delim in self.config.delimiters:
            pos = s.find(delim)
            if pos != -1 and (best is None or pos < best[0]):
                best = (pos, delim)
        return best

    def _find_unquoted_delimiter(self, s: str) -> Optional[Tuple[int, str]]:
        in_quote = False
        escaped = False
        for pos, chr_ in enumerate(s):
            if chr_ == '"':
                if not in_quote:
                    in_quote = True
                elif not escaped:
                    in_quote = False
                escaped = False
            elif chr_ == '\\':
                escaped = not escaped
            else:
                escaped = False

            if not in_quote:
                for delim in self.config.delimiters:
                    if s.startswith(delim, pos):
                        return pos, delim
        return None

    def next(self) -> Optional[Argument]:
        if self.pushed_back is not None:
            start, end = self.pushed_back
            self.pushed_back = None
            if start == end:
                return EMPTY
            return Argument.simple(self.args[start:end])

        s = self.args[self.current_pos:]
        if not s:
            return None

        for delim in self.config.delimiters:
            if s.startswith(delim):
                self.last_arg_indices = (self.current_pos, self.current_pos)
                self.current_pos += len(delim)
                return EMPTY

        if self.config.quote_parser:
            found = self._find_unquoted_delimiter(s)
        else:
            found = self._find_delimiter(s)

        start = self.current_pos
        if found is not None:
            pos, delim = found
            return self._emit(start, start + pos, start + pos + len(delim))

        return self._emit(start, len(self.args), len(self.args))

    def __iter__(self) -> Iterator[Argument]:
        return self

    def __next__(self) -> Argument:
        arg = self.next()
        if arg is None:
            raise StopIteration
        return arg


class ArgsLexerWrap:
    """View over :class:`ArgsLexer` that skips empty tokens and yields strings."""

    def __init__(self, inner: ArgsLexer):
        self.inner = inner

    def push_back(self) -> None:
        self.inner.push_back()

    def rest(self) -> Argument:
        return self.inner.rest()

    def next(self) -> Optional[str]:
        for arg in self.inner:
            if not arg.is_empty:
                return arg.text
        return None


__all__ = ['ArgsConfig', 'Argument', 'EMPTY', 'ArgsLexer', 'ArgsLexerWrap']
