"""
Unit tests for the argument lexer.
"""

from dataclasses import FrozenInstanceError

import pytest

from Robespierre.framework.lexer import EMPTY, ArgsConfig, ArgsLexer, ArgsLexerWrap, Argument


def tokens(args: str, config: ArgsConfig = None):
    lexer = ArgsLexer(args, (config or ArgsConfig()).or_default_delimiters())
    return [arg.to_opt_str() for arg in lexer]


class TestArgsConfig:
    """Tests for ArgsConfig builders."""

    def test_default_delimiters(self):
        config = ArgsConfig().or_default_delimiters()
        assert config.delimiters == (" ",)
        assert config.quote_parser is False

    def test_explicit_delimiters_kept(self):
        config = ArgsConfig().delimiter(",").or_default_delimiters()
        assert config.delimiters == (",",)

    def test_with_delimiters(self):
        config = ArgsConfig().with_delimiters([",", ";"])
        assert config.delimiters == (",", ";")

    def test_with_quote_parser_keeps_delimiters(self):
        config = ArgsConfig().delimiter(",").with_quote_parser(True)
        assert config.quote_parser is True
        assert config.delimiters == (",",)

    def test_builders_leave_original_untouched(self):
        base = ArgsConfig().delimiter(",")
        base.delimiter(";")
        base.with_delimiters([":"])
        base.with_quote_parser(True)
        assert base == ArgsConfig((",",), False)

    def test_frozen(self):
        with pytest.raises(FrozenInstanceError):
            ArgsConfig().quote_parser = True


class TestSimpleMode:
    """Tests for splitting without the quote parser."""

    def test_split_on_space(self):
        assert tokens("a b c") == ["a", "b", "c"]

    def test_adjacent_delimiters_yield_empty(self):
        assert tokens("a  b") == ["a", None, "b"]

    def test_input_is_trimmed(self):
        assert tokens("   a   ") == ["a"]

    def test_empty_input(self):
        assert tokens("") == []
        assert tokens("    ") == []

    def test_quotes_do_not_protect(self):
        assert tokens('"a b" c') == ['"a', 'b"', "c"]

    def test_leftmost_delimiter_wins(self):
        config = ArgsConfig().with_delimiters([" ", ","])
        assert tokens("a,b c", config) == ["a", "b", "c"]

    def test_delimiter_prefix_of_rest(self):
        config = ArgsConfig().with_delimiters([",", " "])
        assert tokens("a, b", config) == ["a", None, "b"]


class TestQuoteMode:
    """Tests for the quote-aware lexer."""

    def setup_method(self):
        self.config = ArgsConfig().with_quote_parser(True)

    def test_quoted_token_kept_whole(self):
        assert tokens('"a b" c', self.config) == ['"a b"', "c"]

    def test_escaped_quote_inside_quotes(self):
        assert tokens(r'"a \" b" c', self.config) == [r'"a \" b"', "c"]

    def test_double_backslash_closes_quote(self):
        assert tokens(r'"a \\" b', self.config) == [r'"a \\"', "b"]

    def test_unterminated_quote_takes_rest(self):
        assert tokens('x "a b', self.config) == ["x", '"a b']

    def test_quote_in_middle_of_token(self):
        assert tokens('key="a b" next', self.config) == ['key="a b"', "next"]


class TestPushBackAndRest:
    """Tests for push_back() and rest()."""

    def setup_method(self):
        self.lexer = ArgsLexer("a b c", ArgsConfig().or_default_delimiters())

    def test_push_back_repeats_last_token(self):
        assert self.lexer.next() == Argument.simple("a")
        self.lexer.push_back()
        assert self.lexer.next() == Argument.simple("a")
        assert self.lexer.next() == Argument.simple("b")

    def test_push_back_is_one_level(self):
        self.lexer.next()
        self.lexer.push_back()
        self.lexer.push_back()
        assert self.lexer.next() == Argument.simple("a")
        assert self.lexer.next() == Argument.simple("b")

    def test_rest_after_token(self):
        self.lexer.next()
        assert self.lexer.rest() == Argument.simple("b c")
        assert self.lexer.next() is None

    def test_rest_after_push_back(self):
        self.lexer.next()
        self.lexer.push_back()
        assert self.lexer.rest() == Argument.simple("a b c")

    def test_rest_when_exhausted(self):
        self.lexer.rest()
        assert self.lexer.rest() is EMPTY

    def test_push_back_of_empty_token(self):
        lexer = ArgsLexer("a  b", ArgsConfig().or_default_delimiters())
        lexer.next()
        assert lexer.next() is EMPTY
        lexer.push_back()
        assert lexer.next() is EMPTY
        assert lexer.next() == Argument.simple("b")


class TestArgsLexerWrap:
    """Tests for the empty-skipping wrapper."""

    def test_skips_empty_tokens(self):
        wrap = ArgsLexerWrap(ArgsLexer("a   b", ArgsConfig().or_default_delimiters()))
        assert wrap.next() == "a"
        assert wrap.next() == "b"
        assert wrap.next() is None

    def test_push_back_through_wrap(self):
        wrap = ArgsLexerWrap(ArgsLexer("a b", ArgsConfig().or_default_delimiters()))
        assert wrap.next() == "a"
        wrap.push_back()
        assert wrap.next() == "a"
