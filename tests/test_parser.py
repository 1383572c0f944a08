"""Tests for the litval parser."""

from __future__ import annotations

import math

import pytest

from litval.ast_nodes import (
    ArrayLit,
    Expressions,
    FloatLit,
    HashLit,
    IntegerLit,
    StringLit,
)
from litval.errors import (
    CompileError,
    EndOfInput,
    InvalidToken,
    InvalidTokenValue,
    LexError,
    NestingTooDeep,
    ParserError,
    ParserErrorKind,
)
from litval.lexer import Lexer
from litval.parser import Parser, ParserOptions, parse
from litval.tokens import TokenKind
from tests.helpers import ListTokenSource, parse_one, token


class TestParserScalars:
    def test_empty_document(self):
        doc = parse("")
        assert isinstance(doc, Expressions)
        assert doc.children == ()

    def test_whitespace_and_comments_only(self):
        assert parse("  # nothing here\n\n").children == ()

    def test_integer(self):
        node = parse_one("42")
        assert isinstance(node, IntegerLit)
        assert node.value == 42

    def test_negative_integer(self):
        node = parse_one("-17")
        assert isinstance(node, IntegerLit)
        assert node.value == -17

    def test_float(self):
        node = parse_one("2.5")
        assert isinstance(node, FloatLit)
        assert node.value == 2.5

    def test_float_exponent(self):
        node = parse_one("1.5e3")
        assert isinstance(node, FloatLit)
        assert node.value == 1500.0

    def test_string(self):
        node = parse_one('"hello world"')
        assert isinstance(node, StringLit)
        assert node.value == "hello world"

    def test_string_text_passed_through(self):
        node = parse_one(r'"tab\there"')
        assert node.value == "tab\there"

    def test_multiple_top_level_expressions(self):
        doc = parse('1 2.0 "three"')
        assert [type(c) for c in doc.children] == [IntegerLit, FloatLit, StringLit]
        assert [c.value for c in doc.children] == [1, 2.0, "three"]

    def test_integer_bounds(self):
        assert parse_one("9223372036854775807").value == 2**63 - 1
        assert parse_one("-9223372036854775808").value == -(2**63)


class TestParserCompounds:
    def test_array(self):
        node = parse_one("[1,2,3]")
        assert isinstance(node, ArrayLit)
        assert [v.value for v in node.values] == [1, 2, 3]
        assert all(isinstance(v, IntegerLit) for v in node.values)

    def test_single_element_array(self):
        node = parse_one("[ 'x' ]")
        assert isinstance(node, ArrayLit)
        assert len(node.values) == 1

    def test_mixed_array(self):
        node = parse_one('[1, 2.5, "s", [3], {"k": 4}]')
        assert [type(v) for v in node.values] == [
            IntegerLit, FloatLit, StringLit, ArrayLit, HashLit,
        ]

    def test_hash(self):
        node = parse_one('{"a":1}')
        assert isinstance(node, HashLit)
        assert len(node.pairs) == 1
        key, value = node.pairs[0]
        assert isinstance(key, StringLit) and key.value == "a"
        assert isinstance(value, IntegerLit) and value.value == 1

    def test_hash_keeps_source_order(self):
        node = parse_one('{"b": 1, "a": 2, "c": 3}')
        assert [k.value for k, _ in node.pairs] == ["b", "a", "c"]

    def test_hash_keeps_duplicate_keys(self):
        node = parse_one('{"a": 1, "a": 2}')
        assert [(k.value, v.value) for k, v in node.pairs] == [("a", 1), ("a", 2)]

    def test_hash_non_string_keys(self):
        node = parse_one('{1: "one", [2]: "two", {3: 4}: "five"}')
        keys = [k for k, _ in node.pairs]
        assert [type(k) for k in keys] == [IntegerLit, ArrayLit, HashLit]

    def test_nested(self):
        node = parse_one('[{"list": [1, [2, [3]]]}]')
        inner = node.values[0].pairs[0][1]
        assert isinstance(inner, ArrayLit)
        assert inner.values[1].values[1].values[0].value == 3

    def test_multiline_document(self):
        doc = parse('{\n  "name": "litval",\n  "tags": ["a", "b"]\n}')
        (node,) = doc.children
        assert [k.value for k, _ in node.pairs] == ["name", "tags"]


class TestParserEmptyCompounds:
    def test_empty_array_rejected(self):
        with pytest.raises(InvalidToken, match=r"empty array"):
            parse("[]")

    def test_empty_hash_rejected(self):
        with pytest.raises(InvalidToken, match=r"empty hash"):
            parse("{}")

    def test_empty_rejection_has_note(self):
        with pytest.raises(InvalidToken) as exc:
            parse("[]")
        assert any("allow_empty_compounds" in n for n in exc.value.diagnostic.notes)

    def test_empty_allowed_by_option(self):
        opts = ParserOptions(allow_empty_compounds=True)
        array = parse_one("[]", opts)
        hash_ = parse_one("{}", opts)
        assert isinstance(array, ArrayLit) and array.values == ()
        assert isinstance(hash_, HashLit) and hash_.pairs == ()

    def test_option_does_not_allow_trailing_comma(self):
        opts = ParserOptions(allow_empty_compounds=True)
        with pytest.raises(InvalidToken):
            parse("[1,]", options=opts)


class TestParserErrors:
    def test_unterminated_array(self):
        with pytest.raises(EndOfInput):
            parse("[1,2")

    def test_unterminated_array_after_comma(self):
        with pytest.raises(EndOfInput):
            parse("[1,")

    def test_unterminated_array_after_open(self):
        with pytest.raises(EndOfInput):
            parse("[")

    def test_unterminated_hash(self):
        with pytest.raises(EndOfInput):
            parse('{"a": 1')

    def test_hash_missing_value(self):
        with pytest.raises(EndOfInput):
            parse('{"a":')

    def test_missing_comma(self):
        with pytest.raises(InvalidToken):
            parse("[1 2]")

    def test_missing_colon(self):
        with pytest.raises(InvalidToken, match="expected `:`"):
            parse('{"a" 1}')

    def test_hash_separator(self):
        with pytest.raises(InvalidToken, match="expected `,` or `}`"):
            parse('{"a": 1 "b": 2}')

    def test_trailing_comma(self):
        with pytest.raises(InvalidToken):
            parse("[1,]")

    def test_mismatched_close(self):
        with pytest.raises(InvalidToken):
            parse("[1}")

    def test_stray_close_at_top_level(self):
        with pytest.raises(InvalidToken):
            parse("1 ]")

    def test_stray_separator_at_top_level(self):
        with pytest.raises(InvalidToken):
            parse(", 1")

    def test_bare_word(self):
        with pytest.raises(InvalidToken, match="identifier `true`"):
            parse("[true]")

    def test_parenthesis(self):
        with pytest.raises(InvalidToken):
            parse("(1)")

    def test_integer_overflow(self):
        with pytest.raises(InvalidTokenValue):
            parse("99999999999999999999")

    def test_integer_underflow(self):
        with pytest.raises(InvalidTokenValue):
            parse("-9223372036854775809")

    def test_overflow_inside_array(self):
        with pytest.raises(InvalidTokenValue):
            parse("[1, 99999999999999999999]")

    def test_lex_errors_propagate(self):
        with pytest.raises(LexError):
            parse("[1, @]")

    def test_error_hierarchy(self):
        for cls in (EndOfInput, InvalidToken, InvalidTokenValue, NestingTooDeep):
            assert issubclass(cls, ParserError)
            assert issubclass(cls, CompileError)

    def test_error_kinds_and_codes(self):
        cases = [
            ("[1", ParserErrorKind.END_OF_INPUT, "E200"),
            ("[1 2]", ParserErrorKind.INVALID_TOKEN, "E201"),
            ("99999999999999999999", ParserErrorKind.INVALID_TOKEN_VALUE, "E202"),
        ]
        for source, kind, code in cases:
            with pytest.raises(ParserError) as exc:
                parse(source)
            assert exc.value.kind == kind
            assert exc.value.diagnostic.code == code


class TestParserErrorPositions:
    def test_invalid_token_points_at_token(self):
        with pytest.raises(InvalidToken) as exc:
            parse("[1,\n  2 3]", "doc.lv")
        span = exc.value.span
        assert (span.file, span.start_line, span.start_col) == ("doc.lv", 2, 5)

    def test_end_of_input_points_after_last_token(self):
        with pytest.raises(EndOfInput) as exc:
            parse("[10,\n 20")
        span = exc.value.span
        assert (span.start_line, span.start_col) == (2, 3)

    def test_overflow_points_at_literal(self):
        with pytest.raises(InvalidTokenValue) as exc:
            parse("  99999999999999999999")
        assert exc.value.span.start_col == 3


class TestParserPositions:
    def test_array_position_is_open_bracket(self):
        node = parse_one("  [1]")
        assert (node.span.start_line, node.span.start_col) == (1, 3)
        assert node.values[0].span.start_col == 4

    def test_hash_position_is_open_brace(self):
        node = parse_one('\n\n   {"k": 1}')
        assert (node.span.start_line, node.span.start_col) == (3, 4)

    def test_scalar_positions(self):
        doc = parse('1\n  2.5\n    "s"', "pos.lv")
        assert [(c.span.start_line, c.span.start_col) for c in doc.children] == [
            (1, 1), (2, 3), (3, 5),
        ]
        assert all(c.span.file == "pos.lv" for c in doc.children)

    def test_document_span(self):
        doc = parse("[1]\n[2, 3]")
        assert (doc.span.start_line, doc.span.start_col) == (1, 1)
        assert (doc.span.end_line, doc.span.end_col) == (2, 6)


class TestParserNesting:
    def test_depth_limit(self):
        opts = ParserOptions(max_depth=3)
        assert isinstance(parse_one("[[[1]]]", opts), ArrayLit)
        with pytest.raises(NestingTooDeep) as exc:
            parse("[[[[1]]]]", options=opts)
        assert exc.value.span.start_col == 4
        assert exc.value.kind == ParserErrorKind.NESTING_TOO_DEEP

    def test_depth_counts_hashes(self):
        opts = ParserOptions(max_depth=2)
        with pytest.raises(NestingTooDeep):
            parse('{"a": [{"b": 1}]}', options=opts)

    def test_depth_resets_between_siblings(self):
        opts = ParserOptions(max_depth=2)
        doc = parse("[[1]] [[2]] [[3], [4]]", options=opts)
        assert len(doc.children) == 3

    def test_default_limit_stops_runaway_input(self):
        with pytest.raises(NestingTooDeep):
            parse("[" * 10_000)

    def test_limit_disabled(self):
        source = "[" * 100 + "1" + "]" * 100
        node = parse_one(source, ParserOptions(max_depth=0))
        assert isinstance(node, ArrayLit)

    def test_disabled_limit_still_stops_at_recursion_limit(self):
        source = "[" * 3000 + "1" + "]" * 3000
        with pytest.raises(NestingTooDeep, match="recursion limit"):
            parse(source, options=ParserOptions(max_depth=0))

    def test_limit_above_recursion_limit(self):
        with pytest.raises(NestingTooDeep):
            parse("[" * 5000, options=ParserOptions(max_depth=10_000))

    def test_depth_restored_after_error(self):
        parser = Parser(Lexer("[[[1]]] [1]"), options=ParserOptions(max_depth=2))
        with pytest.raises(NestingTooDeep):
            parser.parse()
        assert parser.depth == 0


class TestParserIntegerBits:
    def test_narrow_integers(self):
        opts = ParserOptions(integer_bits=8)
        assert parse_one("127", opts).value == 127
        assert parse_one("-128", opts).value == -128
        with pytest.raises(InvalidTokenValue, match="8-bit"):
            parse("128", options=opts)

    @pytest.mark.parametrize("bits", [-1, 0, 1])
    def test_too_few_bits_rejected(self, bits):
        with pytest.raises(ValueError, match="integer_bits"):
            ParserOptions(integer_bits=bits)

    def test_negative_depth_rejected(self):
        with pytest.raises(ValueError, match="max_depth"):
            ParserOptions(max_depth=-1)


class TestParserTokenSource:
    def test_custom_token_source(self):
        source = ListTokenSource([
            token(TokenKind.BRACK_OPEN, "["),
            token(TokenKind.INTEGER, "5", col=2),
            token(TokenKind.BRACK_CLOSE, "]", col=3),
        ])
        doc = Parser(source, "<tokens>").parse()
        (node,) = doc.children
        assert isinstance(node, ArrayLit)
        assert node.values[0].value == 5

    def test_invalid_integer_text(self):
        source = ListTokenSource([token(TokenKind.INTEGER, "12abc")])
        with pytest.raises(InvalidTokenValue, match="invalid integer literal"):
            Parser(source).parse()

    def test_integer_text_with_underscores_rejected(self):
        source = ListTokenSource([token(TokenKind.INTEGER, "1_000")])
        with pytest.raises(InvalidTokenValue):
            Parser(source).parse()

    def test_invalid_float_text(self):
        source = ListTokenSource([token(TokenKind.FLOAT, "1.2.3")])
        with pytest.raises(InvalidTokenValue, match="invalid float literal"):
            Parser(source).parse()

    def test_float_infinity_text(self):
        source = ListTokenSource([token(TokenKind.FLOAT, "inf")])
        (node,) = Parser(source).parse().children
        assert math.isinf(node.value)

    def test_string_value_verbatim(self):
        source = ListTokenSource([token(TokenKind.STRING, r"a\nb")])
        (node,) = Parser(source).parse().children
        assert node.value == r"a\nb"

    def test_stops_pulling_after_error(self):
        source = ListTokenSource([
            token(TokenKind.COLON, ":"),
            token(TokenKind.INTEGER, "1"),
        ])
        with pytest.raises(InvalidToken):
            Parser(source).parse()
        assert source.pulled == 1

    def test_end_of_input_points_at_last_token(self):
        source = ListTokenSource([token(TokenKind.CURLY_OPEN, "{", 4, 2)])
        with pytest.raises(EndOfInput) as exc:
            Parser(source, "<tokens>").parse()
        assert (exc.value.span.start_line, exc.value.span.start_col) == (4, 2)


class TestParserDeterminism:
    def test_same_input_same_tree(self):
        source = '[1, 2.5, "x", {"k": [3]}]'
        assert parse(source) == parse(source)

    def test_tree_is_immutable(self):
        node = parse_one("[1]")
        with pytest.raises(AttributeError):
            node.values = ()  # type: ignore[misc]
        assert isinstance(node.values, tuple)
