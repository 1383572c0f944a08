"""Parser for litval documents.

Recursive descent over a pull-based token source: every rule takes exactly
the tokens it needs, there is no lookahead buffer and no backtracking. The
first error aborts the whole parse.
"""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass
from typing import NoReturn

from litval.ast_nodes import (
    ArrayLit,
    Expressions,
    FloatLit,
    HashLit,
    IntegerLit,
    Node,
    StringLit,
)
from litval.errors import (
    EndOfInput,
    InvalidToken,
    InvalidTokenValue,
    NestingTooDeep,
    Suggestion,
)
from litval.lexer import Lexer
from litval.source import Span
from litval.tokens import Token, TokenKind, TokenSource

_INTEGER_RE = re.compile(r"[+-]?[0-9]+\Z")
_FLOAT_RE = re.compile(
    r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?\Z"
    r"|[+-]?(?:inf|infinity|nan)\Z",
    re.IGNORECASE,
)

_EMPTY_COMPOUND_NOTE = (
    "arrays and hashes need at least one element; "
    "set `allow_empty_compounds = true` under [parser] in litval.toml to accept them"
)


@dataclass(frozen=True)
class ParserOptions:
    allow_empty_compounds: bool = False
    max_depth: int = 256  # 0 disables the limit
    integer_bits: int = 64

    def __post_init__(self) -> None:
        if self.max_depth < 0:
            raise ValueError(f"max_depth must not be negative, got {self.max_depth}")
        if self.integer_bits < 2:
            raise ValueError(f"integer_bits must be at least 2, got {self.integer_bits}")


class Parser:
    """Parses tokens pulled from a token source into a litval AST."""

    def __init__(
        self,
        tokens: TokenSource,
        filename: str = "<stdin>",
        options: ParserOptions | None = None,
    ) -> None:
        self.tokens = tokens
        self.filename = filename
        self.options = options or ParserOptions()
        self.depth = 0
        self.last: Token | None = None
        bound = 1 << (self.options.integer_bits - 1)
        self._int_min = -bound
        self._int_max = bound - 1

    # ── Token access ─────────────────────────────────────────────

    def _next(self) -> Token | None:
        token = self.tokens.next_token()
        if token is not None:
            self.last = token
        return token

    def _require(self, context: str) -> Token:
        token = self._next()
        if token is None:
            raise EndOfInput(f"unexpected end of input {context}", self._end_span())
        return token

    def _expect(self, kind: TokenKind, what: str, context: str) -> Token:
        token = self._require(context)
        if token.kind != kind:
            raise InvalidToken(f"expected {what} {context}, found {token.describe()}", token.span)
        return token

    def _end_span(self) -> Span:
        if self.last is None:
            return Span.point(self.filename, 1, 1)
        end = self.last.span
        return Span.point(self.filename, end.end_line, end.end_col)

    # ── Top level ────────────────────────────────────────────────

    def parse(self) -> Expressions:
        """Parse every expression until the token source runs dry."""
        children: list[Node] = []
        while True:
            # Running out here, between expressions, is the normal way to stop.
            token = self._next()
            if token is None:
                break
            try:
                children.append(self._parse_token(token))
            except RecursionError:
                self.depth = 0
                raise NestingTooDeep(
                    f"nesting exceeds the interpreter recursion limit of {sys.getrecursionlimit()}",
                    self.last.span,
                    notes=["lower `max_depth` under [parser] in litval.toml to stop earlier"],
                ) from None

        end = self._end_span()
        span = Span(self.filename, 1, 1, end.end_line, end.end_col)
        return Expressions(children=tuple(children), span=span)

    # ── Expressions ──────────────────────────────────────────────

    def _parse_expression(self, context: str) -> Node:
        return self._parse_token(self._require(context))

    def _parse_token(self, token: Token) -> Node:
        match token.kind:
            case TokenKind.INTEGER:
                return self._parse_integer(token)
            case TokenKind.FLOAT:
                return self._parse_float(token)
            case TokenKind.STRING:
                return StringLit(value=token.value, span=token.span)
            case TokenKind.BRACK_OPEN | TokenKind.CURLY_OPEN:
                try:
                    self._enter(token)
                    if token.kind == TokenKind.BRACK_OPEN:
                        return self._parse_array(token)
                    return self._parse_hash(token)
                finally:
                    self.depth -= 1
            case _:
                raise InvalidToken(f"expected an expression, found {token.describe()}", token.span)

    def _enter(self, token: Token) -> None:
        self.depth += 1
        limit = self.options.max_depth
        if limit and self.depth > limit:
            raise NestingTooDeep(
                f"nesting exceeds the maximum depth of {limit}",
                token.span,
                notes=["raise `max_depth` under [parser] in litval.toml if this is intended"],
            )

    def _parse_integer(self, token: Token) -> IntegerLit:
        if not _INTEGER_RE.match(token.value):
            raise InvalidTokenValue(f"invalid integer literal {token.value!r}", token.span)
        value = int(token.value)
        if not self._int_min <= value <= self._int_max:
            raise InvalidTokenValue(
                f"integer literal {token.value} does not fit in a "
                f"{self.options.integer_bits}-bit signed integer",
                token.span,
                notes=[f"the accepted range is {self._int_min} to {self._int_max}"],
            )
        return IntegerLit(value=value, span=token.span)

    def _parse_float(self, token: Token) -> FloatLit:
        if not _FLOAT_RE.match(token.value):
            raise InvalidTokenValue(f"invalid float literal {token.value!r}", token.span)
        return FloatLit(value=float(token.value), span=token.span)

    # ── Compounds ────────────────────────────────────────────────

    def _reject_empty(self, close: Token, kind: str, literal: str) -> NoReturn:
        raise InvalidToken(
            f"empty {kind} `{literal}` is not allowed",
            close.span,
            notes=[_EMPTY_COMPOUND_NOTE],
            suggestions=[Suggestion(
                message="enable empty arrays and hashes",
                replacement="allow_empty_compounds = true",
            )],
        )

    def _parse_array(self, open_token: Token) -> ArrayLit:
        values: list[Node] = []
        token = self._require("in array")
        if token.kind == TokenKind.BRACK_CLOSE:
            if not self.options.allow_empty_compounds:
                self._reject_empty(token, "array", "[]")
            return ArrayLit(values=(), span=open_token.span)

        values.append(self._parse_token(token))
        while True:
            token = self._require("in array, expected `,` or `]`")
            match token.kind:
                case TokenKind.COMMA:
                    values.append(self._parse_expression("in array"))
                case TokenKind.BRACK_CLOSE:
                    break
                case _:
                    raise InvalidToken(
                        f"expected `,` or `]` in array, found {token.describe()}",
                        token.span,
                    )

        return ArrayLit(values=tuple(values), span=open_token.span)

    def _parse_hash(self, open_token: Token) -> HashLit:
        pairs: list[tuple[Node, Node]] = []
        token = self._require("in hash")
        if token.kind == TokenKind.CURLY_CLOSE:
            if not self.options.allow_empty_compounds:
                self._reject_empty(token, "hash", "{}")
            return HashLit(pairs=(), span=open_token.span)

        while True:
            key = self._parse_token(token)
            self._expect(TokenKind.COLON, "`:`", "after hash key")
            value = self._parse_expression("in hash, expected a value")
            pairs.append((key, value))

            token = self._require("in hash, expected `,` or `}`")
            match token.kind:
                case TokenKind.COMMA:
                    token = self._require("in hash, expected a key")
                case TokenKind.CURLY_CLOSE:
                    break
                case _:
                    raise InvalidToken(
                        f"expected `,` or `}}` in hash, found {token.describe()}",
                        token.span,
                    )

        return HashLit(pairs=tuple(pairs), span=open_token.span)


def parse(
    source: str,
    filename: str = "<stdin>",
    options: ParserOptions | None = None,
) -> Expressions:
    """Parse litval source text into an Expressions node.

    Raises a ParserError subclass on the first syntax error, or LexError if
    the text cannot be tokenized.
    """
    return Parser(Lexer(source, filename), filename, options).parse()
