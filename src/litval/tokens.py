"""Token kinds and token representation for the litval lexer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Protocol

from litval.source import Span


class TokenKind(Enum):
    # Literals
    INTEGER = auto()
    FLOAT = auto()
    STRING = auto()

    # Punctuation
    BRACK_OPEN = auto()
    BRACK_CLOSE = auto()
    CURLY_OPEN = auto()
    CURLY_CLOSE = auto()
    PAREN_OPEN = auto()
    PAREN_CLOSE = auto()
    COMMA = auto()
    COLON = auto()

    # Bare words
    IDENTIFIER = auto()


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: str
    span: Span

    @property
    def line(self) -> int:
        return self.span.start_line

    @property
    def column(self) -> int:
        return self.span.start_col

    def describe(self) -> str:
        """Human-readable description for diagnostics."""
        if self.kind in _LITERAL_NAMES:
            return f"{_LITERAL_NAMES[self.kind]} {self.value!r}"
        if self.kind == TokenKind.IDENTIFIER:
            return f"identifier `{self.value}`"
        return f"`{self.value}`"


class TokenSource(Protocol):
    """Anything that hands out tokens one at a time.

    next_token() returns None once input is exhausted; it must never raise
    for ordinary end of input.
    """

    def next_token(self) -> Token | None: ...


PUNCTUATION: dict[str, TokenKind] = {
    "[": TokenKind.BRACK_OPEN,
    "]": TokenKind.BRACK_CLOSE,
    "{": TokenKind.CURLY_OPEN,
    "}": TokenKind.CURLY_CLOSE,
    "(": TokenKind.PAREN_OPEN,
    ")": TokenKind.PAREN_CLOSE,
    ",": TokenKind.COMMA,
    ":": TokenKind.COLON,
}

_LITERAL_NAMES: dict[TokenKind, str] = {
    TokenKind.INTEGER: "integer",
    TokenKind.FLOAT: "float",
    TokenKind.STRING: "string",
}
