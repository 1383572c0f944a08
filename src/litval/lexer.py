"""Lexer for litval source text.

Hands out tokens lazily, one per next_token() call, so the parser can pull
exactly as much input as it needs. End of input is signalled by returning
None; malformed input raises LexError at the offending character.
"""

from __future__ import annotations

from litval.errors import LexError
from litval.source import Span
from litval.tokens import PUNCTUATION, Token, TokenKind

_DIGITS = "0123456789"
_WHITESPACE = " \t\r\n"

_ESCAPES = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "0": "\0",
    "\\": "\\",
    '"': '"',
    "'": "'",
}


class Lexer:
    """Tokenizes litval source code on demand."""

    def __init__(self, source: str, filename: str = "<stdin>") -> None:
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.col = 1

    def next_token(self) -> Token | None:
        """Lex and return the next token, or None at end of input."""
        self._skip_trivia()
        if self.pos >= len(self.source):
            return None
        ch = self.source[self.pos]
        if ch == '"' or ch == "'":
            return self._lex_string(ch)
        if ch in _DIGITS or ch == "-":
            return self._lex_number()
        if ch.isalpha() or ch == "_":
            return self._lex_identifier()
        if ch in PUNCTUATION:
            start_line = self.line
            start_col = self.col
            self._advance()
            return self._token(PUNCTUATION[ch], ch, start_line, start_col)
        raise self._error(f"unexpected character: {ch!r}", self.line, self.col)

    def lex(self) -> list[Token]:
        """Tokenize the rest of the source and return the token list."""
        tokens: list[Token] = []
        while True:
            tok = self.next_token()
            if tok is None:
                return tokens
            tokens.append(tok)

    # ── Helpers ───────────────────────────────────────────────────

    def _peek(self, offset: int = 0) -> str:
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return "\0"

    def _advance(self) -> str:
        ch = self.source[self.pos]
        self.pos += 1
        if ch == "\n":
            self.line += 1
            self.col = 1
        else:
            self.col += 1
        return ch

    def _token(self, kind: TokenKind, value: str, start_line: int, start_col: int) -> Token:
        end_col = self.col - 1 if self.col > 1 else 1
        span = Span(self.filename, start_line, start_col, self.line, end_col)
        return Token(kind, value, span)

    def _error(self, message: str, line: int, col: int) -> LexError:
        return LexError(message, Span.point(self.filename, line, col))

    def _skip_trivia(self) -> None:
        """Skip whitespace and `#` comments."""
        while self.pos < len(self.source):
            ch = self.source[self.pos]
            if ch in _WHITESPACE:
                self._advance()
            elif ch == "#":
                while self.pos < len(self.source) and self.source[self.pos] != "\n":
                    self._advance()
            else:
                return

    # ── Strings ──────────────────────────────────────────────────

    def _lex_string(self, quote: str) -> Token:
        start_line = self.line
        start_col = self.col
        self._advance()  # opening quote
        text = []
        while self.pos < len(self.source) and self.source[self.pos] != quote:
            if self.source[self.pos] == "\\":
                text.append(self._lex_escape_sequence())
            else:
                text.append(self._advance())

        if self.pos >= len(self.source):
            raise self._error("unterminated string literal", start_line, start_col)

        self._advance()  # closing quote
        return self._token(TokenKind.STRING, "".join(text), start_line, start_col)

    def _lex_escape_sequence(self) -> str:
        line = self.line
        col = self.col
        self._advance()  # backslash
        if self.pos >= len(self.source):
            raise self._error("unexpected end of escape sequence", line, col)
        ch = self._advance()
        if ch in _ESCAPES:
            return _ESCAPES[ch]
        raise self._error(f"unknown escape sequence: \\{ch}", line, col)

    # ── Numbers ──────────────────────────────────────────────────

    def _lex_number(self) -> Token:
        start_line = self.line
        start_col = self.col
        text = []
        kind = TokenKind.INTEGER

        if self._peek() == "-":
            text.append(self._advance())
            if self._peek() not in _DIGITS:
                raise self._error("expected a digit after '-'", start_line, start_col)

        self._lex_digits(text)

        # Fraction needs a digit on both sides of the dot
        if self._peek() == "." and self._peek(1) in _DIGITS:
            text.append(self._advance())
            self._lex_digits(text)
            kind = TokenKind.FLOAT

        if self._peek() in ("e", "E"):
            sign = 1 if self._peek(1) in ("+", "-") else 0
            if self._peek(1 + sign) in _DIGITS:
                for _ in range(1 + sign):
                    text.append(self._advance())
                self._lex_digits(text)
                kind = TokenKind.FLOAT

        return self._token(kind, "".join(text), start_line, start_col)

    def _lex_digits(self, text: list[str]) -> None:
        while self.pos < len(self.source) and self.source[self.pos] in _DIGITS:
            text.append(self._advance())

    # ── Identifiers ──────────────────────────────────────────────

    def _lex_identifier(self) -> Token:
        start_line = self.line
        start_col = self.col
        text = []
        while self.pos < len(self.source) and (
            self.source[self.pos].isalnum() or self.source[self.pos] == "_"
        ):
            text.append(self._advance())
        return self._token(TokenKind.IDENTIFIER, "".join(text), start_line, start_col)
