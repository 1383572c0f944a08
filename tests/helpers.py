"""Shared test helpers for the litval test suite."""

from __future__ import annotations

from litval.ast_nodes import Node
from litval.parser import ParserOptions, parse
from litval.source import Span
from litval.tokens import Token, TokenKind


def parse_one(source: str, options: ParserOptions | None = None) -> Node:
    """Parse source, assert it holds exactly one expression, return it."""
    doc = parse(source, "test.lv", options)
    assert len(doc.children) == 1, doc.children
    return doc.children[0]


def token(kind: TokenKind, value: str, line: int = 1, col: int = 1) -> Token:
    return Token(kind, value, Span("<tokens>", line, col, line, col + max(len(value), 1) - 1))


class ListTokenSource:
    """Token source over a prepared list; returns None once drained."""

    def __init__(self, tokens: list[Token]) -> None:
        self.tokens = list(tokens)
        self.pulled = 0

    def next_token(self) -> Token | None:
        if self.pulled >= len(self.tokens):
            return None
        tok = self.tokens[self.pulled]
        self.pulled += 1
        return tok
