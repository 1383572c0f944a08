"""AST node definitions for litval documents."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from litval.source import Span

# ── Scalars ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class IntegerLit:
    value: int
    span: Span


@dataclass(frozen=True)
class FloatLit:
    value: float
    span: Span


@dataclass(frozen=True)
class StringLit:
    value: str
    span: Span


# ── Compounds ────────────────────────────────────────────────────


@dataclass(frozen=True)
class ArrayLit:
    """An ordered sequence; the span is the opening `[`."""

    values: tuple[Node, ...]
    span: Span


@dataclass(frozen=True)
class HashLit:
    """Key/value pairs in source order; the span is the opening `{`.

    Keys may be any node and duplicates are kept as written.
    """

    pairs: tuple[tuple[Node, Node], ...]
    span: Span


@dataclass(frozen=True)
class Expressions:
    """The top-level document: every expression found before end of input."""

    children: tuple[Node, ...]
    span: Span


Node = Union[IntegerLit, FloatLit, StringLit, ArrayLit, HashLit, Expressions]
