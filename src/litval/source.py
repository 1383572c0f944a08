"""Source file representation and span tracking for diagnostics."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Span:
    """A range within a source file. Lines and columns are 1-based."""

    file: str
    start_line: int
    start_col: int
    end_line: int
    end_col: int

    def __str__(self) -> str:
        return f"{self.file}:{self.start_line}:{self.start_col}"

    @classmethod
    def point(cls, file: str, line: int, col: int) -> Span:
        return cls(file, line, col, line, col)

    def contains(self, line: int, col: int) -> bool:
        """True if the 1-based position falls inside this span (inclusive)."""
        if line < self.start_line or line > self.end_line:
            return False
        if line == self.start_line and col < self.start_col:
            return False
        if line == self.end_line and col > self.end_col:
            return False
        return True


class SourceFile:
    """Text of a litval document, split into lines for diagnostics."""

    def __init__(self, path: Path, content: str | None = None) -> None:
        self.path = path
        self.content = path.read_text(encoding="utf-8") if content is None else content
        self.lines = self.content.splitlines()

    def line_at(self, n: int) -> str | None:
        """Return the 1-indexed line, or None past either end."""
        return self.lines[n - 1] if 0 < n <= len(self.lines) else None
