"""Diagnostics, Rust-style rendering, and the litval exception hierarchy."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import ClassVar

from litval.source import SourceFile, Span


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"


# ANSI color codes
_COLORS = {
    Severity.ERROR: "\033[1;31m",    # bold red
    Severity.WARNING: "\033[1;33m",  # bold yellow
    Severity.NOTE: "\033[1;36m",     # bold cyan
}
_BOLD = "\033[1m"
_BLUE = "\033[1;34m"
_RESET = "\033[0m"


@dataclass(frozen=True)
class DiagnosticLabel:
    """Points to a specific source location."""

    span: Span
    message: str
    style: str = "primary"  # "primary" or "secondary"


@dataclass(frozen=True)
class Suggestion:
    """A suggested fix."""

    message: str
    replacement: str


@dataclass
class Diagnostic:
    """A single diagnostic message with optional labels and suggestions."""

    severity: Severity
    code: str
    message: str
    labels: list[DiagnosticLabel] = field(default_factory=list)
    suggestions: list[Suggestion] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)


class DiagnosticRenderer:
    """Renders diagnostics in Rust-style format with colors.

    Source lines are read from disk on demand. Text that never touched the
    filesystem (stdin, editor buffers) can be registered with add_source().
    """

    def __init__(self, *, color: bool = True) -> None:
        self.color = color
        self._sources: dict[str, SourceFile | None] = {}

    def _c(self, code: str) -> str:
        return code if self.color else ""

    def add_source(self, name: str, content: str) -> None:
        self._sources[name] = SourceFile(Path(name), content)

    def _get_source_line(self, filename: str, line_num: int) -> str | None:
        """Load and cache source file, return the 1-indexed line."""
        if filename not in self._sources:
            path = Path(filename)
            try:
                self._sources[filename] = SourceFile(path) if path.is_file() else None
            except (OSError, UnicodeDecodeError):
                self._sources[filename] = None
        source = self._sources[filename]
        return None if source is None else source.line_at(line_num)

    def render(self, diag: Diagnostic) -> str:
        lines: list[str] = []
        sev = diag.severity
        color = _COLORS[sev]

        # Header: error[E201]: message
        lines.append(
            f"{self._c(color)}{sev.value}[{diag.code}]{self._c(_RESET)}"
            f"{self._c(_BOLD)}: {diag.message}{self._c(_RESET)}"
        )

        for label in diag.labels:
            span = label.span
            lines.append(f"  {self._c(_BLUE)}-->{self._c(_RESET)} {span}")
            gutter = f"{span.start_line:>4}"
            lines.append(f"  {self._c(_BLUE)}   |{self._c(_RESET)}")

            source_line = self._get_source_line(span.file, span.start_line)
            if source_line is not None:
                lines.append(
                    f"  {self._c(_BLUE)}{gutter} |{self._c(_RESET)} {source_line}"
                )

            if span.start_line == span.end_line:
                caret_len = max(1, span.end_col - span.start_col + 1)
                padding = " " * (span.start_col - 1)
                carets = "^" * caret_len
                lines.append(
                    f"  {self._c(_BLUE)}   |{self._c(_RESET)} "
                    f"{padding}{self._c(color)}{carets}{self._c(_RESET)}"
                )

            if label.message:
                lines.append(
                    f"  {self._c(_BLUE)}   |{self._c(_RESET)}   "
                    f"{self._c(color)}{label.message}{self._c(_RESET)}"
                )

        for note in diag.notes:
            lines.append(f"  {self._c(_BLUE)}={self._c(_RESET)} note: {note}")

        for suggestion in diag.suggestions:
            lines.append(
                f"  {self._c(_BLUE)}try:{self._c(_RESET)} {suggestion.replacement}"
                f" ({suggestion.message})"
            )

        return "\n".join(lines)


class CompileError(Exception):
    """Error carrying one or more diagnostics."""

    def __init__(self, diagnostics: list[Diagnostic]) -> None:
        self.diagnostics = diagnostics
        messages = [d.message for d in diagnostics]
        super().__init__(f"{len(diagnostics)} error(s): {'; '.join(messages)}")


def _error_diagnostic(
    code: str,
    message: str,
    span: Span,
    notes: list[str] | None = None,
    suggestions: list[Suggestion] | None = None,
) -> Diagnostic:
    return Diagnostic(
        severity=Severity.ERROR,
        code=code,
        message=message,
        labels=[DiagnosticLabel(span=span, message="")],
        notes=list(notes or []),
        suggestions=list(suggestions or []),
    )


class LexError(CompileError):
    """Malformed input reported by the lexer."""

    def __init__(self, message: str, span: Span) -> None:
        self.span = span
        super().__init__([_error_diagnostic("E100", message, span)])


class ConfigError(CompileError):
    """A litval.toml value has the wrong type or is out of range."""

    def __init__(self, message: str, path: Path) -> None:
        self.path = path
        super().__init__([_error_diagnostic("E300", message, Span.point(str(path), 1, 1))])


# ── Parser errors ────────────────────────────────────────────────


class ParserErrorKind(Enum):
    END_OF_INPUT = "end-of-input"
    INVALID_TOKEN = "invalid-token"
    INVALID_TOKEN_VALUE = "invalid-token-value"
    NESTING_TOO_DEEP = "nesting-too-deep"


class ParserError(CompileError):
    """Base class for every error the parser raises.

    Subclasses fix the kind and diagnostic code; the span points at the
    offending token, or at the last token consumed when input ran out.
    """

    kind: ClassVar[ParserErrorKind]
    code: ClassVar[str]

    def __init__(
        self,
        message: str,
        span: Span,
        *,
        notes: list[str] | None = None,
        suggestions: list[Suggestion] | None = None,
    ) -> None:
        self.message = message
        self.span = span
        super().__init__([_error_diagnostic(self.code, message, span, notes, suggestions)])

    @property
    def diagnostic(self) -> Diagnostic:
        return self.diagnostics[0]


class EndOfInput(ParserError):
    kind = ParserErrorKind.END_OF_INPUT
    code = "E200"


class InvalidToken(ParserError):
    kind = ParserErrorKind.INVALID_TOKEN
    code = "E201"


class InvalidTokenValue(ParserError):
    kind = ParserErrorKind.INVALID_TOKEN_VALUE
    code = "E202"


class NestingTooDeep(ParserError):
    kind = ParserErrorKind.NESTING_TOO_DEEP
    code = "E203"
