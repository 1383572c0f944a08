"""litval Language Server: pygls-based LSP for .lv files.

Provides diagnostics, hover and document symbols via stdio transport.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from lsprotocol import types as lsp
from pygls.lsp.server import LanguageServer
from pygls.uris import to_fs_path

from litval import __version__
from litval.ast_nodes import ArrayLit, Expressions, HashLit, Node, StringLit
from litval.config import load_nearest
from litval.dump import iter_nodes, node_kind
from litval.errors import CompileError, Diagnostic, Severity
from litval.lexer import Lexer
from litval.parser import Parser, ParserOptions
from litval.source import Span

# ── Conversion helpers ────────────────────────────────────────────

_SEVERITY_MAP = {
    Severity.ERROR: lsp.DiagnosticSeverity.Error,
    Severity.WARNING: lsp.DiagnosticSeverity.Warning,
    Severity.NOTE: lsp.DiagnosticSeverity.Information,
}

_SYMBOL_KIND_MAP = {
    "integer": lsp.SymbolKind.Number,
    "float": lsp.SymbolKind.Number,
    "string": lsp.SymbolKind.String,
    "array": lsp.SymbolKind.Array,
    "hash": lsp.SymbolKind.Object,
}


def span_to_range(span: Span) -> lsp.Range:
    """Convert a 1-indexed litval Span to a 0-indexed LSP Range."""
    return lsp.Range(
        start=lsp.Position(line=span.start_line - 1, character=span.start_col - 1),
        end=lsp.Position(line=span.end_line - 1, character=span.end_col),
    )


def _compile_diag(d: Diagnostic) -> lsp.Diagnostic:
    """Convert a litval Diagnostic to an LSP Diagnostic."""
    span_range = lsp.Range(start=lsp.Position(0, 0), end=lsp.Position(0, 0))
    if d.labels:
        span_range = span_to_range(d.labels[0].span)
    message = f"[{d.code}] {d.message}"
    if d.notes:
        message += "\n" + "\n".join(f"note: {n}" for n in d.notes)
    return lsp.Diagnostic(
        range=span_range,
        severity=_SEVERITY_MAP.get(d.severity, lsp.DiagnosticSeverity.Error),
        source="litval",
        code=d.code,
        message=message,
    )


def _describe(node: Node) -> str:
    kind = node_kind(node)
    match node:
        case ArrayLit(values=values):
            return f"**array** ({len(values)} element(s))"
        case HashLit(pairs=pairs):
            return f"**hash** ({len(pairs)} pair(s))"
    return f"**{kind}** `{node.value!r}`"


# ── Per-document state ────────────────────────────────────────────


@dataclass
class DocumentState:
    """Cached analysis results for a single open document."""

    source: str = ""
    document: Expressions | None = None
    diagnostics: list[lsp.Diagnostic] = field(default_factory=list)


# ── Server ────────────────────────────────────────────────────────

server = LanguageServer(
    "litval-lsp", __version__,
    text_document_sync_kind=lsp.TextDocumentSyncKind.Full,
)
_state: dict[str, DocumentState] = {}


def _options_for(uri: str) -> ParserOptions:
    """Parser options from the litval.toml nearest to the document."""
    path = to_fs_path(uri)
    if path is None:
        return ParserOptions()
    return load_nearest(Path(path).parent).parser_options()


def _analyze(uri: str, source: str, options: ParserOptions | None = None) -> DocumentState:
    """Lex and parse the document, cache results, return state."""
    ds = DocumentState(source=source)
    _state[uri] = ds

    try:
        ds.document = Parser(Lexer(source, uri), uri, options).parse()
    except CompileError as e:
        ds.diagnostics = [_compile_diag(d) for d in e.diagnostics]

    return ds


def _refresh(uri: str, source: str) -> None:
    """Re-analyze a document and publish its diagnostics."""
    try:
        options = _options_for(uri)
    except CompileError as e:
        # A broken litval.toml is reported on the document itself
        ds = DocumentState(source=source, diagnostics=[_compile_diag(d) for d in e.diagnostics])
        _state[uri] = ds
    else:
        ds = _analyze(uri, source, options)
    server.text_document_publish_diagnostics(lsp.PublishDiagnosticsParams(
        uri=uri,
        diagnostics=ds.diagnostics,
    ))


def _node_at(document: Expressions, line: int, character: int) -> Node | None:
    """Find the innermost node whose token covers a 0-indexed position."""
    found: Node | None = None
    for node in iter_nodes(document):
        if node is document:
            continue
        if node.span.contains(line + 1, character + 1):
            found = node
    return found


def _node_to_symbol(node: Node, name: str) -> lsp.DocumentSymbol:
    """Convert a node to an LSP DocumentSymbol, nesting compound children."""
    kind = node_kind(node)
    children: list[lsp.DocumentSymbol] = []
    match node:
        case ArrayLit(values=values):
            children = [_node_to_symbol(v, f"[{i}]") for i, v in enumerate(values)]
        case HashLit(pairs=pairs):
            for key, value in pairs:
                label = key.value if isinstance(key, StringLit) else node_kind(key)
                children.append(_node_to_symbol(value, label or '""'))
    detail = kind if children or kind in ("array", "hash") else repr(node.value)
    return lsp.DocumentSymbol(
        name=name,
        kind=_SYMBOL_KIND_MAP[kind],
        range=span_to_range(node.span),
        selection_range=span_to_range(node.span),
        detail=detail,
        children=children if children else None,
    )


# ── LSP Feature Handlers ─────────────────────────────────────────


@server.feature(lsp.TEXT_DOCUMENT_DID_OPEN)
def did_open(params: lsp.DidOpenTextDocumentParams) -> None:
    _refresh(params.text_document.uri, params.text_document.text)


@server.feature(lsp.TEXT_DOCUMENT_DID_CHANGE)
def did_change(params: lsp.DidChangeTextDocumentParams) -> None:
    # Full sync: take last content change
    source = params.content_changes[-1].text if params.content_changes else ""
    _refresh(params.text_document.uri, source)


@server.feature(lsp.TEXT_DOCUMENT_DID_CLOSE)
def did_close(params: lsp.DidCloseTextDocumentParams) -> None:
    _state.pop(params.text_document.uri, None)


@server.feature(lsp.TEXT_DOCUMENT_HOVER)
def hover(params: lsp.HoverParams) -> lsp.Hover | None:
    ds = _state.get(params.text_document.uri)
    if ds is None or ds.document is None:
        return None

    node = _node_at(ds.document, params.position.line, params.position.character)
    if node is None:
        return None
    return lsp.Hover(
        contents=lsp.MarkupContent(kind=lsp.MarkupKind.Markdown, value=_describe(node)),
        range=span_to_range(node.span),
    )


@server.feature(lsp.TEXT_DOCUMENT_DOCUMENT_SYMBOL)
def document_symbol(params: lsp.DocumentSymbolParams) -> list[lsp.DocumentSymbol]:
    ds = _state.get(params.text_document.uri)
    if ds is None or ds.document is None:
        return []
    return [_node_to_symbol(node, f"#{i}") for i, node in enumerate(ds.document.children)]


# ── Entry point ──────────────────────────────────────────────────


def main() -> None:
    """Start the litval language server on stdio."""
    server.start_io()
