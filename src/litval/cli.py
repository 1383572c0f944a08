"""litval command line interface."""

from __future__ import annotations

import json
from pathlib import Path

import click

from litval import __version__
from litval.ast_nodes import ArrayLit, Expressions, HashLit, Node
from litval.config import LitvalConfig, load_nearest
from litval.dump import node_kind, to_data, to_value
from litval.errors import CompileError, DiagnosticRenderer, LexError
from litval.lexer import Lexer
from litval.parser import ParserOptions, parse
from litval.source import Span


def _parser_flags(func):
    func = click.option(
        "--max-depth", type=click.IntRange(min=0), default=None,
        help="Override the maximum nesting depth (0 disables the limit).",
    )(func)
    func = click.option(
        "--allow-empty/--no-allow-empty", default=None,
        help="Accept empty arrays and hashes.",
    )(func)
    return func


def _color_flag(func):
    return click.option("--no-color", is_flag=True, help="Disable colored diagnostics.")(func)


def _load(path: Path) -> LitvalConfig:
    try:
        return load_nearest(path)
    except CompileError as e:
        _report(e, DiagnosticRenderer(color=False))
        raise SystemExit(1)


def _options(config: LitvalConfig, allow_empty: bool | None, max_depth: int | None) -> ParserOptions:
    if allow_empty is not None:
        config.parser.allow_empty_compounds = allow_empty
    if max_depth is not None:
        config.parser.max_depth = max_depth
    return config.parser_options()


def _report(error: CompileError, renderer: DiagnosticRenderer) -> None:
    for diag in error.diagnostics:
        click.echo(renderer.render(diag), err=True)


def _read(file: Path) -> str:
    try:
        return file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise LexError(f"cannot read source file: {e}", Span.point(str(file), 1, 1)) from e


def _parse_file(file: Path, options: ParserOptions, renderer: DiagnosticRenderer) -> Expressions:
    """Parse one file, or render its diagnostics and exit with status 1."""
    try:
        return parse(_read(file), str(file), options)
    except CompileError as e:
        _report(e, renderer)
        raise SystemExit(1)


def _collect(target: Path, extensions: list[str]) -> list[Path]:
    if target.is_file():
        return [target]
    return sorted(p for p in target.rglob("*") if p.is_file() and p.suffix in extensions)


@click.group()
@click.version_option(__version__, prog_name="litval")
def main() -> None:
    """litval: a parser for literal-value documents."""


@main.command()
@click.argument("path", default=".", type=click.Path(exists=True))
@_parser_flags
@_color_flag
def check(path: str, allow_empty: bool | None, max_depth: int | None, no_color: bool) -> None:
    """Parse every source file under PATH and report errors."""
    target = Path(path)
    config = _load(target)
    options = _options(config, allow_empty, max_depth)
    files = _collect(target, config.check.extensions)
    if not files:
        click.echo("warning: no source files found", err=True)
        return

    renderer = DiagnosticRenderer(color=config.check.color and not no_color)
    had_errors = False
    for file in files:
        try:
            parse(_read(file), str(file), options)
        except CompileError as e:
            had_errors = True
            _report(e, renderer)

    if had_errors:
        raise SystemExit(1)
    click.echo(f"checked {len(files)} file(s), no errors")


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@_parser_flags
@_color_flag
def view(file: str, allow_empty: bool | None, max_depth: int | None, no_color: bool) -> None:
    """View the AST of a source file."""
    path = Path(file)
    config = _load(path)
    renderer = DiagnosticRenderer(color=config.check.color and not no_color)
    document = _parse_file(path, _options(config, allow_empty, max_depth), renderer)
    _dump_ast(document, 0)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--values", is_flag=True, help="Emit plain values without kinds or positions.")
@click.option("--indent", type=int, default=2, show_default=True, help="JSON indentation.")
@_parser_flags
@_color_flag
def dump(
    file: str,
    values: bool,
    indent: int,
    allow_empty: bool | None,
    max_depth: int | None,
    no_color: bool,
) -> None:
    """Print the AST of a source file as JSON."""
    path = Path(file)
    config = _load(path)
    renderer = DiagnosticRenderer(color=config.check.color and not no_color)
    document = _parse_file(path, _options(config, allow_empty, max_depth), renderer)
    data = to_value(document) if values else to_data(document)
    click.echo(json.dumps(data, indent=indent or None, ensure_ascii=False))


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@_color_flag
def tokens(file: str, no_color: bool) -> None:
    """Print the token stream of a source file."""
    path = Path(file)
    try:
        toks = Lexer(_read(path), str(path)).lex()
    except CompileError as e:
        _report(e, DiagnosticRenderer(color=not no_color))
        raise SystemExit(1)
    for tok in toks:
        click.echo(f"{tok.line}:{tok.column} {tok.kind.name} {tok.value!r}")


@main.command()
def lsp() -> None:
    """Start the litval language server."""
    from litval.lsp import main as lsp_main

    lsp_main()


def _dump_ast(node: Node, depth: int, label: str = "") -> None:
    """Print a readable AST dump."""
    indent = "  " * depth
    kind = node_kind(node)

    if isinstance(node, Expressions):
        click.echo(f"{indent}{label}{kind} ({len(node.children)})")
        for child in node.children:
            _dump_ast(child, depth + 1)
        return

    pos = f"@{node.span.start_line}:{node.span.start_col}"
    if isinstance(node, ArrayLit):
        click.echo(f"{indent}{label}{kind} {pos}")
        for value in node.values:
            _dump_ast(value, depth + 1)
    elif isinstance(node, HashLit):
        click.echo(f"{indent}{label}{kind} {pos}")
        for key, value in node.pairs:
            _dump_ast(key, depth + 1, "key: ")
            _dump_ast(value, depth + 2, "value: ")
    else:
        click.echo(f"{indent}{label}{kind} {node.value!r} {pos}")
