"""Pygments lexer for litval documents."""

from pygments.lexer import RegexLexer
from pygments.token import (
    Comment,
    Error,
    Number,
    Punctuation,
    String,
    Text,
)


class LitvalLexer(RegexLexer):
    """Pygments lexer for litval documents."""

    name = "litval"
    aliases = ["litval", "lv"]
    filenames = ["*.lv"]
    mimetypes = ["text/x-litval"]

    tokens = {
        "root": [
            # Whitespace
            (r"\s+", Text),
            # Line comments (# ...)
            (r"#.*$", Comment.Single),
            # Strings with escape support
            (r'"', String.Double, "dstring"),
            (r"'", String.Single, "sstring"),
            # Numbers (floats before integers)
            (r"-?[0-9]+(\.[0-9]+)?[eE][+-]?[0-9]+", Number.Float),
            (r"-?[0-9]+\.[0-9]+", Number.Float),
            (r"-?[0-9]+", Number.Integer),
            # Punctuation
            (r"[\[\]{},:]", Punctuation),
            # Bare words and anything else are not valid litval
            (r"[A-Za-z_][A-Za-z0-9_]*", Error),
            (r".", Error),
        ],
        "dstring": [
            (r'\\[nrt0\\"\']', String.Escape),
            (r'[^"\\]+', String.Double),
            (r'"', String.Double, "#pop"),
        ],
        "sstring": [
            (r'\\[nrt0\\"\']', String.Escape),
            (r"[^'\\]+", String.Single),
            (r"'", String.Single, "#pop"),
        ],
    }
