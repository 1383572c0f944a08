"""litval: parser for literal-value documents."""

from litval.parser import Parser, ParserOptions, parse

__version__ = "0.1.0"

__all__ = ["Parser", "ParserOptions", "parse", "__version__"]
