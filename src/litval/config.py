"""TOML config loading for litval.toml."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from litval.errors import ConfigError
from litval.parser import ParserOptions

CONFIG_NAME = "litval.toml"


@dataclass
class ParserConfig:
    allow_empty_compounds: bool = False
    max_depth: int = 256
    integer_bits: int = 64


@dataclass
class CheckConfig:
    extensions: list[str] = field(default_factory=lambda: [".lv"])
    color: bool = True


@dataclass
class LitvalConfig:
    parser: ParserConfig = field(default_factory=ParserConfig)
    check: CheckConfig = field(default_factory=CheckConfig)

    def parser_options(self) -> ParserOptions:
        return ParserOptions(
            allow_empty_compounds=self.parser.allow_empty_compounds,
            max_depth=self.parser.max_depth,
            integer_bits=self.parser.integer_bits,
        )


def find_config(start_path: Path | None = None) -> Path:
    """Walk up directories to find litval.toml. Raises FileNotFoundError."""
    path = (start_path or Path.cwd()).resolve()
    if path.is_file():
        path = path.parent
    while True:
        candidate = path / CONFIG_NAME
        if candidate.exists():
            return candidate
        parent = path.parent
        if parent == path:
            raise FileNotFoundError(f"No {CONFIG_NAME} found in any parent directory")
        path = parent


def _get(table: dict[str, Any], key: str, default: Any, kind: type, path: Path) -> Any:
    value = table.get(key, default)
    # bool is an int subclass; reject it where a number is expected
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise ConfigError(f"`{key}` must be of type {kind.__name__}", path)
    return value


def load_config(path: Path) -> LitvalConfig:
    """Parse a litval.toml file into a LitvalConfig."""
    with open(path, "rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"invalid TOML: {e}", path) from e

    config = LitvalConfig()

    if "parser" in data:
        psr = data["parser"]
        config.parser = ParserConfig(
            allow_empty_compounds=_get(psr, "allow_empty_compounds", False, bool, path),
            max_depth=_get(psr, "max_depth", 256, int, path),
            integer_bits=_get(psr, "integer_bits", 64, int, path),
        )
        if config.parser.max_depth < 0:
            raise ConfigError("`max_depth` must not be negative", path)
        if config.parser.integer_bits < 2:
            raise ConfigError("`integer_bits` must be at least 2", path)

    if "check" in data:
        chk = data["check"]
        extensions = _get(chk, "extensions", [".lv"], list, path)
        if not all(isinstance(ext, str) for ext in extensions):
            raise ConfigError("`extensions` must be a list of strings", path)
        config.check = CheckConfig(
            extensions=extensions,
            color=_get(chk, "color", True, bool, path),
        )

    return config


def load_nearest(start_path: Path | None = None) -> LitvalConfig:
    """Load the closest litval.toml, or defaults if there is none."""
    try:
        return load_config(find_config(start_path))
    except FileNotFoundError:
        return LitvalConfig()
