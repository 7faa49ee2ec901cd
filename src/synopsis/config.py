"""TOML config loading for synopsis.toml."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, TypeVar

CONFIG_NAME = "synopsis.toml"

_Table = TypeVar("_Table")


@dataclass
class IndexerConfig:
    command: str = "sourcekitten"
    executable: str = "sourcekitten"
    timeout: int = 60


@dataclass
class ParserConfig:
    skip_marker: str = "synopsis:disable"
    max_depth: int = 64
    workers: int = 1


@dataclass
class OutputConfig:
    color: bool = True


@dataclass
class SynopsisConfig:
    indexer: IndexerConfig = field(default_factory=IndexerConfig)
    parser: ParserConfig = field(default_factory=ParserConfig)
    output: OutputConfig = field(default_factory=OutputConfig)


def find_config(start_path: Path | None = None) -> Path:
    """Walk up directories to find synopsis.toml. Raises FileNotFoundError."""
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


def _table(cls: type[_Table], data: dict[str, Any], name: str) -> _Table:
    """One TOML table as *cls*; absent keys keep the dataclass defaults."""
    known = {f.name for f in fields(cls)}  # type: ignore[arg-type]
    return cls(**{key: value for key, value in data.get(name, {}).items() if key in known})


def load_config(path: Path) -> SynopsisConfig:
    """Parse a synopsis.toml file into a SynopsisConfig."""
    with open(path, "rb") as f:
        data = tomllib.load(f)

    return SynopsisConfig(
        indexer=_table(IndexerConfig, data, "indexer"),
        parser=_table(ParserConfig, data, "parser"),
        output=_table(OutputConfig, data, "output"),
    )


def discover_config(start_path: Path | None = None) -> SynopsisConfig:
    """Load the nearest synopsis.toml, or defaults when there is none."""
    try:
        return load_config(find_config(start_path))
    except FileNotFoundError:
        return SynopsisConfig()
