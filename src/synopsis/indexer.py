"""Adapters that obtain a file's element tree from a structural indexer."""

from __future__ import annotations

import json
import shutil
import subprocess
from pathlib import Path
from typing import Any, Protocol

from synopsis.errors import IndexerError
from synopsis.log import get_logger

logger = get_logger(__name__)


class Indexer(Protocol):
    def structure(self, path: Path) -> dict[str, Any]:
        """Return the ``structure`` dictionary for the Swift file at *path*."""
        ...


def _decode(text: str, origin: str) -> dict[str, Any]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise IndexerError(f"{origin} produced invalid JSON: {exc}")
    if not isinstance(data, dict):
        raise IndexerError(f"{origin} produced {type(data).__name__}, expected an object")
    return data


class SourceKittenIndexer:
    """Runs ``sourcekitten structure --file PATH`` for every file."""

    def __init__(self, executable: str = "sourcekitten", *, timeout: int = 60) -> None:
        self.executable = executable
        self.timeout = timeout

    def available(self) -> bool:
        return shutil.which(self.executable) is not None

    def structure(self, path: Path) -> dict[str, Any]:
        if not self.available():
            raise IndexerError(
                f"'{self.executable}' not found (install SourceKitten or use the sidecar indexer)"
            )

        # SourceKit cannot resolve relative paths or `..` segments
        cmd = [self.executable, "structure", "--file", str(path.resolve())]
        logger.debug("indexer_invoked", file=str(path), command=cmd[0])
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError:
            raise IndexerError(f"indexer '{self.executable}' not found")
        except subprocess.TimeoutExpired:
            raise IndexerError(f"indexer timed out after {self.timeout}s")

        if result.returncode != 0:
            raise IndexerError(
                f"indexer failed (exit {result.returncode})",
                stderr=result.stderr,
            )
        return _decode(result.stdout, self.executable)


class SidecarIndexer:
    """Reads precomputed structure dumps stored next to each file as ``PATH.json``."""

    suffix = ".json"

    def sidecar(self, path: Path) -> Path:
        return path.with_name(path.name + self.suffix)

    def structure(self, path: Path) -> dict[str, Any]:
        sidecar = self.sidecar(path)
        logger.debug("indexer_invoked", file=str(path), sidecar=str(sidecar))
        try:
            text = sidecar.read_text(encoding="utf-8")
        except OSError as exc:
            raise IndexerError(f"cannot read structure dump '{sidecar}': {exc.strerror}")
        return _decode(text, str(sidecar))


def make_indexer(command: str, *, executable: str = "sourcekitten", timeout: int = 60) -> Indexer:
    """Indexer for a ``[indexer] command`` setting."""
    if command == "sidecar":
        return SidecarIndexer()
    if command == "sourcekitten":
        return SourceKittenIndexer(executable, timeout=timeout)
    raise ValueError(f"unknown indexer '{command}' (expected 'sourcekitten' or 'sidecar')")
