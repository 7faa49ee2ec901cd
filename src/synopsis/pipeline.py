"""Batch pipeline: Swift files -> indexer structure -> Specifications."""

from __future__ import annotations

from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any

from synopsis.builder import DEFAULT_MAX_DEPTH, SpecificationsBuilder
from synopsis.config import SynopsisConfig
from synopsis.errors import FileError, IndexerContractError, IndexerError
from synopsis.indexer import Indexer, make_indexer
from synopsis.log import get_logger
from synopsis.model import Specifications, SynopsisResult
from synopsis.source import SourceBuffer

logger = get_logger(__name__)

SKIP_MARKER = "synopsis:disable"
SWIFT_SUFFIX = ".swift"


def discover_sources(paths: Iterable[Path]) -> list[Path]:
    """Expand directories to their ``.swift`` files; order kept, duplicates dropped."""
    found: list[Path] = []
    seen: set[Path] = set()
    for path in paths:
        candidates = sorted(path.rglob(f"*{SWIFT_SUFFIX}")) if path.is_dir() else [path]
        for candidate in candidates:
            resolved = candidate.resolve()
            if resolved not in seen:
                seen.add(resolved)
                found.append(resolved)
    return found


def parse_source(
    source: SourceBuffer,
    structure: dict[str, Any],
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> Specifications:
    """Build the entities of one file from its text and element tree."""
    return SpecificationsBuilder(max_depth=max_depth).build(source, structure)


class Synopsis:
    """Parses batches of Swift files through an indexer."""

    def __init__(
        self,
        indexer: Indexer,
        *,
        skip_marker: str = SKIP_MARKER,
        max_depth: int = DEFAULT_MAX_DEPTH,
        workers: int = 1,
    ) -> None:
        self.indexer = indexer
        self.skip_marker = skip_marker
        self.max_depth = max_depth
        self.workers = workers

    @classmethod
    def from_config(
        cls, config: SynopsisConfig, indexer: Indexer | None = None
    ) -> Synopsis:
        if indexer is None:
            indexer = make_indexer(
                config.indexer.command,
                executable=config.indexer.executable,
                timeout=config.indexer.timeout,
            )
        return cls(
            indexer,
            skip_marker=config.parser.skip_marker,
            max_depth=config.parser.max_depth,
            workers=config.parser.workers,
        )

    def process(self, path: Path) -> tuple[Specifications, FileError | None]:
        """Parse one file; failures come back as a ``FileError``, never raised."""
        path = path.resolve()
        filename = str(path)
        try:
            source = SourceBuffer.read(path)
        except OSError as exc:
            return self._failed(filename, f"cannot read file: {exc.strerror}")
        except UnicodeDecodeError as exc:
            return self._failed(filename, f"cannot decode file as UTF-8: {exc.reason}")

        if self.skip_marker and self.skip_marker in source.content:
            logger.info("file_skipped", file=filename, reason="skip marker")
            return Specifications(), None

        try:
            structure = self.indexer.structure(path)
            specs = parse_source(source, structure, max_depth=self.max_depth)
        except (IndexerError, IndexerContractError) as exc:
            return self._failed(filename, str(exc))
        return specs, None

    @staticmethod
    def _failed(filename: str, reason: str) -> tuple[Specifications, FileError]:
        logger.warning("file_failed", file=filename, reason=reason)
        return Specifications(), FileError(reason, filename)

    def specifications(self, paths: Iterable[Path]) -> SynopsisResult:
        """Parse every file, concatenating results in input order."""
        files = list(paths)
        if self.workers <= 1 or len(files) <= 1:
            outcomes = [self.process(path) for path in files]
        else:
            with ThreadPoolExecutor(max_workers=self.workers) as pool:
                outcomes = list(pool.map(self.process, files))

        errors = tuple(error for _, error in outcomes if error is not None)
        specs = Specifications.combine([spec for spec, _ in outcomes])
        logger.info("batch_parsed", count=len(files), failed=len(errors))
        return SynopsisResult(specs, errors)
