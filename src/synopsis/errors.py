"""Error types and colored diagnostic rendering."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


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


class SynopsisError(Exception):
    """Base class for every error raised by synopsis."""


class IndexerContractError(SynopsisError):
    """The indexer omitted a field it is required to supply.

    Usually means the file was unreachable for the indexer (relative paths,
    ``.``/``..`` segments) rather than anything wrong with the source. Aborts
    the parse of the current file.
    """

    def __init__(self, key: str, kind: str | None = None, message: str | None = None) -> None:
        self.key = key
        self.kind = kind
        if message is None:
            where = f" on '{kind}'" if kind else ""
            message = f"indexer element is missing required '{key}'{where}"
        super().__init__(message)


class IndexerError(SynopsisError):
    """Raised when the indexer cannot produce a structure for a file."""

    def __init__(self, message: str, stderr: str = "") -> None:
        self.stderr = stderr
        super().__init__(message)


class MalformedNameError(SynopsisError):
    """A hand-authored function name lacks its parameter parentheses."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"malformed function name '{name}': expected '(' and ')'")


@dataclass(frozen=True)
class FileError:
    """A recoverable failure attached to one input file."""

    description: str
    file: str

    def to_diagnostic(self) -> Diagnostic:
        return Diagnostic(
            severity=Severity.ERROR,
            code="S001",
            message=self.description,
            file=self.file,
        )


@dataclass
class Diagnostic:
    """A single diagnostic message, optionally pointing into a file."""

    severity: Severity
    code: str
    message: str
    file: str | None = None
    line: int | None = None
    column: int | None = None
    notes: list[str] = field(default_factory=list)


class DiagnosticRenderer:
    """Renders diagnostics in a compiler-style format with colors."""

    def __init__(self, *, color: bool = True) -> None:
        self.color = color
        self._file_cache: dict[str, list[str]] = {}

    def _c(self, code: str) -> str:
        return code if self.color else ""

    def _get_source_line(self, filename: str, line_num: int) -> str | None:
        """Load and cache source file, return the 1-indexed line."""
        if filename not in self._file_cache:
            try:
                path = Path(filename)
                if path.is_file():
                    self._file_cache[filename] = path.read_text().splitlines()
                else:
                    self._file_cache[filename] = []
            except OSError:
                self._file_cache[filename] = []
        lines = self._file_cache[filename]
        if 1 <= line_num <= len(lines):
            return lines[line_num - 1]
        return None

    def render(self, diag: Diagnostic) -> str:
        lines: list[str] = []
        color = _COLORS[diag.severity]

        # Header: error[S001]: message
        lines.append(
            f"{self._c(color)}{diag.severity.value}[{diag.code}]{self._c(_RESET)}"
            f"{self._c(_BOLD)}: {diag.message}{self._c(_RESET)}"
        )

        if diag.file is not None:
            loc = diag.file
            if diag.line is not None:
                loc += f":{diag.line}:{diag.column or 1}"
            lines.append(f"  {self._c(_BLUE)}-->{self._c(_RESET)} {loc}")

            source_line = None
            if diag.line is not None:
                source_line = self._get_source_line(diag.file, diag.line)
            if source_line is not None:
                gutter = f"{diag.line:>4}"
                lines.append(f"  {self._c(_BLUE)}   |{self._c(_RESET)}")
                lines.append(
                    f"  {self._c(_BLUE)}{gutter} |{self._c(_RESET)} {source_line}"
                )
                padding = " " * ((diag.column or 1) - 1)
                lines.append(
                    f"  {self._c(_BLUE)}   |{self._c(_RESET)} "
                    f"{padding}{self._c(color)}^{self._c(_RESET)}"
                )

        for note in diag.notes:
            lines.append(f"  {self._c(_BLUE)}={self._c(_RESET)} note: {note}")

        return "\n".join(lines)
