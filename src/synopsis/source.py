"""Source buffer with byte-offset slicing and line/column tracking."""

from __future__ import annotations

from pathlib import Path


class SourceBuffer:
    """The full text of one Swift file.

    The indexer reports UTF-8 byte offsets; this class translates them into
    text slices and 1-based line/column positions.
    """

    def __init__(self, content: str, path: str = "<memory>") -> None:
        self.path = path
        self.content = content
        self.data = content.encode("utf-8")

    @classmethod
    def read(cls, path: Path) -> SourceBuffer:
        return cls(path.read_text(encoding="utf-8"), str(path))

    def slice(self, offset: int, length: int) -> str:
        """Decode ``length`` bytes starting at byte ``offset``."""
        if offset < 0 or length <= 0:
            return ""
        return self.data[offset : offset + length].decode("utf-8", errors="replace")

    def location(self, offset: int) -> tuple[int, int]:
        """Return the 1-based (line, column) of a byte offset."""
        before = self.data[: max(offset, 0)].decode("utf-8", errors="replace")
        line = before.count("\n") + 1
        column = len(before) - (before.rfind("\n") + 1) + 1
        return line, column
