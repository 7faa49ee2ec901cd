"""Recovery of full declaration text from the source file.

For some multi-line signatures the indexer's ``key.parsed_declaration``
stops at the opening parenthesis. In that case the declaration is re-read
from the file itself, up to the body-opening brace.
"""

from __future__ import annotations

from synopsis.lexemes import LexemeString
from synopsis.source import SourceBuffer


def locate_declaration(
    parsed: str | None, source: SourceBuffer, offset: int, length: int
) -> str:
    """Return the complete declaration text of one element."""
    if parsed and LexemeString(parsed).contains_in_code(")"):
        return parsed
    text = source.slice(offset, length)
    if not text:
        return parsed or ""
    brace = LexemeString(text).find_in_code("{")
    if brace != -1:
        text = text[:brace]
    return text.strip()


def body_text(source: SourceBuffer, offset: int | None, length: int | None) -> str | None:
    """Raw text between an element's braces, or ``None`` when it has no body."""
    if offset is None or length is None:
        return None
    return source.slice(offset, length)
