"""Extraction of ``@name value`` annotations from documentation comments."""

from __future__ import annotations

from synopsis.model import Annotation, Declaration

_MARKER = "@"
_WORD_STOPS = frozenset("\n .,;:")


def _word_end(text: str, start: int) -> int:
    pos = start
    while pos < len(text) and text[pos] not in _WORD_STOPS:
        pos += 1
    return pos


def parse_annotations(
    comment: str | None, declaration: Declaration | None = None
) -> tuple[Annotation, ...]:
    """Find every ``@name [value]`` token in *comment*.

    The value is the single word following the name on the same logical
    clause; a newline, a semicolon, the end of the comment or another
    ``@`` marker means the annotation carries no value.
    """
    if not comment:
        return ()
    annotations: list[Annotation] = []
    pos = comment.find(_MARKER)
    while pos != -1:
        name_end = _word_end(comment, pos + 1)
        name = comment[pos + 1 : name_end]
        rest = comment[name_end:]
        value = None
        if rest and not rest.startswith(("\n", " \n", ";")) and rest.strip():
            candidate = rest.lstrip(" \n")
            if not candidate.startswith(_MARKER):
                word = candidate[: _word_end(candidate, 0)]
                value = word or None
        if name:
            annotations.append(Annotation(name, value, declaration))
        pos = comment.find(_MARKER, name_end)
    return tuple(annotations)
