"""Lexical context scanner for raw Swift declaration text.

Splits a string into contiguous lexemes, each tagged as plain code, a
comment or a string/text literal. Delimiter searches (``(``, ``:``, ``=``,
``{``...) consult the lexemes so that characters inside ``// ...``,
``/* ... */`` or ``"..."`` are never mistaken for structure.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

_LINE_COMMENT_OPEN = "//"
_BLOCK_COMMENT_OPEN = "/*"
_BLOCK_COMMENT_CLOSE = "*/"
_TEXT_BLOCK_OPEN = '"""\n'
_TEXT_BLOCK_CLOSE = '"""'
_QUOTE = '"'

_OPEN_BRACKETS = frozenset("([<")
_CLOSE_BRACKETS = frozenset(")]>")


class LexemeKind(Enum):
    CODE = auto()
    LINE_COMMENT = auto()
    BLOCK_COMMENT = auto()
    STRING_LITERAL = auto()
    TEXT_BLOCK_LITERAL = auto()


@dataclass(frozen=True)
class Lexeme:
    """Half-open span ``[start, end)`` of a single lexical context."""

    start: int
    end: int
    kind: LexemeKind

    @property
    def is_code(self) -> bool:
        return self.kind is LexemeKind.CODE

    @property
    def is_comment(self) -> bool:
        return self.kind in (LexemeKind.LINE_COMMENT, LexemeKind.BLOCK_COMMENT)

    @property
    def is_literal(self) -> bool:
        return self.kind in (LexemeKind.STRING_LITERAL, LexemeKind.TEXT_BLOCK_LITERAL)

    def __contains__(self, index: int) -> bool:
        return self.start <= index < self.end


class _Scanner:
    """Single left-to-right pass producing the lexeme partition."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0
        self.start = 0
        self.kind = LexemeKind.CODE
        self.lexemes: list[Lexeme] = []

    def scan(self) -> list[Lexeme]:
        text = self.text
        while self.pos < len(text):
            if self.kind is LexemeKind.CODE:
                self._scan_code()
            elif self.kind is LexemeKind.LINE_COMMENT:
                if text[self.pos] == "\n":
                    # the newline itself belongs to code
                    self._switch(LexemeKind.CODE)
                else:
                    self.pos += 1
            elif self.kind is LexemeKind.BLOCK_COMMENT:
                if text.startswith(_BLOCK_COMMENT_CLOSE, self.pos):
                    self.pos += len(_BLOCK_COMMENT_CLOSE)
                    self._switch(LexemeKind.CODE)
                else:
                    self.pos += 1
            elif self.kind is LexemeKind.TEXT_BLOCK_LITERAL:
                if text.startswith(_TEXT_BLOCK_CLOSE, self.pos):
                    self.pos += len(_TEXT_BLOCK_CLOSE)
                    self._switch(LexemeKind.CODE)
                else:
                    self.pos += 1
            else:
                self._scan_string()
        if self.start < len(text):
            self.lexemes.append(Lexeme(self.start, len(text), self.kind))
        return self.lexemes

    def _scan_code(self) -> None:
        text = self.text
        if text.startswith(_LINE_COMMENT_OPEN, self.pos):
            self._switch(LexemeKind.LINE_COMMENT)
            self.pos += len(_LINE_COMMENT_OPEN)
        elif text.startswith(_BLOCK_COMMENT_OPEN, self.pos):
            self._switch(LexemeKind.BLOCK_COMMENT)
            self.pos += len(_BLOCK_COMMENT_OPEN)
        elif text.startswith(_TEXT_BLOCK_OPEN, self.pos):
            self._switch(LexemeKind.TEXT_BLOCK_LITERAL)
            self.pos += len(_TEXT_BLOCK_OPEN)
        elif text[self.pos] == _QUOTE:
            self._switch(LexemeKind.STRING_LITERAL)
            self.pos += 1
        else:
            self.pos += 1

    def _scan_string(self) -> None:
        ch = self.text[self.pos]
        if ch == "\\":
            self.pos = min(self.pos + 2, len(self.text))
        elif ch == _QUOTE:
            self.pos += 1
            self._switch(LexemeKind.CODE)
        else:
            self.pos += 1

    def _switch(self, kind: LexemeKind) -> None:
        if self.pos > self.start:
            self.lexemes.append(Lexeme(self.start, self.pos, self.kind))
        self.start = self.pos
        self.kind = kind


class LexemeString:
    """A string together with its lexical-context partition.

    Build one per string and reuse it for repeated queries; every query is
    a linear walk over the (few) lexemes.
    """

    def __init__(self, text: str) -> None:
        self.text = text
        self.lexemes: list[Lexeme] = _Scanner(text).scan() if text else []

    def lexeme_at(self, index: int) -> Lexeme | None:
        if index < 0 or index >= len(self.text):
            return None
        for lexeme in self.lexemes:
            if index in lexeme:
                return lexeme
        return None

    def in_comment(self, index: int) -> bool:
        lexeme = self.lexeme_at(index)
        return lexeme is not None and lexeme.is_comment

    def in_literal(self, index: int) -> bool:
        lexeme = self.lexeme_at(index)
        return lexeme is not None and lexeme.is_literal

    def in_code(self, index: int) -> bool:
        lexeme = self.lexeme_at(index)
        return lexeme is not None and lexeme.is_code

    def slice(self, lexeme: Lexeme) -> str:
        return self.text[lexeme.start : lexeme.end]

    def comments(self) -> list[Lexeme]:
        return [lx for lx in self.lexemes if lx.is_comment]

    def code_text(self) -> str:
        """Concatenation of all code spans, comments and literals removed."""
        return "".join(self.slice(lx) for lx in self.lexemes if lx.is_code)

    def find_in_code(self, char: str, start: int = 0) -> int:
        """Offset of the first *char* at or after *start* that is plain code, or -1."""
        for lexeme in self.lexemes:
            if not lexeme.is_code or lexeme.end <= start:
                continue
            idx = self.text.find(char, max(start, lexeme.start), lexeme.end)
            if idx != -1:
                return idx
        return -1

    def contains_in_code(self, char: str) -> bool:
        return self.find_in_code(char) != -1

    def top_level_offsets(self, token: str) -> list[int]:
        """Offsets of every *token* in code at bracket depth zero.

        ``()``, ``[]`` and ``<>`` count as brackets; the ``>`` of an ``->``
        arrow does not.
        """
        text = self.text
        depth = 0
        offsets = []
        for lexeme in self.lexemes:
            if not lexeme.is_code:
                continue
            for i in range(lexeme.start, lexeme.end):
                if depth == 0 and text.startswith(token, i):
                    offsets.append(i)
                ch = text[i]
                if ch in _OPEN_BRACKETS:
                    depth += 1
                elif ch in _CLOSE_BRACKETS:
                    if ch == ">" and i > 0 and text[i - 1] == "-":
                        continue
                    depth = max(0, depth - 1)
        return offsets

    def find_top_level(self, token: str, *, last: bool = False) -> int:
        """Offset of the first (or *last*) top-level *token*, or -1."""
        offsets = self.top_level_offsets(token)
        if not offsets:
            return -1
        return offsets[-1] if last else offsets[0]


def find_top_level(text: str, token: str, *, last: bool = False) -> int:
    """Shorthand for ``LexemeString(text).find_top_level(token, last=last)``."""
    return LexemeString(text).find_top_level(token, last=last)


def split_top_level(text: str, sep: str = ",") -> list[str]:
    """Split *text* on every top-level *sep*; pieces are stripped."""
    pieces = []
    start = 0
    for offset in LexemeString(text).top_level_offsets(sep):
        pieces.append(text[start:offset].strip())
        start = offset + len(sep)
    pieces.append(text[start:].strip())
    return pieces


def strip_comment_markers(comment: str) -> str:
    """Remove ``//``, ``///`` or ``/* */`` markers and surrounding whitespace."""
    text = comment.strip()
    if text.startswith(_BLOCK_COMMENT_OPEN):
        text = text[len(_BLOCK_COMMENT_OPEN):]
        if text.endswith(_BLOCK_COMMENT_CLOSE):
            text = text[: -len(_BLOCK_COMMENT_CLOSE)]
    else:
        text = text.lstrip("/")
    return text.strip()
