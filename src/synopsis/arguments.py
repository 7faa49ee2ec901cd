"""Parameter list parsing for functions, initializers and enum cases.

Only the first parenthesised span of a declaration is read. Comments inside
the span are separated from code, then the code is split on commas and
each slice becomes an ``Argument`` carrying the comment written next to it.
"""

from __future__ import annotations

from synopsis.annotations import parse_annotations
from synopsis.lexemes import (
    LexemeString,
    find_top_level,
    split_top_level,
    strip_comment_markers,
)
from synopsis.model import Argument, Declaration, GenericParameter
from synopsis.type_parser import default_value, parse_explicit_type, parse_type
from synopsis.types import NamedType


def _parameter_span(text: LexemeString) -> tuple[int, int] | None:
    """Offsets of the first code ``(`` and its matching ``)``."""
    open_at = text.find_in_code("(")
    if open_at == -1:
        return None
    depth = 0
    for lexeme in text.lexemes:
        if not lexeme.is_code or lexeme.end <= open_at:
            continue
        for i in range(max(lexeme.start, open_at), lexeme.end):
            ch = text.text[i]
            if ch == "(":
                depth += 1
            elif ch == ")":
                depth -= 1
                if depth == 0:
                    return open_at, i
    return open_at, len(text.text)


def _split_span(
    text: LexemeString, start: int, end: int
) -> tuple[str, list[tuple[int, str]]]:
    """Code inside ``[start, end)`` with newlines removed, plus positioned comments."""
    code: list[str] = []
    comments: list[tuple[int, str]] = []
    length = 0
    for lexeme in text.lexemes:
        lo, hi = max(lexeme.start, start), min(lexeme.end, end)
        if lo >= hi:
            continue
        chunk = text.text[lo:hi]
        if lexeme.is_comment:
            comments.append((length, strip_comment_markers(chunk)))
        else:
            chunk = chunk.replace("\n", "")
            code.append(chunk)
            length += len(chunk)
    return "".join(code), comments


def _slices(code: str) -> list[tuple[int, str]]:
    """Comma-separated slices with the offset where their text begins.

    Commas inside literals are skipped; bracket nesting is not checked.
    """
    lexemes = LexemeString(code)
    cuts = []
    pos = lexemes.find_in_code(",")
    while pos != -1:
        cuts.append(pos)
        pos = lexemes.find_in_code(",", pos + 1)
    slices = []
    start = 0
    for cut in cuts + [len(code)]:
        piece = code[start:cut]
        if piece.strip():
            leading = len(piece) - len(piece.lstrip())
            slices.append((start + leading, piece.strip()))
        start = cut + 1
    return slices


def _parse_slice(
    text: str, comment: str | None, declaration: Declaration | None
) -> Argument:
    colon = find_top_level(text, ":")
    eq = find_top_level(text, "=")
    if colon != -1 and (eq == -1 or colon < eq):
        names = text[:colon].strip()
        if " " in names:
            external, internal = names.split(None, 1)
            internal = internal.strip()
        else:
            external = internal = names
        type_ = parse_explicit_type(text) or NamedType("")
    else:
        external = internal = ""
        type_ = parse_type(text[:eq] if eq != -1 else text)
    return Argument(
        external_name=external,
        internal_name=internal,
        type=type_,
        default_value=default_value(text),
        annotations=parse_annotations(comment, declaration),
        comment=comment,
        declaration=declaration,
    )


def parse_arguments(
    declaration: str, owner: Declaration | None = None
) -> tuple[Argument, ...]:
    """Parse the parameter list of *declaration* into arguments.

    A comment belongs to the last argument whose text started before it;
    a comment preceding every argument belongs to the first one.
    """
    text = LexemeString(declaration)
    span = _parameter_span(text)
    if span is None:
        return ()
    code, comments = _split_span(text, span[0] + 1, span[1])
    slices = _slices(code)
    if not slices:
        return ()

    attached: list[list[str]] = [[] for _ in slices]
    for position, comment in comments:
        index = 0
        for i, (start, _) in enumerate(slices):
            if start <= position:
                index = i
        if comment:
            attached[index].append(comment)

    return tuple(
        _parse_slice(piece, " ".join(attached[i]) or None, owner)
        for i, (_, piece) in enumerate(slices)
    )


def parse_generic_parameters(declaration: str) -> tuple[GenericParameter, ...]:
    """Generic parameters of ``func name<T: A & B, U>(...)``."""
    text = LexemeString(declaration)
    paren = text.find_in_code("(")
    angle = text.find_in_code("<")
    if angle == -1 or (paren != -1 and angle > paren):
        return ()
    close = find_top_level(declaration[angle + 1 :], ">")
    if close == -1:
        return ()
    inner = declaration[angle + 1 : angle + 1 + close]
    params = []
    for part in split_top_level(inner):
        if not part:
            continue
        name, _, constraint = part.partition(":")
        constraints = tuple(c.strip() for c in constraint.split("&") if c.strip())
        params.append(GenericParameter(name.strip(), constraints))
    return tuple(params)
