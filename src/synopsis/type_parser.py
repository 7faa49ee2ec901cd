"""Parsing of raw Swift type text into ``TypeSignature`` values."""

from __future__ import annotations

import re

from synopsis.lexemes import LexemeString, find_top_level, split_top_level
from synopsis.types import (
    BOOLEAN,
    DOUBLE,
    INTEGER,
    PRIMITIVES,
    STRING,
    VOID,
    ArrayType,
    GenericType,
    MapType,
    NamedType,
    OptionalType,
    TypeSignature,
)

# Placeholder SourceKit reports when it cannot infer a type.
ERROR_TYPE = "<<error type>>"

_DOUBLE_LITERAL = re.compile(r"-?\d+\.\d+")
_INTEGER_LITERAL = re.compile(r"-?\d+")
_CONSTRUCTOR_CALL = re.compile(r"([A-Za-z_][\w.]*(?:<.*>)?)\s*\(.*\)", re.DOTALL)


def parse_type(raw: str) -> TypeSignature:
    """Parse a single type expression such as ``[String: Int]?``."""
    text = raw.strip()
    if not text:
        return NamedType("")
    if text.endswith("?"):
        return OptionalType(parse_type(text[:-1]))
    if text.startswith(("inout ", "@")) or "->" in text:
        return NamedType(text)
    if "<" in text and text.endswith(">"):
        open_at = text.index("<")
        constraints = tuple(
            parse_type(part) for part in split_top_level(text[open_at + 1 : -1]) if part
        )
        return GenericType(text[:open_at].strip(), constraints)
    if text.startswith("[") and text.endswith("]"):
        interior = text[1:-1]
        colon = find_top_level(interior, ":")
        if colon != -1:
            return MapType(parse_type(interior[:colon]), parse_type(interior[colon + 1 :]))
        return ArrayType(parse_type(interior))
    if text == "()":
        return VOID
    if text in PRIMITIVES:
        return PRIMITIVES[text]
    if "Int" in text:
        return INTEGER
    return NamedType(text.split()[0].rstrip("?"))


def _cut_at_body(text: str) -> str:
    brace = LexemeString(text).find_in_code("{")
    return text if brace == -1 else text[:brace]


def default_value(declaration: str) -> str | None:
    """The trimmed text after the first top-level ``=``, if any."""
    eq = find_top_level(declaration, "=")
    if eq == -1:
        return None
    value = declaration[eq + 1 :].strip()
    return value or None


def parse_explicit_type(declaration: str) -> TypeSignature | None:
    """Type written after the last top-level ``:`` of ``name: Type = value``."""
    head = _cut_at_body(declaration)
    eq = find_top_level(head, "=")
    if eq != -1:
        head = head[:eq]
    colon = find_top_level(head, ":", last=True)
    if colon == -1:
        return None
    type_text = head[colon + 1 :].strip()
    if not type_text:
        return None
    return parse_type(type_text)


def guess_type(value: str | None) -> TypeSignature | None:
    """Infer a type from a default-value literal."""
    if not value:
        return None
    text = value.strip()
    if text.startswith('"'):
        return STRING
    if _DOUBLE_LITERAL.fullmatch(text):
        return DOUBLE
    if _INTEGER_LITERAL.fullmatch(text):
        return INTEGER
    if text in ("true", "false"):
        return BOOLEAN
    match = _CONSTRUCTOR_CALL.fullmatch(text)
    if match:
        return parse_type(match.group(1))
    return None


def _after_last_arrow(text: str) -> str | None:
    arrow = find_top_level(text, "->", last=True)
    if arrow == -1:
        return None
    ret = text[arrow + 2 :]
    where = find_top_level(ret, " where ")
    if where != -1:
        ret = ret[:where]
    return ret.strip() or None


def parse_return_type(typename: str | None, declaration: str) -> TypeSignature | None:
    """Return type from the indexer typename, falling back to the declaration."""
    ret = None
    if typename and typename != ERROR_TYPE:
        ret = _after_last_arrow(typename)
    if ret is None:
        ret = _after_last_arrow(_cut_at_body(declaration))
    if ret is None:
        return None
    return parse_type(ret)


def deduce_type(declaration: str, typename: str | None = None) -> TypeSignature:
    """Best available type: explicit, indexer-inferred, guessed, or empty."""
    explicit = parse_explicit_type(declaration)
    if explicit is not None:
        return explicit
    if typename and typename != ERROR_TYPE:
        return parse_type(typename)
    guessed = guess_type(default_value(_cut_at_body(declaration)))
    if guessed is not None:
        return guessed
    return NamedType("")
