"""Typed read access to SourceKitten ``structure`` element dictionaries."""

from __future__ import annotations

from typing import Any

from synopsis.errors import IndexerContractError

# ── Element kinds ────────────────────────────────────────────────

_DECL = "source.lang.swift.decl."

KIND_CLASS = _DECL + "class"
KIND_STRUCT = _DECL + "struct"
KIND_PROTOCOL = _DECL + "protocol"
KIND_ENUM = _DECL + "enum"
KIND_EXTENSION = _DECL + "extension"
KIND_ENUM_CASE = _DECL + "enumcase"
KIND_ENUM_ELEMENT = _DECL + "enumelement"
KIND_FUNCTION_FREE = _DECL + "function.free"
KIND_METHOD_INSTANCE = _DECL + "function.method.instance"
KIND_METHOD_STATIC = _DECL + "function.method.static"
KIND_METHOD_CLASS = _DECL + "function.method.class"
KIND_VAR_INSTANCE = _DECL + "var.instance"
KIND_VAR_STATIC = _DECL + "var.static"
KIND_VAR_CLASS = _DECL + "var.class"

# ── Keys ─────────────────────────────────────────────────────────

KEY_KIND = "key.kind"
KEY_OFFSET = "key.offset"
KEY_LENGTH = "key.length"
KEY_NAME = "key.name"
KEY_PARSED_DECLARATION = "key.parsed_declaration"
KEY_DOC_COMMENT = "key.doc.comment"
KEY_ATTRIBUTES = "key.attributes"
KEY_ATTRIBUTE = "key.attribute"
KEY_ACCESSIBILITY = "key.accessibility"
KEY_INHERITED_TYPES = "key.inheritedtypes"
KEY_TYPENAME = "key.typename"
KEY_BODY_OFFSET = "key.bodyoffset"
KEY_BODY_LENGTH = "key.bodylength"
KEY_SUBSTRUCTURE = "key.substructure"


class RawElement:
    """One node of the indexer's element tree.

    Accessors for fields the indexer always supplies raise
    ``IndexerContractError`` when the field is absent.
    """

    def __init__(self, data: dict[str, Any]) -> None:
        self.data = data

    def __repr__(self) -> str:
        return f"RawElement({self.data.get(KEY_KIND)!r}, {self.data.get(KEY_NAME)!r})"

    def _require(self, key: str) -> Any:
        value = self.data.get(key)
        if value is None:
            raise IndexerContractError(key, self.data.get(KEY_KIND))
        return value

    @property
    def kind(self) -> str:
        return self._require(KEY_KIND)

    @property
    def offset(self) -> int:
        return int(self._require(KEY_OFFSET))

    @property
    def length(self) -> int:
        return int(self.data.get(KEY_LENGTH, 0))

    @property
    def name(self) -> str:
        return self._require(KEY_NAME)

    @property
    def parsed_declaration(self) -> str:
        return self._require(KEY_PARSED_DECLARATION)

    @property
    def comment(self) -> str | None:
        return self.data.get(KEY_DOC_COMMENT)

    @property
    def attributes(self) -> list[str]:
        return [
            entry[KEY_ATTRIBUTE]
            for entry in self.data.get(KEY_ATTRIBUTES, [])
            if KEY_ATTRIBUTE in entry
        ]

    @property
    def accessibility(self) -> str | None:
        return self.data.get(KEY_ACCESSIBILITY)

    @property
    def inherited_types(self) -> list[str]:
        return [
            entry[KEY_NAME]
            for entry in self.data.get(KEY_INHERITED_TYPES, [])
            if KEY_NAME in entry
        ]

    @property
    def typename(self) -> str | None:
        return self.data.get(KEY_TYPENAME)

    @property
    def body_offset(self) -> int | None:
        value = self.data.get(KEY_BODY_OFFSET)
        return None if value is None else int(value)

    @property
    def body_length(self) -> int | None:
        value = self.data.get(KEY_BODY_LENGTH)
        return None if value is None else int(value)

    @property
    def substructure(self) -> list[RawElement]:
        return [RawElement(child) for child in self.data.get(KEY_SUBSTRUCTURE, [])]

    def is_kind(self, *kinds: str) -> bool:
        return self.kind in kinds
