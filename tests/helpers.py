"""Shared test helpers: SourceKitten-style element trees built from Swift text."""

from __future__ import annotations

from typing import Any

from synopsis.builder import SpecificationsBuilder
from synopsis.model import Specifications
from synopsis.source import SourceBuffer

SWIFT_FILE = "/project/Sources/User.swift"

_DECL = "source.lang.swift.decl."


def byte_offset(text: str, index: int) -> int:
    return len(text[:index].encode("utf-8"))


def _closing_brace(text: str, open_at: int) -> int:
    depth = 0
    for i in range(open_at, len(text)):
        if text[i] == "{":
            depth += 1
        elif text[i] == "}":
            depth -= 1
            if depth == 0:
                return i
    raise AssertionError(f"unbalanced braces after offset {open_at}")


def element(
    kind: str,
    name: str,
    text: str,
    declaration: str,
    *,
    parsed: str | None = None,
    start: int = 0,
    body: bool = False,
    comment: str | None = None,
    typename: str | None = None,
    accessibility: str | None = None,
    attributes: tuple[str, ...] = (),
    inherited: tuple[str, ...] = (),
    substructure: tuple[dict[str, Any], ...] = (),
) -> dict[str, Any]:
    """Element dict for *declaration* as it occurs in *text* (at or after *start*).

    *kind* is the short SourceKitten kind, e.g. ``"class"`` or
    ``"function.method.instance"``. With *body* the element spans up to the
    matching closing brace and carries body offset and length.
    """
    index = text.index(declaration, start)
    data: dict[str, Any] = {
        "key.kind": _DECL + kind,
        "key.name": name,
        "key.offset": byte_offset(text, index),
        "key.length": len(declaration.encode("utf-8")),
        "key.parsed_declaration": declaration if parsed is None else parsed,
    }
    if body:
        open_at = text.index("{", index)
        close_at = _closing_brace(text, open_at)
        data["key.length"] = byte_offset(text, close_at + 1) - data["key.offset"]
        data["key.bodyoffset"] = byte_offset(text, open_at + 1)
        data["key.bodylength"] = byte_offset(text, close_at) - data["key.bodyoffset"]
    if comment is not None:
        data["key.doc.comment"] = comment
    if typename is not None:
        data["key.typename"] = typename
    if accessibility is not None:
        data["key.accessibility"] = f"source.lang.swift.accessibility.{accessibility}"
    if attributes:
        data["key.attributes"] = [
            {"key.attribute": f"source.decl.attribute.{a}"} for a in attributes
        ]
    if inherited:
        data["key.inheritedtypes"] = [{"key.name": n} for n in inherited]
    if substructure:
        data["key.substructure"] = list(substructure)
    return data


def structure(*elements: dict[str, Any]) -> dict[str, Any]:
    """Top-level ``structure`` response wrapping *elements*."""
    return {
        "key.diagnostic_stage": "source.diagnostic.stage.swift.parse",
        "key.substructure": list(elements),
    }


def build(text: str, *elements: dict[str, Any], max_depth: int = 64) -> Specifications:
    """Build the Specifications of one in-memory file."""
    source = SourceBuffer(text, SWIFT_FILE)
    return SpecificationsBuilder(max_depth=max_depth).build(source, structure(*elements))


USER_SOURCE = (
    "/// A user.\n"
    "/// @model\n"
    "class User: Codable {\n"
    "    var id: Int\n"
    "    func greet(name: String) -> String {\n"
    '        return "Hello, " + name\n'
    "    }\n"
    "}\n"
    "\n"
    "extension User: Equatable {\n"
    "}\n"
)


def user_structure() -> dict[str, Any]:
    """Element tree of ``USER_SOURCE``."""
    text = USER_SOURCE
    return structure(
        element(
            "class",
            "User",
            text,
            "class User: Codable",
            body=True,
            comment="A user.\n@model",
            inherited=("Codable",),
            substructure=(
                element("var.instance", "id", text, "var id: Int", typename="Int"),
                element(
                    "function.method.instance",
                    "greet(name:)",
                    text,
                    "func greet(name: String) -> String",
                    body=True,
                    typename="(String) -> String",
                ),
            ),
        ),
        element(
            "extension",
            "User",
            text,
            "extension User: Equatable",
            body=True,
            inherited=("Equatable",),
        ),
    )


USER_VERSE = (
    "/// A user.\n"
    "/// @model\n"
    "class User: Codable {\n"
    "\n"
    "    // MARK: - Properties\n"
    "\n"
    "    var id: Int\n"
    "\n"
    "    // MARK: - Methods\n"
    "\n"
    "    func greet(\n"
    "        name: String\n"
    "    ) -> String {\n"
    '        return "Hello, " + name\n'
    "    }\n"
    "}"
)
