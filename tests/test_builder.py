"""Tests for building entities from indexer element trees."""

from __future__ import annotations

import pytest

from synopsis.builder import (
    CompositeBuilder,
    FunctionBuilder,
    SpecificationsBuilder,
    classify_function,
)
from synopsis.elements import RawElement
from synopsis.errors import IndexerContractError
from synopsis.model import (
    Accessibility,
    Attribute,
    CompositeKind,
    DeclarationKind,
    FunctionKind,
    Specifications,
    StorageKind,
)
from synopsis.source import SourceBuffer
from synopsis.type_parser import ERROR_TYPE
from synopsis.types import (
    DOUBLE,
    INTEGER,
    STRING,
    ArrayType,
    NamedType,
)
from tests.helpers import (
    SWIFT_FILE,
    USER_SOURCE,
    USER_VERSE,
    build,
    element,
    structure,
    user_structure,
)


def _user_specs() -> Specifications:
    source = SourceBuffer(USER_SOURCE, SWIFT_FILE)
    return SpecificationsBuilder().build(source, user_structure())


class TestEndToEnd:
    def test_user_class(self):
        specs = _user_specs()
        (user,) = specs.classes
        assert user.name == "User"
        assert user.inherited_types == ("Codable",)
        assert user.annotations[0].name == "model"
        (prop,) = user.properties
        assert (prop.name, prop.type, prop.default_value) == ("id", INTEGER, None)
        (method,) = user.methods
        assert method.name == "greet(name:)"
        assert [(a.internal_name, a.type) for a in method.arguments] == [("name", STRING)]
        assert method.return_type == STRING
        assert user.initializers == ()

    def test_user_verse(self):
        (user,) = _user_specs().classes
        assert user.verse == USER_VERSE

    def test_declaration_position(self):
        (user,) = _user_specs().classes
        assert user.declaration.file == SWIFT_FILE
        assert (user.declaration.line, user.declaration.column) == (3, 1)

    def test_extension_and_consolidation(self):
        specs = _user_specs()
        (ext,) = specs.extensions
        assert ext.kind is CompositeKind.EXTENSION
        assert ext.inherited_types == ("Equatable",)
        consolidated = specs.consolidated()
        (user,) = specs.classes
        assert consolidated[user] == (ext,)


class TestProperties:
    def _property(self, text, declaration, kind="var.instance", **extra):
        name = declaration.split("=")[0].split(":")[0].split()[-1]
        (cls,) = build(
            text,
            element(
                "class",
                "Store",
                text,
                "class Store",
                body=True,
                substructure=(element(kind, name, text, declaration, **extra),),
            ),
        ).classes
        return cls.properties[0]

    def test_static_let_with_constructor_default(self):
        text = "class Store {\n    static let shared = Store()\n}\n"
        prop = self._property(text, "static let shared = Store()", kind="var.static")
        assert prop.storage is StorageKind.STATIC
        assert prop.declaration_kind is DeclarationKind.LET
        assert prop.type == NamedType("Store")
        assert prop.name == "shared"
        assert prop.default_value == "Store()"

    def test_private_set(self):
        text = "class Store {\n    private(set) var count: Int = 0\n}\n"
        prop = self._property(
            text, "private(set) var count: Int = 0", accessibility="internal"
        )
        assert prop.declaration_kind is DeclarationKind.PRIVATE_SET_VAR
        assert prop.type == INTEGER
        assert prop.default_value == "0"
        assert prop.verse == "private(set) var count: Int = 0"

    def test_let_inside_default_is_not_a_keyword(self):
        text = 'class Store {\n    var label = "let x"\n}\n'
        prop = self._property(text, 'var label = "let x"')
        assert prop.declaration_kind is DeclarationKind.VAR
        assert prop.verse == 'var label: String = "let x"'

    def test_class_storage_and_accessibility(self):
        text = "class Store {\n    public class var name: String\n}\n"
        prop = self._property(
            text, "public class var name: String", kind="var.class", accessibility="public"
        )
        assert prop.storage is StorageKind.CLASS
        assert prop.accessibility is Accessibility.PUBLIC

    def test_accessor_body_is_dedented(self):
        text = (
            "class Store {\n"
            "    var total: Int {\n"
            "        return 1\n"
            "    }\n"
            "}\n"
        )
        prop = self._property(text, "var total: Int", body=True)
        assert prop.body == "return 1"
        assert prop.verse == "var total: Int {\n    return 1\n}"

    def test_type_from_typename(self):
        text = "class Store {\n    var ratio = compute()\n}\n"
        prop = self._property(text, "var ratio = compute()", typename="Double")
        assert prop.type == DOUBLE

    def test_comment_annotations(self):
        text = "class Store {\n    var id: Int\n}\n"
        prop = self._property(text, "var id: Int", comment="Identifier. @key")
        assert prop.annotations[0].name == "key"
        assert prop.annotations[0].declaration == prop.declaration


class TestEnums:
    def _enum(self, text, *cases):
        substructure = []
        for declaration, name in cases:
            substructure.append(
                element(
                    "enumcase",
                    "",
                    text,
                    declaration,
                    substructure=(element("enumelement", name, text, declaration),),
                )
            )
        (enum,) = build(
            text,
            element("enum", "Shape", text, "enum Shape", body=True, substructure=tuple(substructure)),
        ).enums
        return enum

    def test_associated_values(self):
        text = "enum Shape {\n    case circle(radius: Double)\n    case point\n}\n"
        enum = self._enum(
            text,
            ("case circle(radius: Double)", "circle(radius:)"),
            ("case point", "point"),
        )
        circle, point = enum.cases
        assert circle.name == "circle"
        assert [(a.external_name, a.type) for a in circle.arguments] == [("radius", DOUBLE)]
        assert point.name == "point"
        assert point.arguments == ()

    def test_raw_values(self):
        text = "enum Shape: Int {\n    case low = 1\n    case high = 2\n}\n"
        enum = self._enum(text, ("case low = 1", "low"), ("case high = 2", "high"))
        assert [(c.name, c.default_value) for c in enum.cases] == [("low", "1"), ("high", "2")]

    def test_cases_only_for_enums(self):
        text = "struct Shape {\n    case bogus\n}\n"
        (struct,) = build(
            text,
            element(
                "struct",
                "Shape",
                text,
                "struct Shape",
                body=True,
                substructure=(
                    element(
                        "enumcase",
                        "",
                        text,
                        "case bogus",
                        substructure=(element("enumelement", "bogus", text, "case bogus"),),
                    ),
                ),
            ),
        ).structs
        assert struct.cases == ()


class TestFunctions:
    def test_free_function(self):
        text = "func load(path: String) -> [String] {\n    return []\n}\n"
        specs = build(
            text,
            element(
                "function.free",
                "load(path:)",
                text,
                "func load(path: String) -> [String]",
                body=True,
                typename="(String) -> [String]",
            ),
        )
        (fn,) = specs.functions
        assert fn.kind is FunctionKind.FREE
        assert fn.return_type == ArrayType(STRING)
        assert fn.body == "\n    return []\n"

    def test_kinds_and_initializers(self):
        text = (
            "struct User {\n"
            "    init(id: Int) {}\n"
            "    static func make() -> User { User(id: 1) }\n"
            "    mutating func reset() {}\n"
            "}\n"
        )
        (user,) = build(
            text,
            element(
                "struct",
                "User",
                text,
                "struct User",
                body=True,
                substructure=(
                    element("function.method.instance", "init(id:)", text, "init(id: Int)", body=True),
                    element(
                        "function.method.static",
                        "make()",
                        text,
                        "static func make() -> User",
                        body=True,
                        typename="() -> User",
                    ),
                    element(
                        "function.method.instance",
                        "reset()",
                        text,
                        "mutating func reset()",
                        body=True,
                        attributes=("mutating",),
                    ),
                ),
            ),
        ).structs
        (init,) = user.initializers
        assert init.is_constructor
        assert [m.name for m in user.methods] == ["make()", "reset()"]
        assert user.methods[0].kind is FunctionKind.STATIC
        assert user.methods[1].attributes == (Attribute.MUTATING,)
        assert user.methods[1].body == ""

    def test_truncated_declaration_is_recovered(self):
        text = (
            "class Greeter {\n"
            "    func greet(\n"
            "        name: String, // who\n"
            "        times: Int\n"
            "    ) -> String {\n"
            "        return name\n"
            "    }\n"
            "}\n"
        )
        (greeter,) = build(
            text,
            element(
                "class",
                "Greeter",
                text,
                "class Greeter",
                body=True,
                substructure=(
                    element(
                        "function.method.instance",
                        "greet(name:times:)",
                        text,
                        "func greet(",
                        body=True,
                        typename=ERROR_TYPE,
                    ),
                ),
            ),
        ).classes
        (greet,) = greeter.methods
        assert [a.internal_name for a in greet.arguments] == ["name", "times"]
        assert greet.arguments[0].comment == "who"
        assert greet.return_type == STRING

    def test_classifier(self):
        assert classify_function("source.lang.swift.decl.function.method.class") is (
            FunctionKind.CLASS
        )
        assert classify_function("unknown") is FunctionKind.FREE

    def test_custom_selector(self):
        text = "func a() {}\nfunc b() {}\n"
        builder = FunctionBuilder(lambda e: e.name == "b()")
        elements = [
            RawElement(element("function.free", "a()", text, "func a()")),
            RawElement(element("function.free", "b()", text, "func b()")),
        ]
        (fn,) = builder.build_all(elements, SourceBuffer(text, SWIFT_FILE))
        assert fn.name == "b()"

    def test_generic_parameters(self):
        text = "func first<T: Equatable>(in items: [T]) -> T? { nil }\n"
        (fn,) = build(
            text,
            element(
                "function.free",
                "first(in:)",
                text,
                "func first<T: Equatable>(in items: [T]) -> T?",
                body=True,
            ),
        ).functions
        assert fn.generics[0].name == "T"
        assert fn.generics[0].constraints == ("Equatable",)


class TestComposites:
    def test_nested_composites(self):
        text = "class Outer {\n    struct Inner {\n        enum Mode {\n        }\n    }\n}\n"
        mode = element("enum", "Mode", text, "enum Mode", body=True)
        inner = element("struct", "Inner", text, "struct Inner", body=True, substructure=(mode,))
        (outer,) = build(
            text, element("class", "Outer", text, "class Outer", body=True, substructure=(inner,))
        ).classes
        assert outer.structs[0].name == "Inner"
        assert outer.structs[0].enums[0].name == "Mode"

    def test_depth_bound(self):
        text = "class Outer {\n    struct Inner {\n        enum Mode {\n        }\n    }\n}\n"
        mode = element("enum", "Mode", text, "enum Mode", body=True)
        inner = element("struct", "Inner", text, "struct Inner", body=True, substructure=(mode,))
        outer = element("class", "Outer", text, "class Outer", body=True, substructure=(inner,))
        with pytest.raises(IndexerContractError, match="nested deeper"):
            build(text, outer, max_depth=1)

    def test_attributes_and_accessibility(self):
        text = "public final class Store: Base {\n}\n"
        (store,) = build(
            text,
            element(
                "class",
                "Store",
                text,
                "public final class Store: Base",
                body=True,
                accessibility="public",
                attributes=("final",),
                inherited=("Base",),
            ),
        ).classes
        assert store.accessibility is Accessibility.PUBLIC
        assert store.attributes == (Attribute.FINAL,)

    def test_protocol(self):
        text = "protocol Named {\n    var name: String { get }\n}\n"
        (named,) = build(
            text,
            element(
                "protocol",
                "Named",
                text,
                "protocol Named",
                body=True,
                substructure=(element("var.instance", "name", text, "var name: String { get }"),),
            ),
        ).protocols
        assert named.properties[0].type == STRING

    def test_selector_table_can_be_narrowed(self):
        text = "struct A {\n}\n"
        builder = CompositeBuilder({CompositeKind.STRUCT: lambda e: False})
        elements = [RawElement(element("struct", "A", text, "struct A", body=True))]
        assert builder.build_all(CompositeKind.STRUCT, elements, SourceBuffer(text)) == ()


class TestContract:
    def test_missing_name(self):
        text = "class A {\n}\n"
        data = element("class", "A", text, "class A", body=True)
        del data["key.name"]
        with pytest.raises(IndexerContractError, match="key.name"):
            build(text, data)

    def test_missing_kind(self):
        with pytest.raises(IndexerContractError, match="key.kind"):
            build("", {"key.name": "A", "key.offset": 0})

    def test_missing_offset(self):
        text = "func a() {}\n"
        data = element("function.free", "a()", text, "func a()")
        del data["key.offset"]
        with pytest.raises(IndexerContractError, match="key.offset"):
            build(text, data)

    def test_missing_parsed_declaration(self):
        text = "class A {\n    var x: Int\n}\n"
        prop = element("var.instance", "x", text, "var x: Int")
        del prop["key.parsed_declaration"]
        with pytest.raises(IndexerContractError):
            build(text, element("class", "A", text, "class A", body=True, substructure=(prop,)))


class TestSpecifications:
    def test_combine_keeps_order(self):
        text_a = "class A {\n}\n"
        text_b = "class B {\n}\n"
        a = build(text_a, element("class", "A", text_a, "class A", body=True))
        b = build(text_b, element("class", "B", text_b, "class B", body=True))
        combined = Specifications.combine([a, b])
        assert [c.name for c in combined.classes] == ["A", "B"]

    def test_consolidated_by_kind(self):
        specs = _user_specs()
        assert specs.consolidated(CompositeKind.STRUCT) == {}
        assert len(specs.consolidated(CompositeKind.CLASS)) == 1

    def test_empty(self):
        assert Specifications().is_empty
        assert not _user_specs().is_empty

    def test_unknown_elements_are_ignored(self):
        text = "import Foundation\n"
        specs = build(text, {"key.kind": "source.lang.swift.syntaxtype.comment.mark", "key.offset": 0})
        assert specs.is_empty

    def test_empty_structure(self):
        source = SourceBuffer("", SWIFT_FILE)
        assert SpecificationsBuilder().build(source, structure()).is_empty
