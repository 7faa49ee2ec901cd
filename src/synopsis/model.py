"""Entity model for Swift declarations.

Every entity is a frozen dataclass; collections are tuples so entities are
hashable and can key consolidation maps. Entities are built bottom-up by
``synopsis.builder`` or by hand through the ``template`` constructors, and
render themselves back to Swift through ``.verse``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from synopsis.errors import FileError, MalformedNameError
from synopsis.lexemes import LexemeString, find_top_level
from synopsis.source import SourceBuffer
from synopsis.types import TypeSignature

# Name stubs of initializers start with one of these.
CONSTRUCTOR_MARKERS = ("init(", "init?(", "init!(")


class _Verse:
    """Mixin giving an entity its canonical Swift text."""

    @property
    def verse(self) -> str:
        from synopsis.verse import VerseWriter

        return VerseWriter().write(self)


# ── Vocabulary ───────────────────────────────────────────────────


class Accessibility(Enum):
    PRIVATE = "private"
    FILEPRIVATE = "fileprivate"
    INTERNAL = "internal"
    PUBLIC = "public"
    OPEN = "open"

    @classmethod
    def from_key(cls, key: str | None) -> Accessibility:
        """Map ``source.lang.swift.accessibility.public`` to ``PUBLIC``."""
        if not key:
            return cls.INTERNAL
        try:
            return cls(key.rsplit(".", 1)[-1])
        except ValueError:
            return cls.INTERNAL

    @property
    def keyword(self) -> str:
        return "" if self is Accessibility.INTERNAL else self.value


class Attribute(Enum):
    FINAL = ("source.decl.attribute.final", "final", 200)
    MUTATING = ("source.decl.attribute.mutating", "mutating", 700)
    OVERRIDE = ("source.decl.attribute.override", "override", 800)
    INDIRECT = ("source.decl.attribute.indirect", "indirect", 900)
    DISCARDABLE_RESULT = (
        "source.decl.attribute.discardableResult",
        "@discardableResult",
        900,
    )

    def __init__(self, key: str, keyword: str, priority: int) -> None:
        self.key = key
        self.keyword = keyword
        self.priority = priority

    @classmethod
    def from_key(cls, key: str) -> Attribute | None:
        for attribute in cls:
            if attribute.key == key:
                return attribute
        return None


def sorted_attributes(
    attributes: tuple[Attribute, ...], allowed: frozenset[Attribute]
) -> list[Attribute]:
    """Filter to *allowed* and order by descending priority, stably."""
    kept = [a for a in attributes if a in allowed]
    return sorted(kept, key=lambda a: -a.priority)


class DeclarationKind(Enum):
    LET = "let"
    VAR = "var"
    PRIVATE_SET_VAR = "private(set) var"
    OBJC_DYNAMIC_VAR = "@objc dynamic var"

    @classmethod
    def deduce(cls, declaration: str) -> DeclarationKind:
        """Read the keywords in front of the property name.

        Only code before the first top-level ``:`` or ``=`` counts, so type
        annotations and default values never change the kind.
        """
        head = declaration
        for delimiter in (":", "="):
            cut = find_top_level(head, delimiter)
            if cut != -1:
                head = head[:cut]
        keywords = head.split()[:-1]
        if "let" in keywords:
            return cls.LET
        if "private(set)" in keywords:
            return cls.PRIVATE_SET_VAR
        if "@objc" in keywords and "dynamic" in keywords:
            return cls.OBJC_DYNAMIC_VAR
        return cls.VAR


class StorageKind(Enum):
    INSTANCE = ""
    STATIC = "static"
    CLASS = "class"


class FunctionKind(Enum):
    FREE = ""
    INSTANCE = "instance"
    STATIC = "static"
    CLASS = "class"

    @property
    def keyword(self) -> str:
        return self.value if self in (FunctionKind.STATIC, FunctionKind.CLASS) else ""


class CompositeKind(Enum):
    CLASS = "class"
    STRUCT = "struct"
    PROTOCOL = "protocol"
    EXTENSION = "extension"
    ENUM = "enum"


# ── Leaf entities ────────────────────────────────────────────────


@dataclass(frozen=True)
class Declaration:
    """Where an entity was declared: file, raw text, byte offset, line, column."""

    file: str
    raw_text: str | None
    offset: int
    line: int
    column: int

    @classmethod
    def at(
        cls, file: str, source: SourceBuffer, raw_text: str | None, offset: int
    ) -> Declaration:
        line, column = source.location(offset)
        return cls(file, raw_text, offset, line, column)

    @property
    def is_mock(self) -> bool:
        return self == MOCK_DECLARATION


MOCK_DECLARATION = Declaration("", "", -1, -1, -1)


@dataclass(frozen=True)
class Annotation:
    name: str
    value: str | None = None
    declaration: Declaration | None = None


@dataclass(frozen=True)
class GenericParameter(_Verse):
    name: str
    constraints: tuple[str, ...] = ()


@dataclass(frozen=True)
class Argument(_Verse):
    external_name: str
    internal_name: str
    type: TypeSignature
    default_value: str | None = None
    annotations: tuple[Annotation, ...] = ()
    comment: str | None = None
    declaration: Declaration | None = None

    @classmethod
    def template(
        cls,
        name: str,
        type: TypeSignature,
        *,
        internal_name: str | None = None,
        default_value: str | None = None,
        comment: str | None = None,
    ) -> Argument:
        from synopsis.annotations import parse_annotations

        return cls(
            external_name=name,
            internal_name=internal_name if internal_name is not None else name,
            type=type,
            default_value=default_value,
            annotations=parse_annotations(comment),
            comment=comment,
            declaration=None,
        )


@dataclass(frozen=True)
class Property(_Verse):
    comment: str | None
    annotations: tuple[Annotation, ...]
    accessibility: Accessibility
    declaration_kind: DeclarationKind
    name: str
    type: TypeSignature
    default_value: str | None
    declaration: Declaration
    storage: StorageKind = StorageKind.INSTANCE
    body: str | None = None
    skip_type: bool = False

    @classmethod
    def template(
        cls,
        name: str,
        type: TypeSignature,
        *,
        comment: str | None = None,
        accessibility: Accessibility = Accessibility.INTERNAL,
        declaration_kind: DeclarationKind = DeclarationKind.VAR,
        default_value: str | None = None,
        storage: StorageKind = StorageKind.INSTANCE,
        body: str | None = None,
        skip_type: bool = False,
    ) -> Property:
        """A hand-authored property; *skip_type* drops ``: Type`` when a default exists."""
        return cls(
            comment=comment,
            annotations=(),
            accessibility=accessibility,
            declaration_kind=declaration_kind,
            name=name,
            type=type,
            default_value=default_value,
            declaration=MOCK_DECLARATION,
            storage=storage,
            body=body,
            skip_type=skip_type,
        )


@dataclass(frozen=True)
class EnumCase(_Verse):
    comment: str | None
    annotations: tuple[Annotation, ...]
    name: str
    arguments: tuple[Argument, ...]
    default_value: str | None
    declaration: Declaration

    @classmethod
    def template(
        cls,
        name: str,
        *,
        comment: str | None = None,
        arguments: tuple[Argument, ...] = (),
        default_value: str | None = None,
    ) -> EnumCase:
        return cls(comment, (), name, tuple(arguments), default_value, MOCK_DECLARATION)


@dataclass(frozen=True)
class Function(_Verse):
    """A free function, method or initializer.

    ``name`` is the selector stub reported by the indexer, e.g.
    ``greet(name:)``; everything before ``(`` is the spelled name.
    """

    comment: str | None
    annotations: tuple[Annotation, ...]
    accessibility: Accessibility
    attributes: tuple[Attribute, ...]
    name: str
    arguments: tuple[Argument, ...]
    return_type: TypeSignature | None
    declaration: Declaration
    kind: FunctionKind
    body: str | None = None
    generics: tuple[GenericParameter, ...] = ()

    @property
    def is_constructor(self) -> bool:
        return self.name.startswith(CONSTRUCTOR_MARKERS)

    @property
    def base_name(self) -> str:
        return self.name.split("(", 1)[0]

    @classmethod
    def template(
        cls,
        name: str,
        *,
        comment: str | None = None,
        accessibility: Accessibility = Accessibility.INTERNAL,
        attributes: tuple[Attribute, ...] = (),
        arguments: tuple[Argument, ...] = (),
        return_type: TypeSignature | None = None,
        kind: FunctionKind = FunctionKind.INSTANCE,
        body: str | None = None,
        generics: tuple[GenericParameter, ...] = (),
    ) -> Function:
        """A hand-authored function for code generation.

        Raises ``MalformedNameError`` unless *name* has ``(`` and ``)``
        outside comments and literals.
        """
        lexemes = LexemeString(name)
        if lexemes.find_in_code("(") == -1 or lexemes.find_in_code(")") == -1:
            raise MalformedNameError(name)
        return cls(
            comment=comment,
            annotations=(),
            accessibility=accessibility,
            attributes=tuple(attributes),
            name=name,
            arguments=tuple(arguments),
            return_type=return_type,
            declaration=MOCK_DECLARATION,
            kind=kind,
            body=body,
            generics=tuple(generics),
        )


def partition_methods(
    functions: tuple[Function, ...] | list[Function],
) -> tuple[tuple[Function, ...], tuple[Function, ...]]:
    """Split into (initializers, methods), keeping order within each."""
    initializers = tuple(f for f in functions if f.is_constructor)
    methods = tuple(f for f in functions if not f.is_constructor)
    return initializers, methods


# ── Composites ───────────────────────────────────────────────────


@dataclass(frozen=True)
class Composite(_Verse):
    """A class, struct, protocol, extension or enum."""

    kind: CompositeKind
    comment: str | None
    annotations: tuple[Annotation, ...]
    declaration: Declaration
    accessibility: Accessibility
    attributes: tuple[Attribute, ...]
    name: str
    inherited_types: tuple[str, ...] = ()
    enums: tuple[Composite, ...] = ()
    structs: tuple[Composite, ...] = ()
    classes: tuple[Composite, ...] = ()
    protocols: tuple[Composite, ...] = ()
    properties: tuple[Property, ...] = ()
    initializers: tuple[Function, ...] = ()
    methods: tuple[Function, ...] = ()
    cases: tuple[EnumCase, ...] = ()

    @classmethod
    def template(
        cls,
        kind: CompositeKind,
        name: str,
        *,
        comment: str | None = None,
        accessibility: Accessibility = Accessibility.INTERNAL,
        attributes: tuple[Attribute, ...] = (),
        inherited_types: tuple[str, ...] = (),
        enums: tuple[Composite, ...] = (),
        structs: tuple[Composite, ...] = (),
        classes: tuple[Composite, ...] = (),
        protocols: tuple[Composite, ...] = (),
        properties: tuple[Property, ...] = (),
        methods: tuple[Function, ...] = (),
        cases: tuple[EnumCase, ...] = (),
    ) -> Composite:
        """A hand-authored composite; *methods* may mix initializers and methods."""
        initializers, plain = partition_methods(methods)
        return cls(
            kind=kind,
            comment=comment,
            annotations=(),
            declaration=MOCK_DECLARATION,
            accessibility=accessibility,
            attributes=tuple(attributes),
            name=name,
            inherited_types=tuple(inherited_types),
            enums=tuple(enums),
            structs=tuple(structs),
            classes=tuple(classes),
            protocols=tuple(protocols),
            properties=tuple(properties),
            initializers=initializers,
            methods=plain,
            cases=tuple(cases) if kind is CompositeKind.ENUM else (),
        )


# ── Aggregates ───────────────────────────────────────────────────


@dataclass(frozen=True)
class Specifications:
    """Everything declared in a batch of files."""

    enums: tuple[Composite, ...] = ()
    protocols: tuple[Composite, ...] = ()
    structs: tuple[Composite, ...] = ()
    classes: tuple[Composite, ...] = ()
    functions: tuple[Function, ...] = ()
    extensions: tuple[Composite, ...] = ()

    def consolidated(
        self, kind: CompositeKind | None = None
    ) -> dict[Composite, tuple[Composite, ...]]:
        """Map each named composite to the extensions sharing its name.

        With *kind* only composites of that flavor are keys.
        """
        groups = {
            CompositeKind.ENUM: self.enums,
            CompositeKind.PROTOCOL: self.protocols,
            CompositeKind.STRUCT: self.structs,
            CompositeKind.CLASS: self.classes,
        }
        result: dict[Composite, tuple[Composite, ...]] = {}
        for flavor, composites in groups.items():
            if kind is not None and flavor is not kind:
                continue
            for composite in composites:
                result[composite] = tuple(
                    ext for ext in self.extensions if ext.name == composite.name
                )
        return result

    @staticmethod
    def combine(parts: list[Specifications]) -> Specifications:
        """Concatenate several batches in order."""
        return Specifications(
            enums=tuple(c for p in parts for c in p.enums),
            protocols=tuple(c for p in parts for c in p.protocols),
            structs=tuple(c for p in parts for c in p.structs),
            classes=tuple(c for p in parts for c in p.classes),
            functions=tuple(f for p in parts for f in p.functions),
            extensions=tuple(c for p in parts for c in p.extensions),
        )

    @property
    def is_empty(self) -> bool:
        return not (
            self.enums
            or self.protocols
            or self.structs
            or self.classes
            or self.functions
            or self.extensions
        )


@dataclass(frozen=True)
class SynopsisResult:
    specifications: Specifications
    errors: tuple[FileError, ...] = ()
