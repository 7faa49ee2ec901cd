"""Entity builders: turn indexer element trees into model entities.

Composite flavors are not separate builders. One ``CompositeBuilder`` owns a
selector table mapping each ``CompositeKind`` to the predicate that claims
its elements, and recurses into nested substructure with the same table.
Functions are handled the same way: one ``FunctionBuilder`` configured with
a selector and a kind classifier serves both free functions and methods.
"""

from __future__ import annotations

import textwrap
from collections.abc import Callable, Iterable

from synopsis.annotations import parse_annotations
from synopsis.arguments import parse_arguments, parse_generic_parameters
from synopsis.declarations import body_text, locate_declaration
from synopsis.elements import (
    KIND_CLASS,
    KIND_ENUM,
    KIND_ENUM_CASE,
    KIND_ENUM_ELEMENT,
    KIND_EXTENSION,
    KIND_FUNCTION_FREE,
    KIND_METHOD_CLASS,
    KIND_METHOD_INSTANCE,
    KIND_METHOD_STATIC,
    KIND_PROTOCOL,
    KIND_STRUCT,
    KIND_VAR_CLASS,
    KIND_VAR_INSTANCE,
    KIND_VAR_STATIC,
    RawElement,
)
from synopsis.errors import IndexerContractError
from synopsis.lexemes import LexemeString
from synopsis.model import (
    Accessibility,
    Attribute,
    Composite,
    CompositeKind,
    Declaration,
    DeclarationKind,
    EnumCase,
    Function,
    FunctionKind,
    Property,
    Specifications,
    StorageKind,
    partition_methods,
)
from synopsis.source import SourceBuffer
from synopsis.type_parser import deduce_type, default_value, parse_return_type

Selector = Callable[[RawElement], bool]

DEFAULT_MAX_DEPTH = 64

_FUNCTION_KINDS = {
    KIND_FUNCTION_FREE: FunctionKind.FREE,
    KIND_METHOD_INSTANCE: FunctionKind.INSTANCE,
    KIND_METHOD_STATIC: FunctionKind.STATIC,
    KIND_METHOD_CLASS: FunctionKind.CLASS,
}

_STORAGE_KINDS = {
    KIND_VAR_INSTANCE: StorageKind.INSTANCE,
    KIND_VAR_STATIC: StorageKind.STATIC,
    KIND_VAR_CLASS: StorageKind.CLASS,
}

# Nested composites are emitted in this order.
NESTED_KINDS = (
    CompositeKind.ENUM,
    CompositeKind.STRUCT,
    CompositeKind.CLASS,
    CompositeKind.PROTOCOL,
)


def classify_function(kind: str) -> FunctionKind:
    return _FUNCTION_KINDS.get(kind, FunctionKind.FREE)


def is_free_function(element: RawElement) -> bool:
    return element.is_kind(KIND_FUNCTION_FREE)


def is_method(element: RawElement) -> bool:
    return element.is_kind(KIND_METHOD_INSTANCE, KIND_METHOD_STATIC, KIND_METHOD_CLASS)


def is_property(element: RawElement) -> bool:
    return element.is_kind(*_STORAGE_KINDS)


COMPOSITE_SELECTORS: dict[CompositeKind, Selector] = {
    CompositeKind.CLASS: lambda e: e.is_kind(KIND_CLASS),
    CompositeKind.STRUCT: lambda e: e.is_kind(KIND_STRUCT),
    CompositeKind.PROTOCOL: lambda e: e.is_kind(KIND_PROTOCOL),
    CompositeKind.ENUM: lambda e: e.is_kind(KIND_ENUM),
    CompositeKind.EXTENSION: lambda e: e.kind.startswith(KIND_EXTENSION),
}


def _declaration(source: SourceBuffer, raw_text: str | None, offset: int) -> Declaration:
    return Declaration.at(source.path, source, raw_text, offset)


def _attributes(element: RawElement) -> tuple[Attribute, ...]:
    found = (Attribute.from_key(key) for key in element.attributes)
    return tuple(a for a in found if a is not None)


def _accessor_body(raw: str | None) -> str | None:
    """Dedent an accessor block and drop blank first/last lines."""
    if raw is None:
        return None
    lines = raw.split("\n")
    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()
    return textwrap.dedent("\n".join(lines))


class PropertyBuilder:
    """Builds properties from ``var.instance``/``var.static``/``var.class`` elements."""

    def build(self, element: RawElement, source: SourceBuffer) -> Property:
        parsed = element.parsed_declaration
        declaration = _declaration(source, parsed, element.offset)
        comment = element.comment
        return Property(
            comment=comment,
            annotations=parse_annotations(comment, declaration),
            accessibility=Accessibility.from_key(element.accessibility),
            declaration_kind=DeclarationKind.deduce(parsed),
            name=element.name,
            type=deduce_type(parsed, element.typename),
            default_value=default_value(parsed),
            declaration=declaration,
            storage=_STORAGE_KINDS.get(element.kind, StorageKind.INSTANCE),
            body=_accessor_body(
                body_text(source, element.body_offset, element.body_length)
            ),
        )

    def build_all(
        self, elements: Iterable[RawElement], source: SourceBuffer
    ) -> tuple[Property, ...]:
        return tuple(self.build(e, source) for e in elements if is_property(e))


class EnumCaseBuilder:
    """Builds one case per ``enumelement`` nested in an ``enumcase``."""

    def build(
        self, element: RawElement, offset: int, source: SourceBuffer
    ) -> EnumCase:
        parsed = element.parsed_declaration
        declaration = _declaration(source, parsed, offset)
        comment = element.comment
        paren = LexemeString(parsed).find_in_code("(")
        if paren != -1:
            words = parsed[:paren].split()
            name = words[-1] if words else element.name
            arguments = parse_arguments(parsed, declaration)
        else:
            name = element.name
            arguments = ()
        return EnumCase(
            comment=comment,
            annotations=parse_annotations(comment, declaration),
            name=name,
            arguments=arguments,
            default_value=default_value(parsed),
            declaration=declaration,
        )

    def build_all(
        self, elements: Iterable[RawElement], source: SourceBuffer
    ) -> tuple[EnumCase, ...]:
        cases = []
        for case in elements:
            if not case.is_kind(KIND_ENUM_CASE):
                continue
            for element in case.substructure:
                if element.is_kind(KIND_ENUM_ELEMENT):
                    cases.append(self.build(element, case.offset, source))
        return tuple(cases)


class FunctionBuilder:
    """Builds functions claimed by *selector*, kinds mapped by *classifier*."""

    def __init__(
        self,
        selector: Selector,
        classifier: Callable[[str], FunctionKind] = classify_function,
    ) -> None:
        self.selector = selector
        self.classifier = classifier

    def build(self, element: RawElement, source: SourceBuffer) -> Function:
        offset = element.offset
        text = locate_declaration(
            element.parsed_declaration, source, offset, element.length
        )
        declaration = _declaration(source, text, offset)
        comment = element.comment
        return Function(
            comment=comment,
            annotations=parse_annotations(comment, declaration),
            accessibility=Accessibility.from_key(element.accessibility),
            attributes=_attributes(element),
            name=element.name,
            arguments=parse_arguments(text, declaration),
            return_type=parse_return_type(element.typename, text),
            declaration=declaration,
            kind=self.classifier(element.kind),
            body=body_text(source, element.body_offset, element.body_length),
            generics=parse_generic_parameters(text),
        )

    def build_all(
        self, elements: Iterable[RawElement], source: SourceBuffer
    ) -> tuple[Function, ...]:
        return tuple(self.build(e, source) for e in elements if self.selector(e))


class CompositeBuilder:
    """Builds composites of every flavor from one selector table."""

    def __init__(
        self,
        selectors: dict[CompositeKind, Selector] | None = None,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        self.selectors = selectors if selectors is not None else COMPOSITE_SELECTORS
        self.max_depth = max_depth
        self.properties = PropertyBuilder()
        self.cases = EnumCaseBuilder()
        self.methods = FunctionBuilder(is_method)

    def build_all(
        self,
        kind: CompositeKind,
        elements: Iterable[RawElement],
        source: SourceBuffer,
        depth: int = 0,
    ) -> tuple[Composite, ...]:
        selector = self.selectors[kind]
        return tuple(
            self.build(kind, e, source, depth) for e in elements if selector(e)
        )

    def build(
        self,
        kind: CompositeKind,
        element: RawElement,
        source: SourceBuffer,
        depth: int = 0,
    ) -> Composite:
        if depth > self.max_depth:
            raise IndexerContractError(
                "key.substructure",
                element.kind,
                message=f"composite '{element.name}' nested deeper than {self.max_depth} levels",
            )
        children = element.substructure
        nested = {
            flavor: self.build_all(flavor, children, source, depth + 1)
            for flavor in NESTED_KINDS
        }
        initializers, methods = partition_methods(
            self.methods.build_all(children, source)
        )
        declaration = _declaration(source, element.parsed_declaration, element.offset)
        comment = element.comment
        return Composite(
            kind=kind,
            comment=comment,
            annotations=parse_annotations(comment, declaration),
            declaration=declaration,
            accessibility=Accessibility.from_key(element.accessibility),
            attributes=_attributes(element),
            name=element.name,
            inherited_types=tuple(element.inherited_types),
            enums=nested[CompositeKind.ENUM],
            structs=nested[CompositeKind.STRUCT],
            classes=nested[CompositeKind.CLASS],
            protocols=nested[CompositeKind.PROTOCOL],
            properties=self.properties.build_all(children, source),
            initializers=initializers,
            methods=methods,
            cases=self.cases.build_all(children, source)
            if kind is CompositeKind.ENUM
            else (),
        )


class SpecificationsBuilder:
    """Builds one file's ``Specifications`` from its top-level structure."""

    def __init__(self, *, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        self.composites = CompositeBuilder(max_depth=max_depth)
        self.functions = FunctionBuilder(is_free_function)

    def build(self, source: SourceBuffer, structure: dict) -> Specifications:
        elements = RawElement(structure).substructure

        def composites(kind: CompositeKind) -> tuple[Composite, ...]:
            return self.composites.build_all(kind, elements, source)

        return Specifications(
            enums=composites(CompositeKind.ENUM),
            protocols=composites(CompositeKind.PROTOCOL),
            structs=composites(CompositeKind.STRUCT),
            classes=composites(CompositeKind.CLASS),
            functions=self.functions.build_all(elements, source),
            extensions=composites(CompositeKind.EXTENSION),
        )
