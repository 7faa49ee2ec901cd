"""Type signature representations for Swift declarations.

A ``TypeSignature`` is a structural value: two signatures are equal when
their trees are equal. Named types are opaque strings; nothing is resolved
across files.
"""

from __future__ import annotations

from dataclasses import dataclass

# ── Type signatures ──────────────────────────────────────────────


@dataclass(frozen=True)
class PrimitiveType:
    name: str


@dataclass(frozen=True)
class OptionalType:
    wrapped: TypeSignature


@dataclass(frozen=True)
class NamedType:
    name: str


@dataclass(frozen=True)
class ArrayType:
    element: TypeSignature


@dataclass(frozen=True)
class MapType:
    key: TypeSignature
    value: TypeSignature


@dataclass(frozen=True)
class GenericType:
    name: str
    constraints: tuple[TypeSignature, ...] = ()


TypeSignature = (
    PrimitiveType | OptionalType | NamedType | ArrayType | MapType | GenericType
)

# ── Built-in primitive constants ─────────────────────────────────

BOOLEAN = PrimitiveType("Bool")
INTEGER = PrimitiveType("Int")
FLOAT = PrimitiveType("Float")
DOUBLE = PrimitiveType("Double")
STRING = PrimitiveType("String")
DATE = PrimitiveType("Date")
DATA = PrimitiveType("Data")
VOID = PrimitiveType("Void")

PRIMITIVES: dict[str, PrimitiveType] = {
    t.name: t for t in (BOOLEAN, INTEGER, FLOAT, DOUBLE, STRING, DATE, DATA, VOID)
}


def unwrapped(ty: TypeSignature) -> TypeSignature:
    """Strip every optional layer."""
    while isinstance(ty, OptionalType):
        ty = ty.wrapped
    return ty


def type_name(ty: TypeSignature) -> str:
    """Render a type signature as Swift source text."""
    if isinstance(ty, (PrimitiveType, NamedType)):
        return ty.name
    if isinstance(ty, OptionalType):
        return f"{type_name(ty.wrapped)}?"
    if isinstance(ty, ArrayType):
        return f"[{type_name(ty.element)}]"
    if isinstance(ty, MapType):
        return f"[{type_name(ty.key)}: {type_name(ty.value)}]"
    if isinstance(ty, GenericType):
        args = ", ".join(type_name(c) for c in ty.constraints)
        return f"{ty.name}<{args}>"
    return str(ty)
