"""Canonical Swift source rendering ("verse") for model entities.

Walks entities and emits text with the same isinstance-dispatch pattern as
the rest of the package. Output is deterministic: the same entity always
renders to byte-identical text.
"""

from __future__ import annotations

import textwrap

from synopsis.lexemes import LexemeString
from synopsis.model import (
    Argument,
    Attribute,
    Composite,
    CompositeKind,
    EnumCase,
    Function,
    GenericParameter,
    Property,
    Specifications,
    sorted_attributes,
)
from synopsis.types import VOID, NamedType, TypeSignature, type_name

# Attributes each entity may print, everything else is dropped.
_FUNCTION_ATTRIBUTES = frozenset(
    {Attribute.DISCARDABLE_RESULT, Attribute.OVERRIDE, Attribute.MUTATING}
)
_COMPOSITE_ATTRIBUTES = {
    CompositeKind.CLASS: frozenset({Attribute.FINAL}),
    CompositeKind.ENUM: frozenset({Attribute.INDIRECT}),
}


class VerseWriter:
    """Render any entity back to canonical Swift source text."""

    # ── Public API ─────────────────────────────────────────────

    def write(self, entity: object) -> str:
        if isinstance(entity, Composite):
            return self._write_composite(entity)
        if isinstance(entity, Function):
            return self._write_function(entity)
        if isinstance(entity, Property):
            return self._write_property(entity)
        if isinstance(entity, EnumCase):
            return self._write_enum_case(entity)
        if isinstance(entity, Argument):
            code = self._argument_code(entity)
            if entity.comment:
                code += f" // {self._one_line(entity.comment)}"
            return code
        if isinstance(entity, GenericParameter):
            return self._generic_parameter(entity)
        if isinstance(entity, Specifications):
            return self.write_specifications(entity)
        return type_name(entity)  # type: ignore[arg-type]

    def write_specifications(self, specs: Specifications) -> str:
        """Every entity of a batch, blank-line separated, newline terminated."""
        entities: list[object] = [
            *specs.enums,
            *specs.protocols,
            *specs.structs,
            *specs.classes,
            *specs.functions,
            *specs.extensions,
        ]
        if not entities:
            return ""
        return "\n\n".join(self.write(e) for e in entities) + "\n"

    # ── Composites ─────────────────────────────────────────────

    def _write_composite(self, composite: Composite) -> str:
        head: list[str] = []
        if composite.accessibility.keyword:
            head.append(composite.accessibility.keyword)
        allowed = _COMPOSITE_ATTRIBUTES.get(composite.kind, frozenset())
        head.extend(a.keyword for a in sorted_attributes(composite.attributes, allowed))
        head.append(composite.kind.value)
        head.append(composite.name)
        header = " ".join(head)
        if composite.inherited_types:
            header += ": " + ", ".join(composite.inherited_types)

        groups: list[str] = []
        nested = (
            composite.enums + composite.structs + composite.classes + composite.protocols
        )
        if nested:
            groups.append("\n\n".join(self.write(c) for c in nested))
        if composite.cases:
            groups.append(
                self._section("Cases", [self.write(c) for c in composite.cases], "\n")
            )
        if composite.properties:
            groups.append(
                self._section("Properties", [self.write(p) for p in composite.properties])
            )
        if composite.initializers:
            groups.append(
                self._section(
                    "Initializers", [self.write(f) for f in composite.initializers]
                )
            )
        if composite.methods:
            groups.append(
                self._section("Methods", [self.write(f) for f in composite.methods])
            )

        lines = [self._doc(composite.comment) + header + " {"]
        for group in groups:
            lines.append("")
            lines.append(self._indent(group, 1))
        lines.append("}")
        return "\n".join(lines)

    @staticmethod
    def _section(title: str, members: list[str], separator: str = "\n\n") -> str:
        return f"// MARK: - {title}\n\n" + separator.join(members)

    # ── Functions ──────────────────────────────────────────────

    def _write_function(self, fn: Function) -> str:
        head: list[str] = []
        if fn.accessibility.keyword:
            head.append(fn.accessibility.keyword)
        head.extend(
            a.keyword for a in sorted_attributes(fn.attributes, _FUNCTION_ATTRIBUTES)
        )
        if fn.kind.keyword:
            head.append(fn.kind.keyword)
        if not fn.is_constructor:
            head.append("func")
        signature = fn.base_name
        if fn.generics:
            signature += "<" + ", ".join(self.write(g) for g in fn.generics) + ">"
        signature += self._arguments(fn.arguments)
        head.append(signature)

        text = self._doc(fn.comment) + " ".join(head)
        if fn.return_type is not None and fn.return_type != VOID and not fn.is_constructor:
            text += f" -> {type_name(fn.return_type)}"
        return text + self._body(fn.body)

    @staticmethod
    def _generic_parameter(param: GenericParameter) -> str:
        if not param.constraints:
            return param.name
        return f"{param.name}: " + " & ".join(param.constraints)

    def _arguments(self, arguments: tuple[Argument, ...]) -> str:
        if not arguments:
            return "()"
        last = len(arguments) - 1
        codes = [
            self._argument_code(arg) + ("," if i < last else "")
            for i, arg in enumerate(arguments)
        ]
        if any(arg.comment for arg in arguments):
            width = max(len(code) for code in codes)
            lines = [
                f"{code.ljust(width)} // {self._one_line(arg.comment)}"
                if arg.comment
                else code
                for code, arg in zip(codes, arguments)
            ]
        else:
            lines = codes
        return "(\n" + self._indent("\n".join(lines), 1) + "\n)"

    @staticmethod
    def _argument_code(arg: Argument) -> str:
        ty = type_name(arg.type)
        if not arg.external_name:
            code = ty
        elif arg.external_name == arg.internal_name or not arg.internal_name:
            code = f"{arg.external_name}: {ty}"
        else:
            code = f"{arg.external_name} {arg.internal_name}: {ty}"
        if arg.default_value is not None:
            code += f" = {arg.default_value}"
        return code

    # ── Properties and cases ───────────────────────────────────

    def _write_property(self, prop: Property) -> str:
        head: list[str] = []
        if prop.accessibility.keyword:
            head.append(prop.accessibility.keyword)
        if prop.storage.value:
            head.append(prop.storage.value)
        head.append(prop.declaration_kind.value)
        head.append(prop.name)
        text = self._doc(prop.comment) + " ".join(head)
        has_default = prop.default_value is not None
        if not (prop.skip_type and has_default) and not self._is_unknown(prop.type):
            text += f": {type_name(prop.type)}"
        if has_default:
            text += f" = {prop.default_value}"
        return text + self._body(prop.body)

    def _write_enum_case(self, case: EnumCase) -> str:
        text = self._doc(case.comment) + f"case {case.name}"
        if case.arguments:
            text += "(" + ", ".join(self._argument_code(a) for a in case.arguments) + ")"
        if case.default_value is not None:
            text += f" = {case.default_value}"
        return text

    # ── Helpers ────────────────────────────────────────────────

    @staticmethod
    def _is_unknown(ty: TypeSignature) -> bool:
        return ty == NamedType("")

    @staticmethod
    def _doc(comment: str | None) -> str:
        if not comment:
            return ""
        lines = [
            f"/// {line.rstrip()}" if line.strip() else "///"
            for line in comment.splitlines()
        ]
        return "\n".join(lines) + "\n"

    @staticmethod
    def _one_line(comment: str | None) -> str:
        return " ".join((comment or "").split())

    def _body(self, body: str | None) -> str:
        if body is None:
            return ""
        if not body.strip():
            return " {}"
        text = body.rstrip()
        code = LexemeString(text)
        if text.endswith("}") and code.code_text().count("}") > code.code_text().count("{"):
            text = text[:-1].rstrip()
            if not text.strip():
                return " {}"
        lines = text.split("\n")
        while lines and not lines[0].strip():
            lines.pop(0)
        block = textwrap.dedent("\n".join(line.rstrip() for line in lines))
        return " {\n" + self._indent(block, 1) + "\n}"

    @staticmethod
    def _indent(text: str, levels: int) -> str:
        prefix = "    " * levels
        return "\n".join(prefix + line if line else line for line in text.splitlines())
