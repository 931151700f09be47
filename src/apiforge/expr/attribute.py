"""Attribute expressions: typed fields of errors, params, headers and bodies."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from apiforge.eval.diagnostics import ValidationErrors
from apiforge.expr.base import Described, Documented, Expression

if TYPE_CHECKING:
    from apiforge.expr.api import DocsExpr


PRIMITIVE_TYPES = frozenset(
    {
        "Any",
        "Boolean",
        "Bytes",
        "Float32",
        "Float64",
        "Int",
        "Int32",
        "Int64",
        "String",
        "UInt",
        "UInt32",
        "UInt64",
    }
)


@dataclass
class AttributeExpr(Expression, Described, Documented):
    name: str
    type: str = "String"
    description: str = ""
    docs: "DocsExpr | None" = None

    def eval_name(self) -> str:
        return f'attribute "{self.name}"'


@dataclass
class MappedAttributeExpr(Expression):
    """Ordered attributes with an optional element name for each.

    The element name is the transport-level name, e.g. the header name an
    attribute is read from. It defaults to the attribute name.

    Attributes:
        attributes: Attribute expressions keyed by attribute name
        mapping: Attribute name -> element name, for renamed attributes only
        required: Names of the attributes that must be present
    """

    attributes: dict[str, AttributeExpr] = field(default_factory=dict)
    mapping: dict[str, str] = field(default_factory=dict)
    required: list[str] = field(default_factory=list)

    @staticmethod
    def parse_name(spec: str) -> tuple[str, str]:
        """Split "name:element" into its parts; element defaults to name."""
        name, _, element = spec.partition(":")
        name = name.strip()
        return name, element.strip() or name

    def add(self, spec: str, type: str = "String") -> AttributeExpr:
        """Add (or replace) the attribute described by "name[:element]"."""
        name, element = self.parse_name(spec)
        attr = AttributeExpr(name=name, type=type)
        self.attributes[name] = attr
        if element != name:
            self.mapping[name] = element
        else:
            self.mapping.pop(name, None)
        return attr

    def element_name(self, name: str) -> str:
        return self.mapping.get(name, name)

    def require(self, *names: str) -> None:
        for name in names:
            if name not in self.required:
                self.required.append(name)

    def copy(self) -> MappedAttributeExpr:
        return copy.deepcopy(self)

    def __len__(self) -> int:
        return len(self.attributes)

    def validate(self, context: str, parent: Any) -> ValidationErrors:
        """Check attribute types, required names and element name clashes.

        Args:
            context: What the map holds, e.g. "parameters" or "headers"
            parent: Node the diagnostics are reported against
        """
        verr = ValidationErrors()
        seen: dict[str, str] = {}
        for name, attr in self.attributes.items():
            if not name:
                verr.add(parent, "%s contain an attribute with an empty name", context)
                continue
            if not isinstance(attr.type, str) or attr.type not in PRIMITIVE_TYPES:
                verr.add(
                    parent,
                    "%s attribute %s has unknown type %s",
                    context,
                    name,
                    attr.type,
                )
            element = self.element_name(name)
            if element in seen:
                verr.add(
                    parent,
                    "%s attributes %s and %s both map to %s",
                    context,
                    seen[element],
                    name,
                    element,
                )
            seen[element] = name
        for name in self.required:
            if name not in self.attributes:
                verr.add(parent, "required %s attribute %s is not defined", context, name)
        return verr
