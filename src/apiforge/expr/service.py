"""Transport-independent service expressions."""

from __future__ import annotations

from dataclasses import dataclass, field

from apiforge.eval.diagnostics import ValidationErrors
from apiforge.expr.api import DocsExpr, ServerExpr
from apiforge.expr.attribute import MappedAttributeExpr
from apiforge.expr.base import Described, Documented, Expression, Served


def default_error_attribute() -> MappedAttributeExpr:
    """Shape of errors that do not declare their own attributes."""
    attr = MappedAttributeExpr()
    attr.add("name")
    attr.add("id")
    attr.add("message")
    attr.add("temporary", "Boolean")
    attr.add("timeout", "Boolean")
    attr.add("fault", "Boolean")
    attr.require("name", "id", "message", "temporary", "timeout", "fault")
    return attr


@dataclass
class ErrorExpr(Expression, Described):
    """A named error that methods of a service (or of the whole API) may return."""

    name: str
    description: str = ""
    attribute: MappedAttributeExpr = field(default_factory=MappedAttributeExpr)

    def eval_name(self) -> str:
        return f'error "{self.name}"'

    def shape(self) -> MappedAttributeExpr:
        """Declared attributes, or the default error shape when none are declared."""
        if len(self.attribute):
            return self.attribute
        return default_error_attribute()

    def validate(self) -> ValidationErrors:
        verr = ValidationErrors()
        if not self.name:
            verr.add(self, "error name cannot be empty")
        verr.merge(self.attribute.validate("error", self))
        return verr


@dataclass
class MethodExpr(Expression, Described, Documented):
    name: str
    service_name: str
    description: str = ""
    docs: DocsExpr | None = None

    def eval_name(self) -> str:
        return f'method "{self.name}" of service "{self.service_name}"'


@dataclass
class ServiceExpr(Expression, Described, Documented, Served):
    """A group of methods sharing servers and errors.

    Methods are keyed by name in declaration order.
    """

    name: str
    description: str = ""
    docs: DocsExpr | None = None
    servers: list[ServerExpr] = field(default_factory=list)
    methods: dict[str, MethodExpr] = field(default_factory=dict)
    errors: list[ErrorExpr] = field(default_factory=list)

    def eval_name(self) -> str:
        if not self.name:
            return "unnamed service"
        return f'service "{self.name}"'

    def method(self, name: str) -> MethodExpr | None:
        return self.methods.get(name)

    def error(self, name: str) -> ErrorExpr | None:
        """Service-local error with the given name, if any."""
        for erro in self.errors:
            if erro.name == name:
                return erro
        return None

    def validate(self) -> ValidationErrors:
        verr = ValidationErrors()
        for server in self.servers:
            verr.merge(server.validate())
        for erro in self.errors:
            verr.merge(erro.validate())
        return verr
