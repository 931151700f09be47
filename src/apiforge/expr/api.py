"""API-level expressions: the API itself and its descriptive metadata."""

from __future__ import annotations

from dataclasses import dataclass, field

from apiforge.eval.diagnostics import ValidationErrors
from apiforge.expr.base import Described, Documented, Expression, Linked, Named, Served


@dataclass
class ContactExpr(Expression, Named, Linked):
    name: str = ""
    email: str = ""
    url: str = ""

    def eval_name(self) -> str:
        return "contact"


@dataclass
class LicenseExpr(Expression, Named, Linked):
    name: str = ""
    url: str = ""

    def eval_name(self) -> str:
        return "license"


@dataclass
class DocsExpr(Expression, Described, Linked):
    """External documentation link."""

    description: str = ""
    url: str = ""

    def eval_name(self) -> str:
        return "documentation"


@dataclass
class ServerExpr(Expression, Described):
    """A host serving the API or one of its services."""

    url: str
    description: str = ""

    def eval_name(self) -> str:
        return f'server "{self.url}"'

    def validate(self) -> ValidationErrors:
        verr = ValidationErrors()
        if not self.url:
            verr.add(self, "Server URL cannot be empty")
        return verr


@dataclass
class APIExpr(Expression, Described, Documented, Served):
    """The API being designed. There is at most one per evaluation.

    Attributes:
        name: API name, used by generators to name packages
        title: Title used in documentation
        version: API version; one design describes one version
        terms_of_service: Terms of use or a link to them
        servers: Hosts in declaration order
    """

    name: str
    title: str = ""
    description: str = ""
    version: str = ""
    terms_of_service: str = ""
    contact: ContactExpr | None = None
    license: LicenseExpr | None = None
    docs: DocsExpr | None = None
    servers: list[ServerExpr] = field(default_factory=list)

    def eval_name(self) -> str:
        if not self.name:
            return "unnamed API"
        return f'API "{self.name}"'

    def validate(self) -> ValidationErrors:
        verr = ValidationErrors()
        if not self.name:
            verr.add(self, "API name cannot be empty")
        for server in self.servers:
            verr.merge(server.validate())
        return verr
