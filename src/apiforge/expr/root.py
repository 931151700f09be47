"""Root of the design tree.

One RootExpr holds everything a single evaluation defines. It is created by
the Pipeline that evaluates the design and is never shared between
evaluations.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from apiforge.config import DesignConfig
from apiforge.eval.diagnostics import ValidationErrors
from apiforge.expr.api import APIExpr
from apiforge.expr.base import Expression
from apiforge.expr.http import HTTPExpr
from apiforge.expr.http_service import HTTPServiceExpr
from apiforge.expr.service import ErrorExpr, ServiceExpr


@dataclass(eq=False)
class RootExpr(Expression):
    """The API, its services and the API-wide errors.

    Attributes:
        config: Evaluation settings
        api: The API declaration, None until declared
        services: Services keyed by name, in declaration order
        errors: Errors shared by all services
        http: HTTP settings, services and error responses
    """

    config: DesignConfig = field(default_factory=DesignConfig)
    api: APIExpr | None = None
    services: dict[str, ServiceExpr] = field(default_factory=dict)
    errors: list[ErrorExpr] = field(default_factory=list)
    http: HTTPExpr = field(default_factory=HTTPExpr)

    def __post_init__(self) -> None:
        self.http.path = self.config.root_path

    def eval_name(self) -> str:
        return "design"

    def service(self, name: str) -> ServiceExpr | None:
        return self.services.get(name)

    def add_service(self, service: ServiceExpr) -> HTTPServiceExpr:
        """Register a service and create its HTTP binding."""
        self.services[service.name] = service
        http_service = HTTPServiceExpr(service=service, root=self)
        self.http.add_service(http_service)
        return http_service

    def error(self, name: str) -> ErrorExpr | None:
        """API-wide error with the given name, if any."""
        for erro in self.errors:
            if erro.name == name:
                return erro
        return None

    def prepare(self) -> None:
        for erro in self.http.errors:
            erro.prepare(self.error(erro.name))
        for http_service in self.http.services.values():
            http_service.prepare()

    def validate(self) -> ValidationErrors:
        """Check the invariants of the whole tree.

        Every node is visited; problems are accumulated, never raised.
        """
        verr = ValidationErrors()
        if self.api is None:
            verr.add(self, "API not defined")
        else:
            verr.merge(self.api.validate())
        for erro in self.errors:
            verr.merge(erro.validate())
        for service in self.services.values():
            verr.merge(service.validate())
            http_service = self.http.service(service.name)
            if http_service is not None:
                verr.merge(http_service.validate())
        return verr
