"""HTTP transport expressions: routes, endpoints, responses, errors and file servers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from apiforge.eval.diagnostics import ValidationErrors
from apiforge.expr.api import DocsExpr
from apiforge.expr.attribute import MappedAttributeExpr
from apiforge.expr.base import Described, Documented, Expression
from apiforge.expr.paths import (
    balanced_braces,
    clean_path,
    is_absolute_override,
    join_paths,
    path_params,
)
from apiforge.expr.service import ErrorExpr, MethodExpr, default_error_attribute

if TYPE_CHECKING:
    from apiforge.expr.http_service import HTTPServiceExpr


HTTP_METHODS = ("GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE", "CONNECT")


@dataclass(eq=False)
class HTTPExpr(Expression):
    """API-wide HTTP settings.

    Attributes:
        path: Root path prefixed to every service path
        services: HTTP services keyed by service name, in declaration order
        errors: HTTP error responses shared by all services
    """

    path: str = "/"
    services: dict[str, "HTTPServiceExpr"] = field(default_factory=dict)
    errors: list["HTTPErrorExpr"] = field(default_factory=list)

    def eval_name(self) -> str:
        return "HTTP"

    def service(self, name: str) -> "HTTPServiceExpr | None":
        return self.services.get(name)

    def add_service(self, svc: "HTTPServiceExpr") -> None:
        self.services[svc.name] = svc

    def http_error(self, name: str) -> "HTTPErrorExpr | None":
        for erro in self.errors:
            if erro.name == name:
                return erro
        return None


@dataclass(eq=False)
class RouteExpr(Expression):
    """An HTTP method and path template pair."""

    method: str
    path: str
    endpoint: "HTTPEndpointExpr" = field(repr=False)

    def eval_name(self) -> str:
        return f"route {self.method} {self.path} of {self.endpoint.eval_name()}"

    def full_paths(self) -> list[str]:
        """Route path prefixed with each of the service full paths."""
        return self._full_paths(frozenset())

    def _full_paths(self, visiting: frozenset[str]) -> list[str]:
        if is_absolute_override(self.path):
            return [clean_path(self.path)]
        return [
            clean_path(join_paths(base, self.path))
            for base in self.endpoint.service._full_paths(visiting)
        ]

    def params(self) -> list[str]:
        """Template variables of the first full path."""
        return path_params(self.full_paths()[0])

    def validate(self) -> ValidationErrors:
        verr = ValidationErrors()
        if self.method not in HTTP_METHODS:
            verr.add(self, "invalid HTTP method %s", self.method)
        for full_path in self.full_paths():
            if not balanced_braces(full_path):
                verr.add(self, "path %s has unbalanced braces", full_path)
                continue
            seen: set[str] = set()
            for name in path_params(full_path):
                if name in seen:
                    verr.add(self, "path variable %s appears more than once in %s", name, full_path)
                seen.add(name)
        return verr


@dataclass(eq=False)
class HTTPEndpointExpr(Expression):
    """The HTTP binding of a service method."""

    method: MethodExpr
    service: "HTTPServiceExpr" = field(repr=False)
    routes: list[RouteExpr] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.method.name

    def eval_name(self) -> str:
        return f'HTTP endpoint "{self.name}" of service "{self.service.name}"'

    def add_route(self, method: str, path: str) -> RouteExpr:
        route = RouteExpr(method=method, path=path, endpoint=self)
        self.routes.append(route)
        return route

    def validate(self) -> ValidationErrors:
        verr = ValidationErrors()
        if not self.routes:
            verr.add(self, "HTTP endpoint %s has no route", self.name)
        for route in self.routes:
            verr.merge(route.validate())
        return verr


@dataclass(eq=False)
class HTTPResponseExpr(Expression):
    """Status code, headers and body of an HTTP error response."""

    status_code: int = 0
    headers: MappedAttributeExpr = field(default_factory=MappedAttributeExpr)
    body: MappedAttributeExpr | None = None

    def eval_name(self) -> str:
        return f"HTTP response {self.status_code}"

    def body_attribute(self) -> MappedAttributeExpr:
        """Body attributes, created on first use by the DSL."""
        if self.body is None:
            self.body = MappedAttributeExpr()
        return self.body

    def prepare(self, error: ErrorExpr | None) -> None:
        """Derive the body from the error shape unless one was declared."""
        if self.body is not None:
            return
        if error is not None:
            self.body = error.shape().copy()
        else:
            self.body = default_error_attribute()

    def validate(self, parent: Any) -> ValidationErrors:
        verr = ValidationErrors()
        if not isinstance(self.status_code, int) or isinstance(self.status_code, bool):
            verr.add(parent, "invalid HTTP response status code %r", self.status_code)
        elif not self.status_code:
            verr.add(parent, "HTTP response has no status code")
        elif not 100 <= self.status_code <= 599:
            verr.add(parent, "invalid HTTP response status code %d", self.status_code)
        verr.merge(self.headers.validate("response headers", parent))
        if self.body is not None:
            verr.merge(self.body.validate("response body", parent))
        return verr


@dataclass(eq=False)
class HTTPErrorExpr(Expression):
    """The HTTP response used to return the error with the same name."""

    name: str
    response: HTTPResponseExpr = field(default_factory=HTTPResponseExpr)

    def eval_name(self) -> str:
        return f'HTTP error "{self.name}"'

    def prepare(self, error: ErrorExpr | None) -> None:
        self.response.prepare(error)

    def validate(self, error: ErrorExpr | None) -> ValidationErrors:
        """Validate the response; error is the ErrorExpr this maps, if found."""
        verr = ValidationErrors()
        if error is None:
            verr.add(self, "error %s is not defined", self.name)
        verr.merge(self.response.validate(self))
        return verr


@dataclass(eq=False)
class HTTPFileServerExpr(Expression, Described, Documented):
    """An endpoint serving static files from the given file path."""

    service: "HTTPServiceExpr" = field(repr=False)
    file_path: str
    request_paths: list[str] = field(default_factory=list)
    description: str = ""
    docs: DocsExpr | None = None

    def eval_name(self) -> str:
        return f'file server "{self.file_path}" of service "{self.service.name}"'

    def is_dir(self) -> bool:
        """True when the request path ends with a wildcard such as {*filepath}."""
        return any(p.rstrip("/").endswith("}") and "{*" in p for p in self.request_paths)

    def full_paths(self) -> list[str]:
        paths: list[str] = []
        for request_path in self.request_paths:
            if is_absolute_override(request_path):
                paths.append(clean_path(request_path))
                continue
            for base in self.service.full_paths():
                paths.append(clean_path(join_paths(base, request_path)))
        return paths

    def validate(self) -> ValidationErrors:
        verr = ValidationErrors()
        if not self.file_path:
            verr.add(self, "file server has no file path")
        if not self.request_paths:
            verr.add(self, "file server has no request path")
        return verr
