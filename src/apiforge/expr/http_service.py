"""HTTP service expression: path inheritance and service-level validation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from urllib.parse import SplitResult, urlsplit

from apiforge.config import SchemeMode
from apiforge.eval.diagnostics import ValidationErrors
from apiforge.expr.attribute import MappedAttributeExpr
from apiforge.expr.base import Expression
from apiforge.expr.http import (
    HTTPEndpointExpr,
    HTTPErrorExpr,
    HTTPFileServerExpr,
)
from apiforge.expr.paths import clean_path, is_absolute_override, join_paths
from apiforge.expr.service import ErrorExpr, MethodExpr, ServiceExpr

if TYPE_CHECKING:
    from apiforge.expr.root import RootExpr


def _parse_url(url: str) -> SplitResult | None:
    """Split url, returning None when it is not a valid URL."""
    try:
        parts = urlsplit(url)
        parts.port  # raises ValueError on a malformed port
    except ValueError:
        return None
    return parts


@dataclass(eq=False)
class HTTPServiceExpr(Expression):
    """HTTP binding of a service.

    The parent service and the canonical endpoint are referenced by name and
    resolved on each use, so services may be declared in any order.

    Attributes:
        service: The transport-independent service this binds
        root: Root of the design, used to resolve names and the API root path
        paths: Common path prefixes of all the service endpoints
        params: Path and query parameters common to all endpoints
        headers: Request headers common to all endpoints
        parent_name: Name of the parent service, if any
        canonical_endpoint_name: Endpoint used to compute hrefs to the service
        endpoints: HTTP endpoints in declaration order
        http_errors: Error responses that apply to all endpoints
        file_servers: Static file endpoints
    """

    service: ServiceExpr
    root: "RootExpr" = field(repr=False)
    paths: list[str] = field(default_factory=list)
    params: MappedAttributeExpr | None = None
    headers: MappedAttributeExpr | None = None
    parent_name: str = ""
    canonical_endpoint_name: str = ""
    endpoints: list[HTTPEndpointExpr] = field(default_factory=list)
    http_errors: list[HTTPErrorExpr] = field(default_factory=list)
    file_servers: list[HTTPFileServerExpr] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.service.name

    @property
    def description(self) -> str:
        return self.service.description

    def eval_name(self) -> str:
        return self.service.eval_name()

    def schemes(self, mode: SchemeMode | None = None) -> list[str] | None:
        """Sorted, deduplicated URL schemes of the service servers, or None.

        Args:
            mode: Collection mode; defaults to the design configuration
        """
        if mode is None:
            mode = self.root.config.scheme_mode
        schemes: set[str] = set()
        for server in self.service.servers:
            parts = _parse_url(server.url)
            if mode is SchemeMode.PARSED:
                if parts is not None and parts.scheme:
                    schemes.add(parts.scheme)
            elif parts is None:
                scheme, sep, _ = server.url.partition(":")
                if sep and scheme:
                    schemes.add(scheme.lower())
        if not schemes:
            return None
        return sorted(schemes)

    def error(self, name: str) -> ErrorExpr | None:
        """Error with the given name, looked up in the service then the API."""
        erro = self.service.error(name)
        if erro is not None:
            return erro
        return self.root.error(name)

    def endpoint(self, name: str) -> HTTPEndpointExpr | None:
        for endpoint in self.endpoints:
            if endpoint.name == name:
                return endpoint
        return None

    def endpoint_for(self, name: str, method: MethodExpr) -> HTTPEndpointExpr:
        """Return the endpoint with the given name, creating it if needed."""
        endpoint = self.endpoint(name)
        if endpoint is not None:
            return endpoint
        endpoint = HTTPEndpointExpr(method=method, service=self)
        self.endpoints.append(endpoint)
        return endpoint

    def canonical_endpoint(self) -> HTTPEndpointExpr | None:
        name = self.canonical_endpoint_name or self.root.config.default_canonical_endpoint
        return self.endpoint(name)

    def uri_template(self) -> str:
        """URI template of the canonical endpoint, "" if it has no route."""
        endpoint = self.canonical_endpoint()
        if endpoint is None or not endpoint.routes:
            return ""
        return endpoint.routes[0].full_paths()[0]

    def parent(self) -> HTTPServiceExpr | None:
        if not self.parent_name:
            return None
        return self.root.http.service(self.parent_name)

    def http_error(self, name: str) -> HTTPErrorExpr | None:
        for erro in self.http_errors:
            if erro.name == name:
                return erro
        return None

    def full_paths(self) -> list[str]:
        """Base paths of the service endpoints.

        Own path fragments are joined onto the full paths of the parent
        canonical route, or onto the API root path when there is no parent.
        Fragments starting with "//" are used as is.
        """
        return self._full_paths(frozenset())

    def _full_paths(self, visiting: frozenset[str]) -> list[str]:
        if not self.paths:
            return [join_paths(self.root.http.path) or "/"]
        visiting = visiting | {self.name}
        paths: list[str] = []
        for fragment in self.paths:
            if is_absolute_override(fragment):
                paths.append(clean_path(fragment))
                continue
            for base in self._base_paths(visiting):
                paths.append(clean_path(join_paths(base, fragment)))
        return paths

    def _base_paths(self, visiting: frozenset[str]) -> list[str]:
        parent = self.parent()
        if parent is None or parent.name in visiting:
            return [self.root.http.path]
        endpoint = parent.canonical_endpoint()
        if endpoint is None or not endpoint.routes:
            # Reported by validate(); fall back to the API root.
            return [self.root.http.path]
        return [join_paths(p) for p in endpoint.routes[0]._full_paths(visiting)]

    def _in_parent_cycle(self) -> bool:
        """True when following parent links leads back to this service."""
        seen = {self.name}
        current = self.parent()
        while current is not None:
            if current.name in seen:
                return current.name == self.name
            seen.add(current.name)
            current = current.parent()
        return False

    def prepare(self) -> None:
        """Materialize the error response shapes."""
        for erro in self.http_errors:
            erro.prepare(self.error(erro.name))

    def validate(self) -> ValidationErrors:
        verr = ValidationErrors()
        if self.params is not None:
            verr.merge(self.params.validate("parameters", self))
        if self.headers is not None:
            verr.merge(self.headers.validate("headers", self))

        if self.parent_name:
            parent = self.root.http.service(self.parent_name)
            if parent is None:
                verr.add(self, "Parent service %s not found", self.parent_name)
            else:
                endpoint = parent.canonical_endpoint()
                if endpoint is None or not endpoint.routes:
                    verr.add(self, "Parent service %s has no canonical endpoint", self.parent_name)
                if parent.parent_name == self.name:
                    verr.add(self, "Parent service %s is also child", self.parent_name)
                elif self._in_parent_cycle():
                    verr.add(self, "Parent chain of service %s forms a cycle", self.name)

        if self.canonical_endpoint_name:
            if self.endpoint(self.canonical_endpoint_name) is None:
                verr.add(self, "Unknown canonical endpoint %s", self.canonical_endpoint_name)

        for endpoint in self.endpoints:
            verr.merge(endpoint.validate())
        for file_server in self.file_servers:
            verr.merge(file_server.validate())

        # Errors have status codes and well-formed bodies
        for erro in self.http_errors:
            verr.merge(erro.validate(self.error(erro.name)))
        for erro in self.root.http.errors:
            # API errors have no validation pass of their own and are
            # checked again for every service.
            verr.merge(erro.validate(self.error(erro.name)))

        return verr
