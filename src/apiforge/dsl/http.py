"""Builder calls describing services, methods, errors and their HTTP bindings.

Example:

    def design(d):
        def users(d):
            d.error("not_found")

            def transport(d):
                d.path("/users")
                d.response("not_found", 404)
            d.http(transport)

            def show(d):
                d.http(lambda d: d.get("/{id}"))
            d.method("show", show)

        d.service("users", users)
"""

from __future__ import annotations

from apiforge.dsl.base import Body, DSLBase
from apiforge.eval.context import TopExpr
from apiforge.expr.api import APIExpr
from apiforge.expr.attribute import AttributeExpr, MappedAttributeExpr
from apiforge.expr.http import (
    HTTPEndpointExpr,
    HTTPErrorExpr,
    HTTPExpr,
    HTTPFileServerExpr,
    HTTPResponseExpr,
    RouteExpr,
)
from apiforge.expr.http_service import HTTPServiceExpr
from apiforge.expr.service import ErrorExpr, MethodExpr, ServiceExpr


class HTTPDSL(DSLBase):
    """Service and HTTP builder calls."""

    # -------------------------------------------------------------------------
    # Services
    # -------------------------------------------------------------------------

    def service(self, name: str, body: Body | None = None) -> ServiceExpr | None:
        if not name:
            self.context.report_error("Service first argument cannot be empty")
            return None
        if not isinstance(self.context.current(), TopExpr):
            self.context.incompatible_dsl("service")
            return None
        if self.root.service(name) is not None:
            self.context.report_error('service "%s" is already defined', name)
            return None
        svc = ServiceExpr(name=name)
        self.root.add_service(svc)
        self._run(body, svc)
        return svc

    def method(self, name: str, body: Body | None = None) -> MethodExpr | None:
        current = self.context.current()
        if not isinstance(current, ServiceExpr):
            self.context.incompatible_dsl("method")
            return None
        if not name:
            self.context.report_error("Method first argument cannot be empty")
            return None
        if current.method(name) is not None:
            self.context.report_error('method "%s" is already defined', name)
            return None
        method = MethodExpr(name=name, service_name=current.name)
        current.methods[name] = method
        self._run(body, method)
        return method

    def error(self, name: str, body: Body | None = None) -> ErrorExpr | None:
        """Declare an error of the current service, or of the whole API."""
        current = self.context.current()
        if isinstance(current, APIExpr):
            errors = self.root.errors
        elif isinstance(current, ServiceExpr):
            errors = current.errors
        else:
            self.context.incompatible_dsl("error")
            return None
        if not name:
            self.context.report_error("Error first argument cannot be empty")
            return None
        erro = ErrorExpr(name=name)
        if not self._run(body, erro):
            return None
        errors.append(erro)
        return erro

    def attribute(
        self, name: str, type: str = "String", body: Body | None = None
    ) -> AttributeExpr | None:
        """Add an attribute to an error shape or an HTTP response body.

        The name may map to a different element name using "name:element".
        """
        mapped = self._attribute_map("attribute")
        if mapped is None:
            return None
        attr = mapped.add(name, type)
        self._run(body, attr)
        return attr

    def required(self, *names: str) -> None:
        mapped = self._attribute_map("required")
        if mapped is not None:
            mapped.require(*names)

    def _attribute_map(self, call: str) -> MappedAttributeExpr | None:
        current = self.context.current()
        if isinstance(current, ErrorExpr):
            return current.attribute
        if isinstance(current, HTTPResponseExpr):
            return current.body_attribute()
        self.context.incompatible_dsl(call)
        return None

    # -------------------------------------------------------------------------
    # HTTP bindings
    # -------------------------------------------------------------------------

    def http(self, body: Body) -> None:
        """Define the HTTP binding of the API, the current service or method."""
        current = self.context.current()
        if isinstance(current, APIExpr):
            target = self.root.http
        elif isinstance(current, ServiceExpr):
            target = self.root.http.service(current.name)
        elif isinstance(current, MethodExpr):
            svc = self.root.http.service(current.service_name)
            target = svc.endpoint_for(current.name, current)
        else:
            self.context.incompatible_dsl("http")
            return
        self._run(body, target)

    def path(self, path: str) -> None:
        """Set the API root path, or add a common path prefix to a service."""
        current = self.context.current()
        if isinstance(current, HTTPExpr):
            current.path = path
        elif isinstance(current, HTTPServiceExpr):
            current.paths.append(path)
        else:
            self.context.incompatible_dsl("path")

    def parent(self, name: str) -> None:
        current = self.context.current()
        if isinstance(current, HTTPServiceExpr):
            current.parent_name = name
            return
        self.context.incompatible_dsl("parent")

    def canonical_method(self, name: str) -> None:
        current = self.context.current()
        if isinstance(current, HTTPServiceExpr):
            current.canonical_endpoint_name = name
            return
        self.context.incompatible_dsl("canonical_method")

    def get(self, path: str = "") -> RouteExpr | None:
        return self._route("GET", path)

    def head(self, path: str = "") -> RouteExpr | None:
        return self._route("HEAD", path)

    def post(self, path: str = "") -> RouteExpr | None:
        return self._route("POST", path)

    def put(self, path: str = "") -> RouteExpr | None:
        return self._route("PUT", path)

    def patch(self, path: str = "") -> RouteExpr | None:
        return self._route("PATCH", path)

    def delete(self, path: str = "") -> RouteExpr | None:
        return self._route("DELETE", path)

    def options(self, path: str = "") -> RouteExpr | None:
        return self._route("OPTIONS", path)

    def _route(self, method: str, path: str) -> RouteExpr | None:
        current = self.context.current()
        if isinstance(current, HTTPEndpointExpr):
            return current.add_route(method, path)
        self.context.incompatible_dsl(method.lower())
        return None

    def param(self, name: str, type: str = "String") -> AttributeExpr | None:
        """Declare a path or query parameter common to the service endpoints."""
        current = self.context.current()
        if not isinstance(current, HTTPServiceExpr):
            self.context.incompatible_dsl("param")
            return None
        if current.params is None:
            current.params = MappedAttributeExpr()
        return current.params.add(name, type)

    def header(self, name: str, type: str = "String") -> AttributeExpr | None:
        """Declare a request header of a service or a header of a response."""
        current = self.context.current()
        if isinstance(current, HTTPServiceExpr):
            if current.headers is None:
                current.headers = MappedAttributeExpr()
            return current.headers.add(name, type)
        if isinstance(current, HTTPResponseExpr):
            return current.headers.add(name, type)
        self.context.incompatible_dsl("header")
        return None

    def response(
        self, name: str, status: int = 0, body: Body | None = None
    ) -> HTTPErrorExpr | None:
        """Map the error with the given name to an HTTP response."""
        current = self.context.current()
        if isinstance(current, HTTPExpr):
            errors = current.errors
            existing = current.http_error(name)
        elif isinstance(current, HTTPServiceExpr):
            errors = current.http_errors
            existing = current.http_error(name)
        else:
            self.context.incompatible_dsl("response")
            return None
        if not name:
            self.context.report_error("Response first argument cannot be empty")
            return None
        if existing is not None:
            self.context.report_error('response for error "%s" is already defined', name)
            return None
        erro = HTTPErrorExpr(name=name, response=HTTPResponseExpr(status_code=status))
        if not self._run(body, erro.response):
            return None
        errors.append(erro)
        return erro

    def files(
        self, path: str, filename: str, body: Body | None = None
    ) -> HTTPFileServerExpr | None:
        """Serve filename (a file or a directory) under the request path."""
        current = self.context.current()
        if not isinstance(current, HTTPServiceExpr):
            self.context.incompatible_dsl("files")
            return None
        file_server = HTTPFileServerExpr(
            service=current,
            file_path=filename,
            request_paths=[path] if path else [],
        )
        if not self._run(body, file_server):
            return None
        current.file_servers.append(file_server)
        return file_server
