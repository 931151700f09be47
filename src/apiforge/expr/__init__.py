"""Design expression tree.

Usage:
    from apiforge.expr import RootExpr, HTTPServiceExpr

    svc = root.http.service("users")
    svc.full_paths()    # ["/users"]
    svc.uri_template()  # "/users/{id}"
"""

from apiforge.expr.api import APIExpr, ContactExpr, DocsExpr, LicenseExpr, ServerExpr
from apiforge.expr.attribute import PRIMITIVE_TYPES, AttributeExpr, MappedAttributeExpr
from apiforge.expr.base import Described, Documented, Expression, Linked, Named, Served
from apiforge.expr.http import (
    HTTP_METHODS,
    HTTPEndpointExpr,
    HTTPErrorExpr,
    HTTPExpr,
    HTTPFileServerExpr,
    HTTPResponseExpr,
    RouteExpr,
)
from apiforge.expr.http_service import HTTPServiceExpr
from apiforge.expr.root import RootExpr
from apiforge.expr.service import ErrorExpr, MethodExpr, ServiceExpr, default_error_attribute

__all__ = [
    # Capabilities
    "Described",
    "Documented",
    "Expression",
    "Linked",
    "Named",
    "Served",
    # API
    "APIExpr",
    "ContactExpr",
    "DocsExpr",
    "LicenseExpr",
    "ServerExpr",
    # Attributes
    "AttributeExpr",
    "MappedAttributeExpr",
    "PRIMITIVE_TYPES",
    # Services
    "ErrorExpr",
    "MethodExpr",
    "ServiceExpr",
    "default_error_attribute",
    # HTTP
    "HTTP_METHODS",
    "HTTPEndpointExpr",
    "HTTPErrorExpr",
    "HTTPExpr",
    "HTTPFileServerExpr",
    "HTTPResponseExpr",
    "HTTPServiceExpr",
    "RouteExpr",
    # Root
    "RootExpr",
]
