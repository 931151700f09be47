"""Capabilities shared by design expressions.

Builder calls dispatch on these mixins rather than on concrete classes: a
setter accepts the current node when the node has the matching capability.
A new expression type opts into existing builder calls by inheriting the
mixins it supports.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from apiforge.expr.api import DocsExpr, ServerExpr


class Expression:
    """Base class of every node of the design tree."""

    def eval_name(self) -> str:
        return type(self).__name__


class Described:
    """Node accepting description()."""

    description: str = ""


class Documented:
    """Node accepting docs()."""

    docs: "DocsExpr | None" = None


class Served:
    """Node accepting server()."""

    servers: "list[ServerExpr]"


class Named:
    """Node accepting name()."""

    name: str = ""


class Linked:
    """Node accepting url()."""

    url: str = ""
