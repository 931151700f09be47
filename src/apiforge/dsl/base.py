"""Shared state of the builder mixins."""

from __future__ import annotations

from typing import Any, Callable

from apiforge.eval.context import EvalContext
from apiforge.expr.root import RootExpr

# A design body receives the Design object and defines the current node
# through it.
Body = Callable[[Any], Any]


class DSLBase:
    """Root being built and the context tracking the current node."""

    def __init__(self, root: RootExpr, context: EvalContext):
        self.root = root
        self.context = context

    def _run(self, body: Body | None, target: Any) -> bool:
        """Run body with target as the current node."""
        return self.context.execute(body, target, self)
