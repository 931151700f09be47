"""Evaluation context: the stack of nodes under construction.

Builder calls never receive the node they modify. They ask the context for
the current node, which the executor pushes before running a body callable
and pops afterwards. The context is owned by a single Pipeline; nothing here
is shared between evaluations.
"""

from __future__ import annotations

import logging
import traceback
from pathlib import Path
from typing import Any, Callable

from apiforge.eval.diagnostics import (
    Diagnostic,
    DiagnosticKind,
    FatalEvalError,
    subject_name,
)

logger = logging.getLogger(__name__)

_PACKAGE_DIR = Path(__file__).resolve().parents[1]


class TopExpr:
    """Marker for the top level of a design, before any node is opened."""

    def eval_name(self) -> str:
        return "top-level design"

    def __repr__(self) -> str:
        return "TOP"


TOP = TopExpr()


def _in_package(filename: str) -> bool:
    return Path(filename).resolve().is_relative_to(_PACKAGE_DIR)


def _caller_location() -> str:
    """Return "file:line" of the innermost frame outside this package."""
    for frame in reversed(traceback.extract_stack()):
        if not _in_package(frame.filename):
            return f"{frame.filename}:{frame.lineno}"
    return ""


class EvalContext:
    """Construction stack plus the structural diagnostics recorded on it.

    Usage:
        ctx = EvalContext()
        ctx.begin()
        ok = ctx.execute(body, contact, design)
        ctx.end()
    """

    def __init__(self) -> None:
        self.stack: list[Any] = []
        self.errors: list[Diagnostic] = []

    @property
    def running(self) -> bool:
        return bool(self.stack)

    def begin(self) -> None:
        """Start an evaluation with the top-level marker as current node."""
        self.stack = [TOP]
        self.errors = []

    def end(self) -> None:
        self.stack = []

    def current(self) -> Any:
        """Return the node being defined.

        Raises:
            FatalEvalError: If no evaluation is in progress
        """
        if not self.stack:
            raise FatalEvalError("no design evaluation in progress")
        return self.stack[-1]

    def push(self, node: Any) -> None:
        self.stack.append(node)

    def pop(self) -> Any:
        if len(self.stack) <= 1:
            raise FatalEvalError("evaluation stack underflow")
        return self.stack.pop()

    def report_error(self, fmt: str, *args: Any) -> None:
        """Record a structural diagnostic against the current node."""
        message = fmt % args if args else fmt
        node = self.stack[-1] if self.stack else None
        diag = Diagnostic(
            kind=DiagnosticKind.STRUCTURAL,
            message=message,
            subject=subject_name(node),
            location=_caller_location(),
        )
        logger.debug("structural diagnostic: %s", diag)
        self.errors.append(diag)

    def incompatible_dsl(self, call: str) -> None:
        """Record the use of a builder call in a node that does not support it."""
        node = self.current()
        self.report_error("invalid use of %s() in %s", call, type(node).__name__)

    def execute(self, fn: Callable[..., Any] | None, target: Any, *args: Any) -> bool:
        """Run fn with target as the current node.

        The target is popped on every exit path. Exceptions raised by fn are
        recorded as structural diagnostics, except FatalEvalError which
        aborts the evaluation.

        Returns:
            True if fn completed without recording any diagnostic
        """
        if fn is None:
            return True
        start = len(self.errors)
        self.push(target)
        try:
            fn(*args)
        except FatalEvalError:
            raise
        except Exception as exc:
            self.report_error("design function raised %s: %s", type(exc).__name__, exc)
            return False
        finally:
            self.pop()
        return len(self.errors) == start
