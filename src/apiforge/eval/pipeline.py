"""Evaluation pipeline: build, prepare and validate a design.

Each phase requires the previous one to have completed:
1. build: runs the design callables, recording structural diagnostics
2. prepare: materializes derived expressions (error response shapes)
3. validate: checks the invariants of the finished tree

Usage:
    pipeline = Pipeline()
    result = pipeline.run(design)
    if not result.ok:
        for diag in result.diagnostics:
            print(diag)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from apiforge.config import DesignConfig
from apiforge.dsl import Design
from apiforge.eval.context import EvalContext
from apiforge.eval.diagnostics import (
    Diagnostic,
    DiagnosticKind,
    EvalError,
    FatalEvalError,
)
from apiforge.expr.root import RootExpr

logger = logging.getLogger(__name__)

DesignFn = Callable[[Design], Any]


class Phase(Enum):
    NEW = 0
    BUILT = 1
    PREPARED = 2
    VALIDATED = 3


class PipelineError(EvalError):
    """A phase was run before the phase it depends on."""
    pass


@dataclass
class DesignResult:
    """Outcome of evaluating a design.

    Attributes:
        root: The design tree (possibly incomplete when diagnostics exist)
        diagnostics: Every diagnostic of every phase, in the order produced
    """

    root: RootExpr
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.diagnostics

    def _of_kind(self, kind: DiagnosticKind) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.kind is kind]

    @property
    def structural(self) -> list[Diagnostic]:
        return self._of_kind(DiagnosticKind.STRUCTURAL)

    @property
    def validation(self) -> list[Diagnostic]:
        return self._of_kind(DiagnosticKind.VALIDATION)

    @property
    def fatal(self) -> list[Diagnostic]:
        return self._of_kind(DiagnosticKind.FATAL)

    def messages(self) -> list[str]:
        return [d.message for d in self.diagnostics]


class Pipeline:
    """Evaluates designs into one RootExpr.

    A pipeline is single use: build() may only run once. Create a new
    pipeline for each independent evaluation.
    """

    def __init__(self, config: DesignConfig | None = None):
        self.config = config or DesignConfig()
        self.root = RootExpr(config=self.config)
        self.context = EvalContext()
        self.design = Design(self.root, self.context)
        self.phase = Phase.NEW
        self.diagnostics: list[Diagnostic] = []

    def _require(self, phase: Phase, action: str) -> None:
        if self.phase.value < phase.value:
            raise PipelineError(f"cannot {action} before the design is {phase.name.lower()}")

    def build(self, *designs: DesignFn) -> bool:
        """Run the design callables in order.

        A design that records diagnostics does not prevent the following
        ones from running. A fatal error aborts the remaining designs.

        Returns:
            True if no structural or fatal diagnostic was recorded
        """
        if self.phase is not Phase.NEW:
            raise PipelineError("design already built")
        self.context.begin()
        fatal: Diagnostic | None = None
        try:
            for index, design in enumerate(designs):
                try:
                    design(self.design)
                except FatalEvalError as exc:
                    logger.warning("Design evaluation aborted: %s", exc)
                    fatal = Diagnostic(kind=DiagnosticKind.FATAL, message=str(exc))
                    break
                except Exception as exc:
                    self.context.report_error(
                        "design function raised %s: %s", type(exc).__name__, exc
                    )
                logger.debug("Evaluated design %d of %d", index + 1, len(designs))
        finally:
            self.context.end()

        self.diagnostics.extend(self.context.errors)
        if fatal is not None:
            self.diagnostics.append(fatal)
        self.phase = Phase.BUILT
        logger.debug(
            "Built design with %d service(s), %d diagnostic(s)",
            len(self.root.services),
            len(self.diagnostics),
        )
        return not self.diagnostics

    def prepare(self) -> None:
        """Materialize derived expressions. Runs once; later calls are no-ops."""
        self._require(Phase.BUILT, "prepare")
        if self.phase is Phase.BUILT:
            self.root.prepare()
            self.phase = Phase.PREPARED

    def validate(self) -> list[Diagnostic]:
        """Return the validation diagnostics of the prepared tree.

        May be called repeatedly; an unmodified tree yields the same list.
        """
        self._require(Phase.PREPARED, "validate")
        diagnostics = list(self.root.validate())
        self.phase = Phase.VALIDATED
        logger.debug("Validated design: %d diagnostic(s)", len(diagnostics))
        return diagnostics

    def run(self, *designs: DesignFn) -> DesignResult:
        """Build, prepare and validate, returning every diagnostic."""
        self.build(*designs)
        self.prepare()
        diagnostics = self.diagnostics + self.validate()
        return DesignResult(root=self.root, diagnostics=diagnostics)


def run_design(*designs: DesignFn, config: DesignConfig | None = None) -> DesignResult:
    """Evaluate designs with a fresh pipeline."""
    return Pipeline(config).run(*designs)
