"""Design evaluation engine.

Provides the construction stack used by builder calls, the diagnostic
values they record and the pipeline that runs a design through its build,
prepare and validate phases.

Usage:
    from apiforge.eval.pipeline import Pipeline

    result = Pipeline().run(design)
    for diag in result.diagnostics:
        print(diag)
"""

from apiforge.eval.context import TOP, EvalContext, TopExpr
from apiforge.eval.diagnostics import (
    Diagnostic,
    DiagnosticKind,
    EvalError,
    FatalEvalError,
    ValidationErrors,
)

__all__ = [
    "TOP",
    "Diagnostic",
    "DiagnosticKind",
    "EvalContext",
    "EvalError",
    "FatalEvalError",
    "TopExpr",
    "ValidationErrors",
]
