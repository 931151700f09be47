"""apiforge: declarative API design evaluation.

Designs are Python callables that describe an API, its servers, services and
HTTP endpoints through builder calls. Evaluating a design produces a
validated expression tree for code and documentation generators.

Usage:
    from apiforge import run_design

    def design(d):
        def users(d):
            d.http(lambda d: d.path("/users"))
        d.api("accounts")
        d.service("users", users)

    result = run_design(design)
    users = result.root.http.service("users")
    users.full_paths()  # ["/users"]
"""

from apiforge.config import DesignConfig, SchemeMode
from apiforge.dsl import Design
from apiforge.eval import Diagnostic, DiagnosticKind, EvalError, FatalEvalError
from apiforge.eval.pipeline import DesignResult, Phase, Pipeline, PipelineError, run_design

__all__ = [
    "Design",
    "DesignConfig",
    "DesignResult",
    "Diagnostic",
    "DiagnosticKind",
    "EvalError",
    "FatalEvalError",
    "Phase",
    "Pipeline",
    "PipelineError",
    "SchemeMode",
    "run_design",
]
