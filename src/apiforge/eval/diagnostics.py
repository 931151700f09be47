"""Diagnostic values produced while evaluating a design.

Diagnostics are plain values. Builder calls record STRUCTURAL diagnostics as
they run, the validation phase returns VALIDATION diagnostics all at once,
and a FATAL diagnostic marks an evaluation that had to be aborted.

Usage:
    verr = ValidationErrors()
    verr.add(service, "Parent service %s not found", "users")
    for diag in verr:
        print(diag)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator


class DiagnosticKind(str, Enum):
    """Where in the pipeline a diagnostic was produced."""

    STRUCTURAL = "structural"
    VALIDATION = "validation"
    FATAL = "fatal"


class EvalError(Exception):
    """Programming error in the use of the evaluation engine."""
    pass


class FatalEvalError(EvalError):
    """Configuration error that aborts the whole evaluation run."""
    pass


@dataclass(frozen=True)
class Diagnostic:
    """A single problem found in a design.

    Attributes:
        kind: Pipeline stage that produced the diagnostic
        message: Human-readable description
        subject: Eval name of the node involved, e.g. 'service "users"'
        location: "file:line" of the design call (structural diagnostics only)
    """

    kind: DiagnosticKind
    message: str
    subject: str = ""
    location: str = ""

    def __str__(self) -> str:
        parts = [f"[{self.kind.value.upper()}]"]
        if self.location:
            parts.append(f"{self.location}:")
        if self.subject:
            parts.append(f"{self.subject}:")
        parts.append(self.message)
        return " ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "subject": self.subject,
            "location": self.location,
        }


def subject_name(node: Any) -> str:
    """Return the eval name of a node, falling back to its type name."""
    if node is None:
        return ""
    if isinstance(node, str):
        return node
    eval_name = getattr(node, "eval_name", None)
    if callable(eval_name):
        return eval_name()
    return type(node).__name__


@dataclass
class ValidationErrors:
    """Accumulator for validation diagnostics.

    Validation code adds to and merges accumulators instead of raising so
    that a single run reports every problem in the design.
    """

    diagnostics: list[Diagnostic] = field(default_factory=list)

    def add(self, subject: Any, fmt: str, *args: Any) -> None:
        message = fmt % args if args else fmt
        self.diagnostics.append(
            Diagnostic(
                kind=DiagnosticKind.VALIDATION,
                message=message,
                subject=subject_name(subject),
            )
        )

    def merge(self, other: "ValidationErrors | None") -> None:
        if other:
            self.diagnostics.extend(other.diagnostics)

    def __bool__(self) -> bool:
        return bool(self.diagnostics)

    def __len__(self) -> int:
        return len(self.diagnostics)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.diagnostics)

    def messages(self) -> list[str]:
        return [d.message for d in self.diagnostics]
