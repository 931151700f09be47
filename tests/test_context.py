"""Tests for the evaluation context and the executor."""

from pathlib import Path

import pytest

from apiforge.eval import context as context_module
from apiforge.eval.context import TOP, EvalContext
from apiforge.eval.diagnostics import DiagnosticKind, FatalEvalError
from apiforge.expr.api import ContactExpr


@pytest.fixture
def ctx():
    """A context with an evaluation in progress."""
    context = EvalContext()
    context.begin()
    yield context
    context.end()


# =============================================================================
# Current node
# =============================================================================


class TestCurrent:
    def test_top_level_is_current_after_begin(self, ctx):
        assert ctx.current() is TOP
        assert ctx.running

    def test_current_without_evaluation_is_fatal(self):
        with pytest.raises(FatalEvalError, match="no design evaluation in progress"):
            EvalContext().current()

    def test_current_after_end_is_fatal(self, ctx):
        ctx.end()
        with pytest.raises(FatalEvalError):
            ctx.current()

    def test_pop_top_level_is_fatal(self, ctx):
        with pytest.raises(FatalEvalError, match="underflow"):
            ctx.pop()

    def test_push_and_pop(self, ctx):
        contact = ContactExpr()
        ctx.push(contact)
        assert ctx.current() is contact
        assert ctx.pop() is contact
        assert ctx.current() is TOP

    def test_begin_resets_errors(self, ctx):
        ctx.report_error("old")
        ctx.begin()
        assert ctx.errors == []


# =============================================================================
# Diagnostics
# =============================================================================


class TestReportError:
    def test_records_structural_diagnostic(self, ctx):
        ctx.report_error("bad %s", "thing")
        assert len(ctx.errors) == 1
        diag = ctx.errors[0]
        assert diag.kind is DiagnosticKind.STRUCTURAL
        assert diag.message == "bad thing"
        assert diag.subject == "top-level design"

    def test_location_points_at_caller(self, ctx):
        ctx.report_error("here")
        assert "test_context.py" in ctx.errors[0].location

    def test_sibling_directory_is_not_package(self):
        package_dir = Path(context_module.__file__).resolve().parents[1]
        sibling = package_dir.parent / f"{package_dir.name}_designs" / "design.py"
        assert not context_module._in_package(str(sibling))
        assert context_module._in_package(context_module.__file__)

    def test_incompatible_dsl_names_call_and_type(self, ctx):
        ctx.push(ContactExpr())
        ctx.incompatible_dsl("title")
        ctx.pop()
        assert ctx.errors[0].message == "invalid use of title() in ContactExpr"
        assert ctx.errors[0].subject == "contact"


# =============================================================================
# Execute
# =============================================================================


class TestExecute:
    def test_target_is_current_during_body(self, ctx):
        seen = []
        contact = ContactExpr()
        ok = ctx.execute(lambda: seen.append(ctx.current()), contact)
        assert ok is True
        assert seen == [contact]
        assert ctx.current() is TOP

    def test_passes_arguments_to_body(self, ctx):
        received = []
        ctx.execute(lambda a, b: received.append((a, b)), ContactExpr(), 1, 2)
        assert received == [(1, 2)]

    def test_none_body_succeeds(self, ctx):
        assert ctx.execute(None, ContactExpr()) is True
        assert ctx.current() is TOP

    def test_reported_error_returns_false(self, ctx):
        ok = ctx.execute(lambda: ctx.report_error("bad"), ContactExpr())
        assert ok is False
        assert ctx.errors[0].subject == "contact"
        assert ctx.current() is TOP

    def test_earlier_errors_do_not_fail_later_bodies(self, ctx):
        ctx.report_error("earlier")
        assert ctx.execute(lambda: None, ContactExpr()) is True

    def test_exception_becomes_diagnostic_and_pops(self, ctx):
        def body():
            raise RuntimeError("boom")

        ok = ctx.execute(body, ContactExpr())
        assert ok is False
        assert ctx.current() is TOP
        assert ctx.errors[0].message == "design function raised RuntimeError: boom"
        assert ctx.errors[0].subject == "contact"

    def test_fatal_error_propagates_and_pops(self, ctx):
        def body():
            raise FatalEvalError("stop")

        with pytest.raises(FatalEvalError):
            ctx.execute(body, ContactExpr())
        assert ctx.current() is TOP
        assert ctx.errors == []

    def test_nested_execution(self, ctx):
        outer, inner = ContactExpr(), ContactExpr()
        seen = []

        def inner_body():
            seen.append(ctx.current())

        def outer_body():
            ctx.execute(inner_body, inner)
            seen.append(ctx.current())

        assert ctx.execute(outer_body, outer) is True
        assert seen == [inner, outer]
        assert ctx.current() is TOP
