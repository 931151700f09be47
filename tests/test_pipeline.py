"""Tests for the evaluation pipeline."""

import logging

import pytest

from apiforge import Phase, Pipeline, PipelineError, run_design
from apiforge.config import DesignConfig
from apiforge.eval.diagnostics import DiagnosticKind, FatalEvalError


def api(d):
    d.api("calc")


# =============================================================================
# Phase order
# =============================================================================


class TestPhases:
    def test_new_pipeline(self):
        pipeline = Pipeline()
        assert pipeline.phase is Phase.NEW
        assert pipeline.root.api is None

    def test_prepare_before_build(self):
        with pytest.raises(PipelineError, match="prepare"):
            Pipeline().prepare()

    def test_validate_before_prepare(self):
        pipeline = Pipeline()
        pipeline.build(api)
        with pytest.raises(PipelineError, match="validate"):
            pipeline.validate()

    def test_build_twice(self):
        pipeline = Pipeline()
        pipeline.build(api)
        with pytest.raises(PipelineError, match="already built"):
            pipeline.build(api)

    def test_phases_advance(self):
        pipeline = Pipeline()
        assert pipeline.build(api) is True
        assert pipeline.phase is Phase.BUILT
        pipeline.prepare()
        assert pipeline.phase is Phase.PREPARED
        assert pipeline.validate() == []
        assert pipeline.phase is Phase.VALIDATED

    def test_prepare_twice_is_a_noop(self):
        pipeline = Pipeline()
        pipeline.build(api)
        pipeline.prepare()
        pipeline.prepare()
        assert pipeline.phase is Phase.PREPARED

    def test_context_ends_after_build(self):
        pipeline = Pipeline()
        pipeline.build(api)
        assert not pipeline.context.running


# =============================================================================
# Build
# =============================================================================


class TestBuild:
    def test_failing_design_does_not_stop_siblings(self):
        pipeline = Pipeline()
        ok = pipeline.build(lambda d: d.title("x"), api, lambda d: d.service("users"))
        assert ok is False
        assert pipeline.root.api.name == "calc"
        assert "users" in pipeline.root.services
        assert [d.message for d in pipeline.diagnostics] == ["invalid use of title() in TopExpr"]

    def test_exception_in_design_becomes_diagnostic(self):
        def broken(d):
            raise KeyError("missing")

        pipeline = Pipeline()
        assert pipeline.build(broken, api) is False
        assert pipeline.root.api is not None
        diag = pipeline.diagnostics[0]
        assert diag.kind is DiagnosticKind.STRUCTURAL
        assert diag.message == "design function raised KeyError: 'missing'"

    def test_exception_in_nested_body_is_attributed(self):
        def users(d):
            d.method("show", lambda d: 1 / 0)
            d.method("list")

        pipeline = Pipeline()
        pipeline.build(lambda d: d.service("users", users))
        assert list(pipeline.root.service("users").methods) == ["show", "list"]
        diag = pipeline.diagnostics[0]
        assert diag.message == "design function raised ZeroDivisionError: division by zero"
        assert diag.subject == 'method "show" of service "users"'

    def test_fatal_error_aborts_remaining_designs(self, caplog):
        def fatal(d):
            raise FatalEvalError("cannot continue")

        pipeline = Pipeline()
        with caplog.at_level(logging.WARNING, logger="apiforge.eval.pipeline"):
            ok = pipeline.build(fatal, api)
        assert ok is False
        assert pipeline.root.api is None
        assert len(pipeline.diagnostics) == 1
        assert pipeline.diagnostics[0].kind is DiagnosticKind.FATAL
        assert pipeline.diagnostics[0].message == "cannot continue"
        assert "cannot continue" in caplog.text

    def test_builder_call_after_context_ended_is_fatal(self):
        def misuse(d):
            d.context.end()
            d.title("x")

        pipeline = Pipeline()
        pipeline.build(misuse, api)
        assert [d.kind for d in pipeline.diagnostics] == [DiagnosticKind.FATAL]
        assert pipeline.diagnostics[0].message == "no design evaluation in progress"
        assert pipeline.root.api is None

    def test_fatal_keeps_earlier_structural_diagnostics(self):
        def fatal(d):
            raise FatalEvalError("stop")

        pipeline = Pipeline()
        pipeline.build(lambda d: d.title("x"), fatal)
        assert [d.kind for d in pipeline.diagnostics] == [
            DiagnosticKind.STRUCTURAL,
            DiagnosticKind.FATAL,
        ]


# =============================================================================
# Results
# =============================================================================


class TestRun:
    def test_result_groups_diagnostics(self):
        def design(d):
            d.title("misplaced")
            d.service("users", lambda d: d.http(lambda d: d.parent("missing")))

        result = run_design(design)
        assert not result.ok
        assert [d.message for d in result.structural] == ["invalid use of title() in TopExpr"]
        assert result.messages()[1:] == ["API not defined", "Parent service missing not found"]
        assert len(result.validation) == 2
        assert result.fatal == []

    def test_structural_diagnostics_come_first(self):
        result = run_design(lambda d: d.title("x"))
        assert [d.kind for d in result.diagnostics] == [
            DiagnosticKind.STRUCTURAL,
            DiagnosticKind.VALIDATION,
        ]

    def test_pipelines_are_isolated(self):
        first = run_design(api, lambda d: d.service("users"))
        second = run_design(api)
        assert list(first.root.services) == ["users"]
        assert second.root.services == {}
        assert first.root is not second.root

    def test_config_is_applied(self):
        result = run_design(api, config=DesignConfig(root_path="/v1"))
        assert result.root.http.path == "/v1"

    def test_diagnostic_str(self):
        result = run_design(lambda d: d.title("x"), api)
        text = str(result.diagnostics[0])
        assert text.startswith("[STRUCTURAL] ")
        assert text.endswith("top-level design: invalid use of title() in TopExpr")
        assert result.diagnostics[0].to_dict()["kind"] == "structural"
