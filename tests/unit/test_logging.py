"""Unit tests for logging configuration."""

import json

import structlog

from redirect_builder.core.config import Config
from redirect_builder.core.logging import (
    CHILD_OUTPUT_EVENT,
    bind_stage,
    build_context,
    get_logger,
    render_child_output,
    setup_logging,
)


class TestRenderChildOutput:
    def test_collapses_streamed_line(self):
        event = render_child_output(None, "debug", {
            "event": CHILD_OUTPUT_EVENT, "stream": "stderr", "line": "error CS0001", "stage": "building",
        })

        assert event == {"event": "[stderr] error CS0001", "stage": "building"}

    def test_other_events_untouched(self):
        event = {"event": "Entering stage", "stream": "stdout"}

        assert render_child_output(None, "info", dict(event)) == event


class TestBuildContext:
    """Tests for per-build context variables."""

    def test_binds_and_releases(self):
        with build_context("abc123", "com.acme.app"):
            assert structlog.contextvars.get_contextvars() == {
                "run_id": "abc123", "package_name": "com.acme.app", "stage": "idle",
            }
            bind_stage("building")
            assert structlog.contextvars.get_contextvars()["stage"] == "building"

        assert structlog.contextvars.get_contextvars() == {}

    def test_restores_outer_binding(self):
        structlog.contextvars.bind_contextvars(run_id="outer")

        with build_context("inner", "com.acme.app"):
            pass

        assert structlog.contextvars.get_contextvars() == {"run_id": "outer"}


class TestSetupLogging:
    """Tests for the configured output."""

    def test_json_lines_carry_build_context(self, capsys):
        setup_logging(Config(log_level="DEBUG"), json_output=True)
        logger = get_logger("redirect_builder.tests")

        with build_context("abc123", "com.acme.app"):
            bind_stage("building")
            logger.debug(CHILD_OUTPUT_EVENT, stream="stdout", line="Build succeeded.")

        record = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert record["event"] == CHILD_OUTPUT_EVENT
        assert record["line"] == "Build succeeded."
        assert record["stream"] == "stdout"
        assert record["run_id"] == "abc123"
        assert record["stage"] == "building"
        assert record["level"] == "debug"

    def test_level_filters(self, capsys):
        setup_logging(Config(log_level="WARNING"), json_output=True)

        get_logger("redirect_builder.tests").info("hidden")

        assert capsys.readouterr().err == ""
