"""Unit tests for logging and tracing helpers."""

from __future__ import annotations

import pytest
import structlog
from structlog.testing import capture_logs

from modloom_core.observability import (
    configure_logging,
    get_logger,
    get_tracer,
    load_span,
    structlog_sink,
)


class TestLoadSpan:
    """Tests for the load_span() context manager."""

    def test_yields_span(self) -> None:
        """A span should be yielded even without an SDK configured."""
        with load_span("modloom.test", attributes={"modloom.path": "/a.py"}) as span:
            assert span is not None

    def test_reraises_and_logs_failure(self) -> None:
        """Failures inside the span should be logged then re-raised."""
        with capture_logs() as logs, pytest.raises(ValueError, match="boom"):
            with load_span("modloom.test", attributes={"modloom.path": "/a.py"}):
                raise ValueError("boom")

        assert logs[0]["event"] == "modloom.test_failed"
        assert logs[0]["error"] == "boom"
        assert logs[0]["modloom.path"] == "/a.py"

    def test_tracer_is_reused(self) -> None:
        """get_tracer() should return the same tracer each time."""
        assert get_tracer() is get_tracer()


class TestStructlogSink:
    """Tests for structlog_sink()."""

    def test_joins_values(self) -> None:
        """Sink values should be joined with spaces into the event."""
        sink = structlog_sink()

        with capture_logs() as logs:
            sink("error", "parse script", "\n/a.py\n> 1 | x =")

        assert logs == [{"event": "parse script \n/a.py\n> 1 | x =", "log_level": "error"}]

    @pytest.mark.parametrize(
        ("level", "expected"),
        [("warn", "warning"), ("log", "info"), ("trace", "debug"), ("info", "info")],
    )
    def test_level_aliases(self, level: str, expected: str) -> None:
        """Loader level names should map onto structlog methods."""
        sink = structlog_sink(get_logger())

        with capture_logs() as logs:
            sink(level, "message")

        assert logs[0]["log_level"] == expected

    def test_unknown_level_falls_back_to_info(self) -> None:
        """Unrecognized levels should log at info."""
        sink = structlog_sink()

        with capture_logs() as logs:
            sink("chatter", "message")

        assert logs[0]["log_level"] == "info"


class TestConfigureLogging:
    """Tests for configure_logging()."""

    def test_json_renderer_by_default(self) -> None:
        """The default configuration should render JSON through stdlib logging."""
        configure_logging()

        config = structlog.get_config()
        processors = config["processors"]
        assert isinstance(processors[0], structlog.processors.TimeStamper)
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
        assert config["wrapper_class"] is structlog.stdlib.BoundLogger
        assert isinstance(config["logger_factory"], structlog.stdlib.LoggerFactory)

    def test_console_renderer(self) -> None:
        """json_format=False should switch to the human-readable renderer."""
        configure_logging(json_format=False)

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)
        assert not any(isinstance(p, structlog.processors.JSONRenderer) for p in processors)

    def test_without_timestamp(self) -> None:
        """add_timestamp=False should leave the TimeStamper out."""
        configure_logging(add_timestamp=False)

        processors = structlog.get_config()["processors"]
        assert not any(isinstance(p, structlog.processors.TimeStamper) for p in processors)
        assert processors[0] is structlog.stdlib.add_log_level
