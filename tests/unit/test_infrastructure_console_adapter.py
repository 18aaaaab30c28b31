"""Unit tests for ConsoleAdapter (structlog)."""

import json

import pytest
import structlog

from livefeed.infrastructure.logging.console_adapter import ConsoleAdapter


def last_json_line(capsys) -> dict:
    lines = [line for line in capsys.readouterr().out.splitlines() if line.strip()]
    return json.loads(lines[-1])


@pytest.mark.unit
class TestConsoleAdapter:
    """Tests for JSON output, levels, bind() and error context."""

    def test_json_output_has_event_level_and_context(self, capsys):
        logger = ConsoleAdapter(use_json=True, level="DEBUG")

        logger.info("stream_event_appended", stream="sse:stream:test", entry_id="1-0")

        record = last_json_line(capsys)
        assert record["event"] == "stream_event_appended"
        assert record["level"] == "info"
        assert record["stream"] == "sse:stream:test"
        assert record["entry_id"] == "1-0"
        assert "timestamp" in record

    def test_level_filtering(self, capsys):
        logger = ConsoleAdapter(use_json=True, level="WARNING")

        logger.info("hidden")
        logger.warning("shown")

        output = capsys.readouterr().out
        assert "hidden" not in output
        assert "shown" in output

    def test_bind_adds_context(self, capsys):
        logger = ConsoleAdapter(use_json=True).bind(session_id="SSE_1")

        logger.info("sse_session_opened")

        assert last_json_line(capsys)["session_id"] == "SSE_1"

    def test_error_includes_exception_details(self, capsys):
        logger = ConsoleAdapter(use_json=True)

        logger.error("stream_append_unexpected_error", error=RuntimeError("boom"))

        record = last_json_line(capsys)
        assert record["error_type"] == "RuntimeError"
        assert record["error_message"] == "boom"

    def test_context_variables_are_merged(self, capsys):
        logger = ConsoleAdapter(use_json=True)
        structlog.contextvars.bind_contextvars(trace_id="trace-9")
        try:
            logger.info("request_logged")
        finally:
            structlog.contextvars.unbind_contextvars("trace_id")

        assert last_json_line(capsys)["trace_id"] == "trace-9"
