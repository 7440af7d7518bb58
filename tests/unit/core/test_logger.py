"""
Unit tests for core.logger module.

Tests:
- key=value pair formatting and quoting
- StructuredFormatter output
- Logger key=value and JSON records, exception tracebacks
- setup_logging() root configuration
"""

import json
import logging

import pytest

from relaypool.core.logger import Logger, StructuredFormatter, format_kv_pairs, setup_logging


class TestFormatKvPairs:
    """format_kv_pairs() rendering."""

    def test_empty(self) -> None:
        assert format_kv_pairs({}) == ""

    def test_simple_values(self) -> None:
        assert format_kv_pairs({"relays": 3, "events": 12}) == " relays=3 events=12"

    def test_quotes_values_with_spaces(self) -> None:
        assert format_kv_pairs({"reason": "blocked: spam"}) == ' reason="blocked: spam"'

    def test_quotes_empty_value(self) -> None:
        assert format_kv_pairs({"reason": ""}) == ' reason=""'

    def test_escapes_embedded_quotes(self) -> None:
        assert format_kv_pairs({"msg": 'say "hi"'}) == ' msg="say \\"hi\\""'

    def test_truncates_long_values(self) -> None:
        result = format_kv_pairs({"raw": "x" * 20}, max_value_length=5)
        assert result == " raw=xxxxx...<truncated 15 chars>"

    def test_custom_prefix(self) -> None:
        assert format_kv_pairs({"a": 1}, prefix="") == "a=1"


class TestStructuredFormatter:
    """StructuredFormatter output."""

    def _record(self, **extra: object) -> logging.LogRecord:
        record = logging.LogRecord(
            "pool.read", logging.INFO, __file__, 1, "read_completed", None, None
        )
        for k, v in extra.items():
            setattr(record, k, v)
        return record

    def test_plain_record(self) -> None:
        assert StructuredFormatter().format(self._record()) == "info pool.read read_completed"

    def test_record_with_fields(self) -> None:
        record = self._record(structured_kv={"events": "4"})
        assert StructuredFormatter().format(record) == "info pool.read read_completed events=4"


class TestLogger:
    """Logger key=value and JSON records."""

    def test_kv_fields_attached(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = Logger("test.kv")
        with caplog.at_level(logging.INFO, logger="test.kv"):
            logger.info("read_started", relays=2, sub_id="rabc")

        assert len(caplog.records) == 1
        record = caplog.records[0]
        assert record.getMessage() == "read_started"
        assert record.structured_kv == {"relays": "2", "sub_id": "rabc"}

    def test_json_output(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = Logger("test.json", json_output=True)
        with caplog.at_level(logging.WARNING, logger="test.json"):
            logger.warning("relay_failed", url="wss://a.example")

        payload = json.loads(caplog.records[0].getMessage())
        assert payload["message"] == "relay_failed"
        assert payload["level"] == "warning"
        assert payload["logger"] == "test.json"
        assert payload["url"] == "wss://a.example"

    def test_disabled_level_is_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = Logger("test.quiet")
        with caplog.at_level(logging.WARNING, logger="test.quiet"):
            logger.debug("noise", x=1)
        assert caplog.records == []

    def test_exception_includes_traceback(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = Logger("test.exc")
        with caplog.at_level(logging.ERROR, logger="test.exc"):
            try:
                raise RuntimeError("boom")
            except RuntimeError:
                logger.exception("failed", step="open")

        record = caplog.records[0]
        assert record.exc_info is not None
        assert record.levelno == logging.ERROR


class TestSetupLogging:
    """setup_logging() root configuration."""

    def test_idempotent(self) -> None:
        root = logging.getLogger()
        before = list(root.handlers)
        level = root.level
        try:
            setup_logging("warning")
            setup_logging("DEBUG")
            structured = [h for h in root.handlers if isinstance(h.formatter, StructuredFormatter)]
            assert len(structured) == 1
            assert root.level == logging.DEBUG
        finally:
            for handler in list(root.handlers):
                if handler not in before:
                    root.removeHandler(handler)
            root.setLevel(level)
