"""
Unit tests for core.logger module.

Tests:
- format_kv_pairs() - key=value rendering, quoting, truncation
- StructuredFormatter - root handler formatting with and without fields
- Logger - level methods, structured extra, JSON output
"""

import json
import logging
import sys

import pytest

from content_manager.core.logger import Logger, StructuredFormatter, format_kv_pairs


# =============================================================================
# format_kv_pairs() Tests
# =============================================================================


class TestFormatKvPairs:
    """format_kv_pairs() rendering rules."""

    def test_empty_dict(self) -> None:
        assert format_kv_pairs({}) == ""

    def test_simple_pairs(self) -> None:
        assert format_kv_pairs({"url": "wss://a.example", "events": 3}) == (
            " url=wss://a.example events=3"
        )

    def test_custom_prefix(self) -> None:
        assert format_kv_pairs({"a": 1}, prefix="") == "a=1"

    def test_value_with_space_is_quoted(self) -> None:
        assert format_kv_pairs({"error": "connection refused"}) == ' error="connection refused"'

    def test_empty_value_is_quoted(self) -> None:
        assert format_kv_pairs({"reason": ""}) == ' reason=""'

    def test_embedded_quotes_escaped(self) -> None:
        assert format_kv_pairs({"msg": 'say "hi"'}) == ' msg="say \\"hi\\""'

    def test_truncation(self) -> None:
        result = format_kv_pairs({"content": "x" * 20}, max_value_length=5)
        assert "xxxxx...<truncated 15 chars>" in result

    def test_no_truncation_when_disabled(self) -> None:
        result = format_kv_pairs({"content": "x" * 2000}, max_value_length=None)
        assert "truncated" not in result


# =============================================================================
# StructuredFormatter Tests
# =============================================================================


class TestStructuredFormatter:
    """StructuredFormatter output."""

    def _record(self, msg: str, **extra: object) -> logging.LogRecord:
        record = logging.LogRecord("relay_handler", logging.INFO, __file__, 1, msg, None, None)
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_plain_record(self) -> None:
        output = StructuredFormatter().format(self._record("relay_connected"))
        assert output == "info relay_handler relay_connected"

    def test_record_with_fields(self) -> None:
        record = self._record("relay_connected", structured_kv={"url": "wss://a.example"})
        output = StructuredFormatter().format(record)
        assert output == "info relay_handler relay_connected url=wss://a.example"

    def test_record_with_exception(self) -> None:
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = logging.LogRecord(
                "x", logging.ERROR, __file__, 1, "crashed", None, sys.exc_info()
            )
        output = StructuredFormatter().format(record)
        assert output.startswith("error x crashed\n")
        assert "RuntimeError: boom" in output


# =============================================================================
# Logger Tests
# =============================================================================


class TestLogger:
    """Logger methods and output modes."""

    def test_name(self) -> None:
        assert Logger("relay_handler").name == "relay_handler"

    @pytest.mark.parametrize(
        ("method", "level"),
        [
            ("debug", logging.DEBUG),
            ("info", logging.INFO),
            ("warning", logging.WARNING),
            ("error", logging.ERROR),
        ],
    )
    def test_level_methods(
        self, caplog: pytest.LogCaptureFixture, method: str, level: int
    ) -> None:
        logger = Logger("test_levels")
        with caplog.at_level(logging.DEBUG, logger="test_levels"):
            getattr(logger, method)("something_happened", key="value")
        assert caplog.records[-1].levelno == level
        assert caplog.records[-1].getMessage() == "something_happened"
        assert caplog.records[-1].structured_kv == {"key": "value"}

    def test_no_extra_without_fields(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = Logger("test_plain")
        with caplog.at_level(logging.INFO, logger="test_plain"):
            logger.info("started")
        assert not hasattr(caplog.records[-1], "structured_kv")

    def test_long_values_truncated(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = Logger("test_truncate", max_value_length=4)
        with caplog.at_level(logging.INFO, logger="test_truncate"):
            logger.info("note", content="abcdefgh")
        assert caplog.records[-1].structured_kv["content"].startswith("abcd...")

    def test_disabled_level_is_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = Logger("test_disabled")
        with caplog.at_level(logging.WARNING, logger="test_disabled"):
            logger.debug("hidden")
        assert not [r for r in caplog.records if r.name == "test_disabled"]

    def test_json_output(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = Logger("test_json", json_output=True)
        with caplog.at_level(logging.INFO, logger="test_json"):
            logger.info("note_published", id="ab" * 32)
        payload = json.loads(caplog.records[-1].getMessage())
        assert payload["message"] == "note_published"
        assert payload["level"] == "info"
        assert payload["logger"] == "test_json"
        assert payload["id"] == "ab" * 32
        assert "timestamp" in payload

    def test_exception_includes_traceback(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = Logger("test_exc")
        with caplog.at_level(logging.ERROR, logger="test_exc"):
            try:
                raise ValueError("bad")
            except ValueError:
                logger.exception("crashed")
        assert caplog.records[-1].exc_info is not None
