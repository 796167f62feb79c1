"""Tests for structured logging configuration.

This module tests the logging module that provides structured
logging for archive reads, writes and signature checks.
"""

import json
import logging
from collections.abc import Iterator
from unittest.mock import patch

import pytest
import structlog

from pkpass.observability.logging import (
    REDACTED_PLACEHOLDER,
    configure_logging,
    get_logger,
    is_debug_mode,
    log_context,
    sanitize_for_logging,
)


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    root_logger = logging.getLogger()
    level = root_logger.level
    handlers = list(root_logger.handlers)
    yield
    structlog.contextvars.clear_contextvars()
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_configure_logging_respects_log_level(self) -> None:
        """Test that configure_logging sets the correct log level."""
        configure_logging(log_format="console", log_level="WARNING", force=True)

        assert logging.getLogger().level == logging.WARNING

    def test_level_from_environment(self) -> None:
        with patch.dict("os.environ", {"PKPASS_LOG_LEVEL": "error"}):
            configure_logging(force=True)

        assert logging.getLogger().level == logging.ERROR

    def test_json_output_goes_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        """JSON lines carry the event, fields and service name on stderr."""
        configure_logging(log_format="json", log_level="INFO", service_name="passes", force=True)

        get_logger("pkpass.test").info("pkpass.write.completed", entries=3, signed=True)

        captured = capsys.readouterr()
        assert captured.out == ""
        record = json.loads(captured.err.strip().splitlines()[-1])
        assert record["event"] == "pkpass.write.completed"
        assert record["entries"] == 3
        assert record["signed"] is True
        assert record["service"] == "passes"
        assert record["level"] == "info"

    def test_format_from_environment(self, capsys: pytest.CaptureFixture[str]) -> None:
        with patch.dict("os.environ", {"PKPASS_LOG_FORMAT": "JSON"}):
            configure_logging(log_level="INFO", force=True)

        get_logger("pkpass.test").info("pkpass.read.completed")

        assert json.loads(capsys.readouterr().err.strip().splitlines()[-1])["event"] == (
            "pkpass.read.completed"
        )

    def test_not_reconfigured_without_force(self) -> None:
        configure_logging(log_format="console", log_level="WARNING", force=True)

        configure_logging(log_format="console", log_level="DEBUG")

        assert logging.getLogger().level == logging.WARNING


class TestContextBinding:
    """Tests for context binding functions."""

    def test_log_context_binds_inside_block(self) -> None:
        with log_context(archive="ticket.pkpass"):
            assert structlog.contextvars.get_contextvars()["archive"] == "ticket.pkpass"

    def test_log_context_restores_on_exit(self) -> None:
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(service="passes")

        with log_context(archive="ticket.pkpass", stage="opened"):
            pass

        assert structlog.contextvars.get_contextvars() == {"service": "passes"}

    def test_context_appears_in_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(log_format="json", log_level="INFO", force=True)

        with log_context(archive="ticket.pkpass"):
            get_logger("pkpass.test").info("pkpass.read.completed")

        record = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert record["archive"] == "ticket.pkpass"


class TestSanitizeForLogging:
    """Tests for sanitize_for_logging."""

    def test_non_sensitive_values_pass_through(self) -> None:
        data = {"organizationName": "Acme", "serialNumber": "1"}
        assert sanitize_for_logging(data) == data

    def test_sensitive_keys_redacted(self) -> None:
        result = sanitize_for_logging(
            {"authenticationToken": "abcdefghijklmnop", "p12_password": "pw", "description": "d"}
        )

        assert result["authenticationToken"] == REDACTED_PLACEHOLDER
        assert result["p12_password"] == REDACTED_PLACEHOLDER
        assert result["description"] == "d"

    def test_nested_dicts_and_lists(self) -> None:
        data = {
            "identity": {"private_key": "pem", "team": "ABCDE12345"},
            "items": [{"name": "a", "secret": "s"}, "plain"],
        }

        result = sanitize_for_logging(data)

        assert result["identity"] == {"private_key": REDACTED_PLACEHOLDER, "team": "ABCDE12345"}
        assert result["items"] == [{"name": "a", "secret": REDACTED_PLACEHOLDER}, "plain"]

    def test_case_insensitive(self) -> None:
        result = sanitize_for_logging({"PASSWORD": "pwd", "Authorization": "Bearer x"})

        assert set(result.values()) == {REDACTED_PLACEHOLDER}

    def test_empty_dict_returns_empty(self) -> None:
        assert sanitize_for_logging({}) == {}

    def test_debug_mode_returns_unchanged(self) -> None:
        data = {"password": "pw"}

        with patch.dict("os.environ", {"PKPASS_DEBUG": "true"}):
            assert sanitize_for_logging(data) == data


class TestIsDebugMode:
    """Tests for the PKPASS_DEBUG environment variable."""

    @pytest.mark.parametrize("value", ["true", "1", "YES", " on "])
    def test_truthy(self, value: str) -> None:
        with patch.dict("os.environ", {"PKPASS_DEBUG": value}):
            assert is_debug_mode() is True

    @pytest.mark.parametrize("value", ["", "false", "0"])
    def test_falsy(self, value: str) -> None:
        with patch.dict("os.environ", {"PKPASS_DEBUG": value}):
            assert is_debug_mode() is False
