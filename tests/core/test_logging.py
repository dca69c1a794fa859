"""Tests for structured logging."""

import json
import logging
from pathlib import Path

import pytest
import structlog

from mapdelta.config.models import LoggingConfig, LogOutputConfig
from mapdelta.core.logging import (
    clear_request_id,
    configure_logging,
    get_logger,
    get_request_id,
    set_request_id,
)


class TestRequestIdCorrelation:
    """Request ID context variable tests."""

    def setup_method(self) -> None:
        """Clear request ID before each test."""
        clear_request_id()

    def test_given_request_id_when_set_then_can_retrieve(self) -> None:
        """Request ID can be set and retrieved."""
        # Given
        request_id = "req-123"

        # When
        result = set_request_id(request_id)

        # Then
        assert result == request_id
        assert get_request_id() == request_id

    def test_given_no_id_when_set_then_generates_one(self) -> None:
        """Set generates a short hex ID when none provided."""
        rid = set_request_id()

        assert len(rid) == 12
        int(rid, 16)

    def test_given_set_id_when_clear_then_removes_id(self) -> None:
        """Clear removes the current request ID."""
        # Given
        set_request_id("to-clear")

        # When
        clear_request_id()

        # Then
        assert get_request_id() is None


class TestLoggingConfiguration:
    """Logging configuration tests."""

    def setup_method(self) -> None:
        """Reset structlog and stdlib logging before each test."""
        structlog.reset_defaults()
        logging.getLogger().handlers.clear()
        clear_request_id()

    def teardown_method(self) -> None:
        logging.getLogger().handlers.clear()
        clear_request_id()

    def test_given_config_object_when_configure_then_takes_precedence(self, tmp_path: Path) -> None:
        """LoggingConfig object takes precedence over simple params."""
        # Given
        log_file = tmp_path / "mapdelta.log"
        config = LoggingConfig(
            level="DEBUG",
            outputs=[LogOutputConfig(format="json", destination=str(log_file))],
        )

        # When - config's DEBUG overrides the level="ERROR" param
        configure_logging(config=config, json_format=False, level="ERROR")
        get_logger().debug("debug msg")

        # Then
        assert "debug msg" in log_file.read_text()

    def test_given_json_output_when_log_then_fields_present(self, tmp_path: Path) -> None:
        """JSON lines carry event, level, timestamp and bound fields."""
        # Given
        log_file = tmp_path / "mapdelta.log"
        configure_logging(config=LoggingConfig(outputs=[LogOutputConfig(format="json", destination=str(log_file))]))

        # When
        get_logger("parser").info("map_parsed", sections=9)

        # Then
        data = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert data["event"] == "map_parsed"
        assert data["sections"] == 9
        assert data["logger"] == "parser"
        assert data["level"] == "info"
        assert "timestamp" in data

    def test_given_request_id_when_log_then_included(self, tmp_path: Path) -> None:
        """The active request ID is added to every event."""
        # Given
        log_file = tmp_path / "mapdelta.log"
        configure_logging(config=LoggingConfig(outputs=[LogOutputConfig(format="json", destination=str(log_file))]))
        set_request_id("abc123")

        # When
        get_logger().info("builds_compared")

        # Then
        data = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert data["request_id"] == "abc123"

    def test_given_multi_output_config_when_configure_then_levels_respected(self, tmp_path: Path) -> None:
        """Each output filters by its own level, inheriting the root level when unset."""
        # Given
        debug_file = tmp_path / "debug.log"
        info_file = tmp_path / "info.log"
        config = LoggingConfig(
            level="DEBUG",
            outputs=[
                LogOutputConfig(format="json", destination=str(info_file), level="INFO"),
                LogOutputConfig(format="console", destination=str(debug_file)),
            ],
        )

        # When
        configure_logging(config=config)
        logger = get_logger()
        logger.debug("debug only")
        logger.info("info msg")

        # Then
        info_content = info_file.read_text()
        assert "info msg" in info_content
        assert "debug only" not in info_content

        debug_content = debug_file.read_text()
        assert "debug only" in debug_content
        assert "info msg" in debug_content

    def test_given_nested_destination_when_configure_then_creates_parent(self, tmp_path: Path) -> None:
        log_file = tmp_path / "logs" / "nested" / "mapdelta.log"
        configure_logging(config=LoggingConfig(outputs=[LogOutputConfig(destination=str(log_file))]))
        assert log_file.parent.is_dir()

    def test_given_simple_params_when_configure_then_root_level_set(self) -> None:
        configure_logging(level="WARNING")
        assert logging.getLogger().level == logging.WARNING

    def test_given_stdlib_logger_when_log_then_rendered_through_structlog(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Foreign (stdlib) records such as uvicorn's go through the same formatter."""
        log_file = tmp_path / "mapdelta.log"
        configure_logging(config=LoggingConfig(outputs=[LogOutputConfig(format="json", destination=str(log_file))]))

        logging.getLogger("uvicorn.error").warning("Started server process")

        data = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert data["event"] == "Started server process"
        assert data["level"] == "warning"
