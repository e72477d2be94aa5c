"""
cargo-orders - unit tests for observability logging

Purpose
- Validate structured JSON logging, correlation metadata, and structlog routing.

What this test file should cover
- JSON line validity and field layout.
- Correlation field propagation and scoping.
- structlog events reaching the JSON sinks.
- Session replacement and shutdown draining the queue.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

import pytest
import structlog

from cargo_orders.observability.logging import (
    LOG_FILENAME,
    ROOT_LOGGER_NAME,
    LoggingConfig,
    active_session,
    correlation_scope,
    get_correlation_context,
    get_logger,
    setup_logging,
    setup_structured_logging,
    shutdown_logging,
)

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


@pytest.fixture(autouse=True)
def _cleanup_logging() -> Iterator[None]:
    yield
    shutdown_logging()


def _read_json_lines(path: Path) -> list[dict[str, object]]:
    lines = path.read_text(encoding="utf-8").splitlines()
    return [json.loads(line) for line in lines]


def test_json_lines_carry_correlation_and_extra_fields(tmp_path: Path) -> None:
    session = setup_structured_logging(LoggingConfig(log_dir=tmp_path, log_to_stderr=False))

    with correlation_scope(manifest_path="Cargo.toml"):
        session.logger.info("manifest checked", extra={"order_count": 2})
    session.logger.warning("outside scope")
    shutdown_logging()

    assert session.logger.name == ROOT_LOGGER_NAME
    assert session.log_path == tmp_path / LOG_FILENAME
    first, second = _read_json_lines(session.log_path)
    assert first["message"] == "manifest checked"
    assert first["level"] == "INFO"
    assert first["manifest_path"] == "Cargo.toml"
    assert first["fields"] == {"order_count": 2}
    assert str(first["timestamp"]).endswith("Z")
    assert second["message"] == "outside scope"
    assert "manifest_path" not in second
    assert "fields" not in second


def test_exceptions_are_rendered(tmp_path: Path) -> None:
    session = setup_structured_logging(LoggingConfig(log_dir=tmp_path, log_to_stderr=False))

    try:
        raise KeyError("orders")
    except KeyError:
        session.logger.exception("binding crashed")
    shutdown_logging()

    (line,) = _read_json_lines(tmp_path / LOG_FILENAME)
    assert line["level"] == "ERROR"
    assert "KeyError: 'orders'" in str(line["exception"])


def test_level_filters_records(tmp_path: Path) -> None:
    session = setup_structured_logging(
        LoggingConfig(level="warning", log_dir=tmp_path, log_to_stderr=False)
    )

    session.logger.info("dropped")
    session.logger.error("kept")
    shutdown_logging()

    assert [line["message"] for line in _read_json_lines(tmp_path / LOG_FILENAME)] == ["kept"]


def test_structlog_events_reach_json_sink(tmp_path: Path) -> None:
    setup_structured_logging(LoggingConfig(log_dir=tmp_path, log_to_stderr=False))

    log = get_logger("cargo_orders.manifest.gate")
    log.info("manifest_orders_extracted", package="x", order_count=1)
    log.debug("below_level")
    shutdown_logging()

    (line,) = _read_json_lines(tmp_path / LOG_FILENAME)
    assert line["message"] == "manifest_orders_extracted"
    assert line["logger"] == "cargo_orders.manifest.gate"
    assert line["fields"] == {"package": "x", "order_count": 1}


def test_get_logger_configures_structlog_once_reset() -> None:
    saved = structlog.get_config()
    structlog.reset_defaults()
    try:
        get_logger("cargo_orders.manifest.orders")
        assert structlog.is_configured()
        assert structlog.get_config()["logger_factory"].__class__ is structlog.stdlib.LoggerFactory
    finally:
        structlog.configure(**saved)


def test_stderr_sink_writes_json(capsys: pytest.CaptureFixture[str]) -> None:
    session = setup_structured_logging(LoggingConfig(log_to_stderr=True))

    session.logger.info("to stderr")
    shutdown_logging()

    captured = capsys.readouterr()
    assert captured.out == ""
    assert json.loads(captured.err.splitlines()[-1])["message"] == "to stderr"


def test_setup_logging_reads_observability_section(tmp_path: Path) -> None:
    logger = setup_logging(
        {
            "log_level": "DEBUG",
            "log_dir": str(tmp_path),
            "log_file_enabled": True,
            "log_to_stderr": False,
        }
    )

    assert logger.level == logging.DEBUG
    session = active_session()
    assert session is not None
    assert session.log_path == tmp_path / LOG_FILENAME


def test_setup_logging_overrides_take_precedence(tmp_path: Path) -> None:
    logger = setup_logging(
        {"log_level": "ERROR", "log_dir": str(tmp_path), "log_file_enabled": False},
        level="DEBUG",
        log_to_stderr=False,
    )

    assert logger.level == logging.DEBUG
    session = active_session()
    assert session is not None
    assert session.log_path is None
    assert not (tmp_path / LOG_FILENAME).exists()


def test_new_setup_replaces_active_session(tmp_path: Path) -> None:
    first = setup_structured_logging(LoggingConfig(log_dir=tmp_path, log_to_stderr=False))
    second = setup_structured_logging(LoggingConfig(log_to_stderr=False))

    assert first.closed
    assert active_session() is second
    assert len(second.logger.handlers) == 1

    shutdown_logging()
    assert second.closed
    assert active_session() is None
    assert second.logger.handlers == []


def test_correlation_scope_nests_and_restores() -> None:
    with correlation_scope(manifest_path="a.toml"):
        with correlation_scope(manifest_format="toml"):
            assert get_correlation_context() == {
                "manifest_path": "a.toml",
                "manifest_format": "toml",
            }
        with correlation_scope(manifest_path=None):
            assert get_correlation_context() == {}
        assert get_correlation_context() == {"manifest_path": "a.toml"}

    assert get_correlation_context() == {}


def test_correlation_scope_rejects_blank_values() -> None:
    with pytest.raises(ValueError, match="must not be empty"):
        with correlation_scope(manifest_path="  "):
            pass


def test_unknown_level_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="unsupported logging level"):
        setup_structured_logging(LoggingConfig(level="LOUD", log_dir=tmp_path))

    assert active_session() is None
    assert not (tmp_path / LOG_FILENAME).exists()
