"""
cargo-orders - structured logging.

Every record under the ``cargo_orders`` logger is rendered as one JSON object
per line in the calling thread, then handed to a background ``QueueListener``
that writes the file and/or stderr sinks. structlog events from the manifest
pipeline go through the same stdlib logger, so both end up in one stream.
stdout is never a sink; it is reserved for order listings.
"""

from __future__ import annotations

import atexit
import contextvars
import json
import logging
import logging.handlers
import queue
import sys
import threading
import time
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final

import structlog

ROOT_LOGGER_NAME: Final[str] = "cargo_orders"
LOG_FILENAME: Final[str] = "cargo_orders.jsonl"

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RECORD_ATTRIBUTES: Final[frozenset[str]] = frozenset(vars(logging.makeLogRecord({}))) | {
    "message",
    "asctime",
    "correlation",
}

_correlation: contextvars.ContextVar[Mapping[str, str]] = contextvars.ContextVar(
    "cargo_orders_correlation", default={}
)

_session_lock = threading.Lock()
_session: LoggingSession | None = None
_atexit_registered = False


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    level: int | str = "INFO"
    log_dir: Path | str | None = None
    log_to_stderr: bool = True


class JsonLineFormatter(logging.Formatter):
    """Render a record as a single sorted-key JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        seconds = time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created))
        payload: dict[str, Any] = {
            "timestamp": f"{seconds}.{int(record.msecs):03d}Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(getattr(record, "correlation", {}))
        extras = {
            key: value for key, value in vars(record).items() if key not in _RECORD_ATTRIBUTES
        }
        if extras:
            payload["fields"] = extras
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, sort_keys=True, ensure_ascii=False, default=str)


class _CorrelationFilter(logging.Filter):
    """Copy the caller's correlation fields onto the record before it is queued."""

    def filter(self, record: logging.LogRecord) -> bool:
        fields = _correlation.get()
        if fields:
            record.correlation = dict(fields)
        return True


class LoggingSession:
    """Live logging wiring; ``close`` drains the queue and releases the sinks."""

    def __init__(
        self,
        logger: logging.Logger,
        log_path: Path | None,
        queue_handler: logging.Handler,
        listener: logging.handlers.QueueListener,
        sinks: tuple[logging.Handler, ...],
    ) -> None:
        self.logger = logger
        self.log_path = log_path
        self._queue_handler = queue_handler
        self._listener = listener
        self._sinks = sinks
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        # stop() processes everything already queued before joining the thread.
        self._listener.stop()
        self.logger.removeHandler(self._queue_handler)
        for sink in self._sinks:
            sink.close()


def configure_structlog() -> None:
    """Send structlog events to stdlib logging; the event name becomes the message."""

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.render_to_log_kwargs,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> Any:
    """structlog logger for library code.

    If the host application never configured structlog, route it through
    stdlib logging instead of structlog's default stdout printer.
    """

    if not structlog.is_configured():
        configure_structlog()
    return structlog.get_logger(name)


def setup_logging(
    observability: Mapping[str, object] | None = None,
    *,
    level: int | str | None = None,
    log_to_stderr: bool | None = None,
) -> logging.Logger:
    """Start logging from an ``[observability]`` config section.

    ``level`` and ``log_to_stderr`` override the section; ``log_dir`` is used
    only when ``log_file_enabled`` is true.
    """

    section = observability or {}
    log_dir = section.get("log_dir") if section.get("log_file_enabled") else None
    config = LoggingConfig(
        level=level if level is not None else str(section.get("log_level", "INFO")),
        log_dir=log_dir if isinstance(log_dir, (str, Path)) else None,
        log_to_stderr=(
            log_to_stderr if log_to_stderr is not None else bool(section.get("log_to_stderr"))
        ),
    )
    return setup_structured_logging(config).logger


def setup_structured_logging(config: LoggingConfig) -> LoggingSession:
    """Replace any active session with one built from ``config``."""

    global _session, _atexit_registered

    level = _level_number(config.level)
    shutdown_logging()

    sinks: list[logging.Handler] = []
    log_path: Path | None = None
    if config.log_dir is not None:
        log_path = Path(config.log_dir) / LOG_FILENAME
        log_path.parent.mkdir(parents=True, exist_ok=True)
        sinks.append(logging.FileHandler(log_path, encoding="utf-8"))
    if config.log_to_stderr:
        sinks.append(logging.StreamHandler(sys.stderr))

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False
    for stale in list(logger.handlers):
        logger.removeHandler(stale)
        stale.close()

    records: queue.SimpleQueue[logging.LogRecord] = queue.SimpleQueue()
    queue_handler = logging.handlers.QueueHandler(records)
    queue_handler.addFilter(_CorrelationFilter())
    # prepare() renders with this formatter and strips exc_info before queueing.
    queue_handler.setFormatter(JsonLineFormatter())
    logger.addHandler(queue_handler)
    if not sinks:
        sinks.append(logging.NullHandler())
    listener = logging.handlers.QueueListener(records, *sinks)
    listener.start()
    configure_structlog()

    session = LoggingSession(logger, log_path, queue_handler, listener, tuple(sinks))
    with _session_lock:
        _session = session
        if not _atexit_registered:
            atexit.register(shutdown_logging)
            _atexit_registered = True
    return session


def shutdown_logging() -> None:
    """Close the active session, if any."""

    global _session
    with _session_lock:
        session, _session = _session, None
    if session is not None:
        session.close()


def active_session() -> LoggingSession | None:
    with _session_lock:
        return _session


def get_correlation_context() -> dict[str, str]:
    return dict(_correlation.get())


@contextmanager
def correlation_scope(**fields: str | None) -> Iterator[None]:
    """Attach fields such as ``manifest_path`` to every record logged in scope.

    ``None`` removes an inherited field; blank strings are rejected.
    """

    merged = dict(_correlation.get())
    for key, value in fields.items():
        if value is None:
            merged.pop(key, None)
        elif value.strip():
            merged[key] = value.strip()
        else:
            raise ValueError(f"correlation value for {key!r} must not be empty")
    token = _correlation.set(merged)
    try:
        yield
    finally:
        _correlation.reset(token)


def _level_number(level: int | str) -> int:
    if isinstance(level, int):
        return level
    number = logging.getLevelNamesMapping().get(level.strip().upper())
    if number is None:
        raise ValueError(f"unsupported logging level {level!r}")
    return number


__all__ = [
    "JsonLineFormatter",
    "LOG_FILENAME",
    "LoggingConfig",
    "LoggingSession",
    "ROOT_LOGGER_NAME",
    "active_session",
    "configure_structlog",
    "correlation_scope",
    "get_correlation_context",
    "get_logger",
    "setup_logging",
    "setup_structured_logging",
    "shutdown_logging",
]
