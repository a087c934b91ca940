"""Loguru configuration with console and cloud-native formatters.

Formatter types:
- **console**: colored, human-readable lines with inline context (development)
- **json**: generic one-object-per-line output
- **aws**: CloudWatch Logs Insights friendly format

Standard library loggers (uvicorn, SQLAlchemy, botocore, httpx) are routed
into Loguru through ``InterceptHandler`` so every record shares one format.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from collections.abc import Callable
from typing import Any, Final, Protocol, cast

from loguru import logger

from src.core.config import get_settings
from src.core.constants import REDACTED


class _LoggingState:
    def __init__(self) -> None:
        self.configured = False


_state = _LoggingState()


class LogConfigProtocol(Protocol):
    """Subset of ``LogConfig`` used by ``setup_logging``."""

    @property
    def log_level(self) -> str: ...

    @property
    def log_formatter_type(self) -> str | None: ...


class SettingsProtocol(Protocol):
    """Subset of ``Settings`` used by ``setup_logging``."""

    @property
    def debug(self) -> bool: ...

    @property
    def log_config(self) -> LogConfigProtocol: ...


DEFAULT_LOG_FORMAT: Final[str] = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "{message}"
)
CORRELATION_ID_DISPLAY_LENGTH: Final[int] = 8
MAX_FIELD_VALUE_LENGTH: Final[int] = 100

# Shown first, in this order, by the console formatter
PRIORITY_FIELDS: Final[tuple[str, ...]] = (
    "correlation_id",
    "request_id",
    "method",
    "path",
    "status_code",
    "duration_ms",
    "client_host",
)

STATUS_COLORS: Final[dict[str, str]] = {
    "2": "<green>{}</green>",
    "3": "<yellow>{}</yellow>",
    "4": "<red>{}</red>",
    "5": "<red><bold>{}</bold></red>",
}


def _escape(value: object) -> str:
    # Loguru treats the formatter output as a format string
    return str(value).replace("{", "{{").replace("}", "}}")


def _format_priority_field(field: str, value: object) -> str:
    text = str(value)
    if field == "correlation_id":
        text = text[:CORRELATION_ID_DISPLAY_LENGTH]
    elif field == "duration_ms":
        text = f"{text}ms"
    escaped = _escape(text)
    if field == "status_code" and text[:1] in STATUS_COLORS:
        return STATUS_COLORS[text[:1]].format(escaped)
    return escaped


def _format_extra_field(key: str, value: object) -> str:
    if key in get_settings().log_config.sensitive_fields:
        text = REDACTED
    else:
        text = str(value)
        if len(text) > MAX_FIELD_VALUE_LENGTH:
            text = text[: MAX_FIELD_VALUE_LENGTH - 3] + "..."
    return f"{_escape(key)}={_escape(text)}"


def _format_context_fields(extra: dict[str, Any]) -> list[str]:
    parts = [
        f"<yellow>{_format_priority_field(field, extra[field])}</yellow>"
        for field in PRIORITY_FIELDS
        if extra.get(field) is not None
    ]
    parts.extend(
        f"<dim>{_format_extra_field(key, value)}</dim>"
        for key, value in extra.items()
        if key not in PRIORITY_FIELDS and not key.startswith("_") and value is not None
    )
    return parts


def format_console_with_context(record: dict[str, Any]) -> str:
    """Render a record as one console line with its bound context inline.

    Args:
        record: Loguru record to format.

    Returns:
        str: Loguru format string for the record.
    """
    try:
        timestamp = record["time"].strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
        level_name = record["level"].name
        location = f"{record['name']}:{record['function']}:{record['line']}"

        parts = [
            f"<green>{timestamp}</green>",
            f"<level>{level_name: <8}</level>",
            f"<cyan>{_escape(location)}</cyan>",
        ]

        context_parts = _format_context_fields(record.get("extra", {}))
        if context_parts:
            parts.append(" ".join(f"[{part}]" for part in context_parts))

        parts.append(_escape(record.get("message", "")))
        line = " | ".join(parts)
        if record.get("exception"):
            line += "\n{exception}"
        return line + "\n"
    except (AttributeError, TypeError, ValueError, KeyError):
        return DEFAULT_LOG_FORMAT + "\n"


class InterceptHandler(logging.Handler):
    """Forward standard library log records to Loguru."""

    SKIP_FIELDS: Final[frozenset[str]] = frozenset(
        {
            "name",
            "msg",
            "args",
            "levelname",
            "levelno",
            "exc_info",
            "created",
            "msecs",
            "relativeCreated",
            "thread",
            "threadName",
            "processName",
            "process",
            "pathname",
            "filename",
            "module",
            "lineno",
            "funcName",
            "stack_info",
            "exc_text",
            "color_message",
            "taskName",
        }
    )

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk back to the frame that called the stdlib logger
        frame, depth = logging.currentframe(), 0
        while frame and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        extra: dict[str, Any] = {}
        if record.name == "uvicorn.access" and hasattr(record, "scope"):
            scope = record.scope
            extra["method"] = scope.get("method", "")
            extra["path"] = scope.get("path", "")
            extra["client_host"] = (scope.get("client") or ["unknown"])[0]
            headers = dict(scope.get("headers", []))
            if correlation_id := headers.get(b"x-correlation-id", b"").decode():
                extra["correlation_id"] = correlation_id

        extra.update(
            {
                key: value
                for key, value in record.__dict__.items()
                if key not in logging.LogRecord.__dict__
                and key not in self.SKIP_FIELDS
                and not key.startswith("_")
                and key != "scope"
            }
        )

        logger.opt(depth=depth, exception=record.exc_info).bind(**extra).log(
            level, record.getMessage()
        )


def _public_extra(record: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in record.get("extra", {}).items() if not k.startswith("_")}


def _exception_info(record: dict[str, Any]) -> dict[str, Any] | None:
    exc = record.get("exception")
    if not exc:
        return None
    return {
        "type": exc.type.__name__ if exc.type else None,
        "value": str(exc.value) if exc.value else None,
        "traceback": bool(exc.traceback),
    }


def _base_entry(record: dict[str, Any]) -> dict[str, Any]:
    return {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "logger": record["name"],
        "function": record["function"],
        "module": record["module"],
        "line": record["line"],
    }


def serialize_for_json(record: dict[str, Any]) -> str:
    """Format a record as a generic JSON line."""
    log_entry = _base_entry(record)
    log_entry.update(_public_extra(record))
    if exception := _exception_info(record):
        log_entry["exception"] = exception
    return json.dumps(log_entry, default=str) + "\n"


def serialize_for_aws(record: dict[str, Any]) -> str:
    """Format a record for CloudWatch Logs Insights."""
    log_entry = _base_entry(record)

    extra = _public_extra(record)
    if correlation_id := extra.pop("correlation_id", None):
        log_entry["traceId"] = correlation_id
    if request_id := extra.pop("request_id", None):
        log_entry["requestId"] = request_id
    for key, value in extra.items():
        log_entry.setdefault(key, value)

    if exception := _exception_info(record):
        log_entry["error"] = exception

    return json.dumps(log_entry, default=str) + "\n"


type FormatterFunc = Callable[[dict[str, Any]], str]

LOG_FORMATTERS: dict[str, FormatterFunc | None] = {
    "console": None,
    "json": serialize_for_json,
    "aws": serialize_for_aws,
}


def detect_environment() -> str:
    """Guess the formatter from cloud runtime environment variables."""
    if os.getenv("AWS_EXECUTION_ENV"):
        return "aws"
    return "console"


def setup_logging(settings: SettingsProtocol) -> None:
    """Configure Loguru once per process.

    Args:
        settings: Application settings containing log configuration.
    """
    if _state.configured:
        return

    logger.remove()

    formatter_type = settings.log_config.log_formatter_type or detect_environment()
    formatter = LOG_FORMATTERS.get(formatter_type)

    if formatter is None:
        formatter_type = "console"
        logger.add(
            sys.stdout,
            format=cast("Any", format_console_with_context),
            level=settings.log_config.log_level,
            enqueue=True,
            colorize=True,
            diagnose=settings.debug,
            backtrace=settings.debug,
        )
    else:
        structured = formatter

        def structured_sink(message: Any) -> None:  # noqa: ANN401 - loguru Message
            sys.stdout.write(structured(message.record))
            sys.stdout.flush()

        logger.add(
            structured_sink,
            level=settings.log_config.log_level,
            enqueue=True,
            diagnose=False,
            backtrace=False,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    for logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(logger_name)
        uvicorn_logger.handlers = [InterceptHandler()]
        uvicorn_logger.propagate = False

    # botocore logs every request at DEBUG
    for logger_name in ("botocore", "urllib3.connectionpool"):
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    logger.info(
        "Logging configured with {} formatter",
        formatter_type,
        log_level=settings.log_config.log_level,
    )

    _state.configured = True
