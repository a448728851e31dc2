"""Logging configuration for the FMailer provider.

Console-only structured logging: a colored, aligned text formatter for
development and a JSON formatter for machine consumption. Provider hosts
usually capture the plugin's stderr, so no file handler is installed.
"""

import json
import logging
import sys
import traceback
from datetime import UTC, datetime
from typing import Any, ClassVar

import structlog

from .config import get_settings_instance

# Internal guard to prevent double configuration when setup_logging() is called
# both by the provider entry point and by tests
_LOGGING_CONFIGURED = False

_RESERVED_RECORD_KEYS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "getMessage",
    }
)


class ColoredFormatter(logging.Formatter):
    """Colored formatter for human-readable logs with proper alignment."""

    COLORS: ClassVar[dict[str, str]] = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",
    }

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__()
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors and extra fields."""
        level_color = self.COLORS.get(record.levelname, "") if self.use_colors else ""
        reset_color = self.COLORS["RESET"] if self.use_colors else ""

        timestamp = datetime.fromtimestamp(record.created, UTC).strftime("%Y-%m-%d %H:%M:%S")
        message = record.getMessage()

        # Only short scalar extras are worth printing inline
        extra_fields = []
        for key, value in record.__dict__.items():
            if key in _RESERVED_RECORD_KEYS or value is None:
                continue
            if isinstance(value, (str, int, float, bool)) and len(str(value)) < 100:
                extra_fields.append(f"{key}={value}")

        log_line = f"{timestamp} - {level_color}{record.levelname}{reset_color} - {record.name} - {message}"
        if extra_fields:
            log_line += f" | {' '.join(extra_fields)}"

        if record.exc_info:
            exc_info = traceback.format_exception(*record.exc_info)
            log_line += f"\n{level_color}Exception:{reset_color}\n" + "".join(exc_info)

        return log_line


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            exc_type = record.exc_info[0]
            log_data["exception"] = {
                "type": exc_type.__name__ if exc_type is not None else "Unknown",
                "message": str(record.exc_info[1]),
                "traceback": traceback.format_exception(*record.exc_info),
            }

        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_KEYS:
                log_data[key] = value

        return json.dumps(log_data, default=str)


def setup_logging(force: bool = False) -> None:
    """Configure the root logger and structlog from settings.

    Output goes to stderr: stdout belongs to the host handshake.
    """
    global _LOGGING_CONFIGURED  # noqa: PLW0603
    if _LOGGING_CONFIGURED and not force:
        return

    settings = get_settings_instance()
    level = getattr(logging, settings.log_level)

    use_colors = settings.environment == "development"
    formatter = JSONFormatter() if settings.log_format == "json" else ColoredFormatter(use_colors=use_colors)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(console_handler)
    root_logger.setLevel(level)

    # httpx logs every request at INFO; the client already audits its own calls
    external_lib_level = max(level, logging.WARNING)
    for logger_name in ("httpx", "httpcore"):
        logging.getLogger(logger_name).setLevel(external_lib_level)

    # Route structlog through the stdlib handlers so both share one formatter
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.format_exc_info,
            structlog.stdlib.render_to_log_kwargs,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.getLogger("fmailer_provider").info(
        "Logging configured",
        extra={
            "log_level": settings.log_level,
            "log_format": settings.log_format,
            "environment": settings.environment,
        },
    )
    _LOGGING_CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Get a logger namespaced under ``fmailer_provider``."""
    if name.startswith("fmailer_provider"):
        return logging.getLogger(name)
    return logging.getLogger(f"fmailer_provider.{name}")
