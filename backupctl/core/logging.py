"""
Centralized Logging Configuration.

All modules must use this logging setup. Do not create standalone loggers.
Logs go to stderr so that rendered command output on stdout stays clean.

Structured fields in every JSON log record:
    timestamp   - ISO 8601 UTC timestamp
    level       - Log level (debug, info, warning, error, critical)
    logger      - Module path (e.g., backupctl.client.coordinator)
    event       - Log message
    func_name   - Function that emitted the log
    lineno      - Line number in source file
    command     - Command being executed (bound by the router)

Values of credential fields (api_token, authorization) are masked before
rendering.

Usage:
    from backupctl.core.logging import get_logger, setup_logging

    # Setup once per invocation, after settings are resolved
    setup_logging(level=settings.log_level, format_type=settings.log_format)

    # Get logger in modules
    logger = get_logger(__name__)
    logger.info("Backup started", storage="s3-main")
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, TextIO

import structlog
from structlog.typing import EventDict, Processor

LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUP_COUNT = 3

SECRET_FIELDS = frozenset({"api_token", "authorization", "token"})
REDACTED = "***"

# Third-party loggers that are noisy below WARNING
QUIET_LOGGERS = ("grpc._cython.cygrpc", "asyncio")


def redact_secrets(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Structlog processor that masks credential values."""
    for key in SECRET_FIELDS.intersection(event_dict):
        if event_dict[key]:
            event_dict[key] = REDACTED
    return event_dict


def build_processors() -> list[Processor]:
    """Processors shared by structlog loggers and foreign stdlib records."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            ],
        ),
        redact_secrets,
    ]


def _formatter(renderer: Processor, pre_chain: list[Processor]) -> logging.Formatter:
    return structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=pre_chain)


def _file_handler(log_file: str, formatter: logging.Formatter) -> logging.Handler:
    path = Path(log_file).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        filename=str(path),
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    level: str = "WARNING",
    format_type: str = "console",
    log_file: str | None = None,
    stream: TextIO | None = None,
) -> None:
    """
    Configure structured logging for the process.

    Safe to call more than once; previous root handlers are replaced.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        format_type: Console output format ('json' or 'console').
        log_file: Optional path of a rotating JSONL log file.
        stream: Console stream. Defaults to stderr.
    """
    processors = build_processors()

    structlog.configure(
        processors=[*processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    json_formatter = _formatter(structlog.processors.JSONRenderer(), processors)
    if format_type == "json":
        console_formatter = json_formatter
    else:
        console_formatter = _formatter(structlog.dev.ConsoleRenderer(colors=False), processors)

    console = logging.StreamHandler(stream or sys.stderr)
    console.setFormatter(console_formatter)
    handlers: list[logging.Handler] = [console]
    if log_file:
        handlers.append(_file_handler(log_file, json_formatter))

    root = logging.getLogger()
    for old in root.handlers[:]:
        root.removeHandler(old)
        old.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper()))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> Any:
    """
    Get a logger instance for the given name.

    Args:
        name: Logger name, typically __name__

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)
