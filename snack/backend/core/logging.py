"""
Centralized Logging Configuration.

Every module logs through structlog via get_logger(). Settings come from
config/settings/logging.yaml, validated against LoggingSchema.

Records are JSON (or colored console output in development) carrying:
    timestamp, level, logger, event, func_name, lineno
    request_id, frontend, method, path  (bound by RequestContextMiddleware)
    source                              (web, extension, cli, webhook, ...)

Values passed through ``extra={...}`` are lifted to the top level of the
record. Values under any key listed in ``redact_keys`` are masked, so
tokens, auth codes, and passwords never reach the log sink.

Usage:
    from snack.backend.core.logging import get_logger

    logger = get_logger(__name__)
    logger.info("List created", extra={"list_id": lst.id})
"""

import logging
import sys
from collections.abc import Iterable
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog
from structlog.typing import EventDict, Processor, WrappedLogger

from snack.backend.core.config import find_project_root, load_yaml_config
from snack.backend.core.config_schema import FileHandlerSchema, LoggingSchema

VALID_SOURCES = frozenset({
    "web",
    "mobile",
    "extension",
    "cli",
    "webhook",
    "internal",
    "unknown",
})

REDACTED = "[REDACTED]"

_logging_config: LoggingSchema | None = None


def _load_logging_config() -> LoggingSchema:
    """
    Raises:
        FileNotFoundError: If logging.yaml does not exist
    """
    global _logging_config
    if _logging_config is None:
        _logging_config = LoggingSchema(**load_yaml_config("logging.yaml"))
    return _logging_config


def _resolve_log_path(configured_path: str) -> Path:
    return find_project_root() / configured_path


# =============================================================================
# Processors
# =============================================================================


def lift_extra(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
    """Merge the stdlib-style ``extra`` mapping into the record."""
    extra = event_dict.pop("extra", None)
    if isinstance(extra, dict):
        for key, value in extra.items():
            event_dict.setdefault(key, value)
    return event_dict


def normalize_source(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
    source = event_dict.get("source")
    if source is not None and source not in VALID_SOURCES:
        event_dict["source"] = "unknown"
    return event_dict


def make_redactor(keys: Iterable[str]) -> Processor:
    """Build a processor masking the values of sensitive keys, case-insensitively."""
    sensitive = frozenset(key.lower() for key in keys)

    def redact(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
        for key in event_dict:
            if key.lower() in sensitive and event_dict[key] is not None:
                event_dict[key] = REDACTED
        return event_dict

    return redact


def _shared_processors(config: LoggingSchema) -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        lift_extra,
        normalize_source,
        make_redactor(config.redact_keys),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            ],
        ),
    ]


# =============================================================================
# Handlers
# =============================================================================


def _stdout_handler(formatter: logging.Formatter) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    return handler


def _file_handler(file_config: FileHandlerSchema, formatter: logging.Formatter) -> logging.Handler:
    log_path = _resolve_log_path(file_config.path)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        filename=str(log_path),
        maxBytes=file_config.max_bytes,
        backupCount=file_config.backup_count,
        encoding="utf-8",
    )
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    level: str | None = None,
    format_type: str | None = None,
    enable_console: bool | None = None,
    enable_file_logging: bool | None = None,
) -> None:
    """
    Configure structlog and the root stdlib logger.

    Arguments override the matching logging.yaml values. The file handler
    always writes JSON; the console follows ``format``.
    """
    config = _load_logging_config()

    log_level = getattr(logging, (level or config.level).upper())
    fmt = format_type or config.format
    console_on = config.handlers.console.enabled if enable_console is None else enable_console
    file_on = config.handlers.file.enabled if enable_file_logging is None else enable_file_logging

    shared = _shared_processors(config)
    structlog.configure(
        processors=shared + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    json_formatter = structlog.stdlib.ProcessorFormatter(
        processor=structlog.processors.JSONRenderer(),
        foreign_pre_chain=shared,
    )
    if fmt == "console":
        console_formatter = structlog.stdlib.ProcessorFormatter(
            processor=structlog.dev.ConsoleRenderer(colors=True),
            foreign_pre_chain=shared,
        )
    else:
        console_formatter = json_formatter

    handlers: list[logging.Handler] = []
    if console_on:
        handlers.append(_stdout_handler(console_formatter))
    if file_on:
        handlers.append(_file_handler(config.handlers.file, json_formatter))

    root = logging.getLogger()
    root.handlers = handlers
    root.setLevel(log_level)

    for name, library_level in config.library_levels.items():
        logging.getLogger(name).setLevel(getattr(logging, library_level.upper()))


def get_logger(name: str) -> Any:
    return structlog.get_logger(name)


def log_with_source(logger: Any, source: str, level: str, message: str, **kwargs: Any) -> None:
    """
    Log with an explicit source, for work outside the HTTP request path.

    Example:
        log_with_source(logger, "cli", "info", "Save counts repaired", fixed=3)
    """
    getattr(logger, level.lower())(message, source=source, **kwargs)
