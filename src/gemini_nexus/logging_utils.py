"""Logging bootstrap with optional structlog JSON output."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import structlog

APP_LOGGER_PREFIX = "gemini_nexus"
NOISY_LIBRARY_LOGGERS = ("httpx", "httpcore", "google_genai")
DEFAULT_LOG_FILE = "~/.local/state/gemini-nexus/app.log"


def _app_only(record: logging.LogRecord) -> bool:
    return record.name == APP_LOGGER_PREFIX or record.name.startswith(
        f"{APP_LOGGER_PREFIX}."
    )


def _private_file_handler(path: Path, level: int) -> logging.FileHandler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    if os.name == "posix":
        try:
            path.chmod(0o600)
        except OSError:
            logging.getLogger(__name__).warning(
                "Unable to enforce 0600 permissions for %s", path
            )
    return handler


def build_json_formatter() -> structlog.stdlib.ProcessorFormatter:
    """Return a formatter rendering stdlib records, ``extra`` fields included, as JSON."""
    return structlog.stdlib.ProcessorFormatter(
        processor=structlog.processors.JSONRenderer(
            ensure_ascii=False, separators=(",", ":")
        ),
        foreign_pre_chain=[
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.ExtraAdder(),
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
        ],
    )


def configure_logging(logging_config: dict[str, Any]) -> None:
    """Configure root logging from the [logging] config section.

    Modules log through ``logging.getLogger(__name__)`` with an ``event``
    extra; in structured mode structlog renders those records as JSON lines.
    The console only shows warnings and above from this package, the optional
    log file receives everything at the configured level.
    """
    level_name = str(logging_config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    formatter: logging.Formatter
    if bool(logging_config.get("structured", True)):
        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.TimeStamper(fmt="iso", utc=True),
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
        formatter = build_json_formatter()
    else:
        formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    for logger_name in NOISY_LIBRARY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    console.setLevel(max(level, logging.WARNING))
    console.addFilter(_app_only)
    root.addHandler(console)

    if bool(logging_config.get("log_to_file", False)):
        target = Path(
            str(logging_config.get("log_file_path", DEFAULT_LOG_FILE))
        ).expanduser()
        handler = _private_file_handler(target, level)
        handler.setFormatter(formatter)
        root.addHandler(handler)
