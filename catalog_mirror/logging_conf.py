"""structlog setup: events are rendered as JSON by stdlib handlers."""

from __future__ import annotations

import logging.config
from collections import deque
from pathlib import Path
from typing import Any

import structlog

APP_LOG = "catalog_mirror.log"
ERROR_LOG = "error.log"
LOGGER_NAME = "catalog_mirror"

JSON_FORMATTER = {
    "()": "pythonjsonlogger.json.JsonFormatter",
    "fmt": "%(asctime)s %(levelname)s %(name)s %(message)s",
}

# (log directory, level) of the active configuration.
_active: tuple[Path, str] | None = None


def _file_handler(path: Path, level: str) -> dict[str, Any]:
    return {
        "class": "logging.FileHandler",
        "level": level,
        "filename": str(path),
        "encoding": "utf-8",
        "formatter": "json",
    }


def build_logging_config(log_dir: Path, level: str) -> dict[str, Any]:
    """Return the ``dictConfig`` mapping for console, app-log and error-log output."""

    handlers = {
        "console": {"class": "logging.StreamHandler", "level": level, "formatter": "json"},
        "app_file": _file_handler(log_dir / APP_LOG, "INFO"),
        "error_file": _file_handler(log_dir / ERROR_LOG, "ERROR"),
    }
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"json": JSON_FORMATTER},
        "handlers": handlers,
        "loggers": {
            LOGGER_NAME: {"handlers": list(handlers), "level": level, "propagate": False},
        },
    }


def configure_logging(verbose: bool = False, log_dir: Path | None = None) -> structlog.BoundLogger:
    """Point the ``catalog_mirror`` logger at ``log_dir`` and return a bound logger.

    Calling again with the same directory and level is a no-op.
    """

    global _active
    target = (log_dir or Path.cwd() / "logs").resolve()
    level = "DEBUG" if verbose else "INFO"
    if _active != (target, level):
        target.mkdir(parents=True, exist_ok=True)
        logging.config.dictConfig(build_logging_config(target, level))
        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.stdlib.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
        _active = (target, level)
    return structlog.get_logger(LOGGER_NAME)


def tail_log(path: Path, line_count: int = 100) -> list[str]:
    """Return up to ``line_count`` trailing lines of ``path``; empty if it does not exist."""

    if line_count <= 0 or not path.exists():
        return []
    with path.open("r", encoding="utf-8", errors="ignore") as stream:
        return list(deque(stream, maxlen=line_count))


__all__ = ["APP_LOG", "ERROR_LOG", "build_logging_config", "configure_logging", "tail_log"]
