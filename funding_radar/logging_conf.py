"""Logging configuration built around structlog JSON logging."""

from __future__ import annotations

import logging
import logging.config
import re
from pathlib import Path
from typing import Iterable

import structlog

_LOGGING_INITIALISED = False
_LOG_DIR: Path | None = None


def _default_log_dir() -> Path:
    return Path(__file__).resolve().parents[1] / "logs"


def current_log_dir() -> Path:
    return _LOG_DIR or _default_log_dir()


def configure_logging(verbose: bool = False, log_dir: Path | None = None) -> structlog.BoundLogger:
    """Configure structlog + stdlib handlers and return application logger."""

    global _LOGGING_INITIALISED, _LOG_DIR
    if _LOGGING_INITIALISED:
        return structlog.get_logger("funding_radar")

    _LOG_DIR = log_dir or _default_log_dir()
    error_log = _LOG_DIR / "error.log"
    agent_log = _LOG_DIR / "agent.log"
    (_LOG_DIR / "sources").mkdir(parents=True, exist_ok=True)
    error_log.touch(exist_ok=True)
    agent_log.touch(exist_ok=True)

    level = "DEBUG" if verbose else "INFO"
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "plain": {
                    "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
                    "fmt": "%(asctime)s %(levelname)s %(name)s %(message)s",
                }
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "level": level,
                    "formatter": "plain",
                    "stream": "ext://sys.stderr",
                },
                "agent_file": {
                    "class": "logging.FileHandler",
                    "level": "INFO",
                    "filename": str(agent_log),
                    "formatter": "plain",
                    "encoding": "utf-8",
                },
                "error_file": {
                    "class": "logging.FileHandler",
                    "level": "ERROR",
                    "filename": str(error_log),
                    "formatter": "plain",
                    "encoding": "utf-8",
                },
            },
            "loggers": {
                "funding_radar": {
                    "handlers": ["console", "agent_file", "error_file"],
                    "level": level,
                    "propagate": False,
                },
            },
        }
    )

    # Forward structlog events to stdlib; JSON rendering happens in the handlers.
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
    _LOGGING_INITIALISED = True
    return structlog.get_logger("funding_radar")


def source_log_name(domain: str) -> str:
    """File-safe name for a source domain; separators and dot runs collapse to ``-``."""

    slug = "".join(ch if ch.isalnum() or ch in ".-" else "-" for ch in domain.lower())
    slug = re.sub(r"\.{2,}", "-", slug).strip(".-")
    return slug or "unknown"


def source_logger(domain: str, verbose: bool = False) -> structlog.BoundLogger:
    """Return a logger bound to one source domain with its own log file."""

    configure_logging(verbose)
    name = source_log_name(domain)
    source_log_path = current_log_dir() / "sources" / f"{name}.log"
    source_log_path.parent.mkdir(parents=True, exist_ok=True)

    logger_name = f"funding_radar.source.{name}"
    py_logger = logging.getLogger(logger_name)
    if not any(
        isinstance(handler, logging.FileHandler) and handler.baseFilename == str(source_log_path)
        for handler in py_logger.handlers
    ):
        file_handler = logging.FileHandler(source_log_path, encoding="utf-8")
        global_logger = logging.getLogger("funding_radar")
        if global_logger.handlers:
            file_handler.setFormatter(global_logger.handlers[0].formatter)
        file_handler.setLevel(logging.INFO)
        py_logger.addHandler(file_handler)

    return structlog.get_logger(logger_name).bind(source=domain)


def tail_log(path: Path, line_count: int = 100) -> list[str]:
    """Return the last N lines from a log file."""

    if not path.exists():
        return []
    with path.open("r", encoding="utf-8", errors="ignore") as stream:
        lines = stream.readlines()
    return lines[-line_count:]


def available_source_logs() -> Iterable[Path]:
    """Yield available source log file paths."""

    sources_dir = current_log_dir() / "sources"
    if not sources_dir.exists():
        return []
    return sorted(p for p in sources_dir.glob("*.log"))


__all__ = [
    "available_source_logs",
    "configure_logging",
    "current_log_dir",
    "source_log_name",
    "source_logger",
    "tail_log",
]
