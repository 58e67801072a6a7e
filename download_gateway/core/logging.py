"""Structured logging for the gateway.

structlog renders every event to a JSON string and hands it to stdlib logging,
which fans it out to stdout and to a JSON log file. Outside development the
console also gets JSON so container log shippers can parse it.
"""

import atexit
import logging
import sys
from pathlib import Path
from typing import List, Optional

import structlog
from pythonjsonlogger import jsonlogger

from .config import Settings

STRUCTLOG_PROCESSORS = [
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.processors.UnicodeDecoder(),
    structlog.processors.JSONRenderer(),
]

QUIET_LOGGERS = {
    "uvicorn": logging.INFO,
    "uvicorn.access": logging.INFO,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
}

_installed_handlers: List[logging.Handler] = []


def _log_directory(configured: str) -> Path:
    """Return ``configured`` if it can be created, else ``./logs``."""
    for candidate in (Path(configured), Path.cwd() / "logs"):
        try:
            candidate.mkdir(parents=True, exist_ok=True)
            return candidate
        except OSError:
            continue
    raise OSError(f"No writable log directory (tried {configured!r} and ./logs)")


def _json_formatter() -> logging.Formatter:
    return jsonlogger.JsonFormatter(
        "%(asctime)s %(name)s %(levelname)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _build_handlers(settings: Settings, level: int) -> List[logging.Handler]:
    console = logging.StreamHandler(sys.stdout)
    if settings.is_development:
        console.setFormatter(
            logging.Formatter(
                "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
                datefmt="%H:%M:%S",
            )
        )
    else:
        console.setFormatter(_json_formatter())

    log_file = _log_directory(settings.log_dir) / settings.log_file_name
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setFormatter(_json_formatter())

    handlers: List[logging.Handler] = [console, file_handler]
    for handler in handlers:
        handler.setLevel(level)
    return handlers


def setup_logging(settings: Optional[Settings] = None) -> None:
    """Configure structlog and the root logger. Safe to call repeatedly."""
    settings = settings or Settings()
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    structlog.configure(
        processors=STRUCTLOG_PROCESSORS,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    while _installed_handlers:
        _installed_handlers.pop().close()

    for handler in _build_handlers(settings, level):
        root_logger.addHandler(handler)
        _installed_handlers.append(handler)
    root_logger.setLevel(level)

    for name, quiet_level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level)


def _close_handlers() -> None:
    for handler in _installed_handlers:
        handler.close()


atexit.register(_close_handlers)
