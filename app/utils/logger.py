"""
Logging setup for the parking backend.

`configure_logging` installs the process handlers once: console always, plus
a size-rotated `logs/parking.log` when file logging is on. Modules only call
`get_logger(__name__)`; the first call applies the settings from app.config.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from app.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_LOG_FILE = os.path.join(
    os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))), "logs", "parking.log"
)

# tag on handlers we own, so a second configure call replaces rather than stacks
_OWNED = "_parking_handler"


def _console_handler(formatter: logging.Formatter) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    return handler


def _file_handler(path: str, formatter: logging.Formatter) -> logging.Handler:
    os.makedirs(os.path.dirname(path), exist_ok=True)
    handler = RotatingFileHandler(path, maxBytes=5 * 1024 * 1024, backupCount=10, encoding="utf-8")
    handler.setFormatter(formatter)
    return handler


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> logging.Logger:
    """Install console (and optional rotating file) handlers on the root logger."""
    root = logging.getLogger()
    for handler in [h for h in root.handlers if getattr(h, _OWNED, False)]:
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers = [_console_handler(formatter)]
    if log_file:
        handlers.append(_file_handler(log_file, formatter))

    root.setLevel(level.upper())
    for handler in handlers:
        setattr(handler, _OWNED, True)
        root.addHandler(handler)
    return root


def _is_configured() -> bool:
    return any(getattr(h, _OWNED, False) for h in logging.getLogger().handlers)


def get_logger(name: str) -> logging.Logger:
    """Named logger for a module. Applies app settings on first use."""
    if not _is_configured():
        configure_logging(settings.LOG_LEVEL, DEFAULT_LOG_FILE if settings.LOG_TO_FILE else None)
    return logging.getLogger(name)
