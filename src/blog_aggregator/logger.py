"""
Loguru setup.

Modules log through ``get_logger(__name__)``; ``setup_logger`` decides where
records go (stderr and/or a rotating file) based on ``LoggingConfig``.
"""

import sys
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from loguru import logger as _logger

from blog_aggregator.config import get_config

if TYPE_CHECKING:
    from blog_aggregator.config import LoggingConfig


def setup_logger(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    log_config: Optional["LoggingConfig"] = None,
) -> None:
    """Replace all loguru sinks with the configured ones.

    Args:
        level: Minimum level, overriding ``log_config.level``
        log_file: File sink path, overriding ``log_config.file_path``
        log_config: Sink settings; the global config's when omitted
    """
    settings = log_config or get_config().logging
    level = (level or settings.level).upper()

    _logger.remove()

    common = {"format": settings.format, "level": level, "backtrace": True, "diagnose": False}

    if settings.console_enabled:
        _logger.add(sys.stderr, colorize=True, **common)

    if settings.file_enabled:
        path = Path(log_file or settings.file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        _logger.add(
            str(path),
            rotation=settings.rotation,
            retention=settings.retention,
            compression="zip",
            encoding="utf-8",
            enqueue=True,  # records arrive from request and scheduler threads
            **common,
        )


def get_logger(name: Optional[str] = None):
    """Return the shared logger, bound to ``name`` when one is given.

    Args:
        name: Usually the calling module's ``__name__``
    """
    return _logger.bind(name=name) if name else _logger


logger = _logger

__all__ = ["setup_logger", "get_logger", "logger"]
