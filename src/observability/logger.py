"""Logging setup for build info loading.

Records go to stderr. Loggers created here live under the `build-info`
namespace so `configure_logging` can set one level for all of them.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Optional

ROOT_LOGGER_NAME = "build-info"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str = ROOT_LOGGER_NAME, level: Optional[str] = None) -> logging.Logger:
    """Create (or return) a configured logger.

    Args:
        name: Logger name. Names outside the `build-info` namespace are nested under it.
        level: Optional log level string (e.g. "INFO"). If omitted, keeps existing.

    Returns:
        Configured logger writing to stderr.
    """

    if name != ROOT_LOGGER_NAME and not name.startswith(f"{ROOT_LOGGER_NAME}."):
        name = f"{ROOT_LOGGER_NAME}.{name}"

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.propagate = False
    if root.level == logging.NOTSET:
        root.setLevel(logging.INFO)

    if not any(isinstance(h, logging.StreamHandler) for h in root.handlers):
        handler = logging.StreamHandler(stream=sys.stderr)
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT))
        root.addHandler(handler)

    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level.upper())
    return logger


def configure_logging(settings: Any) -> logging.Logger:
    """Apply `settings.observability.log_level` to the whole namespace."""

    level = getattr(getattr(settings, "observability", None), "log_level", None)
    return get_logger(ROOT_LOGGER_NAME, level=level)
