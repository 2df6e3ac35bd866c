"""Mini README: Application-wide logging helpers for Fundwise.

Structure:
    * level_for_environment - maps the configured environment label to a level.
    * configure_root_logger - installs the shared console handler once and
      lets later callers (the CLI) raise or lower the level.
    * get_logger - module logger factory that guarantees the baseline setup.

Usage:
    Every module calls ``get_logger(__name__)`` at import time. Credentials
    and passkeys must never be passed to these loggers; log usernames and
    entry identifiers instead.
"""

from __future__ import annotations

import logging
from typing import Optional

_LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s"
_ROOT_HANDLER: Optional[logging.Handler] = None


def level_for_environment(environment: str) -> int:
    """Development runs are chatty, everything else logs at INFO."""

    return logging.DEBUG if environment.strip().lower() == "development" else logging.INFO


def configure_root_logger(level: int = logging.INFO) -> None:
    """Attach the fund tracker handler to the root logger exactly once."""

    global _ROOT_HANDLER
    root_logger = logging.getLogger()
    if _ROOT_HANDLER is None:
        _ROOT_HANDLER = logging.StreamHandler()
        _ROOT_HANDLER.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        root_logger.addHandler(_ROOT_HANDLER)
    root_logger.setLevel(level)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a module-specific logger ensuring baseline configuration."""

    if _ROOT_HANDLER is None:
        configure_root_logger()
    return logging.getLogger(name)
