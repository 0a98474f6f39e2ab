"""Central logging configuration for the library."""

from __future__ import annotations

import logging
from typing import Optional

_DEFAULT_LEVEL = logging.INFO
_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a module-level logger."""

    return logging.getLogger(name)


def configure_logging(*, verbose: bool = False) -> None:
    """Install a console handler on the root logger when none exists yet.

    Args:
        verbose: Log at DEBUG instead of INFO.
    """

    level = logging.DEBUG if verbose else _DEFAULT_LEVEL
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=_FORMAT)
    root.setLevel(level)
