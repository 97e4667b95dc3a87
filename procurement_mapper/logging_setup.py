"""
Logging for Procurement Mapper.

Each module takes a child logger by its short module name, e.g.
``get_logger("tokenizer")`` logs as ``procurement_mapper.tokenizer``.
``ProcurementSheetPipeline`` calls ``configure_logging`` on construction;
the first call installs the handlers and later calls only change the level,
so several pipelines in one process never duplicate output.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional


_CONFIGURED = False

LOGGER_NAMESPACE = "procurement_mapper"

LOG_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)-30s | %(message)s"
)
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
) -> None:
    """Set up the ``procurement_mapper`` logger tree.

    Parameters
    ----------
    level:
        Minimum severity to emit.
    log_file:
        If provided, a ``FileHandler`` is added alongside the console handler.

    Repeated calls only adjust the level; handlers are installed once.
    """
    global _CONFIGURED  # noqa: PLW0603
    root = logging.getLogger(LOGGER_NAMESPACE)
    root.setLevel(level)
    if _CONFIGURED:
        return

    root.propagate = False

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_file:
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setFormatter(formatter)
        root.addHandler(fh)

    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Return ``procurement_mapper.<name>``; *name* is the short module name."""
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")
