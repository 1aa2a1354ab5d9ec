"""Minimal logging utilities for hcompile.

Provides a simple get_logger function that wraps the standard library logging.

Example:
    >>> from hcompile.utils.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.debug("Compiling template")
"""

from __future__ import annotations

import logging


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the given name.

    Returns a standard library logger with the "hcompile." prefix.

    Args:
        name: Logger name (typically __name__)

    Returns:
        logging.Logger instance

    Example:
        >>> logger = get_logger("mymodule")
        >>> logger.name
        'hcompile.mymodule'
    """
    if not (name == "hcompile" or name.startswith("hcompile.")):
        name = f"hcompile.{name}"
    return logging.getLogger(name)
