"""Minimal logging utilities for the markdown engine.

Provides a simple get_logger function that wraps the standard library logging.

Example:
    >>> from changerawr_markdown.utils.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Building engine")
"""

from __future__ import annotations

import logging

_ROOT = "changerawr_markdown"


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the given name.

    Returns a standard library logger under the ``changerawr_markdown.`` prefix.

    Args:
        name: Logger name (typically __name__)

    Returns:
        logging.Logger instance

    Example:
        >>> logger = get_logger("mymodule")
        >>> logger.name
        'changerawr_markdown.mymodule'
    """
    if not (name == _ROOT or name.startswith(_ROOT + ".")):
        name = f"{_ROOT}.{name}"
    return logging.getLogger(name)
