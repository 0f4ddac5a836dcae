"""Utility modules.

Provides:
- text: slugify, html_escape for text processing
- logger: get_logger for logging
"""

from changerawr_markdown.utils.logger import get_logger
from changerawr_markdown.utils.text import html_escape, slugify

__all__ = [
    "get_logger",
    "html_escape",
    "slugify",
]
