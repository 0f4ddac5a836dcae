"""Renderers for token trees.

Available renderers:
- HtmlRenderer: HTML output driven by extension render rules

"""

from changerawr_markdown.renderers.html import HtmlRenderer

__all__ = ["HtmlRenderer"]
