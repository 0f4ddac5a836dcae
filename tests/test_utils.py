"""Tests for changerawr_markdown utility modules."""

import logging

from changerawr_markdown.stringbuilder import StringBuilder
from changerawr_markdown.utils.logger import get_logger
from changerawr_markdown.utils.text import html_escape, slugify


class TestSlugify:
    """Tests for slugify function."""

    def test_basic_slugify(self) -> None:
        assert slugify("Hello World") == "hello-world"
        assert slugify("Hello World!") == "hello-world"
        assert slugify("Test & Code") == "test-code"

    def test_html_entities(self) -> None:
        assert slugify("Test &amp; Code") == "test-code"
        assert slugify("&lt;script&gt;") == "script"

    def test_entities_kept_when_not_unescaping(self) -> None:
        assert slugify("a &amp; b", unescape_html=False) == "a-amp-b"

    def test_unicode(self) -> None:
        assert slugify("Café") == "café"
        assert slugify("你好世界") == "你好世界"

    def test_version_numbers(self) -> None:
        assert slugify("Release 2.4.0") == "release-240"

    def test_custom_separator(self) -> None:
        assert slugify("hello world", separator="_") == "hello_world"

    def test_collapses_and_trims_separators(self) -> None:
        assert slugify("  -- a  --  b --  ") == "a-b"

    def test_empty_string(self) -> None:
        assert slugify("") == ""
        assert slugify("!!!") == ""


class TestHtmlEscape:
    def test_escapes_markup(self) -> None:
        assert html_escape('<a href="x">&</a>') == "&lt;a href=&quot;x&quot;&gt;&amp;&lt;/a&gt;"

    def test_single_quote_untouched(self) -> None:
        assert html_escape("it's") == "it's"

    def test_empty(self) -> None:
        assert html_escape("") == ""


class TestGetLogger:
    def test_prefixes_foreign_names(self) -> None:
        assert get_logger("mymodule").name == "changerawr_markdown.mymodule"

    def test_package_names_unchanged(self) -> None:
        assert get_logger("changerawr_markdown.engine").name == "changerawr_markdown.engine"
        assert get_logger("changerawr_markdown").name == "changerawr_markdown"

    def test_similar_prefix_is_not_package(self) -> None:
        assert get_logger("changerawr_markdownx").name == "changerawr_markdown.changerawr_markdownx"

    def test_returns_stdlib_logger(self) -> None:
        assert isinstance(get_logger(__name__), logging.Logger)


class TestStringBuilder:
    def test_append_chains(self) -> None:
        sb = StringBuilder()
        sb.append("<tr>").append("<td>1</td>").append("</tr>")
        assert sb.build() == "<tr><td>1</td></tr>"

    def test_empty_parts_skipped(self) -> None:
        sb = StringBuilder().append("").extend(["a", "", "b"])
        assert len(sb) == 2
        assert sb.build() == "ab"

    def test_bool(self) -> None:
        sb = StringBuilder()
        assert not sb
        sb.append("x")
        assert sb
