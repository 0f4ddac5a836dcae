"""Tests for the bleach-backed HTML sanitizer."""

from __future__ import annotations

import logging
import threading

import pytest

from changerawr_markdown.sanitize import (
    ALLOWED_TAGS,
    Sanitizer,
    SanitizerConfig,
    is_dangerous_url,
    normalize_unicode,
    sanitize_html,
)


class TestIsDangerousUrl:
    @pytest.mark.parametrize(
        "url",
        [
            "javascript:alert(1)",
            "JavaScript:alert(1)",
            "  javascript:alert(1)",
            "java\nscript:alert(1)",
            "vbscript:msgbox",
            "data:text/html;base64,PHNjcmlwdD4=",
        ],
    )
    def test_dangerous(self, url: str) -> None:
        assert is_dangerous_url(url)

    @pytest.mark.parametrize(
        "url",
        ["https://example.com", "/relative/path", "#anchor", "mailto:a@b.c", "javascript"],
    )
    def test_safe(self, url: str) -> None:
        assert not is_dangerous_url(url)


class TestNormalizeUnicode:
    def test_strips_zero_width_and_bidi(self) -> None:
        assert normalize_unicode("a\u200bb\u202ec\ufeff") == "abc"

    def test_keeps_regular_text(self) -> None:
        assert normalize_unicode("café ✓") == "café ✓"


class TestSanitizer:
    def test_script_tag_removed(self) -> None:
        out = sanitize_html("<p>Hello <script>alert(1)</script> world</p>")
        assert "<script" not in out
        assert "Hello" in out
        assert "world" in out

    def test_event_handlers_removed(self) -> None:
        out = sanitize_html('<p onclick="steal()">Hi</p><img src="x.png" onerror="alert(1)">')
        assert "onclick" not in out
        assert "onerror" not in out
        assert "Hi" in out

    def test_javascript_href_removed(self) -> None:
        out = sanitize_html('<a href="javascript:alert(1)">x</a>')
        assert "javascript" not in out
        assert ">x</a>" in out

    def test_safe_href_kept(self) -> None:
        out = sanitize_html('<a href="https://example.com" target="_blank">x</a>')
        assert 'href="https://example.com"' in out
        assert 'target="_blank"' in out

    def test_comments_removed(self) -> None:
        assert "secret" not in sanitize_html("<p>a<!-- secret --></p>")

    def test_unknown_tags_stripped_text_kept(self) -> None:
        out = sanitize_html("<p><marquee>moving</marquee></p>")
        assert "marquee" not in out
        assert "moving" in out

    def test_class_kept(self) -> None:
        out = sanitize_html('<p class="cum-subtext">note</p>')
        assert 'class="cum-subtext"' in out

    def test_style_limited_to_text_align(self) -> None:
        out = sanitize_html(
            '<table><tr><td style="text-align: center; color: red">1</td></tr></table>'
        )
        assert "text-align" in out
        assert "center" in out
        assert "color" not in out

    def test_style_dropped_on_other_tags(self) -> None:
        assert "style" not in sanitize_html('<p style="text-align: center">x</p>')

    def test_iframe_on_embed_host_kept(self) -> None:
        out = sanitize_html(
            '<iframe src="https://www.youtube.com/embed/abc" height="315"></iframe>'
        )
        assert 'src="https://www.youtube.com/embed/abc"' in out
        assert 'height="315"' in out

    @pytest.mark.parametrize(
        "src",
        ["https://evil.example/embed", "http://www.youtube.com/embed/abc"],
    )
    def test_iframe_src_outside_allow_list_dropped(self, src: str) -> None:
        out = sanitize_html(f'<iframe src="{src}"></iframe>')
        assert src not in out

    def test_task_checkbox_kept(self) -> None:
        out = sanitize_html('<li><input type="checkbox" disabled checked> done</li>')
        assert 'type="checkbox"' in out
        assert "done" in out

    def test_unicode_normalized_by_default(self) -> None:
        assert "\u200b" not in sanitize_html("<p>a\u200bb</p>")

    def test_unicode_normalization_can_be_disabled(self) -> None:
        sanitizer = Sanitizer(SanitizerConfig(normalize_unicode=False))
        assert "\u200b" in sanitizer.sanitize("<p>a\u200bb</p>")

    def test_empty_input(self) -> None:
        assert sanitize_html("") == ""

    def test_custom_tag_allow_list(self) -> None:
        sanitizer = Sanitizer(SanitizerConfig(tags=ALLOWED_TAGS - {"img"}))
        assert "<img" not in sanitizer.sanitize('<img src="https://e.com/a.png">')

    def test_failure_degrades_to_text(
        self, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
    ) -> None:
        class BrokenCleaner:
            def clean(self, html: str) -> str:
                raise RuntimeError("parser exploded")

        monkeypatch.setattr(Sanitizer, "_cleaner", lambda self: BrokenCleaner())
        with caplog.at_level(logging.ERROR, logger="changerawr_markdown"):
            out = Sanitizer().sanitize("<b>x & y</b><script>bad()</script>")
        assert out == "x &amp; ybad()"
        assert "sanitization failed" in caplog.text

    def test_cleaner_is_per_thread(self) -> None:
        sanitizer = Sanitizer()
        main_cleaner = sanitizer._cleaner()
        assert sanitizer._cleaner() is main_cleaner
        other: list[object] = []
        thread = threading.Thread(target=lambda: other.append(sanitizer._cleaner()))
        thread.start()
        thread.join()
        assert other[0] is not main_cleaner
