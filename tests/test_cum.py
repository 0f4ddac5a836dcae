"""Tests for CUM directives (button, alert, embed) and subtext lines."""

from __future__ import annotations

import pytest

from changerawr_markdown import EngineConfig, ExtensionRegistryBuilder, TokenKind
from changerawr_markdown.extensions import builtin_extensions
from changerawr_markdown.extensions.cum import (
    embed_src,
    parse_button_options,
    parse_embed_options,
)
from changerawr_markdown.parser import Parser
from changerawr_markdown.renderers import HtmlRenderer
from changerawr_markdown.tokens import AlertAttrs, ButtonAttrs, EmbedAttrs


def _html(source: str, registry) -> str:
    return HtmlRenderer(registry).render(Parser(source, registry).parse())


@pytest.fixture
def plain_registry():
    """Registry built with CUM disabled."""
    config = EngineConfig(cum_enabled=False)
    return ExtensionRegistryBuilder().register_all(builtin_extensions(config)).build()


class TestButtonOptions:
    def test_defaults(self) -> None:
        assert parse_button_options(None, "https://x.com") == ButtonAttrs(
            url="https://x.com", style="primary", size="md", disabled=False, target="_blank"
        )

    def test_order_independent(self) -> None:
        assert parse_button_options("lg, success", "u") == parse_button_options("success,lg", "u")

    def test_flags(self) -> None:
        attrs = parse_button_options("disabled,self,ghost,sm", "u")
        assert attrs.disabled is True
        assert attrs.target == "_self"
        assert attrs.style == "ghost"
        assert attrs.size == "sm"

    def test_unknown_options_ignored(self) -> None:
        assert parse_button_options("sparkly, huge", "u").style == "primary"


class TestButton:
    def test_styled_button(self, registry) -> None:
        html = _html("[button:Click](https://x.com){success,lg}", registry)
        assert html == (
            '<p><a href="https://x.com" class="cum-button cum-button-success cum-button-lg"'
            ' target="_blank" rel="noopener noreferrer">Click</a></p>\n'
        )

    def test_default_button(self, registry) -> None:
        html = _html("[button:Docs](/docs)", registry)
        assert 'class="cum-button cum-button-primary cum-button-md"' in html
        assert 'href="/docs"' in html

    def test_same_tab_has_no_rel(self, registry) -> None:
        html = _html("[button:Docs](/docs){self}", registry)
        assert 'target="_self"' in html
        assert "rel=" not in html

    def test_disabled_button_is_not_interactive(self, registry) -> None:
        html = _html("[button:Soon](https://x.com){disabled}", registry)
        assert "href" not in html
        assert 'aria-disabled="true"' in html
        assert "cum-button-disabled" in html
        assert ">Soon</a>" in html

    def test_dangerous_url_renders_disabled(self, registry) -> None:
        html = _html("[button:Bad](javascript:alert)", registry)
        assert "javascript" not in html
        assert 'aria-disabled="true"' in html

    def test_label_is_escaped(self, registry) -> None:
        html = _html("[button:<b>x</b>](https://x.com)", registry)
        assert "&lt;b&gt;x&lt;/b&gt;" in html

    def test_button_inside_text(self, registry) -> None:
        paragraph = Parser("Try it: [button:Go](https://x.com) now", registry).parse()[0]
        kinds = [child.kind for child in paragraph.children]
        assert kinds == [TokenKind.TEXT, TokenKind.CUM_BUTTON, TokenKind.TEXT]

    def test_cum_disabled_keeps_literal(self, plain_registry) -> None:
        html = _html("[button:Go](https://example.com)", plain_registry)
        assert html == "<p>[button:Go](https://example.com)</p>\n"


class TestAlert:
    def test_alert_with_title(self, registry) -> None:
        html = _html(":::warning Heads up\nThis release drops **3.10**.\n:::", registry)
        assert html == (
            '<div class="cum-alert cum-alert-warning" role="alert">\n'
            '<p class="cum-alert-title">Heads up</p>\n'
            "<p>This release drops <strong>3.10</strong>.</p>\n"
            "</div>\n"
        )

    def test_alert_without_title(self, registry) -> None:
        tokens = Parser(":::info\nbody\n:::", registry).parse()
        assert tokens[0].attrs == AlertAttrs(alert_type="info", title=None)
        assert "cum-alert-title" not in _html(":::info\nbody\n:::", registry)

    @pytest.mark.parametrize("alert_type", ["info", "warning", "error", "success", "tip"])
    def test_alert_types(self, alert_type: str, registry) -> None:
        html = _html(f":::{alert_type}\nx\n:::", registry)
        assert f"cum-alert-{alert_type}" in html

    def test_unknown_type_stays_text(self, registry) -> None:
        tokens = Parser(":::note\ntext\n:::", registry).parse()
        assert [t.kind for t in tokens] == [TokenKind.PARAGRAPH]
        assert ":::note" in _html(":::note\ntext\n:::", registry)

    def test_unterminated_alert(self, registry) -> None:
        tokens = Parser(":::tip\nkeep going", registry).parse()
        assert tokens[0].kind == TokenKind.CUM_ALERT
        assert tokens[0].children[0].kind == TokenKind.PARAGRAPH

    def test_blank_line_ends_alert(self, registry) -> None:
        tokens = Parser(":::info\nfirst\n\nsecond", registry).parse()
        assert [t.kind for t in tokens] == [TokenKind.CUM_ALERT, TokenKind.PARAGRAPH]

    def test_alert_body_parsed_as_blocks(self, registry) -> None:
        alert = Parser(":::success Done\n- a\n- b\n:::", registry).parse()[0]
        assert alert.children[0].kind == TokenKind.LIST

    def test_cum_disabled_keeps_literal(self, plain_registry) -> None:
        tokens = Parser(":::info\nx\n:::", plain_registry).parse()
        assert [t.kind for t in tokens] == [TokenKind.PARAGRAPH]


class TestEmbedOptions:
    def test_pairs_in_order(self) -> None:
        assert parse_embed_options("height:500, autoplay") == (
            ("height", "500"),
            ("autoplay", "true"),
        )

    def test_empty(self) -> None:
        assert parse_embed_options(None) == ()
        assert parse_embed_options(" , ") == ()

    def test_option_lookup(self) -> None:
        attrs = EmbedAttrs("youtube", "u", (("height", "500"),))
        assert attrs.option("height") == "500"
        assert attrs.option("width") is None
        assert attrs.option("width", "100%") == "100%"


class TestEmbedSrc:
    @pytest.mark.parametrize(
        "url",
        [
            "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
            "https://youtu.be/dQw4w9WgXcQ",
            "https://www.youtube.com/embed/dQw4w9WgXcQ",
        ],
    )
    def test_youtube(self, url: str) -> None:
        assert embed_src(EmbedAttrs("youtube", url)) == (
            "https://www.youtube.com/embed/dQw4w9WgXcQ"
        )

    def test_youtube_autoplay(self) -> None:
        attrs = EmbedAttrs("youtube", "https://youtu.be/dQw4w9WgXcQ", (("autoplay", "true"),))
        assert embed_src(attrs) == "https://www.youtube.com/embed/dQw4w9WgXcQ?autoplay=1"

    def test_codepen(self) -> None:
        attrs = EmbedAttrs("codepen", "https://codepen.io/team/pen/abcde", (("theme", "light"),))
        assert embed_src(attrs) == (
            "https://codepen.io/team/embed/abcde?default-tab=result&theme-id=light"
        )

    def test_figma(self) -> None:
        src = embed_src(EmbedAttrs("figma", "https://www.figma.com/file/abc/Name"))
        assert src == (
            "https://www.figma.com/embed?embed_host=share"
            "&url=https%3A%2F%2Fwww.figma.com%2Ffile%2Fabc%2FName"
        )

    @pytest.mark.parametrize(
        "provider,url",
        [
            ("youtube", "https://example.com/video"),
            ("github", "https://github.com/org/repo"),
            ("twitter", "https://twitter.com/user/status/1"),
            ("generic", "https://example.com"),
        ],
    )
    def test_link_card_providers(self, provider: str, url: str) -> None:
        assert embed_src(EmbedAttrs(provider, url)) is None


class TestEmbed:
    def test_youtube_iframe(self, registry) -> None:
        html = _html("[embed:youtube](https://www.youtube.com/watch?v=dQw4w9WgXcQ)", registry)
        assert html == (
            '<div class="cum-embed cum-embed-youtube">'
            '<iframe src="https://www.youtube.com/embed/dQw4w9WgXcQ" width="100%" height="315"'
            ' title="youtube embed" frameborder="0" loading="lazy" allowfullscreen="">'
            "</iframe></div>\n"
        )

    def test_dimensions(self, registry) -> None:
        html = _html(
            "[embed:codepen](https://codepen.io/team/pen/abcde){height:500,width:80%}", registry
        )
        assert 'height="500"' in html
        assert 'width="80%"' in html
        assert "&amp;theme-id=dark" in html

    def test_invalid_dimension_uses_default(self, registry) -> None:
        html = _html('[embed:youtube](https://youtu.be/dQw4w9WgXcQ){height:1"x}', registry)
        assert 'height="315"' in html

    def test_link_card(self, registry) -> None:
        html = _html("[embed:github](https://github.com/org/repo)", registry)
        assert html == (
            '<div class="cum-embed cum-embed-github">'
            '<a href="https://github.com/org/repo" class="cum-embed-link" target="_blank"'
            ' rel="noopener noreferrer">https://github.com/org/repo</a></div>\n'
        )

    def test_unsafe_url_renders_empty_wrapper(self, registry) -> None:
        html = _html("[embed:generic](javascript:void)", registry)
        assert html == '<div class="cum-embed cum-embed-generic"></div>\n'

    def test_unknown_provider_stays_text(self, registry) -> None:
        tokens = Parser("[embed:vimeo](https://vimeo.com/1)", registry).parse()
        assert tokens[0].kind == TokenKind.PARAGRAPH

    def test_embed_is_block_only(self, registry) -> None:
        tokens = Parser("see [embed:github](https://github.com/a/b) here", registry).parse()
        assert tokens[0].kind == TokenKind.PARAGRAPH
        assert all(t.kind != TokenKind.CUM_EMBED for t in tokens[0].walk())

    def test_cum_disabled_keeps_literal(self, plain_registry) -> None:
        tokens = Parser("[embed:github](https://github.com/a/b)", plain_registry).parse()
        assert tokens[0].kind == TokenKind.PARAGRAPH


class TestSubtext:
    def test_subtext(self, registry) -> None:
        assert _html("-# small note", registry) == '<p class="cum-subtext">small note</p>\n'

    def test_inline_markup(self, registry) -> None:
        html = _html("-# see **notes**", registry)
        assert html == '<p class="cum-subtext">see <strong>notes</strong></p>\n'

    def test_requires_space(self, registry) -> None:
        assert _html("-#nospace", registry) == "<p>-#nospace</p>\n"

    def test_interrupts_paragraph(self, registry) -> None:
        html = _html("text\n-# note", registry)
        assert html == '<p>text</p>\n<p class="cum-subtext">note</p>\n'

    def test_available_without_cum(self, plain_registry) -> None:
        tokens = Parser("-# note", plain_registry).parse()
        assert tokens[0].kind == TokenKind.SUBTEXT
