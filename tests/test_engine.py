"""Tests for Engine, create_engine and the shared engine lifecycle."""

from __future__ import annotations

import logging
import re

import pytest

from changerawr_markdown import (
    DuplicateExtensionError,
    EngineConfig,
    EngineStateError,
    Extension,
    ParseRule,
    RenderRule,
    RuleLevel,
    Token,
    configure_engine,
    create_engine,
    get_engine,
    get_extension,
    get_extension_names,
    parse_markdown,
    register_extension,
    render_markdown,
    reset_engine_instance,
)


def _mention_extension(name: str = "mention") -> Extension:
    return Extension(
        name=name,
        parse_rules=(
            ParseRule(
                name,
                re.compile(r"@(\w+)"),
                lambda m, p: Token(name, m.group(0), m.group(1)),
                level=RuleLevel.INLINE,
                triggers=frozenset("@"),
            ),
        ),
        render_rules=(
            RenderRule(name, lambda t, _: f'<span class="mention">@{t.content}</span>'),
        ),
    )


class TestEngine:
    def test_render_is_sanitized(self, engine) -> None:
        assert "<script" not in engine.render("<script>alert(1)</script>")

    def test_parse_returns_fresh_list(self, engine) -> None:
        first = engine.parse("# A")
        second = engine.parse("# A")
        assert first == second
        assert first is not second

    def test_slugs_do_not_leak_between_documents(self, engine) -> None:
        assert engine.parse("# A")[0].attrs.slug == "a"
        assert engine.parse("# A")[0].attrs.slug == "a"

    def test_render_tokens(self, engine) -> None:
        tokens = engine.parse("**x**")
        assert engine.render_tokens(tokens) == "<p><strong>x</strong></p>\n"

    def test_config_exposed(self) -> None:
        config = EngineConfig(cum_enabled=False)
        engine = create_engine(config)
        assert engine.config is config
        assert "cum-button" not in engine.registry

    def test_sanitizer_follows_config(self) -> None:
        engine = create_engine(EngineConfig(normalize_unicode=False))
        assert engine.sanitizer.config.normalize_unicode is False

    def test_extra_extensions(self) -> None:
        engine = create_engine(extensions=[_mention_extension()])
        assert engine.registry.names[-2:] == ("mention", "fallback")
        assert '<span class="mention">@ada</span>' in engine.render("hi @ada")

    def test_extra_extension_clash(self) -> None:
        with pytest.raises(DuplicateExtensionError):
            create_engine(extensions=[Extension(name="table")])

    def test_repr(self, engine) -> None:
        assert "table" in repr(engine)


class TestSharedEngine:
    def test_lazily_built_and_memoized(self) -> None:
        engine = get_engine()
        assert get_engine() is engine

    def test_reset_discards_instance(self) -> None:
        engine = get_engine()
        reset_engine_instance()
        assert get_engine() is not engine

    def test_construction_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="changerawr_markdown"):
            get_engine()
        assert "Markdown engine constructed" in caplog.text

    def test_register_extension_before_first_use(self) -> None:
        register_extension(_mention_extension())
        assert "mention" in get_extension_names()
        assert get_extension("mention") is not None
        assert 'class="mention"' in render_markdown("ping @bob")

    def test_register_after_construction_raises(self) -> None:
        get_engine()
        with pytest.raises(EngineStateError):
            register_extension(_mention_extension())

    def test_register_duplicate_custom_name(self) -> None:
        register_extension(_mention_extension())
        with pytest.raises(DuplicateExtensionError):
            register_extension(_mention_extension())

    @pytest.mark.parametrize("name", ["table", "cum-button", "fallback"])
    def test_register_builtin_name_rejected(self, name: str) -> None:
        with pytest.raises(DuplicateExtensionError):
            register_extension(Extension(name=name))

    def test_register_render_kind_clash_rejected(self, caplog: pytest.LogCaptureFixture) -> None:
        clash = Extension("my-strong", render_rules=(RenderRule("strong", lambda t, _: "<b>"),))
        with caplog.at_level(logging.WARNING, logger="changerawr_markdown"):
            with pytest.raises(DuplicateExtensionError, match="strong"):
                register_extension(clash)
        assert "my-strong" in caplog.text
        assert "my-strong" not in get_extension_names()
        assert render_markdown("hello **there**") == "<p>hello <strong>there</strong></p>\n"

    def test_configure_rejects_clash_with_enabled_builtins(self) -> None:
        alerts = Extension("alerts", render_rules=(RenderRule("cum-alert", lambda t, _: ""),))
        configure_engine(EngineConfig(cum_enabled=False))
        register_extension(alerts)
        with pytest.raises(DuplicateExtensionError, match="cum-alert"):
            configure_engine(EngineConfig(cum_enabled=True))
        assert get_engine().config.cum_enabled is False

    def test_reset_clears_custom_extensions(self) -> None:
        register_extension(_mention_extension())
        get_engine()
        reset_engine_instance()
        assert "mention" not in get_extension_names()

    def test_configure_engine(self) -> None:
        configure_engine(EngineConfig(cum_enabled=False))
        assert "cum-button" not in get_extension_names()
        html = render_markdown("[button:Go](https://example.com)")
        assert "cum-button" not in html

    def test_configure_after_construction_raises(self) -> None:
        get_engine()
        with pytest.raises(EngineStateError):
            configure_engine(EngineConfig())

    def test_environment_flag(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CHANGERAWR_ENABLE_CUM", "false")
        assert get_engine().config.cum_enabled is False
        assert get_extension("cum-alert") is None

    def test_toggle_cum_with_reset(self) -> None:
        configure_engine(EngineConfig(cum_enabled=False))
        assert "cum-alert" not in get_extension_names()
        reset_engine_instance()
        configure_engine(EngineConfig(cum_enabled=True))
        assert "cum-alert" in get_extension_names()

    def test_parse_markdown_uses_shared_registry(self) -> None:
        tokens = parse_markdown("-# note")
        assert tokens[0].kind == "subtext"
