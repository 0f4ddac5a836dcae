"""Tests for EngineConfig construction and its effect on built engines."""

from __future__ import annotations

import dataclasses
import logging

import pytest

from changerawr_markdown import DEFAULT_CONFIG, EngineConfig, create_engine


class TestEngineConfigDataclass:
    """Test EngineConfig frozen dataclass behavior."""

    def test_default_values(self) -> None:
        config = EngineConfig()
        assert config.cum_enabled is True
        assert config.normalize_unicode is True
        assert config.max_nesting == 16

    def test_default_config_matches(self) -> None:
        assert DEFAULT_CONFIG == EngineConfig()

    def test_frozen(self) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            EngineConfig().cum_enabled = False  # type: ignore[misc]

    def test_slots(self) -> None:
        assert not hasattr(EngineConfig(), "__dict__")


class TestFromDict:
    def test_known_keys(self) -> None:
        config = EngineConfig.from_dict({"cum_enabled": False, "max_nesting": 4})
        assert config == EngineConfig(cum_enabled=False, max_nesting=4)

    def test_unknown_keys_ignored(self) -> None:
        config = EngineConfig.from_dict({"theme": "dark", "normalize_unicode": False})
        assert config == EngineConfig(normalize_unicode=False)

    def test_empty(self) -> None:
        assert EngineConfig.from_dict({}) == EngineConfig()


class TestFromEnv:
    def test_empty_environment(self) -> None:
        assert EngineConfig.from_env({}) == EngineConfig()

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("false", False), ("FALSE", False), (" False ", False), ("true", True), ("0", True)],
    )
    def test_cum_flag(self, value: str, expected: bool) -> None:
        assert EngineConfig.from_env({"CHANGERAWR_ENABLE_CUM": value}).cum_enabled is expected

    def test_max_nesting(self) -> None:
        assert EngineConfig.from_env({"CHANGERAWR_MAX_NESTING": "3"}).max_nesting == 3

    def test_max_nesting_floor(self) -> None:
        assert EngineConfig.from_env({"CHANGERAWR_MAX_NESTING": "-5"}).max_nesting == 1

    def test_invalid_max_nesting_logs_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="changerawr_markdown"):
            config = EngineConfig.from_env({"CHANGERAWR_MAX_NESTING": "deep"})
        assert config.max_nesting == 16
        assert "CHANGERAWR_MAX_NESTING" in caplog.text

    def test_reads_os_environ(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CHANGERAWR_ENABLE_CUM", "false")
        assert EngineConfig.from_env().cum_enabled is False


class TestConfigEffects:
    def test_cum_disabled_leaves_directives_as_text(self) -> None:
        engine = create_engine(EngineConfig(cum_enabled=False))
        assert engine.render("[button:Go](https://example.com)") == (
            "<p>[button:Go](https://example.com)</p>\n"
        )

    def test_max_nesting_limits_quotes(self) -> None:
        engine = create_engine(EngineConfig(max_nesting=2))
        html = engine.render("> > > > deep")
        assert html.count("<blockquote>") == 2
        assert "deep" in html
