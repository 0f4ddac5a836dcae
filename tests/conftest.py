"""Shared fixtures for changerawr_markdown tests."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from changerawr_markdown import (
    EngineConfig,
    ExtensionRegistry,
    ExtensionRegistryBuilder,
    create_engine,
    reset_engine_instance,
)
from changerawr_markdown.engine import Engine
from changerawr_markdown.extensions import builtin_extensions


@pytest.fixture(autouse=True)
def fresh_engine(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Every test starts and ends with no shared engine and a clean environment."""
    monkeypatch.delenv("CHANGERAWR_ENABLE_CUM", raising=False)
    monkeypatch.delenv("CHANGERAWR_MAX_NESTING", raising=False)
    reset_engine_instance()
    yield
    reset_engine_instance()


@pytest.fixture
def registry() -> ExtensionRegistry:
    return ExtensionRegistryBuilder().register_all(builtin_extensions()).build()


@pytest.fixture
def engine() -> Engine:
    return create_engine(EngineConfig())
