"""Engine: registry + parser + renderer + sanitizer, and the shared instance.

An Engine couples a fixed extension registry with the parse/render/sanitize
pipeline:

    source -> Parser(registry) -> tokens -> HtmlRenderer -> HTML -> Sanitizer

The module also owns the process-wide engine used by ``parse_markdown`` and
``render_markdown``. It is built lazily on first use from the configuration
(``configure_engine`` or the environment) plus any extensions added with
``register_extension``, then reused. Bootstrap calls after construction
raise EngineStateError; ``reset_engine_instance`` starts a new bootstrap.

Usage:
    >>> from changerawr_markdown import register_extension, render_markdown
    >>> register_extension(my_extension)      # bootstrap, before first use
    >>> render_markdown("**bold**")
    '<p><strong>bold</strong></p>\\n'

Thread Safety:
Engine instances are immutable and safe to share. The shared instance is
created under a lock. reset_engine_instance() is meant for tests and
operational reconfiguration; it is not safe to call while renders that
depend on the old configuration are in flight.

"""

from __future__ import annotations

import threading
from collections.abc import Iterable

from changerawr_markdown.config import EngineConfig
from changerawr_markdown.errors import DuplicateExtensionError, EngineStateError
from changerawr_markdown.extensions import builtin_extensions
from changerawr_markdown.parser import Parser
from changerawr_markdown.registry import (
    ExtensionRegistry,
    ExtensionRegistryBuilder,
)
from changerawr_markdown.renderers.html import HtmlRenderer
from changerawr_markdown.rules import Extension
from changerawr_markdown.sanitize import Sanitizer, SanitizerConfig
from changerawr_markdown.tokens import Token
from changerawr_markdown.utils.logger import get_logger

logger = get_logger(__name__)


class Engine:
    """Markdown-to-HTML engine over a fixed registry.

    Usage:
            >>> engine = create_engine()
            >>> engine.render("-# small note")
            '<p class="cum-subtext">small note</p>\\n'

    Thread Safety:
        Immutable after creation; each call allocates its own Parser.
    """

    __slots__ = ("_registry", "_config", "_renderer", "_sanitizer")

    def __init__(self, registry: ExtensionRegistry, config: EngineConfig | None = None) -> None:
        self._registry = registry
        self._config = config or EngineConfig()
        self._renderer = HtmlRenderer(registry)
        self._sanitizer = Sanitizer(
            SanitizerConfig(normalize_unicode=self._config.normalize_unicode)
        )

    @property
    def registry(self) -> ExtensionRegistry:
        return self._registry

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def sanitizer(self) -> Sanitizer:
        return self._sanitizer

    def parse(self, source: str) -> list[Token]:
        """Parse markdown into a fresh token list."""
        return Parser(source, self._registry, self._config).parse()

    def render_tokens(self, tokens: Iterable[Token]) -> str:
        """Render tokens to sanitized HTML."""
        return self._sanitizer.sanitize(self._renderer.render(tokens))

    def render(self, source: str) -> str:
        """Parse, render and sanitize markdown."""
        return self.render_tokens(self.parse(source))

    def __repr__(self) -> str:
        return f"Engine(extensions={list(self._registry.names)!r})"


def create_engine(
    config: EngineConfig | None = None,
    extensions: Iterable[Extension] = (),
) -> Engine:
    """Build a new engine, independent of the shared instance.

    Args:
        config: Engine configuration (defaults to EngineConfig())
        extensions: Extra extensions registered after the built-ins

    Raises:
        DuplicateExtensionError: If an extension name or render kind clashes
    """
    config = config or EngineConfig()
    builder = ExtensionRegistryBuilder()
    builder.register_all(builtin_extensions(config))
    builder.register_all(extensions)
    return Engine(builder.build(), config)


# =============================================================================
# Shared instance
# =============================================================================

_engine: Engine | None = None
_engine_lock = threading.Lock()
_custom_extensions: list[Extension] = []
_config_override: EngineConfig | None = None


def configure_engine(config: EngineConfig) -> None:
    """Set the configuration the shared engine is built from.

    Raises:
        EngineStateError: If the shared engine was already constructed
        DuplicateExtensionError: If a registered extension clashes with the
            built-ins this configuration enables
    """
    global _config_override
    with _engine_lock:
        if _engine is not None:
            raise EngineStateError(
                "configure_engine() called after the engine was constructed; "
                "call reset_engine_instance() first"
            )
        _check_registry(config, _custom_extensions)
        _config_override = config


def register_extension(extension: Extension) -> None:
    """Add an extension to the shared engine's bootstrap set.

    Raises:
        EngineStateError: If the shared engine was already constructed
        DuplicateExtensionError: If the name or a render kind is already taken
    """
    with _engine_lock:
        if _engine is not None:
            raise EngineStateError(
                f"register_extension({extension.name!r}) called after the engine "
                "was constructed; call reset_engine_instance() first"
            )
        _check_registry(_current_config(), [*_custom_extensions, extension])
        _custom_extensions.append(extension)


def get_engine() -> Engine:
    """Return the shared engine, building it on first use."""
    global _engine
    engine = _engine
    if engine is not None:
        return engine
    with _engine_lock:
        if _engine is None:
            config = _current_config()
            _engine = create_engine(config, _custom_extensions)
            logger.info("Markdown engine constructed: %s", ", ".join(_engine.registry.names))
        return _engine


def reset_engine_instance() -> None:
    """Discard the shared engine, custom extensions and configuration.

    Not safe to call during concurrent renders.
    """
    global _engine, _config_override
    with _engine_lock:
        had_engine = _engine is not None
        _engine = None
        _config_override = None
        _custom_extensions.clear()
    if had_engine:
        logger.info("Markdown engine reset")


def _current_config() -> EngineConfig:
    return _config_override if _config_override is not None else EngineConfig.from_env()


def _check_registry(config: EngineConfig, extensions: list[Extension]) -> None:
    """Trial-build the bootstrap set so clashes fail at registration time.

    Raises:
        DuplicateExtensionError: On a name or render-kind clash
    """
    builder = ExtensionRegistryBuilder().register_all(builtin_extensions(config))
    for extension in extensions:
        try:
            builder.register(extension)
        except DuplicateExtensionError as exc:
            logger.warning("Rejecting extension %r: %s", extension.name, exc)
            raise


def get_extension(name: str) -> Extension | None:
    """Look up a registered extension on the shared engine."""
    return get_engine().registry.get(name)


def get_extension_names() -> list[str]:
    """Names of the shared engine's extensions in registration order."""
    return list(get_engine().registry.names)


def parse_markdown(source: str) -> list[Token]:
    """Parse markdown into tokens with the shared engine."""
    return get_engine().parse(source)


def render_markdown(source: str) -> str:
    """Render markdown to sanitized HTML with the shared engine."""
    return get_engine().render(source)


__all__ = [
    "Engine",
    "configure_engine",
    "create_engine",
    "get_engine",
    "get_extension",
    "get_extension_names",
    "parse_markdown",
    "register_extension",
    "render_markdown",
    "reset_engine_instance",
]
