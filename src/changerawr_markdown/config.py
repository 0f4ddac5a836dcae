"""Engine configuration.

EngineConfig is an immutable record read once when an engine is built.
It decides which extensions are registered and how the sanitizer and
block parser behave; it is never consulted per call.

Usage:
    >>> from changerawr_markdown import EngineConfig, create_engine
    >>> engine = create_engine(EngineConfig(cum_enabled=False))
    >>> engine.render("[button:Go](https://example.com)")
    '<p>[button:Go](https://example.com)</p>\\n'

    # Deployment-driven configuration
    >>> config = EngineConfig.from_env({"CHANGERAWR_ENABLE_CUM": "false"})
    >>> config.cum_enabled
    False

"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, fields

from changerawr_markdown.utils.logger import get_logger

logger = get_logger(__name__)

ENV_ENABLE_CUM = "CHANGERAWR_ENABLE_CUM"
ENV_MAX_NESTING = "CHANGERAWR_MAX_NESTING"


@dataclass(frozen=True, slots=True)
class EngineConfig:
    """Immutable engine configuration.

    Frozen dataclass ensures thread-safety (immutable after creation).

    Attributes:
        cum_enabled: Register the CUM directive extensions (button, alert, embed)
        normalize_unicode: Strip zero-width and bidi override characters
            during sanitization
        max_nesting: Maximum depth of nested block containers (lists, block
            quotes, alerts). Deeper content is kept as paragraph text.

    """

    cum_enabled: bool = True
    normalize_unicode: bool = True
    max_nesting: int = 16

    @classmethod
    def from_dict(cls, config_dict: Mapping[str, object]) -> EngineConfig:
        """Create EngineConfig from a dictionary.

        Only includes keys that are valid EngineConfig fields; unknown keys
        are silently ignored.

        Example:
            >>> EngineConfig.from_dict({"cum_enabled": False, "theme": "x"}).cum_enabled
            False

        """
        valid_fields = {f.name for f in fields(cls)}
        filtered = {k: v for k, v in config_dict.items() if k in valid_fields}
        return cls(**filtered)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> EngineConfig:
        """Create EngineConfig from environment variables.

        ``CHANGERAWR_ENABLE_CUM``: CUM stays enabled unless the value is
        ``false`` (case-insensitive). ``CHANGERAWR_MAX_NESTING``: integer;
        invalid values keep the default.

        Args:
            environ: Mapping to read instead of ``os.environ``
        """
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}

        cum_flag = env.get(ENV_ENABLE_CUM)
        if cum_flag is not None:
            values["cum_enabled"] = cum_flag.strip().lower() != "false"

        nesting = env.get(ENV_MAX_NESTING)
        if nesting is not None:
            try:
                values["max_nesting"] = max(1, int(nesting))
            except ValueError:
                logger.warning("Ignoring invalid %s=%r", ENV_MAX_NESTING, nesting)

        return cls(**values)


DEFAULT_CONFIG: EngineConfig = EngineConfig()

__all__ = [
    "DEFAULT_CONFIG",
    "ENV_ENABLE_CUM",
    "ENV_MAX_NESTING",
    "EngineConfig",
]
