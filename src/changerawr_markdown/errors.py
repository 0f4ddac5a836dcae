"""Exception classes for the markdown engine.

Content-level problems (malformed syntax, unknown token kinds, markup the
sanitizer rejects) are recovered locally and never raise. The exceptions
here signal misuse of the engine API or a defect in a rule.
"""

from __future__ import annotations


class MarkdownEngineError(Exception):
    """Base exception for all engine errors.

    Subclass this for specific error categories.
    """

    pass


class ExtensionError(MarkdownEngineError):
    """Error in extension registration.

    Raised when an extension cannot be added to a registry.
    """

    def __init__(self, extension_name: str, message: str) -> None:
        """Initialize extension error.

        Args:
            extension_name: Name of the offending extension
            message: Description of the error
        """
        self.extension_name = extension_name
        super().__init__(f"Extension '{extension_name}': {message}")


class DuplicateExtensionError(ExtensionError, ValueError):
    """An extension name or render kind is already registered."""


class EngineStateError(MarkdownEngineError):
    """Engine bootstrap call made after the shared engine was constructed.

    The shared registry is immutable once built. Call
    reset_engine_instance() first to start a new bootstrap.
    """

    pass


class ParseError(MarkdownEngineError):
    """A parse rule raised while producing a token.

    Malformed input never causes this; it wraps a defect in a rule's
    ``produce`` callable and chains the original exception.
    """

    def __init__(self, rule_name: str, offset: int, message: str) -> None:
        """Initialize parse error.

        Args:
            rule_name: Name of the failing parse rule
            offset: Offset in the scanned text where the rule was applied
            message: Description of the failure
        """
        self.rule_name = rule_name
        self.offset = offset
        super().__init__(f"Parse rule '{rule_name}' at offset {offset}: {message}")


class RenderError(MarkdownEngineError):
    """A render rule raised while rendering a token."""

    def __init__(self, kind: str, message: str) -> None:
        """Initialize render error.

        Args:
            kind: Token kind whose render rule failed
            message: Description of the failure
        """
        self.kind = kind
        super().__init__(f"Render rule for '{kind}': {message}")
