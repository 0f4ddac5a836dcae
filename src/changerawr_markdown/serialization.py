"""Token serialization: JSON round-trip for token trees.

Converts tokens to/from JSON-compatible dicts, for editor tooling that
consumes ``parse_markdown`` output over the wire and for debugging.

All output is deterministic (sorted keys).

Example:
    from changerawr_markdown import parse_markdown
    from changerawr_markdown.serialization import to_json, from_json

    tokens = parse_markdown("# Hello **World**")
    json_str = to_json(tokens)
    assert from_json(json_str) == tokens

Thread Safety:
    All functions are pure; safe to call from any thread.

"""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import fields, is_dataclass
from typing import Any

from changerawr_markdown.tokens import (
    AlertAttrs,
    ButtonAttrs,
    CodeBlockAttrs,
    EmbedAttrs,
    HeadingAttrs,
    ImageAttrs,
    LinkAttrs,
    ListAttrs,
    ListItemAttrs,
    TableAttrs,
    TableCellAttrs,
    Token,
)

# Registry of attribute type names to classes for deserialization
_ATTR_TYPES: dict[str, type] = {
    cls.__name__: cls
    for cls in (
        HeadingAttrs,
        CodeBlockAttrs,
        ListAttrs,
        ListItemAttrs,
        LinkAttrs,
        ImageAttrs,
        TableAttrs,
        TableCellAttrs,
        ButtonAttrs,
        AlertAttrs,
        EmbedAttrs,
    )
}


def to_dict(token: Token) -> dict[str, Any]:
    """Convert a token (and its children) to a JSON-compatible dict.

    Attribute records carry a ``_type`` discriminator for deserialization.
    Custom attribute objects that are not dataclasses are stored with
    ``repr`` and cannot be restored.
    """
    return {
        "kind": str(token.kind),
        "raw": token.raw,
        "content": token.content,
        "children": [to_dict(child) for child in token.children],
        "attrs": _serialize_attrs(token.attrs),
    }


def _serialize_attrs(attrs: object | None) -> Any:
    if attrs is None:
        return None
    if is_dataclass(attrs) and not isinstance(attrs, type):
        result: dict[str, Any] = {"_type": type(attrs).__name__}
        for f in fields(attrs):
            result[f.name] = _serialize_value(getattr(attrs, f.name))
        return result
    return {"_type": None, "repr": repr(attrs)}


def _serialize_value(value: Any) -> Any:
    if isinstance(value, tuple):
        return [_serialize_value(item) for item in value]
    # Primitives: str, int, bool, None
    return value


def from_dict(data: dict[str, Any]) -> Token:
    """Reconstruct a token tree from a dict produced by to_dict.

    Raises:
        ValueError: If ``kind`` is missing or an attribute type is unknown.
    """
    if "kind" not in data:
        msg = "Missing 'kind' field in serialized token"
        raise ValueError(msg)
    return Token(
        kind=data["kind"],
        raw=data.get("raw", ""),
        content=data.get("content", ""),
        children=tuple(from_dict(child) for child in data.get("children", ())),
        attrs=_deserialize_attrs(data.get("attrs")),
    )


def _deserialize_attrs(data: dict[str, Any] | None) -> object | None:
    if data is None:
        return None
    type_name = data.get("_type")
    attrs_cls = _ATTR_TYPES.get(type_name) if type_name else None
    if attrs_cls is None:
        msg = f"Unknown attribute type: {type_name!r}"
        raise ValueError(msg)
    kwargs = {
        f.name: _deserialize_value(data[f.name]) for f in fields(attrs_cls) if f.name in data
    }
    return attrs_cls(**kwargs)


def _deserialize_value(value: Any) -> Any:
    if isinstance(value, list):
        return tuple(_deserialize_value(item) for item in value)
    return value


def to_json(tokens: Token | Iterable[Token], *, indent: int | None = None) -> str:
    """Serialize a token or token sequence to a JSON string.

    A single token serializes to an object, a sequence to an array.
    """
    if isinstance(tokens, Token):
        payload: Any = to_dict(tokens)
    else:
        payload = [to_dict(token) for token in tokens]
    return json.dumps(payload, sort_keys=True, indent=indent, ensure_ascii=False)


def from_json(json_str: str) -> Token | list[Token]:
    """Deserialize JSON produced by to_json."""
    data = json.loads(json_str)
    if isinstance(data, list):
        return [from_dict(item) for item in data]
    return from_dict(data)


__all__ = ["from_dict", "from_json", "to_dict", "to_json"]
