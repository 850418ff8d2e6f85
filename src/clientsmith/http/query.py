# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Query string encoding.

Nested mappings and sequences are flattened with the bracket convention used by
most web frameworks (`user[name]=x`, `ids[]=1&ids[]=2`).
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

# encodeURIComponent leaves these unescaped.
_UNRESERVED = "-_.!~*'()"


def encode_component(value: str) -> str:
    return quote(value, safe=_UNRESERVED)


def stringify(value: Any) -> str:
    """Render a scalar the way it appears inside a URL."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _valid_keys(mapping: Mapping[Any, Any]) -> list[Any]:
    return [key for key, value in mapping.items() if value is not None]


def _join(parts: Any) -> str:
    # Empty containers contribute nothing.
    return "&".join(part for part in parts if part)


def _build_recursive(key: str, value: Any, suffix: str = "") -> str:
    if isinstance(value, (list, tuple)):
        return _join(_build_recursive(key, item, suffix + "[]") for item in value)
    if isinstance(value, Mapping):
        return _join(_build_recursive(key, value[sub], f"{suffix}[{sub}]") for sub in _valid_keys(value))
    return f"{encode_component(key + suffix)}={encode_component(stringify(value))}"


def to_query_string(value: Any) -> Any:
    """
    Encode a mapping as a form-style query string.

    Anything that is not a mapping is returned unchanged so callers can pass
    pre-serialized bodies straight through.
    """
    if not isinstance(value, Mapping):
        return value
    encoded = _join(_build_recursive(str(key), value[key]) for key in _valid_keys(value))
    return encoded.replace("%20", "+")


__all__ = ["encode_component", "stringify", "to_query_string"]
