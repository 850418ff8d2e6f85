# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Header normalization utilities.

HTTP header field names are case-insensitive (RFC 9110). Requests and responses
expose headers as plain dicts keyed by the lower-cased name.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any


def _header_items(headers: Any) -> Iterable[tuple[object, object]]:
    """Pairs from a dict, httpx.Headers (anything with `.items()`) or a sequence of pairs."""
    if not headers:
        return ()
    items = getattr(headers, "items", None)
    if callable(items):
        return items()
    try:
        return [(name, value) for name, value in headers]
    except (TypeError, ValueError):
        return ()


def normalize_headers(headers: Any) -> dict[str, str]:
    """Return a copy keyed by lower-cased name; blank names are dropped and None values become ''."""
    out: dict[str, str] = {}
    for name, value in _header_items(headers):
        key = "" if name is None else str(name).strip().lower()
        if key:
            out[key] = "" if value is None else str(value)
    return out


def merge_headers(*layers: Any) -> dict[str, str]:
    """Merge header mappings left to right; later layers win regardless of name casing."""
    merged: dict[str, str] = {}
    for layer in layers:
        merged.update(normalize_headers(layer))
    return merged


def header_value(headers: Any, name: str, default: str | None = None) -> str | None:
    """Case-insensitive single header lookup."""
    if not name:
        return default
    return normalize_headers(headers).get(name.strip().lower(), default)


__all__ = ["header_value", "merge_headers", "normalize_headers"]
