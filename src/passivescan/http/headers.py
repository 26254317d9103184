# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Header normalization utilities.

Captured exchanges come from different sources (httpx objects, JSON fixtures,
proxy exports) so header containers are normalized to lowercase-keyed dicts
before they are stored on a message.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


def _header_items(headers: Any) -> list[tuple[object, object]]:
    """Return ``(name, value)`` pairs from a mapping, httpx.Headers or list of pairs."""
    if not headers:
        return []
    if isinstance(headers, Mapping):
        return list(headers.items())
    items = getattr(headers, "items", None)
    if callable(items):
        return list(items())
    try:
        return [(name, value) for name, value in headers]
    except (TypeError, ValueError):
        return []


def normalize_headers(headers: Any) -> dict[str, str]:
    """
    Return a lowercase-keyed copy of a header container.

    Repeated header names are joined with ``", "`` as allowed by RFC 9110.
    """
    out: dict[str, str] = {}
    for key, value in _header_items(headers):
        if key is None:
            continue
        name = str(key).strip().lower()
        if not name:
            continue
        text = "" if value is None else str(value)
        out[name] = f"{out[name]}, {text}" if name in out else text
    return out


def header_value(headers: Mapping[str, str] | None, name: str, default: str = "") -> str:
    """Return a header value using case-insensitive name matching."""
    if not headers or not name:
        return default
    lower = name.lower()
    if lower in headers:
        value = headers[lower]
        return default if value is None else str(value).strip()
    for key, value in headers.items():
        if str(key).lower() == lower:
            return default if value is None else str(value).strip()
    return default


__all__ = ["header_value", "normalize_headers"]
