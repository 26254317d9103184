# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for passivescan."""

import os
from dataclasses import dataclass

DEFAULT_MAX_BODY_BYTES = 16 * 1024 * 1024


def _int_env(name: str, default: int) -> int:
    try:
        value = os.getenv(name)
        return int(value) if value is not None else default
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _optional_str_env(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


@dataclass
class ScanSettings:
    """Passive scan defaults."""

    max_body_bytes: int = DEFAULT_MAX_BODY_BYTES
    strip_query: bool = True
    contexts_file: str | None = None

    @classmethod
    def from_env(cls) -> "ScanSettings":
        """Create settings from environment variables (evaluated at call time)."""
        max_body_bytes = _int_env("PASSIVESCAN_MAX_BODY_BYTES", cls.max_body_bytes)
        if max_body_bytes <= 0:
            max_body_bytes = cls.max_body_bytes
        return cls(
            max_body_bytes=max_body_bytes,
            strip_query=_bool_env("PASSIVESCAN_STRIP_QUERY", cls.strip_query),
            contexts_file=_optional_str_env("PASSIVESCAN_CONTEXTS_FILE"),
        )


def load_scan_settings() -> ScanSettings:
    """Load scan settings from environment with sensible defaults."""
    return ScanSettings.from_env()
