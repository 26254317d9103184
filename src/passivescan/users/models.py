# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""User records attached to contexts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class User:
    """An identity the operator registered for authenticated scanning of a context."""

    id: int
    context_id: int
    name: str
    enabled: bool = True
    credentials: dict[str, str] = field(default_factory=dict, compare=False, repr=False)

    def to_dict(self) -> dict[str, Any]:
        # Credentials are never serialized.
        return {"id": self.id, "context_id": self.context_id, "name": self.name, "enabled": self.enabled}


__all__ = ["User"]
