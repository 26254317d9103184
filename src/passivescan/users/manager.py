# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Per-context user registries."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from ..errors import UserDefinitionError
from .models import User

logger = logging.getLogger(__name__)


class ContextUserAuthManager:
    """Users registered for a single context, in registration order."""

    def __init__(self, context_id: int):
        self.context_id = context_id
        self._users: list[User] = []

    def add_user(self, user: User) -> None:
        if user.context_id != self.context_id:
            raise UserDefinitionError(f"user {user.name!r} belongs to context {user.context_id}, not {self.context_id}")
        if self.get_user_by_id(user.id) is not None:
            raise UserDefinitionError(f"duplicate user id {user.id} in context {self.context_id}")
        self._users.append(user)

    def remove_user(self, user_id: int) -> bool:
        for index, user in enumerate(self._users):
            if user.id == user_id:
                del self._users[index]
                return True
        return False

    def get_user_by_id(self, user_id: int) -> User | None:
        for user in self._users:
            if user.id == user_id:
                return user
        return None

    def get_users(self) -> list[User]:
        """Return the live user list; callers that keep it must copy it."""
        return self._users


class ExtensionUserManagement:
    """
    User management for all contexts of a session.

    Auth managers are created on demand, so asking for an unknown context
    returns an empty manager rather than failing.
    """

    def __init__(self) -> None:
        self._managers: dict[int, ContextUserAuthManager] = {}
        self._next_user_id = 1

    def get_context_user_auth_manager(self, context_id: int) -> ContextUserAuthManager:
        manager = self._managers.get(context_id)
        if manager is None:
            manager = ContextUserAuthManager(context_id)
            self._managers[context_id] = manager
        return manager

    def add_user(
        self,
        context_id: int,
        name: str,
        *,
        enabled: bool = True,
        credentials: Mapping[str, str] | None = None,
        user_id: int | None = None,
    ) -> User:
        if not name:
            raise UserDefinitionError("user name must not be empty")
        user = User(
            id=user_id if user_id is not None else self._next_user_id,
            context_id=context_id,
            name=name,
            enabled=enabled,
            credentials=dict(credentials or {}),
        )
        self.get_context_user_auth_manager(context_id).add_user(user)
        self._next_user_id = max(self._next_user_id, user.id + 1)
        return user

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ExtensionUserManagement:
        """Build user management from a ``{"users": [{"context_id", "name", ...}]}`` mapping."""
        management = cls()
        entries = data.get("users") or []
        if not isinstance(entries, list):
            raise UserDefinitionError("'users' must be a list")
        for entry in entries:
            if not isinstance(entry, Mapping):
                raise UserDefinitionError("user entries must be mappings")
            try:
                context_id = int(entry["context_id"])
                user_id = int(entry["id"]) if entry.get("id") is not None else None
                raw_credentials = entry.get("credentials") or {}
                if not isinstance(raw_credentials, Mapping):
                    raise TypeError("credentials must be a mapping")
                credentials = {str(key): str(value) for key, value in raw_credentials.items()}
            except (KeyError, TypeError, ValueError) as exc:
                raise UserDefinitionError(f"invalid user entry {entry!r}") from exc
            management.add_user(
                context_id,
                str(entry.get("name") or ""),
                enabled=bool(entry.get("enabled", True)),
                credentials=credentials,
                user_id=user_id,
            )
        logger.debug("Loaded users for %d context(s)", len(management._managers))
        return management


def load_user_management(path: str | Path) -> ExtensionUserManagement:
    """Load user definitions from a JSON file."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise UserDefinitionError(f"{path}: invalid JSON: {exc}") from exc
    if not isinstance(data, Mapping):
        raise UserDefinitionError(f"{path}: top-level value must be an object")
    return ExtensionUserManagement.from_mapping(data)


__all__ = ["ContextUserAuthManager", "ExtensionUserManagement", "load_user_management"]
