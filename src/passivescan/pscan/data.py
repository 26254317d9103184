# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Context data handed to passive scan rules for a single HTTP message.

All details are based on the first context (in registry order) whose URL scope
contains the message's request URL. Derived facts are computed lazily and
cached for the lifetime of the instance, which is one scan pass over one
message. Instances are not meant to be shared between threads.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Protocol

from ..http.models import HttpMessage
from ..model.custom_pages import CustomPageType
from ..model.tech import ALL_TECH, TechSet
from ..users.models import User

logger = logging.getLogger(__name__)


class ScanContext(Protocol):
    """The parts of a context that passive scan data reads."""

    @property
    def id(self) -> int: ...

    @property
    def tech_set(self) -> TechSet: ...

    def is_custom_page_with_fallback(self, message: HttpMessage, page_type: CustomPageType) -> bool: ...


class ContextRegistry(Protocol):
    def get_contexts_for_url(self, url: str) -> Sequence[ScanContext]: ...


class UserAuthManager(Protocol):
    def get_users(self) -> Sequence[User]: ...


class UserManagement(Protocol):
    def get_context_user_auth_manager(self, context_id: int) -> UserAuthManager: ...


class PassiveScanData:
    """
    Facts about the message being passively scanned.

    ``user_management`` is optional; without it every message has no users.
    """

    def __init__(
        self,
        message: HttpMessage,
        registry: ContextRegistry,
        user_management: UserManagement | None = None,
    ):
        self.message = message
        self._context = self._resolve_context(message, registry)
        self._user_management = user_management
        self._users: tuple[User, ...] | None = None
        self._custom_pages: dict[CustomPageType, bool] = {}

        if self._context is None:
            self._tech_set = ALL_TECH
            self._users = ()
        else:
            self._tech_set = self._context.tech_set
            if user_management is None:
                self._users = ()

    @staticmethod
    def _resolve_context(message: HttpMessage, registry: ContextRegistry) -> ScanContext | None:
        url = message.request.url
        contexts = registry.get_contexts_for_url(url)
        if not contexts:
            logger.debug("No context found for: %s", url)
            return None
        return contexts[0]

    def has_context(self) -> bool:
        """Return True if the message has been matched to a context."""
        return self._context is not None

    @property
    def context(self) -> ScanContext | None:
        return self._context

    @property
    def tech_set(self) -> TechSet:
        """The context's technologies, or ``ALL_TECH`` when no context matched."""
        return self._tech_set

    def get_users(self) -> tuple[User, ...]:
        """
        Return the users of the matched context.

        The user management is queried on the first call only; the result is an
        immutable snapshot, empty when there is no context or no user management.
        """
        if self._users is None:
            manager = self._user_management.get_context_user_auth_manager(self._context.id)
            self._users = tuple(manager.get_users())
        return self._users

    def is_custom_page(self, message: HttpMessage, page_type: CustomPageType) -> bool:
        """
        Tell whether the message matches the context's ``page_type`` definitions.

        The result is computed once per page type and reused for later calls
        regardless of the message passed, so callers must only pass the message
        this instance was created for.
        """
        if self._context is None:
            return False
        cached = self._custom_pages.get(page_type)
        if cached is None:
            cached = bool(self._context.is_custom_page_with_fallback(message, page_type))
            self._custom_pages[page_type] = cached
        return cached

    def is_page_200(self, message: HttpMessage) -> bool:
        return self.is_custom_page(message, CustomPageType.OK_200)

    def is_page_404(self, message: HttpMessage) -> bool:
        return self.is_custom_page(message, CustomPageType.NOTFOUND_404)

    def is_page_500(self, message: HttpMessage) -> bool:
        return self.is_custom_page(message, CustomPageType.ERROR_500)

    def is_page_other(self, message: HttpMessage) -> bool:
        return self.is_custom_page(message, CustomPageType.OTHER)


__all__ = ["ContextRegistry", "PassiveScanData", "ScanContext", "UserAuthManager", "UserManagement"]
