# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Site contexts: URL scope, technology profile and custom page definitions."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from ..errors import ContextDefinitionError
from ..http.models import HttpMessage
from .custom_pages import CustomPage, CustomPageType
from .tech import ALL_TECH, TechSet


def _compile(regex: str, context_name: str) -> re.Pattern[str]:
    try:
        return re.compile(regex)
    except re.error as exc:
        raise ContextDefinitionError(f"invalid URL regex {regex!r}: {exc}", context_name=context_name) from exc


def _strip_query(url: str) -> str:
    index = url.find("?")
    return url[:index] if index > 0 else url


@dataclass(eq=False)
class Context:
    """
    A named grouping of URL patterns, technologies and custom pages.

    A URL is in the context when at least one include regex matches it in full
    and no exclude regex does. The query string is ignored unless
    ``strip_query`` is disabled.
    """

    id: int
    name: str
    description: str = ""
    tech_set: TechSet = ALL_TECH
    strip_query: bool = True
    _include: list[re.Pattern[str]] = field(default_factory=list, init=False, repr=False)
    _exclude: list[re.Pattern[str]] = field(default_factory=list, init=False, repr=False)
    _custom_pages: list[CustomPage] = field(default_factory=list, init=False, repr=False)

    @property
    def include_regexes(self) -> list[str]:
        return [pattern.pattern for pattern in self._include]

    @property
    def exclude_regexes(self) -> list[str]:
        return [pattern.pattern for pattern in self._exclude]

    @property
    def custom_pages(self) -> list[CustomPage]:
        return list(self._custom_pages)

    def add_include_regex(self, regex: str) -> None:
        self._include.append(_compile(regex, self.name))

    def add_exclude_regex(self, regex: str) -> None:
        self._exclude.append(_compile(regex, self.name))

    def add_custom_page(self, page: CustomPage) -> None:
        if page.context_id != self.id:
            raise ContextDefinitionError(
                f"custom page belongs to context {page.context_id}, not {self.id}", context_name=self.name
            )
        self._custom_pages.append(page)

    def is_included(self, url: str | None) -> bool:
        if not url:
            return False
        target = _strip_query(url) if self.strip_query else url
        return any(pattern.fullmatch(target) for pattern in self._include)

    def is_excluded(self, url: str | None) -> bool:
        if not url:
            return False
        target = _strip_query(url) if self.strip_query else url
        return any(pattern.fullmatch(target) for pattern in self._exclude)

    def is_in_context(self, url: str | None) -> bool:
        return self.is_included(url) and not self.is_excluded(url)

    def _enabled_pages(self) -> list[CustomPage]:
        return [page for page in self._custom_pages if page.enabled]

    def is_custom_page(self, message: HttpMessage | None, page_type: CustomPageType) -> bool:
        """Return True when an enabled custom page of ``page_type`` matches the message."""
        if message is None:
            return False
        return any(page.type is page_type and page.matches(message) for page in self._enabled_pages())

    def is_custom_page_with_fallback(self, message: HttpMessage | None, page_type: CustomPageType) -> bool:
        """
        Classify the message as ``page_type``.

        A matching custom page of that type wins. A matching custom page of any
        other type rules the message out. Otherwise the response status code is
        compared with the type's conventional status (OTHER has none).
        """
        if message is None:
            return False
        other_match = False
        for page in self._enabled_pages():
            if not page.matches(message):
                continue
            if page.type is page_type:
                return True
            other_match = True
        if other_match:
            return False
        expected = page_type.fallback_status
        return expected is not None and message.response.status_code == expected


__all__ = ["Context"]
