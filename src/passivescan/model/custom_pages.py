# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Operator-defined custom pages (site-specific success/error page signatures)."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum

from ..errors import ContextDefinitionError
from ..http.models import HttpMessage


class CustomPageType(str, Enum):
    OK_200 = "OK_200"
    NOTFOUND_404 = "NOTFOUND_404"
    ERROR_500 = "ERROR_500"
    OTHER = "OTHER"

    @property
    def fallback_status(self) -> int | None:
        """Status code that identifies this kind of page when no custom page applies."""
        return _FALLBACK_STATUS.get(self)

    @classmethod
    def parse(cls, value: object) -> CustomPageType:
        raw = str(value or "").strip().upper()
        for member in cls:
            if raw in {member.value, member.name}:
                return member
        aliases = {"200": cls.OK_200, "404": cls.NOTFOUND_404, "500": cls.ERROR_500}
        if raw in aliases:
            return aliases[raw]
        raise ValueError(f"unknown custom page type: {value!r}")


_FALLBACK_STATUS = {
    CustomPageType.OK_200: 200,
    CustomPageType.NOTFOUND_404: 404,
    CustomPageType.ERROR_500: 500,
}


class PageMatcherLocation(str, Enum):
    URL = "URL"
    RESPONSE_CONTENT = "RESPONSE_CONTENT"


@dataclass(frozen=True)
class CustomPage:
    """
    A signature that marks a response as a given kind of page for one context.

    ``page_matcher`` is a regular expression (searched, not fully matched) when
    ``is_regex`` is set, otherwise a plain substring.
    """

    context_id: int
    page_matcher: str
    location: PageMatcherLocation = PageMatcherLocation.RESPONSE_CONTENT
    is_regex: bool = False
    type: CustomPageType = CustomPageType.NOTFOUND_404
    enabled: bool = True
    _pattern: re.Pattern[str] | None = field(default=None, init=False, compare=False, repr=False)

    def __post_init__(self) -> None:
        if not self.page_matcher:
            raise ContextDefinitionError("custom page matcher must not be empty")
        if self.is_regex:
            try:
                pattern = re.compile(self.page_matcher)
            except re.error as exc:
                raise ContextDefinitionError(f"invalid custom page regex {self.page_matcher!r}: {exc}") from exc
            object.__setattr__(self, "_pattern", pattern)

    def matches(self, message: HttpMessage) -> bool:
        if self.location is PageMatcherLocation.URL:
            target = message.request.url
        else:
            target = message.response.text
        if self._pattern is not None:
            return self._pattern.search(target) is not None
        return self.page_matcher in target


__all__ = ["CustomPage", "CustomPageType", "PageMatcherLocation"]
