# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Session-level context registry and context definition loading."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from ..config import load_scan_settings
from ..errors import ContextDefinitionError
from .context import Context
from .custom_pages import CustomPage, CustomPageType, PageMatcherLocation
from .tech import ALL_TECH, Tech, TechSet

logger = logging.getLogger(__name__)


class Session:
    """Ordered registry of the contexts configured for a scanning session."""

    def __init__(self, *, strip_query: bool | None = None):
        self._contexts: list[Context] = []
        self._next_id = 1
        self.strip_query = load_scan_settings().strip_query if strip_query is None else strip_query

    def new_context(self, name: str, *, tech_set: TechSet = ALL_TECH, description: str = "") -> Context:
        context = Context(
            id=self._next_id,
            name=name,
            description=description,
            tech_set=tech_set,
            strip_query=self.strip_query,
        )
        self.add_context(context)
        return context

    def add_context(self, context: Context) -> None:
        if not context.name:
            raise ContextDefinitionError("context name must not be empty")
        for existing in self._contexts:
            if existing.id == context.id:
                raise ContextDefinitionError(f"duplicate context id {context.id}", context_name=context.name)
            if existing.name == context.name:
                raise ContextDefinitionError("duplicate context name", context_name=context.name)
        self._contexts.append(context)
        self._next_id = max(self._next_id, context.id + 1)

    def get_context(self, context_id: int) -> Context | None:
        for context in self._contexts:
            if context.id == context_id:
                return context
        return None

    def get_context_by_name(self, name: str) -> Context | None:
        for context in self._contexts:
            if context.name == name:
                return context
        return None

    def get_contexts(self) -> list[Context]:
        return list(self._contexts)

    def get_contexts_for_url(self, url: str) -> list[Context]:
        """Return every context containing ``url``, in registration order."""
        return [context for context in self._contexts if context.is_in_context(url)]

    def __len__(self) -> int:
        return len(self._contexts)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, strip_query: bool | None = None) -> Session:
        """
        Build a session from a ``{"contexts": [...]}`` mapping.

        Each context entry accepts ``name``, optional ``id``, ``description``,
        ``include``/``exclude`` regex lists, ``technologies`` (``{"include": [...],
        "exclude": [...]}``; omitted means all technologies) and ``custom_pages``.
        A custom page without a ``type`` is a not-found page, matching
        :class:`CustomPage`.
        """
        session = cls(strip_query=strip_query)
        entries = data.get("contexts") or []
        if not isinstance(entries, list):
            raise ContextDefinitionError("'contexts' must be a list")
        for entry in entries:
            if not isinstance(entry, Mapping):
                raise ContextDefinitionError("context entries must be mappings")
            session._load_context(entry)
        logger.debug("Loaded %d context(s)", len(session))
        return session

    def _load_context(self, entry: Mapping[str, Any]) -> Context:
        name = str(entry.get("name") or "").strip()
        if not name:
            raise ContextDefinitionError("context name must not be empty")
        raw_id = entry.get("id")
        try:
            context_id = int(raw_id) if raw_id is not None else self._next_id
        except (TypeError, ValueError) as exc:
            raise ContextDefinitionError(f"invalid context id {raw_id!r}", context_name=name) from exc

        context = Context(
            id=context_id,
            name=name,
            description=str(entry.get("description") or ""),
            tech_set=_parse_tech_set(entry.get("technologies"), name),
            strip_query=self.strip_query,
        )
        for regex in _string_list(entry.get("include"), "include", name):
            context.add_include_regex(regex)
        for regex in _string_list(entry.get("exclude"), "exclude", name):
            context.add_exclude_regex(regex)
        for raw_page in entry.get("custom_pages") or []:
            context.add_custom_page(_parse_custom_page(raw_page, context))
        self.add_context(context)
        return context


def _string_list(value: Any, key: str, context_name: str) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str) or not isinstance(value, list):
        raise ContextDefinitionError(f"'{key}' must be a list of strings", context_name=context_name)
    return [str(item) for item in value]


def _resolve_techs(names: list[str], context_name: str) -> list[Tech]:
    techs: list[Tech] = []
    for name in names:
        tech = Tech.get(name)
        if tech is None:
            raise ContextDefinitionError(f"unknown technology {name!r}", context_name=context_name)
        techs.append(tech)
    return techs


def _parse_tech_set(value: Any, context_name: str) -> TechSet:
    if value is None:
        return ALL_TECH
    if not isinstance(value, Mapping):
        raise ContextDefinitionError("'technologies' must be a mapping", context_name=context_name)
    include = _resolve_techs(_string_list(value.get("include"), "technologies.include", context_name), context_name)
    exclude = _resolve_techs(_string_list(value.get("exclude"), "technologies.exclude", context_name), context_name)
    if not include:
        return ALL_TECH.excluding(*exclude)
    return TechSet.of(include, exclude)


def _parse_custom_page(raw: Any, context: Context) -> CustomPage:
    if not isinstance(raw, Mapping):
        raise ContextDefinitionError("custom page entries must be mappings", context_name=context.name)
    try:
        page_type = CustomPageType.parse(raw.get("type") or CustomPageType.NOTFOUND_404.value)
        location = PageMatcherLocation(str(raw.get("location") or PageMatcherLocation.RESPONSE_CONTENT.value).upper())
    except ValueError as exc:
        raise ContextDefinitionError(str(exc), context_name=context.name) from exc
    try:
        return CustomPage(
            context_id=context.id,
            page_matcher=str(raw.get("matcher") or ""),
            location=location,
            is_regex=bool(raw.get("regex", False)),
            type=page_type,
            enabled=bool(raw.get("enabled", True)),
        )
    except ContextDefinitionError as exc:
        raise ContextDefinitionError(str(exc), context_name=context.name) from exc


def load_session(path: str | Path, *, strip_query: bool | None = None) -> Session:
    """Load a session from a JSON file of context definitions."""
    raw = Path(path).read_text(encoding="utf-8")
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ContextDefinitionError(f"{path}: invalid JSON: {exc}") from exc
    if not isinstance(data, Mapping):
        raise ContextDefinitionError(f"{path}: top-level value must be an object")
    return Session.from_mapping(data, strip_query=strip_query)


__all__ = ["Session", "load_session"]
