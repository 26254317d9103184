# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Technology catalog and technology sets used to scope scan rules."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field


@dataclass(frozen=True)
class Tech:
    """
    A technology, optionally nested under a parent (``Db.MySQL`` under ``Db``).

    Technologies compare by their full dotted name.
    """

    name: str
    parent: Tech | None = field(default=None, compare=False, repr=False)

    @property
    def top_level(self) -> Tech:
        tech = self
        while tech.parent is not None:
            tech = tech.parent
        return tech

    def is_child_of(self, other: Tech) -> bool:
        parent = self.parent
        while parent is not None:
            if parent == other:
                return True
            parent = parent.parent
        return False

    def __str__(self) -> str:
        return self.name

    @classmethod
    def child(cls, parent: Tech, name: str) -> Tech:
        return cls(f"{parent.name}.{name}", parent)

    @classmethod
    def get_all(cls) -> tuple[Tech, ...]:
        return BUILTIN_TECHS

    @classmethod
    def get(cls, name: str) -> Tech | None:
        return _BY_NAME.get(name)


DB = Tech("Db")
LANG = Tech("Language")
OS = Tech("OS")
SCM = Tech("SCM")
WS = Tech("WS")

BUILTIN_TECHS: tuple[Tech, ...] = (
    DB,
    Tech.child(DB, "CouchDB"),
    Tech.child(DB, "Firebird"),
    Tech.child(DB, "HypersonicSQL"),
    Tech.child(DB, "IBM DB2"),
    Tech.child(DB, "Microsoft Access"),
    Tech.child(DB, "Microsoft SQL Server"),
    Tech.child(DB, "MongoDB"),
    Tech.child(DB, "MySQL"),
    Tech.child(DB, "Oracle"),
    Tech.child(DB, "PostgreSQL"),
    Tech.child(DB, "SQLite"),
    Tech.child(DB, "Sybase"),
    LANG,
    Tech.child(LANG, "ASP"),
    Tech.child(LANG, "C"),
    Tech.child(LANG, "JSP/Servlet"),
    Tech.child(LANG, "PHP"),
    Tech.child(LANG, "Python"),
    Tech.child(LANG, "Ruby"),
    Tech.child(LANG, "XML"),
    OS,
    Tech.child(OS, "Linux"),
    Tech.child(OS, "MacOS"),
    Tech.child(OS, "Windows"),
    SCM,
    Tech.child(SCM, "Git"),
    Tech.child(SCM, "SVN"),
    WS,
    Tech.child(WS, "Apache"),
    Tech.child(WS, "IIS"),
    Tech.child(WS, "Tomcat"),
)

_BY_NAME: dict[str, Tech] = {tech.name: tech for tech in BUILTIN_TECHS}


@dataclass(frozen=True)
class TechSet:
    """
    Immutable set of included and excluded technologies.

    A technology is included when it is listed as included, or when its closest
    listed ancestor is included. Exclusion always wins over inclusion.
    """

    included: frozenset[Tech] = frozenset()
    excluded: frozenset[Tech] = frozenset()

    @classmethod
    def of(cls, include: Iterable[Tech] = (), exclude: Iterable[Tech] = ()) -> TechSet:
        excluded = frozenset(exclude)
        return cls(included=frozenset(include) - excluded, excluded=excluded)

    def includes(self, tech: Tech) -> bool:
        current: Tech | None = tech
        while current is not None:
            if current in self.excluded:
                return False
            if current in self.included:
                return True
            current = current.parent
        return False

    def including(self, *techs: Tech) -> TechSet:
        added = frozenset(techs)
        return TechSet(included=self.included | added, excluded=self.excluded - added)

    def excluding(self, *techs: Tech) -> TechSet:
        removed = frozenset(techs)
        return TechSet(included=self.included - removed, excluded=self.excluded | removed)

    def included_names(self) -> list[str]:
        return sorted(tech.name for tech in self.included)

    def excluded_names(self) -> list[str]:
        return sorted(tech.name for tech in self.excluded)

    def __iter__(self) -> Iterator[Tech]:
        return iter(sorted(self.included, key=lambda tech: tech.name))

    def __contains__(self, tech: object) -> bool:
        return isinstance(tech, Tech) and self.includes(tech)

    def to_dict(self) -> dict[str, list[str]]:
        return {"include": self.included_names(), "exclude": self.excluded_names()}


ALL_TECH = TechSet.of(BUILTIN_TECHS)
NO_TECH = TechSet()

__all__ = ["ALL_TECH", "BUILTIN_TECHS", "DB", "LANG", "NO_TECH", "OS", "SCM", "Tech", "TechSet", "WS"]
