# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Passive scan rule base class, alert model and built-in rules."""

from __future__ import annotations

import hashlib
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

from ..http.models import HttpMessage
from ..model.tech import Tech, TechSet
from .data import PassiveScanData


class Risk(IntEnum):
    INFO = 0
    LOW = 1
    MEDIUM = 2
    HIGH = 3


class Confidence(IntEnum):
    FALSE_POSITIVE = 0
    LOW = 1
    MEDIUM = 2
    HIGH = 3
    CONFIRMED = 4


@dataclass
class Alert:
    """A weakness a passive scan rule found in one message."""

    plugin_id: int
    name: str
    risk: Risk
    confidence: Confidence
    url: str
    evidence: str = ""
    description: str = ""
    other_info: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "plugin_id": self.plugin_id,
            "name": self.name,
            "risk": self.risk.name,
            "confidence": self.confidence.name,
            "url": self.url,
            "evidence": self.evidence,
            "description": self.description,
            "other_info": dict(self.other_info),
        }


class PassiveScanRule(ABC):
    name: str = "base"
    plugin_id: int = 0
    priority: int = 50
    required_techs: tuple[Tech, ...] = ()

    def applies_to_tech(self, tech_set: TechSet) -> bool:
        """Rules without required technologies always apply."""
        if not self.required_techs:
            return True
        return any(tech_set.includes(tech) for tech in self.required_techs)

    @abstractmethod
    def scan(self, message: HttpMessage, data: PassiveScanData) -> list[Alert]: ...

    def new_alert(self, message: HttpMessage, risk: Risk, confidence: Confidence, **kwargs: Any) -> Alert:
        return Alert(
            plugin_id=self.plugin_id,
            name=self.name,
            risk=risk,
            confidence=confidence,
            url=message.request.url,
            **kwargs,
        )

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"{self.__class__.__name__}(plugin_id={self.plugin_id}, priority={self.priority})"


_ERROR_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(pattern)
    for pattern in (
        r"Traceback \(most recent call last\)",
        r"(?:java|javax)\.[\w.]+(?:Exception|Error)\b",
        r"\bat [\w$.]+\([\w$]+\.java:\d+\)",
        r"Microsoft OLE DB Provider for \w+",
        r"(?:Fatal|Parse) error:.+ on line \d+",
        r"System\.\w+Exception:",
        r"You have an error in your SQL syntax",
    )
)


class ApplicationErrorDisclosureRule(PassiveScanRule):
    """
    Flags responses that disclose server-side error details.

    Site-specific "not found" pages are ignored, and a response classified as
    the site's server error page is reported with low confidence.
    """

    name = "Application Error Disclosure"
    plugin_id = 90022
    priority = 10

    def scan(self, message: HttpMessage, data: PassiveScanData) -> list[Alert]:
        if data.is_page_404(message):
            return []
        response = message.response
        if data.is_page_500(message):
            return [
                self.new_alert(
                    message,
                    Risk.LOW,
                    Confidence.MEDIUM,
                    evidence=f"HTTP {response.status_code} {response.reason}".strip(),
                    description="The response is a server error page.",
                )
            ]
        body = response.text
        for pattern in _ERROR_PATTERNS:
            match = pattern.search(body)
            if match:
                return [
                    self.new_alert(
                        message,
                        Risk.MEDIUM,
                        Confidence.MEDIUM,
                        evidence=match.group(0),
                        description="The response contains an error message that may disclose implementation details.",
                    )
                ]
        return []


_HASHES = ("md2", "md5", "sha1", "sha256", "sha512")


def _hash_hex(algorithm: str, value: str) -> str | None:
    try:
        digest = hashlib.new(algorithm)
    except ValueError:
        # md2 and friends are not available in every OpenSSL build.
        return None
    digest.update(value.encode("utf-8"))
    return digest.hexdigest()


class UsernameHashDisclosureRule(PassiveScanRule):
    """Reports hashed usernames of the context's users appearing in the response."""

    name = "Username Hash Found"
    plugin_id = 10057
    priority = 20

    def scan(self, message: HttpMessage, data: PassiveScanData) -> list[Alert]:
        users = data.get_users()
        if not users:
            return []
        haystack = message.response.text.lower()
        if message.response.headers:
            haystack += "\n" + "\n".join(message.response.headers.values()).lower()

        alerts: list[Alert] = []
        for user in users:
            for algorithm in _HASHES:
                hashed = _hash_hex(algorithm, user.name)
                if hashed and hashed in haystack:
                    alerts.append(
                        self.new_alert(
                            message,
                            Risk.INFO,
                            Confidence.HIGH,
                            evidence=hashed,
                            description=f"A {algorithm.upper()} hash of a context user name was found in the response.",
                            other_info={"user": user.name, "algorithm": algorithm},
                        )
                    )
        return alerts


DEFAULT_RULES: tuple[PassiveScanRule, ...] = (
    ApplicationErrorDisclosureRule(),
    UsernameHashDisclosureRule(),
)

__all__ = [
    "Alert",
    "ApplicationErrorDisclosureRule",
    "Confidence",
    "DEFAULT_RULES",
    "PassiveScanRule",
    "Risk",
    "UsernameHashDisclosureRule",
]
