# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Passive scan pass: one PassiveScanData per message, shared by every rule."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from ..http.models import HttpMessage
from .data import ContextRegistry, PassiveScanData, UserManagement
from .rules import DEFAULT_RULES, Alert, PassiveScanRule

logger = logging.getLogger(__name__)


@dataclass
class ScanPassResult:
    """Alerts and bookkeeping for one message."""

    url: str
    context_id: int | None
    alerts: list[Alert] = field(default_factory=list)
    skipped_rules: list[str] = field(default_factory=list)
    rule_errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "context_id": self.context_id,
            "alerts": [alert.to_dict() for alert in self.alerts],
            "skipped_rules": list(self.skipped_rules),
            "rule_errors": list(self.rule_errors),
        }


class PassiveScanRunner:
    """Runs passive scan rules over captured messages."""

    def __init__(
        self,
        registry: ContextRegistry,
        rules: Iterable[PassiveScanRule] | None = None,
        user_management: UserManagement | None = None,
    ):
        self.registry = registry
        self.user_management = user_management
        self.rules = sorted(DEFAULT_RULES if rules is None else rules, key=lambda rule: rule.priority)

    def scan_data(self, message: HttpMessage) -> PassiveScanData:
        return PassiveScanData(message, self.registry, self.user_management)

    def scan(self, message: HttpMessage, data: PassiveScanData | None = None) -> ScanPassResult:
        """Run every applicable rule; ``data`` must have been built for ``message``."""
        if data is None:
            data = self.scan_data(message)
        context = data.context
        result = ScanPassResult(url=message.request.url, context_id=context.id if context is not None else None)

        for rule in self.rules:
            if not rule.applies_to_tech(data.tech_set):
                logger.debug("Skipping rule %s for %s: technology out of scope", rule.name, result.url)
                result.skipped_rules.append(rule.name)
                continue
            try:
                result.alerts.extend(rule.scan(message, data) or [])
            except Exception as exc:  # noqa: BLE001
                logger.exception("Rule %s failed on %s: %s", rule.name, result.url, exc)
                result.rule_errors.append(rule.name)
        return result


__all__ = ["PassiveScanRunner", "ScanPassResult"]
