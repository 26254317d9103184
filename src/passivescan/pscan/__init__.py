# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Passive scan data, rules and the per-message scan pass."""

from .data import ContextRegistry, PassiveScanData, ScanContext, UserAuthManager, UserManagement
from .rules import (
    DEFAULT_RULES,
    Alert,
    ApplicationErrorDisclosureRule,
    Confidence,
    PassiveScanRule,
    Risk,
    UsernameHashDisclosureRule,
)
from .runner import PassiveScanRunner, ScanPassResult

__all__ = [
    "DEFAULT_RULES",
    "Alert",
    "ApplicationErrorDisclosureRule",
    "Confidence",
    "ContextRegistry",
    "PassiveScanData",
    "PassiveScanRule",
    "PassiveScanRunner",
    "Risk",
    "ScanContext",
    "ScanPassResult",
    "UserAuthManager",
    "UserManagement",
    "UsernameHashDisclosureRule",
]
