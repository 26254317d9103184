# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Context, technology and custom page models."""

from .context import Context
from .custom_pages import CustomPage, CustomPageType, PageMatcherLocation
from .session import Session, load_session
from .tech import ALL_TECH, NO_TECH, Tech, TechSet

__all__ = [
    "ALL_TECH",
    "NO_TECH",
    "Context",
    "CustomPage",
    "CustomPageType",
    "PageMatcherLocation",
    "Session",
    "Tech",
    "TechSet",
    "load_session",
]
