# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
passivescan package entrypoint.

Per-message context resolution for passive scanning of proxied HTTP traffic.
Each captured message is matched to the first configured site context, and the
context's technologies, users and custom page definitions are exposed to passive
scan rules through PassiveScanData. Collaborators are injected explicitly so the
helpers can be used with substitutes.
"""

from .config import ScanSettings, load_scan_settings
from .errors import ContextDefinitionError, PassiveScanError, UserDefinitionError
from .http import HttpMessage, HttpRequest, HttpResponse, message_from_httpx
from .log import setup_logging
from .model import (
    ALL_TECH,
    Context,
    CustomPage,
    CustomPageType,
    PageMatcherLocation,
    Session,
    Tech,
    TechSet,
    load_session,
)
from .pscan import Alert, PassiveScanData, PassiveScanRule, PassiveScanRunner, ScanPassResult
from .users import ContextUserAuthManager, ExtensionUserManagement, User, load_user_management
from .version import __version__

__all__ = [
    "ALL_TECH",
    "Alert",
    "Context",
    "ContextDefinitionError",
    "ContextUserAuthManager",
    "CustomPage",
    "CustomPageType",
    "ExtensionUserManagement",
    "HttpMessage",
    "HttpRequest",
    "HttpResponse",
    "PageMatcherLocation",
    "PassiveScanData",
    "PassiveScanError",
    "PassiveScanRule",
    "PassiveScanRunner",
    "ScanPassResult",
    "ScanSettings",
    "Session",
    "Tech",
    "TechSet",
    "User",
    "UserDefinitionError",
    "load_scan_settings",
    "load_session",
    "load_user_management",
    "message_from_httpx",
    "setup_logging",
    "__version__",
]
