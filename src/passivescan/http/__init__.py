# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP exchange exports."""

from .adapters import message_from_httpx, request_from_httpx
from .headers import header_value, normalize_headers
from .models import Headers, HttpMessage, HttpRequest, HttpResponse

__all__ = [
    "Headers",
    "HttpMessage",
    "HttpRequest",
    "HttpResponse",
    "header_value",
    "message_from_httpx",
    "normalize_headers",
    "request_from_httpx",
]
