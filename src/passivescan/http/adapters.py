# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Adapters that turn captured httpx traffic into HttpMessage instances."""

from __future__ import annotations

import logging

import httpx

from ..config import load_scan_settings
from .headers import normalize_headers
from .models import HttpMessage, HttpRequest, HttpResponse

logger = logging.getLogger(__name__)


def _truncate(body: bytes, limit: int, what: str, url: str) -> bytes:
    if limit > 0 and len(body) > limit:
        logger.debug("Truncating %s body for %s from %d to %d bytes", what, url, len(body), limit)
        return body[:limit]
    return body


def request_from_httpx(request: httpx.Request, *, max_body_bytes: int | None = None) -> HttpRequest:
    limit = max_body_bytes if max_body_bytes is not None else load_scan_settings().max_body_bytes
    url = str(request.url)
    try:
        body = request.content
    except httpx.RequestNotRead:
        # Streaming uploads are not buffered by the proxy.
        body = b""
    return HttpRequest(
        url=url,
        method=request.method.upper(),
        headers=normalize_headers(request.headers.multi_items()),
        body=_truncate(body, limit, "request", url),
    )


def message_from_httpx(response: httpx.Response, *, max_body_bytes: int | None = None) -> HttpMessage:
    """
    Build an HttpMessage from a completed httpx.Response and its originating request.

    The response must have been read (``response.read()``) before it is passed here.
    """
    limit = max_body_bytes if max_body_bytes is not None else load_scan_settings().max_body_bytes
    request = request_from_httpx(response.request, max_body_bytes=limit)
    return HttpMessage(
        request=request,
        response=HttpResponse(
            status_code=response.status_code,
            reason=response.reason_phrase,
            headers=normalize_headers(response.headers.multi_items()),
            body=_truncate(response.content, limit, "response", request.url),
            encoding=response.encoding or "utf-8",
        ),
    )


__all__ = ["message_from_httpx", "request_from_httpx"]
