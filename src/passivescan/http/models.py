# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP exchange data models inspected by passive scan rules."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .headers import header_value, normalize_headers

Headers = dict[str, str]


def _coerce_body(raw: Any) -> bytes:
    if raw is None:
        return b""
    if isinstance(raw, (bytes, bytearray, memoryview)):
        return bytes(raw)
    return str(raw).encode("utf-8")


@dataclass(frozen=True)
class HttpRequest:
    """Captured request line, headers and body."""

    url: str
    method: str = "GET"
    headers: Headers = field(default_factory=dict)
    body: bytes = b""

    def header(self, name: str, default: str = "") -> str:
        return header_value(self.headers, name, default)


@dataclass(frozen=True)
class HttpResponse:
    """Captured response status, headers and body."""

    status_code: int = 0
    reason: str = ""
    headers: Headers = field(default_factory=dict)
    body: bytes = b""
    encoding: str = "utf-8"

    @property
    def text(self) -> str:
        """Return the body decoded with the declared encoding."""
        try:
            return self.body.decode(self.encoding or "utf-8", errors="replace")
        except LookupError:
            return self.body.decode("utf-8", errors="replace")

    def header(self, name: str, default: str = "") -> str:
        return header_value(self.headers, name, default)


@dataclass(frozen=True)
class HttpMessage:
    """A single request/response exchange captured by the proxy."""

    request: HttpRequest
    response: HttpResponse = field(default_factory=HttpResponse)

    @property
    def url(self) -> str:
        return self.request.url

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> HttpMessage:
        """
        Build a message from a plain mapping (JSON fixtures, CLI input).

        Accepts either nested ``request``/``response`` mappings or a flat mapping
        with ``url``, ``method``, ``status_code`` and ``body`` keys.
        """
        if "request" in data or "response" in data:
            raw_request = data.get("request") or {}
            raw_response = data.get("response") or {}
        else:
            raw_request = {
                "url": data.get("url"),
                "method": data.get("method"),
                "headers": data.get("request_headers"),
                "body": data.get("request_body"),
            }
            raw_response = {
                "status_code": data.get("status_code"),
                "reason": data.get("reason"),
                "headers": data.get("response_headers"),
                "body": data.get("body"),
                "encoding": data.get("encoding"),
            }
        if not isinstance(raw_request, Mapping) or not isinstance(raw_response, Mapping):
            raise ValueError("request and response must be mappings")

        url = raw_request.get("url")
        if not url:
            raise ValueError("message mapping requires a request url")

        request = HttpRequest(
            url=str(url),
            method=str(raw_request.get("method") or "GET").upper(),
            headers=normalize_headers(raw_request.get("headers")),
            body=_coerce_body(raw_request.get("body")),
        )
        status = raw_response.get("status_code")
        try:
            status_code = int(status) if status is not None else 0
        except (TypeError, ValueError) as exc:
            raise ValueError(f"invalid status code {status!r}") from exc
        response = HttpResponse(
            status_code=status_code,
            reason=str(raw_response.get("reason") or ""),
            headers=normalize_headers(raw_response.get("headers")),
            body=_coerce_body(raw_response.get("body")),
            encoding=str(raw_response.get("encoding") or "utf-8"),
        )
        return cls(request=request, response=response)
