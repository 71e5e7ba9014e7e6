# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP response wrapper with a lazily read, cached body."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from ..errors import HttpClientError, TransportError
from .cookies import Cookie, read_cookie
from .headers import (
    CACHE_CONTROL,
    CONTENT_ENCODING,
    CONTENT_SECURITY_POLICY,
    CONTENT_TYPE,
    ETAG,
    LAST_MODIFIED,
    LOCATION,
    SET_COOKIE,
    STRICT_TRANSPORT_SECURITY,
    X_CONTENT_SECURITY_POLICY,
    X_CONTENT_TYPE_OPTIONS,
    X_WEBKIT_CSP,
    X_XSS_PROTECTION,
    HttpHeader,
)


def collect_headers(items: Iterable[tuple[str, str]]) -> list[HttpHeader]:
    """Group raw (name, value) pairs into headers, keeping first-seen casing and value order."""
    grouped: dict[str, HttpHeader] = {}
    for name, value in items:
        key = str(name).lower()
        existing = grouped.get(key)
        grouped[key] = existing.with_value(str(value)) if existing else HttpHeader(str(name), (str(value),))
    return list(grouped.values())


class HttpResponse(ABC):
    """
    Status and headers are captured at construction; the body is fetched on first access.

    The body is read at most once, under a private lock, because native response streams
    can usually be consumed only once. Equality covers status, headers, duration and body,
    so comparing two responses triggers the body fetch.
    """

    def __init__(self, status: int, headers: Iterable[HttpHeader], duration: int):
        if duration <= 0:
            raise ValueError(f"Duration must be positive, got {duration}")
        self._status = int(status)
        self._duration = int(duration)
        self._headers: dict[str, HttpHeader] = {}
        for item in headers:
            existing = self._headers.get(item.key)
            self._headers[item.key] = HttpHeader(existing.name, existing.values + item.values) if existing else item
        self._body_lock = threading.Lock()
        self._body: str | None = None
        self._body_loaded = False

    @abstractmethod
    def _read_body(self) -> str:
        """Read the full payload from the native response."""

    @property
    def status(self) -> int:
        return self._status

    @property
    def duration(self) -> int:
        """Time to produce the response, in nanoseconds."""
        return self._duration

    @property
    def duration_ms(self) -> int:
        return self._duration // 1_000_000

    @property
    def headers(self) -> Mapping[str, HttpHeader]:
        """Read-only mapping of lower-cased header name to header."""
        return MappingProxyType(self._headers)

    @property
    def body(self) -> str:
        with self._body_lock:
            if not self._body_loaded:
                try:
                    self._body = self._read_body()
                except HttpClientError:
                    raise
                except Exception as exc:  # noqa: BLE001
                    raise TransportError.wrap(exc) from exc
                self._body_loaded = True
            return self._body

    def get_header(self, name: str) -> HttpHeader | None:
        return self._headers.get(str(name).lower())

    def contains_header(self, name: str) -> bool:
        return self.get_header(name) is not None

    @property
    def cookies(self) -> list[Cookie]:
        set_cookie = self.get_header(SET_COOKIE)
        if set_cookie is None:
            return []
        return [read_cookie(value) for value in set_cookie.values]

    def get_cookie(self, name: str) -> Cookie | None:
        if not name or not name.strip():
            raise ValueError("Cookie name must not be blank")
        return next((c for c in self.cookies if c.name == name), None)

    @property
    def etag(self) -> HttpHeader | None:
        return self.get_header(ETAG)

    @property
    def content_type(self) -> HttpHeader | None:
        return self.get_header(CONTENT_TYPE)

    @property
    def content_encoding(self) -> HttpHeader | None:
        return self.get_header(CONTENT_ENCODING)

    @property
    def location(self) -> HttpHeader | None:
        return self.get_header(LOCATION)

    @property
    def cache_control(self) -> HttpHeader | None:
        return self.get_header(CACHE_CONTROL)

    @property
    def last_modified(self) -> HttpHeader | None:
        return self.get_header(LAST_MODIFIED)

    @property
    def strict_transport_security(self) -> HttpHeader | None:
        return self.get_header(STRICT_TRANSPORT_SECURITY)

    @property
    def content_security_policy(self) -> HttpHeader | None:
        return self.get_header(CONTENT_SECURITY_POLICY)

    @property
    def x_content_security_policy(self) -> HttpHeader | None:
        return self.get_header(X_CONTENT_SECURITY_POLICY)

    @property
    def x_webkit_csp(self) -> HttpHeader | None:
        return self.get_header(X_WEBKIT_CSP)

    @property
    def x_content_type_options(self) -> HttpHeader | None:
        return self.get_header(X_CONTENT_TYPE_OPTIONS)

    @property
    def x_xss_protection(self) -> HttpHeader | None:
        return self.get_header(X_XSS_PROTECTION)

    def __eq__(self, other: object) -> bool:
        if other is self:
            return True
        if not isinstance(other, HttpResponse):
            return NotImplemented
        return (
            self._status == other._status
            and self._headers == other._headers
            and self._duration == other._duration
            and self.body == other.body
        )

    def __hash__(self) -> int:
        return hash((self._status, frozenset(self._headers.values()), self._duration, self.body))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status={self._status}, duration={self._duration}, headers={list(self._headers.values())!r})"


class DefaultHttpResponse(HttpResponse):
    """Response whose body is already in memory."""

    def __init__(self, status: int, headers: Iterable[HttpHeader], duration: int, body: str = ""):
        super().__init__(status, headers, duration)
        self._raw_body = body

    def _read_body(self) -> str:
        return self._raw_body


def decode_body(content: bytes, encoding: str | None) -> str:
    """Decode a payload with the response charset, falling back to UTF-8."""
    try:
        return content.decode(encoding or "utf-8", errors="replace")
    except LookupError:
        return content.decode("utf-8", errors="replace")


__all__ = ["DefaultHttpResponse", "HttpResponse", "collect_headers", "decode_body"]
