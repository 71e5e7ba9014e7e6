# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP header value type and well-known names.

HTTP header field names are case-insensitive (RFC 9110), so an HttpHeader compares and
hashes on its lower-cased name while keeping the original casing for display and for
the wire.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

ETAG = "ETag"
CONTENT_TYPE = "Content-Type"
CONTENT_ENCODING = "Content-Encoding"
LOCATION = "Location"
CACHE_CONTROL = "Cache-Control"
LAST_MODIFIED = "Last-Modified"
STRICT_TRANSPORT_SECURITY = "Strict-Transport-Security"
CONTENT_SECURITY_POLICY = "Content-Security-Policy"
X_CONTENT_SECURITY_POLICY = "X-Content-Security-Policy"
X_WEBKIT_CSP = "X-Webkit-CSP"
X_CONTENT_TYPE_OPTIONS = "X-Content-Type-Options"
X_XSS_PROTECTION = "X-XSS-Protection"
USER_AGENT = "User-Agent"
REQUESTED_WITH = "X-Requested-With"
ACCEPT = "Accept"
COOKIE = "Cookie"
SET_COOKIE = "Set-Cookie"

XML_HTTP_REQUEST = "XMLHttpRequest"

TEXT_PLAIN = "text/plain"
APPLICATION_JSON = "application/json"
APPLICATION_XML = "application/xml"
APPLICATION_FORM_URL_ENCODED = "application/x-www-form-urlencoded"

HEADER_SEPARATOR = ", "


def _require_name(name: str) -> str:
    if name is None or not str(name).strip():
        raise ValueError("Header name must not be blank")
    return str(name)


@dataclass(frozen=True, eq=False)
class HttpHeader:
    """An HTTP header: a name and an ordered, non-empty list of values."""

    name: str
    values: tuple[str, ...]

    def __post_init__(self) -> None:
        _require_name(self.name)
        if isinstance(self.values, str):
            object.__setattr__(self, "values", (self.values,))
        values = tuple(self.values)
        if not values:
            raise ValueError(f"Header {self.name!r} must have at least one value")
        for value in values:
            if value is None:
                raise ValueError(f"Header {self.name!r} must not contain None values")
        object.__setattr__(self, "values", values)

    @property
    def key(self) -> str:
        """Lower-cased name used for case-insensitive lookups."""
        return self.name.lower()

    @property
    def first_value(self) -> str:
        return self.values[0]

    @property
    def last_value(self) -> str:
        return self.values[-1]

    def serialize_values(self) -> str:
        return HEADER_SEPARATOR.join(self.values)

    def with_value(self, value: str) -> HttpHeader:
        """Return a copy with ``value`` appended."""
        return HttpHeader(self.name, self.values + (value,))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HttpHeader):
            return NotImplemented
        return self.key == other.key and self.values == other.values

    def __hash__(self) -> int:
        return hash((self.key, self.values))


def header(name: str, values: str | Iterable[str]) -> HttpHeader:
    """Build a header from a single value or an iterable of values."""
    if isinstance(values, str):
        return HttpHeader(name, (values,))
    return HttpHeader(name, tuple(values))


__all__ = [
    "ACCEPT",
    "APPLICATION_FORM_URL_ENCODED",
    "APPLICATION_JSON",
    "APPLICATION_XML",
    "CACHE_CONTROL",
    "CONTENT_ENCODING",
    "CONTENT_SECURITY_POLICY",
    "CONTENT_TYPE",
    "COOKIE",
    "ETAG",
    "HEADER_SEPARATOR",
    "HttpHeader",
    "LAST_MODIFIED",
    "LOCATION",
    "REQUESTED_WITH",
    "SET_COOKIE",
    "STRICT_TRANSPORT_SECURITY",
    "TEXT_PLAIN",
    "USER_AGENT",
    "XML_HTTP_REQUEST",
    "X_CONTENT_SECURITY_POLICY",
    "X_CONTENT_TYPE_OPTIONS",
    "X_WEBKIT_CSP",
    "X_XSS_PROTECTION",
    "header",
]
