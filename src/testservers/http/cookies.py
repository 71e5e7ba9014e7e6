# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Cookie value type, Set-Cookie parsing and Cookie header serialization."""

from __future__ import annotations

import re
import time
from collections.abc import Iterable
from dataclasses import dataclass
from email.utils import parsedate_to_datetime

COOKIE_SEPARATOR = "; "
_NAME_VALUE_SEPARATOR = "="
_FIELD_SEPARATOR = ";"
# "d-MMM-yyyy" and "d/MMM/yyyy" shapes are normalized to the RFC 1123 "d MMM yyyy" shape.
_DATE_SEPARATORS_RE = re.compile(r"(\d{1,2})[-/]([A-Za-z]{3})[-/](\d{2,4})")


def _now_millis() -> int:
    return time.time_ns() // 1_000_000


@dataclass(frozen=True)
class Cookie:
    """
    A cookie as sent to, or received from, a server.

    ``max_age`` is expressed in seconds and ``expires`` in epoch milliseconds.
    """

    name: str
    value: str
    domain: str | None = None
    path: str | None = None
    secure: bool = False
    http_only: bool = False
    max_age: int | None = None
    expires: int | None = None

    def __post_init__(self) -> None:
        if self.name is None or not str(self.name).strip():
            raise ValueError("Cookie name must not be blank")
        if self.value is None:
            raise ValueError(f"Cookie {self.name!r} must have a value")

    def effective_max_age(self, now_millis: int | None = None) -> int:
        """
        Resolve the max-age in seconds.

        Max-Age wins over Expires; Expires is converted relative to ``now_millis``;
        a cookie with neither resolves to 0.
        """
        if self.max_age is not None:
            return self.max_age
        if self.expires is not None:
            now = _now_millis() if now_millis is None else now_millis
            return (self.expires - now) // 1000
        return 0

    def to_header_value(self) -> str:
        return f"{self.name}{_NAME_VALUE_SEPARATOR}{self.value}"


def cookie(name: str, value: str) -> Cookie:
    return Cookie(name, value)


def secure_cookie(
    name: str,
    value: str,
    domain: str | None = None,
    path: str | None = None,
    expires: int | None = None,
    max_age: int | None = None,
) -> Cookie:
    return Cookie(name, value, domain, path, secure=True, http_only=True, max_age=max_age, expires=expires)


def session_cookie(name: str, value: str, domain: str | None = None, path: str | None = None) -> Cookie:
    return Cookie(name, value, domain, path, secure=True, http_only=True, max_age=0, expires=-1)


def _parse_expires(raw: str) -> int | None:
    normalized = _DATE_SEPARATORS_RE.sub(r"\1 \2 \3", raw.strip())
    try:
        parsed = parsedate_to_datetime(normalized)
    except (TypeError, ValueError):
        return None
    return int(parsed.timestamp() * 1000)


def read_cookie(raw_value: str) -> Cookie:
    """
    Parse a ``Set-Cookie`` header value.

    Attribute names are matched case-insensitively; an unparsable Expires date is ignored.
    """
    if raw_value is None or not raw_value.strip():
        raise ValueError("Cookie value must not be blank")

    parts = raw_value.split(_FIELD_SEPARATOR)
    name, separator, value = parts[0].partition(_NAME_VALUE_SEPARATOR)
    name = name.strip()
    if not separator or not name:
        raise ValueError(f"Cookie must have a valid name and a valid value: {raw_value!r}")

    params: dict[str, str] = {}
    for part in parts[1:]:
        key, _, param_value = part.partition(_NAME_VALUE_SEPARATOR)
        key = key.strip().lower()
        if key:
            params[key] = param_value.strip()

    max_age: int | None = None
    if params.get("max-age"):
        try:
            max_age = int(params["max-age"])
        except ValueError as exc:
            raise ValueError(f"Invalid Max-Age attribute in cookie {name!r}: {params['max-age']!r}") from exc

    expires = _parse_expires(params["expires"]) if params.get("expires") else None

    return Cookie(
        name=name,
        value=value.strip(),
        domain=params.get("domain"),
        path=params.get("path"),
        secure="secure" in params,
        http_only="httponly" in params,
        max_age=max_age,
        expires=expires,
    )


def serialize_cookies(cookies: Iterable[Cookie]) -> str:
    """Render cookies as a single ``Cookie`` request header value."""
    return COOKIE_SEPARATOR.join(c.to_header_value() for c in cookies)


__all__ = [
    "COOKIE_SEPARATOR",
    "Cookie",
    "cookie",
    "read_cookie",
    "secure_cookie",
    "serialize_cookies",
    "session_cookie",
]
