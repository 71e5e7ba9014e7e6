# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for testservers HTTP clients."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from .version import __version__

if TYPE_CHECKING:
    from .http.cookies import Cookie
    from .http.headers import HttpHeader

DEFAULT_USER_AGENT = f"testservers/{__version__}"
DEFAULT_STRATEGY = "httpx"


def _float_env(name: str, default: float) -> float:
    try:
        value = os.getenv(name)
        return float(value) if value is not None else default
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        value = os.getenv(name)
        return int(value) if value is not None else default
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class HttpSettings:
    """Client configuration; default headers and cookies apply to every request unless overridden."""

    follow_redirects: bool = True
    default_headers: dict[str, HttpHeader] = field(default_factory=dict)
    default_cookies: list[Cookie] = field(default_factory=list)
    timeout: float = 10.0
    verify_ssl: bool = True
    user_agent: str | None = DEFAULT_USER_AGENT
    pool_maxsize: int = 10
    strategy: str = DEFAULT_STRATEGY

    def with_default_header(self, name: str, value: str) -> HttpSettings:
        """Return a copy with ``value`` appended to the default header ``name``."""
        from .http.headers import header

        headers = dict(self.default_headers)
        existing = next((h for h in headers.values() if h.key == name.lower()), None)
        if existing is not None:
            headers[existing.name] = existing.with_value(value)
        else:
            headers[name] = header(name, value)
        return replace(self, default_headers=headers)

    def with_default_cookie(self, cookie: Cookie) -> HttpSettings:
        return replace(self, default_cookies=[*self.default_cookies, cookie])

    @classmethod
    def from_env(cls) -> HttpSettings:
        """Create settings from environment variables (evaluated at call time)."""
        pool_maxsize = _int_env("TESTSERVERS_HTTP_POOL_MAXSIZE", cls.pool_maxsize)
        if pool_maxsize <= 0:
            pool_maxsize = cls.pool_maxsize
        return cls(
            follow_redirects=_bool_env("TESTSERVERS_HTTP_REDIRECTS", cls.follow_redirects),
            timeout=_float_env("TESTSERVERS_HTTP_TIMEOUT", cls.timeout),
            verify_ssl=_bool_env("TESTSERVERS_HTTP_VERIFY_SSL", cls.verify_ssl),
            user_agent=os.getenv("TESTSERVERS_USER_AGENT", cls.user_agent),
            pool_maxsize=pool_maxsize,
            strategy=os.getenv("TESTSERVERS_HTTP_CLIENT", cls.strategy).strip().lower() or cls.strategy,
        )


def load_http_settings() -> HttpSettings:
    """Load HTTP settings from environment with sensible defaults."""
    return HttpSettings.from_env()


__all__ = ["DEFAULT_STRATEGY", "DEFAULT_USER_AGENT", "HttpSettings", "load_http_settings"]
