# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Target origin of an HTTP client: the embedded server under test, seen from outside."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from .url import DEFAULT_PORTS, HttpUrl, ensure_absolute_path


@runtime_checkable
class Origin(Protocol):
    """Anything exposing scheme/host/port/path, typically a running embedded server."""

    @property
    def scheme(self) -> str: ...

    @property
    def host(self) -> str: ...

    @property
    def port(self) -> int: ...

    @property
    def path(self) -> str: ...


@dataclass(frozen=True)
class ServerOrigin:
    """Static Origin, e.g. for a server started outside the test process."""

    scheme: str = "http"
    host: str = "localhost"
    port: int = DEFAULT_PORTS["http"]
    path: str = "/"

    @classmethod
    def from_url(cls, url: str) -> ServerOrigin:
        parsed = HttpUrl.parse(url)
        return cls(scheme=parsed.scheme, host=parsed.host, port=parsed.port, path=parsed.path)


def origin_base_url(origin: Origin) -> str:
    """Return ``scheme://host:port`` for an origin."""
    return HttpUrl(scheme=origin.scheme, host=origin.host, port=origin.port).base_url


def origin_url(origin: Origin) -> str:
    """Return the full origin URL including its (absolute) path."""
    return origin_base_url(origin) + ensure_absolute_path(origin.path)


__all__ = ["Origin", "ServerOrigin", "origin_base_url", "origin_url"]
