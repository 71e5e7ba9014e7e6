# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""URL helpers shared by the client and the request builders."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlsplit

from ..errors import MalformedUrlError

PATH_SEPARATOR = "/"
DEFAULT_PORTS = {"http": 80, "https": 443}
_HTTP_SCHEMES = ("http://", "https://")


def ensure_absolute_path(path: str | None) -> str:
    """Return ``path`` with a leading slash; empty or missing paths become ``/``."""
    if not path:
        return PATH_SEPARATOR
    return path if path.startswith(PATH_SEPARATOR) else PATH_SEPARATOR + path


def concatenate_path(path: str | None, endpoint: str | None) -> str:
    """
    Join a base path and an endpoint with exactly one separating slash.

    Examples:
      (None, None) -> /
      /foo, /bar   -> /foo/bar
      /foo/, /bar  -> /foo/bar
      foo, bar     -> /foo/bar
    """
    first_segment = ensure_absolute_path(path)
    if not endpoint:
        return first_segment
    if not first_segment.endswith(PATH_SEPARATOR):
        first_segment += PATH_SEPARATOR
    if endpoint.startswith(PATH_SEPARATOR):
        endpoint = endpoint[1:]
    return first_segment + endpoint


def starts_with_http_scheme(url: str | None) -> bool:
    if not url:
        return False
    lowered = url.lower()
    return any(lowered.startswith(scheme) and len(url) > len(scheme) for scheme in _HTTP_SCHEMES)


@dataclass(frozen=True)
class HttpUrl:
    """An http(s) URL reduced to scheme, host, port, absolute path and raw query."""

    scheme: str
    host: str
    port: int
    path: str = PATH_SEPARATOR
    query: str = ""

    @classmethod
    def parse(cls, url: str) -> HttpUrl:
        if not url:
            raise MalformedUrlError("URL must not be empty", url=url)
        try:
            parts = urlsplit(str(url))
            scheme = parts.scheme.lower()
            host = parts.hostname
            port = parts.port
        except ValueError as exc:
            raise MalformedUrlError(f"Malformed URL {url!r}: {exc}", url=url) from exc

        path = parts.path
        if scheme not in DEFAULT_PORTS:
            raise MalformedUrlError(f"Unknown scheme in URL {url!r}", url=url, scheme=scheme or None, path=path)
        if not host:
            raise MalformedUrlError(f"Missing host in URL {url!r}", url=url, scheme=scheme, port=port, path=path)

        return cls(
            scheme=scheme,
            host=host,
            port=port if port is not None else DEFAULT_PORTS[scheme],
            path=ensure_absolute_path(path),
            query=parts.query,
        )

    @property
    def base_url(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"{self.scheme}://{host}:{self.port}"

    def with_query(self, query: str) -> str:
        """Render the URL with ``query`` appended to any query it already carries."""
        combined = "&".join(q for q in (self.query, query) if q)
        return f"{self}?{combined}" if combined else str(self)

    def __str__(self) -> str:
        return self.base_url + self.path


__all__ = [
    "DEFAULT_PORTS",
    "HttpUrl",
    "PATH_SEPARATOR",
    "concatenate_path",
    "ensure_absolute_path",
    "starts_with_http_scheme",
]
