# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""urllib3 PoolManager-backed HttpClient implementation (connection pooling)."""

from __future__ import annotations

import re

import urllib3

from ..config import HttpSettings
from .client import HttpClient
from .headers import CONTENT_TYPE
from .models import HttpMethod
from .origin import Origin
from .request import HttpRequest, PreparedRequest
from .response import HttpResponse, collect_headers, decode_body

DEFAULT_MAX_REDIRECTS = 20

_CHARSET_RE = re.compile(r"charset=[\"']?([^\"';\s]+)", re.IGNORECASE)


def charset_from_content_type(content_type: str | None) -> str | None:
    if not content_type:
        return None
    match = _CHARSET_RE.search(content_type)
    return match.group(1) if match else None


class Urllib3Response(HttpResponse):
    """Wraps an unpreloaded urllib3 response; the connection goes back to the pool after the body read."""

    def __init__(self, response: urllib3.BaseHTTPResponse, duration: int):
        super().__init__(response.status, collect_headers(response.headers.items()), duration)
        self._response = response

    def _read_body(self) -> str:
        try:
            content = self._response.read()
        finally:
            self._response.release_conn()
        return decode_body(content, charset_from_content_type(self._response.headers.get(CONTENT_TYPE)))


class Urllib3Request(HttpRequest):
    """Synchronous call through a shared connection pool."""

    def __init__(self, pool: urllib3.PoolManager, method: HttpMethod, url: str, *, follow_redirects: bool = True, **kwargs):
        super().__init__(method, url, **kwargs)
        self._pool = pool
        self._follow_redirects = follow_redirects

    def _send(self, prepared: PreparedRequest) -> HttpResponse:
        headers = urllib3.HTTPHeaderDict()
        for name, value in prepared.header_items():
            headers.add(name, value)

        response, duration = self._timed(
            self._pool.urlopen,
            prepared.verb,
            prepared.url,
            body=prepared.body,
            headers=headers,
            redirect=self._follow_redirects,
            preload_content=False,
        )
        return Urllib3Response(response, duration)


class Urllib3Client(HttpClient):
    """Pooled client; destroy() evicts every pooled connection."""

    def __init__(self, origin: Origin, settings: HttpSettings | None = None, pool: urllib3.PoolManager | None = None):
        super().__init__(origin, settings)
        self._pool = pool or urllib3.PoolManager(
            maxsize=self.settings.pool_maxsize,
            timeout=urllib3.Timeout(total=self.settings.timeout),
            # Transport failures surface immediately; only redirects are followed.
            retries=urllib3.Retry(
                total=None,
                connect=0,
                read=0,
                status=0,
                other=0,
                redirect=DEFAULT_MAX_REDIRECTS,
                raise_on_redirect=False,
            ),
            cert_reqs="CERT_REQUIRED" if self.settings.verify_ssl else "CERT_NONE",
        )

    def _build_request(self, method: HttpMethod, url: str) -> HttpRequest:
        return Urllib3Request(
            self._pool,
            method,
            url,
            follow_redirects=self.settings.follow_redirects,
            default_headers=self.default_headers(),
            default_cookies=self.settings.default_cookies,
        )

    def _teardown(self) -> None:
        self._pool.clear()


__all__ = ["Urllib3Client", "Urllib3Request", "Urllib3Response", "charset_from_content_type"]
