# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""httpx-backed synchronous HttpClient implementation."""

from __future__ import annotations

import httpx

from ..config import HttpSettings
from .client import HttpClient
from .headers import COOKIE
from .models import HttpMethod
from .origin import Origin
from .request import HttpRequest, PreparedRequest
from .response import HttpResponse, collect_headers


class HttpxResponse(HttpResponse):
    """Wraps a streamed httpx.Response; the stream is read and closed on first body access."""

    def __init__(self, response: httpx.Response, duration: int):
        super().__init__(response.status_code, collect_headers(response.headers.multi_items()), duration)
        self._response = response

    def _read_body(self) -> str:
        try:
            self._response.read()
        finally:
            self._response.close()
        return self._response.text


class HttpxRequest(HttpRequest):
    """One blocking httpx call per request; the verb is passed as a plain string."""

    def __init__(self, client: httpx.Client, method: HttpMethod, url: str, **kwargs):
        super().__init__(method, url, **kwargs)
        self._client = client

    def _send(self, prepared: PreparedRequest) -> HttpResponse:
        native = self._client.build_request(prepared.verb, prepared.url, content=prepared.body)
        # Only cookies attached to this request are sent, never the client's jar.
        native.headers.pop(COOKIE, None)
        for name, value in prepared.header_items():
            native.headers[name] = value

        response, duration = self._timed(self._client.send, native, stream=True)
        return HttpxResponse(response, duration)


class HttpxClient(HttpClient):
    """Synchronous httpx client wrapper."""

    def __init__(self, origin: Origin, settings: HttpSettings | None = None, client: httpx.Client | None = None):
        super().__init__(origin, settings)
        self._client = client or httpx.Client(
            follow_redirects=self.settings.follow_redirects,
            timeout=self.settings.timeout,
            verify=self.settings.verify_ssl,
        )

    def _build_request(self, method: HttpMethod, url: str) -> HttpRequest:
        return HttpxRequest(
            self._client,
            method,
            url,
            default_headers=self.default_headers(),
            default_cookies=self.settings.default_cookies,
        )

    def _teardown(self) -> None:
        self._client.close()


__all__ = ["HttpxClient", "HttpxRequest", "HttpxResponse"]
