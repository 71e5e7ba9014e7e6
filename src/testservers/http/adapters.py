# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""In-memory HttpClient for tests that should not touch the network."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from ..config import HttpSettings
from .client import HttpClient
from .headers import HttpHeader, header
from .models import HttpMethod
from .origin import Origin, ServerOrigin
from .request import HttpRequest, PreparedRequest
from .response import DefaultHttpResponse, HttpResponse


@dataclass
class StubResponse:
    status: int = 200
    body: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)

    def http_headers(self) -> list[HttpHeader]:
        return [header(name, value) for name, value in self.headers.items()]


class StubHttpRequest(HttpRequest):
    def __init__(self, client: StubHttpClient, method: HttpMethod, url: str, **kwargs):
        super().__init__(method, url, **kwargs)
        self._client = client

    def _send(self, prepared: PreparedRequest) -> HttpResponse:
        stub, duration = self._timed(self._client.respond, prepared)
        return DefaultHttpResponse(stub.status, stub.http_headers(), duration, stub.body)


class StubHttpClient(HttpClient):
    """Deterministic, programmable HttpClient; records every prepared request it receives."""

    def __init__(
        self,
        origin: Origin | None = None,
        settings: HttpSettings | None = None,
        responses: dict[str, StubResponse] | None = None,
    ):
        super().__init__(origin or ServerOrigin(), settings or HttpSettings())
        self._responses = responses or {}
        self.requests: list[PreparedRequest] = []
        self.teardown_calls = 0

    def add(self, url: str, response: StubResponse) -> None:
        self._responses[url] = response

    def respond(self, prepared: PreparedRequest) -> StubResponse:
        self.requests.append(prepared)
        if prepared.url in self._responses:
            return self._responses[prepared.url]
        return StubResponse(status=404, body="No stubbed response configured")

    def _build_request(self, method: HttpMethod, url: str) -> HttpRequest:
        return StubHttpRequest(
            self,
            method,
            url,
            default_headers=self.default_headers(),
            default_cookies=self.settings.default_cookies,
        )

    def _teardown(self) -> None:
        self.teardown_calls += 1


__all__ = ["StubHttpClient", "StubHttpRequest", "StubResponse"]
