# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Future-based HttpClient implementation on top of httpx.AsyncClient.

The async client lives on a private event loop running in a daemon thread. Requests are
submitted to that loop with ``asyncio.run_coroutine_threadsafe`` and ``execute()`` blocks
on the returned future, so callers keep the same synchronous contract as the other
backends. Destroying the client cancels whatever is still in flight on the loop.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import threading
import time
from collections.abc import Awaitable, Callable, Coroutine
from http.cookiejar import Cookie as NativeCookie
from typing import Any, TypeVar

import httpx

from ..config import HttpSettings
from ..errors import ClientDestroyedError, ErrorCategory, TransportError
from .client import HttpClient
from .cookies import COOKIE_SEPARATOR, Cookie
from .headers import COOKIE
from .models import HttpMethod
from .origin import Origin
from .request import HttpRequest, PreparedRequest
from .response import HttpResponse, collect_headers

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_AGE_ATTRIBUTE = "Max-Age"
HTTP_ONLY_ATTRIBUTE = "HttpOnly"


def to_native_cookie(cookie: Cookie, now_millis: int | None = None) -> NativeCookie:
    """
    Translate a Cookie into the cookiejar type httpx stores, resolving max-age first.

    The effective max-age (Max-Age before Expires) is kept in ``rest`` and turned into
    an absolute ``expires`` in epoch seconds.
    """
    now = time.time_ns() // 1_000_000 if now_millis is None else now_millis
    max_age = cookie.effective_max_age(now)
    rest: dict[str, str | None] = {MAX_AGE_ATTRIBUTE: str(max_age)}
    if cookie.http_only:
        rest[HTTP_ONLY_ATTRIBUTE] = None
    domain = cookie.domain or ""
    return NativeCookie(
        version=0,
        name=cookie.name,
        value=cookie.value,
        port=None,
        port_specified=False,
        domain=domain,
        domain_specified=bool(domain),
        domain_initial_dot=domain.startswith("."),
        path=cookie.path or "/",
        path_specified=bool(cookie.path),
        secure=cookie.secure,
        expires=now // 1000 + max_age,
        discard=False,
        comment=None,
        comment_url=None,
        rest=rest,
        rfc2109=False,
    )


class EventLoopThread:
    """An asyncio event loop running forever on its own daemon thread."""

    def __init__(self, name: str = "testservers-async-http"):
        self._loop = asyncio.new_event_loop()
        self._lock = threading.Lock()
        self._closing = False
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)
        self._thread.start()

    def _run(self) -> None:
        asyncio.set_event_loop(self._loop)
        self._loop.run_forever()

    def submit(self, coro: Coroutine[Any, Any, T]) -> concurrent.futures.Future[T]:
        with self._lock:
            if self._closing:
                coro.close()
                raise ClientDestroyedError("Cannot send a request on a destroyed client")
            return asyncio.run_coroutine_threadsafe(coro, self._loop)

    def stop(self, cleanup: Callable[[], Awaitable[Any]] | None = None) -> None:
        """Cancel pending tasks, await ``cleanup`` on the loop, then stop and close the loop."""
        with self._lock:
            if self._closing:
                return
            self._closing = True
        try:
            asyncio.run_coroutine_threadsafe(self._drain(cleanup), self._loop).result()
        finally:
            self._loop.call_soon_threadsafe(self._loop.stop)
            self._thread.join()
            self._loop.close()

    async def _drain(self, cleanup: Callable[[], Awaitable[Any]] | None) -> None:
        current = asyncio.current_task()
        pending = [task for task in asyncio.all_tasks() if task is not current]
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        if cleanup is not None:
            await cleanup()


class AsyncHttpxResponse(HttpResponse):
    """The async transport buffers the payload; decoding is still deferred to first access."""

    def __init__(self, response: httpx.Response, duration: int):
        super().__init__(response.status_code, collect_headers(response.headers.multi_items()), duration)
        self._response = response

    def _read_body(self) -> str:
        return self._response.text


class AsyncHttpxRequest(HttpRequest):
    """Submits the send coroutine to the client's loop and blocks on the future."""

    def __init__(self, client: httpx.AsyncClient, runner: EventLoopThread, method: HttpMethod, url: str, **kwargs):
        super().__init__(method, url, **kwargs)
        self._client = client
        self._runner = runner

    def native_cookies(self, prepared: PreparedRequest, now_millis: int | None = None) -> list[NativeCookie]:
        return [to_native_cookie(c, now_millis) for c in prepared.cookies]

    def _send(self, prepared: PreparedRequest) -> HttpResponse:
        # Multi-valued headers go out as repeated entries rather than a joined value.
        headers = [(h.name, value) for h in prepared.headers for value in h.values]
        cookies = self.native_cookies(prepared)
        if cookies:
            headers.append((COOKIE, COOKIE_SEPARATOR.join(f"{c.name}={c.value}" for c in cookies)))

        native = self._client.build_request(prepared.verb, prepared.url, content=prepared.body)
        native.headers.pop(COOKIE, None)
        for name, _ in headers:
            native.headers.pop(name, None)
        native.headers = httpx.Headers([*native.headers.multi_items(), *headers])

        response, duration = self._timed(self._send_blocking, native)
        return AsyncHttpxResponse(response, duration)

    def _send_blocking(self, native: httpx.Request) -> httpx.Response:
        future = self._runner.submit(self._client.send(native))
        try:
            return future.result()
        except concurrent.futures.CancelledError as exc:
            raise TransportError(
                f"{native.method} {native.url} was cancelled because the client was destroyed",
                category=ErrorCategory.CONNECTION_ERROR,
            ) from exc


class AsyncHttpxClient(HttpClient):
    """Future-based client; destroy() cancels in-flight sends, closes the async client and stops its loop."""

    def __init__(
        self,
        origin: Origin,
        settings: HttpSettings | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        super().__init__(origin, settings)
        self._client = client or httpx.AsyncClient(
            follow_redirects=self.settings.follow_redirects,
            timeout=self.settings.timeout,
            verify=self.settings.verify_ssl,
        )
        self._runner = EventLoopThread()

    def _build_request(self, method: HttpMethod, url: str) -> HttpRequest:
        return AsyncHttpxRequest(
            self._client,
            self._runner,
            method,
            url,
            default_headers=self.default_headers(),
            default_cookies=self.settings.default_cookies,
        )

    def _teardown(self) -> None:
        try:
            self._runner.stop(self._client.aclose)
        finally:
            logger.debug("Stopped event loop for %s", self.base_url)


__all__ = ["AsyncHttpxClient", "AsyncHttpxRequest", "AsyncHttpxResponse", "EventLoopThread", "to_native_cookie"]
