# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP client abstraction, lifecycle and factory."""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from enum import Enum

from ..config import HttpSettings, load_http_settings
from ..errors import ClientDestroyedError
from .headers import USER_AGENT, HttpHeader, header
from .models import HttpMethod
from .origin import Origin, origin_base_url
from .request import HttpRequest
from .url import concatenate_path, starts_with_http_scheme

logger = logging.getLogger(__name__)


class HttpClient(ABC):
    """
    Owns one native transport bound to a target origin and hands out request builders.

    The client keeps no per-request state, so builders created from it can run on several
    threads at once. ``destroy()`` tears the transport down exactly once.
    """

    def __init__(self, origin: Origin, settings: HttpSettings | None = None):
        if origin is None:
            raise ValueError("HttpClient requires a target origin")
        self.origin = origin
        self.settings = settings or load_http_settings()
        self._destroyed = False
        self._destroy_lock = threading.Lock()

    @property
    def base_url(self) -> str:
        return origin_base_url(self.origin)

    def url_for(self, path: str | None) -> str:
        """Resolve ``path`` against the origin; absolute http(s) URLs are returned unchanged."""
        if starts_with_http_scheme(path):
            return str(path)
        return self.base_url + concatenate_path(self.origin.path, path)

    def default_headers(self) -> list[HttpHeader]:
        headers = list(self.settings.default_headers.values())
        if self.settings.user_agent and not any(h.key == USER_AGENT.lower() for h in headers):
            headers.append(header(USER_AGENT, self.settings.user_agent))
        return headers

    def new_request(self, method: HttpMethod | str, path: str | None = None) -> HttpRequest:
        if self.is_destroyed():
            raise ClientDestroyedError("Cannot create request from a destroyed client")
        return self._build_request(HttpMethod.parse(method), self.url_for(path))

    def prepare_get(self, path: str | None = None) -> HttpRequest:
        return self.new_request(HttpMethod.GET, path)

    def prepare_post(self, path: str | None = None) -> HttpRequest:
        return self.new_request(HttpMethod.POST, path)

    def prepare_put(self, path: str | None = None) -> HttpRequest:
        return self.new_request(HttpMethod.PUT, path)

    def prepare_patch(self, path: str | None = None) -> HttpRequest:
        return self.new_request(HttpMethod.PATCH, path)

    def prepare_delete(self, path: str | None = None) -> HttpRequest:
        return self.new_request(HttpMethod.DELETE, path)

    def prepare_head(self, path: str | None = None) -> HttpRequest:
        return self.new_request(HttpMethod.HEAD, path)

    def prepare_options(self, path: str | None = None) -> HttpRequest:
        return self.new_request(HttpMethod.OPTIONS, path)

    def destroy(self) -> None:
        """Release the native transport; later calls are no-ops."""
        with self._destroy_lock:
            if self._destroyed:
                return
            self._destroyed = True
        logger.debug("Destroying %s for %s", type(self).__name__, self.base_url)
        self._teardown()

    def is_destroyed(self) -> bool:
        return self._destroyed

    def close(self) -> None:
        self.destroy()

    def __enter__(self) -> HttpClient:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        self.destroy()

    @abstractmethod
    def _build_request(self, method: HttpMethod, url: str) -> HttpRequest:
        """Create a backend request builder for ``url``."""

    @abstractmethod
    def _teardown(self) -> None:
        """Backend-specific resource release, called at most once."""


class HttpClientStrategy(str, Enum):
    """Available transports; the caller picks one explicitly."""

    HTTPX = "httpx"
    URLLIB3 = "urllib3"
    ASYNC = "async"

    @classmethod
    def parse(cls, value: HttpClientStrategy | str) -> HttpClientStrategy:
        if isinstance(value, HttpClientStrategy):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            choices = ", ".join(s.value for s in cls)
            raise ValueError(f"Unknown HTTP client strategy {value!r} (expected one of: {choices})") from exc

    def build(self, origin: Origin, settings: HttpSettings | None = None) -> HttpClient:
        if self is HttpClientStrategy.URLLIB3:
            from .urllib3_client import Urllib3Client

            return Urllib3Client(origin, settings)
        if self is HttpClientStrategy.ASYNC:
            from .async_client import AsyncHttpxClient

            return AsyncHttpxClient(origin, settings)

        from .httpx_client import HttpxClient

        return HttpxClient(origin, settings)


def create_http_client(
    origin: Origin,
    strategy: HttpClientStrategy | str | None = None,
    settings: HttpSettings | None = None,
) -> HttpClient:
    """Factory for a client bound to ``origin``; the strategy defaults to ``settings.strategy``."""
    settings = settings or load_http_settings()
    return HttpClientStrategy.parse(strategy or settings.strategy).build(origin, settings)


__all__ = ["HttpClient", "HttpClientStrategy", "create_http_client"]
