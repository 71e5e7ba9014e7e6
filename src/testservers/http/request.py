# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Request builder shared by every backend.

An HttpRequest accumulates headers, query/form parameters, cookies and an optional raw
body, then ``execute()`` turns that state into a backend-neutral PreparedRequest which
the concrete adapter translates into its native request. Body dispatch, content-type
defaulting and default header/cookie merging all happen here, so every backend sends
the same thing for the same builder state.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar

from ..errors import EncodingError, HttpClientError, RequestAlreadyExecutedError, TransportError
from .cookies import Cookie, serialize_cookies
from .headers import (
    ACCEPT,
    APPLICATION_FORM_URL_ENCODED,
    APPLICATION_JSON,
    APPLICATION_XML,
    CONTENT_TYPE,
    COOKIE,
    REQUESTED_WITH,
    XML_HTTP_REQUEST,
    HttpHeader,
    header,
)
from .models import HttpMethod, HttpParameter, encode_parameters
from .url import HttpUrl

if TYPE_CHECKING:
    from .response import HttpResponse

logger = logging.getLogger(__name__)

DEFAULT_CHARSET = "utf-8"

T = TypeVar("T")


@dataclass(frozen=True)
class PreparedRequest:
    """Final, backend-neutral view of a request about to be sent."""

    method: HttpMethod
    url: str
    headers: tuple[HttpHeader, ...]
    cookies: tuple[Cookie, ...]
    body: bytes | None

    @property
    def verb(self) -> str:
        return self.method.verb

    def get_header(self, name: str) -> HttpHeader | None:
        key = name.lower()
        return next((h for h in self.headers if h.key == key), None)

    def header_items(self, *, with_cookies: bool = True) -> list[tuple[str, str]]:
        """Headers as (name, joined values) pairs, plus a single Cookie header when requested."""
        items = [(h.name, h.serialize_values()) for h in self.headers]
        if with_cookies and self.cookies:
            items.append((COOKIE, serialize_cookies(self.cookies)))
        return items


class HttpRequest(ABC):
    """
    Mutable, single-use request builder.

    Not thread-safe: build and execute a request from one thread. The bound client may be
    shared, since all per-call state lives here.
    """

    charset = DEFAULT_CHARSET

    def __init__(
        self,
        method: HttpMethod | str,
        url: str,
        *,
        default_headers: Iterable[HttpHeader] = (),
        default_cookies: Iterable[Cookie] = (),
    ):
        self.method = HttpMethod.parse(method)
        self.url = url
        self.headers: dict[str, HttpHeader] = {}
        self.query_params: dict[str, HttpParameter] = {}
        self.form_params: dict[str, HttpParameter] = {}
        self.cookies: list[Cookie] = []
        self.body: str | None = None
        self._default_headers = tuple(default_headers)
        self._default_cookies = tuple(default_cookies)
        self._executed = False

    # Headers

    def add_header(self, name: str | HttpHeader, value: str | None = None) -> HttpRequest:
        """Append ``value`` to header ``name`` (case-insensitive), creating it when missing."""
        if isinstance(name, HttpHeader):
            for header_value in name.values:
                self.add_header(name.name, header_value)
            return self
        if value is None:
            raise ValueError(f"Header {name!r} must have a value")
        new_header = header(name, value)
        existing = self.headers.get(new_header.key)
        self.headers[new_header.key] = existing.with_value(value) if existing else new_header
        return self

    def add_headers(self, *headers: HttpHeader) -> HttpRequest:
        for item in headers:
            self.add_header(item)
        return self

    def remove_header(self, name: str) -> HttpRequest:
        self.headers.pop(str(name).lower(), None)
        return self

    def get_header(self, name: str) -> HttpHeader | None:
        return self.headers.get(str(name).lower())

    # Parameters

    def add_query_param(self, name: str, value: str) -> HttpRequest:
        return self.add_query_params(HttpParameter(name, value))

    def add_query_params(self, *parameters: HttpParameter) -> HttpRequest:
        for parameter in parameters:
            self.query_params[parameter.name] = parameter
        return self

    def add_form_param(self, name: str, value: str) -> HttpRequest:
        return self.add_form_params(HttpParameter(name, value))

    def add_form_params(self, *parameters: HttpParameter) -> HttpRequest:
        self._ensure_body_allowed("form parameters")
        for parameter in parameters:
            self.form_params[parameter.name] = parameter
        return self

    # Cookies and body

    def add_cookie(self, cookie: Cookie) -> HttpRequest:
        if cookie is None:
            raise ValueError("Cookie must not be None")
        self.cookies.append(cookie)
        return self

    def add_cookies(self, *cookies: Cookie) -> HttpRequest:
        for item in cookies:
            self.add_cookie(item)
        return self

    def set_body(self, body: str) -> HttpRequest:
        """Set a raw body; a non-empty raw body takes precedence over form parameters."""
        self._ensure_body_allowed("a request body")
        if body is None:
            raise ValueError("Request body must not be None")
        self.body = body
        return self

    def _ensure_body_allowed(self, what: str) -> None:
        if not self.method.body_allowed:
            raise ValueError(f"HTTP method {self.method.verb} does not support {what}")

    # Shortcuts

    def as_xml_http_request(self) -> HttpRequest:
        return self.add_header(REQUESTED_WITH, XML_HTTP_REQUEST)

    def as_json(self) -> HttpRequest:
        return self.add_header(CONTENT_TYPE, APPLICATION_JSON)

    def as_xml(self) -> HttpRequest:
        return self.add_header(CONTENT_TYPE, APPLICATION_XML)

    def as_form_url_encoded(self) -> HttpRequest:
        return self.add_header(CONTENT_TYPE, APPLICATION_FORM_URL_ENCODED)

    def accept_json(self) -> HttpRequest:
        return self.add_header(ACCEPT, APPLICATION_JSON)

    def accept_xml(self) -> HttpRequest:
        return self.add_header(ACCEPT, APPLICATION_XML)

    def execute_json(self) -> HttpResponse:
        return self.as_json().accept_json().execute()

    def execute_xml(self) -> HttpResponse:
        return self.as_xml().accept_xml().execute()

    # Execution

    @property
    def executed(self) -> bool:
        return self._executed

    def prepare(self) -> PreparedRequest:
        """Resolve URL, body dispatch, headers and cookies without sending anything."""
        endpoint = HttpUrl.parse(self.url)
        try:
            query = encode_parameters(list(self.query_params.values()))
            body, default_content_type = self._resolve_body()
        except UnicodeError as exc:
            raise EncodingError(f"Cannot encode request for {self.url} as {self.charset}: {exc}") from exc

        headers = self._merged_headers()
        if default_content_type and not any(h.key == CONTENT_TYPE.lower() for h in headers):
            headers.append(header(CONTENT_TYPE, default_content_type))

        return PreparedRequest(
            method=self.method,
            url=endpoint.with_query(query),
            headers=tuple(headers),
            cookies=tuple(self._merged_cookies()),
            body=body,
        )

    def execute(self) -> HttpResponse:
        """Send the request once and wrap the native response."""
        if self._executed:
            raise RequestAlreadyExecutedError(f"{self.method.verb} {self.url} has already been executed")
        self._executed = True

        prepared = self.prepare()
        try:
            response = self._send(prepared)
        except HttpClientError:
            raise
        except Exception as exc:  # noqa: BLE001
            logger.debug("%s %s failed: %s", prepared.verb, prepared.url, exc)
            raise TransportError.wrap(exc) from exc

        logger.debug(
            "%s %s -> %s in %.2f ms",
            prepared.verb,
            prepared.url,
            response.status,
            response.duration / 1_000_000,
        )
        return response

    def _resolve_body(self) -> tuple[bytes | None, str | None]:
        if self.body:
            return self.body.encode(self.charset), None
        if self.form_params:
            encoded = encode_parameters(list(self.form_params.values()))
            return encoded.encode("ascii"), APPLICATION_FORM_URL_ENCODED
        if self.method.body_allowed:
            # Some transports refuse a missing body for POST/PUT/PATCH.
            return b"", None
        return None, None

    def _merged_headers(self) -> list[HttpHeader]:
        merged = [h for h in self._default_headers if h.key not in self.headers]
        merged.extend(self.headers.values())
        return merged

    def _merged_cookies(self) -> list[Cookie]:
        names = {c.name for c in self.cookies}
        merged = [c for c in self._default_cookies if c.name not in names]
        merged.extend(self.cookies)
        return merged

    @staticmethod
    def _timed(call: Callable[..., T], *args: Any, **kwargs: Any) -> tuple[T, int]:
        """Run ``call`` and return its result with the elapsed monotonic time in nanoseconds."""
        start = time.perf_counter_ns()
        result = call(*args, **kwargs)
        return result, max(1, time.perf_counter_ns() - start)

    @abstractmethod
    def _send(self, prepared: PreparedRequest) -> HttpResponse:
        """Translate ``prepared`` into a native request, send it and wrap the response."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.method.verb} {self.url})"


__all__ = ["DEFAULT_CHARSET", "HttpRequest", "PreparedRequest"]
