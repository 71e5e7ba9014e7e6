# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers."""

from __future__ import annotations

import socket
import ssl as ssl_module
from enum import Enum

import httpx
import urllib3.exceptions


class ErrorCategory(str, Enum):
    TIMEOUT = "TIMEOUT"
    SSL_ERROR = "SSL_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    DNS_ERROR = "DNS_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class HttpClientError(RuntimeError):
    """Base class for every error raised by the HTTP client layer."""


class MalformedUrlError(HttpClientError, ValueError):
    """A request URL cannot be parsed into scheme/host/port/path."""

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        scheme: str | None = None,
        host: str | None = None,
        port: int | None = None,
        path: str | None = None,
    ):
        super().__init__(message)
        self.url = url
        self.scheme = scheme
        self.host = host
        self.port = port
        self.path = path


class TransportError(HttpClientError):
    """I/O or backend failure while executing a request; the cause is chained."""

    def __init__(self, message: str, *, category: ErrorCategory = ErrorCategory.UNKNOWN_ERROR):
        super().__init__(message)
        self.category = category

    @classmethod
    def wrap(cls, exc: BaseException) -> TransportError:
        return cls(f"{type(exc).__name__}: {exc}", category=categorize_exception(exc))


class EncodingError(HttpClientError):
    """Request body could not be encoded with the configured charset."""


class ClientDestroyedError(HttpClientError):
    """Raised when a destroyed client is asked for a new request."""


class RequestAlreadyExecutedError(HttpClientError):
    """Raised on the second execute() of a request builder."""


def categorize_exception(exc: BaseException) -> ErrorCategory:
    """
    Map httpx/urllib3/socket exceptions to ErrorCategory.
    """
    if isinstance(exc, urllib3.exceptions.MaxRetryError) and exc.reason is not None:
        return categorize_exception(exc.reason)

    # urllib3 derives NewConnectionError from ConnectTimeoutError.
    if isinstance(exc, urllib3.exceptions.NameResolutionError):
        return ErrorCategory.DNS_ERROR
    if isinstance(exc, urllib3.exceptions.NewConnectionError):
        return ErrorCategory.CONNECTION_ERROR

    if isinstance(exc, (httpx.TimeoutException, urllib3.exceptions.TimeoutError, TimeoutError)):
        return ErrorCategory.TIMEOUT

    if isinstance(exc, (ssl_module.SSLError, ssl_module.CertificateError, urllib3.exceptions.SSLError)):
        return ErrorCategory.SSL_ERROR

    if isinstance(exc, (socket.gaierror, socket.herror)):
        return ErrorCategory.DNS_ERROR

    if isinstance(
        exc,
        (
            httpx.ConnectError,
            httpx.RemoteProtocolError,
            httpx.NetworkError,
            httpx.ProxyError,
            urllib3.exceptions.NewConnectionError,
            urllib3.exceptions.ProtocolError,
            urllib3.exceptions.ProxyError,
        ),
    ):
        return ErrorCategory.CONNECTION_ERROR

    if isinstance(exc, (ConnectionError, ConnectionRefusedError, ConnectionResetError)):
        return ErrorCategory.CONNECTION_ERROR

    return ErrorCategory.UNKNOWN_ERROR


__all__ = [
    "ClientDestroyedError",
    "EncodingError",
    "ErrorCategory",
    "HttpClientError",
    "MalformedUrlError",
    "RequestAlreadyExecutedError",
    "TransportError",
    "categorize_exception",
]
