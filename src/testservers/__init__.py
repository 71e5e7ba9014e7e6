# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
testservers package entrypoint.

This package provides one HTTP client contract for tests that talk to an embedded
server, backed by a blocking httpx client, a pooled urllib3 client or a future-based
httpx async client. Requests, responses, headers and cookies are modeled the same way
whatever transport is selected.
"""

from .config import HttpSettings, load_http_settings
from .errors import (
    ClientDestroyedError,
    EncodingError,
    ErrorCategory,
    HttpClientError,
    MalformedUrlError,
    RequestAlreadyExecutedError,
    TransportError,
)
from .http import (
    Cookie,
    HttpClient,
    HttpClientStrategy,
    HttpHeader,
    HttpMethod,
    HttpParameter,
    HttpRequest,
    HttpResponse,
    ServerOrigin,
    create_http_client,
)
from .log import setup_logging
from .version import __version__

__all__ = [
    "ClientDestroyedError",
    "Cookie",
    "EncodingError",
    "ErrorCategory",
    "HttpClient",
    "HttpClientError",
    "HttpClientStrategy",
    "HttpHeader",
    "HttpMethod",
    "HttpParameter",
    "HttpRequest",
    "HttpResponse",
    "HttpSettings",
    "MalformedUrlError",
    "RequestAlreadyExecutedError",
    "ServerOrigin",
    "TransportError",
    "create_http_client",
    "load_http_settings",
    "setup_logging",
    "__version__",
]
