# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP client exports."""

from .adapters import StubHttpClient, StubResponse
from .async_client import AsyncHttpxClient
from .client import HttpClient, HttpClientStrategy, create_http_client
from .cookies import Cookie, cookie, read_cookie, secure_cookie, serialize_cookies, session_cookie
from .headers import HttpHeader, header
from .httpx_client import HttpxClient
from .models import HttpMethod, HttpParameter, param
from .origin import Origin, ServerOrigin
from .request import HttpRequest, PreparedRequest
from .response import DefaultHttpResponse, HttpResponse
from .url import HttpUrl, concatenate_path, ensure_absolute_path
from .urllib3_client import Urllib3Client

__all__ = [
    "AsyncHttpxClient",
    "Cookie",
    "DefaultHttpResponse",
    "HttpClient",
    "HttpClientStrategy",
    "HttpHeader",
    "HttpMethod",
    "HttpParameter",
    "HttpRequest",
    "HttpResponse",
    "HttpUrl",
    "HttpxClient",
    "Origin",
    "PreparedRequest",
    "ServerOrigin",
    "StubHttpClient",
    "StubResponse",
    "Urllib3Client",
    "concatenate_path",
    "cookie",
    "create_http_client",
    "ensure_absolute_path",
    "header",
    "param",
    "read_cookie",
    "secure_cookie",
    "serialize_cookies",
    "session_cookie",
]
