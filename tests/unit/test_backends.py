# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import io

import httpx
import pytest
import urllib3

from testservers.config import HttpSettings
from testservers.errors import ErrorCategory, TransportError
from testservers.http.async_client import AsyncHttpxClient
from testservers.http.cookies import Cookie, cookie
from testservers.http.httpx_client import HttpxClient
from testservers.http.origin import ServerOrigin
from testservers.http.urllib3_client import Urllib3Client, charset_from_content_type

ORIGIN = ServerOrigin(host="localhost", port=8080, path="/app")
SETTINGS = HttpSettings(user_agent="UA/1.0")
COMPARED_HEADERS = ("x-multi", "content-type", "cookie", "user-agent", "accept")


class RecordingPool:
    """PoolManager stand-in returning real, unpreloaded urllib3 responses."""

    def __init__(self, status=200, body=b"pooled", headers=None, error=None):
        self.calls = []
        self.cleared = 0
        self._status = status
        self._body = body
        self._headers = headers or {"Content-Type": "text/plain; charset=utf-8"}
        self._error = error

    def urlopen(self, method, url, body=None, headers=None, **kwargs):
        self.calls.append({"method": method, "url": url, "body": body, "headers": headers, **kwargs})
        if self._error is not None:
            raise self._error
        return urllib3.HTTPResponse(
            body=io.BytesIO(self._body),
            headers=self._headers,
            status=self._status,
            preload_content=False,
        )

    def clear(self):
        self.cleared += 1


def _capture_httpx(captured):
    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(
            {
                "method": request.method,
                "url": str(request.url),
                "headers": {name: request.headers.get(name) for name in COMPARED_HEADERS},
                "body": request.content,
            }
        )
        return httpx.Response(200, headers={"Content-Type": "text/plain"}, text="ok")

    return handler


def _send_on_every_backend(build):
    """Run ``build(client)`` on the three backends and return what each transport received."""
    sync_seen, async_seen = [], []
    pool = RecordingPool()

    sync_client = HttpxClient(ORIGIN, SETTINGS, client=httpx.Client(transport=httpx.MockTransport(_capture_httpx(sync_seen))))
    pooled_client = Urllib3Client(ORIGIN, SETTINGS, pool=pool)
    async_client = AsyncHttpxClient(
        ORIGIN, SETTINGS, client=httpx.AsyncClient(transport=httpx.MockTransport(_capture_httpx(async_seen)))
    )
    try:
        for client in (sync_client, pooled_client, async_client):
            build(client).execute()
    finally:
        for client in (sync_client, pooled_client, async_client):
            client.destroy()

    call = pool.calls[0]
    pooled = {
        "method": call["method"],
        "url": call["url"],
        "headers": {name: call["headers"].get(name) for name in COMPARED_HEADERS},
        "body": call["body"] if call["body"] is not None else b"",
    }
    return sync_seen[0], pooled, async_seen[0], call


def test_cross_backend_equivalence_for_form_post():
    def build(client):
        return (
            client.prepare_post("/items")
            .add_header("X-Multi", "a")
            .add_header("X-Multi", "b")
            .add_query_param("q", "a b")
            .add_query_param("page", "2")
            .add_form_param("name", "été")
            .add_form_param("flag", "")
            .add_cookie(cookie("session", "abc"))
            .add_cookie(Cookie("theme", "dark", max_age=120))
        )

    sync, pooled, async_, _ = _send_on_every_backend(build)
    expected = {
        "method": "POST",
        "url": "http://localhost:8080/app/items?q=a+b&page=2",
        "headers": {
            "x-multi": "a, b",
            "content-type": "application/x-www-form-urlencoded",
            "cookie": "session=abc; theme=dark",
            "user-agent": "UA/1.0",
            "accept": None,
        },
        "body": b"name=%C3%A9t%C3%A9&flag=",
    }
    assert pooled == expected
    sync["headers"]["accept"] = async_["headers"]["accept"] = None
    assert sync == expected
    assert async_ == expected


def test_cross_backend_equivalence_for_raw_body():
    def build(client):
        return client.prepare_put("data").add_form_param("ignored", "1").set_body("hello").accept_json()

    sync, pooled, async_, _ = _send_on_every_backend(build)
    for seen in (sync, pooled, async_):
        assert seen["method"] == "PUT"
        assert seen["url"] == "http://localhost:8080/app/data"
        assert seen["body"] == b"hello"
        assert seen["headers"]["content-type"] is None
        assert seen["headers"]["accept"] == "application/json"


def test_empty_post_sends_explicit_empty_body():
    sync, pooled, async_, call = _send_on_every_backend(lambda client: client.prepare_post("/empty"))
    assert call["body"] == b""
    assert sync["body"] == async_["body"] == b""


def test_get_never_sends_a_body():
    _, _, _, call = _send_on_every_backend(lambda client: client.prepare_get("/"))
    assert call["body"] is None
    assert call["preload_content"] is False
    assert call["redirect"] is True


def test_httpx_body_is_streamed_lazily_once():
    class CountingStream(httpx.SyncByteStream):
        def __init__(self):
            self.reads = 0

        def __iter__(self):
            self.reads += 1
            yield b"hello"

    stream = CountingStream()
    transport = httpx.MockTransport(lambda request: httpx.Response(200, stream=stream))
    client = HttpxClient(ORIGIN, SETTINGS, client=httpx.Client(transport=transport))

    response = client.prepare_get("/").execute()
    assert stream.reads == 0
    assert response.status == 200
    assert response.body == "hello"
    assert response.body == "hello"
    assert stream.reads == 1
    assert response.duration > 0
    client.destroy()


def test_urllib3_response_reads_body_once_and_decodes_charset():
    pool = RecordingPool(body="héllo".encode("latin-1"), headers={"Content-Type": "text/plain; charset=ISO-8859-1", "X-A": "1"})
    client = Urllib3Client(ORIGIN, SETTINGS, pool=pool)
    response = client.prepare_get("/").execute()
    assert response.get_header("x-a").values == ("1",)
    assert response.body == "héllo"
    assert response.body == "héllo"


def test_async_backend_sends_multi_value_headers_as_repeated_entries():
    seen = []

    def handler(request):
        seen.append(request.headers.get_list("X-Multi"))
        return httpx.Response(201, headers=[("Set-Cookie", "a=1"), ("Set-Cookie", "b=2")], text="created")

    client = AsyncHttpxClient(ORIGIN, SETTINGS, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
    try:
        response = client.prepare_get("/").add_header("X-Multi", "a").add_header("X-Multi", "b").execute()
    finally:
        client.destroy()
    assert seen == [["a", "b"]]
    assert response.status == 201
    assert response.body == "created"
    assert [c.name for c in response.cookies] == ["a", "b"]


@pytest.mark.parametrize("backend", ["httpx", "async"])
def test_httpx_transport_errors_are_wrapped(backend):
    cause = httpx.ConnectError("connection refused")

    def handler(request):
        raise cause

    transport = httpx.MockTransport(handler)
    if backend == "httpx":
        client = HttpxClient(ORIGIN, SETTINGS, client=httpx.Client(transport=transport))
    else:
        client = AsyncHttpxClient(ORIGIN, SETTINGS, client=httpx.AsyncClient(transport=transport))
    try:
        with pytest.raises(TransportError) as excinfo:
            client.prepare_get("/").execute()
    finally:
        client.destroy()
    assert excinfo.value.__cause__ is cause
    assert excinfo.value.category is ErrorCategory.CONNECTION_ERROR


def test_urllib3_transport_errors_are_wrapped():
    reason = urllib3.exceptions.NewConnectionError(None, "connection refused")
    cause = urllib3.exceptions.MaxRetryError(None, "http://localhost:8080/app", reason=reason)
    client = Urllib3Client(ORIGIN, SETTINGS, pool=RecordingPool(error=cause))
    with pytest.raises(TransportError) as excinfo:
        client.prepare_get("/").execute()
    assert excinfo.value.__cause__ is cause
    assert excinfo.value.category is ErrorCategory.CONNECTION_ERROR


def test_charset_from_content_type():
    assert charset_from_content_type("text/html; charset=UTF-8") == "UTF-8"
    assert charset_from_content_type('text/html; charset="latin-1"') == "latin-1"
    assert charset_from_content_type("application/json") is None
    assert charset_from_content_type(None) is None


@pytest.mark.parametrize("name", ["version", "Path", "domain", "expires", "comment", "my cookie"])
def test_cross_backend_equivalence_for_unusual_cookie_names(name):
    def build(client):
        return client.prepare_get("/").add_cookie(Cookie(name, "v")).add_cookie(cookie("session", "abc"))

    sync, pooled, async_, _ = _send_on_every_backend(build)
    expected = f"{name}=v; session=abc"
    assert sync["headers"]["cookie"] == expected
    assert pooled["headers"]["cookie"] == expected
    assert async_["headers"]["cookie"] == expected
