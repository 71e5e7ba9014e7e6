# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import logging
import socket
import ssl

import httpx
import urllib3

from testservers import config
from testservers.config import DEFAULT_USER_AGENT, HttpSettings, load_http_settings
from testservers.errors import ErrorCategory, HttpClientError, MalformedUrlError, TransportError, categorize_exception
from testservers.http.cookies import cookie
from testservers.log import TRANSPORT_LOGGERS, resolve_log_level, setup_logging


def test_http_settings_env_overrides(monkeypatch):
    monkeypatch.setenv("TESTSERVERS_HTTP_TIMEOUT", "5.5")
    monkeypatch.setenv("TESTSERVERS_HTTP_REDIRECTS", "false")
    monkeypatch.setenv("TESTSERVERS_HTTP_VERIFY_SSL", "0")
    monkeypatch.setenv("TESTSERVERS_USER_AGENT", "CustomAgent/1.0")
    monkeypatch.setenv("TESTSERVERS_HTTP_POOL_MAXSIZE", "4")
    monkeypatch.setenv("TESTSERVERS_HTTP_CLIENT", " URLLIB3 ")

    settings = load_http_settings()

    assert settings.timeout == 5.5
    assert settings.follow_redirects is False
    assert settings.verify_ssl is False
    assert settings.user_agent == "CustomAgent/1.0"
    assert settings.pool_maxsize == 4
    assert settings.strategy == "urllib3"


def test_http_settings_invalid_env_fall_back(monkeypatch):
    monkeypatch.setenv("TESTSERVERS_HTTP_TIMEOUT", "not-a-number")
    monkeypatch.setenv("TESTSERVERS_HTTP_POOL_MAXSIZE", "-3")
    monkeypatch.setenv("TESTSERVERS_HTTP_CLIENT", "")

    settings = load_http_settings()

    assert settings.timeout == config.HttpSettings.timeout
    assert settings.pool_maxsize == config.HttpSettings.pool_maxsize
    assert settings.strategy == config.DEFAULT_STRATEGY
    assert settings.user_agent == DEFAULT_USER_AGENT


def test_http_settings_redirects_truthy_variants(monkeypatch):
    for value in ("1", "on", "yes", "TRUE"):
        monkeypatch.setenv("TESTSERVERS_HTTP_REDIRECTS", value)
        assert load_http_settings().follow_redirects is True


def test_default_header_and_cookie_copies():
    base = HttpSettings()
    updated = base.with_default_header("X-A", "1").with_default_header("x-a", "2").with_default_cookie(cookie("c", "v"))
    assert base.default_headers == {}
    assert base.default_cookies == []
    assert updated.default_headers["X-A"].values == ("1", "2")
    assert updated.default_cookies == [cookie("c", "v")]


def test_error_hierarchy():
    assert issubclass(MalformedUrlError, HttpClientError)
    assert issubclass(MalformedUrlError, ValueError)
    assert issubclass(TransportError, RuntimeError)


def test_categorize_exception():
    assert categorize_exception(httpx.ReadTimeout("slow")) is ErrorCategory.TIMEOUT
    assert categorize_exception(urllib3.exceptions.ReadTimeoutError(None, "http://x", "slow")) is ErrorCategory.TIMEOUT
    assert categorize_exception(httpx.ConnectError("refused")) is ErrorCategory.CONNECTION_ERROR
    assert categorize_exception(ConnectionRefusedError()) is ErrorCategory.CONNECTION_ERROR
    assert categorize_exception(urllib3.exceptions.NewConnectionError(None, "refused")) is ErrorCategory.CONNECTION_ERROR
    assert categorize_exception(ssl.SSLError("bad cert")) is ErrorCategory.SSL_ERROR
    assert categorize_exception(socket.gaierror("no such host")) is ErrorCategory.DNS_ERROR
    assert categorize_exception(ValueError("other")) is ErrorCategory.UNKNOWN_ERROR


def test_transport_error_wrap_keeps_category_and_message():
    error = TransportError.wrap(httpx.ConnectTimeout("too slow"))
    assert error.category is ErrorCategory.TIMEOUT
    assert "ConnectTimeout" in str(error)


def test_setup_logging_accepts_level(monkeypatch):
    calls = {}
    monkeypatch.setattr("logging.basicConfig", lambda **kwargs: calls.update(kwargs))
    setup_logging("debug")
    assert calls["level"] == 10


def test_log_level_comes_from_env_and_falls_back(monkeypatch):
    monkeypatch.setenv("TESTSERVERS_LOG_LEVEL", "info")
    assert resolve_log_level() == logging.INFO
    assert resolve_log_level("error") == logging.ERROR
    monkeypatch.setenv("TESTSERVERS_LOG_LEVEL", "chatty")
    assert resolve_log_level() == logging.WARNING


def test_setup_logging_keeps_transport_loggers_quiet(monkeypatch):
    monkeypatch.setattr("logging.basicConfig", lambda **kwargs: None)
    previous = {name: logging.getLogger(name).level for name in TRANSPORT_LOGGERS}
    try:
        setup_logging("debug")
        assert all(logging.getLogger(name).level == logging.WARNING for name in TRANSPORT_LOGGERS)
        setup_logging("debug", transport_level="debug")
        assert all(logging.getLogger(name).level == logging.DEBUG for name in TRANSPORT_LOGGERS)
    finally:
        for name, level in previous.items():
            logging.getLogger(name).setLevel(level)
