# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP method and parameter value types shared by every backend."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from urllib.parse import quote_plus


class HttpMethod(Enum):
    """HTTP verbs and whether a request body may be sent with them."""

    GET = ("GET", False)
    POST = ("POST", True)
    PUT = ("PUT", True)
    PATCH = ("PATCH", True)
    DELETE = ("DELETE", False)
    HEAD = ("HEAD", False)
    OPTIONS = ("OPTIONS", False)

    def __init__(self, verb: str, body_allowed: bool):
        self.verb = verb
        self.body_allowed = body_allowed

    @classmethod
    def parse(cls, value: HttpMethod | str) -> HttpMethod:
        if isinstance(value, HttpMethod):
            return value
        try:
            return cls[str(value).strip().upper()]
        except KeyError as exc:
            raise ValueError(f"Unsupported HTTP method: {value!r}") from exc

    def __str__(self) -> str:
        return self.verb


@dataclass(frozen=True)
class HttpParameter:
    """A query or form parameter; the value may be empty but never None."""

    name: str
    value: str

    def __post_init__(self) -> None:
        if self.name is None or not str(self.name).strip():
            raise ValueError("Parameter name must not be blank")
        if self.value is None:
            raise ValueError(f"Parameter {self.name!r} must have a value")

    @property
    def encoded_name(self) -> str:
        return quote_plus(self.name, encoding="utf-8")

    @property
    def encoded_value(self) -> str:
        return quote_plus(self.value, encoding="utf-8")

    def encode(self) -> str:
        return f"{self.encoded_name}={self.encoded_value}"


def param(name: str, value: str) -> HttpParameter:
    return HttpParameter(name, value)


def encode_parameters(parameters: list[HttpParameter]) -> str:
    """Join parameters as an ``application/x-www-form-urlencoded`` string."""
    return "&".join(p.encode() for p in parameters)


__all__ = ["HttpMethod", "HttpParameter", "encode_parameters", "param"]
