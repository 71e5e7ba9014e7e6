# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Logging helpers for testservers."""

from __future__ import annotations

import logging
import os

LOG_LEVEL_ENV = "TESTSERVERS_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"

# Transport libraries log every connection at DEBUG; they stay at WARNING unless asked.
TRANSPORT_LOGGERS = ("httpx", "httpcore", "urllib3")


def resolve_log_level(level: str | None = None) -> int:
    name = (level or os.getenv(LOG_LEVEL_ENV) or DEFAULT_LOG_LEVEL).strip().upper()
    value = logging.getLevelName(name)
    return value if isinstance(value, int) else logging.WARNING


def setup_logging(level: str | None = None, *, transport_level: str | None = None) -> None:
    """Configure standard logging for test sessions; the level defaults to ``TESTSERVERS_LOG_LEVEL``."""
    logging.basicConfig(
        level=resolve_log_level(level),
        format="%(levelname)s %(name)s: %(message)s",
    )
    transport = resolve_log_level(transport_level or DEFAULT_LOG_LEVEL)
    for name in TRANSPORT_LOGGERS:
        logging.getLogger(name).setLevel(transport)


__all__ = ["resolve_log_level", "setup_logging"]
