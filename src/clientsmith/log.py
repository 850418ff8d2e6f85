# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Logging helpers for clientsmith."""

from __future__ import annotations

import logging
import os

FALLBACK_LOG_LEVEL = "WARNING"

# Transport libraries log every connection at INFO.
_TRANSPORT_LOGGERS = ("httpx", "httpcore")


def resolve_log_level(level: str | None = None) -> int:
    """Explicit level, else CLIENTSMITH_LOG_LEVEL, else WARNING; unknown names fall back to WARNING."""
    name = (level or os.getenv("CLIENTSMITH_LOG_LEVEL") or FALLBACK_LOG_LEVEL).strip().upper()
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.WARNING


def setup_logging(level: str | None = None) -> None:
    """Configure standard logging for CLI use; transport chatter only shows at DEBUG."""
    numeric_level = resolve_log_level(level)
    logging.basicConfig(
        level=numeric_level,
        format="%(levelname)s %(name)s: %(message)s",
    )
    transport_level = logging.DEBUG if numeric_level <= logging.DEBUG else logging.WARNING
    for name in _TRANSPORT_LOGGERS:
        logging.getLogger(name).setLevel(transport_level)


__all__ = ["resolve_log_level", "setup_logging"]
