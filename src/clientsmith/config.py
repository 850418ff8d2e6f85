# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for clientsmith.

`Configs` is the process-level configuration surface: the active gateway and
the per-gateway knobs. The pipeline never reads it implicitly; `forge` and the
CLI pass it to the builder.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, fields, replace
from typing import TYPE_CHECKING, Any

from .version import __version__

if TYPE_CHECKING:
    import httpx

    from .gateway.base import GatewayFactory

DEFAULT_USER_AGENT = f"clientsmith/{__version__}"

_GATEWAY_CONFIG_ALIASES = {"emulateHTTP": "emulate_http"}


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class HttpxSettings:
    """Knobs for the httpx-backed gateway."""

    verify_ssl: bool = True
    follow_redirects: bool = True
    user_agent: str = DEFAULT_USER_AGENT
    transport: httpx.AsyncBaseTransport | None = None
    # Shared client used instead of opening one per call.
    client: httpx.AsyncClient | None = None
    # Called with the built httpx.Request right before it is sent.
    configure: Callable[[httpx.Request], None] | None = None

    @classmethod
    def from_env(cls) -> HttpxSettings:
        """Create settings from environment variables (evaluated at call time)."""
        return cls(
            verify_ssl=_bool_env("CLIENTSMITH_HTTP_VERIFY_SSL", cls.verify_ssl),
            follow_redirects=_bool_env("CLIENTSMITH_HTTP_REDIRECTS", cls.follow_redirects),
            user_agent=os.getenv("CLIENTSMITH_USER_AGENT", cls.user_agent),
        )


@dataclass
class GatewayConfigs:
    """Configuration handed to every gateway instance."""

    emulate_http: bool = False
    httpx: HttpxSettings = field(default_factory=HttpxSettings)

    @classmethod
    def from_env(cls) -> GatewayConfigs:
        """Create gateway configs from environment variables (evaluated at call time)."""
        return cls(
            emulate_http=_bool_env("CLIENTSMITH_EMULATE_HTTP", cls.emulate_http),
            httpx=HttpxSettings.from_env(),
        )

    def merge(self, overrides: GatewayConfigs | Mapping[str, Any] | None) -> GatewayConfigs:
        """Return a copy with `overrides` layered on top; nested settings are merged too."""
        if overrides is None:
            return replace(self, httpx=replace(self.httpx))
        if isinstance(overrides, GatewayConfigs):
            return replace(overrides, httpx=replace(overrides.httpx))

        known = {f.name for f in fields(self)}
        values: dict[str, Any] = {}
        for key, value in overrides.items():
            name = _GATEWAY_CONFIG_ALIASES.get(key, key)
            if name not in known:
                raise ValueError(f"unknown gateway config {key!r}")
            values[name] = value

        httpx_overrides = values.pop("httpx", None)
        if isinstance(httpx_overrides, HttpxSettings):
            httpx_settings = replace(httpx_overrides)
        else:
            httpx_settings = replace(self.httpx, **dict(httpx_overrides or {}))
        return replace(self, httpx=httpx_settings, **values)


@dataclass
class Configs:
    """Process-level configuration; mutate before constructing clients."""

    gateway: GatewayFactory | None = None
    gateway_configs: GatewayConfigs = field(default_factory=GatewayConfigs)


def load_configs() -> Configs:
    """Load configuration from environment with the httpx gateway selected."""
    from .gateway.httpx_gateway import HttpxGateway

    return Configs(gateway=HttpxGateway, gateway_configs=GatewayConfigs.from_env())


__all__ = [
    "DEFAULT_USER_AGENT",
    "Configs",
    "GatewayConfigs",
    "HttpxSettings",
    "load_configs",
]
