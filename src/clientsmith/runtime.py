# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Top-level entry point backed by the process default configuration."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .client import Client, ClientBuilder
from .config import Configs, load_configs

# Process default; adjust before calling `forge`.
configs: Configs = load_configs()


def forge(manifest: Mapping[str, Any], settings: Configs | None = None) -> Client:
    """
    Build a client from `manifest`.

    The gateway is looked up on `settings` (default: the module-level `configs`)
    at call time, so swapping `configs.gateway` affects clients already built.
    Gateway configs are merged into the manifest when the client is built.
    """
    active = settings or configs
    return ClientBuilder(manifest, lambda: active.gateway, active.gateway_configs).build()


__all__ = ["configs", "forge"]
