# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Gateway exports."""

from .base import Gateway, GatewayExecutor, GatewayFactory
from .httpx_gateway import HttpxGateway
from .mock import MockBackend, MockCall, MockGateway

__all__ = [
    "Gateway",
    "GatewayExecutor",
    "GatewayFactory",
    "HttpxGateway",
    "MockBackend",
    "MockCall",
    "MockGateway",
]
