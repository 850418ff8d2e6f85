# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Deterministic, programmable in-process gateway for tests and offline use."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from ..config import GatewayConfigs
from ..http.models import Request, Response
from .base import BODYLESS_METHODS, GatewayExecutor


@dataclass
class MockRoute:
    status: int = 200
    body: Any = None
    headers: dict[str, str] = field(default_factory=dict)
    delay_ms: float = 0
    hang: bool = False


@dataclass
class MockCall:
    """What the transport would have put on the wire."""

    method: str
    url: str
    headers: dict[str, str]
    body: Any


class MockBackend:
    """
    Registry of canned responses shared by the MockGateway instances it creates.

    Pass `backend.gateway` wherever a gateway class is expected.
    """

    def __init__(self) -> None:
        self._routes: dict[tuple[str, str], MockRoute] = {}
        self.calls: list[MockCall] = []

    def add(
        self,
        method: str,
        url: str,
        *,
        status: int = 200,
        body: Any = None,
        headers: Mapping[str, str] | None = None,
        delay_ms: float = 0,
    ) -> None:
        headers = dict(headers or {})
        if isinstance(body, (Mapping, list)):
            body = json.dumps(body)
            headers.setdefault("content-type", "application/json")
        self._routes[(method.lower(), url)] = MockRoute(status, body, headers, delay_ms)

    def hang(self, method: str, url: str) -> None:
        """Register a route that never completes."""
        self._routes[(method.lower(), url)] = MockRoute(hang=True)

    def match(self, method: str, url: str) -> MockRoute | None:
        return self._routes.get((method.lower(), url))

    def gateway(self, request: Request, configs: GatewayConfigs | None = None) -> MockGateway:
        return MockGateway(request, configs, backend=self)


class MockGateway:
    def __init__(self, request: Request, configs: GatewayConfigs | None = None, *, backend: MockBackend):
        self.request = request
        self.backend = backend
        self.executor = GatewayExecutor(request, configs)

    async def call(self) -> Response:
        return await self.executor.run(self.perform)

    async def perform(self, method: str) -> None:
        url = self.request.url()
        sent_method, body, body_headers = method, None, {}
        if method not in BODYLESS_METHODS:
            body, body_headers = self.executor.prepare_body(method)
            if self.executor.should_emulate_http():
                sent_method = "post"
        self.backend.calls.append(MockCall(sent_method, url, self.executor.build_headers(body_headers), body))

        route = self.backend.match(method, url)
        if route is None:
            self.executor.dispatch_client_error(f"No mock response configured for {method.upper()} {url}")
            return
        if route.hang:
            await asyncio.get_running_loop().create_future()
        if route.delay_ms:
            await asyncio.sleep(route.delay_ms / 1000)
        self.executor.dispatch_response(Response(self.request, route.status, route.body, dict(route.headers)))


__all__ = ["MockBackend", "MockCall", "MockGateway", "MockRoute"]
