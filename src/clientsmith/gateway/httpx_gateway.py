# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""httpx-backed gateway."""

from __future__ import annotations

import logging

import httpx

from ..config import GatewayConfigs, HttpxSettings
from ..errors import ErrorCategory, categorize_exception
from ..http.models import Request, Response
from .base import BODYLESS_METHODS, GatewayExecutor

logger = logging.getLogger(__name__)


class HttpxGateway:
    """Asynchronous gateway executing requests through `httpx.AsyncClient`."""

    def __init__(self, request: Request, configs: GatewayConfigs | None = None):
        self.request = request
        self.executor = GatewayExecutor(request, configs)

    @property
    def settings(self) -> HttpxSettings:
        return self.executor.options().httpx

    async def call(self) -> Response:
        return await self.executor.run(self.perform)

    def build_request(self, client: httpx.AsyncClient, method: str) -> httpx.Request:
        if method in BODYLESS_METHODS:
            body, body_headers = None, {}
        else:
            body, body_headers = self.executor.prepare_body(method)
            if self.executor.should_emulate_http():
                method = "post"

        headers = self.executor.build_headers(body_headers)
        headers.setdefault("user-agent", self.settings.user_agent)

        timeout = self.executor.timeout_seconds()
        return client.build_request(
            method.upper(),
            self.request.url(),
            headers=headers,
            content=body,
            timeout=httpx.Timeout(timeout) if timeout else httpx.USE_CLIENT_DEFAULT,
        )

    async def perform(self, method: str) -> None:
        settings = self.settings
        if settings.client is not None:
            await self._send(settings.client, method)
            return

        async with httpx.AsyncClient(
            verify=settings.verify_ssl,
            follow_redirects=settings.follow_redirects,
            transport=settings.transport,
        ) as client:
            await self._send(client, method)

    async def _send(self, client: httpx.AsyncClient, method: str) -> None:
        http_request = self.build_request(client, method)
        if self.settings.configure is not None:
            self.settings.configure(http_request)

        try:
            http_response = await client.send(http_request)
            await http_response.aread()
        except httpx.HTTPError as exc:
            category = categorize_exception(exc)
            if category is ErrorCategory.TIMEOUT:
                self.executor.dispatch_timeout()
                return
            logger.warning("%s %s failed (%s): %s", method.upper(), self.request.url(), category.value, exc)
            self.executor.dispatch_client_error(str(exc) or "Network error")
            return

        self.executor.dispatch_response(
            Response(
                self.request,
                http_response.status_code,
                http_response.text,
                dict(http_response.headers),
            )
        )


__all__ = ["HttpxGateway"]
