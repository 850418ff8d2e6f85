# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Gateway contract and the shared call executor.

A gateway is anything constructible as `Gateway(request, gateway_configs)` whose
`call()` coroutine returns a successful Response or raises ResponseError. The
transport-independent parts (timing, timeout, emulated verbs, body encoding,
basic auth, settling the outcome exactly once) live in GatewayExecutor, which
concrete gateways hold and drive with their own `perform` coroutine.
"""

from __future__ import annotations

import asyncio
import base64
import logging
import re
import time
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, Protocol

from ..config import GatewayConfigs
from ..errors import ResponseError
from ..http.models import Request, Response
from ..http.query import to_query_string

logger = logging.getLogger(__name__)

SUPPORTED_METHODS = frozenset({"get", "head", "post", "put", "patch", "delete"})
BODYLESS_METHODS = frozenset({"get", "head"})
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded;charset=utf-8"
METHOD_OVERRIDE_HEADER = "x-http-method-override"
CLIENT_ERROR_STATUS = 400

_EMULATED_METHOD_RE = re.compile(r"^(delete|put|patch)", re.IGNORECASE)


class Gateway(Protocol):
    """Minimal protocol every transport implements."""

    def __init__(self, request: Request, configs: GatewayConfigs) -> None: ...

    async def call(self) -> Response: ...


GatewayFactory = Callable[[Request, GatewayConfigs], Gateway]
Perform = Callable[[str], Awaitable[None]]


class GatewayExecutor:
    """Per-call state machine shared by all gateways."""

    def __init__(self, request: Request, configs: GatewayConfigs | None = None):
        self.request = request
        self.configs = configs or GatewayConfigs()
        self.canceled = False
        self._future: asyncio.Future[Response] | None = None
        self._started: float | None = None
        self._timer: asyncio.TimerHandle | None = None

    def options(self) -> GatewayConfigs:
        return self.configs

    def should_emulate_http(self) -> bool:
        return bool(self.configs.emulate_http) and bool(_EMULATED_METHOD_RE.match(self.request.method()))

    def prepare_body(self, method: str) -> tuple[Any, dict[str, str]]:
        """
        Return the body to send plus the headers its encoding requires.

        Mapping bodies are form-encoded; anything else passes through untouched.
        """
        headers: dict[str, str] = {}
        body = self.request.body()
        if self.should_emulate_http():
            body = body or {}
            if isinstance(body, Mapping):
                body = {**body, "_method": method}
            headers[METHOD_OVERRIDE_HEADER] = method

        encoded = to_query_string(body)
        if encoded and isinstance(body, Mapping):
            headers["content-type"] = FORM_CONTENT_TYPE
        return encoded, headers

    def basic_auth_headers(self) -> dict[str, str]:
        auth = self.request.auth()
        if not auth:
            return {}
        if isinstance(auth, Mapping):
            username, password = auth.get("username") or "", auth.get("password") or ""
        else:
            username, password = auth
        token = base64.b64encode(f"{username}:{password}".encode()).decode("ascii")
        return {"authorization": f"Basic {token}"}

    def build_headers(self, extra: Mapping[str, str] | None = None) -> dict[str, str]:
        """Auth and body headers first, then the request's own headers on top."""
        return {**self.basic_auth_headers(), **(extra or {}), **self.request.headers()}

    def timeout_seconds(self) -> float | None:
        """Managed timeout to hand to the transport."""
        timeout = self.request.timeout()
        return timeout / 1000 if timeout else None

    def configure_timeout(self, loop: asyncio.AbstractEventLoop) -> None:
        # The transport gets the managed timeout; this timer is the fallback
        # for transports that never report it.
        timeout = self.request.timeout()
        if timeout:
            self._timer = loop.call_later((timeout + 1) / 1000, self.dispatch_timeout)

    def elapsed_ms(self) -> float:
        if self._started is None:
            return 0.0
        return (time.perf_counter() - self._started) * 1000

    def dispatch_response(self, response: Response) -> None:
        if self.canceled:
            logger.debug("Discarding late response for %s", self.request.url())
            return
        self._settle(response)

    def dispatch_client_error(self, message: str) -> None:
        self.dispatch_response(Response(self.request, CLIENT_ERROR_STATUS, message))

    def dispatch_timeout(self) -> None:
        if self.canceled or self._future is None or self._future.done():
            return
        self.canceled = True
        message = f"Timeout ({self.request.timeout()}ms)"
        logger.warning("%s %s: %s", self.request.method().upper(), self.request.url(), message)
        self._settle(Response(self.request, CLIENT_ERROR_STATUS, message))

    def _settle(self, response: Response) -> None:
        if self._future is None or self._future.done():
            return
        self._clear_timer()
        response.time_elapsed = self.elapsed_ms()
        logger.debug(
            "%s %s -> %s (%.1fms)",
            self.request.method().upper(),
            self.request.url(),
            response.status(),
            response.time_elapsed,
        )
        if response.success():
            self._future.set_result(response)
        else:
            self._future.set_exception(ResponseError(response))

    def _clear_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def _perform_guarded(self, perform: Perform, method: str) -> None:
        try:
            await perform(method)
        except asyncio.CancelledError:
            raise
        except Exception as exc:  # noqa: BLE001
            logger.warning("Gateway failed for %s: %s", self.request.url(), exc)
            self.dispatch_client_error(str(exc) or type(exc).__name__)
            return
        if self._future is not None and not self._future.done() and not self.canceled:
            self.dispatch_client_error("Gateway finished without a response")

    async def run(self, perform: Perform) -> Response:
        """
        Execute `perform(method)` and wait for the outcome.

        `perform` must report through `dispatch_response`/`dispatch_client_error`;
        the first settlement wins and later ones are dropped.
        """
        loop = asyncio.get_running_loop()
        self._future = loop.create_future()
        self._started = time.perf_counter()

        method = self.request.method()
        if method not in SUPPORTED_METHODS:
            self.dispatch_client_error(f"Unsupported method ({method})")
            return await self._future

        self.configure_timeout(loop)
        task = loop.create_task(self._perform_guarded(perform, method))
        try:
            return await self._future
        finally:
            self._clear_timer()
            if not task.done():
                task.cancel()


__all__ = [
    "BODYLESS_METHODS",
    "FORM_CONTENT_TYPE",
    "METHOD_OVERRIDE_HEADER",
    "SUPPORTED_METHODS",
    "Gateway",
    "GatewayExecutor",
    "GatewayFactory",
]
