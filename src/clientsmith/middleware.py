# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Middleware chain primitives.

A middleware is registered as a factory that is called once per call with a
MiddlewareContext and returns an object (or mapping) with optional hooks:

- `request(request) -> Request` runs before the gateway, in registration order.
- `response(next) -> Awaitable[Response]` wraps the gateway call. The first
  registered middleware is the outermost wrapper, so it sees the response last,
  after every later middleware has handled it. Failures arrive as ResponseError
  raised from `await next()`.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Protocol, TypeAlias

from .http.models import Request, Response

Next: TypeAlias = Callable[[], Awaitable[Response]]


@dataclass(frozen=True)
class MiddlewareContext:
    resource_name: str
    resource_method: str


class Middleware(Protocol):
    """Both hooks are optional; see `bind_middleware`."""

    def request(self, request: Request) -> Request: ...

    def response(self, next: Next) -> Awaitable[Response]: ...


MiddlewareFactory: TypeAlias = Callable[[MiddlewareContext], Any]


def _identity(request: Request) -> Request:
    return request


async def _pass_through(next: Next) -> Response:
    return await next()


@dataclass(frozen=True, slots=True)
class BoundMiddleware:
    request: Callable[[Request], Request]
    response: Callable[[Next], Any]


def bind_middleware(instance: Any) -> BoundMiddleware:
    """Fill in pass-through defaults for whichever hooks `instance` leaves out."""
    if isinstance(instance, Mapping):
        request_hook, response_hook = instance.get("request"), instance.get("response")
    else:
        request_hook = getattr(instance, "request", None)
        response_hook = getattr(instance, "response", None)
    return BoundMiddleware(request=request_hook or _identity, response=response_hook or _pass_through)


def create_middlewares(factories: Sequence[MiddlewareFactory], context: MiddlewareContext) -> list[BoundMiddleware]:
    return [bind_middleware(factory(context)) for factory in factories]


def run_request_phase(middlewares: Sequence[BoundMiddleware], request: Request) -> Request:
    for middleware in middlewares:
        request = middleware.request(request)
    return request


def compose_response_phase(middlewares: Sequence[BoundMiddleware], terminal: Next) -> Next:
    producer = terminal
    for middleware in reversed(middlewares):
        next_producer = producer

        async def _wrapped(*, _mw: BoundMiddleware = middleware, _n: Next = next_producer) -> Response:
            result = _mw.response(_n)
            if inspect.isawaitable(result):
                result = await result
            return result

        producer = _wrapped
    return producer


__all__ = [
    "BoundMiddleware",
    "Middleware",
    "MiddlewareContext",
    "MiddlewareFactory",
    "Next",
    "bind_middleware",
    "compose_response_phase",
    "create_middlewares",
    "run_request_phase",
]
