# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Client builder.

Expands a Manifest into a `Client` whose attributes are resources and whose
resource attributes are coroutine functions:

    client = ClientBuilder(manifest, lambda: HttpxGateway).build()
    response = await client.User.by_id(id=7)
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Coroutine, Iterator, Mapping
from typing import Any

from .config import GatewayConfigs
from .errors import GatewayNotConfiguredError, ManifestError
from .gateway.base import GatewayFactory
from .http.models import MethodDescriptor, Request, Response
from .manifest import Manifest
from .middleware import MiddlewareContext, compose_response_phase, run_request_phase

logger = logging.getLogger(__name__)

EntryPoint = Callable[..., Coroutine[Any, Any, Response]]
GatewayClassFactory = Callable[[], GatewayFactory | None]


class Resource:
    """A named group of callable entry points."""

    def __init__(self, name: str, methods: Mapping[str, EntryPoint]):
        self._name = name
        self._methods = dict(methods)

    def __getattr__(self, name: str) -> EntryPoint:
        try:
            return self.__dict__["_methods"][name]
        except KeyError:
            raise AttributeError(f"resource {self.__dict__.get('_name')!r} has no method {name!r}") from None

    def __getitem__(self, name: str) -> EntryPoint:
        return self._methods[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._methods)

    def __dir__(self) -> list[str]:
        return [*super().__dir__(), *self._methods]

    def __repr__(self) -> str:
        return f"<Resource {self._name} methods={list(self._methods)}>"


class Client:
    """Resources generated from a manifest; `_manifest` is kept for introspection."""

    def __init__(self, manifest: Manifest, resources: Mapping[str, Resource]):
        self._manifest = manifest
        self._resources = dict(resources)

    def __getattr__(self, name: str) -> Resource:
        try:
            return self.__dict__["_resources"][name]
        except KeyError:
            raise AttributeError(f"client has no resource {name!r}") from None

    def __getitem__(self, name: str) -> Resource:
        return self._resources[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._resources)

    def __dir__(self) -> list[str]:
        return [*super().__dir__(), *self._resources]

    def __repr__(self) -> str:
        return f"<Client host={self._manifest.host!r} resources={list(self._resources)}>"


class ClientBuilder:
    def __init__(
        self,
        manifest: Mapping[str, Any] | Manifest | None,
        gateway_class_factory: GatewayClassFactory | None,
        gateway_configs: GatewayConfigs | None = None,
    ):
        if not manifest:
            raise ManifestError(f"invalid manifest ({manifest!r})")
        if gateway_class_factory is None or gateway_class_factory() is None:
            raise GatewayNotConfiguredError("gateway class not configured (configs.gateway)")

        self.manifest = manifest if isinstance(manifest, Manifest) else Manifest(manifest, gateway_configs)
        self.gateway_class_factory = gateway_class_factory

    def build(self) -> Client:
        resources = {
            resource_name: self.build_resource(resource_name, descriptors)
            for resource_name, descriptors in self.manifest.each_resource()
        }
        return Client(self.manifest, resources)

    def build_resource(self, resource_name: str, descriptors: Mapping[str, MethodDescriptor]) -> Resource:
        return Resource(
            resource_name,
            {
                method_name: self._entry_point(resource_name, method_name, descriptor)
                for method_name, descriptor in descriptors.items()
            },
        )

    def _entry_point(self, resource_name: str, method_name: str, descriptor: MethodDescriptor) -> EntryPoint:
        async def call(params: Mapping[str, Any] | None = None, /, **kwargs: Any) -> Response:
            request = Request(descriptor, {**(params or {}), **kwargs})
            return await self.invoke_middlewares(resource_name, method_name, request)

        call.__name__ = method_name
        call.__qualname__ = f"{resource_name}.{method_name}"
        return call

    async def invoke_middlewares(self, resource_name: str, method_name: str, request: Request) -> Response:
        middlewares = self.manifest.create_middlewares(MiddlewareContext(resource_name, method_name))
        final_request = run_request_phase(middlewares, request)
        # Unresolvable paths are a caller mistake, not a response.
        url = final_request.url()

        gateway_class = self.gateway_class_factory()
        if gateway_class is None:
            raise GatewayNotConfiguredError("gateway class not configured (configs.gateway)")
        gateway_configs = self.manifest.gateway_configs
        logger.debug("%s.%s -> %s %s", resource_name, method_name, final_request.method().upper(), url)

        async def call_gateway() -> Response:
            return await gateway_class(final_request, gateway_configs).call()

        return await compose_response_phase(middlewares, call_gateway)()


__all__ = ["Client", "ClientBuilder", "Resource"]
