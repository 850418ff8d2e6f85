# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Manifest: the declarative resource -> method -> descriptor table."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any

from .config import GatewayConfigs
from .errors import ManifestError
from .http.models import MethodDescriptor
from .middleware import BoundMiddleware, MiddlewareContext, MiddlewareFactory, create_middlewares


class Manifest:
    """
    Parsed manifest.

    All method descriptors are built up front, so configuration mistakes
    surface when the client is constructed rather than on first use.
    """

    def __init__(self, manifest: Mapping[str, Any] | None, gateway_configs: GatewayConfigs | None = None):
        if not manifest:
            raise ManifestError(f"invalid manifest ({manifest!r})")

        self.host: str = manifest.get("host") or ""
        overrides = manifest.get("gateway_configs", manifest.get("gatewayConfigs"))
        try:
            self.gateway_configs = (gateway_configs or GatewayConfigs()).merge(overrides)
        except (TypeError, ValueError) as exc:
            raise ManifestError(str(exc)) from exc
        self.middlewares: tuple[MiddlewareFactory, ...] = tuple(manifest.get("middlewares") or ())
        self.resources: Mapping[str, Mapping[str, Any]] = MappingProxyType(dict(manifest.get("resources") or {}))

        self._descriptors: dict[str, Mapping[str, MethodDescriptor]] = {}
        for resource_name, methods in self.resources.items():
            self._descriptors[resource_name] = MappingProxyType(
                {method_name: self.create_method_descriptor(resource_name, method_name) for method_name in methods}
            )

    def create_method_descriptor(self, resource_name: str, method_name: str) -> MethodDescriptor:
        config = self.resources[resource_name][method_name]
        if not config or not config.get("path"):
            raise ManifestError(f'path is undefined for resource "{resource_name}" method "{method_name}"')
        try:
            return MethodDescriptor.from_config(self.host, config)
        except TypeError as exc:
            raise ManifestError(f'invalid config for resource "{resource_name}" method "{method_name}": {exc}') from exc

    def descriptor(self, resource_name: str, method_name: str) -> MethodDescriptor:
        return self._descriptors[resource_name][method_name]

    def each_resource(self) -> Iterator[tuple[str, Mapping[str, MethodDescriptor]]]:
        yield from self._descriptors.items()

    def create_middlewares(self, context: MiddlewareContext) -> list[BoundMiddleware]:
        return create_middlewares(self.middlewares, context)

    def __repr__(self) -> str:
        return f"Manifest(host={self.host!r}, resources={sorted(self.resources)!r})"


__all__ = ["Manifest"]
