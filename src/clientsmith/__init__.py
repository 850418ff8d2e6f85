# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
clientsmith package entrypoint.

Builds HTTP clients from a declarative manifest of resources. Every call turns
into a Request, passes through the manifest's middlewares and is executed by a
pluggable gateway; the outcome is a transport-agnostic Response (or a
ResponseError carrying one).
"""

from .client import Client, ClientBuilder, Resource
from .config import Configs, GatewayConfigs, HttpxSettings, load_configs
from .errors import (
    ClientsmithError,
    ErrorCategory,
    GatewayNotConfiguredError,
    ManifestError,
    MissingParameterError,
    ResponseError,
)
from .gateway import Gateway, GatewayExecutor, HttpxGateway, MockBackend, MockGateway
from .http import MethodDescriptor, Request, Response, to_query_string
from .log import setup_logging
from .manifest import Manifest
from .middleware import Middleware, MiddlewareContext
from .middlewares import EncodeJson, LogRequests
from .runtime import configs, forge
from .version import __version__

__all__ = [
    "Client",
    "ClientBuilder",
    "ClientsmithError",
    "Configs",
    "EncodeJson",
    "ErrorCategory",
    "Gateway",
    "GatewayConfigs",
    "GatewayExecutor",
    "GatewayNotConfiguredError",
    "HttpxGateway",
    "HttpxSettings",
    "LogRequests",
    "Manifest",
    "ManifestError",
    "MethodDescriptor",
    "Middleware",
    "MiddlewareContext",
    "MissingParameterError",
    "MockBackend",
    "MockGateway",
    "Request",
    "Resource",
    "Response",
    "ResponseError",
    "__version__",
    "configs",
    "forge",
    "load_configs",
    "setup_logging",
    "to_query_string",
]
