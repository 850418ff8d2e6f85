# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .http.models import Request, Response


class ClientsmithError(Exception):
    """Base class for every error raised by clientsmith."""


class ManifestError(ClientsmithError):
    """The manifest (or one of its method configs) cannot be built."""


class GatewayNotConfiguredError(ClientsmithError):
    """No gateway class is available to execute requests."""


class MissingParameterError(ClientsmithError):
    """A `{placeholder}` in a path template has no matching parameter."""

    def __init__(self, parameter: str, path: str):
        self.parameter = parameter
        self.path = path
        super().__init__(f'required parameter missing ({parameter}), "{path}" cannot be resolved')


class ResponseError(ClientsmithError):
    """
    A call that did not succeed.

    Carries the (possibly synthetic) Response and mirrors its accessors so that
    middleware response hooks can treat successes and failures alike.
    """

    def __init__(self, response: Response):
        self.response = response
        super().__init__(f"request failed with status {response.status()}: {response.raw_data()!r}")

    def request(self) -> Request:
        return self.response.request()

    def status(self) -> int:
        return self.response.status()

    def success(self) -> bool:
        return self.response.success()

    def headers(self) -> dict[str, str]:
        return self.response.headers()

    def header(self, name: str) -> str | None:
        return self.response.header(name)

    def raw_data(self) -> Any:
        return self.response.raw_data()

    def data(self) -> Any:
        return self.response.data()

    @property
    def time_elapsed(self) -> float | None:
        return self.response.time_elapsed


class ErrorCategory(str, Enum):
    TIMEOUT = "TIMEOUT"
    SSL_ERROR = "SSL_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    DNS_ERROR = "DNS_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


def categorize_exception(exc: BaseException) -> ErrorCategory:
    """
    Map Python/httpx exceptions to ErrorCategory.
    """
    import socket
    import ssl as ssl_module

    import httpx

    if isinstance(exc, (httpx.TimeoutException, TimeoutError)):
        return ErrorCategory.TIMEOUT

    if isinstance(exc, (ssl_module.SSLError, ssl_module.CertificateError)):
        return ErrorCategory.SSL_ERROR

    if isinstance(exc, (socket.gaierror, socket.herror)):
        return ErrorCategory.DNS_ERROR

    if isinstance(
        exc, (httpx.ConnectError, httpx.RemoteProtocolError, httpx.NetworkError, httpx.ProxyError)
    ):
        return ErrorCategory.CONNECTION_ERROR

    if isinstance(exc, (ConnectionError, ConnectionRefusedError, ConnectionResetError)):
        return ErrorCategory.CONNECTION_ERROR

    return ErrorCategory.UNKNOWN_ERROR


__all__ = [
    "ClientsmithError",
    "ErrorCategory",
    "GatewayNotConfiguredError",
    "ManifestError",
    "MissingParameterError",
    "ResponseError",
    "categorize_exception",
]
