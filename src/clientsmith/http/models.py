# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Request/response data models shared by the builder, middlewares and gateways."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from types import MappingProxyType
from typing import Any

from ..errors import ManifestError, MissingParameterError
from .headers import merge_headers, normalize_headers
from .query import stringify, to_query_string

logger = logging.getLogger(__name__)

_PLACEHOLDER_RE = re.compile(r"{([^}]+)}")
_JSON_CONTENT_TYPE_RE = re.compile(r"application/(?:[\w.-]+\+)?json", re.IGNORECASE)

# IE reported 204 responses as 1223.
_IE_NO_CONTENT_STATUS = 1223

_DESCRIPTOR_ALIASES = {
    "bodyAttr": "body_attr",
    "headersAttr": "headers_attr",
    "authAttr": "auth_attr",
    "timeoutAttr": "timeout_attr",
}


def _frozen(mapping: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class MethodDescriptor:
    """Immutable template for one resource method."""

    host: str
    path: str
    method: str = "get"
    headers: Mapping[str, Any] = field(default_factory=dict)
    params: Mapping[str, Any] = field(default_factory=dict)
    body_attr: str = "body"
    headers_attr: str = "headers"
    auth_attr: str = "auth"
    timeout_attr: str = "timeout"

    def __post_init__(self) -> None:
        if not self.path:
            raise ManifestError("method descriptor requires a non-empty path")
        object.__setattr__(self, "host", (self.host or "").rstrip("/"))
        object.__setattr__(self, "method", (self.method or "get").lower())
        object.__setattr__(self, "headers", _frozen(self.headers))
        object.__setattr__(self, "params", _frozen(self.params))

        collisions = sorted(self.reserved_attrs() & set(self.placeholders()))
        if collisions:
            raise ManifestError(
                f'path "{self.path}" uses reserved parameter name(s) {", ".join(collisions)}'
            )

    @classmethod
    def from_config(cls, host: str, config: Mapping[str, Any]) -> MethodDescriptor:
        """
        Build a descriptor from a raw manifest entry.

        camelCase attr keys are accepted. Keys the descriptor does not know
        (annotations, docs) are dropped.
        """
        known = {f.name for f in fields(cls)}
        values: dict[str, Any] = {}
        for key, value in config.items():
            name = _DESCRIPTOR_ALIASES.get(key, key)
            if name not in known:
                logger.debug("ignoring unknown method config key %r", key)
                continue
            values[name] = value
        values.setdefault("host", host)
        return cls(**values)

    def reserved_attrs(self) -> frozenset[str]:
        return frozenset((self.body_attr, self.headers_attr, self.auth_attr, self.timeout_attr))

    def placeholders(self) -> list[str]:
        return _PLACEHOLDER_RE.findall(self.path)


@dataclass(frozen=True)
class Request:
    """
    A method descriptor bound to the arguments of one call.

    Everything the gateway needs (URL, headers, body, auth, timeout) is derived
    on demand; `enhance` is the only way to produce a changed request.
    """

    method_descriptor: MethodDescriptor
    request_params: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "request_params", _frozen(self.request_params))

    def params(self) -> dict[str, Any]:
        """Routing and query parameters: descriptor defaults plus caller args, minus reserved keys."""
        reserved = self.method_descriptor.reserved_attrs()
        merged = {**self.method_descriptor.params, **self.request_params}
        return {key: value for key, value in merged.items() if key not in reserved}

    def method(self) -> str:
        return self.method_descriptor.method.lower()

    def host(self) -> str:
        return (self.method_descriptor.host or "").rstrip("/")

    def path(self) -> str:
        path = self.method_descriptor.path
        if not path.startswith("/"):
            path = f"/{path}"

        params = self.params()
        for name in list(params):
            placeholder = f"{{{name}}}"
            value = params[name]
            if value is None or placeholder not in path:
                continue
            # Values go in verbatim so a parameter may carry a sub-path.
            path = path.replace(placeholder, stringify(value))
            del params[name]

        missing = _PLACEHOLDER_RE.search(path)
        if missing:
            raise MissingParameterError(missing.group(1), path)

        query = to_query_string(params)
        if query:
            path = f"{path}?{query}"
        return path

    def url(self) -> str:
        return f"{self.host()}{self.path()}"

    def headers(self) -> dict[str, str]:
        caller_headers = self.request_params.get(self.method_descriptor.headers_attr)
        return merge_headers(self.method_descriptor.headers, caller_headers)

    def body(self) -> Any:
        return self.request_params.get(self.method_descriptor.body_attr)

    def auth(self) -> Any:
        return self.request_params.get(self.method_descriptor.auth_attr)

    def timeout(self) -> Any:
        return self.request_params.get(self.method_descriptor.timeout_attr)

    def enhance(
        self,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, Any] | None = None,
        body: Any = None,
        auth: Any = None,
        timeout: Any = None,
    ) -> Request:
        """Return a new Request with the overrides layered on; falsy overrides are ignored."""
        descriptor = self.method_descriptor
        request_params = {**self.request_params, **(params or {})}
        request_params[descriptor.headers_attr] = {
            **(self.request_params.get(descriptor.headers_attr) or {}),
            **(headers or {}),
        }
        if body:
            request_params[descriptor.body_attr] = body
        if auth:
            request_params[descriptor.auth_attr] = auth
        if timeout:
            request_params[descriptor.timeout_attr] = timeout
        return Request(descriptor, request_params)


@dataclass(eq=False)
class Response:
    """Transport-agnostic outcome of a Request."""

    original_request: Request
    response_status: int
    response_data: Any = None
    response_headers: Mapping[str, Any] = field(default_factory=dict)
    # Milliseconds for the full round trip; assigned once by the gateway executor.
    time_elapsed: float | None = None

    def request(self) -> Request:
        return self.original_request

    def status(self) -> int:
        if self.response_status == _IE_NO_CONTENT_STATUS:
            return 204
        return self.response_status

    def success(self) -> bool:
        return 200 <= self.status() < 400

    def headers(self) -> dict[str, str]:
        return normalize_headers(self.response_headers)

    def header(self, name: str) -> str | None:
        return self.headers().get(name.lower())

    def raw_data(self) -> Any:
        return self.response_data

    def is_content_type_json(self) -> bool:
        return bool(_JSON_CONTENT_TYPE_RE.search(self.headers().get("content-type", "")))

    def data(self) -> Any:
        """Body decoded as JSON when the content-type says so, otherwise the raw body."""
        data = self.response_data
        if self.is_content_type_json():
            try:
                data = json.loads(self.response_data)
            except (TypeError, ValueError):
                pass
        return data

    def enhance(
        self,
        *,
        status: int | None = None,
        raw_data: Any = None,
        headers: Mapping[str, Any] | None = None,
    ) -> Response:
        """Return a new Response for the same Request; headers are merged, status/body replaced if given."""
        return Response(
            original_request=self.original_request,
            response_status=status or self.status(),
            response_data=raw_data or self.raw_data(),
            response_headers=merge_headers(self.headers(), headers),
            time_elapsed=self.time_elapsed,
        )


__all__ = ["MethodDescriptor", "Request", "Response"]
