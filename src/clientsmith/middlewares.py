# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Built-in middlewares. Register the classes themselves in a manifest's `middlewares`."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping

from .errors import ResponseError
from .http.models import Request, Response
from .middleware import MiddlewareContext, Next

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json;charset=utf-8"


class EncodeJson:
    """Serialize mapping/list bodies as JSON."""

    def __init__(self, context: MiddlewareContext):
        self.context = context

    def request(self, request: Request) -> Request:
        body = request.body()
        if not isinstance(body, (Mapping, list)):
            return request
        headers = {} if "content-type" in request.headers() else {"content-type": JSON_CONTENT_TYPE}
        return request.enhance(headers=headers, body=json.dumps(body))


class LogRequests:
    """Log each call on the way out and its outcome on the way back."""

    def __init__(self, context: MiddlewareContext):
        self.context = context
        self.label = f"{context.resource_name}.{context.resource_method}"

    def request(self, request: Request) -> Request:
        logger.info("%s: %s %s", self.label, request.method().upper(), request.url())
        return request

    async def response(self, next: Next) -> Response:
        try:
            response = await next()
        except ResponseError as exc:
            logger.warning("%s: failed with %s (%.1fms)", self.label, exc.status(), exc.time_elapsed or 0.0)
            raise
        logger.info("%s: %s (%.1fms)", self.label, response.status(), response.time_elapsed or 0.0)
        return response


__all__ = ["EncodeJson", "JSON_CONTENT_TYPE", "LogRequests"]
