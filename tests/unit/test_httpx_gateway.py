# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import asyncio
import base64

import httpx
import pytest

from clientsmith.config import GatewayConfigs, HttpxSettings
from clientsmith.errors import ResponseError
from clientsmith.gateway.httpx_gateway import HttpxGateway
from clientsmith.http.models import MethodDescriptor, Request

HOST = "http://api.example.org"


def _configs(handler, **overrides):
    settings = HttpxSettings(transport=httpx.MockTransport(handler), user_agent="clientsmith-tests")
    return GatewayConfigs(httpx=settings, **overrides)


def _request(method="get", path="/users/{id}", **params):
    return Request(MethodDescriptor(host=HOST, path=path, method=method), params)


def test_get_sends_url_headers_and_auth():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"id": 7}, request=request)

    request = _request(id=7, page=2, headers={"X-Trace": "t"}, auth={"username": "bob", "password": "pw"})
    response = asyncio.run(HttpxGateway(request, _configs(handler)).call())

    assert response.status() == 200
    assert response.data() == {"id": 7}
    assert response.request() is request
    assert response.time_elapsed is not None

    sent = seen[0]
    assert sent.method == "GET"
    assert str(sent.url) == f"{HOST}/users/7?page=2"
    assert sent.headers["x-trace"] == "t"
    assert sent.headers["user-agent"] == "clientsmith-tests"
    assert sent.headers["authorization"] == "Basic " + base64.b64encode(b"bob:pw").decode()
    assert sent.content == b""


def test_post_form_encodes_mapping_bodies():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201, text="created", request=request)

    request = _request("post", path="/users", body={"name": "bob smith"})
    response = asyncio.run(HttpxGateway(request, _configs(handler)).call())

    assert response.status() == 201
    assert response.raw_data() == "created"
    assert seen[0].method == "POST"
    assert seen[0].content == b"name=bob+smith"
    assert seen[0].headers["content-type"] == "application/x-www-form-urlencoded;charset=utf-8"


def test_emulate_http_sends_delete_as_post_with_override():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(204, request=request)

    request = _request("delete", id=3)
    response = asyncio.run(HttpxGateway(request, _configs(handler, emulate_http=True)).call())

    assert response.status() == 204
    assert seen[0].method == "POST"
    assert seen[0].headers["x-http-method-override"] == "delete"
    assert seen[0].content == b"_method=delete"


def test_error_status_raises_response_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(422, json={"error": "invalid"}, request=request)

    with pytest.raises(ResponseError) as excinfo:
        asyncio.run(HttpxGateway(_request(id=1), _configs(handler)).call())

    assert excinfo.value.status() == 422
    assert excinfo.value.data() == {"error": "invalid"}
    assert excinfo.value.success() is False


def test_network_errors_become_client_errors():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ResponseError) as excinfo:
        asyncio.run(HttpxGateway(_request(id=1), _configs(handler)).call())

    assert excinfo.value.status() == 400
    assert excinfo.value.raw_data() == "connection refused"


def test_native_timeouts_report_the_configured_timeout():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(ResponseError) as excinfo:
        asyncio.run(HttpxGateway(_request(id=1, timeout=50), _configs(handler)).call())

    assert excinfo.value.status() == 400
    assert excinfo.value.raw_data() == "Timeout (50ms)"


def test_configure_hook_sees_the_outgoing_request():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, request=request)

    def configure(request: httpx.Request) -> None:
        request.headers["x-configured"] = "yes"

    configs = _configs(handler)
    configs.httpx.configure = configure
    asyncio.run(HttpxGateway(_request(id=1), configs).call())

    assert seen[0].headers["x-configured"] == "yes"


def test_shared_client_is_used_and_left_open():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="shared", request=request)

    async def scenario():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            configs = GatewayConfigs(httpx=HttpxSettings(client=client))
            first = await HttpxGateway(_request(id=1), configs).call()
            second = await HttpxGateway(_request(id=2), configs).call()
            assert client.is_closed is False
            return first, second

    first, second = asyncio.run(scenario())
    assert first.raw_data() == second.raw_data() == "shared"
