# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import asyncio
import logging
import time

import pytest

from clientsmith.client import ClientBuilder
from clientsmith.config import Configs, GatewayConfigs
from clientsmith.errors import GatewayNotConfiguredError, ManifestError, MissingParameterError, ResponseError
from clientsmith.gateway.mock import MockBackend
from clientsmith.manifest import Manifest
from clientsmith.middlewares import EncodeJson, LogRequests
from clientsmith.runtime import forge

HOST = "http://api.example.org"


def _manifest(**extra):
    manifest = {
        "host": HOST,
        "resources": {
            "User": {
                "byId": {"path": "/users/{id}"},
                "all": {"path": "/users", "params": {"limit": 10}},
                "remove": {"path": "/users/{id}", "method": "delete"},
                "create": {"path": "/users", "method": "post"},
            },
            "Blog": {"post": {"path": "/blogs/{slug}", "headers": {"Accept": "application/json"}}},
        },
    }
    manifest.update(extra)
    return manifest


def _client(backend, **extra):
    return forge(_manifest(**extra), Configs(gateway=backend.gateway))


def test_manifest_requires_a_manifest_and_paths():
    with pytest.raises(ManifestError):
        Manifest(None)

    with pytest.raises(ManifestError) as excinfo:
        Manifest({"host": HOST, "resources": {"User": {"byId": {"method": "get"}}}})
    assert 'resource "User"' in str(excinfo.value)
    assert 'method "byId"' in str(excinfo.value)


def test_manifest_ignores_unknown_method_config_keys(caplog):
    caplog.set_level(logging.DEBUG, logger="clientsmith.http.models")
    manifest = Manifest(
        {"host": HOST, "resources": {"User": {"byId": {"path": "/u", "description": "fetch one", "method": "post"}}}}
    )

    descriptor = manifest.descriptor("User", "byId")
    assert descriptor.path == "/u"
    assert descriptor.method == "post"
    assert "description" in caplog.text


def test_manifest_merges_gateway_configs_without_touching_globals():
    global_configs = GatewayConfigs(emulate_http=False)
    manifest = Manifest(_manifest(gatewayConfigs={"emulateHTTP": True}), global_configs)

    assert manifest.gateway_configs.emulate_http is True
    assert global_configs.emulate_http is False
    assert manifest.descriptor("User", "byId").host == HOST
    assert [name for name, _ in manifest.each_resource()] == ["User", "Blog"]


def test_builder_requires_a_gateway():
    with pytest.raises(GatewayNotConfiguredError):
        ClientBuilder(_manifest(), lambda: None)
    with pytest.raises(GatewayNotConfiguredError):
        ClientBuilder(_manifest(), None)
    with pytest.raises(ManifestError):
        ClientBuilder(None, lambda: MockBackend().gateway)


def test_client_exposes_resources_methods_and_manifest():
    backend = MockBackend()
    client = _client(backend)

    assert isinstance(client._manifest, Manifest)
    assert list(client) == ["User", "Blog"]
    assert sorted(client.User) == ["all", "byId", "create", "remove"]
    assert client["User"]["byId"] is client.User.byId
    with pytest.raises(AttributeError):
        client.Missing
    with pytest.raises(AttributeError):
        client.User.missing


def test_call_resolves_url_and_method():
    backend = MockBackend()
    backend.add("get", f"{HOST}/users/7", body={"id": 7})
    client = _client(backend)

    response = asyncio.run(client.User.byId({"id": 7}))

    assert response.request().url() == f"{HOST}/users/7"
    assert response.request().method() == "get"
    assert response.data() == {"id": 7}


def test_call_accepts_keyword_params_and_descriptor_defaults():
    backend = MockBackend()
    backend.add("get", f"{HOST}/users?limit=10&active=true", body=[])
    backend.add("get", f"{HOST}/blogs/hello", body={"slug": "hello"})
    client = _client(backend)

    assert asyncio.run(client.User.all(active=True)).data() == []
    asyncio.run(client.Blog.post(slug="hello", headers={"X-Trace": "t"}))
    assert backend.calls[-1].headers == {"accept": "application/json", "x-trace": "t"}


def test_missing_path_parameter_raises_before_the_gateway():
    backend = MockBackend()
    client = _client(backend)

    with pytest.raises(MissingParameterError) as excinfo:
        asyncio.run(client.User.byId())
    assert excinfo.value.parameter == "id"
    assert backend.calls == []


def test_emulate_http_sends_delete_as_post():
    backend = MockBackend()
    backend.add("delete", f"{HOST}/users/1", status=204)
    client = _client(backend, gateway_configs={"emulate_http": True})

    response = asyncio.run(client.User.remove(id=1))

    assert response.status() == 204
    call = backend.calls[0]
    assert call.method == "post"
    assert call.headers["x-http-method-override"] == "delete"
    assert call.body == "_method=delete"


def test_timeout_rejects_with_client_error():
    backend = MockBackend()
    backend.hang("get", f"{HOST}/users/1")
    client = _client(backend)

    started = time.perf_counter()
    with pytest.raises(ResponseError) as excinfo:
        asyncio.run(client.User.byId(id=1, timeout=50))
    elapsed_ms = (time.perf_counter() - started) * 1000

    assert 400 <= excinfo.value.status() < 500
    assert "Timeout" in excinfo.value.raw_data()
    assert 50 <= elapsed_ms < 500


def test_gateway_is_resolved_at_call_time():
    first, second = MockBackend(), MockBackend()
    first.add("get", f"{HOST}/users/1", body="first")
    second.add("get", f"{HOST}/users/1", body="second")
    settings = Configs(gateway=first.gateway)
    client = forge(_manifest(), settings)

    settings.gateway = second.gateway

    assert asyncio.run(client.User.byId(id=1)).raw_data() == "second"
    assert first.calls == []


def test_middlewares_wrap_calls_and_are_created_per_call():
    backend = MockBackend()
    backend.add("get", f"{HOST}/users/1", body={"id": 1})
    contexts = []

    class Token:
        def __init__(self, context):
            contexts.append(context)
            self.calls = 0

        def request(self, request):
            self.calls += 1
            return request.enhance(headers={"authorization": "Token abc", "x-calls": str(self.calls)})

    client = _client(backend, middlewares=[Token])
    asyncio.run(client.User.byId(id=1))
    asyncio.run(client.User.byId(id=1))

    assert [(c.resource_name, c.resource_method) for c in contexts] == [("User", "byId"), ("User", "byId")]
    assert [call.headers["x-calls"] for call in backend.calls] == ["1", "1"]
    assert backend.calls[0].headers["authorization"] == "Token abc"


def test_response_middleware_can_recover_failures():
    backend = MockBackend()
    backend.add("get", f"{HOST}/users/1", status=401, body="expired")
    backend.add("get", f"{HOST}/users/2", body="fresh")
    attempts = []

    class RetryWithOtherUser:
        def __init__(self, context):
            self.context = context

        async def response(self, next):
            try:
                return await next()
            except ResponseError as exc:
                attempts.append(exc.status())
                retry = exc.request().enhance(params={"id": 2})
                return await backend.gateway(retry, GatewayConfigs()).call()

    client = _client(backend, middlewares=[RetryWithOtherUser])
    response = asyncio.run(client.User.byId(id=1))

    assert attempts == [401]
    assert response.raw_data() == "fresh"


def test_error_responses_flow_through_every_response_hook():
    backend = MockBackend()
    backend.add("get", f"{HOST}/users/1", status=500, body="boom")
    seen = []

    def observer(name):
        class Observer:
            def __init__(self, context):
                pass

            async def response(self, next):
                try:
                    return await next()
                except ResponseError as exc:
                    seen.append((name, exc.status()))
                    raise

        return Observer

    client = _client(backend, middlewares=[observer("outer"), observer("inner")])
    with pytest.raises(ResponseError):
        asyncio.run(client.User.byId(id=1))

    assert seen == [("inner", 500), ("outer", 500)]


def test_builtin_middlewares_encode_json_and_log(caplog):
    backend = MockBackend()
    backend.add("post", f"{HOST}/users", status=201, body={"id": 9})
    client = _client(backend, middlewares=[LogRequests, EncodeJson])

    with caplog.at_level("INFO", logger="clientsmith.middlewares"):
        response = asyncio.run(client.User.create(body={"name": "bob"}))

    assert response.status() == 201
    call = backend.calls[0]
    assert call.body == '{"name": "bob"}'
    assert call.headers["content-type"] == "application/json;charset=utf-8"
    assert "User.create: POST http://api.example.org/users" in caplog.text
    assert "User.create: 201" in caplog.text
