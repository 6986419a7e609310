# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Unit tests for ConsulIntentionClient using httpx.MockTransport."""

from __future__ import annotations

import json

import httpx
import pytest
from pydantic import SecretStr

from meshboot.errors import (
    BackendUnavailableError,
    MeshBootstrapError,
    PermissionDeniedError,
)
from meshboot.handlers import ConsulIntentionClient, ModelConsulClientConfig

CONFIG = ModelConsulClientConfig(
    address="http://consul-server.consul:8500", token=SecretStr("acl-token")
)


def _client(handler: httpx.MockTransport) -> ConsulIntentionClient:
    return ConsulIntentionClient(CONFIG, transport=handler)


class TestConsulIntentionClient:
    """Test request shapes and response mapping."""

    @pytest.mark.asyncio
    async def test_apply_allow(self) -> None:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json=True)

        async with _client(httpx.MockTransport(handler)) as client:
            await client.apply("static-client", "static-server")

        (request,) = requests
        assert request.method == "PUT"
        assert request.url.path == "/v1/connect/intentions/exact"
        assert request.url.params["source"] == "static-client"
        assert request.url.params["destination"] == "static-server"
        assert request.headers["X-Consul-Token"] == "acl-token"
        assert json.loads(request.content) == {"Action": "allow"}

    @pytest.mark.asyncio
    async def test_apply_deny(self) -> None:
        bodies: list[dict[str, str]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json=True)

        async with _client(httpx.MockTransport(handler)) as client:
            await client.apply("static-client", "static-server", allow=False)

        assert bodies == [{"Action": "deny"}]

    @pytest.mark.asyncio
    async def test_remove(self) -> None:
        methods: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            methods.append(request.method)
            return httpx.Response(200, json=True)

        async with _client(httpx.MockTransport(handler)) as client:
            await client.remove("static-client", "static-server")

        assert methods == ["DELETE"]

    @pytest.mark.parametrize(
        ("status_code", "error_class"),
        [
            (403, PermissionDeniedError),
            (401, PermissionDeniedError),
            (500, BackendUnavailableError),
            (400, MeshBootstrapError),
        ],
    )
    @pytest.mark.asyncio
    async def test_error_status_mapping(
        self, status_code: int, error_class: type[MeshBootstrapError]
    ) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(status_code))

        async with _client(transport) as client:
            with pytest.raises(error_class):
                await client.apply("static-client", "static-server")

    @pytest.mark.asyncio
    async def test_connect_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        async with _client(httpx.MockTransport(handler)) as client:
            with pytest.raises(BackendUnavailableError, match="ConnectError"):
                await client.remove("static-client", "static-server")

    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        async with _client(httpx.MockTransport(handler)) as client:
            with pytest.raises(BackendUnavailableError, match="timed out"):
                await client.apply("static-client", "static-server")

    def test_token_not_in_repr(self) -> None:
        assert "acl-token" not in repr(CONFIG)
