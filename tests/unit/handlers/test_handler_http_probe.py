# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Unit tests for HttpProbe using httpx.MockTransport."""

from __future__ import annotations

import httpx
import pytest

from meshboot.errors import BackendUnavailableError
from meshboot.handlers import HttpProbe


class TestHttpProbe:
    @pytest.mark.asyncio
    async def test_any_status_is_returned(self) -> None:
        transport = httpx.MockTransport(
            lambda request: httpx.Response(503, text="no healthy upstream")
        )

        async with HttpProbe(transport=transport) as probe:
            response = await probe.probe("http://localhost:1234")

        assert response.status_code == 503
        assert response.body == "no healthy upstream"

    @pytest.mark.asyncio
    async def test_body_truncated(self) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text="x" * 10000))

        async with HttpProbe(transport=transport) as probe:
            response = await probe.probe("http://static-server")

        assert len(response.body) == 4096

    @pytest.mark.asyncio
    async def test_transport_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        async with HttpProbe(transport=httpx.MockTransport(handler)) as probe:
            with pytest.raises(BackendUnavailableError) as exc_info:
                await probe.probe("http://localhost:1234")

        assert exc_info.value.context["target_name"] == "http://localhost:1234"
