# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Consul intention client using httpx.

Implements ProtocolAccessPolicy with the exact-match intention endpoint:

    PUT    /v1/connect/intentions/exact?source=<src>&destination=<dst>
    DELETE /v1/connect/intentions/exact?source=<src>&destination=<dst>

Response Mapping:
    2xx                    → success (DELETE of an absent intention is a 2xx)
    401, 403               → PermissionDeniedError
    5xx, connect, timeout  → BackendUnavailableError
    anything else          → MeshBootstrapError
"""

from __future__ import annotations

import logging
from uuid import UUID, uuid4

import httpx

from meshboot.enums import EnumInfraTransportType
from meshboot.errors import (
    BackendUnavailableError,
    MeshBootstrapError,
    ModelInfraErrorContext,
    PermissionDeniedError,
)
from meshboot.handlers.model_consul_client_config import ModelConsulClientConfig

logger = logging.getLogger(__name__)

_INTENTION_PATH = "/v1/connect/intentions/exact"


class ConsulIntentionClient:
    """Applies and removes service intentions.

    The httpx client is created lazily on first use and closed by
    ``close()`` or by leaving the async context manager.
    """

    def __init__(
        self,
        config: ModelConsulClientConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> ConsulIntentionClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            headers: dict[str, str] = {}
            if self._config.token is not None:
                headers["X-Consul-Token"] = self._config.token.get_secret_value()
            self._client = httpx.AsyncClient(
                base_url=self._config.address,
                headers=headers,
                timeout=httpx.Timeout(self._config.timeout_seconds),
                verify=self._config.verify_ssl,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def apply(
        self,
        source: str,
        destination: str,
        allow: bool = True,
        correlation_id: UUID | None = None,
    ) -> None:
        """Create or update the intention from source to destination."""
        action = "allow" if allow else "deny"
        await self._send(
            "PUT",
            source,
            destination,
            correlation_id or uuid4(),
            json={"Action": action},
        )
        logger.info(
            "Applied intention",
            extra={
                "source": source,
                "destination": destination,
                "action": action,
                "correlation_id": str(correlation_id) if correlation_id else None,
            },
        )

    async def remove(
        self, source: str, destination: str, correlation_id: UUID | None = None
    ) -> None:
        await self._send("DELETE", source, destination, correlation_id or uuid4())
        logger.info(
            "Removed intention",
            extra={
                "source": source,
                "destination": destination,
                "correlation_id": str(correlation_id) if correlation_id else None,
            },
        )

    async def _send(
        self,
        method: str,
        source: str,
        destination: str,
        correlation_id: UUID,
        json: dict[str, str] | None = None,
    ) -> httpx.Response:
        ctx = ModelInfraErrorContext(
            transport_type=EnumInfraTransportType.CONSUL,
            operation=f"intention.{method.lower()}",
            target_name=f"{source}->{destination}",
            correlation_id=correlation_id,
        )
        try:
            response = await self._http().request(
                method,
                _INTENTION_PATH,
                params={"source": source, "destination": destination},
                json=json,
            )
        except httpx.TimeoutException as e:
            raise BackendUnavailableError(
                f"Consul request timed out after {self._config.timeout_seconds}s",
                context=ctx,
            ) from e
        except httpx.HTTPError as e:
            raise BackendUnavailableError(
                f"Failed to reach Consul: {type(e).__name__}", context=ctx
            ) from e

        if response.is_success:
            return response
        if response.status_code in (401, 403):
            raise PermissionDeniedError(
                f"Consul denied intention change (HTTP {response.status_code})",
                context=ctx,
            )
        if response.status_code >= 500:
            raise BackendUnavailableError(
                f"Consul server error (HTTP {response.status_code})", context=ctx
            )
        raise MeshBootstrapError(
            f"Consul rejected intention change (HTTP {response.status_code})",
            context=ctx,
            status_code=response.status_code,
        )


__all__: list[str] = ["ConsulIntentionClient"]
