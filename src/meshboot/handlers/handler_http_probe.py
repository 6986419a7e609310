# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""HTTP connectivity probe using httpx.

One probe is one GET. Any answered request is returned, whatever its status;
deciding whether the answer counts as success is the caller's predicate.
"""

from __future__ import annotations

import logging

import httpx

from meshboot.enums import EnumInfraTransportType
from meshboot.errors import BackendUnavailableError, ModelInfraErrorContext
from meshboot.models.model_probe_response import ModelProbeResponse

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT_SECONDS: float = 5.0
_MAX_BODY_CHARS: int = 4096


class HttpProbe:
    """ProtocolConnectivityProbe implementation issuing plain HTTP GETs."""

    def __init__(
        self,
        timeout_seconds: float = _DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout_seconds = timeout_seconds
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_seconds),
            transport=transport,
        )

    async def __aenter__(self) -> HttpProbe:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def probe(self, target: str) -> ModelProbeResponse:
        """GET target once.

        Raises:
            BackendUnavailableError: If the request could not be completed.
        """
        try:
            response = await self._client.get(target)
        except httpx.HTTPError as e:
            ctx = ModelInfraErrorContext(
                transport_type=EnumInfraTransportType.HTTP,
                operation="probe",
                target_name=target,
            )
            logger.debug(
                "Probe transport failure",
                extra={"target": target, "error_type": type(e).__name__},
            )
            raise BackendUnavailableError(
                f"Probe of {target} failed: {type(e).__name__}", context=ctx
            ) from e
        return ModelProbeResponse(
            status_code=response.status_code,
            body=response.text[:_MAX_BODY_CHARS],
        )


__all__: list[str] = ["HttpProbe"]
