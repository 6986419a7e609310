# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Protocol for a single connectivity probe attempt."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from meshboot.models.model_probe_response import ModelProbeResponse


@runtime_checkable
class ProtocolConnectivityProbe(Protocol):
    """Performs one request against a target.

    Transport failures are raised as exceptions; the validator counts them
    as failed attempts.
    """

    async def probe(self, target: str) -> ModelProbeResponse:
        ...


__all__ = ["ProtocolConnectivityProbe"]
