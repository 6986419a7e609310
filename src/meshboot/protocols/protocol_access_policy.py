# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Protocol for service-to-service access policies (mesh intentions)."""

from __future__ import annotations

from typing import Protocol, runtime_checkable
from uuid import UUID


@runtime_checkable
class ProtocolAccessPolicy(Protocol):
    """Allows or denies traffic between two mesh services."""

    async def apply(
        self,
        source: str,
        destination: str,
        allow: bool = True,
        correlation_id: UUID | None = None,
    ) -> None:
        ...

    async def remove(
        self, source: str, destination: str, correlation_id: UUID | None = None
    ) -> None:
        ...


__all__ = ["ProtocolAccessPolicy"]
