# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Release handle of a provisioned resource."""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from pydantic import BaseModel, ConfigDict, Field


class ModelResourceHandle(BaseModel):
    """A named coroutine function that releases one resource.

    Attributes:
        kind: Resource kind (e.g. "pki_mount", "policy", "intention")
        identifier: Mount, name or path of the resource
        release: Zero-argument coroutine function undoing the provisioning
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: str = Field(min_length=1)
    identifier: str = Field(min_length=1)
    release: Callable[[], Awaitable[None]] = Field(exclude=True, repr=False)

    def __str__(self) -> str:
        return f"{self.kind}:{self.identifier}"


__all__: list[str] = ["ModelResourceHandle"]
