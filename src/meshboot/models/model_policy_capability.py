# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""A single (resource pattern, permission) grant."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from meshboot.enums import EnumPolicyPermission


class ModelPolicyCapability(BaseModel):
    """Grant of one permission on one Vault path pattern."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    resource_pattern: str = Field(min_length=1, description="Vault path glob")
    permission: EnumPolicyPermission


__all__: list[str] = ["ModelPolicyCapability"]
