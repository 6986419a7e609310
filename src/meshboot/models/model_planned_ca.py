# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""CA a bootstrap plan provisions."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from meshboot.enums import EnumCARole


class ModelPlannedCA(BaseModel):
    """Root (no parent) or intermediate CA to create in a PKI mount."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    mount_id: str = Field(min_length=1)
    common_name: str = Field(min_length=1)
    ttl_seconds: int = Field(ge=1)
    parent_mount_id: str | None = None

    @property
    def role(self) -> EnumCARole:
        if self.parent_mount_id is None:
            return EnumCARole.ROOT
        return EnumCARole.INTERMEDIATE


__all__: list[str] = ["ModelPlannedCA"]
