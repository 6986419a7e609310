# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Mesh feature to secret location mapping."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from meshboot.enums import EnumMeshFeature


class ModelMeshConsumptionReference(BaseModel):
    """Where a mesh feature reads its secret from."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    feature: EnumMeshFeature
    secret_path: str = Field(min_length=1)
    secret_field: str = Field(min_length=1)


__all__: list[str] = ["ModelMeshConsumptionReference"]
