# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Service mesh identity CA settings."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ModelMeshConnectCA(BaseModel):
    """Vault address and PKI mounts the mesh uses as its identity CA."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    address: str = Field(min_length=1)
    root_pki_path: str = Field(min_length=1)
    intermediate_pki_path: str = Field(min_length=1)


__all__: list[str] = ["ModelMeshConnectCA"]
