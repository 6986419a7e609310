# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Vault secrets backend section of the mesh configuration."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from meshboot.models.model_mesh_connect_ca import ModelMeshConnectCA
from meshboot.models.model_mesh_secret_ref import ModelMeshSecretRef


class ModelMeshVaultValues(BaseModel):
    """Auth roles, Vault CA and connect CA the mesh uses to reach Vault."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    enabled: bool = True
    consul_server_role: str = Field(min_length=1)
    consul_client_role: str = Field(min_length=1)
    consul_ca_role: str = Field(min_length=1)
    ca: ModelMeshSecretRef
    connect_ca: ModelMeshConnectCA


__all__: list[str] = ["ModelMeshVaultValues"]
