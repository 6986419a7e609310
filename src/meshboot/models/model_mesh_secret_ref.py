# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Secret name/key pair as consumed by the mesh configuration."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ModelMeshSecretRef(BaseModel):
    """Where the mesh reads one secret from.

    For Vault-backed values the name is the Vault path and the key the
    field; for Kubernetes secrets it is the secret name and data key.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    secret_name: str = Field(min_length=1)
    secret_key: str | None = None


__all__: list[str] = ["ModelMeshSecretRef"]
