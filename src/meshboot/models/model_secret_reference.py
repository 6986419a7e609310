# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Reference to a secret location without its value."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ModelSecretReference(BaseModel):
    """Location of a secret field in the backend.

    Components other than SecretRepository only ever hold references, so a
    retried run always re-reads the authoritative value.

    Attributes:
        path: Backend API path (e.g. ``consul/data/secret/gossip``)
        field: Field name inside the secret (e.g. ``gossip``)
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    path: str = Field(min_length=1, description="Backend API path of the secret")
    field: str = Field(min_length=1, description="Field name inside the secret")

    def __str__(self) -> str:
        return f"{self.path}#{self.field}"


__all__: list[str] = ["ModelSecretReference"]
