# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Secret record model: a (path, field) key and its value."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, SecretBytes

from meshboot.models.model_secret_reference import ModelSecretReference


class ModelSecretRecord(BaseModel):
    """A secret value stored at (path, field).

    The value is wrapped in SecretBytes so it never appears in repr() or
    log output.

    Example:
        >>> record = ModelSecretRecord(
        ...     path="consul/data/secret/gossip",
        ...     field="gossip",
        ...     value=SecretBytes(b"..."),
        ... )
        >>> record.reference
        ModelSecretReference(path='consul/data/secret/gossip', field='gossip')
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    path: str = Field(min_length=1)
    field: str = Field(min_length=1)
    value: SecretBytes

    @property
    def reference(self) -> ModelSecretReference:
        """Return the value-free location of this record."""
        return ModelSecretReference(path=self.path, field=self.field)


__all__: list[str] = ["ModelSecretRecord"]
