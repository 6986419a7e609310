# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Value-free snapshot of what a bootstrap run provisioned."""

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, ConfigDict

from meshboot.enums import EnumBootstrapStage
from meshboot.models.model_secret_reference import ModelSecretReference


class ModelBootstrapDiagnostics(BaseModel):
    """Diagnostics attached to outcomes and stage errors.

    Holds only names and references. Secret values are never included.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    correlation_id: UUID
    reached_stage: EnumBootstrapStage
    secret_references: tuple[ModelSecretReference, ...] = ()
    policy_names: tuple[str, ...] = ()
    role_names: tuple[str, ...] = ()
    ca_mounts: tuple[str, ...] = ()
    pki_roles: tuple[str, ...] = ()
    error: str | None = None


__all__: list[str] = ["ModelBootstrapDiagnostics"]
