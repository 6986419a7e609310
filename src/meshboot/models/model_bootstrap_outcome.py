# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Result of a completed bootstrap run."""

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, ConfigDict

from meshboot.enums import EnumBootstrapStage, EnumMeshFeature
from meshboot.models.model_bootstrap_diagnostics import ModelBootstrapDiagnostics
from meshboot.models.model_ca_hierarchy_node import ModelCAHierarchyNode
from meshboot.models.model_mesh_consumption_reference import (
    ModelMeshConsumptionReference,
)
from meshboot.models.model_mesh_values import ModelMeshValues


class ModelBootstrapOutcome(BaseModel):
    """Final stage, CA nodes, consumption references and mesh values."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    correlation_id: UUID
    stage: EnumBootstrapStage
    nodes: tuple[ModelCAHierarchyNode, ...]
    references: tuple[ModelMeshConsumptionReference, ...]
    values: ModelMeshValues
    diagnostics: ModelBootstrapDiagnostics

    def node(self, mount_id: str) -> ModelCAHierarchyNode:
        """Return the CA node provisioned at mount_id.

        Raises:
            KeyError: If no node lives at mount_id.
        """
        for node in self.nodes:
            if node.mount_id == mount_id:
                return node
        raise KeyError(mount_id)

    def reference(self, feature: EnumMeshFeature) -> ModelMeshConsumptionReference:
        for reference in self.references:
            if reference.feature is feature:
                return reference
        raise KeyError(feature.value)


__all__: list[str] = ["ModelBootstrapOutcome"]
