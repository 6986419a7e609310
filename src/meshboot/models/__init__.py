# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""meshboot Models.

This module exports the pydantic models shared by services, orchestrators
and handlers.
"""

from meshboot.models.model_auth_role_binding import ModelAuthRoleBinding
from meshboot.models.model_bootstrap_context import ModelBootstrapContext
from meshboot.models.model_bootstrap_diagnostics import ModelBootstrapDiagnostics
from meshboot.models.model_bootstrap_outcome import ModelBootstrapOutcome
from meshboot.models.model_bootstrap_plan import ModelBootstrapPlan
from meshboot.models.model_ca_hierarchy_node import ModelCAHierarchyNode
from meshboot.models.model_connectivity_result import ModelConnectivityResult
from meshboot.models.model_identity_selector import ModelIdentitySelector
from meshboot.models.model_leaf_certificate import ModelLeafCertificate
from meshboot.models.model_mesh_connect_ca import ModelMeshConnectCA
from meshboot.models.model_mesh_consumption_reference import (
    ModelMeshConsumptionReference,
)
from meshboot.models.model_mesh_secret_ref import ModelMeshSecretRef
from meshboot.models.model_mesh_values import ModelMeshValues
from meshboot.models.model_mesh_vault_values import ModelMeshVaultValues
from meshboot.models.model_pki_role import ModelPKIRole
from meshboot.models.model_planned_ca import ModelPlannedCA
from meshboot.models.model_planned_secret import ModelPlannedSecret
from meshboot.models.model_policy_capability import ModelPolicyCapability
from meshboot.models.model_policy_document import ModelPolicyDocument
from meshboot.models.model_probe_response import ModelProbeResponse
from meshboot.models.model_scenario_result import ModelScenarioResult
from meshboot.models.model_secret_record import ModelSecretRecord
from meshboot.models.model_secret_reference import ModelSecretReference

__all__: list[str] = [
    "ModelAuthRoleBinding",
    "ModelBootstrapContext",
    "ModelBootstrapDiagnostics",
    "ModelBootstrapOutcome",
    "ModelBootstrapPlan",
    "ModelCAHierarchyNode",
    "ModelConnectivityResult",
    "ModelIdentitySelector",
    "ModelLeafCertificate",
    "ModelMeshConnectCA",
    "ModelMeshConsumptionReference",
    "ModelMeshSecretRef",
    "ModelMeshValues",
    "ModelMeshVaultValues",
    "ModelPKIRole",
    "ModelPlannedCA",
    "ModelPlannedSecret",
    "ModelPolicyCapability",
    "ModelPolicyDocument",
    "ModelProbeResponse",
    "ModelScenarioResult",
    "ModelSecretRecord",
    "ModelSecretReference",
]
