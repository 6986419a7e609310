# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""meshboot Enumerations Module.

Exports:
    EnumBootstrapErrorCode: Error classification carried by every meshboot error
    EnumBootstrapStage: Ordered stages of a bootstrap run
    EnumCARole: Root or intermediate position of a CA node
    EnumConnectivityOutcome: Success, timeout or cancellation of a connectivity check
    EnumInfraTransportType: Transport type enumeration for error context
    EnumMeshFeature: Mesh features that consume backend secrets
    EnumPolicyPermission: Vault ACL capabilities
"""

from meshboot.enums.enum_bootstrap_error_code import EnumBootstrapErrorCode
from meshboot.enums.enum_bootstrap_stage import EnumBootstrapStage
from meshboot.enums.enum_ca_role import EnumCARole
from meshboot.enums.enum_connectivity_outcome import EnumConnectivityOutcome
from meshboot.enums.enum_infra_transport_type import EnumInfraTransportType
from meshboot.enums.enum_mesh_feature import EnumMeshFeature
from meshboot.enums.enum_policy_permission import EnumPolicyPermission

__all__: list[str] = [
    "EnumBootstrapErrorCode",
    "EnumBootstrapStage",
    "EnumCARole",
    "EnumConnectivityOutcome",
    "EnumInfraTransportType",
    "EnumMeshFeature",
    "EnumPolicyPermission",
]
