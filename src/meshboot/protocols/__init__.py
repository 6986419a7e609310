# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""meshboot protocols.

Exports:
    ProtocolAccessPolicy: Mesh intention management
    ProtocolConnectivityProbe: Single connectivity probe attempt
    ProtocolMeshDeployer: External mesh deployment step
    ProtocolSecretsBackend: Secrets backend operations (Vault API shaped)
"""

from meshboot.protocols.protocol_access_policy import ProtocolAccessPolicy
from meshboot.protocols.protocol_connectivity_probe import ProtocolConnectivityProbe
from meshboot.protocols.protocol_mesh_deployer import ProtocolMeshDeployer
from meshboot.protocols.protocol_secrets_backend import ProtocolSecretsBackend

__all__: list[str] = [
    "ProtocolAccessPolicy",
    "ProtocolConnectivityProbe",
    "ProtocolMeshDeployer",
    "ProtocolSecretsBackend",
]
