# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""meshboot services.

Exports:
    AuthRoleBinder: Workload identity to backend role bindings
    ConnectivityValidator: Bounded-retry connectivity check
    MeshConfigMapper: Feature flags and secret references to mesh values
    PKIProvisioner: Root, intermediate and leaf certificate provisioning
    PolicyManager: Named authorization policies
    SecretRepository: Idempotent KV v2 secret storage
"""

from meshboot.services.service_auth_role_binder import AuthRoleBinder
from meshboot.services.service_connectivity_validator import (
    ConnectivityValidator,
    http_ok,
)
from meshboot.services.service_mesh_config_mapper import MeshConfigMapper
from meshboot.services.service_pki_provisioner import PKIProvisioner
from meshboot.services.service_policy_manager import PolicyManager
from meshboot.services.service_secret_repository import SecretRepository

__all__: list[str] = [
    "AuthRoleBinder",
    "ConnectivityValidator",
    "MeshConfigMapper",
    "PKIProvisioner",
    "PolicyManager",
    "SecretRepository",
    "http_ok",
]
