# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""meshboot - Vault-backed secure bootstrap for a Consul service mesh.

This package provisions the secrets backend a Consul datacenter relies on
and turns it into validated mesh configuration:

- PKI hierarchy: server TLS CA, connect root and intermediate CAs, leaf roles
- Authorization policies and Kubernetes auth role bindings
- Gossip key, snapshot agent config and enterprise license secrets
- Mesh configuration mapping into Helm values
- Connectivity validation between mesh workloads

Key Components:
    - BootstrapOrchestrator: Linear stage machine driving a bootstrap plan
    - VaultBackendClient: hvac-backed secrets backend
    - MeshConfigMapper: Single place where feature flags become configuration
    - ConnectivityValidator: Bounded retry of a connectivity probe
"""

__all__: list[str] = []
