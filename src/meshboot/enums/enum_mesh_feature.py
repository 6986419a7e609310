# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Mesh features that consume secrets from the backend.

Declaration order is the canonical order of mapped configuration
references.
"""

from enum import Enum


class EnumMeshFeature(str, Enum):
    """Feature keys of the mesh configuration surface.

    Attributes:
        GOSSIP_ENCRYPTION: Symmetric gossip key for cluster membership traffic
        CONNECT_CA: Service mesh identity CA (root + intermediate PKI mounts)
        SERVER_CERT: Server TLS certificate issued from the TLS PKI role
        TLS_CA: CA certificate used by agents to verify servers
        SNAPSHOT_AGENT: Snapshot agent configuration document
        ENTERPRISE_LICENSE: Enterprise license (only when enterprise is enabled)
    """

    GOSSIP_ENCRYPTION = "gossipEncryption"
    CONNECT_CA = "connectCA"
    SERVER_CERT = "serverCert"
    TLS_CA = "tlsCA"
    SNAPSHOT_AGENT = "snapshotAgent"
    ENTERPRISE_LICENSE = "enterpriseLicense"


__all__ = ["EnumMeshFeature"]
