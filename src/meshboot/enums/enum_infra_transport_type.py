# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Infrastructure Transport Type Enumeration.

Defines the transport types meshboot talks to. Used for error context
and log correlation.
"""

from enum import Enum


class EnumInfraTransportType(str, Enum):
    """Transport types for bootstrap and validation components.

    Attributes:
        VAULT: HashiCorp Vault secrets backend (hvac)
        CONSUL: Consul HTTP API (intentions)
        HTTP: Plain HTTP probe traffic through the mesh
        RUNTIME: In-process orchestration (stage machine, resource scope)
    """

    VAULT = "vault"
    CONSUL = "consul"
    HTTP = "http"
    RUNTIME = "runtime"


__all__ = ["EnumInfraTransportType"]
