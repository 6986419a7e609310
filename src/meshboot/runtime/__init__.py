# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""meshboot runtime: configuration loading and resource scoping."""

from meshboot.runtime.config_loader import (
    load_bootstrap_context,
    load_config_document,
    load_consul_config,
    load_vault_config,
)
from meshboot.runtime.model_resource_handle import ModelResourceHandle
from meshboot.runtime.resource_scope import ResourceScope

__all__: list[str] = [
    "ModelResourceHandle",
    "ResourceScope",
    "load_bootstrap_context",
    "load_config_document",
    "load_consul_config",
    "load_vault_config",
]
