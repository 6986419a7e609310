# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Vault ACL capability names."""

from enum import Enum


class EnumPolicyPermission(str, Enum):
    """Capabilities grantable on a Vault path pattern."""

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    PATCH = "patch"
    DELETE = "delete"
    LIST = "list"
    SUDO = "sudo"
    DENY = "deny"


__all__ = ["EnumPolicyPermission"]
