# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Error codes carried by every meshboot error."""

from enum import Enum


class EnumBootstrapErrorCode(str, Enum):
    """Machine-readable classification of bootstrap failures."""

    OPERATION_FAILED = "operation_failed"
    INVALID_CONFIGURATION = "invalid_configuration"
    BACKEND_UNAVAILABLE = "backend_unavailable"
    PERMISSION_DENIED = "permission_denied"
    ORDERING_VIOLATION = "ordering_violation"
    ALREADY_EXISTS = "already_exists"
    NOT_FOUND = "not_found"
    UNKNOWN_POLICY = "unknown_policy"
    UNKNOWN_ROLE = "unknown_role"
    MISSING_SECRET = "missing_secret"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
    STAGE_FAILED = "stage_failed"


__all__ = ["EnumBootstrapErrorCode"]
