# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Provisioning error classes.

These errors signal incomplete or mis-sequenced provisioning. None of them
is transient; a run that raises one must abort at the current stage.
"""

from __future__ import annotations

from collections.abc import Iterable

from meshboot.enums import EnumBootstrapErrorCode
from meshboot.errors.infra_errors import MeshBootstrapError
from meshboot.errors.model_infra_error_context import ModelInfraErrorContext


class OrderingViolationError(MeshBootstrapError):
    """Raised when an operation runs before its prerequisite exists.

    Examples: an intermediate CA whose parent mount holds no CA, a leaf
    issued from an unprovisioned issuer, or an out-of-order stage
    transition. Programming or sequencing error, must never be retried.
    """

    def __init__(
        self,
        message: str,
        context: ModelInfraErrorContext | None = None,
        **extra_context: object,
    ) -> None:
        super().__init__(
            message=message,
            error_code=EnumBootstrapErrorCode.ORDERING_VIOLATION,
            context=context,
            **extra_context,
        )


class AlreadyExistsError(MeshBootstrapError):
    """Raised when a CA mount is already initialized.

    Idempotent callers treat this as success and re-read the existing node.
    """

    def __init__(
        self,
        message: str,
        context: ModelInfraErrorContext | None = None,
        mount_id: str | None = None,
        **extra_context: object,
    ) -> None:
        if mount_id is not None:
            extra_context["mount_id"] = mount_id
        super().__init__(
            message=message,
            error_code=EnumBootstrapErrorCode.ALREADY_EXISTS,
            context=context,
            **extra_context,
        )
        self.mount_id = mount_id


class UnknownPolicyError(MeshBootstrapError):
    """Raised when a role binding references policies that are not defined."""

    def __init__(
        self,
        message: str,
        policy_names: Iterable[str] = (),
        context: ModelInfraErrorContext | None = None,
        **extra_context: object,
    ) -> None:
        self.policy_names: tuple[str, ...] = tuple(policy_names)
        extra_context["policy_names"] = list(self.policy_names)
        super().__init__(
            message=message,
            error_code=EnumBootstrapErrorCode.UNKNOWN_POLICY,
            context=context,
            **extra_context,
        )


class UnknownRoleError(MeshBootstrapError):
    """Raised when a leaf is requested for a role not registered on the issuer."""

    def __init__(
        self,
        message: str,
        context: ModelInfraErrorContext | None = None,
        role_name: str | None = None,
        **extra_context: object,
    ) -> None:
        if role_name is not None:
            extra_context["role_name"] = role_name
        super().__init__(
            message=message,
            error_code=EnumBootstrapErrorCode.UNKNOWN_ROLE,
            context=context,
            **extra_context,
        )


class MissingSecretError(MeshBootstrapError):
    """Raised when a requested mesh feature has no provisioned secret.

    Gates deployment of a mesh configuration that points at a secret that
    does not exist.
    """

    def __init__(
        self,
        message: str,
        features: Iterable[str] = (),
        context: ModelInfraErrorContext | None = None,
        **extra_context: object,
    ) -> None:
        self.features: tuple[str, ...] = tuple(features)
        extra_context["features"] = list(self.features)
        super().__init__(
            message=message,
            error_code=EnumBootstrapErrorCode.MISSING_SECRET,
            context=context,
            **extra_context,
        )


__all__ = [
    "AlreadyExistsError",
    "MissingSecretError",
    "OrderingViolationError",
    "UnknownPolicyError",
    "UnknownRoleError",
]
