# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Infrastructure Error Classes.

Error Hierarchy:
    MeshBootstrapError (base)
    ├── ProtocolConfigurationError
    ├── BackendUnavailableError
    ├── PermissionDeniedError
    └── ResourceNotFoundError
        ├── SecretNotFoundError
        └── PolicyNotFoundError

All errors:
    - Carry an EnumBootstrapErrorCode for classification
    - Support proper error chaining with `raise ... from e`
    - Accept ModelInfraErrorContext for bundled context parameters
    - Never carry secret values or tokens
"""

from __future__ import annotations

from uuid import UUID

from meshboot.enums import EnumBootstrapErrorCode
from meshboot.errors.model_infra_error_context import ModelInfraErrorContext


class MeshBootstrapError(Exception):
    """Base error class for every meshboot failure.

    Structured Fields (via ModelInfraErrorContext):
        transport_type: Type of transport (vault, consul, http, runtime)
        operation: Operation being performed
        correlation_id: Correlation ID of the bootstrap run
        target_name: Target resource name

    Example:
        >>> context = ModelInfraErrorContext(
        ...     transport_type=EnumInfraTransportType.VAULT,
        ...     operation="policy.write",
        ...     target_name="consul-gossip",
        ... )
        >>> raise MeshBootstrapError("Operation failed", context=context)
    """

    def __init__(
        self,
        message: str,
        error_code: EnumBootstrapErrorCode | None = None,
        context: ModelInfraErrorContext | None = None,
        **extra_context: object,
    ) -> None:
        """Initialize MeshBootstrapError with structured fields.

        Args:
            message: Human-readable error message
            error_code: Error code (defaults to OPERATION_FAILED)
            context: Bundled infrastructure context
            **extra_context: Additional non-secret context information
        """
        super().__init__(message)
        structured_context: dict[str, object] = dict(extra_context)

        correlation_id: UUID | None = None
        if context is not None:
            if context.transport_type is not None:
                structured_context["transport_type"] = context.transport_type
            if context.operation is not None:
                structured_context["operation"] = context.operation
            if context.target_name is not None:
                structured_context["target_name"] = context.target_name
            correlation_id = context.correlation_id

        self.message = message
        self.error_code = error_code or EnumBootstrapErrorCode.OPERATION_FAILED
        self.correlation_id = correlation_id
        self.context = structured_context

    def __str__(self) -> str:
        return self.message


class ProtocolConfigurationError(MeshBootstrapError):
    """Raised when configuration validation fails.

    Used for unparseable config files, missing required fields, and
    malformed secret paths.
    """

    def __init__(
        self,
        message: str,
        context: ModelInfraErrorContext | None = None,
        **extra_context: object,
    ) -> None:
        super().__init__(
            message=message,
            error_code=EnumBootstrapErrorCode.INVALID_CONFIGURATION,
            context=context,
            **extra_context,
        )


class BackendUnavailableError(MeshBootstrapError):
    """Raised on transport or authentication failure talking to the backend.

    Transient: callers may retry. The backend client itself does not retry
    unless its retry configuration asks for it.

    Example:
        >>> context = ModelInfraErrorContext(
        ...     transport_type=EnumInfraTransportType.VAULT,
        ...     operation="kv.read",
        ...     target_name="consul/data/secret/gossip",
        ... )
        >>> raise BackendUnavailableError("Vault server is unavailable", context=context)
    """

    def __init__(
        self,
        message: str,
        context: ModelInfraErrorContext | None = None,
        **extra_context: object,
    ) -> None:
        super().__init__(
            message=message,
            error_code=EnumBootstrapErrorCode.BACKEND_UNAVAILABLE,
            context=context,
            **extra_context,
        )


class PermissionDeniedError(MeshBootstrapError):
    """Raised when the calling identity lacks a capability on a path.

    Fatal: indicates a configuration or policy error, never retried.
    """

    def __init__(
        self,
        message: str,
        context: ModelInfraErrorContext | None = None,
        **extra_context: object,
    ) -> None:
        super().__init__(
            message=message,
            error_code=EnumBootstrapErrorCode.PERMISSION_DENIED,
            context=context,
            **extra_context,
        )


class ResourceNotFoundError(MeshBootstrapError):
    """Raised when a read targets a resource that does not exist."""

    def __init__(
        self,
        message: str,
        context: ModelInfraErrorContext | None = None,
        **extra_context: object,
    ) -> None:
        super().__init__(
            message=message,
            error_code=EnumBootstrapErrorCode.NOT_FOUND,
            context=context,
            **extra_context,
        )


class SecretNotFoundError(ResourceNotFoundError):
    """Raised when a (path, field) pair holds no value."""

    def __init__(
        self,
        message: str,
        context: ModelInfraErrorContext | None = None,
        secret_path: str | None = None,
        secret_field: str | None = None,
        **extra_context: object,
    ) -> None:
        if secret_path is not None:
            extra_context["secret_path"] = secret_path
        if secret_field is not None:
            extra_context["secret_field"] = secret_field
        super().__init__(message=message, context=context, **extra_context)


class PolicyNotFoundError(ResourceNotFoundError):
    """Raised when a policy name is not registered in the backend."""


__all__ = [
    "BackendUnavailableError",
    "MeshBootstrapError",
    "PermissionDeniedError",
    "PolicyNotFoundError",
    "ProtocolConfigurationError",
    "ResourceNotFoundError",
    "SecretNotFoundError",
]
