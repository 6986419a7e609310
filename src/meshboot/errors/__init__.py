# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""meshboot Errors Module.

Exports:
    ModelInfraErrorContext: Bundled structured error context
    MeshBootstrapError: Base error class
    ProtocolConfigurationError: Invalid configuration or malformed paths
    BackendUnavailableError: Transient transport/auth failure talking to Vault
    PermissionDeniedError: Token lacks a capability on a path
    ResourceNotFoundError: Base for NotFound reads
    SecretNotFoundError: (path, field) holds no value
    PolicyNotFoundError: Policy name not registered
    OrderingViolationError: Operation ran before its prerequisite
    AlreadyExistsError: CA mount already initialized
    UnknownPolicyError: Role binding references undefined policies
    UnknownRoleError: Leaf requested for an unregistered PKI role
    MissingSecretError: Requested mesh feature without a provisioned secret
    BootstrapStageError: Run aborted at a stage
    ConnectivityTimeoutError: Validation attempt budget exhausted
    ConnectivityCancelledError: Validation cancelled before a verdict

Error Sanitization Guidelines:
    NEVER include in error messages or context:
        - Vault tokens, secret values, private keys
        - Gossip keys, license text, snapshot agent configuration

    SAFE to include:
        - Secret paths and field names
        - Mount IDs, policy names, role names
        - Correlation IDs, attempt counts and timeout values
"""

from meshboot.errors.error_bootstrap import (
    BootstrapStageError,
    ConnectivityCancelledError,
    ConnectivityTimeoutError,
)
from meshboot.errors.error_provisioning import (
    AlreadyExistsError,
    MissingSecretError,
    OrderingViolationError,
    UnknownPolicyError,
    UnknownRoleError,
)
from meshboot.errors.infra_errors import (
    BackendUnavailableError,
    MeshBootstrapError,
    PermissionDeniedError,
    PolicyNotFoundError,
    ProtocolConfigurationError,
    ResourceNotFoundError,
    SecretNotFoundError,
)
from meshboot.errors.model_infra_error_context import ModelInfraErrorContext

__all__: list[str] = [
    "AlreadyExistsError",
    "BackendUnavailableError",
    "BootstrapStageError",
    "ConnectivityCancelledError",
    "ConnectivityTimeoutError",
    "MeshBootstrapError",
    "MissingSecretError",
    "ModelInfraErrorContext",
    "OrderingViolationError",
    "PermissionDeniedError",
    "PolicyNotFoundError",
    "ProtocolConfigurationError",
    "ResourceNotFoundError",
    "SecretNotFoundError",
    "UnknownPolicyError",
    "UnknownRoleError",
]
