# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Vault Client Configuration Model.

Security Note:
    The token field uses SecretStr to prevent accidental logging of
    sensitive credentials. Tokens come from the VAULT_TOKEN environment
    variable, never from YAML configuration files.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from meshboot.handlers.model_vault_retry_config import ModelVaultRetryConfig


class ModelVaultHandlerConfig(BaseModel):
    """Configuration for the hvac-backed secrets backend client.

    Attributes:
        url: Vault server URL (e.g. "https://vault.example.com:8200")
        token: Vault authentication token
        namespace: Vault Enterprise namespace
        timeout_seconds: Per-operation timeout
        verify_ssl: Verify the server certificate (or path to a CA bundle)
        retry: Retry configuration with exponential backoff
        max_concurrent_operations: Thread pool size for hvac calls
        circuit_breaker_enabled: Guard calls with MixinAsyncCircuitBreaker
        circuit_breaker_failure_threshold: Consecutive failures that open the circuit
        circuit_breaker_reset_timeout_seconds: Time the circuit stays open

    Example:
        >>> config = ModelVaultHandlerConfig(
        ...     url="http://127.0.0.1:8200",
        ...     token=SecretStr("root"),
        ... )
        >>> print(config.token)
        **********
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    url: str = Field(min_length=1)
    token: SecretStr
    namespace: str | None = None
    timeout_seconds: float = Field(default=30.0, ge=1.0, le=300.0)
    verify_ssl: bool | str = True
    retry: ModelVaultRetryConfig = Field(default_factory=ModelVaultRetryConfig)
    max_concurrent_operations: int = Field(default=10, ge=1, le=100)
    circuit_breaker_enabled: bool = True
    circuit_breaker_failure_threshold: int = Field(default=5, ge=1, le=20)
    circuit_breaker_reset_timeout_seconds: float = Field(default=30.0, ge=1.0, le=300.0)


__all__: list[str] = ["ModelVaultHandlerConfig"]
