# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Infrastructure Error Context Model.

Bundles the structured fields shared by every meshboot error so error
constructors stay small while keeping strong typing.
"""

from __future__ import annotations

from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from meshboot.enums import EnumInfraTransportType


class ModelInfraErrorContext(BaseModel):
    """Structured context attached to infrastructure errors.

    Attributes:
        transport_type: Transport the failing operation used (VAULT, CONSUL, HTTP, RUNTIME)
        operation: Operation being performed (e.g. "pki.generate_root")
        target_name: Target resource name (mount, policy, role, path)
        correlation_id: Correlation ID for tracing a bootstrap run

    Example:
        >>> context = ModelInfraErrorContext(
        ...     transport_type=EnumInfraTransportType.VAULT,
        ...     operation="kv.write",
        ...     target_name="consul/data/secret/gossip",
        ...     correlation_id=uuid4(),
        ... )
        >>> raise BackendUnavailableError("Vault sealed", context=context)
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    transport_type: EnumInfraTransportType | None = Field(
        default=None,
        description="Type of infrastructure transport (VAULT, CONSUL, HTTP, RUNTIME)",
    )
    operation: str | None = Field(
        default=None,
        description="Operation being performed",
    )
    target_name: str | None = Field(
        default=None,
        description="Target resource or endpoint name",
    )
    correlation_id: UUID | None = Field(
        default=None,
        description="Request correlation ID for distributed tracing",
    )

    @classmethod
    def with_correlation(
        cls,
        *,
        correlation_id: UUID | None = None,
        transport_type: EnumInfraTransportType | None = None,
        operation: str | None = None,
        target_name: str | None = None,
    ) -> ModelInfraErrorContext:
        """Build a context, generating a correlation ID when none is given."""
        return cls(
            transport_type=transport_type,
            operation=operation,
            target_name=target_name,
            correlation_id=correlation_id or uuid4(),
        )


__all__ = ["ModelInfraErrorContext"]
