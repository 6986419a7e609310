# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Policy Manager.

Stores named authorization policies as Vault JSON policy documents. Role
bindings hold policy names, so redefining a policy immediately changes
what every binding using it may do.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING
from uuid import UUID

from pydantic import ValidationError

from meshboot.enums import EnumInfraTransportType
from meshboot.errors import (
    ModelInfraErrorContext,
    PolicyNotFoundError,
    ProtocolConfigurationError,
)
from meshboot.models.model_policy_capability import ModelPolicyCapability
from meshboot.models.model_policy_document import ModelPolicyDocument

if TYPE_CHECKING:
    from meshboot.protocols import ProtocolSecretsBackend
    from meshboot.runtime.resource_scope import ResourceScope

logger = logging.getLogger(__name__)


class PolicyManager:
    """Idempotent policy upserts keyed by name."""

    def __init__(self, backend: ProtocolSecretsBackend) -> None:
        self._backend = backend

    async def define_policy(
        self,
        name: str,
        capabilities: Iterable[ModelPolicyCapability],
        scope: ResourceScope | None = None,
        correlation_id: UUID | None = None,
    ) -> ModelPolicyDocument:
        """Create or replace the policy called name.

        The write is skipped when the stored document already grants exactly
        the same capabilities.

        Raises:
            ProtocolConfigurationError: If name is invalid or capabilities
                is empty.
        """
        try:
            document = ModelPolicyDocument(
                name=name, capabilities=frozenset(capabilities)
            )
        except ValidationError as e:
            raise ProtocolConfigurationError(
                f"Invalid policy '{name}': a policy needs a valid name and at "
                "least one capability",
                context=ModelInfraErrorContext(
                    transport_type=EnumInfraTransportType.VAULT,
                    operation="policy.define",
                    target_name=name,
                    correlation_id=correlation_id,
                ),
            ) from e
        rules = await self._backend.policy_read(name, correlation_id)

        unchanged = False
        if rules is not None:
            try:
                unchanged = ModelPolicyDocument.from_vault_rules(name, rules) == document
            except ValueError:
                unchanged = False

        if unchanged:
            logger.debug(
                "Policy unchanged, skipping write",
                extra={
                    "policy": name,
                    "correlation_id": str(correlation_id) if correlation_id else None,
                },
            )
        else:
            await self._backend.policy_write(
                name, document.to_vault_rules(), correlation_id
            )
            logger.info(
                "Policy written",
                extra={
                    "policy": name,
                    "capability_count": len(document.capabilities),
                    "correlation_id": str(correlation_id) if correlation_id else None,
                },
            )

        if scope is not None and not any(
            handle.kind == "policy" and handle.identifier == name
            for handle in scope.handles
        ):

            async def release() -> None:
                await self.delete_policy(name, correlation_id)

            scope.register_release("policy", name, release)
        return document

    async def get_policy(
        self, name: str, correlation_id: UUID | None = None
    ) -> ModelPolicyDocument:
        """Read a policy back as a document.

        Raises:
            PolicyNotFoundError: If no policy is called name.
            ProtocolConfigurationError: If the stored rules are not a JSON
                policy (e.g. written as HCL outside meshboot).
        """
        ctx = ModelInfraErrorContext(
            transport_type=EnumInfraTransportType.VAULT,
            operation="policy.get",
            target_name=name,
            correlation_id=correlation_id,
        )
        rules = await self._backend.policy_read(name, correlation_id)
        if rules is None:
            raise PolicyNotFoundError(f"Policy '{name}' not found", context=ctx)
        try:
            return ModelPolicyDocument.from_vault_rules(name, rules)
        except ValueError as e:
            raise ProtocolConfigurationError(str(e), context=ctx) from e

    async def delete_policy(
        self, name: str, correlation_id: UUID | None = None
    ) -> None:
        await self._backend.policy_delete(name, correlation_id)
        logger.info(
            "Policy deleted",
            extra={
                "policy": name,
                "correlation_id": str(correlation_id) if correlation_id else None,
            },
        )


__all__: list[str] = ["PolicyManager"]
