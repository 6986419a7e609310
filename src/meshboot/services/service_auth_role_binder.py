# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Auth Role Binder.

Maps workload identities (Kubernetes namespace + service account) to
backend roles carrying policies, through the Kubernetes auth method.

The auth method itself is enabled and pointed at the Kubernetes API on the
first bind of each binder. The stored config is read first and only
rewritten when its kubernetes_host differs, so other fields an operator
set on it are left alone. Concurrent binds in the same stage share that
setup.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING
from uuid import UUID

from pydantic import ValidationError

from meshboot.enums import EnumInfraTransportType
from meshboot.errors import (
    ModelInfraErrorContext,
    ProtocolConfigurationError,
    ResourceNotFoundError,
    UnknownPolicyError,
)
from meshboot.models.model_auth_role_binding import ModelAuthRoleBinding
from meshboot.models.model_identity_selector import ModelIdentitySelector

if TYPE_CHECKING:
    from meshboot.models.model_bootstrap_context import ModelBootstrapContext
    from meshboot.protocols import ProtocolSecretsBackend
    from meshboot.runtime.resource_scope import ResourceScope

logger = logging.getLogger(__name__)

_AUTH_METHOD_TYPE = "kubernetes"


class AuthRoleBinder:
    """Idempotent Kubernetes auth role bindings.

    Attributes:
        auth_mount: Mount path of the Kubernetes auth method
        kubernetes_host: API host the backend uses to review service account tokens
    """

    def __init__(
        self, backend: ProtocolSecretsBackend, context: ModelBootstrapContext
    ) -> None:
        self._backend = backend
        self.auth_mount = context.kubernetes_auth_mount
        self.kubernetes_host = context.kubernetes_host
        self._auth_ready = False
        self._auth_lock = asyncio.Lock()

    def _context(
        self, operation: str, target: str, correlation_id: UUID | None
    ) -> ModelInfraErrorContext:
        return ModelInfraErrorContext(
            transport_type=EnumInfraTransportType.VAULT,
            operation=operation,
            target_name=target,
            correlation_id=correlation_id,
        )

    async def _ensure_auth_method(
        self, scope: ResourceScope | None, correlation_id: UUID | None
    ) -> None:
        async with self._auth_lock:
            if self._auth_ready:
                return
            created = await self._backend.ensure_auth_method(
                self.auth_mount, _AUTH_METHOD_TYPE, correlation_id
            )
            current = await self._backend.kubernetes_read_config(
                self.auth_mount, correlation_id
            )
            configured = (current or {}).get("kubernetes_host") != self.kubernetes_host
            if configured:
                await self._backend.kubernetes_configure(
                    self.auth_mount, self.kubernetes_host, correlation_id
                )
            self._auth_ready = True
            logger.info(
                "Kubernetes auth method ready",
                extra={
                    "auth_mount": self.auth_mount,
                    "created": created,
                    "configured": configured,
                    "correlation_id": str(correlation_id) if correlation_id else None,
                },
            )
            if scope is not None:

                async def release() -> None:
                    await self._backend.disable_auth_method(
                        self.auth_mount, correlation_id
                    )
                    self._auth_ready = False

                scope.register_release("auth_method", self.auth_mount, release)

    async def bind_role(
        self,
        role_name: str,
        identity_selector: ModelIdentitySelector,
        policy_names: Sequence[str],
        scope: ResourceScope | None = None,
        correlation_id: UUID | None = None,
    ) -> ModelAuthRoleBinding:
        """Bind an identity to a role carrying policy_names.

        Raises:
            UnknownPolicyError: Naming every policy that is not defined.
            ProtocolConfigurationError: If policy_names is empty or repeats a name.
        """
        try:
            binding = ModelAuthRoleBinding(
                role_name=role_name,
                identity_selector=identity_selector,
                policies=tuple(policy_names),
            )
        except ValidationError as e:
            raise ProtocolConfigurationError(
                f"Invalid role binding '{role_name}': policies must be a "
                "non-empty list of unique names",
                context=self._context("auth.bind_role", role_name, correlation_id),
            ) from e

        stored = await asyncio.gather(
            *(
                self._backend.policy_read(name, correlation_id)
                for name in binding.policies
            )
        )
        missing = [
            name for name, rules in zip(binding.policies, stored) if rules is None
        ]
        if missing:
            raise UnknownPolicyError(
                f"Role '{role_name}' references undefined policies: "
                f"{', '.join(missing)}",
                policy_names=missing,
                context=self._context("auth.bind_role", role_name, correlation_id),
            )

        await self._ensure_auth_method(scope, correlation_id)

        existing = await self._backend.kubernetes_role_read(
            self.auth_mount, role_name, correlation_id
        )
        if existing is not None and self._binding_matches(existing, binding):
            logger.debug(
                "Role binding unchanged, skipping write",
                extra={
                    "role_name": role_name,
                    "correlation_id": str(correlation_id) if correlation_id else None,
                },
            )
        else:
            await self._backend.kubernetes_role_write(
                self.auth_mount,
                role_name,
                bound_service_account_names=[identity_selector.service_account],
                bound_service_account_namespaces=[identity_selector.namespace],
                policies=list(binding.policies),
                correlation_id=correlation_id,
            )
            logger.info(
                "Role binding written",
                extra={
                    "role_name": role_name,
                    "service_account": identity_selector.service_account,
                    "namespace": identity_selector.namespace,
                    "policies": list(binding.policies),
                    "correlation_id": str(correlation_id) if correlation_id else None,
                },
            )

        if scope is not None and not any(
            handle.kind == "auth_role" and handle.identifier == role_name
            for handle in scope.handles
        ):

            async def release() -> None:
                await self.unbind_role(role_name, correlation_id)

            scope.register_release("auth_role", role_name, release)
        return binding

    @staticmethod
    def _binding_matches(
        existing: dict[str, list[str]], binding: ModelAuthRoleBinding
    ) -> bool:
        selector = binding.identity_selector
        return (
            existing.get("bound_service_account_names") == [selector.service_account]
            and existing.get("bound_service_account_namespaces")
            == [selector.namespace]
            and tuple(existing.get("policies") or ()) == binding.policies
        )

    async def get_binding(
        self, role_name: str, correlation_id: UUID | None = None
    ) -> ModelAuthRoleBinding:
        """Read a role binding back.

        Raises:
            ResourceNotFoundError: If no role is called role_name.
        """
        existing = await self._backend.kubernetes_role_read(
            self.auth_mount, role_name, correlation_id
        )
        if (
            existing is None
            or not existing.get("bound_service_account_names")
            or not existing.get("bound_service_account_namespaces")
        ):
            raise ResourceNotFoundError(
                f"Role binding '{role_name}' not found",
                context=self._context("auth.get_binding", role_name, correlation_id),
            )
        return ModelAuthRoleBinding(
            role_name=role_name,
            identity_selector=ModelIdentitySelector(
                namespace=existing["bound_service_account_namespaces"][0],
                service_account=existing["bound_service_account_names"][0],
            ),
            policies=tuple(existing.get("policies") or ()),
        )

    async def unbind_role(
        self, role_name: str, correlation_id: UUID | None = None
    ) -> None:
        await self._backend.kubernetes_role_delete(
            self.auth_mount, role_name, correlation_id
        )
        logger.info(
            "Role binding removed",
            extra={
                "role_name": role_name,
                "correlation_id": str(correlation_id) if correlation_id else None,
            },
        )


__all__: list[str] = ["AuthRoleBinder"]
