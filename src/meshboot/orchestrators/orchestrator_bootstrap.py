# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Bootstrap Orchestrator.

Drives a bootstrap plan through the linear stage sequence:

    NOT_STARTED -> POLICIES_WRITTEN -> ROLES_BINDABLE -> ROOT_PROVISIONED
        -> INTERMEDIATE_PROVISIONED -> SECRETS_WRITTEN -> CONFIG_MAPPED -> DONE

Stages run strictly one after the other. Writes inside a stage that do not
depend on each other are issued concurrently; intermediates are created in
plan order because one may sign the next.

Failure Policy:
    No rollback. A failed run raises BootstrapStageError naming the stage
    it was entering and the last stage it completed. Every write is
    idempotent, so re-running the same plan resumes from where it stopped
    and reaches DONE without rewriting anything that already matches.
    Callers who want cleanup pass a ResourceScope; every object touched
    registers a release handle on it.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import TYPE_CHECKING, TypeVar
from uuid import UUID, uuid4

from meshboot.enums import EnumBootstrapStage, EnumInfraTransportType, EnumMeshFeature
from meshboot.errors import (
    AlreadyExistsError,
    BootstrapStageError,
    ModelInfraErrorContext,
    OrderingViolationError,
    ProtocolConfigurationError,
    SecretNotFoundError,
)
from meshboot.models.model_bootstrap_diagnostics import ModelBootstrapDiagnostics
from meshboot.models.model_bootstrap_outcome import ModelBootstrapOutcome
from meshboot.models.model_ca_hierarchy_node import ModelCAHierarchyNode
from meshboot.models.model_mesh_consumption_reference import (
    ModelMeshConsumptionReference,
)
from meshboot.models.model_mesh_values import ModelMeshValues
from meshboot.models.model_planned_ca import ModelPlannedCA
from meshboot.models.model_planned_secret import ModelPlannedSecret
from meshboot.models.model_secret_reference import ModelSecretReference
from meshboot.orchestrators.bootstrap_stage_machine import BootstrapStageMachine
from meshboot.services.service_auth_role_binder import AuthRoleBinder
from meshboot.services.service_mesh_config_mapper import MeshConfigMapper
from meshboot.services.service_pki_provisioner import PKIProvisioner
from meshboot.services.service_policy_manager import PolicyManager
from meshboot.services.service_secret_repository import SecretRepository
from meshboot.utils.util_error_sanitization import sanitize_error_message

if TYPE_CHECKING:
    from meshboot.models.model_bootstrap_context import ModelBootstrapContext
    from meshboot.models.model_bootstrap_plan import ModelBootstrapPlan
    from meshboot.protocols import ProtocolSecretsBackend
    from meshboot.runtime.resource_scope import ResourceScope

    _Step = Callable[
        [ModelBootstrapPlan, "_RunLedger", ResourceScope | None, UUID],
        Awaitable[None],
    ]

logger = logging.getLogger(__name__)

T = TypeVar("T")

_CA_CERT_FIELD = "certificate"


class _RunLedger:
    """What one run has written so far. Names and references only."""

    def __init__(self) -> None:
        self.policy_names: list[str] = []
        self.role_names: list[str] = []
        self.nodes: dict[str, ModelCAHierarchyNode] = {}
        self.pki_roles: list[str] = []
        self.secret_references: list[ModelSecretReference] = []
        self.resolved: dict[EnumMeshFeature, ModelSecretReference] = {}
        self.references: tuple[ModelMeshConsumptionReference, ...] = ()
        self.values: ModelMeshValues | None = None

    def diagnostics(
        self,
        correlation_id: UUID,
        reached_stage: EnumBootstrapStage,
        error: str | None = None,
    ) -> ModelBootstrapDiagnostics:
        return ModelBootstrapDiagnostics(
            correlation_id=correlation_id,
            reached_stage=reached_stage,
            secret_references=tuple(self.secret_references),
            policy_names=tuple(self.policy_names),
            role_names=tuple(self.role_names),
            ca_mounts=tuple(self.nodes),
            pki_roles=tuple(self.pki_roles),
            error=error,
        )


async def _gather(awaitables: Iterable[Awaitable[T]]) -> list[T]:
    """Await all, then raise the first failure once every write has settled."""
    results = await asyncio.gather(*awaitables, return_exceptions=True)
    failures = [result for result in results if isinstance(result, BaseException)]
    for extra in failures[1:]:
        logger.warning(
            "Additional failure in concurrent stage writes",
            extra={
                "error_type": type(extra).__name__,
                "error": sanitize_error_message(extra),
            },
        )
    if failures:
        raise failures[0]
    return results  # type: ignore[return-value]


class BootstrapOrchestrator:
    """Runs a ModelBootstrapPlan against a secrets backend.

    Components default to instances over the same backend and can be
    replaced for tests.
    """

    def __init__(
        self,
        backend: ProtocolSecretsBackend,
        context: ModelBootstrapContext,
        *,
        secrets: SecretRepository | None = None,
        pki: PKIProvisioner | None = None,
        policies: PolicyManager | None = None,
        binder: AuthRoleBinder | None = None,
    ) -> None:
        self._context = context
        self.secrets = secrets or SecretRepository(backend)
        self.pki = pki or PKIProvisioner(backend)
        self.policies = policies or PolicyManager(backend)
        self.binder = binder or AuthRoleBinder(backend, context)
        self._backend = backend

    async def run(
        self,
        plan: ModelBootstrapPlan,
        scope: ResourceScope | None = None,
        correlation_id: UUID | None = None,
    ) -> ModelBootstrapOutcome:
        """Provision plan and map it into mesh values.

        Raises:
            BootstrapStageError: When any component call fails. The cause is
                chained and ``retryable`` tells transient failures apart.
        """
        correlation_id = correlation_id or uuid4()
        machine = BootstrapStageMachine(correlation_id)
        ledger = _RunLedger()

        steps: tuple[tuple[EnumBootstrapStage, _Step], ...] = (
            (EnumBootstrapStage.POLICIES_WRITTEN, self._write_policies),
            (EnumBootstrapStage.ROLES_BINDABLE, self._bind_roles),
            (EnumBootstrapStage.ROOT_PROVISIONED, self._provision_roots),
            (
                EnumBootstrapStage.INTERMEDIATE_PROVISIONED,
                self._provision_intermediates,
            ),
            (EnumBootstrapStage.SECRETS_WRITTEN, self._write_secrets),
            (EnumBootstrapStage.CONFIG_MAPPED, self._map_config),
        )

        logger.info(
            "Bootstrap run started",
            extra={
                "datacenter": self._context.datacenter,
                "policy_count": len(plan.policies),
                "role_count": len(plan.role_bindings),
                "correlation_id": str(correlation_id),
            },
        )
        for stage, step in steps:
            try:
                await step(plan, ledger, scope, correlation_id)
            except Exception as e:
                error = sanitize_error_message(e)
                diagnostics = ledger.diagnostics(correlation_id, machine.stage, error)
                logger.warning(
                    "Bootstrap run aborted",
                    extra={
                        "stage": stage.value,
                        "last_completed_stage": machine.stage.value,
                        "error_type": type(e).__name__,
                        "error": error,
                        "correlation_id": str(correlation_id),
                    },
                )
                raise BootstrapStageError(
                    stage=stage,
                    last_completed_stage=machine.stage,
                    cause=e,
                    diagnostics=diagnostics,
                    context=ModelInfraErrorContext(
                        transport_type=EnumInfraTransportType.RUNTIME,
                        operation="bootstrap.run",
                        target_name=stage.value,
                        correlation_id=correlation_id,
                    ),
                ) from e
            machine.advance(stage)

        machine.advance(EnumBootstrapStage.DONE)
        if ledger.values is None:
            raise ProtocolConfigurationError(
                "Bootstrap reached DONE without mesh values",
                context=ModelInfraErrorContext(
                    transport_type=EnumInfraTransportType.RUNTIME,
                    operation="bootstrap.run",
                    correlation_id=correlation_id,
                ),
            )
        logger.info(
            "Bootstrap run completed",
            extra={
                "ca_mounts": list(ledger.nodes),
                "reference_count": len(ledger.references),
                "correlation_id": str(correlation_id),
            },
        )
        return ModelBootstrapOutcome(
            correlation_id=correlation_id,
            stage=machine.stage,
            nodes=tuple(ledger.nodes.values()),
            references=ledger.references,
            values=ledger.values,
            diagnostics=ledger.diagnostics(correlation_id, machine.stage),
        )

    async def render_values(
        self, plan: ModelBootstrapPlan, correlation_id: UUID | None = None
    ) -> ModelMeshValues:
        """Map what an earlier run provisioned into mesh values, read-only.

        Raises:
            MissingSecretError: If a requested feature has nothing provisioned.
        """
        correlation_id = correlation_id or uuid4()
        ledger = _RunLedger()

        for planned in plan.secrets:
            if planned.feature is None:
                continue
            try:
                await self.secrets.get(planned.path, planned.field, correlation_id)
            except SecretNotFoundError:
                continue
            ledger.resolved[planned.feature] = ModelSecretReference(
                path=planned.path, field=planned.field
            )

        for planned_ca in (*plan.root_cas, *plan.intermediate_cas):
            try:
                node = await self.pki.read_node(
                    planned_ca.mount_id, planned_ca.parent_mount_id, correlation_id
                )
            except OrderingViolationError:
                continue
            ledger.nodes[node.mount_id] = node

        await self._map_config(plan, ledger, None, correlation_id)
        if ledger.values is None:
            raise ProtocolConfigurationError(
                "No mesh values could be rendered",
                context=ModelInfraErrorContext(
                    transport_type=EnumInfraTransportType.RUNTIME,
                    operation="bootstrap.render_values",
                    correlation_id=correlation_id,
                ),
            )
        return ledger.values

    async def _write_policies(
        self,
        plan: ModelBootstrapPlan,
        ledger: _RunLedger,
        scope: ResourceScope | None,
        correlation_id: UUID,
    ) -> None:
        documents = await _gather(
            self.policies.define_policy(
                document.name, document.capabilities, scope, correlation_id
            )
            for document in plan.policies
        )
        ledger.policy_names.extend(document.name for document in documents)

    async def _bind_roles(
        self,
        plan: ModelBootstrapPlan,
        ledger: _RunLedger,
        scope: ResourceScope | None,
        correlation_id: UUID,
    ) -> None:
        bindings = await _gather(
            self.binder.bind_role(
                binding.role_name,
                binding.identity_selector,
                binding.policies,
                scope,
                correlation_id,
            )
            for binding in plan.role_bindings
        )
        ledger.role_names.extend(binding.role_name for binding in bindings)

    async def _root(
        self,
        planned: ModelPlannedCA,
        scope: ResourceScope | None,
        correlation_id: UUID,
    ) -> ModelCAHierarchyNode:
        try:
            return await self.pki.create_root(
                planned.mount_id,
                planned.common_name,
                planned.ttl_seconds,
                scope,
                correlation_id,
            )
        except AlreadyExistsError:
            logger.debug(
                "Root CA exists, re-reading",
                extra={
                    "mount_id": planned.mount_id,
                    "correlation_id": str(correlation_id),
                },
            )
            return await self.pki.read_node(
                planned.mount_id, correlation_id=correlation_id
            )

    async def _provision_roots(
        self,
        plan: ModelBootstrapPlan,
        ledger: _RunLedger,
        scope: ResourceScope | None,
        correlation_id: UUID,
    ) -> None:
        nodes = await _gather(
            self._root(planned, scope, correlation_id) for planned in plan.root_cas
        )
        for node in nodes:
            ledger.nodes[node.mount_id] = node

    async def _provision_intermediates(
        self,
        plan: ModelBootstrapPlan,
        ledger: _RunLedger,
        scope: ResourceScope | None,
        correlation_id: UUID,
    ) -> None:
        for planned in plan.intermediate_cas:
            parent_mount_id = planned.parent_mount_id or ""
            try:
                node = await self.pki.create_intermediate(
                    planned.mount_id,
                    parent_mount_id,
                    planned.common_name,
                    planned.ttl_seconds,
                    scope,
                    correlation_id,
                )
            except AlreadyExistsError:
                logger.debug(
                    "Intermediate CA exists, re-reading",
                    extra={
                        "mount_id": planned.mount_id,
                        "parent_mount_id": parent_mount_id,
                        "correlation_id": str(correlation_id),
                    },
                )
                node = await self.pki.read_node(
                    planned.mount_id, parent_mount_id, correlation_id
                )
            ledger.nodes[node.mount_id] = node

        roles = await _gather(
            self.pki.register_role(role, correlation_id) for role in plan.pki_roles
        )
        ledger.pki_roles.extend(f"{role.mount_id}/{role.name}" for role in roles)

    async def _write_secret(
        self,
        planned: ModelPlannedSecret,
        scope: ResourceScope | None,
        correlation_id: UUID,
    ) -> ModelSecretReference:
        if planned.value is not None:
            return await self.secrets.put(
                planned.path, planned.field, planned.value, scope, correlation_id
            )
        if planned.generator is None:
            raise ProtocolConfigurationError(
                f"Planned secret '{planned.path}#{planned.field}' has no value",
                context=ModelInfraErrorContext(
                    transport_type=EnumInfraTransportType.RUNTIME,
                    operation="bootstrap.write_secret",
                    target_name=planned.path,
                    correlation_id=correlation_id,
                ),
            )
        return await self.secrets.ensure(
            planned.path, planned.field, planned.generator, scope, correlation_id
        )

    async def _write_secrets(
        self,
        plan: ModelBootstrapPlan,
        ledger: _RunLedger,
        scope: ResourceScope | None,
        correlation_id: UUID,
    ) -> None:
        await _gather(
            self._ensure_kv_mount(mount, scope, correlation_id)
            for mount in plan.kv_mounts
        )
        references = await _gather(
            self._write_secret(planned, scope, correlation_id)
            for planned in plan.secrets
        )
        for planned, reference in zip(plan.secrets, references):
            ledger.secret_references.append(reference)
            if planned.feature is not None:
                ledger.resolved[planned.feature] = reference

    async def _ensure_kv_mount(
        self, mount: str, scope: ResourceScope | None, correlation_id: UUID
    ) -> None:
        await self.secrets.ensure_kv_engine(mount, correlation_id)
        if scope is None or any(
            handle.kind == "kv_mount" and handle.identifier == mount
            for handle in scope.handles
        ):
            return

        async def release() -> None:
            await self._backend.disable_secrets_engine(mount, correlation_id)

        scope.register_release("kv_mount", mount, release)

    async def _map_config(
        self,
        plan: ModelBootstrapPlan,
        ledger: _RunLedger,
        scope: ResourceScope | None,
        correlation_id: UUID,
    ) -> None:
        if plan.connect_root_mount is None or plan.connect_intermediate_mount is None:
            raise ProtocolConfigurationError(
                "Plan names no connect CA mounts",
                context=ModelInfraErrorContext(
                    transport_type=EnumInfraTransportType.RUNTIME,
                    operation="bootstrap.map_config",
                    correlation_id=correlation_id,
                ),
            )

        resolved = dict(ledger.resolved)
        if plan.tls_ca_mount is not None and plan.tls_ca_mount in ledger.nodes:
            resolved[EnumMeshFeature.TLS_CA] = ModelSecretReference(
                path=f"{plan.tls_ca_mount}/cert/ca", field=_CA_CERT_FIELD
            )
            if plan.server_cert_role is not None:
                resolved[EnumMeshFeature.SERVER_CERT] = ModelSecretReference(
                    path=f"{plan.tls_ca_mount}/issue/{plan.server_cert_role}",
                    field=_CA_CERT_FIELD,
                )
        if plan.connect_root_mount in ledger.nodes:
            resolved[EnumMeshFeature.CONNECT_CA] = ModelSecretReference(
                path=f"{plan.connect_root_mount}/cert/ca", field=_CA_CERT_FIELD
            )

        ledger.references = MeshConfigMapper.map(plan.features, resolved)
        ledger.values = MeshConfigMapper.build_values(
            self._context,
            ledger.references,
            connect_root=plan.connect_root_mount,
            connect_intermediate=plan.connect_intermediate_mount,
        )


__all__: list[str] = ["BootstrapOrchestrator"]
