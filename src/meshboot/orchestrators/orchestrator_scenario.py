# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""End-to-end acceptance scenario.

Bootstraps the backend, deploys the mesh with the mapped values, applies
the static-client to static-server intention and validates traffic
between the two workloads. Deploying the workloads themselves is left to
the deployer.

Every resource lands in one ResourceScope and is released on every exit
path, unless the context asks to keep state after a failure.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from meshboot.enums import EnumConnectivityOutcome, EnumInfraTransportType
from meshboot.errors import (
    ConnectivityCancelledError,
    ConnectivityTimeoutError,
    MeshBootstrapError,
    ModelInfraErrorContext,
)
from meshboot.models.model_scenario_result import ModelScenarioResult
from meshboot.orchestrators.plan_consul_vault import build_consul_vault_plan
from meshboot.runtime.resource_scope import ResourceScope
from meshboot.services.service_connectivity_validator import http_ok

if TYPE_CHECKING:
    from meshboot.models.model_bootstrap_context import ModelBootstrapContext
    from meshboot.models.model_bootstrap_plan import ModelBootstrapPlan
    from meshboot.orchestrators.orchestrator_bootstrap import BootstrapOrchestrator
    from meshboot.protocols import ProtocolAccessPolicy, ProtocolMeshDeployer
    from meshboot.services.service_connectivity_validator import (
        ConnectivityValidator,
    )

logger = logging.getLogger(__name__)


class ScenarioRunner:
    """Bootstrap, deploy, authorize and validate in one scoped run."""

    def __init__(
        self,
        context: ModelBootstrapContext,
        orchestrator: BootstrapOrchestrator,
        deployer: ProtocolMeshDeployer,
        access_policy: ProtocolAccessPolicy,
        validator: ConnectivityValidator,
    ) -> None:
        self._context = context
        self._orchestrator = orchestrator
        self._deployer = deployer
        self._access_policy = access_policy
        self._validator = validator

    async def run(
        self,
        plan: ModelBootstrapPlan | None = None,
        allow: bool = True,
        cancel_event: asyncio.Event | None = None,
        correlation_id: UUID | None = None,
    ) -> ModelScenarioResult:
        """Run the scenario.

        With allow=False a deny intention is applied and the scenario
        expects connectivity validation to time out.

        Raises:
            BootstrapStageError: If bootstrapping fails.
            ConnectivityTimeoutError: If allowed traffic never succeeds.
            ConnectivityCancelledError: If cancel_event stops validation
                before a verdict, whether traffic was allowed or denied.
            MeshBootstrapError: If denied traffic gets through.
        """
        context = self._context
        correlation_id = correlation_id or uuid4()
        plan = plan or build_consul_vault_plan(context)
        source = context.static_client_name
        destination = context.static_server_name

        async with ResourceScope(
            keep_on_failure=context.no_cleanup_on_failure,
            correlation_id=correlation_id,
        ) as scope:
            outcome = await self._orchestrator.run(
                plan, scope=scope, correlation_id=correlation_id
            )

            release = await self._deployer.deploy(
                context, outcome.values.to_helm_values()
            )
            scope.register_release(
                "mesh_release", release, lambda: self._deployer.uninstall(release)
            )

            await self._access_policy.apply(
                source, destination, allow=allow, correlation_id=correlation_id
            )
            scope.register_release(
                "intention",
                f"{source}->{destination}",
                lambda: self._access_policy.remove(source, destination, correlation_id),
            )

            connectivity = await self._validator.check(
                context.validation_target,
                context.validation_attempts,
                context.validation_interval_seconds,
                http_ok,
                cancel_event=cancel_event,
                correlation_id=correlation_id,
            )

            error_context = ModelInfraErrorContext(
                transport_type=EnumInfraTransportType.HTTP,
                operation="scenario.validate",
                target_name=context.validation_target,
                correlation_id=correlation_id,
            )
            if connectivity.outcome is EnumConnectivityOutcome.CANCELLED:
                raise ConnectivityCancelledError(
                    f"Validation of {source} -> {destination} was cancelled "
                    f"after {connectivity.attempts} attempts",
                    context=error_context,
                    attempts=connectivity.attempts,
                )
            if allow and connectivity.outcome is EnumConnectivityOutcome.TIMEOUT:
                raise ConnectivityTimeoutError(
                    f"No successful response from {context.validation_target} "
                    f"after {connectivity.attempts} attempts",
                    context=error_context,
                    attempts=connectivity.attempts,
                )
            if not allow and connectivity.succeeded:
                raise MeshBootstrapError(
                    f"Traffic {source} -> {destination} succeeded despite a "
                    "deny intention",
                    context=error_context,
                )

            logger.info(
                "Scenario finished",
                extra={
                    "release": release,
                    "allow": allow,
                    "outcome": connectivity.outcome.value,
                    "attempts": connectivity.attempts,
                    "correlation_id": str(correlation_id),
                },
            )
            return ModelScenarioResult(
                bootstrap=outcome,
                release=release,
                traffic_allowed=allow,
                connectivity=connectivity,
            )


__all__: list[str] = ["ScenarioRunner"]
