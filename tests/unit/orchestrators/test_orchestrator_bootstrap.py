# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Unit tests for BootstrapOrchestrator.

Runs the default plan end to end against InMemorySecretsBackend and covers:
- Stage progression and the provisioned CA hierarchy
- Issuing a leaf afterwards from a fresh provisioner
- Idempotent re-runs that write nothing
- Stage errors, retry classification and resumption
- Scoped release and read-only value rendering
"""

from __future__ import annotations

import base64

import pytest
from cryptography import x509
from cryptography.x509.oid import NameOID

from meshboot.enums import EnumBootstrapStage, EnumCARole, EnumMeshFeature
from meshboot.errors import (
    BackendUnavailableError,
    BootstrapStageError,
    MissingSecretError,
    OrderingViolationError,
    PermissionDeniedError,
)
from meshboot.models import ModelBootstrapContext, ModelBootstrapPlan
from meshboot.orchestrators import BootstrapOrchestrator, build_consul_vault_plan
from meshboot.runtime import ResourceScope
from meshboot.services import PKIProvisioner
from meshboot.testing import InMemorySecretsBackend
from tests.helpers import TEST_LICENSE, make_context, make_enterprise_context

GOSSIP = "consul/data/secret/gossip"


@pytest.fixture
def orchestrator(
    backend: InMemorySecretsBackend, context: ModelBootstrapContext
) -> BootstrapOrchestrator:
    return BootstrapOrchestrator(backend, context)


class TestBootstrapRun:
    """Test a complete run of the default plan."""

    @pytest.mark.asyncio
    async def test_run_reaches_done(
        self, orchestrator: BootstrapOrchestrator, plan: ModelBootstrapPlan
    ) -> None:
        outcome = await orchestrator.run(plan)

        assert outcome.stage is EnumBootstrapStage.DONE
        assert [node.mount_id for node in outcome.nodes] == [
            "pki",
            "connect_root",
            "dc1/connect_inter",
        ]
        assert outcome.diagnostics.reached_stage is EnumBootstrapStage.DONE
        assert outcome.diagnostics.error is None

    @pytest.mark.asyncio
    async def test_connect_hierarchy_is_signed(
        self, orchestrator: BootstrapOrchestrator, plan: ModelBootstrapPlan
    ) -> None:
        outcome = await orchestrator.run(plan)

        intermediate = outcome.node("dc1/connect_inter")
        root = outcome.node("connect_root")
        assert intermediate.role is EnumCARole.INTERMEDIATE
        assert intermediate.parent == root
        x509.load_pem_x509_certificate(
            intermediate.certificate.encode()
        ).verify_directly_issued_by(x509.load_pem_x509_certificate(root.certificate.encode()))

    @pytest.mark.asyncio
    async def test_gossip_key_generated(
        self, orchestrator: BootstrapOrchestrator, plan: ModelBootstrapPlan
    ) -> None:
        await orchestrator.run(plan)

        key = await orchestrator.secrets.get(GOSSIP, "gossip")
        assert len(base64.b64decode(key.get_secret_value())) == 32

    @pytest.mark.asyncio
    async def test_roles_and_policies_written(
        self, orchestrator: BootstrapOrchestrator, plan: ModelBootstrapPlan
    ) -> None:
        outcome = await orchestrator.run(plan)

        server = await orchestrator.binder.get_binding("consul-server")
        assert server.identity_selector.service_account == "consul-consul-server"
        assert set(outcome.diagnostics.policy_names) == {p.name for p in plan.policies}
        assert outcome.diagnostics.role_names == ("consul-server", "consul-client", "consul-ca")
        assert outcome.diagnostics.pki_roles == (
            "pki/consul-server-dc1",
            "dc1/connect_inter/consul-server",
        )

    @pytest.mark.asyncio
    async def test_references_and_values(
        self, orchestrator: BootstrapOrchestrator, plan: ModelBootstrapPlan
    ) -> None:
        outcome = await orchestrator.run(plan)

        assert outcome.reference(EnumMeshFeature.GOSSIP_ENCRYPTION).secret_path == GOSSIP
        assert outcome.reference(EnumMeshFeature.CONNECT_CA).secret_path == (
            "connect_root/cert/ca"
        )
        values = outcome.values.to_helm_values()
        assert values["global.tls.caCert.secretName"] == "pki/cert/ca"
        assert values["server.serverCert.secretName"] == "pki/issue/consul-server-dc1"
        assert values["global.secretsBackend.vault.connectCA.rootPKIPath"] == "connect_root"
        assert values["client.snapshotAgent.secretKey"] == "snapshotagentconfig"
        assert "global.enterpriseLicense.secretName" not in values
        with pytest.raises(KeyError):
            outcome.reference(EnumMeshFeature.ENTERPRISE_LICENSE)

    @pytest.mark.asyncio
    async def test_enterprise_run_stores_license(
        self, backend: InMemorySecretsBackend
    ) -> None:
        context = make_enterprise_context()
        orchestrator = BootstrapOrchestrator(backend, context)

        outcome = await orchestrator.run(build_consul_vault_plan(context))

        stored = await orchestrator.secrets.get(
            "consul/data/secret/enterpriselicense", "enterpriselicense"
        )
        assert stored.get_secret_value() == TEST_LICENSE.encode()
        assert outcome.values.to_helm_values()["global.enterpriseLicense.secretKey"] == (
            "enterpriselicense"
        )

    @pytest.mark.asyncio
    async def test_tls_disabled_run(self, backend: InMemorySecretsBackend) -> None:
        context = make_context(tls_enabled=False, enable_auto_encrypt=False)

        outcome = await BootstrapOrchestrator(backend, context).run(
            build_consul_vault_plan(context)
        )

        assert "pki" not in backend.mounts()
        values = outcome.values.to_helm_values()
        assert values["global.tls.enabled"] == "false"
        assert "server.serverCert.secretName" not in values


class TestBootstrapEndToEnd:
    """A completed bootstrap is usable by a separate process."""

    @pytest.mark.asyncio
    async def test_stored_state_serves_a_server_pod(
        self,
        backend: InMemorySecretsBackend,
        orchestrator: BootstrapOrchestrator,
        plan: ModelBootstrapPlan,
    ) -> None:
        await orchestrator.run(plan)

        gossip = await orchestrator.secrets.get(GOSSIP, "gossip")
        assert len(base64.b64decode(gossip.get_secret_value())) == 32
        server = await orchestrator.binder.get_binding("consul-server")
        assert "consul-connect-ca" in server.policies

        leaf = await PKIProvisioner(backend).issue_leaf(
            "dc1/connect_inter", "consul-server", "server.dc1.consul", 600
        )

        assert leaf.issuer.chain_mount_ids() == ("dc1/connect_inter", "connect_root")
        certificate = x509.load_pem_x509_certificate(leaf.certificate.encode())
        intermediate, root = (
            x509.load_pem_x509_certificate(pem.encode()) for pem in leaf.ca_chain
        )
        certificate.verify_directly_issued_by(intermediate)
        intermediate.verify_directly_issued_by(root)
        root.verify_directly_issued_by(root)
        common_name = certificate.subject.get_attributes_for_oid(NameOID.COMMON_NAME)
        assert common_name[0].value == "server.dc1.consul"


class TestIdempotency:
    """Test that re-running converges without rewriting."""

    @pytest.mark.asyncio
    async def test_rerun_writes_nothing(
        self,
        backend: InMemorySecretsBackend,
        context: ModelBootstrapContext,
        plan: ModelBootstrapPlan,
    ) -> None:
        orchestrator = BootstrapOrchestrator(backend, context)
        first = await orchestrator.run(plan)
        gossip = await orchestrator.secrets.get(GOSSIP, "gossip")
        backend.writes.clear()

        second = await BootstrapOrchestrator(backend, context).run(plan)

        assert backend.writes == []
        assert second.values == first.values
        assert [n.certificate for n in second.nodes] == [n.certificate for n in first.nodes]
        assert await orchestrator.secrets.get(GOSSIP, "gossip") == gossip
        assert backend.kv_version("consul", "secret/gossip") == 1


class TestStageErrors:
    """Test failure reporting and resumption."""

    @pytest.mark.asyncio
    async def test_transient_failure_is_retryable(
        self,
        orchestrator: BootstrapOrchestrator,
        backend: InMemorySecretsBackend,
        plan: ModelBootstrapPlan,
    ) -> None:
        cause = BackendUnavailableError("Vault sealed")
        backend.fail_next("kv.write", cause)

        with pytest.raises(BootstrapStageError) as exc_info:
            await orchestrator.run(plan)

        error = exc_info.value
        assert error.stage is EnumBootstrapStage.SECRETS_WRITTEN
        assert error.last_completed_stage is EnumBootstrapStage.INTERMEDIATE_PROVISIONED
        assert error.retryable is True
        assert error.cause is cause
        assert error.__cause__ is cause
        assert error.diagnostics is not None
        assert error.diagnostics.ca_mounts == ("pki", "connect_root", "dc1/connect_inter")
        assert error.diagnostics.error == "BackendUnavailableError: Vault sealed"

    @pytest.mark.asyncio
    async def test_rerun_after_transient_failure_completes(
        self,
        orchestrator: BootstrapOrchestrator,
        backend: InMemorySecretsBackend,
        plan: ModelBootstrapPlan,
    ) -> None:
        backend.fail_next("pki.write_role", BackendUnavailableError("connection reset"))
        with pytest.raises(BootstrapStageError):
            await orchestrator.run(plan)

        outcome = await orchestrator.run(plan)

        assert outcome.stage is EnumBootstrapStage.DONE

    @pytest.mark.asyncio
    async def test_permission_denied_is_fatal(
        self,
        orchestrator: BootstrapOrchestrator,
        backend: InMemorySecretsBackend,
        plan: ModelBootstrapPlan,
    ) -> None:
        backend.deny("connect_root")

        with pytest.raises(BootstrapStageError) as exc_info:
            await orchestrator.run(plan)

        error = exc_info.value
        assert error.stage is EnumBootstrapStage.ROOT_PROVISIONED
        assert error.last_completed_stage is EnumBootstrapStage.ROLES_BINDABLE
        assert isinstance(error.cause, PermissionDeniedError)
        assert error.retryable is False

    @pytest.mark.asyncio
    async def test_intermediate_without_root_is_ordering_violation(
        self, orchestrator: BootstrapOrchestrator, plan: ModelBootstrapPlan
    ) -> None:
        without_connect_root = plan.model_copy(
            update={
                "root_cas": tuple(
                    ca for ca in plan.root_cas if ca.mount_id != "connect_root"
                )
            }
        )

        with pytest.raises(BootstrapStageError) as exc_info:
            await orchestrator.run(without_connect_root)

        assert exc_info.value.stage is EnumBootstrapStage.INTERMEDIATE_PROVISIONED
        assert isinstance(exc_info.value.cause, OrderingViolationError)

    @pytest.mark.asyncio
    async def test_unavailable_backend_fails_first_stage(
        self,
        orchestrator: BootstrapOrchestrator,
        backend: InMemorySecretsBackend,
        plan: ModelBootstrapPlan,
    ) -> None:
        backend.unavailable = True

        with pytest.raises(BootstrapStageError) as exc_info:
            await orchestrator.run(plan)

        assert exc_info.value.stage is EnumBootstrapStage.POLICIES_WRITTEN
        assert exc_info.value.last_completed_stage is EnumBootstrapStage.NOT_STARTED
        assert exc_info.value.retryable is True


class TestScopeAndRendering:
    @pytest.mark.asyncio
    async def test_scope_releases_everything(
        self,
        orchestrator: BootstrapOrchestrator,
        backend: InMemorySecretsBackend,
        plan: ModelBootstrapPlan,
    ) -> None:
        async with ResourceScope() as scope:
            await orchestrator.run(plan, scope=scope)

            assert {handle.kind for handle in scope.handles} == {
                "policy",
                "auth_method",
                "auth_role",
                "pki_mount",
                "kv_mount",
                "kv_secret",
            }

        assert scope.release_failures == []
        assert backend.mounts() == {}
        assert await backend.policy_read("consul-gossip") is None
        assert await backend.kubernetes_role_read("kubernetes", "consul-server") is None

    @pytest.mark.asyncio
    async def test_render_values_is_read_only(
        self,
        orchestrator: BootstrapOrchestrator,
        backend: InMemorySecretsBackend,
        context: ModelBootstrapContext,
        plan: ModelBootstrapPlan,
    ) -> None:
        outcome = await orchestrator.run(plan)
        backend.writes.clear()

        values = await BootstrapOrchestrator(backend, context).render_values(plan)

        assert values == outcome.values
        assert backend.writes == []

    @pytest.mark.asyncio
    async def test_render_values_before_bootstrap(
        self, orchestrator: BootstrapOrchestrator, plan: ModelBootstrapPlan
    ) -> None:
        with pytest.raises(MissingSecretError) as exc_info:
            await orchestrator.render_values(plan)

        assert EnumMeshFeature.GOSSIP_ENCRYPTION.value in exc_info.value.features
