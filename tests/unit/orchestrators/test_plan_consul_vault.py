# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Unit tests for the default Consul on Vault bootstrap plan."""

from __future__ import annotations

import base64
import json

from meshboot.enums import EnumMeshFeature
from meshboot.models import ModelBootstrapPlan
from meshboot.orchestrators import build_consul_vault_plan
from meshboot.orchestrators.plan_consul_vault import (
    generate_gossip_key,
    server_cert_role_name,
    snapshot_agent_config,
)
from tests.helpers import make_context, make_enterprise_context


def _bindings(plan: ModelBootstrapPlan) -> dict[str, tuple[str, ...]]:
    return {binding.role_name: binding.policies for binding in plan.role_bindings}


class TestBuildConsulVaultPlan:
    """Test what the default plan provisions for each flag combination."""

    def test_default_plan(self, plan: ModelBootstrapPlan) -> None:
        assert [ca.mount_id for ca in plan.root_cas] == ["pki", "connect_root"]
        assert [ca.mount_id for ca in plan.intermediate_cas] == ["dc1/connect_inter"]
        assert plan.intermediate_cas[0].parent_mount_id == "connect_root"
        assert [role.issue_path for role in plan.pki_roles] == [
            "pki/issue/consul-server-dc1",
            "dc1/connect_inter/issue/consul-server",
        ]
        assert {policy.name for policy in plan.policies} == {
            "consul-gossip",
            "consul-connect-ca",
            "consul-server",
            "consul-ca",
            "snapshot-agent-config",
        }
        assert _bindings(plan) == {
            "consul-server": ("consul-gossip", "consul-connect-ca", "consul-server"),
            "consul-client": ("consul-gossip", "snapshot-agent-config"),
            "consul-ca": ("consul-ca",),
        }
        assert [s.field for s in plan.secrets] == ["gossip", "snapshotagentconfig"]
        assert plan.kv_mounts == ("consul",)
        assert plan.tls_ca_mount == "pki"
        assert plan.server_cert_role == "consul-server-dc1"

    def test_every_bound_policy_is_planned(self, plan: ModelBootstrapPlan) -> None:
        defined = {policy.name for policy in plan.policies}

        for policies in _bindings(plan).values():
            assert set(policies) <= defined

    def test_ca_role_accepts_any_service_account(self, plan: ModelBootstrapPlan) -> None:
        ca_binding = next(b for b in plan.role_bindings if b.role_name == "consul-ca")

        assert ca_binding.identity_selector.service_account == "*"

    def test_server_policy_matches_server_cert_role(self, plan: ModelBootstrapPlan) -> None:
        server = next(p for p in plan.policies if p.name == "consul-server")

        assert server.grants() == {"pki/issue/consul-server-dc1": ["create", "update"]}

    def test_tls_disabled_plan(self) -> None:
        plan = build_consul_vault_plan(
            make_context(tls_enabled=False, enable_auto_encrypt=False)
        )

        assert [ca.mount_id for ca in plan.root_cas] == ["connect_root"]
        assert [role.mount_id for role in plan.pki_roles] == ["dc1/connect_inter"]
        assert plan.tls_ca_mount is None
        assert plan.server_cert_role is None

    def test_enterprise_plan_adds_license(self) -> None:
        plan = build_consul_vault_plan(make_enterprise_context())

        license_secret = next(
            s for s in plan.secrets if s.feature is EnumMeshFeature.ENTERPRISE_LICENSE
        )
        assert license_secret.path == "consul/data/secret/enterpriselicense"
        assert license_secret.field == "enterpriselicense"
        assert "enterprise-license" in _bindings(plan)["consul-server"]
        assert "enterprise-license" in _bindings(plan)["consul-client"]

    def test_snapshot_agent_disabled(self) -> None:
        plan = build_consul_vault_plan(make_context(snapshot_agent_enabled=False))

        assert [s.field for s in plan.secrets] == ["gossip"]
        assert _bindings(plan)["consul-client"] == ("consul-gossip",)

    def test_datacenter_in_paths(self) -> None:
        context = make_context(datacenter="dc2")
        plan = build_consul_vault_plan(context)

        assert server_cert_role_name(context) == "consul-server-dc2"
        assert plan.connect_intermediate_mount == "dc2/connect_inter"


class TestPlanHelpers:
    def test_gossip_key_is_32_bytes(self) -> None:
        assert len(base64.b64decode(generate_gossip_key())) == 32

    def test_gossip_keys_differ(self) -> None:
        assert generate_gossip_key() != generate_gossip_key()

    def test_snapshot_agent_config_is_json(self) -> None:
        config = json.loads(snapshot_agent_config())

        assert config["snapshot_agent"]["snapshot"]["interval"] == "1m"
