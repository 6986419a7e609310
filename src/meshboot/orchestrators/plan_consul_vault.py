# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Default plan for a Consul datacenter backed by Vault.

The plan provisions, per datacenter:

    - KV v2 mount ``consul`` holding gossip, snapshot agent and license secrets
    - PKI mount ``pki`` with the server TLS CA and role ``consul-server-<dc>``
    - PKI mounts ``connect_root`` and ``<dc>/connect_inter`` for the service
      mesh identity CA, plus a ``consul-server`` leaf role on the intermediate
    - Policies and Kubernetes auth roles for servers, clients and the CA reader
"""

from __future__ import annotations

import base64
import json
import secrets

from meshboot.enums import EnumMeshFeature
from meshboot.models.model_auth_role_binding import ModelAuthRoleBinding
from meshboot.models.model_bootstrap_context import ModelBootstrapContext
from meshboot.models.model_bootstrap_plan import ModelBootstrapPlan
from meshboot.models.model_identity_selector import ModelIdentitySelector
from meshboot.models.model_pki_role import ModelPKIRole
from meshboot.models.model_planned_ca import ModelPlannedCA
from meshboot.models.model_planned_secret import ModelPlannedSecret
from meshboot.models.model_policy_document import ModelPolicyDocument
from meshboot.services.service_mesh_config_mapper import (
    CONSUL_CA_ROLE,
    CONSUL_CLIENT_ROLE,
    CONSUL_SERVER_ROLE,
    MeshConfigMapper,
)

TLS_CA_MOUNT = "pki"
TLS_CA_COMMON_NAME = "Consul CA"
CONNECT_ROOT_COMMON_NAME = "Consul Connect Root CA"
CONNECT_INTERMEDIATE_COMMON_NAME = "Consul Connect Intermediate CA"
CONNECT_LEAF_ROLE = "consul-server"

ROOT_CA_TTL_SECONDS = 87600 * 3600
INTERMEDIATE_CA_TTL_SECONDS = 8760 * 3600
SERVER_CERT_MAX_TTL_SECONDS = 3600
CONNECT_LEAF_MAX_TTL_SECONDS = 72 * 3600

POLICY_GOSSIP = "consul-gossip"
POLICY_CONNECT_CA = "consul-connect-ca"
POLICY_SERVER = "consul-server"
POLICY_CA = "consul-ca"
POLICY_SNAPSHOT_AGENT = "snapshot-agent-config"
POLICY_LICENSE = "enterprise-license"

_MOUNT_CAPABILITIES = ("create", "read", "update", "delete", "list")


def generate_gossip_key() -> bytes:
    """Return a fresh base64 encoded 32 byte gossip encryption key."""
    return base64.b64encode(secrets.token_bytes(32))


def snapshot_agent_config() -> str:
    """Return the snapshot agent configuration stored in KV."""
    return json.dumps(
        {
            "snapshot_agent": {
                "log": {
                    "level": "INFO",
                    "enable_syslog": False,
                    "syslog_facility": "LOCAL0",
                },
                "snapshot": {
                    "interval": "1m",
                    "retain": 1,
                    "stale": False,
                    "service": "consul-snapshot",
                    "deregister_after": "8h",
                    "lock_key": "consul-snapshot/lock",
                    "max_failures": 3,
                    "local_scratch_path": "",
                },
                "local_storage": {"path": "."},
            }
        },
        sort_keys=True,
    )


def server_cert_role_name(context: ModelBootstrapContext) -> str:
    return f"consul-server-{context.datacenter}"


def _kv_path(context: ModelBootstrapContext, name: str) -> str:
    return f"{context.kv_mount}/data/secret/{name}"


def _policies(context: ModelBootstrapContext) -> list[ModelPolicyDocument]:
    root = context.connect_root_mount
    intermediate = context.connect_intermediate_mount
    policies = [
        ModelPolicyDocument.from_grants(
            POLICY_GOSSIP, [(_kv_path(context, "gossip"), ["read"])]
        ),
        ModelPolicyDocument.from_grants(
            POLICY_CONNECT_CA,
            [
                ("/sys/mounts", ["read"]),
                (f"/sys/mounts/{root}", _MOUNT_CAPABILITIES),
                (f"/sys/mounts/{intermediate}", _MOUNT_CAPABILITIES),
                (f"/{root}/*", _MOUNT_CAPABILITIES),
                (f"/{intermediate}/*", _MOUNT_CAPABILITIES),
                ("auth/token/renew-self", ["update"]),
                ("auth/token/lookup-self", ["read"]),
            ],
        ),
        ModelPolicyDocument.from_grants(
            POLICY_SERVER,
            [
                (
                    f"{TLS_CA_MOUNT}/issue/{server_cert_role_name(context)}",
                    ["create", "update"],
                )
            ],
        ),
        ModelPolicyDocument.from_grants(
            POLICY_CA, [(f"{TLS_CA_MOUNT}/cert/ca", ["read"])]
        ),
    ]
    if context.snapshot_agent_enabled:
        policies.append(
            ModelPolicyDocument.from_grants(
                POLICY_SNAPSHOT_AGENT,
                [(_kv_path(context, "snapshotagentconfig"), ["read"])],
            )
        )
    if context.enable_enterprise:
        policies.append(
            ModelPolicyDocument.from_grants(
                POLICY_LICENSE, [(_kv_path(context, "enterpriselicense"), ["read"])]
            )
        )
    return policies


def _role_bindings(context: ModelBootstrapContext) -> list[ModelAuthRoleBinding]:
    license_policies = [POLICY_LICENSE] if context.enable_enterprise else []
    client_policies = [POLICY_GOSSIP]
    if context.snapshot_agent_enabled:
        client_policies.append(POLICY_SNAPSHOT_AGENT)
    return [
        ModelAuthRoleBinding(
            role_name=CONSUL_SERVER_ROLE,
            identity_selector=ModelIdentitySelector(
                namespace=context.namespace,
                service_account=context.server_service_account,
            ),
            policies=(POLICY_GOSSIP, POLICY_CONNECT_CA, POLICY_SERVER, *license_policies),
        ),
        ModelAuthRoleBinding(
            role_name=CONSUL_CLIENT_ROLE,
            identity_selector=ModelIdentitySelector(
                namespace=context.namespace,
                service_account=context.client_service_account,
            ),
            policies=(*client_policies, *license_policies),
        ),
        ModelAuthRoleBinding(
            role_name=CONSUL_CA_ROLE,
            identity_selector=ModelIdentitySelector(
                namespace=context.namespace, service_account="*"
            ),
            policies=(POLICY_CA,),
        ),
    ]


def _secrets(context: ModelBootstrapContext) -> list[ModelPlannedSecret]:
    planned = [
        ModelPlannedSecret(
            path=_kv_path(context, "gossip"),
            field="gossip",
            feature=EnumMeshFeature.GOSSIP_ENCRYPTION,
            generator=generate_gossip_key,
        )
    ]
    if context.snapshot_agent_enabled:
        planned.append(
            ModelPlannedSecret(
                path=_kv_path(context, "snapshotagentconfig"),
                field="snapshotagentconfig",
                feature=EnumMeshFeature.SNAPSHOT_AGENT,
                value=snapshot_agent_config().encode("utf-8"),
            )
        )
    if context.enable_enterprise and context.enterprise_license is not None:
        planned.append(
            ModelPlannedSecret(
                path=_kv_path(context, "enterpriselicense"),
                field="enterpriselicense",
                feature=EnumMeshFeature.ENTERPRISE_LICENSE,
                value=context.enterprise_license.get_secret_value().encode("utf-8"),
            )
        )
    return planned


def build_consul_vault_plan(context: ModelBootstrapContext) -> ModelBootstrapPlan:
    """Return the bootstrap plan for one Consul datacenter.

    The server TLS CA and its role are only planned when TLS is enabled;
    the snapshot agent and license secrets follow their feature flags.
    """
    dc = context.datacenter
    root_cas = [
        ModelPlannedCA(
            mount_id=context.connect_root_mount,
            common_name=CONNECT_ROOT_COMMON_NAME,
            ttl_seconds=ROOT_CA_TTL_SECONDS,
        )
    ]
    pki_roles = [
        ModelPKIRole(
            mount_id=context.connect_intermediate_mount,
            name=CONNECT_LEAF_ROLE,
            allowed_domains=(f"{dc}.consul",),
            max_ttl_seconds=CONNECT_LEAF_MAX_TTL_SECONDS,
        )
    ]
    if context.tls_enabled:
        root_cas.insert(
            0,
            ModelPlannedCA(
                mount_id=TLS_CA_MOUNT,
                common_name=TLS_CA_COMMON_NAME,
                ttl_seconds=ROOT_CA_TTL_SECONDS,
            ),
        )
        pki_roles.insert(
            0,
            ModelPKIRole(
                mount_id=TLS_CA_MOUNT,
                name=server_cert_role_name(context),
                allowed_domains=(
                    f"{dc}.consul",
                    context.server_service_account,
                    f".{context.namespace}",
                    f".{context.namespace}.svc",
                ),
                max_ttl_seconds=SERVER_CERT_MAX_TTL_SECONDS,
            ),
        )

    return ModelBootstrapPlan(
        policies=tuple(_policies(context)),
        role_bindings=tuple(_role_bindings(context)),
        root_cas=tuple(root_cas),
        intermediate_cas=(
            ModelPlannedCA(
                mount_id=context.connect_intermediate_mount,
                common_name=CONNECT_INTERMEDIATE_COMMON_NAME,
                ttl_seconds=INTERMEDIATE_CA_TTL_SECONDS,
                parent_mount_id=context.connect_root_mount,
            ),
        ),
        pki_roles=tuple(pki_roles),
        secrets=tuple(_secrets(context)),
        features=MeshConfigMapper.requested_features(context),
        kv_mounts=(context.kv_mount,),
        tls_ca_mount=TLS_CA_MOUNT if context.tls_enabled else None,
        server_cert_role=server_cert_role_name(context) if context.tls_enabled else None,
        connect_root_mount=context.connect_root_mount,
        connect_intermediate_mount=context.connect_intermediate_mount,
    )


__all__: list[str] = [
    "build_consul_vault_plan",
    "generate_gossip_key",
    "server_cert_role_name",
    "snapshot_agent_config",
]
