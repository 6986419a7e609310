# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Declarative description of everything a bootstrap run provisions."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from meshboot.enums import EnumCARole, EnumMeshFeature
from meshboot.models.model_auth_role_binding import ModelAuthRoleBinding
from meshboot.models.model_pki_role import ModelPKIRole
from meshboot.models.model_planned_ca import ModelPlannedCA
from meshboot.models.model_planned_secret import ModelPlannedSecret
from meshboot.models.model_policy_document import ModelPolicyDocument


class ModelBootstrapPlan(BaseModel):
    """Policies, role bindings, CAs, PKI roles and secrets of one run.

    Attributes:
        policies: Policy documents written in POLICIES_WRITTEN
        role_bindings: Identity bindings written in ROLES_BINDABLE
        root_cas: Root CAs created in ROOT_PROVISIONED
        intermediate_cas: Intermediates created, in order, in INTERMEDIATE_PROVISIONED
        pki_roles: Leaf-issuing roles registered once their mounts hold a CA
        secrets: KV secrets written in SECRETS_WRITTEN
        features: Mesh features the configuration must wire
        kv_mounts: KV v2 mounts the secrets live in
        tls_ca_mount: PKI mount whose CA signs server TLS certificates
        server_cert_role: PKI role on tls_ca_mount issuing server certificates
        connect_root_mount: Root mount of the service mesh identity CA
        connect_intermediate_mount: Intermediate mount of the mesh identity CA
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    policies: tuple[ModelPolicyDocument, ...] = ()
    role_bindings: tuple[ModelAuthRoleBinding, ...] = ()
    root_cas: tuple[ModelPlannedCA, ...] = ()
    intermediate_cas: tuple[ModelPlannedCA, ...] = ()
    pki_roles: tuple[ModelPKIRole, ...] = ()
    secrets: tuple[ModelPlannedSecret, ...] = ()
    features: frozenset[EnumMeshFeature] = Field(default_factory=frozenset)
    kv_mounts: tuple[str, ...] = ()
    tls_ca_mount: str | None = None
    server_cert_role: str | None = None
    connect_root_mount: str | None = None
    connect_intermediate_mount: str | None = None

    @model_validator(mode="after")
    def _check_ca_roles(self) -> ModelBootstrapPlan:
        for planned in self.root_cas:
            if planned.role is not EnumCARole.ROOT:
                raise ValueError(f"Root CA '{planned.mount_id}' must not name a parent")
        for planned in self.intermediate_cas:
            if planned.role is not EnumCARole.INTERMEDIATE:
                raise ValueError(
                    f"Intermediate CA '{planned.mount_id}' must name a parent"
                )
        return self


__all__: list[str] = ["ModelBootstrapPlan"]
