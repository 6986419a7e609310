# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Typed mesh (Helm) configuration.

The values are validated as a whole before rendering, so an inconsistent
combination (auto-encrypt without TLS, TLS without a CA secret, a snapshot
agent without its config) fails here instead of inside the cluster.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from meshboot.models.model_mesh_secret_ref import ModelMeshSecretRef
from meshboot.models.model_mesh_vault_values import ModelMeshVaultValues


def _flag(value: bool) -> str:
    return "true" if value else "false"


class ModelMeshValues(BaseModel):
    """Mesh configuration handed to the deployment step.

    Attributes:
        vault: Secrets backend section
        manage_system_acls: Let the mesh bootstrap its ACL system
        tls_enabled: Enable TLS on agents
        enable_auto_encrypt: Distribute client certificates automatically
        tls_ca_cert: Vault path of the TLS CA certificate
        server_cert: Vault path issuing server certificates
        gossip_encryption: Gossip key location
        snapshot_agent: Snapshot agent config location, None when disabled
        enterprise_license: License location, None when not enterprise
        server_extra_volume: Kubernetes secret mounted into servers
        connect_inject_enabled: Enable sidecar injection
        connect_inject_replicas: Injector replica count
        controller_enabled: Enable the CRD controller
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    vault: ModelMeshVaultValues
    manage_system_acls: bool = True
    tls_enabled: bool = True
    enable_auto_encrypt: bool = False
    tls_ca_cert: ModelMeshSecretRef | None = None
    server_cert: ModelMeshSecretRef | None = None
    gossip_encryption: ModelMeshSecretRef
    snapshot_agent: ModelMeshSecretRef | None = None
    enterprise_license: ModelMeshSecretRef | None = None
    server_extra_volume: str | None = None
    connect_inject_enabled: bool = True
    connect_inject_replicas: int = Field(default=1, ge=1)
    controller_enabled: bool = True

    @model_validator(mode="after")
    def _check_tls(self) -> ModelMeshValues:
        if self.enable_auto_encrypt and not self.tls_enabled:
            raise ValueError("enable_auto_encrypt requires tls_enabled")
        if self.tls_enabled and (self.tls_ca_cert is None or self.server_cert is None):
            raise ValueError("tls_enabled requires tls_ca_cert and server_cert")
        return self

    def to_helm_values(self) -> dict[str, str]:
        """Flatten into ``--set`` style Helm values.

        Keys for disabled optional features are omitted entirely.
        """
        vault = self.vault
        values: dict[str, str] = {
            "global.secretsBackend.vault.enabled": _flag(vault.enabled),
            "global.secretsBackend.vault.consulServerRole": vault.consul_server_role,
            "global.secretsBackend.vault.consulClientRole": vault.consul_client_role,
            "global.secretsBackend.vault.consulCARole": vault.consul_ca_role,
            "global.secretsBackend.vault.ca.secretName": vault.ca.secret_name,
            "global.secretsBackend.vault.ca.secretKey": vault.ca.secret_key or "",
            "global.secretsBackend.vault.connectCA.address": vault.connect_ca.address,
            "global.secretsBackend.vault.connectCA.rootPKIPath": (
                vault.connect_ca.root_pki_path
            ),
            "global.secretsBackend.vault.connectCA.intermediatePKIPath": (
                vault.connect_ca.intermediate_pki_path
            ),
            "global.acls.manageSystemACLs": _flag(self.manage_system_acls),
            "global.tls.enabled": _flag(self.tls_enabled),
            "global.gossipEncryption.secretName": self.gossip_encryption.secret_name,
            "global.gossipEncryption.secretKey": self.gossip_encryption.secret_key or "",
            "connectInject.enabled": _flag(self.connect_inject_enabled),
            "connectInject.replicas": str(self.connect_inject_replicas),
            "controller.enabled": _flag(self.controller_enabled),
        }
        if self.tls_ca_cert is not None and self.server_cert is not None:
            values["global.tls.enableAutoEncrypt"] = _flag(self.enable_auto_encrypt)
            values["global.tls.caCert.secretName"] = self.tls_ca_cert.secret_name
            values["server.serverCert.secretName"] = self.server_cert.secret_name
        if self.server_extra_volume is not None:
            values["server.extraVolumes[0].type"] = "secret"
            values["server.extraVolumes[0].name"] = self.server_extra_volume
            values["server.extraVolumes[0].load"] = "false"
        if self.snapshot_agent is not None:
            values["client.snapshotAgent.enabled"] = "true"
            values["client.snapshotAgent.secretName"] = self.snapshot_agent.secret_name
            values["client.snapshotAgent.secretKey"] = (
                self.snapshot_agent.secret_key or ""
            )
        if self.enterprise_license is not None:
            values["global.enterpriseLicense.secretName"] = (
                self.enterprise_license.secret_name
            )
            values["global.enterpriseLicense.secretKey"] = (
                self.enterprise_license.secret_key or ""
            )
        return values


__all__: list[str] = ["ModelMeshValues"]
