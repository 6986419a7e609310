# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Immutable bootstrap context.

A single context value is passed into every component call instead of
suite-wide globals. It enumerates every recognized feature flag so the
mesh config mapper is the only place that turns flags into behavior.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, SecretStr, model_validator


class ModelBootstrapContext(BaseModel):
    """Configuration of one bootstrap + validation run.

    Attributes:
        datacenter: Consul datacenter name, used in PKI paths and domains
        release_name: Helm release name of the mesh
        namespace: Kubernetes namespace of the mesh and test workloads
        vault_release_name: Helm release name of the Vault cluster
        vault_address: Vault address as seen from inside the cluster
        kubernetes_host: Kubernetes API host Vault uses to review tokens
        kubernetes_auth_mount: Mount path of the Kubernetes auth method
        kv_mount: KV v2 mount holding mesh secrets
        enable_enterprise: Provision and wire the enterprise license
        enterprise_license: License text, required with enable_enterprise
        enable_transparent_proxy: Validate through transparent proxy
        manage_system_acls: Let the mesh bootstrap its own ACL system
        tls_enabled: Enable TLS and require server cert + CA secrets
        enable_auto_encrypt: Distribute client certs automatically (needs TLS)
        snapshot_agent_enabled: Provision snapshot agent configuration
        no_cleanup_on_failure: Keep provisioned state when a run fails
        validation_attempts: Connectivity check attempt budget
        validation_interval_seconds: Pause between connectivity attempts
        static_client_name: Source workload of the validation traffic
        static_server_name: Destination workload of the validation traffic
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    datacenter: str = Field(default="dc1", pattern=r"^[a-z0-9-]+$")
    release_name: str = Field(min_length=1)
    namespace: str = Field(default="default", min_length=1)
    vault_release_name: str = Field(min_length=1)
    vault_address: str = Field(min_length=1)
    kubernetes_host: str = "https://kubernetes.default.svc"
    kubernetes_auth_mount: str = "kubernetes"
    kv_mount: str = "consul"
    enable_enterprise: bool = False
    enterprise_license: SecretStr | None = None
    enable_transparent_proxy: bool = False
    manage_system_acls: bool = True
    tls_enabled: bool = True
    enable_auto_encrypt: bool = True
    snapshot_agent_enabled: bool = True
    no_cleanup_on_failure: bool = False
    validation_attempts: int = Field(default=30, ge=1)
    validation_interval_seconds: float = Field(default=2.0, gt=0.0)
    static_client_name: str = "static-client"
    static_server_name: str = "static-server"

    @model_validator(mode="after")
    def _check_flags(self) -> ModelBootstrapContext:
        if self.enable_enterprise and self.enterprise_license is None:
            raise ValueError("enable_enterprise requires enterprise_license")
        if self.enable_auto_encrypt and not self.tls_enabled:
            raise ValueError("enable_auto_encrypt requires tls_enabled")
        return self

    @property
    def vault_ca_secret_name(self) -> str:
        """Kubernetes secret holding the Vault server CA."""
        return f"{self.vault_release_name}-vault-server-tls"

    @property
    def server_service_account(self) -> str:
        return f"{self.release_name}-consul-server"

    @property
    def client_service_account(self) -> str:
        return f"{self.release_name}-consul-client"

    @property
    def connect_root_mount(self) -> str:
        return "connect_root"

    @property
    def connect_intermediate_mount(self) -> str:
        return f"{self.datacenter}/connect_inter"

    @property
    def validation_target(self) -> str:
        """URL the static client calls to reach the static server.

        With transparent proxy the client dials the service name directly;
        otherwise it goes through the explicit upstream listener.
        """
        if self.enable_transparent_proxy:
            return f"http://{self.static_server_name}"
        return "http://localhost:1234"


__all__: list[str] = ["ModelBootstrapContext"]
