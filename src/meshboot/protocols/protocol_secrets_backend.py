# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Protocol for the secrets backend the bootstrap services talk to.

The operations mirror the Vault HTTP API one to one (KV v2, sys/mounts,
PKI, sys/policies/acl, sys/auth and the Kubernetes auth method), so the
hvac-backed client is a thin adapter and the in-memory backend used in
tests behaves like a real server.

Error Contract:
    Implementations raise only meshboot errors:
        - BackendUnavailableError: transport, authentication or server failure
        - PermissionDeniedError: the token lacks a capability on the path
        - MeshBootstrapError: any other rejected request
    Reads of absent objects return None instead of raising.

Example:
    >>> class SecretRepository:
    ...     def __init__(self, backend: ProtocolSecretsBackend) -> None:
    ...         self._backend = backend
    ...
    ...     async def get(self, path: str, field: str) -> SecretBytes:
    ...         data = await self._backend.kv_read("consul", "secret/gossip")
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable
from uuid import UUID


@runtime_checkable
class ProtocolSecretsBackend(Protocol):
    """Async secrets backend operations.

    Every method accepts an optional correlation_id that implementations
    attach to logs and error context.
    """

    # KV v2

    async def kv_read(
        self, mount: str, path: str, correlation_id: UUID | None = None
    ) -> dict[str, str] | None:
        """Return the latest version of a KV v2 secret, or None if absent."""
        ...

    async def kv_write(
        self,
        mount: str,
        path: str,
        data: dict[str, str],
        correlation_id: UUID | None = None,
    ) -> None:
        """Write a new version of a KV v2 secret (whole field map)."""
        ...

    async def kv_delete(
        self, mount: str, path: str, correlation_id: UUID | None = None
    ) -> None:
        """Delete a KV v2 secret with all versions. Absent secrets are a no-op."""
        ...

    # sys/mounts

    async def ensure_secrets_engine(
        self,
        path: str,
        backend_type: str,
        max_lease_ttl_seconds: int | None = None,
        options: dict[str, str] | None = None,
        correlation_id: UUID | None = None,
    ) -> bool:
        """Enable a secrets engine at path unless one is mounted.

        Returns:
            True if the engine was enabled by this call.
        """
        ...

    async def list_secrets_engines(
        self, correlation_id: UUID | None = None
    ) -> dict[str, str]:
        """Return mounted secrets engines as path (no trailing slash) -> type."""
        ...

    async def disable_secrets_engine(
        self, path: str, correlation_id: UUID | None = None
    ) -> None:
        ...

    # PKI

    async def pki_read_ca(
        self, mount: str, correlation_id: UUID | None = None
    ) -> str | None:
        """Return the PEM CA certificate of a PKI mount, or None if it holds none."""
        ...

    async def pki_generate_root(
        self,
        mount: str,
        common_name: str,
        ttl_seconds: int,
        correlation_id: UUID | None = None,
    ) -> str:
        """Generate an internal root CA and return its PEM certificate."""
        ...

    async def pki_generate_intermediate_csr(
        self, mount: str, common_name: str, correlation_id: UUID | None = None
    ) -> str:
        """Generate an internal intermediate key and return the PEM CSR."""
        ...

    async def pki_sign_intermediate(
        self,
        parent_mount: str,
        csr: str,
        common_name: str,
        ttl_seconds: int,
        correlation_id: UUID | None = None,
    ) -> str:
        """Sign a CSR with the CA of parent_mount and return the PEM certificate."""
        ...

    async def pki_set_signed_intermediate(
        self, mount: str, certificate: str, correlation_id: UUID | None = None
    ) -> None:
        ...

    async def pki_write_role(
        self,
        mount: str,
        name: str,
        params: dict[str, object],
        correlation_id: UUID | None = None,
    ) -> None:
        ...

    async def pki_read_role(
        self, mount: str, name: str, correlation_id: UUID | None = None
    ) -> dict[str, object] | None:
        """Return role parameters with max_ttl normalized to integer seconds."""
        ...

    async def pki_issue(
        self,
        mount: str,
        role_name: str,
        common_name: str,
        ttl_seconds: int,
        correlation_id: UUID | None = None,
    ) -> dict[str, object]:
        """Issue a leaf certificate.

        Returns:
            Mapping with certificate, issuing_ca, ca_chain (list of PEM),
            private_key and serial_number.
        """
        ...

    # sys/policies/acl

    async def policy_write(
        self, name: str, rules: str, correlation_id: UUID | None = None
    ) -> None:
        ...

    async def policy_read(
        self, name: str, correlation_id: UUID | None = None
    ) -> str | None:
        """Return the policy rules text, or None if the policy does not exist."""
        ...

    async def policy_delete(
        self, name: str, correlation_id: UUID | None = None
    ) -> None:
        ...

    # sys/auth and auth/kubernetes

    async def ensure_auth_method(
        self, path: str, method_type: str, correlation_id: UUID | None = None
    ) -> bool:
        """Enable an auth method at path unless one is mounted.

        Returns:
            True if the method was enabled by this call.
        """
        ...

    async def disable_auth_method(
        self, path: str, correlation_id: UUID | None = None
    ) -> None:
        ...

    async def kubernetes_read_config(
        self, mount: str, correlation_id: UUID | None = None
    ) -> dict[str, object] | None:
        """Return the config of a Kubernetes auth mount, or None if unset."""
        ...

    async def kubernetes_configure(
        self,
        mount: str,
        kubernetes_host: str,
        correlation_id: UUID | None = None,
    ) -> None:
        ...

    async def kubernetes_role_write(
        self,
        mount: str,
        name: str,
        bound_service_account_names: list[str],
        bound_service_account_namespaces: list[str],
        policies: list[str],
        correlation_id: UUID | None = None,
    ) -> None:
        ...

    async def kubernetes_role_read(
        self, mount: str, name: str, correlation_id: UUID | None = None
    ) -> dict[str, list[str]] | None:
        """Return bound_service_account_names, bound_service_account_namespaces
        and policies of a role, or None if the role does not exist."""
        ...

    async def kubernetes_role_delete(
        self, mount: str, name: str, correlation_id: UUID | None = None
    ) -> None:
        ...


__all__ = ["ProtocolSecretsBackend"]
