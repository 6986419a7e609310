# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""PKI Provisioner.

Creates the CA hierarchy in PKI secrets engine mounts and issues leaf
certificates through registered roles.

Ordering:
    A CA can only be created under a parent mount that already holds a CA,
    and a leaf can only be issued by a mount that holds a CA. Violations
    raise OrderingViolationError before anything is written.

Idempotency:
    create_root and create_intermediate raise AlreadyExistsError when the
    mount already holds a CA. Idempotent callers catch it and call
    read_node. register_role skips the write when the stored role already
    matches.

TTL Clamping:
    A leaf TTL above the role's max_ttl is lowered to max_ttl before the
    request is sent. The returned certificate reports both values.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from uuid import UUID

from cryptography import x509
from cryptography.exceptions import InvalidSignature
from pydantic import SecretStr

from meshboot.enums import EnumCARole, EnumInfraTransportType
from meshboot.errors import (
    AlreadyExistsError,
    ModelInfraErrorContext,
    OrderingViolationError,
    UnknownRoleError,
)
from meshboot.models.model_ca_hierarchy_node import ModelCAHierarchyNode
from meshboot.models.model_leaf_certificate import ModelLeafCertificate
from meshboot.models.model_pki_role import ModelPKIRole
from meshboot.utils.util_duration import parse_duration_seconds

if TYPE_CHECKING:
    from meshboot.protocols import ProtocolSecretsBackend
    from meshboot.runtime.resource_scope import ResourceScope

logger = logging.getLogger(__name__)


def _load(certificate_pem: str) -> x509.Certificate:
    return x509.load_pem_x509_certificate(certificate_pem.encode("ascii"))


def _issued_by(certificate: x509.Certificate, issuer: x509.Certificate) -> bool:
    if certificate.issuer != issuer.subject:
        return False
    try:
        certificate.verify_directly_issued_by(issuer)
    except (InvalidSignature, ValueError, TypeError):
        return False
    return True


def _is_self_issued(certificate_pem: str) -> bool:
    certificate = _load(certificate_pem)
    return _issued_by(certificate, certificate)


def _domains(value: object) -> tuple[str, ...]:
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, list | tuple):
        items = [str(item) for item in value]
    else:
        items = []
    return tuple(item.strip() for item in items if item.strip())


class PKIProvisioner:
    """Root, intermediate and leaf provisioning over a secrets backend.

    The provisioner remembers which parent mount each intermediate was
    created or read under. A fresh provisioner finds the parent of an
    intermediate by checking its signature against the CA of every PKI
    mount on the backend. Certificates are always re-read.
    """

    def __init__(self, backend: ProtocolSecretsBackend) -> None:
        self._backend = backend
        self._parents: dict[str, str] = {}

    def _context(
        self, operation: str, mount_id: str, correlation_id: UUID | None
    ) -> ModelInfraErrorContext:
        return ModelInfraErrorContext(
            transport_type=EnumInfraTransportType.VAULT,
            operation=operation,
            target_name=mount_id,
            correlation_id=correlation_id,
        )

    async def _ensure_mount(
        self,
        mount_id: str,
        ttl_seconds: int,
        scope: ResourceScope | None,
        correlation_id: UUID | None,
    ) -> None:
        await self._backend.ensure_secrets_engine(
            mount_id,
            "pki",
            max_lease_ttl_seconds=ttl_seconds,
            correlation_id=correlation_id,
        )
        if scope is None or any(
            handle.kind == "pki_mount" and handle.identifier == mount_id
            for handle in scope.handles
        ):
            return

        async def release() -> None:
            await self.release_mount(mount_id, correlation_id)

        scope.register_release("pki_mount", mount_id, release)

    async def create_root(
        self,
        mount_id: str,
        common_name: str,
        ttl_seconds: int,
        scope: ResourceScope | None = None,
        correlation_id: UUID | None = None,
    ) -> ModelCAHierarchyNode:
        """Enable a PKI mount and generate an internal root CA in it.

        Raises:
            AlreadyExistsError: If the mount already holds a CA.
        """
        await self._ensure_mount(mount_id, ttl_seconds, scope, correlation_id)
        if await self._backend.pki_read_ca(mount_id, correlation_id):
            raise AlreadyExistsError(
                f"PKI mount '{mount_id}' already holds a CA",
                context=self._context("pki.create_root", mount_id, correlation_id),
                mount_id=mount_id,
            )

        certificate = await self._backend.pki_generate_root(
            mount_id, common_name, ttl_seconds, correlation_id
        )
        self._parents.pop(mount_id, None)
        logger.info(
            "Root CA created",
            extra={
                "mount_id": mount_id,
                "common_name": common_name,
                "ttl_seconds": ttl_seconds,
                "correlation_id": str(correlation_id) if correlation_id else None,
            },
        )
        return ModelCAHierarchyNode(
            mount_id=mount_id, certificate=certificate, role=EnumCARole.ROOT
        )

    async def create_intermediate(
        self,
        mount_id: str,
        parent_mount_id: str,
        common_name: str,
        ttl_seconds: int,
        scope: ResourceScope | None = None,
        correlation_id: UUID | None = None,
    ) -> ModelCAHierarchyNode:
        """Create an intermediate CA in mount_id signed by parent_mount_id.

        Raises:
            OrderingViolationError: If the parent mount holds no CA.
            AlreadyExistsError: If mount_id already holds a CA.
        """
        parent = await self.read_node(parent_mount_id, correlation_id=correlation_id)

        await self._ensure_mount(mount_id, ttl_seconds, scope, correlation_id)
        if await self._backend.pki_read_ca(mount_id, correlation_id):
            self._parents[mount_id] = parent_mount_id
            raise AlreadyExistsError(
                f"PKI mount '{mount_id}' already holds a CA",
                context=self._context(
                    "pki.create_intermediate", mount_id, correlation_id
                ),
                mount_id=mount_id,
            )

        csr = await self._backend.pki_generate_intermediate_csr(
            mount_id, common_name, correlation_id
        )
        certificate = await self._backend.pki_sign_intermediate(
            parent_mount_id, csr, common_name, ttl_seconds, correlation_id
        )
        await self._backend.pki_set_signed_intermediate(
            mount_id, certificate, correlation_id
        )
        self._parents[mount_id] = parent_mount_id
        logger.info(
            "Intermediate CA created",
            extra={
                "mount_id": mount_id,
                "parent_mount_id": parent_mount_id,
                "common_name": common_name,
                "ttl_seconds": ttl_seconds,
                "correlation_id": str(correlation_id) if correlation_id else None,
            },
        )
        return ModelCAHierarchyNode(
            mount_id=mount_id,
            parent=parent,
            certificate=certificate,
            role=EnumCARole.INTERMEDIATE,
        )

    async def read_node(
        self,
        mount_id: str,
        parent_mount_id: str | None = None,
        correlation_id: UUID | None = None,
    ) -> ModelCAHierarchyNode:
        """Re-read a provisioned CA node and its ancestors.

        Args:
            mount_id: PKI mount to read
            parent_mount_id: Parent mount of an intermediate. Defaults to the
                parent recorded when the node was created or last read, and
                otherwise to the PKI mount whose CA signed the intermediate.

        Raises:
            OrderingViolationError: If mount_id (or an ancestor) holds no CA,
                or no PKI mount holds the CA that signed an intermediate.
        """
        certificate = await self._backend.pki_read_ca(mount_id, correlation_id)
        if not certificate:
            raise OrderingViolationError(
                f"PKI mount '{mount_id}' holds no CA",
                context=self._context("pki.read_node", mount_id, correlation_id),
            )

        if _is_self_issued(certificate):
            return ModelCAHierarchyNode(
                mount_id=mount_id, certificate=certificate, role=EnumCARole.ROOT
            )

        parent_mount_id = parent_mount_id or self._parents.get(mount_id)
        if parent_mount_id is None:
            parent_mount_id = await self._find_parent_mount(
                mount_id, certificate, correlation_id
            )
        parent = await self.read_node(parent_mount_id, correlation_id=correlation_id)
        self._parents[mount_id] = parent_mount_id
        return ModelCAHierarchyNode(
            mount_id=mount_id,
            parent=parent,
            certificate=certificate,
            role=EnumCARole.INTERMEDIATE,
        )

    async def _find_parent_mount(
        self, mount_id: str, certificate_pem: str, correlation_id: UUID | None
    ) -> str:
        certificate = _load(certificate_pem)
        mounts = await self._backend.list_secrets_engines(correlation_id)
        for candidate, engine_type in sorted(mounts.items()):
            if engine_type != "pki" or candidate == mount_id:
                continue
            candidate_pem = await self._backend.pki_read_ca(candidate, correlation_id)
            if candidate_pem and _issued_by(certificate, _load(candidate_pem)):
                logger.debug(
                    "Parent CA mount resolved from backend",
                    extra={
                        "mount_id": mount_id,
                        "parent_mount_id": candidate,
                        "correlation_id": str(correlation_id) if correlation_id else None,
                    },
                )
                return candidate
        raise OrderingViolationError(
            f"Parent CA of intermediate '{mount_id}' not found among PKI mounts",
            context=self._context("pki.read_node", mount_id, correlation_id),
        )

    async def register_role(
        self,
        role: ModelPKIRole,
        correlation_id: UUID | None = None,
    ) -> ModelPKIRole:
        """Create or update a leaf-issuing role under its mount.

        Raises:
            OrderingViolationError: If the mount holds no CA.
        """
        if not await self._backend.pki_read_ca(role.mount_id, correlation_id):
            raise OrderingViolationError(
                f"Cannot register role '{role.name}': PKI mount "
                f"'{role.mount_id}' holds no CA",
                context=self._context("pki.register_role", role.mount_id, correlation_id),
            )

        existing = await self._backend.pki_read_role(
            role.mount_id, role.name, correlation_id
        )
        if existing is not None and self._role_matches(existing, role):
            logger.debug(
                "PKI role unchanged, skipping write",
                extra={
                    "mount_id": role.mount_id,
                    "role_name": role.name,
                    "correlation_id": str(correlation_id) if correlation_id else None,
                },
            )
            return role

        await self._backend.pki_write_role(
            role.mount_id, role.name, role.to_vault_params(), correlation_id
        )
        logger.info(
            "PKI role written",
            extra={
                "mount_id": role.mount_id,
                "role_name": role.name,
                "max_ttl_seconds": role.max_ttl_seconds,
                "correlation_id": str(correlation_id) if correlation_id else None,
            },
        )
        return role

    @staticmethod
    def _role_matches(existing: dict[str, object], role: ModelPKIRole) -> bool:
        return (
            _domains(existing.get("allowed_domains")) == role.allowed_domains
            and existing.get("allow_subdomains") == role.allow_subdomains
            and existing.get("allow_bare_domains") == role.allow_bare_domains
            and existing.get("allow_localhost") == role.allow_localhost
            and existing.get("generate_lease") == role.generate_lease
            and parse_duration_seconds(existing.get("max_ttl"))  # type: ignore[arg-type]
            == role.max_ttl_seconds
        )

    async def issue_leaf(
        self,
        issuer_mount_id: str,
        role_name: str,
        common_name: str,
        ttl_seconds: int,
        correlation_id: UUID | None = None,
    ) -> ModelLeafCertificate:
        """Issue a leaf certificate from issuer_mount_id through role_name.

        Raises:
            OrderingViolationError: If the issuer mount holds no CA.
            UnknownRoleError: If role_name is not registered under the issuer.
        """
        issuer = await self.read_node(issuer_mount_id, correlation_id=correlation_id)

        role = await self._backend.pki_read_role(
            issuer_mount_id, role_name, correlation_id
        )
        if role is None:
            raise UnknownRoleError(
                f"PKI role '{role_name}' is not registered under '{issuer_mount_id}'",
                context=self._context("pki.issue_leaf", issuer_mount_id, correlation_id),
                role_name=role_name,
            )

        max_ttl = parse_duration_seconds(role.get("max_ttl"))  # type: ignore[arg-type]
        effective_ttl = min(ttl_seconds, max_ttl) if max_ttl > 0 else ttl_seconds
        if effective_ttl < ttl_seconds:
            logger.debug(
                "Leaf TTL clamped to role maximum",
                extra={
                    "mount_id": issuer_mount_id,
                    "role_name": role_name,
                    "requested_ttl_seconds": ttl_seconds,
                    "ttl_seconds": effective_ttl,
                    "correlation_id": str(correlation_id) if correlation_id else None,
                },
            )

        issued = await self._backend.pki_issue(
            issuer_mount_id, role_name, common_name, effective_ttl, correlation_id
        )
        chain = tuple(str(pem) for pem in issued.get("ca_chain") or ())  # type: ignore[union-attr]
        if not chain:
            chain = self._node_chain(issuer)

        logger.info(
            "Leaf certificate issued",
            extra={
                "mount_id": issuer_mount_id,
                "role_name": role_name,
                "common_name": common_name,
                "ttl_seconds": effective_ttl,
                "serial_number": issued["serial_number"],
                "correlation_id": str(correlation_id) if correlation_id else None,
            },
        )
        return ModelLeafCertificate(
            issuer=issuer,
            role_name=role_name,
            common_name=common_name,
            requested_ttl_seconds=ttl_seconds,
            ttl_seconds=effective_ttl,
            certificate=str(issued["certificate"]),
            issuing_ca=str(issued["issuing_ca"]),
            ca_chain=chain,
            private_key=SecretStr(str(issued["private_key"])),
            serial_number=str(issued["serial_number"]),
        )

    @staticmethod
    def _node_chain(node: ModelCAHierarchyNode) -> tuple[str, ...]:
        chain: list[str] = []
        current: ModelCAHierarchyNode | None = node
        while current is not None:
            chain.append(current.certificate)
            current = current.parent
        return tuple(chain)

    async def release_mount(
        self, mount_id: str, correlation_id: UUID | None = None
    ) -> None:
        """Disable the PKI engine at mount_id, dropping its CA and roles."""
        await self._backend.disable_secrets_engine(mount_id, correlation_id)
        self._parents.pop(mount_id, None)
        logger.info(
            "PKI mount released",
            extra={
                "mount_id": mount_id,
                "correlation_id": str(correlation_id) if correlation_id else None,
            },
        )


__all__: list[str] = ["PKIProvisioner"]
