# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Leaf certificate issued from a CA node."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from meshboot.models.model_ca_hierarchy_node import ModelCAHierarchyNode


class ModelLeafCertificate(BaseModel):
    """Certificate and key issued through a PKI role.

    Attributes:
        issuer: CA node that signed the certificate
        role_name: PKI role used for issuance
        common_name: Subject common name
        requested_ttl_seconds: TTL the caller asked for
        ttl_seconds: TTL actually applied after issuer-side clamping
        certificate: PEM leaf certificate
        issuing_ca: PEM certificate of the issuer
        ca_chain: PEM certificates from the issuer up to the root
        private_key: PEM private key
        serial_number: Certificate serial number as reported by the backend
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    issuer: ModelCAHierarchyNode
    role_name: str
    common_name: str
    requested_ttl_seconds: int = Field(ge=1)
    ttl_seconds: int = Field(ge=1)
    certificate: str
    issuing_ca: str
    ca_chain: tuple[str, ...] = ()
    private_key: SecretStr
    serial_number: str

    @property
    def ttl_clamped(self) -> bool:
        """Return True if the issuer lowered the requested TTL."""
        return self.ttl_seconds < self.requested_ttl_seconds


__all__: list[str] = ["ModelLeafCertificate"]
