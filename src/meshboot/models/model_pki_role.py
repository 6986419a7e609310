# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Leaf-issuing role registered under a PKI mount."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from meshboot.utils.util_duration import to_vault_duration


class ModelPKIRole(BaseModel):
    """Vault PKI role parameters.

    The role's max_ttl_seconds is the issuer-side TTL ceiling: leaf
    requests above it are clamped, not rejected.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    mount_id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    allowed_domains: tuple[str, ...] = ()
    allow_subdomains: bool = True
    allow_bare_domains: bool = True
    allow_localhost: bool = True
    generate_lease: bool = True
    max_ttl_seconds: int = Field(default=3600, ge=1)

    @property
    def issue_path(self) -> str:
        """Return the Vault path that issues certificates for this role."""
        return f"{self.mount_id}/issue/{self.name}"

    def to_vault_params(self) -> dict[str, object]:
        """Render role parameters for ``<mount>/roles/<name>``."""
        return {
            "allowed_domains": ",".join(self.allowed_domains),
            "allow_subdomains": self.allow_subdomains,
            "allow_bare_domains": self.allow_bare_domains,
            "allow_localhost": self.allow_localhost,
            "generate_lease": self.generate_lease,
            "max_ttl": to_vault_duration(self.max_ttl_seconds),
        }


__all__: list[str] = ["ModelPKIRole"]
