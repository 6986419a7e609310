# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Identity-exchange role binding."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from meshboot.models.model_identity_selector import ModelIdentitySelector


class ModelAuthRoleBinding(BaseModel):
    """Binds a workload identity to a backend role carrying policies.

    Policies are stored by name in the order given; duplicates are rejected.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    role_name: str = Field(min_length=1)
    identity_selector: ModelIdentitySelector
    policies: tuple[str, ...] = Field(min_length=1)

    @field_validator("policies")
    @classmethod
    def _unique_policies(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if len(set(value)) != len(value):
            raise ValueError("Role binding policies must be unique")
        return value


__all__: list[str] = ["ModelAuthRoleBinding"]
