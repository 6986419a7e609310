# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Platform workload identity selector."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ModelIdentitySelector(BaseModel):
    """Kubernetes namespace + service account a role binding accepts.

    ``"*"`` matches any service account, as used by the CA role that every
    agent may read.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    namespace: str = Field(min_length=1)
    service_account: str = Field(min_length=1)


__all__: list[str] = ["ModelIdentitySelector"]
