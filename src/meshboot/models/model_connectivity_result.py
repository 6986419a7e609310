# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Outcome of a bounded connectivity check."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from meshboot.enums import EnumConnectivityOutcome


class ModelConnectivityResult(BaseModel):
    """Connectivity check result.

    Attributes:
        outcome: Success, timeout or cancelled
        target: Probed address
        attempts: Attempts made, including the successful one
        last_status_code: Status code of the last answered attempt
        last_error: Exception type name of the last failed transport attempt
        elapsed_seconds: Wall time spent in the check
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    outcome: EnumConnectivityOutcome
    target: str
    attempts: int = Field(ge=0)
    last_status_code: int | None = None
    last_error: str | None = None
    elapsed_seconds: float = Field(default=0.0, ge=0.0)

    @property
    def succeeded(self) -> bool:
        return self.outcome is EnumConnectivityOutcome.SUCCESS


__all__: list[str] = ["ModelConnectivityResult"]
