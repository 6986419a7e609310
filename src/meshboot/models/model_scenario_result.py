# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Result of an end-to-end acceptance scenario."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from meshboot.models.model_bootstrap_outcome import ModelBootstrapOutcome
from meshboot.models.model_connectivity_result import ModelConnectivityResult


class ModelScenarioResult(BaseModel):
    """Bootstrap outcome, deployed release and connectivity verdict."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    bootstrap: ModelBootstrapOutcome
    release: str
    traffic_allowed: bool
    connectivity: ModelConnectivityResult


__all__: list[str] = ["ModelScenarioResult"]
