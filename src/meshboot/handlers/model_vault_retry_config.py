# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Vault client retry configuration."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ModelVaultRetryConfig(BaseModel):
    """Exponential backoff settings for transient Vault failures.

    The default is a single attempt: BackendUnavailableError reaches the
    caller, which decides whether to re-run the bootstrap.

    Attributes:
        max_attempts: Total attempts per operation (1 disables retries)
        initial_backoff_seconds: Delay before the second attempt
        max_backoff_seconds: Delay ceiling
        exponential_base: Multiplier applied to the delay after each attempt
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_attempts: int = Field(default=1, ge=1, le=10)
    initial_backoff_seconds: float = Field(default=0.1, ge=0.0, le=10.0)
    max_backoff_seconds: float = Field(default=10.0, ge=0.0, le=120.0)
    exponential_base: float = Field(default=2.0, ge=1.0, le=4.0)


__all__: list[str] = ["ModelVaultRetryConfig"]
