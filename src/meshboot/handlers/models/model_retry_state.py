# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Immutable retry bookkeeping for backend operations."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ModelRetryState(BaseModel):
    """Attempt counter and backoff delay of one retried operation.

    ``next_attempt`` returns a new state; the delay grows by
    ``backoff_multiplier`` and is capped by the caller-supplied ceiling.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    attempt: int = Field(default=0, ge=0)
    max_attempts: int = Field(default=1, ge=1)
    delay_seconds: float = Field(default=0.0, ge=0.0)
    backoff_multiplier: float = Field(default=2.0, ge=1.0)
    last_error: str | None = None

    def is_retriable(self) -> bool:
        return self.attempt < self.max_attempts

    def next_attempt(
        self, error_message: str, max_delay_seconds: float
    ) -> ModelRetryState:
        delay = self.delay_seconds
        if self.attempt > 0:
            delay = min(self.delay_seconds * self.backoff_multiplier, max_delay_seconds)
        return self.model_copy(
            update={
                "attempt": self.attempt + 1,
                "delay_seconds": delay,
                "last_error": error_message,
            }
        )


__all__: list[str] = ["ModelRetryState"]
