# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Handler models."""

from meshboot.handlers.models.model_retry_state import ModelRetryState

__all__: list[str] = ["ModelRetryState"]
