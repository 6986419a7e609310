# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Single answered connectivity probe."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class ModelProbeResponse(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    status_code: int
    body: str = ""


__all__: list[str] = ["ModelProbeResponse"]
