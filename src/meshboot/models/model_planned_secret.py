# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Secret a bootstrap plan writes."""

from __future__ import annotations

from collections.abc import Callable

from pydantic import BaseModel, ConfigDict, Field, SecretBytes, model_validator

from meshboot.enums import EnumMeshFeature


class ModelPlannedSecret(BaseModel):
    """A secret field to provision, with either a fixed value or a generator.

    Generated secrets are only produced when the field is absent, so a
    re-run keeps the value from the first run.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    path: str = Field(min_length=1)
    field: str = Field(min_length=1)
    feature: EnumMeshFeature | None = None
    value: SecretBytes | None = None
    generator: Callable[[], bytes] | None = Field(
        default=None, exclude=True, repr=False
    )

    @model_validator(mode="after")
    def _value_or_generator(self) -> ModelPlannedSecret:
        if (self.value is None) == (self.generator is None):
            raise ValueError(
                f"Planned secret '{self.path}#{self.field}' needs exactly one "
                "of value or generator"
            )
        return self


__all__: list[str] = ["ModelPlannedSecret"]
