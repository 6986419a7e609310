# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Bootstrap stage enumeration.

The stages form a strict linear sequence. Each stage is the postcondition
of the component call that reaches it, and the precondition of the next.
"""

from __future__ import annotations

from enum import Enum


class EnumBootstrapStage(str, Enum):
    """Stages of a secure bootstrap run, in execution order."""

    NOT_STARTED = "not_started"
    POLICIES_WRITTEN = "policies_written"
    ROLES_BINDABLE = "roles_bindable"
    ROOT_PROVISIONED = "root_provisioned"
    INTERMEDIATE_PROVISIONED = "intermediate_provisioned"
    SECRETS_WRITTEN = "secrets_written"
    CONFIG_MAPPED = "config_mapped"
    DONE = "done"

    @classmethod
    def sequence(cls) -> tuple[EnumBootstrapStage, ...]:
        """Return all stages in execution order."""
        return tuple(cls)

    def next_stage(self) -> EnumBootstrapStage | None:
        """Return the stage that follows this one, or None for DONE."""
        stages = self.sequence()
        index = stages.index(self)
        if index + 1 >= len(stages):
            return None
        return stages[index + 1]


__all__ = ["EnumBootstrapStage"]
