# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Unit tests for BootstrapStageMachine."""

from __future__ import annotations

import pytest

from meshboot.enums import EnumBootstrapStage
from meshboot.errors import OrderingViolationError
from meshboot.orchestrators import BootstrapStageMachine


class TestBootstrapStageMachine:
    def test_starts_not_started(self) -> None:
        machine = BootstrapStageMachine()

        assert machine.stage is EnumBootstrapStage.NOT_STARTED
        assert machine.pending is EnumBootstrapStage.POLICIES_WRITTEN

    def test_walks_full_sequence(self) -> None:
        machine = BootstrapStageMachine()

        for stage in EnumBootstrapStage.sequence()[1:]:
            machine.advance(stage)

        assert machine.stage is EnumBootstrapStage.DONE
        assert machine.pending is None

    def test_skipping_a_stage_rejected(self) -> None:
        """Entering a stage before its predecessor completed is refused."""
        machine = BootstrapStageMachine()
        machine.advance(EnumBootstrapStage.POLICIES_WRITTEN)

        with pytest.raises(OrderingViolationError) as exc_info:
            machine.advance(EnumBootstrapStage.ROOT_PROVISIONED)

        assert exc_info.value.context["current_stage"] == "policies_written"
        assert machine.stage is EnumBootstrapStage.POLICIES_WRITTEN

    def test_repeating_a_stage_rejected(self) -> None:
        machine = BootstrapStageMachine()
        machine.advance(EnumBootstrapStage.POLICIES_WRITTEN)

        with pytest.raises(OrderingViolationError):
            machine.advance(EnumBootstrapStage.POLICIES_WRITTEN)

    def test_no_move_after_done(self) -> None:
        machine = BootstrapStageMachine()
        for stage in EnumBootstrapStage.sequence()[1:]:
            machine.advance(stage)

        with pytest.raises(OrderingViolationError):
            machine.advance(EnumBootstrapStage.NOT_STARTED)
