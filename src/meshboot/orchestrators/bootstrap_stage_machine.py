# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Linear stage machine of a bootstrap run."""

from __future__ import annotations

import logging
from uuid import UUID

from meshboot.enums import EnumBootstrapStage, EnumInfraTransportType
from meshboot.errors import ModelInfraErrorContext, OrderingViolationError

logger = logging.getLogger(__name__)


class BootstrapStageMachine:
    """Tracks the current stage and allows only single-step forward moves.

    Example:
        >>> machine = BootstrapStageMachine()
        >>> machine.advance(EnumBootstrapStage.POLICIES_WRITTEN)
        >>> machine.advance(EnumBootstrapStage.DONE)
        Traceback (most recent call last):
        OrderingViolationError: ...
    """

    def __init__(self, correlation_id: UUID | None = None) -> None:
        self._stage = EnumBootstrapStage.NOT_STARTED
        self._correlation_id = correlation_id

    @property
    def stage(self) -> EnumBootstrapStage:
        return self._stage

    @property
    def pending(self) -> EnumBootstrapStage | None:
        """Stage the run is working towards, None once DONE."""
        return self._stage.next_stage()

    def advance(self, target: EnumBootstrapStage) -> None:
        """Move to target.

        Raises:
            OrderingViolationError: If target is not the stage right after
                the current one.
        """
        expected = self._stage.next_stage()
        if target is not expected:
            raise OrderingViolationError(
                f"Illegal stage transition {self._stage.value} -> {target.value}",
                context=ModelInfraErrorContext(
                    transport_type=EnumInfraTransportType.RUNTIME,
                    operation="stage.advance",
                    target_name=target.value,
                    correlation_id=self._correlation_id,
                ),
                current_stage=self._stage.value,
            )
        previous, self._stage = self._stage, target
        logger.info(
            "Bootstrap stage reached",
            extra={
                "previous_stage": previous.value,
                "stage": target.value,
                "correlation_id": str(self._correlation_id)
                if self._correlation_id
                else None,
            },
        )


__all__: list[str] = ["BootstrapStageMachine"]
