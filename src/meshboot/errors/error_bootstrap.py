# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Run-level error classes raised by the orchestrators."""

from __future__ import annotations

from typing import TYPE_CHECKING

from meshboot.enums import EnumBootstrapErrorCode, EnumBootstrapStage
from meshboot.errors.infra_errors import BackendUnavailableError, MeshBootstrapError
from meshboot.errors.model_infra_error_context import ModelInfraErrorContext

if TYPE_CHECKING:
    from meshboot.models.model_bootstrap_diagnostics import ModelBootstrapDiagnostics


class BootstrapStageError(MeshBootstrapError):
    """Raised when a bootstrap run aborts.

    Carries the stage that was being entered, the last stage that completed,
    the component error that caused the abort (also chained as __cause__),
    and a value-free diagnostics snapshot of what had been written.

    Attributes:
        stage: Stage whose transition failed
        last_completed_stage: Last stage the run reached
        cause: Component error that aborted the run
        diagnostics: Snapshot of written references, policies, roles and CAs
        retryable: True only when the cause is a transient backend failure
    """

    def __init__(
        self,
        stage: EnumBootstrapStage,
        last_completed_stage: EnumBootstrapStage,
        cause: BaseException,
        diagnostics: ModelBootstrapDiagnostics | None = None,
        context: ModelInfraErrorContext | None = None,
    ) -> None:
        super().__init__(
            message=(
                f"Bootstrap failed at stage '{stage.value}': "
                f"{type(cause).__name__}: {cause}"
            ),
            error_code=EnumBootstrapErrorCode.STAGE_FAILED,
            context=context,
            stage=stage.value,
            last_completed_stage=last_completed_stage.value,
            cause_type=type(cause).__name__,
        )
        self.stage = stage
        self.last_completed_stage = last_completed_stage
        self.cause = cause
        self.diagnostics = diagnostics

    @property
    def retryable(self) -> bool:
        """Return True if re-running the bootstrap may succeed unchanged."""
        return isinstance(self.cause, BackendUnavailableError)


class ConnectivityTimeoutError(MeshBootstrapError):
    """Raised when connectivity validation exhausts its attempt budget.

    Fatal for the scenario. Backend state written by the bootstrap remains
    valid.
    """

    def __init__(
        self,
        message: str,
        context: ModelInfraErrorContext | None = None,
        attempts: int | None = None,
        **extra_context: object,
    ) -> None:
        if attempts is not None:
            extra_context["attempts"] = attempts
        super().__init__(
            message=message,
            error_code=EnumBootstrapErrorCode.TIMEOUT,
            context=context,
            **extra_context,
        )
        self.attempts = attempts


class ConnectivityCancelledError(MeshBootstrapError):
    """Raised when connectivity validation is cancelled before a verdict.

    Neither the allow nor the deny expectation has been checked, so the
    scenario has not passed.
    """

    def __init__(
        self,
        message: str,
        context: ModelInfraErrorContext | None = None,
        attempts: int | None = None,
        **extra_context: object,
    ) -> None:
        if attempts is not None:
            extra_context["attempts"] = attempts
        super().__init__(
            message=message,
            error_code=EnumBootstrapErrorCode.CANCELLED,
            context=context,
            **extra_context,
        )
        self.attempts = attempts


__all__ = [
    "BootstrapStageError",
    "ConnectivityCancelledError",
    "ConnectivityTimeoutError",
]
