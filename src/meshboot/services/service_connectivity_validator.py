# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Connectivity Validator.

Bounded retry of a connectivity probe until a predicate holds.

Attempts are independent: each one calls the probe once and applies the
predicate to its answer. A transport failure is a failed attempt, not an
error. The validator sleeps interval_seconds between attempts and never
after the last one, so a check that times out takes roughly
(max_attempts - 1) * interval_seconds plus probe time.

Cancellation:
    - Setting cancel_event ends the check at the next attempt boundary (or
      immediately while sleeping) with outcome CANCELLED.
    - Cancelling the task raises asyncio.CancelledError out of check().
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING
from uuid import UUID

from meshboot.enums import EnumConnectivityOutcome
from meshboot.models.model_connectivity_result import ModelConnectivityResult
from meshboot.models.model_probe_response import ModelProbeResponse

if TYPE_CHECKING:
    from meshboot.protocols import ProtocolConnectivityProbe

logger = logging.getLogger(__name__)

SuccessPredicate = Callable[[ModelProbeResponse], bool]


def http_ok(response: ModelProbeResponse) -> bool:
    """Succeed on HTTP 200."""
    return response.status_code == 200


class ConnectivityValidator:
    """Runs a probe until success, attempt exhaustion or cancellation."""

    def __init__(self, probe: ProtocolConnectivityProbe) -> None:
        self._probe = probe

    async def check(
        self,
        target: str,
        max_attempts: int,
        interval_seconds: float,
        success_predicate: SuccessPredicate = http_ok,
        cancel_event: asyncio.Event | None = None,
        correlation_id: UUID | None = None,
    ) -> ModelConnectivityResult:
        """Probe target until success_predicate accepts an answer.

        Args:
            target: Address handed to the probe
            max_attempts: Attempt budget (>= 1)
            interval_seconds: Pause between attempts (>= 0)
            success_predicate: Decides whether an answer counts as success
            cancel_event: Set to stop the check early
            correlation_id: Correlation ID for logs

        Returns:
            Result with outcome SUCCESS, TIMEOUT or CANCELLED.

        Raises:
            ValueError: If max_attempts < 1 or interval_seconds < 0.
            asyncio.CancelledError: If the calling task is cancelled.
        """
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
        if interval_seconds < 0:
            raise ValueError(f"interval_seconds must be >= 0, got {interval_seconds}")

        started = time.monotonic()
        last_status_code: int | None = None
        last_error: str | None = None
        attempts = 0

        def result(outcome: EnumConnectivityOutcome) -> ModelConnectivityResult:
            return ModelConnectivityResult(
                outcome=outcome,
                target=target,
                attempts=attempts,
                last_status_code=last_status_code,
                last_error=last_error,
                elapsed_seconds=time.monotonic() - started,
            )

        while attempts < max_attempts:
            if cancel_event is not None and cancel_event.is_set():
                return self._finish(result(EnumConnectivityOutcome.CANCELLED), correlation_id)

            attempts += 1
            try:
                response = await self._probe.probe(target)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                last_error = type(e).__name__
                logger.debug(
                    "Connectivity attempt failed",
                    extra={
                        "target": target,
                        "attempt": attempts,
                        "error_type": last_error,
                        "correlation_id": str(correlation_id) if correlation_id else None,
                    },
                )
            else:
                last_status_code = response.status_code
                last_error = None
                if success_predicate(response):
                    return self._finish(
                        result(EnumConnectivityOutcome.SUCCESS), correlation_id
                    )
                logger.debug(
                    "Connectivity attempt rejected",
                    extra={
                        "target": target,
                        "attempt": attempts,
                        "status_code": response.status_code,
                        "correlation_id": str(correlation_id) if correlation_id else None,
                    },
                )

            if attempts < max_attempts and await self._pause(
                interval_seconds, cancel_event
            ):
                return self._finish(result(EnumConnectivityOutcome.CANCELLED), correlation_id)

        return self._finish(result(EnumConnectivityOutcome.TIMEOUT), correlation_id)

    @staticmethod
    async def _pause(interval_seconds: float, cancel_event: asyncio.Event | None) -> bool:
        """Sleep between attempts. Return True if cancel_event was set meanwhile."""
        if cancel_event is None:
            await asyncio.sleep(interval_seconds)
            return False
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=interval_seconds)
        except TimeoutError:
            return False
        return True

    @staticmethod
    def _finish(
        result: ModelConnectivityResult, correlation_id: UUID | None
    ) -> ModelConnectivityResult:
        level = logging.INFO if result.succeeded else logging.WARNING
        logger.log(
            level,
            "Connectivity check finished",
            extra={
                "target": result.target,
                "outcome": result.outcome.value,
                "attempts": result.attempts,
                "last_status_code": result.last_status_code,
                "last_error": result.last_error,
                "correlation_id": str(correlation_id) if correlation_id else None,
            },
        )
        return result


__all__: list[str] = ["ConnectivityValidator", "SuccessPredicate", "http_ok"]
