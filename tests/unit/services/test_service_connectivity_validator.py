# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Unit tests for ConnectivityValidator.

All checks use interval 0 or an event so the suite never actually sleeps.
"""

from __future__ import annotations

import asyncio

import httpx
import pytest

from meshboot.enums import EnumConnectivityOutcome
from meshboot.models import ModelProbeResponse
from meshboot.services import ConnectivityValidator
from tests.helpers import ScriptedProbe

TARGET = "http://static-server"


class _CancellingProbe:
    """Answers 503 and sets an event on the first call."""

    def __init__(self, event: asyncio.Event) -> None:
        self._event = event
        self.calls = 0

    async def probe(self, target: str) -> ModelProbeResponse:
        self.calls += 1
        self._event.set()
        return ModelProbeResponse(status_code=503)


class _HangingProbe:
    async def probe(self, target: str) -> ModelProbeResponse:
        await asyncio.Event().wait()
        return ModelProbeResponse(status_code=200)


class TestConnectivityValidator:
    """Test success, timeout and cancellation outcomes."""

    @pytest.mark.asyncio
    async def test_first_attempt_success(self) -> None:
        probe = ScriptedProbe([200])

        result = await ConnectivityValidator(probe).check(TARGET, 5, 0)

        assert result.outcome is EnumConnectivityOutcome.SUCCESS
        assert result.attempts == 1
        assert probe.calls == [TARGET]

    @pytest.mark.asyncio
    async def test_transport_errors_are_failed_attempts(self) -> None:
        probe = ScriptedProbe([httpx.ConnectError("refused"), 503, 200])

        result = await ConnectivityValidator(probe).check(TARGET, 5, 0)

        assert result.succeeded
        assert result.attempts == 3
        assert result.last_status_code == 200
        assert result.last_error is None

    @pytest.mark.asyncio
    async def test_timeout_uses_whole_budget(self) -> None:
        probe = ScriptedProbe([503])

        result = await ConnectivityValidator(probe).check(TARGET, 3, 0)

        assert result.outcome is EnumConnectivityOutcome.TIMEOUT
        assert result.attempts == 3
        assert result.last_status_code == 503
        assert len(probe.calls) == 3

    @pytest.mark.asyncio
    async def test_timeout_reports_last_error(self) -> None:
        probe = ScriptedProbe([httpx.ConnectError("refused")])

        result = await ConnectivityValidator(probe).check(TARGET, 2, 0)

        assert result.outcome is EnumConnectivityOutcome.TIMEOUT
        assert result.last_error == "ConnectError"

    @pytest.mark.asyncio
    async def test_custom_predicate(self) -> None:
        """A deny check succeeds on a refused request."""
        probe = ScriptedProbe([503])

        result = await ConnectivityValidator(probe).check(
            TARGET, 2, 0, success_predicate=lambda response: response.status_code != 200
        )

        assert result.succeeded

    @pytest.mark.asyncio
    async def test_cancel_before_first_attempt(self) -> None:
        event = asyncio.Event()
        event.set()
        probe = ScriptedProbe([200])

        result = await ConnectivityValidator(probe).check(
            TARGET, 5, 0, cancel_event=event
        )

        assert result.outcome is EnumConnectivityOutcome.CANCELLED
        assert result.attempts == 0
        assert probe.calls == []

    @pytest.mark.asyncio
    async def test_cancel_interrupts_pause(self) -> None:
        event = asyncio.Event()
        probe = _CancellingProbe(event)

        result = await asyncio.wait_for(
            ConnectivityValidator(probe).check(TARGET, 5, 60.0, cancel_event=event),
            timeout=5.0,
        )

        assert result.outcome is EnumConnectivityOutcome.CANCELLED
        assert result.attempts == 1
        assert probe.calls == 1

    @pytest.mark.asyncio
    async def test_task_cancellation_propagates(self) -> None:
        task = asyncio.create_task(
            ConnectivityValidator(_HangingProbe()).check(TARGET, 5, 0)
        )
        await asyncio.sleep(0)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

    @pytest.mark.parametrize(
        ("attempts", "interval"), [(0, 0.0), (3, -1.0)]
    )
    @pytest.mark.asyncio
    async def test_invalid_arguments(self, attempts: int, interval: float) -> None:
        with pytest.raises(ValueError):
            await ConnectivityValidator(ScriptedProbe([200])).check(
                TARGET, attempts, interval
            )
