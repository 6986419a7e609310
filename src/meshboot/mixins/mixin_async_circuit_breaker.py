# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Coroutine-safe async circuit breaker mixin for backend clients.

Circuit Breaker States:
    - CLOSED: Normal operation, requests allowed
    - OPEN: Circuit tripped, requests blocked with BackendUnavailableError
    - HALF_OPEN: Reset timeout elapsed, the next request probes recovery

Concurrency Safety:
    Every circuit breaker method requires the caller to hold
    ``_circuit_breaker_lock``:

    ```python
    async with self._circuit_breaker_lock:
        await self._check_circuit_breaker("kv.read", correlation_id)
    ```

    asyncio.Lock protects against concurrent coroutines, not OS threads.
    The backend client only touches breaker state from the event loop; the
    worker threads run hvac calls and nothing else.
"""

from __future__ import annotations

import asyncio
import logging
import time
from enum import Enum
from uuid import UUID, uuid4

from meshboot.enums import EnumInfraTransportType
from meshboot.errors import BackendUnavailableError, ModelInfraErrorContext

logger = logging.getLogger(__name__)


class CircuitState(str, Enum):
    """Circuit breaker state machine.

    State Transitions:
        CLOSED → OPEN: Failure count >= threshold
        OPEN → HALF_OPEN: Reset timeout elapsed
        HALF_OPEN → CLOSED: First successful operation
        HALF_OPEN → OPEN: First failed operation
    """

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class MixinAsyncCircuitBreaker:
    """Async circuit breaker for components that talk to a remote backend.

    State Variables:
        _circuit_breaker_failures: Consecutive failure counter
        _circuit_breaker_state: Current CircuitState
        _circuit_breaker_open_until: Timestamp at which OPEN becomes HALF_OPEN
        _circuit_breaker_lock: asyncio.Lock guarding the variables above
    """

    def _init_circuit_breaker(
        self,
        threshold: int = 5,
        reset_timeout: float = 60.0,
        service_name: str = "unknown",
        transport_type: EnumInfraTransportType = EnumInfraTransportType.VAULT,
    ) -> None:
        """Initialize circuit breaker state and configuration.

        Args:
            threshold: Consecutive failures before opening the circuit
            reset_timeout: Seconds the circuit stays open
            service_name: Service identifier for error context (e.g. "vault.default")
            transport_type: Transport type for error context

        Raises:
            ValueError: If threshold < 1 or reset_timeout < 0
        """
        if threshold < 1:
            raise ValueError(f"Circuit breaker threshold must be >= 1, got {threshold}")
        if reset_timeout < 0:
            raise ValueError(
                f"Circuit breaker reset_timeout must be >= 0, got {reset_timeout}"
            )

        self._circuit_breaker_failures = 0
        self._circuit_breaker_state = CircuitState.CLOSED
        self._circuit_breaker_open_until: float = 0.0

        self.circuit_breaker_threshold = threshold
        self.circuit_breaker_reset_timeout = reset_timeout
        self.service_name = service_name
        self.transport_type = transport_type

        self._circuit_breaker_lock = asyncio.Lock()

        logger.debug(
            "Circuit breaker initialized for %s",
            service_name,
            extra={
                "threshold": threshold,
                "reset_timeout": reset_timeout,
                "transport_type": transport_type.value,
            },
        )

    @property
    def circuit_state(self) -> CircuitState:
        return self._circuit_breaker_state

    async def _check_circuit_breaker(
        self, operation: str, correlation_id: UUID | None = None
    ) -> None:
        """Raise if the circuit is open; move to HALF_OPEN once the timeout elapsed.

        REQUIRES: self._circuit_breaker_lock must be held by caller.

        Raises:
            BackendUnavailableError: If the circuit is open. The error carries
                circuit_state and retry_after_seconds in its context.
        """
        if self._circuit_breaker_state is not CircuitState.OPEN:
            return

        current_time = time.time()
        if current_time >= self._circuit_breaker_open_until:
            self._circuit_breaker_state = CircuitState.HALF_OPEN
            logger.info(
                "Circuit breaker transitioning to half-open for %s",
                self.service_name,
                extra={"service": self.service_name, "operation": operation},
            )
            return

        retry_after = int(self._circuit_breaker_open_until - current_time)
        context = ModelInfraErrorContext(
            transport_type=self.transport_type,
            operation=operation,
            target_name=self.service_name,
            correlation_id=correlation_id or uuid4(),
        )
        raise BackendUnavailableError(
            f"Circuit breaker is open - {self.service_name} temporarily unavailable",
            context=context,
            circuit_state=CircuitState.OPEN.value,
            retry_after_seconds=retry_after,
        )

    async def _record_circuit_failure(
        self, operation: str, correlation_id: UUID | None = None
    ) -> None:
        """Count a failure and open the circuit at the threshold.

        A failure while HALF_OPEN reopens the circuit immediately.

        REQUIRES: self._circuit_breaker_lock must be held by caller.
        """
        self._circuit_breaker_failures += 1
        half_open = self._circuit_breaker_state is CircuitState.HALF_OPEN
        if half_open or self._circuit_breaker_failures >= self.circuit_breaker_threshold:
            self._circuit_breaker_state = CircuitState.OPEN
            self._circuit_breaker_open_until = (
                time.time() + self.circuit_breaker_reset_timeout
            )
            logger.warning(
                "Circuit breaker opened for %s after %d failures",
                self.service_name,
                self._circuit_breaker_failures,
                extra={
                    "service": self.service_name,
                    "operation": operation,
                    "failure_count": self._circuit_breaker_failures,
                    "threshold": self.circuit_breaker_threshold,
                    "reset_timeout": self.circuit_breaker_reset_timeout,
                    "correlation_id": str(correlation_id) if correlation_id else None,
                },
            )

    async def _reset_circuit_breaker(self) -> None:
        """Close the circuit and clear the failure counter.

        REQUIRES: self._circuit_breaker_lock must be held by caller.
        """
        if self._circuit_breaker_state is not CircuitState.CLOSED:
            logger.info(
                "Circuit breaker closed for %s",
                self.service_name,
                extra={"service": self.service_name},
            )
        self._circuit_breaker_state = CircuitState.CLOSED
        self._circuit_breaker_failures = 0
        self._circuit_breaker_open_until = 0.0


__all__ = ["CircuitState", "MixinAsyncCircuitBreaker"]
