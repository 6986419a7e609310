# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""meshboot mixins."""

from meshboot.mixins.mixin_async_circuit_breaker import (
    CircuitState,
    MixinAsyncCircuitBreaker,
)

__all__: list[str] = ["CircuitState", "MixinAsyncCircuitBreaker"]
