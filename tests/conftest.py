# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Pytest configuration and shared fixtures for meshboot tests."""

from __future__ import annotations

import pytest

from meshboot.models.model_bootstrap_context import ModelBootstrapContext
from meshboot.models.model_bootstrap_plan import ModelBootstrapPlan
from meshboot.orchestrators.plan_consul_vault import build_consul_vault_plan
from meshboot.testing.backend_in_memory import InMemorySecretsBackend
from tests.helpers import make_context


@pytest.fixture
def context() -> ModelBootstrapContext:
    """Provide the default test bootstrap context."""
    return make_context()


@pytest.fixture
def backend() -> InMemorySecretsBackend:
    """Provide a fresh in-memory secrets backend."""
    return InMemorySecretsBackend()


@pytest.fixture
def plan(context: ModelBootstrapContext) -> ModelBootstrapPlan:
    """Provide the default Consul plan for the test context."""
    return build_consul_vault_plan(context)
