# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""meshboot Orchestrators.

Exports:
    BootstrapOrchestrator: Drives a plan through the bootstrap stages
    BootstrapStageMachine: Linear stage tracker
    ScenarioRunner: Bootstrap, deploy, authorize and validate end to end
    build_consul_vault_plan: Default plan for one Consul datacenter
"""

from meshboot.orchestrators.bootstrap_stage_machine import BootstrapStageMachine
from meshboot.orchestrators.orchestrator_bootstrap import BootstrapOrchestrator
from meshboot.orchestrators.orchestrator_scenario import ScenarioRunner
from meshboot.orchestrators.plan_consul_vault import build_consul_vault_plan

__all__: list[str] = [
    "BootstrapOrchestrator",
    "BootstrapStageMachine",
    "ScenarioRunner",
    "build_consul_vault_plan",
]
