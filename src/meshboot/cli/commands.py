# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""
meshboot CLI Commands.

Provides the command line interface for bootstrapping Vault for a Consul
mesh, rendering Helm values from an existing bootstrap, and checking
connectivity through the mesh.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import click
import yaml
from rich.console import Console
from rich.table import Table

from meshboot.errors import BootstrapStageError, MeshBootstrapError
from meshboot.handlers.handler_http_probe import HttpProbe
from meshboot.handlers.handler_vault import VaultBackendClient
from meshboot.models.model_bootstrap_outcome import ModelBootstrapOutcome
from meshboot.models.model_connectivity_result import ModelConnectivityResult
from meshboot.models.model_mesh_values import ModelMeshValues
from meshboot.orchestrators.orchestrator_bootstrap import BootstrapOrchestrator
from meshboot.orchestrators.plan_consul_vault import build_consul_vault_plan
from meshboot.runtime.config_loader import load_bootstrap_context, load_vault_config
from meshboot.services.service_connectivity_validator import (
    ConnectivityValidator,
    http_ok,
)
from meshboot.utils.util_error_sanitization import sanitize_error_message

console = Console()

_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@click.group()
@click.option(
    "--log-level",
    default="WARNING",
    show_default=True,
    type=click.Choice(_LOG_LEVELS, case_sensitive=False),
    help="Root logger level.",
)
def cli(log_level: str) -> None:
    """meshboot - Vault-backed secure bootstrap for a Consul service mesh."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


_config_option = click.option(
    "--config",
    "config_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML config file with context and vault sections.",
)


@cli.command("bootstrap")
@_config_option
def bootstrap_cmd(config_path: Path) -> None:
    """Provision policies, roles, CAs and secrets, then print Helm values."""
    try:
        outcome = asyncio.run(_run_bootstrap(config_path))
    except BootstrapStageError as e:
        console.print(
            f"[bold red]Bootstrap failed at stage {e.stage.value} "
            f"(last completed: {e.last_completed_stage.value})[/bold red]"
        )
        console.print(
            f"  [red]{type(e.cause).__name__}: {sanitize_error_message(e.cause)}[/red]"
        )
        if e.retryable:
            console.print("  [yellow]Transient failure, re-running is safe[/yellow]")
        raise SystemExit(1)
    except MeshBootstrapError as e:
        console.print(f"[red]Error: {type(e).__name__}: {sanitize_error_message(e)}[/red]")
        raise SystemExit(1)

    _print_outcome(outcome)
    _print_values(outcome.values)


@cli.command("render-values")
@_config_option
def render_values_cmd(config_path: Path) -> None:
    """Render Helm values from an already bootstrapped backend, read-only."""
    try:
        values = asyncio.run(_run_render_values(config_path))
    except MeshBootstrapError as e:
        console.print(f"[red]Error: {type(e).__name__}: {sanitize_error_message(e)}[/red]")
        raise SystemExit(1)
    _print_values(values)


@cli.command("check")
@click.argument("url")
@click.option(
    "--attempts", default=30, show_default=True, type=click.IntRange(min=1)
)
@click.option(
    "--interval",
    default=2.0,
    show_default=True,
    type=click.FloatRange(min=0.0),
    help="Seconds between attempts.",
)
@click.option(
    "--timeout",
    default=5.0,
    show_default=True,
    type=click.FloatRange(min=0.0, min_open=True),
    help="Per-request timeout in seconds.",
)
def check_cmd(url: str, attempts: int, interval: float, timeout: float) -> None:
    """Probe URL until it answers HTTP 200 or attempts run out."""
    result = asyncio.run(_run_check(url, attempts, interval, timeout))
    _print_check(result)
    raise SystemExit(0 if result.succeeded else 1)


# =============================================================================
# Implementations
# =============================================================================


async def _run_bootstrap(config_path: Path) -> ModelBootstrapOutcome:
    context = load_bootstrap_context(config_path)
    vault_config = load_vault_config(config_path)
    async with VaultBackendClient(vault_config) as backend:
        orchestrator = BootstrapOrchestrator(backend, context)
        return await orchestrator.run(build_consul_vault_plan(context))


async def _run_render_values(config_path: Path) -> ModelMeshValues:
    context = load_bootstrap_context(config_path)
    vault_config = load_vault_config(config_path)
    async with VaultBackendClient(vault_config) as backend:
        orchestrator = BootstrapOrchestrator(backend, context)
        return await orchestrator.render_values(build_consul_vault_plan(context))


async def _run_check(
    url: str, attempts: int, interval: float, timeout: float
) -> ModelConnectivityResult:
    async with HttpProbe(timeout_seconds=timeout) as probe:
        validator = ConnectivityValidator(probe)
        return await validator.check(url, attempts, interval, http_ok)


# =============================================================================
# Utility Functions
# =============================================================================


def _print_outcome(outcome: ModelBootstrapOutcome) -> None:
    """Print provisioned CAs and consumption references."""
    console.print(
        f"[bold green]Bootstrap reached {outcome.stage.value}[/bold green] "
        f"[dim](correlation id {outcome.correlation_id})[/dim]"
    )

    nodes = Table(title="CA Hierarchy")
    nodes.add_column("Mount", style="cyan")
    nodes.add_column("Role", style="bold")
    nodes.add_column("Chain", style="dim")
    for node in outcome.nodes:
        nodes.add_row(node.mount_id, node.role.value, " -> ".join(node.chain_mount_ids()))
    console.print(nodes)

    references = Table(title="Mesh Secret References")
    references.add_column("Feature", style="cyan")
    references.add_column("Path")
    references.add_column("Field", style="dim")
    for reference in outcome.references:
        references.add_row(
            reference.feature.value, reference.secret_path, reference.secret_field
        )
    console.print(references)


def _print_values(values: ModelMeshValues) -> None:
    """Print Helm values as YAML."""
    console.print(
        yaml.safe_dump(values.to_helm_values(), sort_keys=True), highlight=False
    )


def _print_check(result: ModelConnectivityResult) -> None:
    style = "bold green" if result.succeeded else "bold red"
    console.print(
        f"[{style}]{result.outcome.value.upper()}[/{style}] {result.target} "
        f"after {result.attempts} attempt(s) in {result.elapsed_seconds:.1f}s"
    )
    if result.last_status_code is not None:
        console.print(f"  last status: {result.last_status_code}")
    if result.last_error is not None:
        console.print(f"  [red]last error: {result.last_error}[/red]")


if __name__ == "__main__":
    cli()
