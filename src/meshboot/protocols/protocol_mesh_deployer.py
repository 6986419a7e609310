# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Protocol for the external mesh deployment step.

Cluster lifecycle and Helm/Kubernetes object application live outside
meshboot. The scenario runner hands the validated values to a deployer
and keeps the returned release name to uninstall it later.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from meshboot.models.model_bootstrap_context import ModelBootstrapContext


@runtime_checkable
class ProtocolMeshDeployer(Protocol):
    async def deploy(
        self, context: ModelBootstrapContext, helm_values: dict[str, str]
    ) -> str:
        """Install the mesh and wait until it is ready.

        Returns:
            Identifier of the installed release.
        """
        ...

    async def uninstall(self, release: str) -> None:
        ...


__all__ = ["ProtocolMeshDeployer"]
