# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Certificate authority node of the PKI hierarchy."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from meshboot.enums import EnumCARole


class ModelCAHierarchyNode(BaseModel):
    """A provisioned CA living in one PKI mount.

    Invariants:
        - A root node has no parent.
        - An intermediate node has a parent whose role is root or
          intermediate.

    Nodes are never mutated; rotating a CA replaces the node.

    Attributes:
        mount_id: PKI mount path (e.g. ``connect_root``, ``dc1/connect_inter``)
        parent: Issuing node, None for a root
        certificate: PEM encoded CA certificate
        role: Root or intermediate
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    mount_id: str = Field(min_length=1)
    parent: ModelCAHierarchyNode | None = None
    certificate: str = Field(min_length=1, description="PEM encoded CA certificate")
    role: EnumCARole

    @model_validator(mode="after")
    def _check_parent(self) -> ModelCAHierarchyNode:
        if self.role is EnumCARole.ROOT and self.parent is not None:
            raise ValueError(f"Root CA '{self.mount_id}' must not have a parent")
        if self.role is EnumCARole.INTERMEDIATE and self.parent is None:
            raise ValueError(
                f"Intermediate CA '{self.mount_id}' requires a parent node"
            )
        return self

    def chain_mount_ids(self) -> tuple[str, ...]:
        """Return mount IDs from this node up to the root."""
        mounts: list[str] = []
        node: ModelCAHierarchyNode | None = self
        while node is not None:
            mounts.append(node.mount_id)
            node = node.parent
        return tuple(mounts)


__all__: list[str] = ["ModelCAHierarchyNode"]
