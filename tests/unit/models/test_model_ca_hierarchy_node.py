# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Unit tests for CA hierarchy and plan models."""

from __future__ import annotations

import pytest
from pydantic import SecretBytes, ValidationError

from meshboot.enums import EnumCARole
from meshboot.models import (
    ModelBootstrapPlan,
    ModelCAHierarchyNode,
    ModelPlannedCA,
    ModelPlannedSecret,
    ModelSecretRecord,
    ModelSecretReference,
)

PEM = "-----BEGIN CERTIFICATE-----\nMIIB\n-----END CERTIFICATE-----\n"


class TestModelCAHierarchyNode:
    def test_root_must_not_have_parent(self) -> None:
        root = ModelCAHierarchyNode(mount_id="connect_root", certificate=PEM, role=EnumCARole.ROOT)

        with pytest.raises(ValidationError, match="must not have a parent"):
            ModelCAHierarchyNode(
                mount_id="other", parent=root, certificate=PEM, role=EnumCARole.ROOT
            )

    def test_intermediate_requires_parent(self) -> None:
        with pytest.raises(ValidationError, match="requires a parent"):
            ModelCAHierarchyNode(
                mount_id="dc1/connect_inter",
                certificate=PEM,
                role=EnumCARole.INTERMEDIATE,
            )

    def test_chain_mount_ids(self) -> None:
        root = ModelCAHierarchyNode(mount_id="connect_root", certificate=PEM, role=EnumCARole.ROOT)
        intermediate = ModelCAHierarchyNode(
            mount_id="dc1/connect_inter",
            parent=root,
            certificate=PEM,
            role=EnumCARole.INTERMEDIATE,
        )

        assert intermediate.chain_mount_ids() == ("dc1/connect_inter", "connect_root")


class TestPlanModels:
    def test_planned_ca_role_follows_parent(self) -> None:
        assert ModelPlannedCA(mount_id="pki", common_name="CA", ttl_seconds=60).role is (
            EnumCARole.ROOT
        )
        assert (
            ModelPlannedCA(
                mount_id="inter", common_name="CA", ttl_seconds=60, parent_mount_id="pki"
            ).role
            is EnumCARole.INTERMEDIATE
        )

    def test_plan_rejects_root_with_parent(self) -> None:
        with pytest.raises(ValidationError, match="must not name a parent"):
            ModelBootstrapPlan(
                root_cas=(
                    ModelPlannedCA(
                        mount_id="inter",
                        common_name="CA",
                        ttl_seconds=60,
                        parent_mount_id="pki",
                    ),
                )
            )

    def test_planned_secret_needs_value_or_generator(self) -> None:
        with pytest.raises(ValidationError, match="exactly one"):
            ModelPlannedSecret(path="consul/data/secret/x", field="x")
        with pytest.raises(ValidationError, match="exactly one"):
            ModelPlannedSecret(
                path="consul/data/secret/x",
                field="x",
                value=SecretBytes(b"v"),
                generator=lambda: b"v",
            )

    def test_secret_record_hides_value(self) -> None:
        record = ModelSecretRecord(
            path="consul/data/secret/gossip", field="gossip", value=SecretBytes(b"k3y")
        )

        assert "k3y" not in repr(record)
        assert record.reference == ModelSecretReference(
            path="consul/data/secret/gossip", field="gossip"
        )
        assert str(record.reference) == "consul/data/secret/gossip#gossip"
