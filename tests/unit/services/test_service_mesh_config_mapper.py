# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Unit tests for MeshConfigMapper."""

from __future__ import annotations

import pytest

from meshboot.enums import EnumMeshFeature
from meshboot.errors import MissingSecretError
from meshboot.models import ModelSecretReference
from meshboot.services import MeshConfigMapper
from tests.helpers import make_context, make_enterprise_context

RESOLVED = {
    EnumMeshFeature.GOSSIP_ENCRYPTION: ModelSecretReference(
        path="consul/data/secret/gossip", field="gossip"
    ),
    EnumMeshFeature.CONNECT_CA: ModelSecretReference(
        path="connect_root/cert/ca", field="certificate"
    ),
    EnumMeshFeature.TLS_CA: ModelSecretReference(path="pki/cert/ca", field="certificate"),
    EnumMeshFeature.SERVER_CERT: ModelSecretReference(
        path="pki/issue/consul-server-dc1", field="certificate"
    ),
    EnumMeshFeature.SNAPSHOT_AGENT: ModelSecretReference(
        path="consul/data/secret/snapshotagentconfig", field="snapshotagentconfig"
    ),
    EnumMeshFeature.ENTERPRISE_LICENSE: ModelSecretReference(
        path="consul/data/secret/enterpriselicense", field="enterpriselicense"
    ),
}


class TestRequestedFeatures:
    def test_default_context(self) -> None:
        assert MeshConfigMapper.requested_features(make_context()) == frozenset(
            {
                EnumMeshFeature.GOSSIP_ENCRYPTION,
                EnumMeshFeature.CONNECT_CA,
                EnumMeshFeature.TLS_CA,
                EnumMeshFeature.SERVER_CERT,
                EnumMeshFeature.SNAPSHOT_AGENT,
            }
        )

    def test_enterprise_requests_license(self) -> None:
        features = MeshConfigMapper.requested_features(make_enterprise_context())

        assert EnumMeshFeature.ENTERPRISE_LICENSE in features

    def test_tls_disabled(self) -> None:
        features = MeshConfigMapper.requested_features(
            make_context(tls_enabled=False, enable_auto_encrypt=False)
        )

        assert EnumMeshFeature.TLS_CA not in features
        assert EnumMeshFeature.SERVER_CERT not in features


class TestMap:
    def test_map_orders_by_feature(self) -> None:
        references = MeshConfigMapper.map(
            [EnumMeshFeature.CONNECT_CA, EnumMeshFeature.GOSSIP_ENCRYPTION], RESOLVED
        )

        assert [reference.feature for reference in references] == [
            feature
            for feature in EnumMeshFeature
            if feature in {EnumMeshFeature.CONNECT_CA, EnumMeshFeature.GOSSIP_ENCRYPTION}
        ]
        assert {reference.secret_path for reference in references} == {
            "consul/data/secret/gossip",
            "connect_root/cert/ca",
        }

    def test_map_reports_every_missing_feature(self) -> None:
        with pytest.raises(MissingSecretError) as exc_info:
            MeshConfigMapper.map(
                [
                    EnumMeshFeature.GOSSIP_ENCRYPTION,
                    EnumMeshFeature.SNAPSHOT_AGENT,
                    EnumMeshFeature.ENTERPRISE_LICENSE,
                ],
                {
                    EnumMeshFeature.GOSSIP_ENCRYPTION: RESOLVED[
                        EnumMeshFeature.GOSSIP_ENCRYPTION
                    ]
                },
            )

        assert set(exc_info.value.features) == {
            EnumMeshFeature.SNAPSHOT_AGENT.value,
            EnumMeshFeature.ENTERPRISE_LICENSE.value,
        }


class TestBuildValues:
    """Test flag-driven presence of optional keys."""

    @pytest.mark.parametrize(
        ("context", "license_present"),
        [(make_context(), False), (make_enterprise_context(), True)],
    )
    def test_license_keys_follow_enterprise_flag(
        self, context: object, license_present: bool
    ) -> None:
        features = MeshConfigMapper.requested_features(context)  # type: ignore[arg-type]
        references = MeshConfigMapper.map(features, RESOLVED)

        values = MeshConfigMapper.build_values(
            context,  # type: ignore[arg-type]
            references,
            "connect_root",
            "dc1/connect_inter",
        ).to_helm_values()

        assert ("global.enterpriseLicense.secretName" in values) is license_present
        if license_present:
            assert values["global.enterpriseLicense.secretName"] == (
                "consul/data/secret/enterpriselicense"
            )

    def test_values_from_default_context(self) -> None:
        context = make_context()
        references = MeshConfigMapper.map(
            MeshConfigMapper.requested_features(context), RESOLVED
        )

        values = MeshConfigMapper.build_values(
            context, references, "connect_root", "dc1/connect_inter"
        )

        assert values.vault.connect_ca.address == "http://vault-server.default:8200"
        assert values.vault.ca.secret_name == "vault-vault-server-tls"
        assert values.server_cert is not None
        assert values.server_cert.secret_name == "pki/issue/consul-server-dc1"
        assert values.server_cert.secret_key is None
        assert values.snapshot_agent is not None
        assert values.snapshot_agent.secret_key == "snapshotagentconfig"

    def test_missing_reference_rejected(self) -> None:
        context = make_context()
        references = MeshConfigMapper.map(
            [EnumMeshFeature.GOSSIP_ENCRYPTION, EnumMeshFeature.CONNECT_CA], RESOLVED
        )

        with pytest.raises(MissingSecretError):
            MeshConfigMapper.build_values(
                context, references, "connect_root", "dc1/connect_inter"
            )
