# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Mesh Config Mapper.

Turns feature flags and provisioned secret locations into the mesh
configuration. This is the only place where flags become behavior: the
orchestrator asks ``requested_features`` what to wire and ``map`` refuses
to produce a configuration that points at a secret nobody provisioned.

All methods are pure; nothing here talks to the backend.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

from meshboot.enums import EnumInfraTransportType, EnumMeshFeature
from meshboot.errors import MissingSecretError, ModelInfraErrorContext
from meshboot.models.model_bootstrap_context import ModelBootstrapContext
from meshboot.models.model_mesh_connect_ca import ModelMeshConnectCA
from meshboot.models.model_mesh_consumption_reference import (
    ModelMeshConsumptionReference,
)
from meshboot.models.model_mesh_secret_ref import ModelMeshSecretRef
from meshboot.models.model_mesh_values import ModelMeshValues
from meshboot.models.model_mesh_vault_values import ModelMeshVaultValues
from meshboot.models.model_secret_reference import ModelSecretReference

CONSUL_SERVER_ROLE = "consul-server"
CONSUL_CLIENT_ROLE = "consul-client"
CONSUL_CA_ROLE = "consul-ca"
VAULT_CA_SECRET_KEY = "tls.crt"


class MeshConfigMapper:
    """Feature selection, reference mapping and values assembly."""

    @staticmethod
    def requested_features(context: ModelBootstrapContext) -> frozenset[EnumMeshFeature]:
        """Return the features a context requires.

        Gossip encryption and the connect CA are always wired. Server
        certificate and TLS CA follow tls_enabled, the snapshot agent follows
        snapshot_agent_enabled, and the license is requested only for
        enterprise installs.
        """
        features = {EnumMeshFeature.GOSSIP_ENCRYPTION, EnumMeshFeature.CONNECT_CA}
        if context.tls_enabled:
            features.add(EnumMeshFeature.SERVER_CERT)
            features.add(EnumMeshFeature.TLS_CA)
        if context.snapshot_agent_enabled:
            features.add(EnumMeshFeature.SNAPSHOT_AGENT)
        if context.enable_enterprise:
            features.add(EnumMeshFeature.ENTERPRISE_LICENSE)
        return frozenset(features)

    @staticmethod
    def map(
        features: Iterable[EnumMeshFeature],
        resolved: Mapping[EnumMeshFeature, ModelSecretReference],
    ) -> tuple[ModelMeshConsumptionReference, ...]:
        """Produce one consumption reference per requested feature.

        References are ordered by the declaration order of EnumMeshFeature.
        Resolved references for features that were not requested are ignored.

        Raises:
            MissingSecretError: Listing every requested feature without a
                resolved reference.
        """
        requested = set(features)
        ordered = [feature for feature in EnumMeshFeature if feature in requested]
        missing = [feature.value for feature in ordered if feature not in resolved]
        if missing:
            raise MissingSecretError(
                f"No secret provisioned for mesh features: {', '.join(missing)}",
                features=missing,
                context=ModelInfraErrorContext(
                    transport_type=EnumInfraTransportType.RUNTIME,
                    operation="mesh.map",
                ),
            )
        return tuple(
            ModelMeshConsumptionReference(
                feature=feature,
                secret_path=resolved[feature].path,
                secret_field=resolved[feature].field,
            )
            for feature in ordered
        )

    @staticmethod
    def build_values(
        context: ModelBootstrapContext,
        references: Sequence[ModelMeshConsumptionReference],
        connect_root: str,
        connect_intermediate: str,
        server_role: str = CONSUL_SERVER_ROLE,
        client_role: str = CONSUL_CLIENT_ROLE,
        ca_role: str = CONSUL_CA_ROLE,
    ) -> ModelMeshValues:
        """Assemble validated mesh values from mapped references.

        Raises:
            MissingSecretError: If the references lack a feature the context
                requests.
            pydantic.ValidationError: If the combination is inconsistent.
        """
        by_feature = {reference.feature: reference for reference in references}
        requested = MeshConfigMapper.requested_features(context)
        missing = [
            feature.value
            for feature in EnumMeshFeature
            if feature in requested and feature not in by_feature
        ]
        if missing:
            raise MissingSecretError(
                f"Mesh values need references for: {', '.join(missing)}",
                features=missing,
                context=ModelInfraErrorContext(
                    transport_type=EnumInfraTransportType.RUNTIME,
                    operation="mesh.build_values",
                ),
            )

        def secret_ref(
            feature: EnumMeshFeature, with_key: bool = True
        ) -> ModelMeshSecretRef | None:
            reference = by_feature.get(feature)
            if reference is None:
                return None
            return ModelMeshSecretRef(
                secret_name=reference.secret_path,
                secret_key=reference.secret_field if with_key else None,
            )

        return ModelMeshValues(
            vault=ModelMeshVaultValues(
                consul_server_role=server_role,
                consul_client_role=client_role,
                consul_ca_role=ca_role,
                ca=ModelMeshSecretRef(
                    secret_name=context.vault_ca_secret_name,
                    secret_key=VAULT_CA_SECRET_KEY,
                ),
                connect_ca=ModelMeshConnectCA(
                    address=context.vault_address,
                    root_pki_path=connect_root,
                    intermediate_pki_path=connect_intermediate,
                ),
            ),
            manage_system_acls=context.manage_system_acls,
            tls_enabled=context.tls_enabled,
            enable_auto_encrypt=context.enable_auto_encrypt,
            tls_ca_cert=(
                secret_ref(EnumMeshFeature.TLS_CA, with_key=False)
                if context.tls_enabled
                else None
            ),
            server_cert=(
                secret_ref(EnumMeshFeature.SERVER_CERT, with_key=False)
                if context.tls_enabled
                else None
            ),
            gossip_encryption=ModelMeshSecretRef(
                secret_name=by_feature[EnumMeshFeature.GOSSIP_ENCRYPTION].secret_path,
                secret_key=by_feature[EnumMeshFeature.GOSSIP_ENCRYPTION].secret_field,
            ),
            snapshot_agent=(
                secret_ref(EnumMeshFeature.SNAPSHOT_AGENT)
                if context.snapshot_agent_enabled
                else None
            ),
            enterprise_license=(
                secret_ref(EnumMeshFeature.ENTERPRISE_LICENSE)
                if context.enable_enterprise
                else None
            ),
            server_extra_volume=context.vault_ca_secret_name,
        )


__all__: list[str] = [
    "CONSUL_CA_ROLE",
    "CONSUL_CLIENT_ROLE",
    "CONSUL_SERVER_ROLE",
    "MeshConfigMapper",
    "VAULT_CA_SECRET_KEY",
]
