# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Unit tests for the meshboot error hierarchy."""

from __future__ import annotations

from uuid import uuid4

import pytest

from meshboot.enums import (
    EnumBootstrapErrorCode,
    EnumBootstrapStage,
    EnumInfraTransportType,
)
from meshboot.errors import (
    AlreadyExistsError,
    BackendUnavailableError,
    BootstrapStageError,
    ConnectivityCancelledError,
    ConnectivityTimeoutError,
    MeshBootstrapError,
    MissingSecretError,
    ModelInfraErrorContext,
    PermissionDeniedError,
    PolicyNotFoundError,
    ResourceNotFoundError,
    SecretNotFoundError,
    UnknownPolicyError,
)


class TestModelInfraErrorContext:
    def test_with_correlation_generates_id(self) -> None:
        context = ModelInfraErrorContext.with_correlation(operation="kv.read")

        assert context.correlation_id is not None
        assert context.operation == "kv.read"

    def test_with_correlation_keeps_given_id(self) -> None:
        correlation_id = uuid4()

        context = ModelInfraErrorContext.with_correlation(correlation_id=correlation_id)

        assert context.correlation_id == correlation_id


class TestMeshBootstrapError:
    """Test structured context and error codes."""

    def test_context_fields_flattened(self) -> None:
        correlation_id = uuid4()
        error = MeshBootstrapError(
            "Operation failed",
            context=ModelInfraErrorContext(
                transport_type=EnumInfraTransportType.VAULT,
                operation="policy.write",
                target_name="consul-gossip",
                correlation_id=correlation_id,
            ),
            attempt=2,
        )

        assert str(error) == "Operation failed"
        assert error.error_code is EnumBootstrapErrorCode.OPERATION_FAILED
        assert error.correlation_id == correlation_id
        assert error.context == {
            "attempt": 2,
            "transport_type": EnumInfraTransportType.VAULT,
            "operation": "policy.write",
            "target_name": "consul-gossip",
        }

    @pytest.mark.parametrize(
        ("error_class", "code"),
        [
            (BackendUnavailableError, EnumBootstrapErrorCode.BACKEND_UNAVAILABLE),
            (PermissionDeniedError, EnumBootstrapErrorCode.PERMISSION_DENIED),
            (ResourceNotFoundError, EnumBootstrapErrorCode.NOT_FOUND),
            (PolicyNotFoundError, EnumBootstrapErrorCode.NOT_FOUND),
        ],
    )
    def test_error_codes(
        self, error_class: type[MeshBootstrapError], code: EnumBootstrapErrorCode
    ) -> None:
        assert error_class("failed").error_code is code

    def test_secret_not_found_carries_location(self) -> None:
        error = SecretNotFoundError(
            "missing", secret_path="consul/data/secret/gossip", secret_field="gossip"
        )

        assert isinstance(error, ResourceNotFoundError)
        assert error.context["secret_path"] == "consul/data/secret/gossip"
        assert error.context["secret_field"] == "gossip"

    def test_provisioning_errors_carry_names(self) -> None:
        assert AlreadyExistsError("exists", mount_id="pki").mount_id == "pki"
        assert UnknownPolicyError("unknown", policy_names=["a", "b"]).policy_names == (
            "a",
            "b",
        )
        assert MissingSecretError("missing", features=["gossip_encryption"]).context[
            "features"
        ] == ["gossip_encryption"]


class TestBootstrapStageError:
    """Test stage reporting and retry classification."""

    def test_message_names_stage_and_cause(self) -> None:
        error = BootstrapStageError(
            stage=EnumBootstrapStage.ROOT_PROVISIONED,
            last_completed_stage=EnumBootstrapStage.ROLES_BINDABLE,
            cause=PermissionDeniedError("denied on connect_root"),
        )

        assert "root_provisioned" in str(error)
        assert "PermissionDeniedError" in str(error)
        assert error.context["last_completed_stage"] == "roles_bindable"
        assert error.error_code is EnumBootstrapErrorCode.STAGE_FAILED

    def test_retryable_only_for_backend_unavailable(self) -> None:
        transient = BootstrapStageError(
            stage=EnumBootstrapStage.SECRETS_WRITTEN,
            last_completed_stage=EnumBootstrapStage.INTERMEDIATE_PROVISIONED,
            cause=BackendUnavailableError("sealed"),
        )
        fatal = BootstrapStageError(
            stage=EnumBootstrapStage.SECRETS_WRITTEN,
            last_completed_stage=EnumBootstrapStage.INTERMEDIATE_PROVISIONED,
            cause=PermissionDeniedError("denied"),
        )

        assert transient.retryable is True
        assert fatal.retryable is False

    def test_connectivity_timeout_attempts(self) -> None:
        error = ConnectivityTimeoutError("gave up", attempts=30)

        assert error.attempts == 30
        assert error.error_code is EnumBootstrapErrorCode.TIMEOUT

    def test_connectivity_cancelled_attempts(self) -> None:
        error = ConnectivityCancelledError("cancelled", attempts=2)

        assert error.attempts == 2
        assert error.error_code is EnumBootstrapErrorCode.CANCELLED
        assert isinstance(error, MeshBootstrapError)


class TestEnumBootstrapStage:
    def test_sequence_is_linear(self) -> None:
        stages = EnumBootstrapStage.sequence()

        assert stages[0] is EnumBootstrapStage.NOT_STARTED
        assert stages[-1] is EnumBootstrapStage.DONE
        for current, following in zip(stages, stages[1:]):
            assert current.next_stage() is following

    def test_done_has_no_next_stage(self) -> None:
        assert EnumBootstrapStage.DONE.next_stage() is None
