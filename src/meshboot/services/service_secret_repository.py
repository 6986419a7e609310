# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Secret Repository.

Sole reader and writer of secret values. Everything else in meshboot holds
ModelSecretReference values and asks the repository when it needs bytes.

Paths use the KV v2 API form ``<mount>/data/<path>``; a secret holds a map
of fields, and writes upsert one field while preserving the others.

Idempotency:
    ``put`` reads the current secret first and skips the write when the
    field already holds the value, so re-running a bootstrap adds no new
    KV versions. ``ensure`` only calls its generator when the field is
    absent, which keeps generated keys stable across runs.

Caching:
    None. Every call goes to the backend.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING
from uuid import UUID

from pydantic import SecretBytes, SecretStr

from meshboot.enums import EnumInfraTransportType
from meshboot.errors import (
    ModelInfraErrorContext,
    ProtocolConfigurationError,
    SecretNotFoundError,
)
from meshboot.models.model_secret_reference import ModelSecretReference
from meshboot.utils.util_kv_path import split_kv_path

if TYPE_CHECKING:
    from meshboot.protocols import ProtocolSecretsBackend
    from meshboot.runtime.resource_scope import ResourceScope

logger = logging.getLogger(__name__)

SecretValue = str | bytes | SecretStr | SecretBytes


def _to_text(value: SecretValue) -> str:
    if isinstance(value, SecretStr | SecretBytes):
        value = value.get_secret_value()
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


class SecretRepository:
    """Idempotent KV v2 secret storage.

    Example:
        >>> repository = SecretRepository(backend)
        >>> ref = await repository.put("consul/data/secret/gossip", "gossip", key)
        >>> str(ref)
        'consul/data/secret/gossip#gossip'
    """

    def __init__(self, backend: ProtocolSecretsBackend) -> None:
        self._backend = backend

    def _split(self, path: str, operation: str) -> tuple[str, str]:
        try:
            return split_kv_path(path)
        except ValueError as e:
            raise ProtocolConfigurationError(
                str(e),
                context=ModelInfraErrorContext(
                    transport_type=EnumInfraTransportType.VAULT,
                    operation=operation,
                    target_name=path,
                ),
            ) from e

    async def ensure_kv_engine(
        self, mount: str, correlation_id: UUID | None = None
    ) -> bool:
        """Enable a KV v2 engine at mount unless one exists.

        Returns:
            True if the engine was created by this call.
        """
        created = await self._backend.ensure_secrets_engine(
            mount, "kv", options={"version": "2"}, correlation_id=correlation_id
        )
        logger.debug(
            "KV engine ensured",
            extra={
                "mount": mount,
                "created": created,
                "correlation_id": str(correlation_id) if correlation_id else None,
            },
        )
        return created

    async def put(
        self,
        path: str,
        field: str,
        value: SecretValue,
        scope: ResourceScope | None = None,
        correlation_id: UUID | None = None,
    ) -> ModelSecretReference:
        """Upsert one field of the secret at path.

        Raises:
            ProtocolConfigurationError: If path is not a KV v2 API path.
            BackendUnavailableError: On transport or authentication failure.
            PermissionDeniedError: If the token cannot write path.
        """
        mount, secret_path = self._split(path, "secret.put")
        text = _to_text(value)

        current = await self._backend.kv_read(mount, secret_path, correlation_id)
        if current is not None and current.get(field) == text:
            logger.debug(
                "Secret field unchanged, skipping write",
                extra={
                    "path": path,
                    "field": field,
                    "correlation_id": str(correlation_id) if correlation_id else None,
                },
            )
        else:
            merged = dict(current or {})
            merged[field] = text
            await self._backend.kv_write(mount, secret_path, merged, correlation_id)
            logger.info(
                "Secret field written",
                extra={
                    "path": path,
                    "field": field,
                    "correlation_id": str(correlation_id) if correlation_id else None,
                },
            )

        self._register(path, scope, correlation_id)
        return ModelSecretReference(path=path, field=field)

    async def get(
        self, path: str, field: str, correlation_id: UUID | None = None
    ) -> SecretBytes:
        """Return the value of one secret field.

        Raises:
            SecretNotFoundError: If the path or the field does not exist.
        """
        mount, secret_path = self._split(path, "secret.get")
        current = await self._backend.kv_read(mount, secret_path, correlation_id)
        if current is None or field not in current:
            raise SecretNotFoundError(
                f"Secret '{path}#{field}' not found",
                context=ModelInfraErrorContext(
                    transport_type=EnumInfraTransportType.VAULT,
                    operation="secret.get",
                    target_name=path,
                    correlation_id=correlation_id,
                ),
                secret_path=path,
                secret_field=field,
            )
        return SecretBytes(current[field].encode("utf-8"))

    async def ensure(
        self,
        path: str,
        field: str,
        generator: Callable[[], SecretValue],
        scope: ResourceScope | None = None,
        correlation_id: UUID | None = None,
    ) -> ModelSecretReference:
        """Return the reference of an existing field, generating it if absent."""
        mount, secret_path = self._split(path, "secret.ensure")
        current = await self._backend.kv_read(mount, secret_path, correlation_id)
        if current is not None and field in current:
            logger.debug(
                "Secret field present, keeping existing value",
                extra={
                    "path": path,
                    "field": field,
                    "correlation_id": str(correlation_id) if correlation_id else None,
                },
            )
        else:
            merged = dict(current or {})
            merged[field] = _to_text(generator())
            await self._backend.kv_write(mount, secret_path, merged, correlation_id)
            logger.info(
                "Generated secret field written",
                extra={
                    "path": path,
                    "field": field,
                    "correlation_id": str(correlation_id) if correlation_id else None,
                },
            )

        self._register(path, scope, correlation_id)
        return ModelSecretReference(path=path, field=field)

    async def delete(self, path: str, correlation_id: UUID | None = None) -> None:
        """Delete the secret at path with all versions. Absent paths are a no-op."""
        mount, secret_path = self._split(path, "secret.delete")
        await self._backend.kv_delete(mount, secret_path, correlation_id)
        logger.info(
            "Secret deleted",
            extra={
                "path": path,
                "correlation_id": str(correlation_id) if correlation_id else None,
            },
        )

    def _register(
        self,
        path: str,
        scope: ResourceScope | None,
        correlation_id: UUID | None,
    ) -> None:
        if scope is None or any(
            handle.kind == "kv_secret" and handle.identifier == path
            for handle in scope.handles
        ):
            return

        async def release() -> None:
            await self.delete(path, correlation_id)

        scope.register_release("kv_secret", path, release)


__all__: list[str] = ["SecretRepository"]
