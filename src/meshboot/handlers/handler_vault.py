# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""HashiCorp Vault secrets backend client using hvac.

Implements ProtocolSecretsBackend on top of the synchronous hvac client.

Security Features:
    - SecretStr protection for the token (never logged)
    - Sanitized error messages (hvac exception text is never forwarded)
    - SSL verification enabled by default

Thread Pool Management:
    hvac is synchronous. Every call runs in a bounded ThreadPoolExecutor via
    loop.run_in_executor() under asyncio.wait_for(), so concurrent stage
    writes never block the event loop and each call has a hard timeout.

Circuit Breaker:
    MixinAsyncCircuitBreaker opens after consecutive transport failures and
    fails fast with BackendUnavailableError until the reset timeout elapses.
    Forbidden and not-found answers prove the server is reachable and do
    not count as failures.

Error Mapping:
    hvac.exceptions.Forbidden     → PermissionDeniedError (never retried)
    hvac.exceptions.InvalidPath   → None for reads, ResourceNotFoundError otherwise
    hvac.exceptions.InvalidRequest → MeshBootstrapError (never retried)
    hvac.exceptions.Unauthorized  → BackendUnavailableError (never retried)
    VaultDown, timeouts, others   → BackendUnavailableError after retries
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from typing import TypeVar
from uuid import UUID, uuid4

import hvac
import hvac.exceptions

from meshboot.enums import EnumInfraTransportType
from meshboot.errors import (
    BackendUnavailableError,
    MeshBootstrapError,
    ModelInfraErrorContext,
    PermissionDeniedError,
    ResourceNotFoundError,
)
from meshboot.handlers.model_vault_handler_config import ModelVaultHandlerConfig
from meshboot.handlers.models import ModelRetryState
from meshboot.mixins import MixinAsyncCircuitBreaker
from meshboot.utils.util_duration import parse_duration_seconds, to_vault_duration

T = TypeVar("T")

logger = logging.getLogger(__name__)

_MISSING = object()


class VaultBackendClient(MixinAsyncCircuitBreaker):
    """Vault implementation of ProtocolSecretsBackend.

    Lifecycle:
        ``initialize()`` creates the hvac client, verifies the token and
        sets up the thread pool and circuit breaker. ``shutdown()`` releases
        them. The client is also an async context manager doing both.

    Example:
        >>> config = ModelVaultHandlerConfig(url=addr, token=SecretStr(token))
        >>> async with VaultBackendClient(config) as backend:
        ...     await backend.kv_read("consul", "secret/gossip")
    """

    def __init__(self, config: ModelVaultHandlerConfig) -> None:
        self._config = config
        self._client: hvac.Client | None = None
        self._executor: ThreadPoolExecutor | None = None
        self._initialized: bool = False
        self._circuit_breaker_initialized: bool = False

    @property
    def config(self) -> ModelVaultHandlerConfig:
        return self._config

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    async def __aenter__(self) -> VaultBackendClient:
        await self.initialize()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.shutdown()

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def _error_context(
        self, operation: str, correlation_id: UUID, target_name: str | None = None
    ) -> ModelInfraErrorContext:
        return ModelInfraErrorContext(
            transport_type=EnumInfraTransportType.VAULT,
            operation=operation,
            target_name=target_name or "vault",
            correlation_id=correlation_id,
        )

    async def initialize(self, correlation_id: UUID | None = None) -> None:
        """Create the hvac client and verify authentication.

        Raises:
            BackendUnavailableError: If Vault is unreachable or rejects the token.
        """
        correlation_id = correlation_id or uuid4()
        config = self._config
        logger.info(
            "Initializing %s",
            self.__class__.__name__,
            extra={"url": config.url, "correlation_id": str(correlation_id)},
        )

        self._executor = ThreadPoolExecutor(
            max_workers=config.max_concurrent_operations,
            thread_name_prefix="meshboot_vault_",
        )
        try:
            self._client = hvac.Client(
                url=config.url,
                token=config.token.get_secret_value(),
                namespace=config.namespace,
                verify=config.verify_ssl,
                timeout=config.timeout_seconds,
            )
            loop = asyncio.get_running_loop()
            authenticated = await asyncio.wait_for(
                loop.run_in_executor(self._executor, self._client.is_authenticated),
                timeout=config.timeout_seconds,
            )
        except Exception as e:
            await self.shutdown()
            raise BackendUnavailableError(
                f"Failed to connect to Vault: {type(e).__name__}",
                context=self._error_context("initialize", correlation_id),
            ) from e

        if not authenticated:
            await self.shutdown()
            raise BackendUnavailableError(
                "Vault authentication failed - check token validity",
                context=self._error_context("initialize", correlation_id),
            )

        if config.circuit_breaker_enabled:
            self._init_circuit_breaker(
                threshold=config.circuit_breaker_failure_threshold,
                reset_timeout=config.circuit_breaker_reset_timeout_seconds,
                service_name=f"vault.{config.namespace or 'default'}",
                transport_type=EnumInfraTransportType.VAULT,
            )
            self._circuit_breaker_initialized = True

        self._initialized = True
        logger.info(
            "%s initialized successfully",
            self.__class__.__name__,
            extra={
                "url": config.url,
                "namespace": config.namespace,
                "timeout_seconds": config.timeout_seconds,
                "verify_ssl": bool(config.verify_ssl),
                "thread_pool_max_workers": config.max_concurrent_operations,
                "circuit_breaker_enabled": config.circuit_breaker_enabled,
                "correlation_id": str(correlation_id),
            },
        )

    async def shutdown(self) -> None:
        """Release the thread pool and client. Safe to call more than once."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
        self._client = None
        if self._circuit_breaker_initialized:
            async with self._circuit_breaker_lock:
                await self._reset_circuit_breaker()
        self._circuit_breaker_initialized = False
        self._initialized = False
        logger.debug("VaultBackendClient shutdown complete")

    def _require_client(self, operation: str, correlation_id: UUID) -> hvac.Client:
        if not self._initialized or self._client is None:
            raise MeshBootstrapError(
                "VaultBackendClient not initialized. Call initialize() first.",
                context=self._error_context(operation, correlation_id),
            )
        return self._client

    # -------------------------------------------------------------------------
    # Execution with retry, timeout and circuit breaker
    # -------------------------------------------------------------------------

    async def _record_failure(self, operation: str, correlation_id: UUID) -> None:
        if self._circuit_breaker_initialized:
            async with self._circuit_breaker_lock:
                await self._record_circuit_failure(operation, correlation_id)

    async def _record_success(self) -> None:
        if self._circuit_breaker_initialized:
            async with self._circuit_breaker_lock:
                await self._reset_circuit_breaker()

    async def _execute(
        self,
        operation: str,
        func: Callable[[hvac.Client], T],
        correlation_id: UUID | None,
        target_name: str,
        missing: object = _MISSING,
    ) -> T:
        """Run an hvac call in the thread pool.

        Args:
            operation: Operation name for logs and error context
            func: Synchronous callable receiving the hvac client
            correlation_id: Correlation ID of the bootstrap run
            target_name: Path, mount or name the call targets
            missing: Value returned when Vault answers InvalidPath. Without
                it InvalidPath raises ResourceNotFoundError.
        """
        correlation_id = correlation_id or uuid4()
        client = self._require_client(operation, correlation_id)

        if self._circuit_breaker_initialized:
            async with self._circuit_breaker_lock:
                await self._check_circuit_breaker(operation, correlation_id)

        retry_config = self._config.retry
        retry_state = ModelRetryState(
            attempt=0,
            max_attempts=retry_config.max_attempts,
            delay_seconds=retry_config.initial_backoff_seconds,
            backoff_multiplier=retry_config.exponential_base,
        )
        ctx = self._error_context(operation, correlation_id, target_name)
        loop = asyncio.get_running_loop()

        while True:
            try:
                result = await asyncio.wait_for(
                    loop.run_in_executor(self._executor, func, client),
                    timeout=self._config.timeout_seconds,
                )
            except hvac.exceptions.Forbidden as e:
                await self._record_success()
                raise PermissionDeniedError(
                    f"Vault denied '{operation}' - check token policies",
                    context=ctx,
                ) from e
            except hvac.exceptions.InvalidPath as e:
                await self._record_success()
                if missing is not _MISSING:
                    return missing  # type: ignore[return-value]
                raise ResourceNotFoundError(
                    f"Vault path not found for '{operation}'",
                    context=ctx,
                ) from e
            except hvac.exceptions.InvalidRequest as e:
                await self._record_success()
                raise MeshBootstrapError(
                    f"Vault rejected '{operation}': {type(e).__name__}",
                    context=ctx,
                ) from e
            except hvac.exceptions.Unauthorized as e:
                await self._record_failure(operation, correlation_id)
                raise BackendUnavailableError(
                    "Vault authentication failed - token invalid or expired",
                    context=ctx,
                ) from e
            except TimeoutError as e:
                retry_state = retry_state.next_attempt(
                    error_message=f"Timeout after {self._config.timeout_seconds}s",
                    max_delay_seconds=retry_config.max_backoff_seconds,
                )
                if not retry_state.is_retriable():
                    await self._record_failure(operation, correlation_id)
                    raise BackendUnavailableError(
                        f"Vault operation timed out after {self._config.timeout_seconds}s",
                        context=ctx,
                    ) from e
            except Exception as e:
                retry_state = retry_state.next_attempt(
                    error_message=f"{type(e).__name__}",
                    max_delay_seconds=retry_config.max_backoff_seconds,
                )
                if not retry_state.is_retriable():
                    await self._record_failure(operation, correlation_id)
                    if isinstance(e, hvac.exceptions.VaultDown):
                        message = "Vault server is unavailable"
                    else:
                        message = f"Vault operation failed: {type(e).__name__}"
                    raise BackendUnavailableError(message, context=ctx) from e
            else:
                await self._record_success()
                return result

            logger.debug(
                "Retrying Vault operation",
                extra={
                    "operation": operation,
                    "attempt": retry_state.attempt,
                    "max_attempts": retry_state.max_attempts,
                    "backoff_seconds": retry_state.delay_seconds,
                    "last_error": retry_state.last_error,
                    "correlation_id": str(correlation_id),
                },
            )
            await asyncio.sleep(retry_state.delay_seconds)

    # -------------------------------------------------------------------------
    # KV v2
    # -------------------------------------------------------------------------

    async def kv_read(
        self, mount: str, path: str, correlation_id: UUID | None = None
    ) -> dict[str, str] | None:
        response = await self._execute(
            "kv.read",
            lambda c: c.secrets.kv.v2.read_secret_version(
                path=path, mount_point=mount, raise_on_deleted_version=True
            ),
            correlation_id,
            f"{mount}/data/{path}",
            missing=None,
        )
        if response is None:
            return None
        data = response.get("data", {}).get("data")
        if not isinstance(data, dict):
            return None
        return {str(key): str(value) for key, value in data.items()}

    async def kv_write(
        self,
        mount: str,
        path: str,
        data: dict[str, str],
        correlation_id: UUID | None = None,
    ) -> None:
        await self._execute(
            "kv.write",
            lambda c: c.secrets.kv.v2.create_or_update_secret(
                path=path, secret=dict(data), mount_point=mount
            ),
            correlation_id,
            f"{mount}/data/{path}",
        )

    async def kv_delete(
        self, mount: str, path: str, correlation_id: UUID | None = None
    ) -> None:
        await self._execute(
            "kv.delete",
            lambda c: c.secrets.kv.v2.delete_metadata_and_all_versions(
                path=path, mount_point=mount
            ),
            correlation_id,
            f"{mount}/metadata/{path}",
            missing=None,
        )

    # -------------------------------------------------------------------------
    # sys/mounts
    # -------------------------------------------------------------------------

    async def ensure_secrets_engine(
        self,
        path: str,
        backend_type: str,
        max_lease_ttl_seconds: int | None = None,
        options: dict[str, str] | None = None,
        correlation_id: UUID | None = None,
    ) -> bool:
        mounts = await self._execute(
            "sys.list_mounts",
            lambda c: c.sys.list_mounted_secrets_engines(),
            correlation_id,
            "sys/mounts",
        )
        if _has_mount(mounts, path):
            return False

        config: dict[str, str] = {}
        if max_lease_ttl_seconds is not None:
            config["max_lease_ttl"] = to_vault_duration(max_lease_ttl_seconds)
        await self._execute(
            "sys.enable_secrets_engine",
            lambda c: c.sys.enable_secrets_engine(
                backend_type=backend_type,
                path=path,
                config=config or None,
                options=options,
            ),
            correlation_id,
            path,
        )
        logger.info(
            "Enabled secrets engine",
            extra={
                "path": path,
                "backend_type": backend_type,
                "correlation_id": str(correlation_id) if correlation_id else None,
            },
        )
        return True

    async def list_secrets_engines(
        self, correlation_id: UUID | None = None
    ) -> dict[str, str]:
        mounts = await self._execute(
            "sys.list_mounts",
            lambda c: c.sys.list_mounted_secrets_engines(),
            correlation_id,
            "sys/mounts",
        )
        entries = mounts.get("data", mounts) if isinstance(mounts, dict) else {}
        return {
            path.strip("/"): str(entry["type"])
            for path, entry in entries.items()
            if isinstance(entry, dict) and "type" in entry
        }

    async def disable_secrets_engine(
        self, path: str, correlation_id: UUID | None = None
    ) -> None:
        await self._execute(
            "sys.disable_secrets_engine",
            lambda c: c.sys.disable_secrets_engine(path=path),
            correlation_id,
            path,
            missing=None,
        )

    # -------------------------------------------------------------------------
    # PKI
    # -------------------------------------------------------------------------

    async def pki_read_ca(
        self, mount: str, correlation_id: UUID | None = None
    ) -> str | None:
        certificate = await self._execute(
            "pki.read_ca",
            lambda c: c.secrets.pki.read_ca_certificate(mount_point=mount),
            correlation_id,
            f"{mount}/cert/ca",
            missing=None,
        )
        if not certificate:
            return None
        return str(certificate)

    async def pki_generate_root(
        self,
        mount: str,
        common_name: str,
        ttl_seconds: int,
        correlation_id: UUID | None = None,
    ) -> str:
        response = await self._execute(
            "pki.generate_root",
            lambda c: c.secrets.pki.generate_root(
                type="internal",
                common_name=common_name,
                extra_params={"ttl": to_vault_duration(ttl_seconds)},
                mount_point=mount,
            ),
            correlation_id,
            mount,
        )
        return str(response["data"]["certificate"])

    async def pki_generate_intermediate_csr(
        self, mount: str, common_name: str, correlation_id: UUID | None = None
    ) -> str:
        response = await self._execute(
            "pki.generate_intermediate",
            lambda c: c.secrets.pki.generate_intermediate(
                type="internal",
                common_name=common_name,
                mount_point=mount,
            ),
            correlation_id,
            mount,
        )
        return str(response["data"]["csr"])

    async def pki_sign_intermediate(
        self,
        parent_mount: str,
        csr: str,
        common_name: str,
        ttl_seconds: int,
        correlation_id: UUID | None = None,
    ) -> str:
        response = await self._execute(
            "pki.sign_intermediate",
            lambda c: c.secrets.pki.sign_intermediate(
                csr=csr,
                common_name=common_name,
                extra_params={"ttl": to_vault_duration(ttl_seconds)},
                mount_point=parent_mount,
            ),
            correlation_id,
            parent_mount,
        )
        return str(response["data"]["certificate"])

    async def pki_set_signed_intermediate(
        self, mount: str, certificate: str, correlation_id: UUID | None = None
    ) -> None:
        await self._execute(
            "pki.set_signed_intermediate",
            lambda c: c.secrets.pki.set_signed_intermediate(
                certificate=certificate, mount_point=mount
            ),
            correlation_id,
            mount,
        )

    async def pki_write_role(
        self,
        mount: str,
        name: str,
        params: dict[str, object],
        correlation_id: UUID | None = None,
    ) -> None:
        await self._execute(
            "pki.write_role",
            lambda c: c.secrets.pki.create_or_update_role(
                name=name, extra_params=dict(params), mount_point=mount
            ),
            correlation_id,
            f"{mount}/roles/{name}",
        )

    async def pki_read_role(
        self, mount: str, name: str, correlation_id: UUID | None = None
    ) -> dict[str, object] | None:
        response = await self._execute(
            "pki.read_role",
            lambda c: c.secrets.pki.read_role(name=name, mount_point=mount),
            correlation_id,
            f"{mount}/roles/{name}",
            missing=None,
        )
        if response is None:
            return None
        data = dict(response.get("data") or {})
        data["max_ttl"] = parse_duration_seconds(data.get("max_ttl"))
        return data

    async def pki_issue(
        self,
        mount: str,
        role_name: str,
        common_name: str,
        ttl_seconds: int,
        correlation_id: UUID | None = None,
    ) -> dict[str, object]:
        response = await self._execute(
            "pki.issue",
            lambda c: c.secrets.pki.generate_certificate(
                name=role_name,
                common_name=common_name,
                extra_params={"ttl": to_vault_duration(ttl_seconds)},
                mount_point=mount,
            ),
            correlation_id,
            f"{mount}/issue/{role_name}",
        )
        data = response["data"]
        return {
            "certificate": data["certificate"],
            "issuing_ca": data["issuing_ca"],
            "ca_chain": list(data.get("ca_chain") or []),
            "private_key": data["private_key"],
            "serial_number": data["serial_number"],
        }

    # -------------------------------------------------------------------------
    # sys/policies/acl
    # -------------------------------------------------------------------------

    async def policy_write(
        self, name: str, rules: str, correlation_id: UUID | None = None
    ) -> None:
        await self._execute(
            "sys.write_policy",
            lambda c: c.sys.create_or_update_policy(name=name, policy=rules),
            correlation_id,
            f"sys/policies/acl/{name}",
        )

    async def policy_read(
        self, name: str, correlation_id: UUID | None = None
    ) -> str | None:
        response = await self._execute(
            "sys.read_policy",
            lambda c: c.sys.read_policy(name=name),
            correlation_id,
            f"sys/policies/acl/{name}",
            missing=None,
        )
        if response is None:
            return None
        data = response.get("data", response)
        rules = data.get("rules")
        return str(rules) if rules is not None else None

    async def policy_delete(
        self, name: str, correlation_id: UUID | None = None
    ) -> None:
        await self._execute(
            "sys.delete_policy",
            lambda c: c.sys.delete_policy(name=name),
            correlation_id,
            f"sys/policies/acl/{name}",
            missing=None,
        )

    # -------------------------------------------------------------------------
    # sys/auth and auth/kubernetes
    # -------------------------------------------------------------------------

    async def ensure_auth_method(
        self, path: str, method_type: str, correlation_id: UUID | None = None
    ) -> bool:
        methods = await self._execute(
            "sys.list_auth_methods",
            lambda c: c.sys.list_auth_methods(),
            correlation_id,
            "sys/auth",
        )
        if _has_mount(methods, path):
            return False
        await self._execute(
            "sys.enable_auth_method",
            lambda c: c.sys.enable_auth_method(method_type=method_type, path=path),
            correlation_id,
            f"sys/auth/{path}",
        )
        logger.info(
            "Enabled auth method",
            extra={
                "path": path,
                "method_type": method_type,
                "correlation_id": str(correlation_id) if correlation_id else None,
            },
        )
        return True

    async def disable_auth_method(
        self, path: str, correlation_id: UUID | None = None
    ) -> None:
        await self._execute(
            "sys.disable_auth_method",
            lambda c: c.sys.disable_auth_method(path=path),
            correlation_id,
            f"sys/auth/{path}",
            missing=None,
        )

    async def kubernetes_read_config(
        self, mount: str, correlation_id: UUID | None = None
    ) -> dict[str, object] | None:
        response = await self._execute(
            "kubernetes.read_config",
            lambda c: c.auth.kubernetes.read_config(mount_point=mount),
            correlation_id,
            f"auth/{mount}/config",
            missing=None,
        )
        if not response:
            return None
        data = response.get("data", response)
        return dict(data) if isinstance(data, dict) else None

    async def kubernetes_configure(
        self,
        mount: str,
        kubernetes_host: str,
        correlation_id: UUID | None = None,
    ) -> None:
        await self._execute(
            "kubernetes.configure",
            lambda c: c.auth.kubernetes.configure(
                kubernetes_host=kubernetes_host, mount_point=mount
            ),
            correlation_id,
            f"auth/{mount}/config",
        )

    async def kubernetes_role_write(
        self,
        mount: str,
        name: str,
        bound_service_account_names: list[str],
        bound_service_account_namespaces: list[str],
        policies: list[str],
        correlation_id: UUID | None = None,
    ) -> None:
        await self._execute(
            "kubernetes.write_role",
            lambda c: c.auth.kubernetes.create_role(
                name=name,
                bound_service_account_names=bound_service_account_names,
                bound_service_account_namespaces=bound_service_account_namespaces,
                policies=policies,
                mount_point=mount,
            ),
            correlation_id,
            f"auth/{mount}/role/{name}",
        )

    async def kubernetes_role_read(
        self, mount: str, name: str, correlation_id: UUID | None = None
    ) -> dict[str, list[str]] | None:
        response = await self._execute(
            "kubernetes.read_role",
            lambda c: c.auth.kubernetes.read_role(name=name, mount_point=mount),
            correlation_id,
            f"auth/{mount}/role/{name}",
            missing=None,
        )
        if response is None:
            return None
        # hvac returns the data block; Vault reports policies as token_policies.
        data = response.get("data", response)
        policies = data.get("token_policies") or data.get("policies") or []
        return {
            "bound_service_account_names": list(
                data.get("bound_service_account_names") or []
            ),
            "bound_service_account_namespaces": list(
                data.get("bound_service_account_namespaces") or []
            ),
            "policies": list(policies),
        }

    async def kubernetes_role_delete(
        self, mount: str, name: str, correlation_id: UUID | None = None
    ) -> None:
        await self._execute(
            "kubernetes.delete_role",
            lambda c: c.auth.kubernetes.delete_role(name=name, mount_point=mount),
            correlation_id,
            f"auth/{mount}/role/{name}",
            missing=None,
        )


def _has_mount(listing: object, path: str) -> bool:
    """Return True if a sys/mounts or sys/auth listing contains path."""
    if not isinstance(listing, dict):
        return False
    entries = listing.get("data", listing)
    if not isinstance(entries, dict):
        return False
    return f"{path.strip('/')}/" in entries


__all__: list[str] = ["VaultBackendClient"]
