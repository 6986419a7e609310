# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Scoped release of provisioned resources.

Components register a release handle for every object they create. When
the scope exits, handles are released in reverse registration order so
dependents go before what they depend on (a leaf role before its mount,
an intermediate before its root).

A failing release is logged and the remaining handles are still released.
The exception that ended the scope, if any, propagates unchanged.

Example:
    >>> async with ResourceScope(keep_on_failure=context.no_cleanup_on_failure) as scope:
    ...     outcome = await orchestrator.run(plan, scope=scope)
    ...     await validator.check(...)
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from types import TracebackType
from uuid import UUID, uuid4

from meshboot.runtime.model_resource_handle import ModelResourceHandle
from meshboot.utils.util_error_sanitization import sanitize_error_message

logger = logging.getLogger(__name__)


class ResourceScope:
    """Async context manager owning release handles.

    Attributes:
        keep_on_failure: Skip all releases when the scope exits with an
            exception, leaving state in place for inspection.
    """

    def __init__(
        self,
        keep_on_failure: bool = False,
        correlation_id: UUID | None = None,
    ) -> None:
        self.keep_on_failure = keep_on_failure
        self.correlation_id = correlation_id or uuid4()
        self._handles: list[ModelResourceHandle] = []
        self._closed = False
        self.release_failures: list[tuple[ModelResourceHandle, BaseException]] = []

    @property
    def handles(self) -> tuple[ModelResourceHandle, ...]:
        return tuple(self._handles)

    def register(self, handle: ModelResourceHandle) -> None:
        """Register a handle to release when the scope exits.

        Raises:
            RuntimeError: If the scope has already been released.
        """
        if self._closed:
            raise RuntimeError(f"Cannot register {handle} on a closed scope")
        self._handles.append(handle)
        logger.debug(
            "Registered release handle",
            extra={
                "kind": handle.kind,
                "identifier": handle.identifier,
                "correlation_id": str(self.correlation_id),
            },
        )

    def register_release(
        self, kind: str, identifier: str, release: Callable[[], Awaitable[None]]
    ) -> ModelResourceHandle:
        handle = ModelResourceHandle(kind=kind, identifier=identifier, release=release)
        self.register(handle)
        return handle

    async def __aenter__(self) -> ResourceScope:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        if exc is not None and self.keep_on_failure:
            self._closed = True
            logger.warning(
                "Keeping provisioned resources after failure",
                extra={
                    "handle_count": len(self._handles),
                    "resources": [str(handle) for handle in self._handles],
                    "correlation_id": str(self.correlation_id),
                },
            )
            return
        await self.release_all()

    async def release_all(self) -> None:
        """Release every registered handle, newest first. Idempotent."""
        self._closed = True
        while self._handles:
            handle = self._handles.pop()
            try:
                await handle.release()
            except Exception as e:
                self.release_failures.append((handle, e))
                logger.warning(
                    "Failed to release resource",
                    extra={
                        "kind": handle.kind,
                        "identifier": handle.identifier,
                        "error": sanitize_error_message(e),
                        "correlation_id": str(self.correlation_id),
                    },
                )
            else:
                logger.debug(
                    "Released resource",
                    extra={
                        "kind": handle.kind,
                        "identifier": handle.identifier,
                        "correlation_id": str(self.correlation_id),
                    },
                )


__all__: list[str] = ["ResourceScope"]
