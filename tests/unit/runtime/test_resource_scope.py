# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Unit tests for ResourceScope release ordering and failure handling."""

from __future__ import annotations

import pytest

from meshboot.runtime import ResourceScope


def _recorder(released: list[str], name: str):
    async def release() -> None:
        released.append(name)

    return release


class TestResourceScope:
    """Test LIFO release, keep_on_failure and release failures."""

    @pytest.mark.asyncio
    async def test_releases_newest_first(self) -> None:
        released: list[str] = []
        async with ResourceScope() as scope:
            scope.register_release("pki_mount", "connect-root", _recorder(released, "root"))
            scope.register_release(
                "pki_mount", "connect-intermediate", _recorder(released, "intermediate")
            )
            scope.register_release("auth_role", "consul-server", _recorder(released, "role"))

        assert released == ["role", "intermediate", "root"]
        assert scope.handles == ()

    @pytest.mark.asyncio
    async def test_exception_propagates_after_release(self) -> None:
        released: list[str] = []
        with pytest.raises(RuntimeError, match="validation failed"):
            async with ResourceScope() as scope:
                scope.register_release("policy", "consul-gossip", _recorder(released, "policy"))
                raise RuntimeError("validation failed")

        assert released == ["policy"]

    @pytest.mark.asyncio
    async def test_keep_on_failure_skips_release(self) -> None:
        released: list[str] = []
        with pytest.raises(RuntimeError):
            async with ResourceScope(keep_on_failure=True) as scope:
                scope.register_release("policy", "consul-gossip", _recorder(released, "policy"))
                raise RuntimeError("validation failed")

        assert released == []
        assert [str(handle) for handle in scope.handles] == ["policy:consul-gossip"]

    @pytest.mark.asyncio
    async def test_keep_on_failure_still_releases_on_success(self) -> None:
        released: list[str] = []
        async with ResourceScope(keep_on_failure=True) as scope:
            scope.register_release("policy", "consul-gossip", _recorder(released, "policy"))

        assert released == ["policy"]

    @pytest.mark.asyncio
    async def test_failing_release_does_not_stop_others(self) -> None:
        released: list[str] = []

        async def broken() -> None:
            raise OSError("backend went away")

        async with ResourceScope() as scope:
            scope.register_release("kv_mount", "consul", _recorder(released, "kv"))
            scope.register_release("policy", "consul-gossip", broken)

        assert released == ["kv"]
        ((handle, error),) = scope.release_failures
        assert handle.kind == "policy"
        assert isinstance(error, OSError)

    @pytest.mark.asyncio
    async def test_register_after_close_raises(self) -> None:
        scope = ResourceScope()
        await scope.release_all()

        with pytest.raises(RuntimeError, match="closed scope"):
            scope.register_release("policy", "late", _recorder([], "late"))

    @pytest.mark.asyncio
    async def test_release_all_is_idempotent(self) -> None:
        released: list[str] = []
        scope = ResourceScope()
        scope.register_release("policy", "consul-gossip", _recorder(released, "policy"))

        await scope.release_all()
        await scope.release_all()

        assert released == ["policy"]
