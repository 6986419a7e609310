# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""KV v2 path helpers.

Secret locations are written in Vault API form, ``<mount>/data/<path>``,
because that is the form the mesh Helm chart and Vault policies use
(e.g. ``consul/data/secret/gossip``). hvac needs the mount and the path
within the mount separately.
"""

from __future__ import annotations

_DATA_SEGMENT = "data"


def split_kv_path(path: str) -> tuple[str, str]:
    """Split a KV v2 API path into (mount, secret path).

    Args:
        path: Path such as ``consul/data/secret/gossip``.

    Returns:
        Tuple of mount point and path inside the mount,
        e.g. ``("consul", "secret/gossip")``.

    Raises:
        ValueError: If the path does not have the ``<mount>/data/<path>`` form.

    Example:
        >>> split_kv_path("consul/data/secret/gossip")
        ('consul', 'secret/gossip')
    """
    parts = [part for part in path.strip("/").split("/") if part]
    if len(parts) < 3 or parts[1] != _DATA_SEGMENT:
        raise ValueError(
            f"KV v2 path must look like '<mount>/data/<path>', got '{path}'"
        )
    return parts[0], "/".join(parts[2:])


def join_kv_path(mount: str, secret_path: str) -> str:
    """Inverse of split_kv_path."""
    return f"{mount.strip('/')}/{_DATA_SEGMENT}/{secret_path.strip('/')}"


__all__ = ["join_kv_path", "split_kv_path"]
