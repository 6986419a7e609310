# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Duration formatting for Vault TTL parameters."""

from __future__ import annotations

import re

_DURATION_PATTERN = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_UNIT_SECONDS: dict[str, int] = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}


def to_vault_duration(seconds: int) -> str:
    """Render seconds as a Vault duration string (``"3600s"``)."""
    return f"{int(seconds)}s"


def parse_duration_seconds(value: int | str | None) -> int:
    """Parse a Vault duration (int seconds, ``"72h"``, ``"30m"``) into seconds.

    Vault reports TTLs as integers on read but accepts strings on write, and
    the in-memory backend stores whatever it was given. Unknown or empty
    values count as 0 (no limit).
    """
    if value is None:
        return 0
    if isinstance(value, int):
        return value
    match = _DURATION_PATTERN.match(value)
    if match is None:
        return 0
    amount, unit = match.groups()
    return int(amount) * _UNIT_SECONDS[unit]


__all__ = ["parse_duration_seconds", "to_vault_duration"]
