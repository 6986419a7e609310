# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Utility helpers for path parsing, durations and error sanitization."""

from meshboot.utils.util_duration import parse_duration_seconds, to_vault_duration
from meshboot.utils.util_error_sanitization import (
    sanitize_error_message,
    sanitize_error_string,
)
from meshboot.utils.util_kv_path import join_kv_path, split_kv_path

__all__: list[str] = [
    "join_kv_path",
    "parse_duration_seconds",
    "sanitize_error_message",
    "sanitize_error_string",
    "split_kv_path",
    "to_vault_duration",
]
