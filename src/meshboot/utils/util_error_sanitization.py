# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Error message sanitization utilities.

Backend exception messages can echo request bodies, which may contain
secret material. Messages are checked against sensitive patterns before
they are logged or stored in diagnostics.

Example:
    >>> sanitize_error_message(ValueError("write failed: token=s.abc123"))
    'ValueError: [REDACTED - potentially sensitive data]'
"""

from __future__ import annotations

SENSITIVE_PATTERNS: tuple[str, ...] = (
    "password",
    "secret_id",
    "token",
    "private_key",
    "privatekey",
    "-----begin",
    "gossip",
    "license",
    "bearer",
    "authorization",
    "credential",
)

_MAX_MESSAGE_LENGTH = 500


def sanitize_error_string(message: str) -> str:
    """Return the message, or a redaction marker if it looks sensitive."""
    lowered = message.lower()
    if any(pattern in lowered for pattern in SENSITIVE_PATTERNS):
        return "[REDACTED - potentially sensitive data]"
    if len(message) > _MAX_MESSAGE_LENGTH:
        return message[:_MAX_MESSAGE_LENGTH] + "...[truncated]"
    return message


def sanitize_error_message(error: BaseException) -> str:
    """Format an exception as ``Type: message`` with sensitive content redacted."""
    return f"{type(error).__name__}: {sanitize_error_string(str(error))}"


__all__ = [
    "SENSITIVE_PATTERNS",
    "sanitize_error_message",
    "sanitize_error_string",
]
