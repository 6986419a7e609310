# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Test doubles shipped with meshboot."""

from meshboot.testing.backend_in_memory import InMemorySecretsBackend

__all__: list[str] = ["InMemorySecretsBackend"]
