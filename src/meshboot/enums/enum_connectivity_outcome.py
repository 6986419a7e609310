# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Outcome of a bounded connectivity check."""

from enum import Enum


class EnumConnectivityOutcome(str, Enum):
    """Terminal result of ConnectivityValidator.check."""

    SUCCESS = "success"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"


__all__ = ["EnumConnectivityOutcome"]
