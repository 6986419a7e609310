# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Role of a certificate authority within the PKI hierarchy."""

from enum import Enum


class EnumCARole(str, Enum):
    """Position of a CA node in the hierarchy."""

    ROOT = "root"
    INTERMEDIATE = "intermediate"


__all__ = ["EnumCARole"]
