# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Consul HTTP API client configuration."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, SecretStr


class ModelConsulClientConfig(BaseModel):
    """Address and credentials of the Consul HTTP API.

    Attributes:
        address: Consul HTTP address (e.g. "https://consul-server.consul:8501")
        token: ACL token sent as X-Consul-Token, required with managed ACLs
        timeout_seconds: Request timeout
        verify_ssl: Verify the server certificate (or path to a CA bundle)
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    address: str = Field(min_length=1)
    token: SecretStr | None = None
    timeout_seconds: float = Field(default=10.0, ge=0.1, le=300.0)
    verify_ssl: bool | str = True


__all__: list[str] = ["ModelConsulClientConfig"]
