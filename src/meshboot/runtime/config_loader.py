# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Configuration loading from YAML and the environment.

Config File Structure:
    ```yaml
    context:
      release_name: consul
      vault_release_name: vault
      namespace: default
      vault_address: http://vault-server.default:8200
      enable_transparent_proxy: true
    vault:
      url: https://vault.example.com:8200
      verify_ssl: true
      retry:
        max_attempts: 1
    consul:
      address: http://consul-server.default:8500
    ```

Credentials never live in the file:
    VAULT_ADDR          vault.url (and context.vault_address when unset)
    VAULT_TOKEN         vault.token (required)
    CONSUL_HTTP_ADDR    consul.address
    CONSUL_HTTP_TOKEN   consul.token
    CONSUL_ENT_LICENSE  context.enterprise_license

Security:
    - Uses yaml.safe_load() to prevent arbitrary code execution
    - Validation errors are reported without input values
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import TypeVar

import yaml
from pydantic import BaseModel, SecretStr, ValidationError

from meshboot.errors import ModelInfraErrorContext, ProtocolConfigurationError
from meshboot.handlers.model_consul_client_config import ModelConsulClientConfig
from meshboot.handlers.model_vault_handler_config import ModelVaultHandlerConfig
from meshboot.models.model_bootstrap_context import ModelBootstrapContext

ModelT = TypeVar("ModelT", bound=BaseModel)

logger = logging.getLogger(__name__)

MAX_CONFIG_SIZE_BYTES = 1024 * 1024


def load_config_document(path: str | Path) -> dict[str, object]:
    """Read and parse a meshboot YAML config file.

    Raises:
        ProtocolConfigurationError: If the file is missing, too large, not
            valid YAML, or not a mapping.
    """
    config_path = Path(path)
    ctx = ModelInfraErrorContext.with_correlation(
        operation="load_config", target_name=str(config_path)
    )
    if not config_path.is_file():
        raise ProtocolConfigurationError(
            f"Config file not found: {config_path}", context=ctx
        )
    file_size = config_path.stat().st_size
    if file_size > MAX_CONFIG_SIZE_BYTES:
        raise ProtocolConfigurationError(
            f"Config file too large: {file_size} bytes (max {MAX_CONFIG_SIZE_BYTES})",
            context=ctx,
        )
    try:
        with config_path.open(encoding="utf-8") as f:
            document = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ProtocolConfigurationError(
            f"Invalid YAML in config file: {config_path}", context=ctx
        ) from e

    if document is None:
        document = {}
    if not isinstance(document, dict):
        raise ProtocolConfigurationError(
            f"Config must be a mapping, got {type(document).__name__}", context=ctx
        )
    logger.debug(
        "Loaded config document",
        extra={"config_path": str(config_path), "sections": sorted(document)},
    )
    return document


def _section(document: Mapping[str, object], name: str) -> dict[str, object]:
    section = document.get(name) or {}
    if not isinstance(section, dict):
        raise ProtocolConfigurationError(
            f"Config section '{name}' must be a mapping",
            context=ModelInfraErrorContext.with_correlation(
                operation="load_config", target_name=name
            ),
        )
    return dict(section)


def _validate(model: type[ModelT], values: dict[str, object], section: str) -> ModelT:
    try:
        return model.model_validate(values)
    except ValidationError as e:
        fields = sorted(
            {".".join(str(part) for part in error["loc"]) for error in e.errors()}
        )
        raise ProtocolConfigurationError(
            f"Invalid '{section}' configuration: {', '.join(fields) or 'model'}",
            context=ModelInfraErrorContext.with_correlation(
                operation="load_config", target_name=section
            ),
        ) from e


def load_bootstrap_context(
    path: str | Path, env: Mapping[str, str] | None = None
) -> ModelBootstrapContext:
    """Load the bootstrap context from the ``context`` section."""
    env = os.environ if env is None else env
    values = _section(load_config_document(path), "context")
    if "vault_address" not in values and env.get("VAULT_ADDR"):
        values["vault_address"] = env["VAULT_ADDR"]
    if env.get("CONSUL_ENT_LICENSE"):
        values["enterprise_license"] = SecretStr(env["CONSUL_ENT_LICENSE"])
    return _validate(ModelBootstrapContext, values, "context")


def load_vault_config(
    path: str | Path, env: Mapping[str, str] | None = None
) -> ModelVaultHandlerConfig:
    """Load the Vault client config from the ``vault`` section and environment.

    Raises:
        ProtocolConfigurationError: If VAULT_TOKEN is unset or the section
            is invalid.
    """
    env = os.environ if env is None else env
    values = _section(load_config_document(path), "vault")
    if env.get("VAULT_ADDR"):
        values["url"] = env["VAULT_ADDR"]
    token = env.get("VAULT_TOKEN")
    if not token:
        raise ProtocolConfigurationError(
            "VAULT_TOKEN is not set - Vault authentication token required",
            context=ModelInfraErrorContext.with_correlation(
                operation="load_config", target_name="vault"
            ),
        )
    values["token"] = SecretStr(token)
    return _validate(ModelVaultHandlerConfig, values, "vault")


def load_consul_config(
    path: str | Path, env: Mapping[str, str] | None = None
) -> ModelConsulClientConfig:
    """Load the Consul API config from the ``consul`` section and environment."""
    env = os.environ if env is None else env
    values = _section(load_config_document(path), "consul")
    if env.get("CONSUL_HTTP_ADDR"):
        values["address"] = env["CONSUL_HTTP_ADDR"]
    if env.get("CONSUL_HTTP_TOKEN"):
        values["token"] = SecretStr(env["CONSUL_HTTP_TOKEN"])
    return _validate(ModelConsulClientConfig, values, "consul")


__all__: list[str] = [
    "load_bootstrap_context",
    "load_config_document",
    "load_consul_config",
    "load_vault_config",
]
