# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Unit tests for YAML + environment configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from meshboot.errors import ProtocolConfigurationError
from meshboot.runtime import (
    load_bootstrap_context,
    load_config_document,
    load_consul_config,
    load_vault_config,
)

CONFIG_YAML = """\
context:
  release_name: consul
  vault_release_name: vault
  namespace: mesh
  enable_transparent_proxy: true
vault:
  url: http://vault-from-file:8200
  verify_ssl: false
  retry:
    max_attempts: 3
consul:
  address: http://consul-server.mesh:8500
"""


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "meshboot.yaml"
    path.write_text(CONFIG_YAML, encoding="utf-8")
    return path


class TestLoadConfigDocument:
    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ProtocolConfigurationError, match="not found"):
            load_config_document(tmp_path / "absent.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("context: [unclosed", encoding="utf-8")

        with pytest.raises(ProtocolConfigurationError, match="Invalid YAML"):
            load_config_document(path)

    def test_non_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ProtocolConfigurationError, match="must be a mapping"):
            load_config_document(path)

    def test_empty_file_is_empty_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")

        assert load_config_document(path) == {}


class TestLoadBootstrapContext:
    def test_vault_address_from_env(self, config_file: Path) -> None:
        context = load_bootstrap_context(
            config_file, env={"VAULT_ADDR": "http://vault-server.mesh:8200"}
        )

        assert context.release_name == "consul"
        assert context.namespace == "mesh"
        assert context.enable_transparent_proxy is True
        assert context.vault_address == "http://vault-server.mesh:8200"

    def test_enterprise_license_from_env(self, tmp_path: Path) -> None:
        path = tmp_path / "ent.yaml"
        path.write_text(
            "context:\n"
            "  release_name: consul\n"
            "  vault_release_name: vault\n"
            "  vault_address: http://vault:8200\n"
            "  enable_enterprise: true\n",
            encoding="utf-8",
        )

        context = load_bootstrap_context(path, env={"CONSUL_ENT_LICENSE": "lic-text"})

        assert context.enterprise_license is not None
        assert context.enterprise_license.get_secret_value() == "lic-text"

    def test_invalid_section_names_fields_only(self, tmp_path: Path) -> None:
        path = tmp_path / "invalid.yaml"
        path.write_text(
            "context:\n  release_name: consul\n  validation_attempts: 0\n",
            encoding="utf-8",
        )

        with pytest.raises(ProtocolConfigurationError) as exc_info:
            load_bootstrap_context(path, env={})

        message = str(exc_info.value)
        assert "validation_attempts" in message
        assert "vault_release_name" in message

    def test_section_must_be_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "scalar.yaml"
        path.write_text("context: consul\n", encoding="utf-8")

        with pytest.raises(ProtocolConfigurationError, match="'context'"):
            load_bootstrap_context(path, env={})


class TestLoadVaultConfig:
    def test_token_required(self, config_file: Path) -> None:
        with pytest.raises(ProtocolConfigurationError, match="VAULT_TOKEN"):
            load_vault_config(config_file, env={})

    def test_env_overrides_file(self, config_file: Path) -> None:
        config = load_vault_config(
            config_file,
            env={"VAULT_ADDR": "http://vault-from-env:8200", "VAULT_TOKEN": "s.token"},
        )

        assert config.url == "http://vault-from-env:8200"
        assert config.token.get_secret_value() == "s.token"
        assert config.verify_ssl is False
        assert config.retry.max_attempts == 3

    def test_file_url_without_env(self, config_file: Path) -> None:
        config = load_vault_config(config_file, env={"VAULT_TOKEN": "s.token"})

        assert config.url == "http://vault-from-file:8200"


class TestLoadConsulConfig:
    def test_file_values(self, config_file: Path) -> None:
        config = load_consul_config(config_file, env={})

        assert config.address == "http://consul-server.mesh:8500"
        assert config.token is None

    def test_env_values(self, config_file: Path) -> None:
        config = load_consul_config(
            config_file,
            env={"CONSUL_HTTP_ADDR": "http://127.0.0.1:8500", "CONSUL_HTTP_TOKEN": "acl"},
        )

        assert config.address == "http://127.0.0.1:8500"
        assert config.token is not None
        assert config.token.get_secret_value() == "acl"
