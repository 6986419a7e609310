# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""meshboot handlers.

Handlers adapt external systems to meshboot protocols:
    - VaultBackendClient: ProtocolSecretsBackend over hvac
    - ConsulIntentionClient: ProtocolAccessPolicy over the Consul HTTP API (httpx)
    - HttpProbe: ProtocolConnectivityProbe over httpx
"""

from meshboot.handlers.handler_consul_intentions import ConsulIntentionClient
from meshboot.handlers.handler_http_probe import HttpProbe
from meshboot.handlers.handler_vault import VaultBackendClient
from meshboot.handlers.model_consul_client_config import ModelConsulClientConfig
from meshboot.handlers.model_vault_handler_config import ModelVaultHandlerConfig
from meshboot.handlers.model_vault_retry_config import ModelVaultRetryConfig

__all__: list[str] = [
    "ConsulIntentionClient",
    "HttpProbe",
    "ModelConsulClientConfig",
    "ModelVaultHandlerConfig",
    "ModelVaultRetryConfig",
    "VaultBackendClient",
]
