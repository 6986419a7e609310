# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Named authorization policy and its Vault JSON rendering.

Vault accepts policies as JSON as well as HCL. The JSON form round-trips
through ``sys/policies/acl`` unchanged, so a read policy can be parsed back
without an HCL parser:

    {"path": {"consul/data/secret/gossip": {"capabilities": ["read"]}}}
"""

from __future__ import annotations

import json
from collections import defaultdict
from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field

from meshboot.enums import EnumPolicyPermission
from meshboot.models.model_policy_capability import ModelPolicyCapability


class ModelPolicyDocument(BaseModel):
    """Named set of capabilities.

    Role bindings reference policies by name, so redefining a document
    changes the effective capabilities of every binding that uses it. A
    document grants at least one capability.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(min_length=1, pattern=r"^[A-Za-z0-9_.-]+$")
    capabilities: frozenset[ModelPolicyCapability] = Field(min_length=1)

    @classmethod
    def from_grants(
        cls, name: str, grants: Iterable[tuple[str, Iterable[str]]]
    ) -> ModelPolicyDocument:
        """Build a document from ``(pattern, [permission, ...])`` pairs."""
        capabilities = frozenset(
            ModelPolicyCapability(
                resource_pattern=pattern,
                permission=EnumPolicyPermission(permission),
            )
            for pattern, permissions in grants
            for permission in permissions
        )
        return cls(name=name, capabilities=capabilities)

    def grants(self) -> dict[str, list[str]]:
        """Return permissions grouped by pattern, both sorted."""
        grouped: dict[str, set[str]] = defaultdict(set)
        for capability in self.capabilities:
            grouped[capability.resource_pattern].add(capability.permission.value)
        return {pattern: sorted(grouped[pattern]) for pattern in sorted(grouped)}

    def to_vault_rules(self) -> str:
        """Render the document as a Vault JSON policy."""
        body = {
            "path": {
                pattern: {"capabilities": permissions}
                for pattern, permissions in self.grants().items()
            }
        }
        return json.dumps(body, sort_keys=True)

    @classmethod
    def from_vault_rules(cls, name: str, rules: str) -> ModelPolicyDocument:
        """Parse a JSON policy as written by to_vault_rules.

        Raises:
            ValueError: If the rules are not a JSON policy document or grant
                nothing.
        """
        try:
            body = json.loads(rules)
        except json.JSONDecodeError as e:
            raise ValueError(f"Policy '{name}' is not a JSON policy document") from e
        paths = body.get("path", {}) if isinstance(body, dict) else {}
        if not isinstance(paths, dict):
            raise ValueError(f"Policy '{name}' has no 'path' mapping")
        return cls.from_grants(
            name,
            (
                (pattern, spec.get("capabilities", []))
                for pattern, spec in paths.items()
                if isinstance(spec, dict)
            ),
        )


__all__: list[str] = ["ModelPolicyDocument"]
