# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Test helpers for meshboot unit tests.

Available Utilities:
    Contexts:
        - make_context: Bootstrap context with test defaults
        - make_enterprise_context: Same, with the enterprise license enabled

    Fakes:
        - ScriptedProbe: Connectivity probe answering from a script
        - RecordingDeployer: Mesh deployer recording installs and uninstalls
        - RecordingAccessPolicy: Access policy recording applied intentions
        - IntentionGatedProbe: Probe that succeeds only while traffic is allowed
"""

from tests.helpers.util_context import (
    TEST_LICENSE,
    make_context,
    make_enterprise_context,
)
from tests.helpers.util_fakes import (
    IntentionGatedProbe,
    RecordingAccessPolicy,
    RecordingDeployer,
    ScriptedProbe,
)

__all__ = [
    "IntentionGatedProbe",
    "RecordingAccessPolicy",
    "RecordingDeployer",
    "ScriptedProbe",
    "TEST_LICENSE",
    "make_context",
    "make_enterprise_context",
]
