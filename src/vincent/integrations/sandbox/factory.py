"""
vincent.integrations.sandbox.factory - Policy Sandbox Factory
===============================================================

Maps ``SandboxConfig.backend`` to a concrete ``PolicySandbox``.

Usage:
    >>> sandbox = create_sandbox(config.sandbox)
    >>> type(sandbox)  # LocalPolicySandbox
"""

from __future__ import annotations

from typing import Optional

from vincent.core.config import SandboxConfig
from vincent.core.enums import SandboxBackend
from vincent.core.exceptions import ConfigurationError
from vincent.integrations.sandbox.base import PolicySandbox


def create_sandbox(config: Optional[SandboxConfig] = None) -> PolicySandbox:
    """Create a policy sandbox for the configured backend.

        - "local" → LocalPolicySandbox (register policies before use)
        - "mock"  → MockPolicySandbox

    Raises:
        ConfigurationError: If the backend name is not recognized.
    """
    config = config or SandboxConfig()
    backend = getattr(config.backend, "value", str(config.backend)).lower()

    if backend == SandboxBackend.LOCAL.value:
        from vincent.integrations.sandbox.local import LocalPolicySandbox
        return LocalPolicySandbox(config)

    if backend == SandboxBackend.MOCK.value:
        from vincent.integrations.sandbox.mock import MockPolicySandbox
        return MockPolicySandbox(config)

    raise ConfigurationError(
        message=(
            f"Unknown sandbox backend: '{backend}'. "
            f"Available backends: {', '.join(b.value for b in SandboxBackend)}"
        ),
        error_code="UNKNOWN_SANDBOX_BACKEND",
        details={"backend": backend},
    )
