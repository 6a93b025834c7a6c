"""
vincent.integrations.sandbox.base - Abstract Policy Sandbox Interface
=======================================================================

A policy's packaged code never runs inside the tool's process. The tool
side asks a sandbox to run the policy published under a content address and
gets back a single JSON text payload.

    ┌───────────────────┐  call(ipfs_cid, params)  ┌──────────────────┐
    │ evaluate_policies │ ───────────────────────→ │  PolicySandbox   │
    │                   │ ←──── JSON text ──────── │  (abstract)      │
    └───────────────────┘                          └────────┬─────────┘
                                                            │
                                                 ┌──────────┴─────────┐
                                                 │                    │
                                            ┌────▼────┐        ┌──────▼─────┐
                                            │  Local  │        │    Mock    │
                                            │ Sandbox │        │  Sandbox   │
                                            └─────────┘        └────────────┘

The payload must parse as ``{"allow": true, "result": ...}`` or
``{"allow": false, "error": ..., "result": ...}``. Anything else is turned
into a deny by the caller.

The engine places no timeout around ``call()``; cancellation is up to
whoever drives the invocation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional

from vincent.core.config import SandboxConfig
from vincent.core.enums import SandboxBackend


class PolicySandbox(ABC):
    """Abstract base class for policy sandboxes.

    Attributes:
        _config: The sandbox configuration.
    """

    def __init__(self, config: Optional[SandboxConfig] = None) -> None:
        self._config = config or SandboxConfig()

    @property
    def config(self) -> SandboxConfig:
        return self._config

    @property
    def backend(self) -> SandboxBackend:
        return self._config.backend

    @abstractmethod
    async def call(
        self,
        ipfs_cid: str,
        params: dict[str, Any],
        *,
        delegatee_address: Optional[str] = None,
    ) -> str:
        """Run the policy published under ``ipfs_cid`` and return its response.

        Args:
            ipfs_cid: Content address of the policy's packaged code.
            params: Wire-format ``PolicyEvaluationRequest``.
            delegatee_address: Authenticated caller of the sandbox, when the
                backend needs it to resolve the delegation.

        Returns:
            The raw JSON text produced by the policy.

        Raises:
            SandboxError: If the policy could not be run at all.
        """
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}(backend={self.backend.value!r})"
