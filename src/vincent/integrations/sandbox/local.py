"""
vincent.integrations.sandbox.local - In-Process Policy Sandbox
================================================================

Runs registered policies in the current process through a ``PolicyHandler``.
This is the backend for local development and end-to-end tests: the tool
side still only sees JSON text, exactly as it would from a remote host.

Usage:
    >>> sandbox = LocalPolicySandbox()
    >>> sandbox.register_policy("QmSpendLimit", spending_limit, resolver)
    >>> text = await sandbox.call("QmSpendLimit", request.to_wire(),
    ...                           delegatee_address="0xapp")
"""

from __future__ import annotations

from typing import Any, Optional, Protocol

import structlog

from vincent.core.config import SandboxConfig
from vincent.core.exceptions import SandboxError
from vincent.integrations.sandbox.base import PolicySandbox

logger = structlog.get_logger()


class SandboxedPolicy(Protocol):
    """Anything that can answer a policy evaluation request with JSON text."""

    async def handle(
        self,
        params: dict[str, Any],
        delegatee_address: Optional[str] = None,
    ) -> str:
        ...


class LocalPolicySandbox(PolicySandbox):
    """Policy sandbox that dispatches to in-process handlers by ipfs cid."""

    def __init__(self, config: Optional[SandboxConfig] = None) -> None:
        super().__init__(config)
        self._handlers: dict[str, SandboxedPolicy] = {}
        self._logger = logger.bind(component="local_policy_sandbox")

    @property
    def registered_cids(self) -> list[str]:
        return list(self._handlers)

    def register(self, ipfs_cid: str, handler: SandboxedPolicy) -> None:
        """Publish ``handler`` under ``ipfs_cid``. Re-registering replaces it."""
        self._handlers[ipfs_cid] = handler
        self._logger.debug("policy_registered", ipfs_cid=ipfs_cid)

    def register_policy(self, ipfs_cid: str, policy: Any, resolver: Any) -> None:
        """Wrap a ``VincentPolicy`` in a ``PolicyHandler`` and register it."""
        from vincent.orchestration.policy_handler import PolicyHandler

        self.register(ipfs_cid, PolicyHandler(policy=policy, ipfs_cid=ipfs_cid, resolver=resolver))

    def unregister(self, ipfs_cid: str) -> None:
        self._handlers.pop(ipfs_cid, None)

    async def call(
        self,
        ipfs_cid: str,
        params: dict[str, Any],
        *,
        delegatee_address: Optional[str] = None,
    ) -> str:
        handler = self._handlers.get(ipfs_cid)
        if handler is None:
            raise SandboxError(
                message=f"No policy published under {ipfs_cid}",
                ipfs_cid=ipfs_cid,
            )

        try:
            return await handler.handle(params, delegatee_address)
        except Exception as exc:
            self._logger.warning("policy_sandbox_call_failed", ipfs_cid=ipfs_cid, error=str(exc))
            raise SandboxError(
                message=f"Policy {ipfs_cid} failed in sandbox: {exc}",
                ipfs_cid=ipfs_cid,
            ) from exc
