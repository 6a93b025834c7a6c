"""
vincent.integrations.resolver.in_memory - Registry-Backed Policy Resolver
===========================================================================

Keeps delegations in a dict. Used for local runs and tests in place of the
on-chain registry.

Usage:
    >>> resolver = InMemoryPolicyResolver()
    >>> resolver.grant(
    ...     delegatee_address="0xapp",
    ...     delegator_address="0xuser",
    ...     tool_ipfs_cid="QmTransfer",
    ...     policies={"QmSpendLimit": {"max_amount": 100}},
    ...     app_id=7,
    ...     app_version=2,
    ... )
    >>> resolution = await resolver.resolve("0xapp", "0xuser", "QmTransfer")
    >>> resolution.is_permitted
    True
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

import structlog

from vincent.core.models import DelegationResolution
from vincent.integrations.resolver.base import PolicyResolver

logger = structlog.get_logger()

_Key = tuple[str, str, str]


def _key(delegatee_address: str, delegator_address: str, tool_ipfs_cid: str) -> _Key:
    # Addresses compare case-insensitively; content addresses do not.
    return (delegatee_address.lower(), delegator_address.lower(), tool_ipfs_cid)


class InMemoryPolicyResolver(PolicyResolver):
    """Policy resolver backed by an in-memory grant table."""

    def __init__(self) -> None:
        self._grants: dict[_Key, DelegationResolution] = {}
        self._logger = logger.bind(component="in_memory_policy_resolver")

    def grant(
        self,
        delegatee_address: str,
        delegator_address: str,
        tool_ipfs_cid: str,
        policies: Optional[Mapping[str, Any]] = None,
        app_id: int = 1,
        app_version: int = 1,
    ) -> DelegationResolution:
        """Permit a delegatee to run a tool for a delegator.

        Args:
            policies: ``{policy_ipfs_cid: user_params}`` in evaluation order.

        Returns:
            The stored resolution.
        """
        resolution = DelegationResolution(
            is_permitted=True,
            app_id=app_id,
            app_version=app_version,
            decoded_policies=dict(policies or {}),
        )
        self._grants[_key(delegatee_address, delegator_address, tool_ipfs_cid)] = resolution
        self._logger.debug(
            "delegation_granted",
            delegatee=delegatee_address,
            tool_ipfs_cid=tool_ipfs_cid,
            policies=list(resolution.decoded_policies),
        )
        return resolution

    def revoke(self, delegatee_address: str, delegator_address: str, tool_ipfs_cid: str) -> bool:
        """Remove a grant. Returns True if one existed."""
        removed = self._grants.pop(
            _key(delegatee_address, delegator_address, tool_ipfs_cid), None
        )
        return removed is not None

    async def resolve(
        self,
        delegatee_address: str,
        delegator_address: str,
        tool_ipfs_cid: str,
    ) -> DelegationResolution:
        resolution = self._grants.get(_key(delegatee_address, delegator_address, tool_ipfs_cid))
        if resolution is None:
            return DelegationResolution(is_permitted=False)
        return resolution
