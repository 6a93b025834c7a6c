"""
vincent.integrations.resolver.base - Abstract Policy Resolver Interface
=========================================================================

The resolver answers "is this delegatee allowed to run this tool for this
delegator, and which policies apply?". In production that answer comes from
on-chain state; the engine only depends on this interface.

    resolve(delegatee, delegator, tool_cid)
        → DelegationResolution(is_permitted, app_id, app_version,
                               decoded_policies={policy_cid: user_params})

``decoded_policies`` is ordered; policies are evaluated in that order.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from vincent.core.models import DelegationResolution


class PolicyResolver(ABC):
    """Abstract base class for delegation/policy resolvers."""

    @abstractmethod
    async def resolve(
        self,
        delegatee_address: str,
        delegator_address: str,
        tool_ipfs_cid: str,
    ) -> DelegationResolution:
        """Resolve the delegation for one tool invocation.

        Returns:
            A ``DelegationResolution``. ``is_permitted=False`` means the
            invocation must not proceed.
        """
        ...
