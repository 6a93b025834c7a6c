"""
Tests for vincent.integrations.resolver
=========================================
"""

import pytest

from tests.conftest import DELEGATEE, DELEGATOR, SPEND_CID, TOOL_CID
from vincent.integrations.resolver import InMemoryPolicyResolver, PolicyResolver


class TestInMemoryPolicyResolver:
    """Tests for the in-memory grant table."""

    async def test_unknown_delegation_is_not_permitted(self) -> None:
        resolution = await InMemoryPolicyResolver().resolve(DELEGATEE, DELEGATOR, TOOL_CID)
        assert resolution.is_permitted is False
        assert resolution.decoded_policies == {}

    async def test_grant_and_resolve(self) -> None:
        resolver = InMemoryPolicyResolver()
        resolver.grant(DELEGATEE, DELEGATOR, TOOL_CID, policies={SPEND_CID: {"max_amount": 3}}, app_id=4)

        resolution = await resolver.resolve(DELEGATEE, DELEGATOR, TOOL_CID)

        assert resolution.is_permitted is True
        assert resolution.app_id == 4
        assert resolution.app_version == 1
        assert resolution.decoded_policies == {SPEND_CID: {"max_amount": 3}}

    async def test_addresses_are_case_insensitive(self, resolver) -> None:
        resolution = await resolver.resolve(DELEGATEE.upper(), DELEGATOR.lower(), TOOL_CID)
        assert resolution.is_permitted is True

    async def test_tool_cid_is_case_sensitive(self, resolver) -> None:
        resolution = await resolver.resolve(DELEGATEE, DELEGATOR, TOOL_CID.lower())
        assert resolution.is_permitted is False

    async def test_revoke(self, resolver) -> None:
        assert resolver.revoke(DELEGATEE, DELEGATOR, TOOL_CID) is True
        assert resolver.revoke(DELEGATEE, DELEGATOR, TOOL_CID) is False
        assert (await resolver.resolve(DELEGATEE, DELEGATOR, TOOL_CID)).is_permitted is False

    def test_is_a_policy_resolver(self) -> None:
        assert isinstance(InMemoryPolicyResolver(), PolicyResolver)
        with pytest.raises(TypeError):
            PolicyResolver()
