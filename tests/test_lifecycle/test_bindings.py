"""
Tests for vincent.lifecycle.bindings
======================================
"""

import pytest
from pydantic import BaseModel, ValidationError

from tests.conftest import ALLOWLIST_CID, SPEND_CID, TOOL_CID
from vincent.core.exceptions import (
    ConfigurationError,
    UnsupportedPolicyError,
    UnsupportedToolVersionError,
)
from vincent.lifecycle.bindings import (
    SupportedPolicies,
    ValidatedPolicy,
    create_tool_policy,
    map_tool_params,
    validate_policies,
)
from vincent.lifecycle.policy import VincentPolicy


class Transfer(BaseModel):
    to: str
    amount: int


# =============================================================================
# Test: create_tool_policy
# =============================================================================
class TestCreateToolPolicy:
    """Tests for binding a policy to a tool."""

    def test_binds_wrapped_policy(self, spending_limit_policy) -> None:
        bound = create_tool_policy(spending_limit_policy, ipfs_cid="QmA", tool_parameter_mappings={"a": "b"})
        assert bound.policy is spending_limit_policy
        assert bound.package_name == "@test/spending-limit"
        assert bound.tool_parameter_mappings == {"a": "b"}

    def test_wraps_definition(self, spending_limit_policy) -> None:
        bound = create_tool_policy(spending_limit_policy.definition, ipfs_cid="QmA")
        assert isinstance(bound.policy, VincentPolicy)
        assert bound.policy is not spending_limit_policy

    def test_rejects_incompatible_version(self, spending_limit_policy) -> None:
        with pytest.raises(UnsupportedToolVersionError):
            create_tool_policy(spending_limit_policy, ipfs_cid="QmA", tool_api_version="2.1.0")

    def test_rejects_empty_cid(self, spending_limit_policy) -> None:
        with pytest.raises(ValidationError):
            create_tool_policy(spending_limit_policy, ipfs_cid="")


# =============================================================================
# Test: SupportedPolicies
# =============================================================================
class TestSupportedPolicies:
    """Tests for the per-tool policy index."""

    def test_lookups(self, transfer_tool) -> None:
        index = transfer_tool.supported_policies
        assert index.by_ipfs_cid(SPEND_CID).package_name == "@test/spending-limit"
        assert index.by_package_name("@test/recipient-allowlist").ipfs_cid == ALLOWLIST_CID
        assert index.by_ipfs_cid("QmMissing") is None
        assert SPEND_CID in index
        assert "@test/recipient-allowlist" in index
        assert index.package_names == ["@test/spending-limit", "@test/recipient-allowlist"]
        assert [bound.ipfs_cid for bound in index] == [SPEND_CID, ALLOWLIST_CID]

    def test_duplicate_cid(self, spending_limit_policy, allowlist_policy) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            SupportedPolicies([
                create_tool_policy(spending_limit_policy, ipfs_cid="QmSame"),
                create_tool_policy(allowlist_policy, ipfs_cid="QmSame"),
            ])
        assert exc_info.value.error_code == "DUPLICATE_POLICY"


# =============================================================================
# Test: Parameter Mapping
# =============================================================================
class TestMapToolParams:
    """Tests for map_tool_params()."""

    def test_renames_and_drops(self) -> None:
        mapped = map_tool_params(
            {"amount": 5, "to": "0xabc", "token": "USDC"},
            {"amount": "spend", "token": "asset"},
        )
        assert mapped == {"spend": 5, "asset": "USDC"}

    def test_missing_tool_param_is_skipped(self) -> None:
        assert map_tool_params({"amount": 5}, {"memo": "note"}) == {}

    def test_empty_mapping_forwards_nothing(self) -> None:
        assert map_tool_params({"amount": 5}, {}) == {}


# =============================================================================
# Test: validate_policies
# =============================================================================
class TestValidatePolicies:
    """Tests for adapting resolver output into the orchestrator work list."""

    def test_order_and_mapping(self, transfer_tool) -> None:
        validated = validate_policies(
            {ALLOWLIST_CID: {"allowed": []}, SPEND_CID: {"max_amount": 1}},
            transfer_tool,
            {"to": "0xabc", "amount": 9},
            TOOL_CID,
        )
        assert validated == [
            ValidatedPolicy("@test/recipient-allowlist", {"recipient": "0xabc"}, {"allowed": []}),
            ValidatedPolicy("@test/spending-limit", {"amount": 9}, {"max_amount": 1}),
        ]

    def test_accepts_model_params(self, transfer_tool) -> None:
        validated = validate_policies(
            {SPEND_CID: None}, transfer_tool, Transfer(to="0x1", amount=3), TOOL_CID
        )
        assert validated[0].tool_policy_params == {"amount": 3}

    def test_unsupported_policy_is_fatal(self, transfer_tool) -> None:
        with pytest.raises(UnsupportedPolicyError) as exc_info:
            validate_policies(
                {SPEND_CID: {}, "QmRogue": {}}, transfer_tool, {"to": "x", "amount": 1}, TOOL_CID
            )
        assert exc_info.value.policy_ipfs_cid == "QmRogue"
        assert exc_info.value.tool_ipfs_cid == TOOL_CID

    def test_no_applicable_policies(self, transfer_tool) -> None:
        assert validate_policies({}, transfer_tool, {"to": "x", "amount": 1}, TOOL_CID) == []

    def test_non_mapping_params_rejected(self, transfer_tool) -> None:
        with pytest.raises(TypeError):
            validate_policies({}, transfer_tool, ["not", "a", "mapping"], TOOL_CID)
