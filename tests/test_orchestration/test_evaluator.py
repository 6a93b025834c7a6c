"""
Tests for vincent.orchestration.evaluator
===========================================

Remote policy evaluation is driven through MockPolicySandbox so each test
controls exactly what text comes back for each policy.
"""

import json

import pytest

from tests.conftest import ALLOWLIST_CID, DELEGATEE, DELEGATOR, SPEND_CID, TOOL_CID
from vincent.core.results import (
    PolicyAllow,
    PolicyDeny,
    PolicyEvaluationAllow,
    PolicyEvaluationDeny,
    is_validation_deny_result,
)
from vincent.lifecycle.bindings import validate_policies
from vincent.orchestration.evaluator import evaluate_policies, parse_evaluate_response

SPEND = "@test/spending-limit"
ALLOWLIST = "@test/recipient-allowlist"
PARAMS = {"to": "0xabc", "amount": 5}


@pytest.fixture
def validated(transfer_tool):
    """Both policies applicable, spending limit first."""
    return validate_policies(
        {SPEND_CID: {"max_amount": 100}, ALLOWLIST_CID: {"allowed": ["0xabc"]}},
        transfer_tool,
        PARAMS,
        TOOL_CID,
    )


# =============================================================================
# Test: Response Parsing
# =============================================================================
class TestParseEvaluateResponse:
    """Tests for parse_evaluate_response()."""

    def test_allow_is_validated(self, spending_limit_policy) -> None:
        response = parse_evaluate_response('{"allow": true, "result": {"approved": true}}', spending_limit_policy)
        assert response == PolicyAllow(result={"approved": True})

    def test_allow_with_bad_result_becomes_validation_deny(self, spending_limit_policy) -> None:
        response = parse_evaluate_response('{"allow": true, "result": {"nope": 1}}', spending_limit_policy)
        assert isinstance(response, PolicyDeny)
        assert is_validation_deny_result(response.result)

    def test_deny_is_accepted_as_sent(self, spending_limit_policy) -> None:
        text = json.dumps({"allow": False, "result": {"whatever": [1]}, "error": "no"})
        response = parse_evaluate_response(text, spending_limit_policy)
        assert response == PolicyDeny(result={"whatever": [1]}, error="no")

    def test_unknown_shape_becomes_deny(self, spending_limit_policy) -> None:
        response = parse_evaluate_response('{"result": 1}', spending_limit_policy)
        assert isinstance(response, PolicyDeny)
        assert response.result is None
        assert "allow" in response.error

    def test_malformed_json_raises_value_error(self, spending_limit_policy) -> None:
        with pytest.raises(ValueError):
            parse_evaluate_response("{not json", spending_limit_policy)


# =============================================================================
# Test: evaluate_policies
# =============================================================================
class TestEvaluatePolicies:
    """Tests for sequential, non-short-circuiting evaluation."""

    async def test_all_allow(self, transfer_tool, validated, base_context, mock_sandbox) -> None:
        mock_sandbox.queue_response(PolicyAllow(result={"approved": True}), ipfs_cid=SPEND_CID)
        mock_sandbox.queue_response(PolicyAllow(result={"approved": True}), ipfs_cid=ALLOWLIST_CID)

        result = await evaluate_policies(transfer_tool, validated, base_context, mock_sandbox)

        assert isinstance(result, PolicyEvaluationAllow)
        assert result.evaluated_policies == [SPEND, ALLOWLIST]
        assert set(result.allowed_policies) == {SPEND, ALLOWLIST}

    async def test_request_shape(self, transfer_tool, validated, base_context, mock_sandbox) -> None:
        await evaluate_policies(transfer_tool, validated, base_context, mock_sandbox)

        first = mock_sandbox.call_history[0]
        assert first["ipfs_cid"] == SPEND_CID
        assert first["delegatee_address"] == DELEGATEE
        assert first["params"] == {
            "toolParams": {"amount": 5},
            "context": {"toolIpfsCid": TOOL_CID, "delegatorAddress": DELEGATOR},
            "toolApiVersion": "1.0.0",
        }
        assert mock_sandbox.call_history[1]["params"]["toolParams"] == {"recipient": "0xabc"}

    async def test_deny_does_not_short_circuit(self, transfer_tool, validated, base_context, mock_sandbox) -> None:
        mock_sandbox.queue_response(PolicyDeny(result={"reason": "over limit"}), ipfs_cid=SPEND_CID)
        mock_sandbox.queue_response(PolicyAllow(result={"approved": True}), ipfs_cid=ALLOWLIST_CID)

        result = await evaluate_policies(transfer_tool, validated, base_context, mock_sandbox)

        assert isinstance(result, PolicyEvaluationDeny)
        assert mock_sandbox.called_cids == [SPEND_CID, ALLOWLIST_CID]
        assert result.evaluated_policies == [SPEND, ALLOWLIST]
        assert result.denied_policy.package_name == SPEND
        assert result.denied_policy.result == {"reason": "over limit"}
        assert result.allowed_policies[ALLOWLIST].result == {"approved": True}
        assert SPEND not in result.allowed_policies

    async def test_last_deny_wins(self, transfer_tool, validated, base_context, mock_sandbox) -> None:
        mock_sandbox.queue_response(PolicyDeny(error="first"), ipfs_cid=SPEND_CID)
        mock_sandbox.queue_response(PolicyDeny(error="second"), ipfs_cid=ALLOWLIST_CID)

        result = await evaluate_policies(transfer_tool, validated, base_context, mock_sandbox)

        assert result.denied_policy.package_name == ALLOWLIST
        assert result.denied_policy.error == "second"
        assert result.allowed_policies == {}

    async def test_malformed_response_denies_only_that_policy(
        self, transfer_tool, validated, base_context, mock_sandbox
    ) -> None:
        mock_sandbox.queue_response("<html>502</html>", ipfs_cid=SPEND_CID)
        mock_sandbox.queue_response(PolicyAllow(result={"approved": True}), ipfs_cid=ALLOWLIST_CID)

        result = await evaluate_policies(transfer_tool, validated, base_context, mock_sandbox)

        assert result.allow is False
        assert result.denied_policy.package_name == SPEND
        assert result.denied_policy.result is None
        assert "JSON" in result.denied_policy.error
        assert ALLOWLIST in result.allowed_policies

    async def test_sandbox_failure_becomes_deny(self, transfer_tool, validated, base_context, mock_sandbox) -> None:
        mock_sandbox.set_should_fail(True, "host unreachable")

        result = await evaluate_policies(transfer_tool, validated, base_context, mock_sandbox)

        assert result.allow is False
        assert result.evaluated_policies == [SPEND, ALLOWLIST]
        assert result.denied_policy.error == "host unreachable"
        assert mock_sandbox.call_count == 2

    async def test_invalid_allow_result_is_a_deny(self, transfer_tool, validated, base_context, mock_sandbox) -> None:
        mock_sandbox.queue_response({"allow": True, "result": {"approved": "maybe-later"}}, ipfs_cid=SPEND_CID)
        mock_sandbox.queue_response(PolicyAllow(result={"approved": True}), ipfs_cid=ALLOWLIST_CID)

        result = await evaluate_policies(transfer_tool, validated, base_context, mock_sandbox)

        assert result.denied_policy.package_name == SPEND
        assert is_validation_deny_result(result.denied_policy.result)

    async def test_no_applicable_policies(self, transfer_tool, base_context, mock_sandbox) -> None:
        result = await evaluate_policies(transfer_tool, [], base_context, mock_sandbox)

        assert isinstance(result, PolicyEvaluationAllow)
        assert result.evaluated_policies == []
        assert mock_sandbox.call_count == 0

    async def test_explicit_tool_api_version_is_forwarded(
        self, transfer_tool, validated, base_context, mock_sandbox
    ) -> None:
        await evaluate_policies(transfer_tool, validated, base_context, mock_sandbox, tool_api_version="1.2.0")
        assert mock_sandbox.call_history[0]["params"]["toolApiVersion"] == "1.2.0"
