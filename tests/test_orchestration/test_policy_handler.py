"""
Tests for vincent.orchestration.policy_handler
================================================

PolicyHandler answers sandboxed evaluation requests with JSON text.
"""

import json

import pytest

from tests.conftest import DELEGATEE, DELEGATOR, SPEND_CID, TOOL_CID
from vincent.core.exceptions import UnsupportedToolVersionError
from vincent.core.models import PolicyCallContext, PolicyEvaluationRequest
from vincent.orchestration.policy_handler import PolicyHandler


def _request(amount: int = 5, version: str = "1.0.0", delegator: str = DELEGATOR) -> dict:
    return PolicyEvaluationRequest(
        tool_params={"amount": amount},
        context=PolicyCallContext(tool_ipfs_cid=TOOL_CID, delegator_address=delegator),
        tool_api_version=version,
    ).to_wire()


@pytest.fixture
def handler(spending_limit_policy, resolver):
    return PolicyHandler(spending_limit_policy, SPEND_CID, resolver)


class TestPolicyHandler:
    """Tests for PolicyHandler.handle()."""

    async def test_allow(self, handler) -> None:
        body = json.loads(await handler.handle(_request(), DELEGATEE))
        assert body == {"allow": True, "result": {"approved": True}}

    async def test_user_params_come_from_resolver(self, handler) -> None:
        body = json.loads(await handler.handle(_request(amount=101), DELEGATEE))
        assert body["allow"] is False
        assert body["result"] == {"reason": "over limit"}
        assert body["error"] == "amount exceeds limit"

    async def test_version_mismatch_raises(self, handler) -> None:
        with pytest.raises(UnsupportedToolVersionError):
            await handler.handle(_request(version="2.0.0"), DELEGATEE)

    async def test_missing_version_raises(self, handler) -> None:
        params = _request()
        del params["toolApiVersion"]
        with pytest.raises(UnsupportedToolVersionError):
            await handler.handle(params, DELEGATEE)

    async def test_malformed_request_denies(self, handler) -> None:
        body = json.loads(await handler.handle({"toolApiVersion": "1.0.0"}, DELEGATEE))
        assert body["allow"] is False
        assert "Malformed" in body["error"]

    async def test_missing_delegatee_denies(self, handler) -> None:
        body = json.loads(await handler.handle(_request()))
        assert body["allow"] is False
        assert "result" not in body

    async def test_not_permitted_denies(self, handler) -> None:
        body = json.loads(await handler.handle(_request(delegator="0xStranger"), DELEGATEE))
        assert body["allow"] is False
        assert "not permitted" in body["error"]

    async def test_invalid_tool_params_deny_with_marker(self, handler) -> None:
        params = _request()
        params["toolParams"] = {"amount": "lots"}
        body = json.loads(await handler.handle(params, DELEGATEE))
        assert body["allow"] is False
        assert body["result"]["phase"] == "evaluate"
        assert body["result"]["stage"] == "input"
