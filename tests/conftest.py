"""
Shared Test Fixtures for Vincent
==================================

Reusable pytest fixtures used across the test suite, organized by layer:

    1. Configuration fixtures
    2. Context fixtures (addresses, BaseContext)
    3. Lifecycle fixtures (sample policies, bindings, tool)
    4. Integration fixtures (resolver, sandboxes)
    5. Client fixtures (a fully wired local stack)

The sample domain is a token transfer tool gated by two policies:

    @test/erc20-transfer  (QmTransferTool)
        ├── @test/spending-limit  (QmSpendLimit)   amount → amount
        │       evaluate / precheck / commit
        └── @test/recipient-allowlist (QmAllowlist) to → recipient
                evaluate only
"""

import pytest
from typing_extensions import TypedDict

from vincent.client import ToolClient
from vincent.core.config import VincentConfig
from vincent.core.models import BaseContext, Delegation
from vincent.integrations.resolver.in_memory import InMemoryPolicyResolver
from vincent.integrations.sandbox.local import LocalPolicySandbox
from vincent.integrations.sandbox.mock import MockPolicySandbox
from vincent.lifecycle.bindings import create_tool_policy
from vincent.lifecycle.policy import create_policy
from vincent.lifecycle.tool import create_tool

DELEGATEE = "0xApp000000000000000000000000000000000001"
DELEGATOR = "0xUser00000000000000000000000000000000002"
TOOL_CID = "QmTransferTool"
SPEND_CID = "QmSpendLimit"
ALLOWLIST_CID = "QmAllowlist"
RECIPIENT = "0xabc"


# =============================================================================
# Sample Schemas
# =============================================================================
class SpendParams(TypedDict):
    amount: int


class SpendLimit(TypedDict):
    max_amount: int


class Approval(TypedDict):
    approved: bool


class Rejection(TypedDict):
    reason: str


class CommitParams(TypedDict):
    amount: int


class CommitReceipt(TypedDict):
    recorded: int


class RecipientParams(TypedDict):
    recipient: str


class Allowlist(TypedDict):
    allowed: list[str]


class TransferParams(TypedDict):
    to: str
    amount: int


class TransferReceipt(TypedDict):
    tx_hash: str
    committed: list[str]


class PrecheckQuote(TypedDict):
    fee: int


# =============================================================================
# Sample Callbacks
# =============================================================================
async def spend_evaluate(args, context):
    if args.tool_params["amount"] <= args.user_params["max_amount"]:
        return context.allow({"approved": True})
    return context.deny({"reason": "over limit"}, error="amount exceeds limit")


async def spend_commit(commit_params, context):
    return context.allow({"recorded": commit_params["amount"]})


async def allowlist_evaluate(args, context):
    if args.tool_params["recipient"] in args.user_params["allowed"]:
        return context.allow({"approved": True})
    return context.deny({"reason": "recipient not allowed"})


async def transfer_execute(args, context):
    committed = []
    for package_name, handle in context.policies_context.allowed_policies.items():
        if handle.commit is not None:
            response = await handle.commit({"amount": args.tool_params["amount"]})
            if response.allow:
                committed.append(package_name)
    return context.succeed({"tx_hash": "0xhash", "committed": committed})


async def transfer_precheck(args, context):
    return context.succeed({"fee": 1})


# =============================================================================
# Configuration
# =============================================================================

@pytest.fixture
def config():
    """VincentConfig with defaults."""
    return VincentConfig()


# =============================================================================
# Context
# =============================================================================

@pytest.fixture
def base_context():
    """A fully resolved base context for the sample tool."""
    return BaseContext(
        tool_ipfs_cid=TOOL_CID,
        delegation=Delegation(delegatee_address=DELEGATEE, delegator_address=DELEGATOR),
        app_id=7,
        app_version=2,
    )


# =============================================================================
# Lifecycle
# =============================================================================

@pytest.fixture
def spending_limit_policy():
    """Policy with evaluate, precheck and commit."""
    return create_policy(
        package_name="@test/spending-limit",
        tool_params_schema=SpendParams,
        user_params_schema=SpendLimit,
        eval_allow_result_schema=Approval,
        eval_deny_result_schema=Rejection,
        precheck_allow_result_schema=Approval,
        precheck_deny_result_schema=Rejection,
        commit_params_schema=CommitParams,
        commit_allow_result_schema=CommitReceipt,
        evaluate=spend_evaluate,
        precheck=spend_evaluate,
        commit=spend_commit,
    )


@pytest.fixture
def allowlist_policy():
    """Policy with evaluate only."""
    return create_policy(
        package_name="@test/recipient-allowlist",
        tool_params_schema=RecipientParams,
        user_params_schema=Allowlist,
        eval_allow_result_schema=Approval,
        eval_deny_result_schema=Rejection,
        evaluate=allowlist_evaluate,
    )


@pytest.fixture
def transfer_tool(spending_limit_policy, allowlist_policy):
    """Transfer tool bound to both sample policies."""
    return create_tool(
        package_name="@test/erc20-transfer",
        tool_params_schema=TransferParams,
        supported_policies=[
            create_tool_policy(
                spending_limit_policy,
                ipfs_cid=SPEND_CID,
                tool_parameter_mappings={"amount": "amount"},
            ),
            create_tool_policy(
                allowlist_policy,
                ipfs_cid=ALLOWLIST_CID,
                tool_parameter_mappings={"to": "recipient"},
            ),
        ],
        execute_success_schema=TransferReceipt,
        precheck_success_schema=PrecheckQuote,
        execute=transfer_execute,
        precheck=transfer_precheck,
    )


# =============================================================================
# Integrations
# =============================================================================

@pytest.fixture
def resolver():
    """Resolver granting the sample delegation with both policies applicable."""
    resolver = InMemoryPolicyResolver()
    resolver.grant(
        delegatee_address=DELEGATEE,
        delegator_address=DELEGATOR,
        tool_ipfs_cid=TOOL_CID,
        policies={
            SPEND_CID: {"max_amount": 100},
            ALLOWLIST_CID: {"allowed": [RECIPIENT]},
        },
        app_id=7,
        app_version=2,
    )
    return resolver


@pytest.fixture
def mock_sandbox():
    """Fresh MockPolicySandbox."""
    return MockPolicySandbox()


@pytest.fixture
def local_sandbox(resolver, spending_limit_policy, allowlist_policy):
    """LocalPolicySandbox with both sample policies published."""
    sandbox = LocalPolicySandbox()
    sandbox.register_policy(SPEND_CID, spending_limit_policy, resolver)
    sandbox.register_policy(ALLOWLIST_CID, allowlist_policy, resolver)
    return sandbox


# =============================================================================
# Client
# =============================================================================

@pytest.fixture
def client(transfer_tool, resolver, local_sandbox):
    """ToolClient wired to the local stack."""
    return ToolClient(
        tool=transfer_tool,
        tool_ipfs_cid=TOOL_CID,
        delegatee_address=DELEGATEE,
        resolver=resolver,
        sandbox=local_sandbox,
    )
