"""
Spending Limit Example - Precheck and Execute One Tool
========================================================

This example demonstrates the simplest end-to-end use of Vincent: one tool
gated by one policy, published in an in-process sandbox, invoked by an app
delegatee on behalf of a user.

This is useful for:
    - Seeing the precheck / execute split in action
    - Inspecting the response envelope a host receives
    - Trying out a policy before publishing it

Usage:
    python examples/spending_limit.py
"""

from __future__ import annotations

import asyncio
import json

from typing_extensions import TypedDict

from vincent import ToolClient, create_policy, create_tool, create_tool_policy
from vincent.core.config import load_config
from vincent.core.logging_config import configure_from_config
from vincent.integrations.resolver import InMemoryPolicyResolver
from vincent.integrations.sandbox import LocalPolicySandbox

APP = "0xAppDelegatee"
USER = "0xUserDelegator"
TOOL_CID = "QmTransferTool"
POLICY_CID = "QmSpendingLimit"


class SpendParams(TypedDict):
    amount: int


class SpendLimit(TypedDict):
    max_amount: int


class Decision(TypedDict):
    reason: str


class TransferParams(TypedDict):
    to: str
    amount: int


class Receipt(TypedDict):
    tx_hash: str
    spent: int


async def evaluate_limit(args, context):
    if args.tool_params["amount"] <= args.user_params["max_amount"]:
        return context.allow({"reason": "within limit"})
    return context.deny({"reason": "over limit"}, error="Spending limit exceeded")


async def record_spend(params, context):
    return context.allow({"reason": f"recorded {params['amount']}"})


async def execute_transfer(args, context):
    handle = context.policies_context.allowed_policies["@example/spending-limit"]
    await handle.commit({"amount": args.tool_params["amount"]})
    return context.succeed({"tx_hash": "0xfeed", "spent": args.tool_params["amount"]})


async def main() -> None:
    """Precheck then execute a transfer, once within the limit and once over it."""
    config = load_config()
    configure_from_config(config)

    spending_limit = create_policy(
        package_name="@example/spending-limit",
        tool_params_schema=SpendParams,
        user_params_schema=SpendLimit,
        eval_allow_result_schema=Decision,
        eval_deny_result_schema=Decision,
        precheck_allow_result_schema=Decision,
        precheck_deny_result_schema=Decision,
        commit_params_schema=SpendParams,
        commit_allow_result_schema=Decision,
        evaluate=evaluate_limit,
        precheck=evaluate_limit,
        commit=record_spend,
    )
    transfer = create_tool(
        package_name="@example/transfer",
        tool_params_schema=TransferParams,
        supported_policies=[
            create_tool_policy(
                spending_limit,
                ipfs_cid=POLICY_CID,
                tool_parameter_mappings={"amount": "amount"},
            ),
        ],
        execute_success_schema=Receipt,
        execute=execute_transfer,
    )

    # The user delegates the transfer tool to the app with a limit of 100
    resolver = InMemoryPolicyResolver()
    resolver.grant(APP, USER, TOOL_CID, policies={POLICY_CID: {"max_amount": 100}})

    sandbox = LocalPolicySandbox()
    sandbox.register_policy(POLICY_CID, spending_limit, resolver)

    client = ToolClient(transfer, TOOL_CID, APP, resolver, sandbox)

    for amount in (40, 250):
        params = {"to": "0xRecipient", "amount": amount}
        precheck = await client.precheck(params, USER)
        response = await client.execute(params, USER)

        print(f"Transfer of {amount}")
        print("-" * 40)
        print(f"Precheck : {'ok' if precheck.success else precheck.error}")
        print("Envelope :")
        print(json.dumps(response.to_wire(), indent=2))
        print()


if __name__ == "__main__":
    asyncio.run(main())
