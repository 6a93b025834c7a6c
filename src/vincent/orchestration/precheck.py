"""
vincent.orchestration.precheck - Local Policy Prechecks
=========================================================

Before asking a delegator's wallet to run a tool, a client can dry-run the
policies' ``precheck`` functions locally. Unlike remote evaluation, prechecks
run in-process and stop at the first deny.

    for each applicable policy (resolution order):
        evaluated_policies += package_name
        no precheck defined → skip
        precheck → allow → allowed_policies[name] = result
                 → deny  → denied_policy = ...; stop
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

import structlog

from vincent.core.models import BaseContext
from vincent.core.results import (
    AllowedPolicy,
    DeniedPolicy,
    PolicyEvaluationResult,
    create_allow_evaluation_result,
    create_deny_evaluation_result,
)
from vincent.lifecycle.bindings import validate_policies
from vincent.lifecycle.tool import VincentTool

logger = structlog.get_logger()


async def run_policy_prechecks(
    tool: VincentTool,
    tool_params: Any,
    context: BaseContext,
    decoded_policies: Mapping[str, Any],
) -> PolicyEvaluationResult:
    """Run every applicable policy's precheck until one denies.

    Args:
        tool: The tool whose policies are prechecked.
        tool_params: Tool params already validated by the tool schema.
        context: Base context of the invocation.
        decoded_policies: ``{policy_ipfs_cid: user_params}`` from the
            resolver, in evaluation order.

    Raises:
        UnsupportedPolicyError: If an applicable policy is not supported by
            the tool.
    """
    log = logger.bind(component="policy_precheck", tool=tool.package_name)
    validated = validate_policies(decoded_policies, tool, tool_params, context.tool_ipfs_cid)

    evaluated_policies: list[str] = []
    allowed_policies: dict[str, AllowedPolicy] = {}
    denied_policy: Optional[DeniedPolicy] = None

    for entry in validated:
        evaluated_policies.append(entry.package_name)
        bound = tool.supported_policies.by_package_name(entry.package_name)
        policy = bound.policy

        if policy.precheck is None:
            log.debug("policy_precheck_skipped", policy=entry.package_name)
            continue

        response = await policy.precheck(entry.tool_policy_params, entry.user_params, context)
        if response.allow:
            allowed_policies[entry.package_name] = AllowedPolicy(result=response.result)
            continue

        denied_policy = DeniedPolicy(
            package_name=entry.package_name,
            result=response.result,
            error=response.error,
        )
        log.info("policy_precheck_denied", policy=entry.package_name, error=response.error)
        break

    if denied_policy is not None:
        return create_deny_evaluation_result(evaluated_policies, allowed_policies, denied_policy)
    return create_allow_evaluation_result(evaluated_policies, allowed_policies)
