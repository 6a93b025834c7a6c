"""
vincent.orchestration.evaluator - Multi-Policy Evaluation
===========================================================

Evaluates every applicable policy of one tool invocation through the policy
sandbox and reduces the per-policy outcomes into a single
``PolicyEvaluationResult``.

Algorithm (strictly sequential, in resolution order):

    for (package_name, params) in validated policies:
        evaluated_policies += package_name
        text = sandbox.call(policy.ipfs_cid, request)
        response = parse(text)             ← parse failure → deny
        deny?  denied_policy = ...         ← a later deny overwrites
        allow? allowed_policies[name] = result
        (never stop early)

    any deny recorded → PolicyEvaluationDeny
    otherwise         → PolicyEvaluationAllow

Every policy is evaluated exactly once even after a deny, so the result
always shows which policies individually passed. Any error raised while
evaluating one policy becomes that policy's deny and the loop carries on.
"""

from __future__ import annotations

import json
from typing import Optional, Sequence

import structlog

from vincent.core.enums import LifecyclePhase, ResponseKind, ValidationStage
from vincent.core.models import BaseContext, PolicyCallContext, PolicyEvaluationRequest
from vincent.core.results import (
    AllowedPolicy,
    DeniedPolicy,
    PolicyEvaluationResult,
    PolicyResponse,
    create_allow_evaluation_result,
    create_allow_result,
    create_deny_evaluation_result,
    create_deny_result,
    create_no_result_deny,
    is_policy_deny_response,
)
from vincent.integrations.sandbox.base import PolicySandbox
from vincent.lifecycle.bindings import ValidatedPolicy
from vincent.lifecycle.callbacks import error_message
from vincent.lifecycle.policy import VincentPolicy
from vincent.lifecycle.tool import VincentTool
from vincent.lifecycle.validation import (
    error_of,
    get_schema_for_policy_response_result,
    is_validation_failure,
    result_of,
    validate_or_deny,
)

logger = structlog.get_logger()


# =============================================================================
# Response Parsing
# =============================================================================
def parse_evaluate_response(raw_response: str, policy: VincentPolicy) -> PolicyResponse:
    """Turn a sandbox's JSON text into a policy response.

    A deny is accepted as sent. An allow has its ``result`` validated
    against the policy's eval allow schema. A payload without a boolean
    ``allow`` flag becomes a deny.

    Raises:
        ValueError: If ``raw_response`` is not valid JSON.
    """
    try:
        parsed = json.loads(raw_response)
    except (TypeError, json.JSONDecodeError) as exc:
        raise ValueError(f"Failed to parse policy response as JSON: {exc}") from exc

    if is_policy_deny_response(parsed):
        return create_deny_result(result=result_of(parsed), error=error_of(parsed))

    selection = get_schema_for_policy_response_result(
        parsed,
        policy.eval_allow_result_schema,
        policy.eval_deny_result_schema,
    )
    if selection.parsed_type is ResponseKind.UNKNOWN:
        return create_no_result_deny(
            "Policy response is neither an allow nor a deny: missing boolean 'allow'"
        )

    result_or_deny = validate_or_deny(
        result_of(parsed), selection.schema, LifecyclePhase.EVALUATE, ValidationStage.OUTPUT
    )
    if is_validation_failure(result_or_deny):
        return result_or_deny
    return create_allow_result(result_or_deny)


# =============================================================================
# Evaluation
# =============================================================================
async def evaluate_policies(
    tool: VincentTool,
    validated_policies: Sequence[ValidatedPolicy],
    context: BaseContext,
    sandbox: PolicySandbox,
    tool_api_version: Optional[str] = None,
) -> PolicyEvaluationResult:
    """Evaluate every validated policy in order; never short-circuits.

    Args:
        tool: The tool being invoked; its supported policies give each
            package's ipfs cid and eval schemas.
        validated_policies: Ordered work list from ``validate_policies()``.
        context: Base context of the invocation. The delegator address must
            be known.
        sandbox: Where the policies run.
        tool_api_version: Version forwarded to the policies. Defaults to the
            tool's declared version.

    Returns:
        ``PolicyEvaluationDeny`` if any policy denied (the last deny wins),
        otherwise ``PolicyEvaluationAllow``.
    """
    version = tool_api_version or tool.definition.tool_api_version
    log = logger.bind(component="policy_evaluator", tool=tool.package_name)

    evaluated_policies: list[str] = []
    allowed_policies: dict[str, AllowedPolicy] = {}
    denied_policy: Optional[DeniedPolicy] = None

    for entry in validated_policies:
        package_name = entry.package_name
        evaluated_policies.append(package_name)

        try:
            bound = tool.supported_policies.by_package_name(package_name)
            if bound is None:
                raise LookupError(f"Policy {package_name} is not bound to {tool.package_name}")

            request = PolicyEvaluationRequest(
                tool_params=entry.tool_policy_params,
                context=PolicyCallContext(
                    tool_ipfs_cid=context.tool_ipfs_cid,
                    delegator_address=context.delegation.delegator_address,
                ),
                tool_api_version=version,
            )
            raw_response = await sandbox.call(
                bound.ipfs_cid,
                request.to_wire(),
                delegatee_address=context.delegation.delegatee_address,
            )
            response = parse_evaluate_response(raw_response, bound.policy)
        except Exception as exc:
            log.warning("policy_evaluation_error", policy=package_name, error=str(exc))
            response = create_no_result_deny(error_message(exc))

        if response.allow:
            allowed_policies[package_name] = AllowedPolicy(result=response.result)
            log.debug("policy_allowed", policy=package_name)
        else:
            if denied_policy is not None:
                log.info(
                    "policy_deny_overwritten",
                    previous=denied_policy.package_name,
                    policy=package_name,
                )
            denied_policy = DeniedPolicy(
                package_name=package_name,
                result=response.result,
                error=response.error,
            )
            log.info("policy_denied", policy=package_name, error=response.error)

    if denied_policy is not None:
        return create_deny_evaluation_result(evaluated_policies, allowed_policies, denied_policy)

    log.info("policies_evaluated", evaluated=evaluated_policies, allow=True)
    return create_allow_evaluation_result(evaluated_policies, allowed_policies)
