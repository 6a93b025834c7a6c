"""
vincent.orchestration.handler - Tool Invocation Handler
=========================================================

Runs one tool invocation end to end and always answers with a
``ToolInvocationResponse`` envelope.

Control Flow:
    assert tool API version               ← raises, outside the envelope
    ┌─ failure boundary ──────────────────────────────────────────────┐
    │ validate tool params      invalid → {toolExecutionResult: F}     │
    │ resolve delegation        not permitted → fatal                  │
    │ validate_policies()       unsupported policy → fatal             │
    │ evaluate_policies()       deny → {F(no error), policiesContext}  │
    │ tool.execute()            → {result, policiesContext}            │
    └─────────────────────────────────────────────────────────────────┘
    fatal → {toolExecutionResult: F(error), toolContext: <partial>}

The base context grows as the invocation proceeds (delegator, then app id
and version, then the policy results), so a fatal envelope carries
everything gathered up to that point.
"""

from __future__ import annotations

from typing import Any, Optional

import structlog

from vincent.core.enums import LifecyclePhase
from vincent.core.exceptions import DelegationNotPermittedError
from vincent.core.models import (
    BaseContext,
    Delegation,
    ToolInvocationContext,
    ToolInvocationResponse,
)
from vincent.core.results import (
    PolicyEvaluationResult,
    wrap_failure,
    wrap_no_result_failure,
)
from vincent.core.versioning import assert_supported_tool_version
from vincent.integrations.resolver.base import PolicyResolver
from vincent.integrations.sandbox.base import PolicySandbox
from vincent.lifecycle.bindings import validate_policies
from vincent.lifecycle.callbacks import error_message
from vincent.lifecycle.tool import VincentTool
from vincent.lifecycle.validation import is_validation_failure
from vincent.orchestration.evaluator import evaluate_policies

logger = structlog.get_logger()


def tool_invocation_context(
    base_context: BaseContext,
    policies_context: Optional[PolicyEvaluationResult],
) -> ToolInvocationContext:
    """``toolContext`` of an envelope: base context plus policy results."""
    return ToolInvocationContext(
        tool_ipfs_cid=base_context.tool_ipfs_cid,
        delegation=base_context.delegation,
        app_id=base_context.app_id,
        app_version=base_context.app_version,
        policies_context=policies_context,
    )


class ToolHandler:
    """Tool-side handler: one instance per published tool.

    Attributes:
        tool: The wrapped tool.
        tool_ipfs_cid: Content address the tool is published under.
    """

    def __init__(
        self,
        tool: VincentTool,
        tool_ipfs_cid: str,
        resolver: PolicyResolver,
        sandbox: PolicySandbox,
    ) -> None:
        self.tool = tool
        self.tool_ipfs_cid = tool_ipfs_cid
        self._resolver = resolver
        self._sandbox = sandbox
        self._logger = logger.bind(
            component="tool_handler",
            tool=tool.package_name,
            tool_ipfs_cid=tool_ipfs_cid,
        )

    async def handle(
        self,
        tool_params: Any,
        delegatee_address: str,
        delegator_address: str,
    ) -> ToolInvocationResponse:
        """Run the invocation and build the response envelope.

        Raises:
            UnsupportedToolVersionError: If the tool's declared API version is
                incompatible. Every other error is reported in the envelope.
        """
        assert_supported_tool_version(self.tool.definition.tool_api_version)

        base_context = BaseContext(
            tool_ipfs_cid=self.tool_ipfs_cid,
            delegation=Delegation(delegatee_address=delegatee_address),
        )
        policies_context: Optional[PolicyEvaluationResult] = None

        try:
            parsed_params = self.tool.validate_params(tool_params, LifecyclePhase.EXECUTE)
            if is_validation_failure(parsed_params):
                self._logger.info("tool_params_invalid")
                return ToolInvocationResponse(tool_execution_result=parsed_params)

            base_context = base_context.model_copy(
                update={
                    "delegation": Delegation(
                        delegatee_address=delegatee_address,
                        delegator_address=delegator_address,
                    )
                }
            )
            resolution = await self._resolver.resolve(
                delegatee_address, delegator_address, self.tool_ipfs_cid
            )
            if not resolution.is_permitted:
                raise DelegationNotPermittedError(
                    message=(
                        f"Delegatee {delegatee_address} is not permitted to run "
                        f"tool {self.tool_ipfs_cid} for {delegator_address}"
                    ),
                    delegatee_address=delegatee_address,
                    tool_ipfs_cid=self.tool_ipfs_cid,
                )
            base_context = base_context.model_copy(
                update={"app_id": resolution.app_id, "app_version": resolution.app_version}
            )

            validated_policies = validate_policies(
                resolution.decoded_policies,
                self.tool,
                parsed_params,
                self.tool_ipfs_cid,
            )
            policies_context = await evaluate_policies(
                self.tool,
                validated_policies,
                base_context,
                self._sandbox,
            )

            if not policies_context.allow:
                self._logger.info(
                    "tool_invocation_denied",
                    denied_policy=policies_context.denied_policy.package_name,
                )
                return ToolInvocationResponse(
                    tool_execution_result=wrap_failure(),
                    tool_context=tool_invocation_context(base_context, policies_context),
                )

            tool_result = await self.tool.execute(parsed_params, policies_context, base_context)
            self._logger.info("tool_invocation_completed", success=tool_result.success)
            return ToolInvocationResponse(
                tool_execution_result=tool_result,
                tool_context=tool_invocation_context(base_context, policies_context),
            )
        except Exception as exc:
            self._logger.error(
                "tool_invocation_failed",
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return ToolInvocationResponse(
                tool_execution_result=wrap_no_result_failure(error_message(exc)),
                tool_context=tool_invocation_context(base_context, policies_context),
            )
