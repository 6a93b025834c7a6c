"""
vincent.core.models - Invocation Context & Envelope Models
============================================================

These models describe WHO is invoking WHAT, and the envelopes that carry
results back to the invoking host.

Data Flow:
    ┌──────────────┐  resolve()   ┌───────────────────────┐
    │ ToolHandler  │ ───────────→ │ PolicyResolver        │
    │              │ ←─────────── │ → DelegationResolution │
    │              │              └───────────────────────┘
    │              │  call(cid, PolicyEvaluationRequest)
    │              │ ───────────→ PolicySandbox ─→ JSON text
    │              │
    │              │ ──→ ToolInvocationResponse
    └──────────────┘       {toolExecutionResult, toolContext}

Every model here is created fresh per invocation and owns no resources.
"""

from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import Field

from vincent.core.results import (
    PolicyEvaluationResult,
    ToolFailure,
    ToolResult,
    ToolSuccess,
    WireModel,
)


# =============================================================================
# Delegation
# =============================================================================
class Delegation(WireModel):
    """The delegatee acting on behalf of a delegator.

    Attributes:
        delegatee_address: Address of the app delegatee invoking the tool.
        delegator_address: Address of the identity whose authorization
            (and whose policy configuration) governs the invocation. None
            until it is known.
    """

    delegatee_address: str
    delegator_address: Optional[str] = None


class BaseContext(WireModel):
    """Routing context shared by every lifecycle call of one invocation.

    ``app_id`` / ``app_version`` are None until the delegation has been
    resolved, so a best-effort envelope can still be produced when
    resolution fails.
    """

    tool_ipfs_cid: str
    delegation: Delegation
    app_id: Optional[int] = None
    app_version: Optional[int] = None


# =============================================================================
# Delegation Resolution (external policy resolver)
# =============================================================================
class DelegationResolution(WireModel):
    """What the on-chain resolver knows about one (delegatee, delegator, tool).

    Attributes:
        is_permitted: Whether the delegatee may run the tool at all.
        app_id: Registered app the delegatee belongs to.
        app_version: App version the delegator agreed to.
        decoded_policies: Applicable policies keyed by policy ipfs cid,
            mapped to the delegator's persisted user params for that policy.
            Insertion order is evaluation order.
    """

    is_permitted: bool
    app_id: int = 0
    app_version: int = 0
    decoded_policies: dict[str, Any] = Field(default_factory=dict)


# =============================================================================
# Remote Policy Evaluation Request
# =============================================================================
class PolicyCallContext(WireModel):
    """Minimal routing context forwarded into the policy sandbox."""

    tool_ipfs_cid: str
    delegator_address: str


class PolicyEvaluationRequest(WireModel):
    """Parameters sent to a policy's sandboxed evaluate.

    Wire shape::

        {"toolParams": {...},
         "context": {"toolIpfsCid": ..., "delegatorAddress": ...},
         "toolApiVersion": "1.0.0"}
    """

    tool_params: dict[str, Any]
    context: PolicyCallContext
    tool_api_version: str


# =============================================================================
# Response Envelopes
# =============================================================================
class ToolInvocationContext(BaseContext):
    """``toolContext`` of the final envelope: base context + policy results."""

    policies_context: Optional[PolicyEvaluationResult] = None


class ToolInvocationResponse(WireModel):
    """Final wire contract returned to the invoking host.

    Produced for every invocation, including fatal ones: in that case
    ``tool_execution_result`` is ``ToolFailure(error=<message>)`` and the
    context holds whatever was gathered before the failure.
    """

    tool_execution_result: Union[ToolSuccess, ToolFailure]
    tool_context: Optional[ToolInvocationContext] = None


class ToolPrecheckResponse(WireModel):
    """Result of a client-side tool precheck.

    Attributes:
        success: Whether the precheck passed.
        result: The tool's precheck result (or a ValidationDenyResult).
        error: Failure message, when there is one.
        context: Base context plus the policy precheck results.
    """

    success: bool
    result: Any = None
    error: Optional[str] = None
    context: Optional[ToolInvocationContext] = None

    @classmethod
    def from_tool_result(
        cls,
        tool_result: ToolResult,
        context: Optional[ToolInvocationContext],
    ) -> "ToolPrecheckResponse":
        return cls(
            success=tool_result.success,
            result=tool_result.result,
            error=getattr(tool_result, "error", None),
            context=context,
        )
