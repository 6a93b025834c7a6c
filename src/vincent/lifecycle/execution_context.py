"""
vincent.lifecycle.execution_context - Tool Execution Context Builder
======================================================================

Builds the ``ToolContext`` handed to a tool's ``precheck`` / ``execute``.

    precheck:  ToolContext(policies_context=<PolicyEvaluationResult | None>)
    execute:   ToolContext(policies_context=ExecutePoliciesContext)
                              │
                              └── allowed_policies[pkg] = PolicyCommitHandle
                                      result   the policy's evaluate result
                                      commit   closure over the wrapped
                                               commit, present only if the
                                               policy defines one

Commit closures are exposed, never invoked automatically. The tool decides
which to call and in what order; there is no rollback across them.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Literal, Mapping, Optional, Union

import structlog
from pydantic import BaseModel, ConfigDict, Field

from vincent.core.exceptions import PolicyEvaluationError
from vincent.core.models import BaseContext, Delegation
from vincent.core.results import (
    PolicyEvaluationDeny,
    PolicyEvaluationResult,
    PolicyResponse,
    ToolFailure,
    ToolSuccess,
    wrap_failure,
    wrap_success,
)
from vincent.lifecycle.policy import VincentPolicy

logger = structlog.get_logger()

CommitFn = Callable[..., Awaitable[PolicyResponse]]


# =============================================================================
# Execute-Path Policy Context
# =============================================================================
class PolicyCommitHandle(BaseModel):
    """One allowed policy as seen by a tool's ``execute``.

    ``commit`` is None when the policy has no commit implementation; check
    before calling it.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    result: Any = None
    commit: Optional[CommitFn] = None


class ExecutePoliciesContext(BaseModel):
    """Allow-branch evaluation result with live commit handles attached."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    allow: Literal[True] = True
    evaluated_policies: list[str] = Field(default_factory=list)
    allowed_policies: dict[str, PolicyCommitHandle] = Field(default_factory=dict)


# =============================================================================
# Tool Context
# =============================================================================
class ToolContext:
    """Context handed to tool callbacks.

    ``succeed()`` and ``fail()`` are the only way for a tool to produce a
    result; the lifecycle wrapper rejects anything else.
    """

    def __init__(
        self,
        base_context: Optional[BaseContext] = None,
        policies_context: Union[PolicyEvaluationResult, ExecutePoliciesContext, None] = None,
    ) -> None:
        self._base_context = base_context
        self._policies_context = policies_context

    @property
    def base_context(self) -> Optional[BaseContext]:
        return self._base_context

    @property
    def policies_context(self) -> Union[PolicyEvaluationResult, ExecutePoliciesContext, None]:
        return self._policies_context

    @property
    def tool_ipfs_cid(self) -> Optional[str]:
        return self._base_context.tool_ipfs_cid if self._base_context else None

    @property
    def delegation(self) -> Optional[Delegation]:
        return self._base_context.delegation if self._base_context else None

    @property
    def app_id(self) -> Optional[int]:
        return self._base_context.app_id if self._base_context else None

    @property
    def app_version(self) -> Optional[int]:
        return self._base_context.app_version if self._base_context else None

    def succeed(self, result: Any = None) -> ToolSuccess:
        return wrap_success(result)

    def fail(self, result: Any = None, error: Optional[str] = None) -> ToolFailure:
        return wrap_failure(result=result, error=error)


# =============================================================================
# Builders
# =============================================================================
def build_precheck_context(
    policies_context: Optional[PolicyEvaluationResult],
    base_context: Optional[BaseContext],
) -> ToolContext:
    """Context for a tool precheck: the policy precheck results, read-only."""
    return ToolContext(base_context=base_context, policies_context=policies_context)


def _commit_closure(policy: VincentPolicy, base_context: Optional[BaseContext]) -> CommitFn:
    async def commit(commit_params: Any = None) -> PolicyResponse:
        return await policy.commit(commit_params, base_context)

    return commit


def build_execute_context(
    policies_context: PolicyEvaluationResult,
    base_context: Optional[BaseContext],
    policies_by_package_name: Mapping[str, VincentPolicy],
) -> ToolContext:
    """Context for a tool execute, with commit handles for allowed policies.

    Raises:
        PolicyEvaluationError: If ``policies_context`` is a deny. A denied
            evaluation must never reach a tool's execute.
    """
    if isinstance(policies_context, PolicyEvaluationDeny) or not policies_context.allow:
        denied = getattr(policies_context, "denied_policy", None)
        raise PolicyEvaluationError(
            message="Cannot build an execute context from a denied policy evaluation",
            denied_package_name=denied.package_name if denied else None,
        )

    allowed: dict[str, PolicyCommitHandle] = {}
    for package_name, entry in policies_context.allowed_policies.items():
        policy = policies_by_package_name.get(package_name)
        commit = None
        if policy is not None and policy.commit is not None:
            commit = _commit_closure(policy, base_context)
        allowed[package_name] = PolicyCommitHandle(result=entry.result, commit=commit)

    logger.debug(
        "execute_context_built",
        allowed_policies=list(allowed),
        committable=[name for name, handle in allowed.items() if handle.commit is not None],
    )
    return ToolContext(
        base_context=base_context,
        policies_context=ExecutePoliciesContext(
            evaluated_policies=list(policies_context.evaluated_policies),
            allowed_policies=allowed,
        ),
    )
