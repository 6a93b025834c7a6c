"""
vincent.core.results - The Result Algebra
===========================================

Every lifecycle call in Vincent produces one of a small, closed set of
values. Nothing else ever crosses a lifecycle boundary.

    Policy lifecycle (evaluate / precheck / commit)
        PolicyAllow  {allow: true,  result}
        PolicyDeny   {allow: false, result, error?}

    Tool lifecycle (precheck / execute)
        ToolSuccess  {success: true,  result?}
        ToolFailure  {success: false, result?, error?}

    Per-invocation aggregate
        PolicyEvaluationAllow  {allow: true,  evaluatedPolicies, allowedPolicies}
        PolicyEvaluationDeny   {allow: false, evaluatedPolicies, allowedPolicies,
                                deniedPolicy}

Validation failures are distinguishable from business-logic denies and
failures: their ``result`` is a ``ValidationDenyResult`` carrying the
structured validation error, never the author's declared shape. Consumers
must check ``is_validation_deny_result(response.result)`` before trusting
the shape of ``result``.

Wire Format:
    All models serialize with camelCase aliases
    (``model_dump(by_alias=True, mode="json")``) because responses cross
    into sandboxes and hosts that speak JSON. Python code always uses the
    snake_case attribute names. Optional ``result``, ``error`` and
    ``deniedPolicy`` fields are left out of the payload when unset, so
    ``ToolSuccess()`` goes out as ``{"success": true}``.

Construction:
    Authors never build these by hand. Policy callbacks use
    ``context.allow()`` / ``context.deny()``; tool callbacks use
    ``context.succeed()`` / ``context.fail()``. The engine uses the
    ``create_*`` / ``wrap_*`` helpers at the bottom of this module.
"""

from __future__ import annotations

from typing import Any, ClassVar, Literal, Mapping, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializerFunctionWrapHandler,
    ValidationError,
    model_serializer,
)
from pydantic.alias_generators import to_camel

from vincent.core.enums import LifecyclePhase, ValidationStage


# =============================================================================
# Wire Model Base
# =============================================================================
class WireModel(BaseModel):
    """Base for every model that is serialized across a process boundary."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    # Fields dropped from the serialized payload while they are None.
    omitted_when_none: ClassVar[tuple[str, ...]] = ()

    @model_serializer(mode="wrap")
    def _drop_unset_optionals(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        for name in self.omitted_when_none:
            if getattr(self, name) is None:
                data.pop(name, None)
                data.pop(to_camel(name), None)
        return data

    def to_wire(self) -> dict[str, Any]:
        """Serialize to JSON-compatible data using camelCase keys."""
        return self.model_dump(by_alias=True, mode="json")

    def to_json(self) -> str:
        """Serialize to a JSON string using camelCase keys."""
        return self.model_dump_json(by_alias=True)


# =============================================================================
# Validation Failure Marker
# =============================================================================
class ValidationDenyResult(WireModel):
    """Structured marker carried as ``result`` when schema validation fails.

    Attributes:
        validation_error: ``pydantic.ValidationError.errors()`` output.
        phase: Lifecycle function whose value failed validation.
        stage: Whether the input or the output failed.
    """

    validation_error: list[dict[str, Any]] = Field(
        description="Structured validation errors (pydantic errors() format)",
    )
    phase: LifecyclePhase = Field(description="Lifecycle phase that failed")
    stage: ValidationStage = Field(description="input or output")

    @classmethod
    def from_error(
        cls,
        error: ValidationError,
        phase: LifecyclePhase,
        stage: ValidationStage,
    ) -> "ValidationDenyResult":
        return cls(
            validation_error=error.errors(
                include_url=False, include_context=False, include_input=False
            ),
            phase=phase,
            stage=stage,
        )


def is_validation_deny_result(value: Any) -> bool:
    """True if ``value`` is a validation failure marker (model or wire dict)."""
    if isinstance(value, ValidationDenyResult):
        return True
    return (
        isinstance(value, Mapping)
        and "validationError" in value
        and "phase" in value
        and "stage" in value
    )


# =============================================================================
# Policy Responses
# =============================================================================
class PolicyAllow(WireModel):
    """A policy lifecycle function allowed the action."""

    omitted_when_none = ("result",)

    allow: Literal[True] = True
    result: Any = None


class PolicyDeny(WireModel):
    """A policy lifecycle function denied the action.

    ``result`` is either the author's declared deny shape or a
    ``ValidationDenyResult``; ``error`` is a human-readable message when the
    deny came from an exception or a validation failure.
    """

    omitted_when_none = ("result", "error")

    allow: Literal[False] = False
    result: Any = None
    error: Optional[str] = None


PolicyResponse = Union[PolicyAllow, PolicyDeny]


# =============================================================================
# Tool Results
# =============================================================================
class ToolSuccess(WireModel):
    """A tool lifecycle function succeeded."""

    omitted_when_none = ("result",)

    success: Literal[True] = True
    result: Any = None


class ToolFailure(WireModel):
    """A tool lifecycle function failed."""

    omitted_when_none = ("result", "error")

    success: Literal[False] = False
    result: Any = None
    error: Optional[str] = None


ToolResult = Union[ToolSuccess, ToolFailure]


# =============================================================================
# Policy Evaluation Result (per invocation)
# =============================================================================
class AllowedPolicy(WireModel):
    """Result recorded for a policy that individually allowed."""

    omitted_when_none = ("result",)

    result: Any = None


class DeniedPolicy(WireModel):
    """The policy recorded as the invocation's denial."""

    omitted_when_none = ("result", "error")

    package_name: str
    result: Any = None
    error: Optional[str] = None


class PolicyEvaluationAllow(WireModel):
    """Every applicable policy allowed.

    Attributes:
        evaluated_policies: Package names in evaluation order.
        allowed_policies: Results keyed by package name.
    """

    omitted_when_none = ("denied_policy",)

    allow: Literal[True] = True
    evaluated_policies: list[str] = Field(default_factory=list)
    allowed_policies: dict[str, AllowedPolicy] = Field(default_factory=dict)
    denied_policy: None = None


class PolicyEvaluationDeny(WireModel):
    """At least one applicable policy denied.

    ``allowed_policies`` still holds every policy that individually allowed,
    and ``evaluated_policies`` lists every policy that was attempted.
    """

    allow: Literal[False] = False
    evaluated_policies: list[str] = Field(default_factory=list)
    allowed_policies: dict[str, AllowedPolicy] = Field(default_factory=dict)
    denied_policy: DeniedPolicy


PolicyEvaluationResult = Union[PolicyEvaluationAllow, PolicyEvaluationDeny]


# =============================================================================
# Type Guards
# =============================================================================
# These accept both models and raw wire dicts, because sandbox responses
# arrive as parsed JSON.
# =============================================================================
def is_policy_deny_response(value: Any) -> bool:
    if isinstance(value, PolicyDeny):
        return True
    return isinstance(value, Mapping) and value.get("allow") is False


def is_policy_allow_response(value: Any) -> bool:
    if isinstance(value, PolicyAllow):
        return True
    return isinstance(value, Mapping) and value.get("allow") is True


def is_tool_failure_result(value: Any) -> bool:
    if isinstance(value, ToolFailure):
        return True
    return isinstance(value, Mapping) and value.get("success") is False


def is_tool_success_result(value: Any) -> bool:
    if isinstance(value, ToolSuccess):
        return True
    return isinstance(value, Mapping) and value.get("success") is True


# =============================================================================
# Result Creators (engine-internal)
# =============================================================================
def create_allow_result(result: Any = None) -> PolicyAllow:
    return PolicyAllow(result=result)


def create_deny_result(result: Any = None, error: Optional[str] = None) -> PolicyDeny:
    return PolicyDeny(result=result, error=error)


def create_no_result_deny(error: str) -> PolicyDeny:
    """Deny produced from a caught exception: error message, no result."""
    return PolicyDeny(result=None, error=error)


def wrap_success(result: Any = None) -> ToolSuccess:
    return ToolSuccess(result=result)


def wrap_failure(result: Any = None, error: Optional[str] = None) -> ToolFailure:
    return ToolFailure(result=result, error=error)


def wrap_no_result_failure(error: str) -> ToolFailure:
    """Failure produced from a caught exception: error message, no result."""
    return ToolFailure(result=None, error=error)


def create_allow_evaluation_result(
    evaluated_policies: list[str],
    allowed_policies: dict[str, AllowedPolicy],
) -> PolicyEvaluationAllow:
    return PolicyEvaluationAllow(
        evaluated_policies=evaluated_policies,
        allowed_policies=allowed_policies,
    )


def create_deny_evaluation_result(
    evaluated_policies: list[str],
    allowed_policies: dict[str, AllowedPolicy],
    denied_policy: DeniedPolicy,
) -> PolicyEvaluationDeny:
    return PolicyEvaluationDeny(
        evaluated_policies=evaluated_policies,
        allowed_policies=allowed_policies,
        denied_policy=denied_policy,
    )
