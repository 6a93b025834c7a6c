"""
vincent.lifecycle.policy - Schema-Bound Policy Lifecycle
==========================================================

``create_policy()`` turns a user-authored ``PolicyDefinition`` (raw lifecycle
callbacks + schema descriptors) into a ``VincentPolicy`` whose lifecycle
functions always validate their input, validate their output, and never
raise.

Lifecycle Function Shape (evaluate, precheck, commit):

    raw args ──→ validate input ──deny──→ PolicyDeny(ValidationDenyResult)
                      │ ok
                      ▼
               author callback ──raises──→ PolicyDeny(error=<message>)
                      │ PolicyAllow / PolicyDeny
                      ▼
          select allow/deny schema
                      │
                      ▼
               validate result ──deny──→ PolicyDeny(ValidationDenyResult)
                      │ ok
                      ▼
           PolicyAllow(result) / PolicyDeny(result, error)

``precheck`` and ``commit`` exist on the wrapped policy only when the author
supplied them; otherwise the attribute is ``None``.

Usage:
    >>> class Approval(TypedDict):
    ...     approved: bool
    >>>
    >>> async def evaluate(args, context):
    ...     if args.tool_params["amount"] <= args.user_params["max_amount"]:
    ...         return context.allow({"approved": True})
    ...     return context.deny({"reason": "over limit"})
    >>>
    >>> spending_limit = create_policy(
    ...     package_name="@vincent/spending-limit",
    ...     tool_params_schema=SpendParams,
    ...     user_params_schema=SpendLimit,
    ...     eval_allow_result_schema=Approval,
    ...     eval_deny_result_schema=Rejection,
    ...     evaluate=evaluate,
    ... )
"""

from __future__ import annotations

from typing import Any, Callable, Optional

import structlog
from pydantic import BaseModel, ConfigDict, Field

from vincent.core.enums import LifecyclePhase, ResponseKind, ValidationStage
from vincent.core.exceptions import ConfigurationError
from vincent.core.models import BaseContext, Delegation
from vincent.core.results import (
    PolicyAllow,
    PolicyDeny,
    PolicyResponse,
    create_allow_result,
    create_deny_result,
    create_no_result_deny,
)
from vincent.core.schema import Schema
from vincent.lifecycle.callbacks import error_message, invoke_callback
from vincent.lifecycle.validation import (
    get_schema_for_policy_response_result,
    is_validation_failure,
    validate_or_deny,
)

logger = structlog.get_logger()


# =============================================================================
# Author-Facing Types
# =============================================================================
class PolicyDefinition(BaseModel):
    """A policy as written by its author. Immutable once created.

    Every ``*_schema`` slot accepts anything pydantic can validate against
    (BaseModel, TypedDict, builtin types) or a ``Schema``. Omitted slots mean
    "value must be absent".
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    package_name: str = Field(description="Stable identity of the policy package")
    tool_params_schema: Any = Field(description="Params the policy expects from a tool")
    user_params_schema: Any = None
    eval_allow_result_schema: Any = None
    eval_deny_result_schema: Any = None
    precheck_allow_result_schema: Any = None
    precheck_deny_result_schema: Any = None
    commit_params_schema: Any = None
    commit_allow_result_schema: Any = None
    commit_deny_result_schema: Any = None
    evaluate: Callable[..., Any]
    precheck: Optional[Callable[..., Any]] = None
    commit: Optional[Callable[..., Any]] = None


class PolicyLifecycleArgs(BaseModel):
    """Arguments handed to a policy's ``evaluate`` / ``precheck`` callback."""

    model_config = ConfigDict(frozen=True)

    tool_params: Any
    user_params: Any = None


class PolicyContext:
    """Context handed to policy callbacks.

    Exposes the invocation's routing context and the only sanctioned way to
    produce a policy response: ``allow()`` and ``deny()``.
    """

    def __init__(self, base_context: Optional[BaseContext] = None) -> None:
        self._base_context = base_context

    @property
    def base_context(self) -> Optional[BaseContext]:
        return self._base_context

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

    def allow(self, result: Any = None) -> PolicyAllow:
        return create_allow_result(result)

    def deny(self, result: Any = None, error: Optional[str] = None) -> PolicyDeny:
        return create_deny_result(result=result, error=error)


# =============================================================================
# Wrapped Policy
# =============================================================================
class VincentPolicy:
    """Runtime-safe lifecycle object built by ``create_policy()``.

    Attributes:
        definition: The author's ``PolicyDefinition``.
        package_name: Stable identity of the policy.
        precheck: Wrapped precheck, or None if the author supplied none.
        commit: Wrapped commit, or None if the author supplied none.
    """

    def __init__(self, definition: PolicyDefinition) -> None:
        self.definition = definition
        self.package_name = definition.package_name

        self.tool_params_schema = Schema.of(definition.tool_params_schema)
        self.user_params_schema = Schema.of(definition.user_params_schema)
        self.eval_allow_result_schema = Schema.of(definition.eval_allow_result_schema)
        self.eval_deny_result_schema = Schema.of(definition.eval_deny_result_schema)
        self.precheck_allow_result_schema = Schema.of(definition.precheck_allow_result_schema)
        self.precheck_deny_result_schema = Schema.of(definition.precheck_deny_result_schema)
        self.commit_params_schema = Schema.of(definition.commit_params_schema)
        self.commit_allow_result_schema = Schema.of(definition.commit_allow_result_schema)
        self.commit_deny_result_schema = Schema.of(definition.commit_deny_result_schema)

        self.precheck: Optional[Callable[..., Any]] = (
            self._precheck if definition.precheck is not None else None
        )
        self.commit: Optional[Callable[..., Any]] = (
            self._commit if definition.commit is not None else None
        )

        self._logger = logger.bind(component="policy", package_name=self.package_name)

    def __repr__(self) -> str:
        return f"VincentPolicy(package_name={self.package_name!r})"

    # =========================================================================
    # Lifecycle Functions
    # =========================================================================

    async def evaluate(
        self,
        tool_params: Any,
        user_params: Any = None,
        base_context: Optional[BaseContext] = None,
    ) -> PolicyResponse:
        """Run the author's evaluate behind validation. Never raises."""
        return await self._run_params_phase(
            LifecyclePhase.EVALUATE,
            self.definition.evaluate,
            tool_params,
            user_params,
            base_context,
            self.eval_allow_result_schema,
            self.eval_deny_result_schema,
        )

    async def _precheck(
        self,
        tool_params: Any,
        user_params: Any = None,
        base_context: Optional[BaseContext] = None,
    ) -> PolicyResponse:
        return await self._run_params_phase(
            LifecyclePhase.PRECHECK,
            self.definition.precheck,
            tool_params,
            user_params,
            base_context,
            self.precheck_allow_result_schema,
            self.precheck_deny_result_schema,
        )

    async def _commit(
        self,
        commit_params: Any = None,
        base_context: Optional[BaseContext] = None,
    ) -> PolicyResponse:
        phase = LifecyclePhase.COMMIT
        try:
            params = validate_or_deny(
                commit_params, self.commit_params_schema, phase, ValidationStage.INPUT
            )
            if is_validation_failure(params):
                return params

            raw = await invoke_callback(
                self.definition.commit, params, PolicyContext(base_context)
            )
            return self._validated_response(
                raw,
                phase,
                self.commit_allow_result_schema,
                self.commit_deny_result_schema,
            )
        except Exception as exc:
            self._logger.warning("policy_lifecycle_error", phase=phase.value, error=str(exc))
            return create_no_result_deny(error_message(exc))

    # =========================================================================
    # Internals
    # =========================================================================

    async def _run_params_phase(
        self,
        phase: LifecyclePhase,
        fn: Callable[..., Any],
        tool_params: Any,
        user_params: Any,
        base_context: Optional[BaseContext],
        allow_schema: Schema,
        deny_schema: Schema,
    ) -> PolicyResponse:
        try:
            validated_tool_params = validate_or_deny(
                tool_params, self.tool_params_schema, phase, ValidationStage.INPUT
            )
            if is_validation_failure(validated_tool_params):
                return validated_tool_params

            validated_user_params = validate_or_deny(
                user_params, self.user_params_schema, phase, ValidationStage.INPUT
            )
            if is_validation_failure(validated_user_params):
                return validated_user_params

            raw = await invoke_callback(
                fn,
                PolicyLifecycleArgs(
                    tool_params=validated_tool_params,
                    user_params=validated_user_params,
                ),
                PolicyContext(base_context),
            )
            return self._validated_response(raw, phase, allow_schema, deny_schema)
        except Exception as exc:
            self._logger.warning("policy_lifecycle_error", phase=phase.value, error=str(exc))
            return create_no_result_deny(error_message(exc))

    def _validated_response(
        self,
        raw: Any,
        phase: LifecyclePhase,
        allow_schema: Schema,
        deny_schema: Schema,
    ) -> PolicyResponse:
        if not isinstance(raw, (PolicyAllow, PolicyDeny)):
            return create_no_result_deny(
                f"Policy {phase.value}() must return context.allow() or context.deny(); "
                f"got {type(raw).__name__}"
            )

        selection = get_schema_for_policy_response_result(raw, allow_schema, deny_schema)
        result_or_deny = validate_or_deny(
            raw.result, selection.schema, phase, ValidationStage.OUTPUT
        )
        if is_validation_failure(result_or_deny):
            return result_or_deny

        if selection.parsed_type is ResponseKind.DENY:
            # A well-formed deny from the author goes back untouched.
            return raw
        return create_allow_result(result_or_deny)


# =============================================================================
# Factory
# =============================================================================
def create_policy(
    definition: Optional[PolicyDefinition] = None,
    **fields: Any,
) -> VincentPolicy:
    """Build a ``VincentPolicy`` from a definition or from keyword fields.

    Raises:
        ConfigurationError: If ``commit_params_schema`` is declared without a
            ``commit`` implementation.
    """
    if definition is None:
        definition = PolicyDefinition(**fields)
    elif fields:
        definition = definition.model_copy(update=fields)

    if definition.commit_params_schema is not None and definition.commit is None:
        raise ConfigurationError(
            message="Policy defines commit_params_schema but is missing commit function",
            error_code="INVALID_POLICY_DEFINITION",
            details={"package_name": definition.package_name},
        )

    return VincentPolicy(definition)
