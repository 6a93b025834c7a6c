"""
vincent.lifecycle.tool - Schema-Bound Tool Lifecycle
======================================================

``create_tool()`` turns a user-authored ``ToolDefinition`` into a
``VincentTool`` whose ``execute`` and (optional) ``precheck`` validate their
input, validate their output, and never return anything but a
``ToolSuccess`` or ``ToolFailure``.

Execute Flow:
    tool_params ──→ validate ──invalid──→ ToolFailure(ValidationDenyResult)
                      │ ok                (no context is built)
                      ▼
        build execute context ──denied evaluation──→ PolicyEvaluationError
                      │                               (fatal, raised)
                      ▼
               author execute ──raises──→ ToolFailure(error=<message>)
                      │ succeed() / fail()
                      ▼
               validate result ──invalid──→ ToolFailure(ValidationDenyResult)
                      │ ok
                      ▼
           ToolSuccess(result) / ToolFailure(result, error)

Usage:
    >>> async def execute(args, context):
    ...     tx_hash = await send_transfer(args.tool_params)
    ...     return context.succeed({"tx_hash": tx_hash})
    >>>
    >>> transfer = create_tool(
    ...     package_name="@vincent/erc20-transfer",
    ...     tool_params_schema=TransferParams,
    ...     supported_policies=[spending_limit_binding],
    ...     execute_success_schema=TransferReceipt,
    ...     execute=execute,
    ... )
"""

from __future__ import annotations

from typing import Any, Callable, Optional

import structlog
from pydantic import BaseModel, ConfigDict, Field

from vincent.core.enums import LifecyclePhase, ResponseKind, ValidationStage
from vincent.core.models import BaseContext
from vincent.core.results import (
    PolicyEvaluationResult,
    ToolFailure,
    ToolResult,
    ToolSuccess,
    wrap_no_result_failure,
    wrap_success,
)
from vincent.core.schema import Schema
from vincent.core.versioning import TOOL_API_VERSION, assert_supported_tool_version
from vincent.lifecycle.bindings import BoundPolicy, SupportedPolicies
from vincent.lifecycle.callbacks import error_message, invoke_callback
from vincent.lifecycle.execution_context import (
    ToolContext,
    build_execute_context,
    build_precheck_context,
)
from vincent.lifecycle.validation import (
    get_schema_for_tool_result,
    is_validation_failure,
    validate_or_fail,
)

logger = structlog.get_logger()


# =============================================================================
# Author-Facing Types
# =============================================================================
class ToolDefinition(BaseModel):
    """A tool as written by its author. Immutable once created."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    package_name: str = Field(description="Stable identity of the tool package")
    tool_params_schema: Any = Field(description="Params the tool accepts")
    supported_policies: list[BoundPolicy] = Field(default_factory=list)
    tool_api_version: str = TOOL_API_VERSION
    precheck_success_schema: Any = None
    precheck_fail_schema: Any = None
    execute_success_schema: Any = None
    execute_fail_schema: Any = None
    execute: Callable[..., Any]
    precheck: Optional[Callable[..., Any]] = None


class ToolLifecycleArgs(BaseModel):
    """Arguments handed to a tool's ``precheck`` / ``execute`` callback."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    tool_params: Any


# =============================================================================
# Wrapped Tool
# =============================================================================
class VincentTool:
    """Runtime-safe lifecycle object built by ``create_tool()``.

    Attributes:
        definition: The author's ``ToolDefinition``.
        package_name: Stable identity of the tool.
        supported_policies: Index of the policies bound to this tool.
        precheck: Wrapped precheck, or None if the author supplied none.
    """

    def __init__(self, definition: ToolDefinition) -> None:
        self.definition = definition
        self.package_name = definition.package_name
        self.supported_policies = SupportedPolicies(list(definition.supported_policies))

        self.tool_params_schema = Schema.of(definition.tool_params_schema)
        self.precheck_success_schema = Schema.of(definition.precheck_success_schema)
        self.precheck_fail_schema = Schema.of(definition.precheck_fail_schema)
        self.execute_success_schema = Schema.of(definition.execute_success_schema)
        self.execute_fail_schema = Schema.of(definition.execute_fail_schema)

        self.precheck: Optional[Callable[..., Any]] = (
            self._precheck if definition.precheck is not None else None
        )

        self._logger = logger.bind(component="tool", package_name=self.package_name)

    def __repr__(self) -> str:
        return (
            f"VincentTool(package_name={self.package_name!r}, "
            f"policies={self.supported_policies.package_names!r})"
        )

    def validate_params(self, tool_params: Any, phase: LifecyclePhase) -> Any:
        """Validated tool params, or the ``ToolFailure`` describing why not."""
        return validate_or_fail(
            tool_params, self.tool_params_schema, phase, ValidationStage.INPUT
        )

    # =========================================================================
    # Lifecycle Functions
    # =========================================================================

    async def execute(
        self,
        tool_params: Any,
        policies_context: PolicyEvaluationResult,
        base_context: Optional[BaseContext] = None,
    ) -> ToolResult:
        """Run the author's execute behind validation.

        Raises:
            PolicyEvaluationError: If ``policies_context`` is a deny. This is
                the only exception that escapes; everything else becomes a
                ``ToolFailure``.
        """
        phase = LifecyclePhase.EXECUTE
        params = self.validate_params(tool_params, phase)
        if is_validation_failure(params):
            return params

        context = build_execute_context(
            policies_context,
            base_context,
            self.supported_policies.policies_by_package_name,
        )
        return await self._invoke(
            phase,
            self.definition.execute,
            params,
            context,
            self.execute_success_schema,
            self.execute_fail_schema,
        )

    async def _precheck(
        self,
        tool_params: Any,
        policies_context: Optional[PolicyEvaluationResult] = None,
        base_context: Optional[BaseContext] = None,
    ) -> ToolResult:
        phase = LifecyclePhase.PRECHECK
        params = self.validate_params(tool_params, phase)
        if is_validation_failure(params):
            return params

        context = build_precheck_context(policies_context, base_context)
        return await self._invoke(
            phase,
            self.definition.precheck,
            params,
            context,
            self.precheck_success_schema,
            self.precheck_fail_schema,
        )

    # =========================================================================
    # Internals
    # =========================================================================

    async def _invoke(
        self,
        phase: LifecyclePhase,
        fn: Callable[..., Any],
        params: Any,
        context: ToolContext,
        success_schema: Schema,
        failure_schema: Schema,
    ) -> ToolResult:
        try:
            raw = await invoke_callback(fn, ToolLifecycleArgs(tool_params=params), context)
            return self._validated_result(raw, phase, success_schema, failure_schema)
        except Exception as exc:
            self._logger.warning("tool_lifecycle_error", phase=phase.value, error=str(exc))
            return wrap_no_result_failure(error_message(exc))

    def _validated_result(
        self,
        raw: Any,
        phase: LifecyclePhase,
        success_schema: Schema,
        failure_schema: Schema,
    ) -> ToolResult:
        if not isinstance(raw, (ToolSuccess, ToolFailure)):
            return wrap_no_result_failure(
                f"Tool {phase.value}() must return context.succeed() or context.fail(); "
                f"got {type(raw).__name__}"
            )

        selection = get_schema_for_tool_result(raw, success_schema, failure_schema)
        result_or_failure = validate_or_fail(
            raw.result, selection.schema, phase, ValidationStage.OUTPUT
        )
        if is_validation_failure(result_or_failure):
            return result_or_failure

        if selection.parsed_type is ResponseKind.FAILURE:
            return raw
        return wrap_success(result_or_failure)


# =============================================================================
# Factory
# =============================================================================
def create_tool(
    definition: Optional[ToolDefinition] = None,
    **fields: Any,
) -> VincentTool:
    """Build a ``VincentTool`` from a definition or from keyword fields.

    Raises:
        UnsupportedToolVersionError: If the tool or one of its bound policies
            was declared against an incompatible tool API version.
        ConfigurationError: If two bound policies share a package name or
            an ipfs cid.
    """
    if definition is None:
        definition = ToolDefinition(**fields)
    elif fields:
        definition = definition.model_copy(update=fields)

    assert_supported_tool_version(definition.tool_api_version)
    for bound in definition.supported_policies:
        assert_supported_tool_version(bound.tool_api_version)

    return VincentTool(definition)
