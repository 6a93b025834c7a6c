"""
vincent.lifecycle.validation - Validate-or-Convert Primitives
===============================================================

Everything that touches author-supplied data goes through this module.
Validators NEVER raise for invalid data; they return either the typed value
or a deny / failure that carries a ``ValidationDenyResult``.

    validate_or_deny(value, schema, phase, stage)  → value | PolicyDeny
    validate_or_fail(value, schema, phase, stage)  → value | ToolFailure

Schema selection is the single place outcome/schema pairing lives. Given an
already-produced ``{allow|success, result}`` value and a pair of candidate
schemas, it picks the allow/success schema when the flag is true, the
deny/failure schema when it is false, and a permissive fallback marked
UNKNOWN when the flag is missing altogether. Policy and tool wrappers call
it identically.
"""

from __future__ import annotations

from typing import Any, Mapping, NamedTuple, Union

import structlog
from pydantic import ValidationError

from vincent.core.enums import LifecyclePhase, ResponseKind, ValidationStage
from vincent.core.results import (
    PolicyDeny,
    ToolFailure,
    ValidationDenyResult,
    create_deny_result,
    is_validation_deny_result,
    wrap_failure,
)
from vincent.core.schema import Schema

logger = structlog.get_logger()


def _describe(error: ValidationError, phase: LifecyclePhase, stage: ValidationStage) -> str:
    first = error.errors(include_url=False)[0] if error.error_count() else {}
    location = ".".join(str(part) for part in first.get("loc", ())) or "<root>"
    return (
        f"Invalid {phase.value} {stage.value}: {error.error_count()} validation "
        f"error(s); first at {location}: {first.get('msg', 'invalid value')}"
    )


# =============================================================================
# Validators
# =============================================================================
def validate_or_deny(
    value: Any,
    schema: Schema,
    phase: LifecyclePhase,
    stage: ValidationStage,
) -> Union[Any, PolicyDeny]:
    """Validate ``value`` for a policy lifecycle function.

    Returns:
        The typed value if it satisfies ``schema``, otherwise a
        ``PolicyDeny`` whose result is a ``ValidationDenyResult``.
    """
    try:
        return schema.validate(value)
    except ValidationError as exc:
        logger.debug(
            "policy_schema_validation_failed",
            phase=phase.value,
            stage=stage.value,
            error_count=exc.error_count(),
        )
        return create_deny_result(
            result=ValidationDenyResult.from_error(exc, phase, stage),
            error=_describe(exc, phase, stage),
        )


def validate_or_fail(
    value: Any,
    schema: Schema,
    phase: LifecyclePhase,
    stage: ValidationStage,
) -> Union[Any, ToolFailure]:
    """Validate ``value`` for a tool lifecycle function.

    Returns:
        The typed value if it satisfies ``schema``, otherwise a
        ``ToolFailure`` whose result is a ``ValidationDenyResult``.
    """
    try:
        return schema.validate(value)
    except ValidationError as exc:
        logger.debug(
            "tool_schema_validation_failed",
            phase=phase.value,
            stage=stage.value,
            error_count=exc.error_count(),
        )
        return wrap_failure(
            result=ValidationDenyResult.from_error(exc, phase, stage),
            error=_describe(exc, phase, stage),
        )


# =============================================================================
# Schema Selection
# =============================================================================
class SchemaSelection(NamedTuple):
    """Which schema to validate a produced ``result`` with, and why."""

    schema: Schema
    parsed_type: ResponseKind


def _flag(value: Any, key: str) -> Any:
    if isinstance(value, Mapping):
        return value.get(key)
    return getattr(value, key, None)


def get_schema_for_policy_response_result(
    value: Any,
    allow_result_schema: Schema,
    deny_result_schema: Schema,
) -> SchemaSelection:
    """Pick the allow or deny schema for a policy response.

    Values without a boolean ``allow`` flag select ``Schema.any()`` and are
    labelled ``ResponseKind.UNKNOWN``; callers decide how to treat them.
    """
    flag = _flag(value, "allow")
    if not isinstance(flag, bool):
        logger.warning(
            "policy_response_shape_unknown",
            value_type=type(value).__name__,
        )
        return SchemaSelection(Schema.any(), ResponseKind.UNKNOWN)
    if flag:
        return SchemaSelection(allow_result_schema, ResponseKind.ALLOW)
    return SchemaSelection(deny_result_schema, ResponseKind.DENY)


def get_schema_for_tool_result(
    value: Any,
    success_result_schema: Schema,
    failure_result_schema: Schema,
) -> SchemaSelection:
    """Pick the success or failure schema for a tool result."""
    flag = _flag(value, "success")
    if not isinstance(flag, bool):
        logger.warning(
            "tool_result_shape_unknown",
            value_type=type(value).__name__,
        )
        return SchemaSelection(Schema.any(), ResponseKind.UNKNOWN)
    if flag:
        return SchemaSelection(success_result_schema, ResponseKind.SUCCESS)
    return SchemaSelection(failure_result_schema, ResponseKind.FAILURE)


def result_of(value: Any) -> Any:
    """The ``result`` payload of a response model or wire dict."""
    return _flag(value, "result")


def error_of(value: Any) -> Any:
    """The ``error`` message of a response model or wire dict."""
    return _flag(value, "error")


def is_validation_failure(value: Any) -> bool:
    """True if ``value`` is a deny/failure produced by one of the validators.

    Checking the marker, not just the type, keeps a legitimately valid value
    that happens to be a ``PolicyDeny`` from being mistaken for a failed
    validation.
    """
    return isinstance(value, (PolicyDeny, ToolFailure)) and is_validation_deny_result(
        value.result
    )
