"""
vincent.lifecycle - Schema-Bound Lifecycle Layer
==================================================

Turns author-written policies and tools into lifecycle objects whose
functions validate input, validate output, and never raise.

Modules:
    - validation:         validate-or-deny / validate-or-fail, schema selection
    - policy:             create_policy() → VincentPolicy
    - tool:               create_tool() → VincentTool
    - bindings:           BoundPolicy, parameter mapping, applicable policies
    - execution_context:  ToolContext builders, commit handles
"""

from vincent.lifecycle.bindings import (
    BoundPolicy,
    SupportedPolicies,
    create_tool_policy,
    map_tool_params,
    validate_policies,
)
from vincent.lifecycle.execution_context import (
    ToolContext,
    build_execute_context,
    build_precheck_context,
)
from vincent.lifecycle.policy import (
    PolicyContext,
    PolicyDefinition,
    PolicyLifecycleArgs,
    VincentPolicy,
    create_policy,
)
from vincent.lifecycle.tool import (
    ToolDefinition,
    ToolLifecycleArgs,
    VincentTool,
    create_tool,
)
from vincent.lifecycle.validation import validate_or_deny, validate_or_fail

__all__ = [
    "BoundPolicy",
    "SupportedPolicies",
    "create_tool_policy",
    "map_tool_params",
    "validate_policies",
    "ToolContext",
    "build_execute_context",
    "build_precheck_context",
    "PolicyContext",
    "PolicyDefinition",
    "PolicyLifecycleArgs",
    "VincentPolicy",
    "create_policy",
    "ToolDefinition",
    "ToolLifecycleArgs",
    "VincentTool",
    "create_tool",
    "validate_or_deny",
    "validate_or_fail",
]
