"""
vincent.core - Foundation Layer
=================================

The building blocks every other module in Vincent depends on:

    - config:          Configuration management (VincentConfig, SandboxConfig)
    - enums:           Lifecycle phases, validation stages, response kinds
    - exceptions:      Fatal-tier exception hierarchy
    - schema:          Schema descriptors backed by pydantic TypeAdapter
    - results:         The result algebra (allow/deny, success/failure)
    - models:          Invocation context and envelope models
    - versioning:      Tool API version compatibility
    - logging_config:  structlog setup

Dependency Rule:
    core/ depends on NOTHING else in the vincent package.
"""

# =============================================================================
# Re-exports for convenient importing
# =============================================================================
from vincent.core.config import SandboxConfig, VincentConfig, get_default_config, load_config
from vincent.core.enums import LifecyclePhase, ResponseKind, SandboxBackend, ValidationStage
from vincent.core.exceptions import (
    ConfigurationError,
    DelegationNotPermittedError,
    PolicyEvaluationError,
    SandboxError,
    UnsupportedPolicyError,
    UnsupportedToolVersionError,
    VincentError,
)
from vincent.core.models import (
    BaseContext,
    Delegation,
    DelegationResolution,
    ToolInvocationContext,
    ToolInvocationResponse,
    ToolPrecheckResponse,
)
from vincent.core.results import (
    PolicyAllow,
    PolicyDeny,
    PolicyEvaluationAllow,
    PolicyEvaluationDeny,
    ToolFailure,
    ToolSuccess,
    ValidationDenyResult,
    is_validation_deny_result,
)
from vincent.core.schema import Schema
from vincent.core.versioning import TOOL_API_VERSION, assert_supported_tool_version

__all__ = [
    # Config
    "VincentConfig",
    "SandboxConfig",
    "load_config",
    "get_default_config",
    # Enums
    "LifecyclePhase",
    "ValidationStage",
    "ResponseKind",
    "SandboxBackend",
    # Exceptions
    "VincentError",
    "ConfigurationError",
    "UnsupportedToolVersionError",
    "DelegationNotPermittedError",
    "UnsupportedPolicyError",
    "PolicyEvaluationError",
    "SandboxError",
    # Models
    "Delegation",
    "BaseContext",
    "DelegationResolution",
    "ToolInvocationContext",
    "ToolInvocationResponse",
    "ToolPrecheckResponse",
    # Results
    "PolicyAllow",
    "PolicyDeny",
    "ToolSuccess",
    "ToolFailure",
    "PolicyEvaluationAllow",
    "PolicyEvaluationDeny",
    "ValidationDenyResult",
    "is_validation_deny_result",
    # Schema / versioning
    "Schema",
    "TOOL_API_VERSION",
    "assert_supported_tool_version",
]
