"""
vincent.core.exceptions - Fatal Error Hierarchy
=================================================

Vincent has two disjoint error tiers:

    Recoverable (per-policy / per-tool-call)
        Input validation failures, output validation failures, and exceptions
        raised by author-supplied lifecycle code. These NEVER appear as
        exceptions outside the lifecycle wrappers; they are converted into
        ``PolicyDeny`` / ``ToolFailure`` values (see vincent.core.results).

    Fatal (invocation-level)
        Everything in this module. These propagate as exceptions up to the
        tool-side handler, which turns them into a best-effort response
        envelope carrying whatever context was gathered so far.

Exception Hierarchy:
    VincentError (base)
        ├── ConfigurationError           - Invalid config or definitions
        ├── UnsupportedToolVersionError  - Tool API major version mismatch
        ├── DelegationNotPermittedError  - Delegatee not permitted for the tool
        ├── UnsupportedPolicyError       - Applicable policy not bound to the tool
        ├── PolicyEvaluationError        - Execute context built from a deny
        └── SandboxError                 - Sandbox transport failure

Usage:
    >>> from vincent.core.exceptions import DelegationNotPermittedError
    >>> raise DelegationNotPermittedError(
    ...     message="App delegatee is not permitted to run this tool",
    ...     delegatee_address="0xabc...",
    ...     tool_ipfs_cid="QmTool...",
    ... )
"""

from __future__ import annotations

from typing import Any, Optional


# =============================================================================
# Base Exception
# =============================================================================
class VincentError(Exception):
    """Base exception for all fatal Vincent errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code (UPPER_SNAKE_CASE).
        details: Arbitrary dict with additional debugging context.
    """

    def __init__(
        self,
        message: str,
        error_code: str = "UNKNOWN_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)

        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize this exception to a dictionary (for structlog and envelopes)."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


# =============================================================================
# Configuration Error
# =============================================================================
# Raised at definition time (bad policy/tool definitions) and at startup
# (bad config file, unknown sandbox backend). Fail fast.
# =============================================================================
class ConfigurationError(VincentError):
    """Raised when configuration or an author definition is invalid.

    Common Causes:
        - Malformed ``vincent.yaml``
        - Unknown sandbox backend name
        - A policy declaring ``commit_params_schema`` without ``commit``
        - Two bound policies sharing a package name or ipfs cid
    """

    def __init__(
        self,
        message: str,
        error_code: str = "CONFIG_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, error_code=error_code, details=details)


# =============================================================================
# Unsupported Tool Version
# =============================================================================
class UnsupportedToolVersionError(VincentError):
    """Raised when a declared tool API version has a different major version.

    Attributes:
        declared_version: The version declared by the tool, policy or request.
        supported_version: The engine's current ``TOOL_API_VERSION``.
    """

    def __init__(
        self,
        message: str,
        declared_version: str,
        supported_version: str,
        error_code: str = "UNSUPPORTED_TOOL_API_VERSION",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        enriched_details["declared_version"] = declared_version
        enriched_details["supported_version"] = supported_version

        super().__init__(message=message, error_code=error_code, details=enriched_details)

        self.declared_version = declared_version
        self.supported_version = supported_version


# =============================================================================
# Delegation Not Permitted
# =============================================================================
# The on-chain resolver reported isPermitted=false. The whole invocation
# aborts before any policy is evaluated.
# =============================================================================
class DelegationNotPermittedError(VincentError):
    """Raised when the delegatee is not permitted to run the tool for the delegator.

    Attributes:
        delegatee_address: The app delegatee that attempted the invocation.
        tool_ipfs_cid: Content address of the tool being invoked.
    """

    def __init__(
        self,
        message: str,
        delegatee_address: str,
        tool_ipfs_cid: str,
        error_code: str = "DELEGATION_NOT_PERMITTED",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        enriched_details["delegatee_address"] = delegatee_address
        enriched_details["tool_ipfs_cid"] = tool_ipfs_cid

        super().__init__(message=message, error_code=error_code, details=enriched_details)

        self.delegatee_address = delegatee_address
        self.tool_ipfs_cid = tool_ipfs_cid


# =============================================================================
# Unsupported Policy
# =============================================================================
# A policy is applicable according to the resolver but the tool never
# declared it in supported_policies. This is a configuration error for the
# whole invocation, NOT a per-policy deny.
# =============================================================================
class UnsupportedPolicyError(VincentError):
    """Raised when an applicable policy is not supported by the tool.

    Attributes:
        policy_ipfs_cid: Content address of the unsupported policy.
        tool_ipfs_cid: Content address of the tool being invoked.
    """

    def __init__(
        self,
        message: str,
        policy_ipfs_cid: str,
        tool_ipfs_cid: str,
        error_code: str = "UNSUPPORTED_POLICY",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        enriched_details["policy_ipfs_cid"] = policy_ipfs_cid
        enriched_details["tool_ipfs_cid"] = tool_ipfs_cid

        super().__init__(message=message, error_code=error_code, details=enriched_details)

        self.policy_ipfs_cid = policy_ipfs_cid
        self.tool_ipfs_cid = tool_ipfs_cid


# =============================================================================
# Policy Evaluation Error
# =============================================================================
class PolicyEvaluationError(VincentError):
    """Raised when an execute context is requested for a denied evaluation.

    A denied evaluation must never reach a tool's ``execute``. Building an
    execution context from a deny-branch result is a programming error in
    the caller, so it is fatal rather than a ``ToolFailure``.
    """

    def __init__(
        self,
        message: str,
        denied_package_name: Optional[str] = None,
        error_code: str = "POLICY_EVALUATION_DENIED",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        if denied_package_name:
            enriched_details["denied_package_name"] = denied_package_name

        super().__init__(message=message, error_code=error_code, details=enriched_details)

        self.denied_package_name = denied_package_name


# =============================================================================
# Sandbox Error
# =============================================================================
class SandboxError(VincentError):
    """Raised by a sandbox backend when the remote call itself fails.

    The orchestrator converts this into a per-policy deny; it only surfaces
    to callers that use a sandbox directly.
    """

    def __init__(
        self,
        message: str,
        ipfs_cid: str,
        error_code: str = "SANDBOX_CALL_FAILED",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        enriched_details["ipfs_cid"] = ipfs_cid

        super().__init__(message=message, error_code=error_code, details=enriched_details)

        self.ipfs_cid = ipfs_cid
