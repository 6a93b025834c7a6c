"""
vincent.core.enums - Type-Safe Enumerations
=============================================

All enums inherit from both ``str`` and ``Enum`` so they serialize to plain
strings on the wire and compare equal to string literals:

    >>> LifecyclePhase.EVALUATE == "evaluate"
    True
"""

from enum import Enum


# =============================================================================
# Lifecycle Phase
# =============================================================================
# Every validation error records which lifecycle function produced it.
#
#   PRECHECK → policy or tool precheck (client side, before execution)
#   EVALUATE → policy evaluate (inside the sandbox)
#   COMMIT   → policy commit (called from a tool's execute)
#   EXECUTE  → tool execute
# =============================================================================
class LifecyclePhase(str, Enum):
    """The lifecycle function a validation or result belongs to."""

    PRECHECK = "precheck"
    EVALUATE = "evaluate"
    COMMIT = "commit"
    EXECUTE = "execute"


class ValidationStage(str, Enum):
    """Whether a value was validated on the way in or on the way out."""

    INPUT = "input"
    OUTPUT = "output"


# =============================================================================
# Response Kind
# =============================================================================
# The outcome a schema selection decided on. UNKNOWN means the value did not
# even carry a boolean ``allow`` / ``success`` flag.
# =============================================================================
class ResponseKind(str, Enum):
    """Outcome label produced by schema selection."""

    ALLOW = "allow"
    DENY = "deny"
    SUCCESS = "success"
    FAILURE = "failure"
    UNKNOWN = "unknown"


class SandboxBackend(str, Enum):
    """Available policy sandbox implementations."""

    LOCAL = "local"     # In-process execution of registered policies
    MOCK = "mock"       # Queued raw responses, for tests
