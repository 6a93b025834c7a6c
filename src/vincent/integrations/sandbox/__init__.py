"""
vincent.integrations.sandbox - Policy Sandboxes
=================================================

Where policy evaluations actually run. The orchestrator talks to a
``PolicySandbox`` and only ever sees JSON text coming back.

Available Backends:
    - PolicySandbox:       Abstract base class defining the sandbox contract.
    - LocalPolicySandbox:  Runs registered policies in-process.
    - MockPolicySandbox:   Replays queued raw responses (for testing).

Usage:
    >>> from vincent.integrations.sandbox import create_sandbox
    >>> sandbox = create_sandbox(config.sandbox)
"""

from vincent.integrations.sandbox.base import PolicySandbox
from vincent.integrations.sandbox.local import LocalPolicySandbox
from vincent.integrations.sandbox.mock import MockPolicySandbox
from vincent.integrations.sandbox.factory import create_sandbox

__all__ = [
    "PolicySandbox",
    "LocalPolicySandbox",
    "MockPolicySandbox",
    "create_sandbox",
]
