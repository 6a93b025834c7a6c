"""
Vincent - Tool/Policy Lifecycle Engine
========================================

Vincent runs delegated actions ("tools") on behalf of a user, gated by
composable, user-configurable authorization checks ("policies"). Every tool
and policy invocation passes through the same pipeline:

    validate params → resolve applicable policies → evaluate every policy
        → (allowed) build execute context → tool.execute()
        → (denied)  Failure + full policy picture

Architecture Layers (top to bottom):
    1. Client         - ToolClient (precheck / execute)
    2. Orchestration  - Policy evaluation, prechecks, tool and policy handlers
    3. Lifecycle      - create_policy / create_tool, validation, bindings
    4. Integration    - Policy sandboxes, delegation resolvers
    5. Core           - Result algebra, models, config, exceptions

Quick Start:
    >>> from vincent import ToolClient, create_policy, create_tool, create_tool_policy
    >>> client = ToolClient(tool, "QmTool", "0xapp", resolver, sandbox)
    >>> response = await client.execute({"amount": 5}, delegator_address="0xuser")
"""

# =============================================================================
# Package Version
# =============================================================================
__version__ = "0.1.0"

# =============================================================================
# Package-Level Exports
# =============================================================================
from vincent.client import ToolClient
from vincent.lifecycle import (
    create_policy,
    create_tool,
    create_tool_policy,
)

__all__ = [
    "ToolClient",
    "create_policy",
    "create_tool",
    "create_tool_policy",
    "__version__",
]
