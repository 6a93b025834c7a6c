"""
vincent.client - Tool Client
==============================

The app-facing entry point for one published tool. It ties the layers
together so a delegatee can precheck and then execute a tool on behalf of a
delegator.

    ┌──────────────────────────────────────────────┐
    │                 ToolClient                    │
    │                                               │
    │  precheck()                 execute()         │
    │    │ validate params          │               │
    │    │ resolve delegation       ▼               │
    │    │ run_policy_prechecks   ToolHandler       │
    │    │ tool.precheck()          │ evaluate_     │
    │    ▼                          │ policies()    │
    │  ToolPrecheckResponse         │ tool.execute()│
    │                               ▼               │
    │                     ToolInvocationResponse    │
    └──────────────┬──────────────────────┬─────────┘
                   │                      │
             PolicyResolver          PolicySandbox

Usage:
    >>> client = ToolClient(
    ...     tool=transfer,
    ...     tool_ipfs_cid="QmTransfer",
    ...     delegatee_address="0xapp",
    ...     resolver=resolver,
    ...     sandbox=sandbox,
    ... )
    >>> precheck = await client.precheck({"to": "0xabc", "amount": 5}, "0xuser")
    >>> if precheck.success:
    ...     response = await client.execute({"to": "0xabc", "amount": 5}, "0xuser")
"""

from __future__ import annotations

from typing import Any

import structlog

from vincent.core.config import VincentConfig
from vincent.core.enums import LifecyclePhase
from vincent.core.exceptions import DelegationNotPermittedError
from vincent.core.models import (
    BaseContext,
    Delegation,
    ToolInvocationResponse,
    ToolPrecheckResponse,
)
from vincent.core.versioning import assert_supported_tool_version
from vincent.integrations.resolver.base import PolicyResolver
from vincent.integrations.sandbox.base import PolicySandbox
from vincent.integrations.sandbox.factory import create_sandbox
from vincent.lifecycle.tool import VincentTool
from vincent.lifecycle.validation import is_validation_failure
from vincent.orchestration.handler import ToolHandler, tool_invocation_context
from vincent.orchestration.precheck import run_policy_prechecks

logger = structlog.get_logger()


class ToolClient:
    """Precheck and execute one tool as one delegatee.

    Attributes:
        tool: The wrapped tool.
        tool_ipfs_cid: Content address the tool is published under.
        delegatee_address: The app delegatee making the calls.
    """

    def __init__(
        self,
        tool: VincentTool,
        tool_ipfs_cid: str,
        delegatee_address: str,
        resolver: PolicyResolver,
        sandbox: PolicySandbox,
    ) -> None:
        self.tool = tool
        self.tool_ipfs_cid = tool_ipfs_cid
        self.delegatee_address = delegatee_address
        self._resolver = resolver
        self._sandbox = sandbox
        self._handler = ToolHandler(
            tool=tool,
            tool_ipfs_cid=tool_ipfs_cid,
            resolver=resolver,
            sandbox=sandbox,
        )
        self._logger = logger.bind(component="tool_client", tool=tool.package_name)

    @classmethod
    def from_config(
        cls,
        config: VincentConfig,
        tool: VincentTool,
        tool_ipfs_cid: str,
        delegatee_address: str,
        resolver: PolicyResolver,
    ) -> "ToolClient":
        """Build a client whose sandbox comes from ``config.sandbox``."""
        return cls(
            tool=tool,
            tool_ipfs_cid=tool_ipfs_cid,
            delegatee_address=delegatee_address,
            resolver=resolver,
            sandbox=create_sandbox(config.sandbox),
        )

    @property
    def sandbox(self) -> PolicySandbox:
        return self._sandbox

    @property
    def resolver(self) -> PolicyResolver:
        return self._resolver

    # =========================================================================
    # Precheck
    # =========================================================================

    async def precheck(
        self,
        tool_params: Any,
        delegator_address: str,
    ) -> ToolPrecheckResponse:
        """Dry-run the policies' and the tool's prechecks locally.

        Raises:
            UnsupportedToolVersionError: On an incompatible tool API version.
            DelegationNotPermittedError: If the delegatee may not run the tool.
            UnsupportedPolicyError: If an applicable policy is not supported.
        """
        assert_supported_tool_version(self.tool.definition.tool_api_version)

        parsed_params = self.tool.validate_params(tool_params, LifecyclePhase.PRECHECK)
        if is_validation_failure(parsed_params):
            return ToolPrecheckResponse.from_tool_result(parsed_params, context=None)

        resolution = await self._resolver.resolve(
            self.delegatee_address, delegator_address, self.tool_ipfs_cid
        )
        if not resolution.is_permitted:
            raise DelegationNotPermittedError(
                message=(
                    f"Delegatee {self.delegatee_address} is not permitted to run "
                    f"tool {self.tool_ipfs_cid} for {delegator_address}"
                ),
                delegatee_address=self.delegatee_address,
                tool_ipfs_cid=self.tool_ipfs_cid,
            )

        base_context = BaseContext(
            tool_ipfs_cid=self.tool_ipfs_cid,
            delegation=Delegation(
                delegatee_address=self.delegatee_address,
                delegator_address=delegator_address,
            ),
            app_id=resolution.app_id,
            app_version=resolution.app_version,
        )
        policies_context = await run_policy_prechecks(
            self.tool, parsed_params, base_context, resolution.decoded_policies
        )
        context = tool_invocation_context(base_context, policies_context)

        if not policies_context.allow:
            denied = policies_context.denied_policy
            self._logger.info("tool_precheck_denied", denied_policy=denied.package_name)
            return ToolPrecheckResponse(
                success=False,
                error=denied.error or f"Policy {denied.package_name} denied the precheck",
                context=context,
            )

        if self.tool.precheck is None:
            return ToolPrecheckResponse(success=True, context=context)

        tool_result = await self.tool.precheck(parsed_params, policies_context, base_context)
        return ToolPrecheckResponse.from_tool_result(tool_result, context)

    # =========================================================================
    # Execute
    # =========================================================================

    async def execute(
        self,
        tool_params: Any,
        delegator_address: str,
    ) -> ToolInvocationResponse:
        """Run the full invocation and return the response envelope."""
        return await self._handler.handle(
            tool_params,
            delegatee_address=self.delegatee_address,
            delegator_address=delegator_address,
        )

    def __repr__(self) -> str:
        return (
            f"ToolClient(tool={self.tool.package_name!r}, "
            f"tool_ipfs_cid={self.tool_ipfs_cid!r}, sandbox={self._sandbox!r})"
        )
