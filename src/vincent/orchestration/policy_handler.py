"""
vincent.orchestration.policy_handler - Policy-Side Request Handler
====================================================================

What runs inside the sandbox for one policy evaluation request.

    params (wire PolicyEvaluationRequest)
        │
        ├── assert tool API version          (raises on mismatch)
        ├── resolve delegation               (not permitted → deny)
        ├── user_params = decoded_policies[this policy's cid]
        ├── policy.evaluate(tool_params, user_params, base_context)
        ▼
    JSON text of PolicyAllow / PolicyDeny

Apart from a version mismatch, every problem comes back as a deny: the
handler's output is the only thing the tool side ever sees.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

import structlog
from pydantic import ValidationError

from vincent.core.models import BaseContext, Delegation, PolicyEvaluationRequest
from vincent.core.results import create_no_result_deny
from vincent.core.versioning import assert_supported_tool_version
from vincent.integrations.resolver.base import PolicyResolver
from vincent.lifecycle.policy import VincentPolicy

logger = structlog.get_logger()


class PolicyHandler:
    """Serves evaluation requests for one published policy.

    Attributes:
        policy: The wrapped policy.
        ipfs_cid: Content address the policy is published under.
    """

    def __init__(self, policy: VincentPolicy, ipfs_cid: str, resolver: PolicyResolver) -> None:
        self.policy = policy
        self.ipfs_cid = ipfs_cid
        self._resolver = resolver
        self._logger = logger.bind(
            component="policy_handler",
            policy=policy.package_name,
            ipfs_cid=ipfs_cid,
        )

    async def handle(
        self,
        params: Mapping[str, Any],
        delegatee_address: Optional[str] = None,
    ) -> str:
        """Evaluate one request and return the response as JSON text.

        Raises:
            UnsupportedToolVersionError: If the request's tool API version is
                incompatible.
        """
        assert_supported_tool_version(params.get("toolApiVersion", ""))

        try:
            request = PolicyEvaluationRequest.model_validate(params)
        except ValidationError as exc:
            self._logger.warning("policy_request_malformed", error_count=exc.error_count())
            return create_no_result_deny(
                f"Malformed policy evaluation request: {exc.error_count()} validation error(s)"
            ).to_json()

        if not delegatee_address:
            return create_no_result_deny("Policy request has no authenticated delegatee").to_json()

        resolution = await self._resolver.resolve(
            delegatee_address,
            request.context.delegator_address,
            request.context.tool_ipfs_cid,
        )
        if not resolution.is_permitted:
            self._logger.info("policy_delegation_not_permitted", delegatee=delegatee_address)
            return create_no_result_deny(
                f"Delegatee {delegatee_address} is not permitted to run tool "
                f"{request.context.tool_ipfs_cid}"
            ).to_json()

        base_context = BaseContext(
            tool_ipfs_cid=request.context.tool_ipfs_cid,
            delegation=Delegation(
                delegatee_address=delegatee_address,
                delegator_address=request.context.delegator_address,
            ),
            app_id=resolution.app_id,
            app_version=resolution.app_version,
        )
        response = await self.policy.evaluate(
            request.tool_params,
            resolution.decoded_policies.get(self.ipfs_cid),
            base_context,
        )
        self._logger.debug("policy_request_handled", allow=response.allow)
        return response.to_json()
