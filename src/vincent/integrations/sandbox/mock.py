"""
vincent.integrations.sandbox.mock - Mock Policy Sandbox for Testing
=====================================================================

Returns configurable raw responses without running any policy code. Lets
tests drive the orchestrator with exactly the text a remote host might send
back, including malformed JSON.

How It Works:
    When call() is invoked:
    1. If failure simulation is on, raise ``SandboxError``.
    2. If a response is queued for that ipfs cid, return the next one.
    3. Else if the shared queue has entries, return the next one.
    4. Otherwise return the default response (an allow with no result).

Usage:
    >>> sandbox = MockPolicySandbox()
    >>> sandbox.queue_response(PolicyDeny(result={"reason": "x"}), ipfs_cid="QmA")
    >>> sandbox.queue_response("not json", ipfs_cid="QmB")
    >>> await sandbox.call("QmA", params)
    '{"allow":false,"result":{"reason":"x"}}'
"""

from __future__ import annotations

import json
from collections import deque
from typing import Any, Optional, Union

import structlog

from vincent.core.config import SandboxConfig
from vincent.core.enums import SandboxBackend
from vincent.core.exceptions import SandboxError
from vincent.core.results import WireModel
from vincent.integrations.sandbox.base import PolicySandbox

logger = structlog.get_logger()

RawResponse = Union[str, WireModel, dict[str, Any]]


def _as_text(response: RawResponse) -> str:
    if isinstance(response, str):
        return response
    if isinstance(response, WireModel):
        return response.to_json()
    return json.dumps(response)


class MockPolicySandbox(PolicySandbox):
    """Mock policy sandbox for tests.

    Features:
        - **Response Queues**: per-cid queues plus one shared FIFO queue.
        - **Call History**: every call() is recorded for assertions.
        - **Failure Simulation**: make every call raise ``SandboxError``.
    """

    def __init__(
        self,
        config: Optional[SandboxConfig] = None,
        default_response: RawResponse = '{"allow": true}',
    ) -> None:
        if config is None:
            config = SandboxConfig(backend=SandboxBackend.MOCK)
        super().__init__(config)

        self._response_queue: deque[str] = deque()
        self._responses_by_cid: dict[str, deque[str]] = {}
        self._call_history: list[dict[str, Any]] = []
        self._default_response = _as_text(default_response)

        self._should_fail: bool = False
        self._failure_message: str = "Mock sandbox transport error"

        self._logger = logger.bind(component="mock_policy_sandbox")

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def call_history(self) -> list[dict[str, Any]]:
        """Recorded calls: ``{"ipfs_cid", "params", "delegatee_address"}``."""
        return self._call_history

    @property
    def call_count(self) -> int:
        return len(self._call_history)

    @property
    def called_cids(self) -> list[str]:
        return [entry["ipfs_cid"] for entry in self._call_history]

    # =========================================================================
    # Queue Management
    # =========================================================================

    def queue_response(self, response: RawResponse, *, ipfs_cid: Optional[str] = None) -> None:
        """Queue a raw response, for one cid or for whichever call comes next.

        Models are serialized with their wire aliases; dicts are dumped as
        JSON; strings are returned verbatim.
        """
        text = _as_text(response)
        if ipfs_cid is None:
            self._response_queue.append(text)
        else:
            self._responses_by_cid.setdefault(ipfs_cid, deque()).append(text)

    def clear_queue(self) -> None:
        self._response_queue.clear()
        self._responses_by_cid.clear()

    def clear_history(self) -> None:
        self._call_history.clear()

    def set_should_fail(self, should_fail: bool, message: str = "Mock sandbox transport error") -> None:
        """Make every call() raise ``SandboxError`` with ``message``."""
        self._should_fail = should_fail
        self._failure_message = message

    # =========================================================================
    # Sandbox Interface
    # =========================================================================

    async def call(
        self,
        ipfs_cid: str,
        params: dict[str, Any],
        *,
        delegatee_address: Optional[str] = None,
    ) -> str:
        self._call_history.append({
            "ipfs_cid": ipfs_cid,
            "params": params,
            "delegatee_address": delegatee_address,
        })
        self._logger.debug("mock_sandbox_called", ipfs_cid=ipfs_cid)

        if self._should_fail:
            raise SandboxError(message=self._failure_message, ipfs_cid=ipfs_cid)

        queue = self._responses_by_cid.get(ipfs_cid)
        if queue:
            return queue.popleft()
        if self._response_queue:
            return self._response_queue.popleft()
        return self._default_response
