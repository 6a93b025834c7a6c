"""
vincent.orchestration - Invocation Orchestration Layer
========================================================

Drives one tool invocation across the lifecycle objects and the external
collaborators.

Components:
    - evaluate_policies:     Sequential, non-short-circuiting remote evaluation.
    - run_policy_prechecks:  Local policy prechecks, stopping at the first deny.
    - ToolHandler:           Tool-side invocation handler, builds the envelope.
    - PolicyHandler:         Policy-side handler running inside a sandbox.
"""

from vincent.orchestration.evaluator import evaluate_policies, parse_evaluate_response
from vincent.orchestration.handler import ToolHandler
from vincent.orchestration.policy_handler import PolicyHandler
from vincent.orchestration.precheck import run_policy_prechecks

__all__ = [
    "evaluate_policies",
    "parse_evaluate_response",
    "ToolHandler",
    "PolicyHandler",
    "run_policy_prechecks",
]
