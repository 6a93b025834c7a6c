"""
vincent.integrations.resolver - Delegation & Policy Resolution
================================================================

    - PolicyResolver:          Abstract resolver contract.
    - InMemoryPolicyResolver:  Grant-table resolver for local runs and tests.
"""

from vincent.integrations.resolver.base import PolicyResolver
from vincent.integrations.resolver.in_memory import InMemoryPolicyResolver

__all__ = [
    "PolicyResolver",
    "InMemoryPolicyResolver",
]
