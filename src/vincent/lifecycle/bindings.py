"""
vincent.lifecycle.bindings - Binding Policies to Tools
========================================================

A tool declares which policies may gate it. Each declaration is a
``BoundPolicy``: the wrapped policy, the content address its packaged code
is published under, and a mapping from the tool's parameter names to the
policy's parameter names.

Parameter Mapping:
    tool params                 mapping                   policy params
    {"amount": 5,       {"amount": "spend",        →     {"spend": 5,
     "to": "0xabc",      "token": "asset"}                 "asset": "USDC"}
     "token": "USDC"}

    Tool parameters missing from the mapping are never forwarded.

Resolving Applicable Policies:
    The external resolver reports which policies apply to an invocation as
    ``{policy_ipfs_cid: user_params}``. ``validate_policies()`` looks each
    cid up in the tool's ``SupportedPolicies`` index and produces the ordered
    work list the orchestrator consumes. A cid the tool does not support is
    fatal for the whole invocation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterator, Mapping, NamedTuple, Optional, Union

import structlog
from pydantic import BaseModel, ConfigDict, Field

from vincent.core.exceptions import ConfigurationError, UnsupportedPolicyError
from vincent.core.versioning import TOOL_API_VERSION, assert_supported_tool_version
from vincent.lifecycle.policy import PolicyDefinition, VincentPolicy, create_policy

if TYPE_CHECKING:
    from vincent.lifecycle.tool import VincentTool

logger = structlog.get_logger()


# =============================================================================
# Bound Policy
# =============================================================================
class BoundPolicy(BaseModel):
    """A policy bound to one tool.

    Attributes:
        ipfs_cid: Content address of the policy's packaged code. Routes the
            remote evaluation call.
        policy: The wrapped policy.
        tool_parameter_mappings: Tool parameter name → policy parameter name.
        tool_api_version: API version the binding was declared against.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    ipfs_cid: str = Field(min_length=1)
    policy: VincentPolicy
    tool_parameter_mappings: dict[str, str] = Field(default_factory=dict)
    tool_api_version: str = TOOL_API_VERSION

    @property
    def package_name(self) -> str:
        return self.policy.package_name


def create_tool_policy(
    policy: Union[VincentPolicy, PolicyDefinition],
    ipfs_cid: str,
    tool_parameter_mappings: Optional[Mapping[str, str]] = None,
    tool_api_version: str = TOOL_API_VERSION,
) -> BoundPolicy:
    """Bind a policy to a tool.

    Accepts either an already wrapped ``VincentPolicy`` or a bare
    ``PolicyDefinition``, which is wrapped here.

    Raises:
        UnsupportedToolVersionError: If ``tool_api_version`` is incompatible.
    """
    assert_supported_tool_version(tool_api_version)
    if isinstance(policy, PolicyDefinition):
        policy = create_policy(policy)

    return BoundPolicy(
        ipfs_cid=ipfs_cid,
        policy=policy,
        tool_parameter_mappings=dict(tool_parameter_mappings or {}),
        tool_api_version=tool_api_version,
    )


# =============================================================================
# Supported Policy Index
# =============================================================================
class SupportedPolicies:
    """The policies a tool supports, indexed by package name and ipfs cid.

    Raises:
        ConfigurationError: If two bindings share a package name or a cid.
    """

    def __init__(self, bound_policies: Optional[list[BoundPolicy]] = None) -> None:
        self._by_package_name: dict[str, BoundPolicy] = {}
        self._by_ipfs_cid: dict[str, BoundPolicy] = {}

        for bound in bound_policies or []:
            if bound.package_name in self._by_package_name:
                raise ConfigurationError(
                    message=f"Duplicate policy package name: {bound.package_name}",
                    error_code="DUPLICATE_POLICY",
                    details={"package_name": bound.package_name},
                )
            if bound.ipfs_cid in self._by_ipfs_cid:
                raise ConfigurationError(
                    message=f"Duplicate policy ipfs cid: {bound.ipfs_cid}",
                    error_code="DUPLICATE_POLICY",
                    details={"ipfs_cid": bound.ipfs_cid},
                )
            self._by_package_name[bound.package_name] = bound
            self._by_ipfs_cid[bound.ipfs_cid] = bound

    def by_package_name(self, package_name: str) -> Optional[BoundPolicy]:
        return self._by_package_name.get(package_name)

    def by_ipfs_cid(self, ipfs_cid: str) -> Optional[BoundPolicy]:
        return self._by_ipfs_cid.get(ipfs_cid)

    @property
    def package_names(self) -> list[str]:
        return list(self._by_package_name)

    @property
    def policies_by_package_name(self) -> dict[str, VincentPolicy]:
        return {name: bound.policy for name, bound in self._by_package_name.items()}

    def __iter__(self) -> Iterator[BoundPolicy]:
        return iter(self._by_package_name.values())

    def __len__(self) -> int:
        return len(self._by_package_name)

    def __contains__(self, key: object) -> bool:
        return key in self._by_package_name or key in self._by_ipfs_cid

    def __repr__(self) -> str:
        return f"SupportedPolicies({self.package_names!r})"


# =============================================================================
# Parameter Mapping
# =============================================================================
def map_tool_params(
    tool_params: Mapping[str, Any],
    tool_parameter_mappings: Mapping[str, str],
) -> dict[str, Any]:
    """Rename mapped tool parameters and drop the rest."""
    mapped: dict[str, Any] = {}
    for tool_key, policy_key in tool_parameter_mappings.items():
        if not policy_key or tool_key not in tool_params:
            continue
        mapped[policy_key] = tool_params[tool_key]
    return mapped


def _as_mapping(tool_params: Any) -> Mapping[str, Any]:
    if isinstance(tool_params, BaseModel):
        return tool_params.model_dump()
    if isinstance(tool_params, Mapping):
        return tool_params
    raise TypeError(
        f"Tool params must be a mapping or a pydantic model, got {type(tool_params).__name__}"
    )


# =============================================================================
# Applicable Policy Resolution
# =============================================================================
class ValidatedPolicy(NamedTuple):
    """One entry of the orchestrator's ordered work list."""

    package_name: str
    tool_policy_params: dict[str, Any]
    user_params: Any


def validate_policies(
    decoded_policies: Mapping[str, Any],
    tool: "VincentTool",
    parsed_tool_params: Any,
    tool_ipfs_cid: str,
) -> list[ValidatedPolicy]:
    """Adapt resolver output into the ordered list the orchestrator needs.

    Args:
        decoded_policies: ``{policy_ipfs_cid: user_params}`` in evaluation
            order.
        tool: The tool being invoked.
        parsed_tool_params: Tool params already validated by the tool schema.
        tool_ipfs_cid: The tool's content address, for error reporting.

    Raises:
        UnsupportedPolicyError: If an applicable policy is not supported by
            the tool. Raised before anything is evaluated.
    """
    tool_params = _as_mapping(parsed_tool_params)
    validated: list[ValidatedPolicy] = []

    for policy_ipfs_cid, user_params in decoded_policies.items():
        bound = tool.supported_policies.by_ipfs_cid(policy_ipfs_cid)
        if bound is None:
            raise UnsupportedPolicyError(
                message=(
                    f"Tool {tool.package_name} ({tool_ipfs_cid}) does not support "
                    f"policy {policy_ipfs_cid}"
                ),
                policy_ipfs_cid=policy_ipfs_cid,
                tool_ipfs_cid=tool_ipfs_cid,
            )

        validated.append(
            ValidatedPolicy(
                package_name=bound.package_name,
                tool_policy_params=map_tool_params(tool_params, bound.tool_parameter_mappings),
                user_params=user_params,
            )
        )

    logger.debug(
        "policies_validated",
        tool=tool.package_name,
        policies=[entry.package_name for entry in validated],
    )
    return validated
