"""
Tests for vincent.core.exceptions
===================================

Every fatal error carries a message, a machine-readable code and a details
dict enriched with its own fields.
"""

import pytest

from vincent.core.exceptions import (
    ConfigurationError,
    DelegationNotPermittedError,
    PolicyEvaluationError,
    SandboxError,
    UnsupportedPolicyError,
    UnsupportedToolVersionError,
    VincentError,
)


class TestVincentError:
    """Tests for the base exception."""

    def test_defaults(self) -> None:
        error = VincentError("something broke")
        assert str(error) == "something broke"
        assert error.error_code == "UNKNOWN_ERROR"
        assert error.details == {}

    def test_to_dict(self) -> None:
        error = ConfigurationError("bad", details={"path": "x.yaml"})
        assert error.to_dict() == {
            "error_type": "ConfigurationError",
            "message": "bad",
            "error_code": "CONFIG_ERROR",
            "details": {"path": "x.yaml"},
        }

    def test_repr_mentions_code(self) -> None:
        assert "CONFIG_ERROR" in repr(ConfigurationError("bad"))


class TestSubclasses:
    """Subclasses enrich details with their own fields."""

    @pytest.mark.parametrize(
        "error, code, key, value",
        [
            (
                UnsupportedToolVersionError("v", declared_version="2.0.0", supported_version="1.0.0"),
                "UNSUPPORTED_TOOL_API_VERSION",
                "declared_version",
                "2.0.0",
            ),
            (
                DelegationNotPermittedError("d", delegatee_address="0xapp", tool_ipfs_cid="QmT"),
                "DELEGATION_NOT_PERMITTED",
                "delegatee_address",
                "0xapp",
            ),
            (
                UnsupportedPolicyError("p", policy_ipfs_cid="QmP", tool_ipfs_cid="QmT"),
                "UNSUPPORTED_POLICY",
                "policy_ipfs_cid",
                "QmP",
            ),
            (
                PolicyEvaluationError("e", denied_package_name="@p/x"),
                "POLICY_EVALUATION_DENIED",
                "denied_package_name",
                "@p/x",
            ),
            (
                SandboxError("s", ipfs_cid="QmP"),
                "SANDBOX_CALL_FAILED",
                "ipfs_cid",
                "QmP",
            ),
        ],
    )
    def test_codes_and_details(self, error, code, key, value) -> None:
        assert isinstance(error, VincentError)
        assert error.error_code == code
        assert error.details[key] == value

    def test_policy_evaluation_error_without_package(self) -> None:
        error = PolicyEvaluationError("denied")
        assert "denied_package_name" not in error.details
