"""
Tests for vincent.core.versioning
===================================
"""

import pytest

from vincent.core.exceptions import UnsupportedToolVersionError, VincentError
from vincent.core.versioning import TOOL_API_VERSION, assert_supported_tool_version


class TestAssertSupportedToolVersion:
    """Only the major version has to match."""

    @pytest.mark.parametrize("version", [TOOL_API_VERSION, "1.0.0", "1.4.2", "v1.9.0", "1"])
    def test_same_major_is_supported(self, version: str) -> None:
        assert_supported_tool_version(version)

    @pytest.mark.parametrize("version", ["2.0.0", "0.9.1", "", "abc"])
    def test_other_major_raises(self, version: str) -> None:
        with pytest.raises(UnsupportedToolVersionError) as exc_info:
            assert_supported_tool_version(version)
        assert exc_info.value.details["supported_version"] == TOOL_API_VERSION

    def test_error_is_fatal_tier(self) -> None:
        with pytest.raises(VincentError):
            assert_supported_tool_version("3.0.0")
