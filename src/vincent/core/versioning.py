"""
vincent.core.versioning - Tool API Version Compatibility
==========================================================

Tools and policies are packaged against a specific tool API version. The
engine only runs packages whose MAJOR version matches its own; a mismatch
is always fatal and is raised immediately, never turned into a deny or a
failure value.
"""

from __future__ import annotations

from vincent.core.exceptions import UnsupportedToolVersionError

TOOL_API_VERSION = "1.0.0"


def _major(version: str) -> str:
    return str(version).strip().lstrip("v").split(".", 1)[0]


def assert_supported_tool_version(version: str) -> None:
    """Raise unless ``version`` shares the engine's major version.

    Raises:
        UnsupportedToolVersionError: On a missing or mismatched major version.
    """
    if not version or _major(version) != _major(TOOL_API_VERSION):
        raise UnsupportedToolVersionError(
            message=(
                f"Tool API version {version!r} is not supported; "
                f"this engine runs major version {_major(TOOL_API_VERSION)}.x"
            ),
            declared_version=str(version),
            supported_version=TOOL_API_VERSION,
        )
