"""
vincent.core.config - Configuration Management
================================================

Configuration can be loaded from multiple sources with the following
priority (highest first):

    1. Explicit constructor arguments (``load_config`` passes YAML values
       from vincent.yaml this way)
    2. Environment variables (prefixed with VINCENT_)
    3. Default values defined in the models below

Configuration flows DOWN through the system. ``VincentConfig`` is created
once and handed to the pieces that need it:

    VincentConfig
        ├── SandboxConfig     → create_sandbox() → ToolHandler
        └── log_level/log_json → configure_logging()

Environment Variables:
    VINCENT_ENVIRONMENT=prod
    VINCENT_LOG_LEVEL=DEBUG
    VINCENT_LOG_JSON=true
    VINCENT_SANDBOX__BACKEND=mock
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Optional

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

from vincent.core.enums import SandboxBackend
from vincent.core.exceptions import ConfigurationError


# =============================================================================
# Sandbox Configuration
# =============================================================================
# Selects where policy evaluations run. In production the sandbox is an
# external host; inside this package "local" runs registered policies
# in-process and "mock" replays queued responses.
# =============================================================================
class SandboxConfig(BaseModel):
    """Configuration for the policy sandbox backend.

    Attributes:
        backend: Which ``PolicySandbox`` implementation ``create_sandbox``
            builds.
    """

    backend: SandboxBackend = Field(
        default=SandboxBackend.LOCAL,
        description="Policy sandbox backend: 'local' or 'mock'",
    )


# =============================================================================
# Main Configuration
# =============================================================================
class VincentConfig(BaseSettings):
    """Top-level configuration for the Vincent engine.

    Attributes:
        environment: Deployment environment.
        log_level: Python logging level used by ``configure_logging``.
        log_json: Render structured logs as JSON instead of console output.
        sandbox: Policy sandbox configuration (see SandboxConfig).
    """

    environment: Literal["dev", "staging", "prod"] = Field(
        default="dev",
        description="Deployment environment",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    log_json: bool = Field(
        default=False,
        description="Render logs as JSON lines (recommended for prod)",
    )
    sandbox: SandboxConfig = Field(
        default_factory=SandboxConfig,
        description="Policy sandbox configuration",
    )

    # env_prefix:           all env vars start with "VINCENT_"
    # env_nested_delimiter: VINCENT_SANDBOX__BACKEND → config.sandbox.backend
    model_config = {
        "env_prefix": "VINCENT_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
    }


# =============================================================================
# Configuration Loader
# =============================================================================
def load_config(path: Optional[str] = None) -> VincentConfig:
    """Load Vincent configuration from a YAML file and/or environment variables.

    Args:
        path: Path to a YAML configuration file. If None, looks for
            ``vincent.yaml`` in the current directory, falling back to pure
            defaults + environment variables when that does not exist.

    Returns:
        A fully validated VincentConfig instance.

    Raises:
        FileNotFoundError: If an explicit path is provided but doesn't exist.
        ConfigurationError: If the YAML file cannot be parsed or is not a
            mapping.
    """
    if path is None:
        default_path = Path("vincent.yaml")
        if default_path.exists():
            path = str(default_path)

    yaml_data: dict[str, Any] = {}
    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(
                f"Configuration file not found: {path}. "
                f"Create a vincent.yaml or use environment variables."
            )

        with open(config_path) as f:
            try:
                raw_data = yaml.safe_load(f)
            except yaml.YAMLError as exc:
                raise ConfigurationError(
                    message=f"Invalid YAML in configuration file: {path}",
                    error_code="INVALID_CONFIG_FILE",
                    details={"path": str(path), "error": str(exc)},
                ) from exc

        if raw_data is None:
            raw_data = {}
        if not isinstance(raw_data, dict):
            raise ConfigurationError(
                message=f"Configuration file must contain a mapping: {path}",
                error_code="INVALID_CONFIG_FILE",
                details={"path": str(path), "type": type(raw_data).__name__},
            )
        yaml_data = raw_data

    # YAML values are passed as constructor args, so they take precedence
    # over environment variables loaded by BaseSettings.
    return VincentConfig(**yaml_data)


def get_default_config() -> VincentConfig:
    """Create a VincentConfig with all defaults (overridden by any set env vars)."""
    return VincentConfig()
