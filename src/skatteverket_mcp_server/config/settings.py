"""
Configuration management for Skatteverket MCP Server.

Handles loading, validation, and management of server configuration
from files and environment variables.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _resolve_env_reference(value: Optional[str], fallback_env: str) -> Optional[str]:
    """Resolve ``${VAR}`` indirection; unset values fall back to ``fallback_env``."""
    if value is None:
        return os.getenv(fallback_env)
    if isinstance(value, str) and value.startswith("${") and value.endswith("}"):
        return os.getenv(value[2:-1])
    return value


class SkatteverketAPIConfig(BaseModel):
    """Configuration for the Skatteverket API connection."""

    base_url: str = Field(default="https://api.skatteverket.se", description="API base URL")
    api_key: Optional[str] = Field(
        default=None, validate_default=True, description="Bearer token for authentication"
    )
    timeout_seconds: float = Field(default=30.0, gt=0, description="Total request timeout")
    max_retries: int = Field(default=3, ge=1, description="Attempts per request")
    retry_base_delay_seconds: float = Field(
        default=0.5, ge=0, description="Initial delay between retries"
    )

    @field_validator("api_key", mode="before")
    @classmethod
    def resolve_api_key(cls, v: Optional[str]) -> Optional[str]:
        """Resolve API key from environment variable if needed."""
        return _resolve_env_reference(v, "SKATTEVERKET_API_KEY")

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class ServerConfig(BaseModel):
    """Configuration for MCP server behavior."""

    log_level: str = Field(default="INFO", description="Logging level")
    log_file: Optional[str] = Field(default=None, description="Additional log file")
    concurrent_dispatch: bool = Field(
        default=False, description="Dispatch requests concurrently instead of in order"
    )
    max_concurrent_requests: int = Field(default=10, ge=1, description="Maximum concurrent requests")
    read_chunk_size: int = Field(default=1024, ge=1, description="stdin read size in bytes")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        v_upper = v.upper()
        if v_upper not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level: {v}. Must be one of {VALID_LOG_LEVELS}")
        return v_upper


class ToolsConfig(BaseModel):
    """Which tools are exposed."""

    drafts_enabled: bool = Field(default=True, description="Expose draft tools")
    submissions_enabled: bool = Field(
        default=True, description="Expose submission, decision and health tools"
    )
    disabled_tools: List[str] = Field(default_factory=list, description="Tool names to hide")


class Config(BaseModel):
    """Main configuration object."""

    version: str = Field(default="1.0.0", description="Configuration version")
    skatteverket: SkatteverketAPIConfig = Field(default_factory=SkatteverketAPIConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    tools: ToolsConfig = Field(default_factory=ToolsConfig)

    model_config = ConfigDict(extra="forbid")


def load_config(config_path: Optional[Path] = None) -> Config:
    """
    Load configuration from file and environment variables.

    Args:
        config_path: Path to configuration file. If None, looks for
                    SKATTEVERKET_MCP_CONFIG_PATH environment variable.

    Returns:
        Loaded and validated configuration

    Raises:
        FileNotFoundError: If config file specified but not found
        ValueError: If configuration is invalid
    """
    if config_path is None:
        env_path = os.getenv("SKATTEVERKET_MCP_CONFIG_PATH")
        if env_path:
            config_path = Path(env_path)

    config_data: Dict[str, Any] = {}
    if config_path and config_path.exists():
        with open(config_path, "r") as f:
            config_data = json.load(f)
    elif config_path:
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    env_overrides: Dict[str, Any] = {}

    log_level = os.getenv("SKATTEVERKET_MCP_LOG_LEVEL")
    if log_level:
        env_overrides.setdefault("server", {})["log_level"] = log_level

    api_url = os.getenv("SKATTEVERKET_API_URL")
    if api_url:
        env_overrides.setdefault("skatteverket", {})["base_url"] = api_url

    if env_overrides:
        config_data = _deep_merge(config_data, env_overrides)

    return Config(**config_data)


def create_default_config(config_path: Path) -> None:
    """
    Create a default configuration file.

    Args:
        config_path: Path where to create the configuration file
    """
    default_config = {
        "version": "1.0.0",
        "skatteverket": {
            "base_url": "https://api.skatteverket.se",
            "api_key": "${SKATTEVERKET_API_KEY}",
            "timeout_seconds": 30,
            "max_retries": 3,
            "retry_base_delay_seconds": 0.5,
        },
        "server": {
            "log_level": "INFO",
            "log_file": None,
            "concurrent_dispatch": False,
            "max_concurrent_requests": 10,
            "read_chunk_size": 1024,
        },
        "tools": {
            "drafts_enabled": True,
            "submissions_enabled": True,
            "disabled_tools": [],
        },
    }

    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w") as f:
        json.dump(default_config, f, indent=2)


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Override dictionary

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result
