"""Configuration management."""

from .settings import (
    Config,
    ServerConfig,
    SkatteverketAPIConfig,
    ToolsConfig,
    create_default_config,
    load_config,
)

__all__ = [
    "Config",
    "ServerConfig",
    "SkatteverketAPIConfig",
    "ToolsConfig",
    "load_config",
    "create_default_config",
]
