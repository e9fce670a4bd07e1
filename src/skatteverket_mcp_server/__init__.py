"""
Skatteverket MCP Server

A Model Context Protocol server that gives MCP hosts access to the
Skatteverket VAT declaration API: drafts, submissions and decisions.
"""

__version__ = "1.0.0"
__license__ = "MIT"

from .config.settings import Config, load_config
from .server import SkatteverketMCPServer

__all__ = [
    "SkatteverketMCPServer",
    "Config",
    "load_config",
    "__version__",
    "__license__",
]
