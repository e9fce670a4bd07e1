"""
Main entry point for Skatteverket MCP Server.

This module provides the command-line interface for the MCP server,
handling startup, configuration, and integration with MCP hosts.
"""

import asyncio
import sys
from pathlib import Path
from typing import Optional

import click
import structlog

from .config.settings import create_default_config, load_config
from .server import SkatteverketMCPServer
from .utils.logging import setup_logging


@click.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    help="Set logging level",
)
@click.option(
    "--concurrent/--sequential",
    default=None,
    help="Dispatch requests concurrently or strictly in order (default from config)",
)
@click.version_option(package_name="skatteverket-mcp-server")
def serve(
    config: Optional[Path] = None,
    log_level: Optional[str] = None,
    concurrent: Optional[bool] = None,
) -> None:
    """
    Skatteverket MCP Server - VAT declarations over the Model Context Protocol.

    Speaks newline-delimited JSON-RPC on stdin/stdout; logs go to stderr.
    """
    logger = structlog.get_logger()
    try:
        config_data = load_config(config_path=config)

        if log_level:
            config_data.server.log_level = log_level.upper()
        if concurrent is not None:
            config_data.server.concurrent_dispatch = concurrent

        setup_logging(config_data.server.log_level, config_data.server.log_file)
        logger = structlog.get_logger()

        logger.info(
            "Starting Skatteverket MCP Server",
            version=config_data.version,
            config_file=str(config) if config else "default",
            log_level=config_data.server.log_level,
        )

        if not config_data.skatteverket.api_key:
            logger.warning("No API key configured, requests are sent unauthenticated")

        server = SkatteverketMCPServer(config_data)
        asyncio.run(server.run_stdio())

    except KeyboardInterrupt:
        logger.info("Server shutdown requested")
        sys.exit(0)
    except Exception as e:
        logger.error("Server startup failed", error=str(e), exc_info=True)
        sys.exit(1)


@click.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(path_type=Path),
    help="Path to save configuration file",
)
def init_config(config: Optional[Path] = None) -> None:
    """Initialize a configuration file with default settings."""
    config_path = config or Path("config.json")

    if config_path.exists():
        click.echo(f"Configuration file already exists: {config_path}")
        if not click.confirm("Overwrite?"):
            return

    try:
        create_default_config(config_path)
        click.echo(f"Created configuration file: {config_path}")
        click.echo("\nNext steps:")
        click.echo("1. Set environment variables:")
        click.echo("   export SKATTEVERKET_API_KEY='your-api-key'")
        click.echo("2. Register the server with your MCP host:")
        click.echo(f"   skatteverket-mcp-server serve --config {config_path}")
    except Exception as e:
        click.echo(f"Failed to create configuration file: {e}", err=True)
        sys.exit(1)


@click.group()
def cli() -> None:
    """Skatteverket MCP Server CLI."""
    pass


cli.add_command(serve, name="serve")
cli.add_command(init_config, name="init")


if __name__ == "__main__":
    cli()
