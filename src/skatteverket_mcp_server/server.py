"""
Main Skatteverket MCP Server implementation.

Wires the protocol engine (framer, transport, dispatcher, session) to the
Skatteverket collaborators (tools, resources, prompts) and runs it over
stdio or any pair of async streams.
"""

import asyncio
import signal
from typing import Any, Optional

import structlog

from . import __version__
from .client.skatteverket_client import SkatteverketClient
from .config.settings import Config
from .prompts.vat_prompts import VatPrompts
from .protocol.capabilities import CapabilityNegotiator
from .protocol.framing import LineFramer
from .protocol.handlers import MCPDispatcher
from .protocol.schemas import ServerInfo
from .protocol.session import ServerSession
from .protocol.transport import StdioTransport, open_stdio_framer
from .resources.vat_resources import VatResources
from .tools.registry import ToolRegistry, build_tool_registry

logger = structlog.get_logger(__name__)


class SkatteverketMCPServer:
    """
    Main MCP server for the Skatteverket VAT API.

    Owns the one client session, the tool table and the collaborators.
    A server instance serves a single connection.
    """

    def __init__(self, config: Optional[Config] = None, client: Optional[SkatteverketClient] = None):
        """
        Initialize the MCP server.

        Args:
            config: Server configuration
            client: Pre-built API client (tests); built from config otherwise
        """
        self.config = config or Config()
        self._running = False

        self.client = client or SkatteverketClient(self.config.skatteverket)
        self.session = ServerSession()
        self.negotiator = CapabilityNegotiator(ServerInfo(version=__version__))
        self.tools: ToolRegistry = build_tool_registry(self.client, self.config.tools)
        self.resources = VatResources(self.client)
        self.prompts = VatPrompts()
        self.dispatcher = MCPDispatcher(
            session=self.session,
            negotiator=self.negotiator,
            tools=self.tools,
            resources=self.resources,
            prompts=self.prompts,
        )
        self.transport: Optional[StdioTransport] = None

    async def start(self) -> None:
        """Open the API session."""
        if self._running:
            return

        logger.info("Starting Skatteverket MCP Server", version=__version__)
        await self.client.connect()
        self._running = True
        logger.info(
            "Server started successfully",
            tools_registered=len(self.tools),
            base_url=self.config.skatteverket.base_url,
            concurrent_dispatch=self.config.server.concurrent_dispatch,
        )

    async def stop(self) -> None:
        """Stop the transport and close the API session."""
        if not self._running:
            return

        logger.info("Stopping Skatteverket MCP Server")
        self._running = False

        if self.transport:
            await self.transport.stop()
        await self.client.disconnect()

        logger.info("Server stopped")

    def create_transport(self, framer: LineFramer) -> StdioTransport:
        transport = StdioTransport(
            framer,
            concurrent_dispatch=self.config.server.concurrent_dispatch,
            max_concurrent_requests=self.config.server.max_concurrent_requests,
        )
        transport.set_message_handler(self.dispatcher.dispatch)
        return transport

    async def run(self, reader: Any, writer: Any) -> None:
        """
        Serve one connection until end of stream.

        Args:
            reader: Object with ``async read(n) -> bytes``
            writer: Object with ``write(bytes)`` and ``async drain()``
        """
        framer = LineFramer(reader, writer, chunk_size=self.config.server.read_chunk_size)
        await self._serve(framer)

    async def run_stdio(self) -> None:
        """
        Run the server over the process's stdin/stdout.

        SIGINT and SIGTERM cancel the run; cancellation is a clean exit.
        """
        loop = asyncio.get_running_loop()
        main_task = asyncio.current_task()
        installed = self._install_signal_handlers(loop, main_task)

        try:
            framer = await open_stdio_framer(chunk_size=self.config.server.read_chunk_size)
            await self._serve(framer)
        except asyncio.CancelledError:
            logger.info("Server operation cancelled")
        finally:
            for signum in installed:
                loop.remove_signal_handler(signum)

    async def _serve(self, framer: LineFramer) -> None:
        self.transport = self.create_transport(framer)
        try:
            await self.start()
            await self.transport.start()
        except Exception as e:
            logger.error("Server error", error=str(e), exc_info=True)
            raise
        finally:
            await self.stop()

    def _install_signal_handlers(self, loop: asyncio.AbstractEventLoop, task: Any) -> list:
        """Cancel ``task`` on SIGINT/SIGTERM; returns the signals handled."""
        installed = []
        for signum in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(signum, self._on_signal, signum, task)
            except (NotImplementedError, RuntimeError):
                # Windows event loops have no signal handler support
                continue
            installed.append(signum)
        return installed

    def _on_signal(self, signum: int, task: Any) -> None:
        logger.info("Received signal, initiating shutdown", signal=signal.Signals(signum).name)
        if task is not None and not task.done():
            task.cancel()

    @property
    def running(self) -> bool:
        """Check if server is running."""
        return self._running
