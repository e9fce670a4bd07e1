"""
Transport layer for MCP protocol communication.

Implements the stdio transport: the read loop that turns frames into
envelopes, hands them to the dispatcher and writes the responses back
under a single writer lock.
"""

import asyncio
import sys
from typing import Any, Awaitable, Callable, Dict, Optional, Set, Union

import structlog

from .codec import decode_frame, encode_message
from .framing import LineFramer
from .schemas import (
    MCPError,
    MCPInternalError,
    MCPMessage,
    MCPNotification,
    MCPRequest,
    MCPResponse,
    MCPValidationError,
    RequestIdValue,
)

logger = structlog.get_logger(__name__)

MessageHandler = Callable[[Union[MCPRequest, MCPNotification]], Awaitable[MCPResponse]]


class TransportError(Exception):
    """Base exception for transport errors."""

    pass


class StdioTransport:
    """
    Stdio transport for MCP communication.

    Reads newline-delimited JSON-RPC frames, dispatches them and writes
    responses. By default each frame is fully handled before the next one
    is read; with ``concurrent_dispatch`` every frame gets its own task,
    bounded by ``max_concurrent_requests``. Writes always go through one
    lock so frames never interleave on the output stream.
    """

    def __init__(
        self,
        framer: LineFramer,
        concurrent_dispatch: bool = False,
        max_concurrent_requests: int = 10,
    ):
        self._framer = framer
        self._concurrent_dispatch = concurrent_dispatch
        self._request_slots = asyncio.Semaphore(max_concurrent_requests)
        self._write_lock = asyncio.Lock()
        self._running = False
        self._message_handler: Optional[MessageHandler] = None
        self._in_flight: Set["asyncio.Task[None]"] = set()

    def set_message_handler(self, handler: MessageHandler) -> None:
        """Set the message handler for incoming requests and notifications."""
        self._message_handler = handler

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """
        Run the read loop until end of stream or cancellation.

        End of stream returns normally once in-flight work is answered.
        Cancellation and read failures abandon in-flight work and re-raise.
        """
        if self._running:
            raise TransportError("Transport is already running")

        if not self._message_handler:
            raise TransportError("Message handler not set")

        self._running = True
        logger.info("Starting stdio transport", concurrent=self._concurrent_dispatch)

        try:
            await self._run_transport_loop()
            if self._in_flight:
                await asyncio.gather(*self._in_flight, return_exceptions=True)
        except asyncio.CancelledError:
            logger.info("Transport loop cancelled")
            raise
        except Exception as e:
            logger.error("Transport loop error", error=str(e), exc_info=True)
            raise
        finally:
            await self._abandon_in_flight()
            self._running = False
            logger.info("Stdio transport stopped")

    async def _abandon_in_flight(self) -> None:
        """Cancel dispatch tasks still running and wait until they are gone."""
        pending = [task for task in self._in_flight if not task.done()]
        if not pending:
            return

        logger.warning("Abandoning in-flight requests", count=len(pending))
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)

    async def stop(self) -> None:
        """Stop reading after the current frame."""
        self._running = False

    async def _run_transport_loop(self) -> None:
        """Main transport loop for processing input frames."""
        while self._running:
            frame = await self._framer.read_frame()
            if frame is None:
                logger.info("End of input stream, shutting down")
                break

            if self._concurrent_dispatch:
                await self._request_slots.acquire()
                task = asyncio.create_task(self._process_frame_in_slot(frame))
                self._in_flight.add(task)
                task.add_done_callback(self._in_flight.discard)
            else:
                await self._process_frame(frame)

    async def _process_frame_in_slot(self, frame: bytes) -> None:
        try:
            await self._process_frame(frame)
        except Exception as e:
            logger.error("Error processing frame", error=str(e), exc_info=True)
        finally:
            self._request_slots.release()

    async def _process_frame(self, frame: bytes) -> None:
        """
        Decode, dispatch and answer a single frame.

        Args:
            frame: One JSON text frame
        """
        try:
            envelope = decode_frame(frame)
        except MCPValidationError as e:
            if e.request_id is None:
                logger.warning("Dropping notification with invalid params", error=e.message)
                return
            await self.send_error(e.request_id, e)
            return
        except MCPError as e:
            logger.error("Invalid message received", error=e.message, frame=frame[:100])
            await self.send_error(e.request_id, e)
            return

        if isinstance(envelope, MCPResponse):
            logger.warning("Received response in server mode", response_id=envelope.id)
            return

        response = await self._safe_call_handler(envelope)

        if isinstance(envelope, MCPRequest):
            await self.send_response(response)
        elif response.is_error:
            logger.warning(
                "Notification failed",
                method=envelope.method,
                error_code=response.error.code,
                error_message=response.error.message,
            )

    async def _safe_call_handler(
        self, envelope: Union[MCPRequest, MCPNotification]
    ) -> MCPResponse:
        """Call the message handler, turning any escape into InternalError."""
        request_id = envelope.id if isinstance(envelope, MCPRequest) else None
        try:
            return await self._message_handler(envelope)
        except Exception as e:
            logger.error("Handler error", error=str(e), exc_info=True)
            return MCPResponse.failure(request_id, MCPInternalError(str(e)))

    async def send_message(self, message: Union[MCPMessage, Dict[str, Any]]) -> None:
        """
        Write one message as one frame.

        Args:
            message: Message to send
        """
        payload = encode_message(message)
        async with self._write_lock:
            await self._framer.write_frame(payload)

        logger.debug("Sent message", message_type=type(message).__name__)

    async def send_response(self, response: MCPResponse) -> None:
        """Send a response message."""
        logger.debug(
            "Sending MCP response",
            response_id=response.id,
            has_error=response.is_error,
        )
        await self.send_message(response)

    async def send_error(self, request_id: Optional[RequestIdValue], error: MCPError) -> None:
        """Send an error response."""
        await self.send_response(MCPResponse.failure(request_id, error))

    async def send_notification(self, method: str, params: Optional[Dict[str, Any]] = None) -> None:
        """Send a notification message."""
        await self.send_message(MCPNotification(method=method, params=params))


class _StdinReader:
    """Byte reader over a non-pipe stdin (regular file redirect)."""

    def __init__(self, stream: Any):
        self._stream = stream

    async def read(self, n: int) -> bytes:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._stream.read1, n)


class _StdoutWriter:
    """Byte writer over stdout; each drain is one write plus flush."""

    def __init__(self, stream: Any):
        self._stream = stream
        self._pending = bytearray()

    def write(self, data: bytes) -> None:
        self._pending.extend(data)

    async def drain(self) -> None:
        if not self._pending:
            return
        data = bytes(self._pending)
        self._pending.clear()
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._write_sync, data)

    def _write_sync(self, data: bytes) -> None:
        self._stream.write(data)
        self._stream.flush()


async def open_stdio_framer(chunk_size: int = 1024) -> LineFramer:
    """
    Build a framer over the process's stdin/stdout.

    stdin is attached as an asyncio pipe when possible so a pending read
    can be cancelled on shutdown.
    """
    loop = asyncio.get_running_loop()
    try:
        reader = asyncio.StreamReader()
        protocol = asyncio.StreamReaderProtocol(reader)
        await loop.connect_read_pipe(lambda: protocol, sys.stdin)
    except (ValueError, OSError) as e:
        logger.debug("stdin is not a pipe, reading via executor", reason=str(e))
        reader = _StdinReader(sys.stdin.buffer)

    return LineFramer(reader, _StdoutWriter(sys.stdout.buffer), chunk_size=chunk_size)
