"""
Newline-delimited framing for the MCP byte stream.

Splits the raw input stream into one-JSON-value-per-line frames and
writes outgoing frames as a single buffer terminated by ``\\n``.
"""

from typing import Any, AsyncIterator, Optional

import structlog

logger = structlog.get_logger(__name__)

FRAME_DELIMITER = b"\n"


class FramingError(Exception):
    """Raised when an outgoing payload cannot be framed."""

    pass


class LineFramer:
    """
    Frame reader/writer over an async byte stream.

    ``reader`` needs an ``async read(n) -> bytes`` returning ``b""`` at end
    of stream (``asyncio.StreamReader`` qualifies). ``writer`` needs
    ``write(bytes)`` and ``async drain()`` (``asyncio.StreamWriter``
    qualifies). No maximum frame size is enforced.
    """

    def __init__(self, reader: Any, writer: Any, chunk_size: int = 1024):
        self._reader = reader
        self._writer = writer
        self._chunk_size = chunk_size
        self._buffer = bytearray()

    async def read_frame(self) -> Optional[bytes]:
        """
        Read the next frame.

        Returns:
            Frame bytes with surrounding whitespace stripped, or None at
            end of stream.
        """
        while True:
            newline = self._buffer.find(FRAME_DELIMITER)
            if newline >= 0:
                frame = bytes(self._buffer[:newline]).strip()
                del self._buffer[: newline + 1]
                if frame:
                    return frame
                continue

            chunk = await self._reader.read(self._chunk_size)
            if not chunk:
                if self._buffer.strip():
                    logger.warning(
                        "Discarding unterminated frame at end of stream",
                        pending_bytes=len(self._buffer),
                    )
                self._buffer.clear()
                return None

            self._buffer.extend(chunk)

    async def frames(self) -> AsyncIterator[bytes]:
        """Iterate over frames until end of stream."""
        while True:
            frame = await self.read_frame()
            if frame is None:
                return
            yield frame

    async def write_frame(self, payload: bytes) -> None:
        """
        Write one frame.

        Args:
            payload: Serialized JSON text without a trailing newline

        Raises:
            FramingError: If the payload contains a raw newline
        """
        if FRAME_DELIMITER in payload:
            raise FramingError("Frame payload must not contain a raw newline")

        self._writer.write(payload + FRAME_DELIMITER)
        await self._writer.drain()
