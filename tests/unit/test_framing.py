"""
Unit tests for newline-delimited framing.
"""

import pytest

from skatteverket_mcp_server.protocol.framing import FramingError, LineFramer


class TestReadFrame:
    """Frame splitting over arbitrary chunk boundaries."""

    async def test_two_frames_in_one_chunk(self, make_reader, writer):
        framer = LineFramer(make_reader([b'{"a":1}\n{"b":2}\n']), writer)

        assert await framer.read_frame() == b'{"a":1}'
        assert await framer.read_frame() == b'{"b":2}'
        assert await framer.read_frame() is None

    async def test_frame_split_across_chunks(self, make_reader, writer):
        framer = LineFramer(make_reader([b'{"meth', b'od":"ping"', b'}\n']), writer)

        assert await framer.read_frame() == b'{"method":"ping"}'
        assert await framer.read_frame() is None

    async def test_whitespace_is_stripped_and_blank_lines_skipped(self, make_reader, writer):
        framer = LineFramer(make_reader([b"\n  \r\n", b'  {"x":1} \r\n', b"\n"]), writer)

        assert await framer.read_frame() == b'{"x":1}'
        assert await framer.read_frame() is None

    async def test_end_of_stream_without_pending_bytes(self, make_reader, writer):
        framer = LineFramer(make_reader([]), writer)

        assert await framer.read_frame() is None

    async def test_partial_frame_at_end_of_stream_is_discarded(self, make_reader, writer):
        framer = LineFramer(make_reader([b'{"a":1}\n{"incomplete"']), writer)

        assert await framer.read_frame() == b'{"a":1}'
        assert await framer.read_frame() is None

    async def test_multibyte_character_split_across_chunks(self, make_reader, writer):
        encoded = '{"text":"utgående"}\n'.encode("utf-8")
        split = encoded.index("å".encode("utf-8")) + 1
        framer = LineFramer(make_reader([encoded[:split], encoded[split:]]), writer)

        frame = await framer.read_frame()

        assert frame.decode("utf-8") == '{"text":"utgående"}'

    async def test_frames_iterator(self, make_reader, writer):
        framer = LineFramer(make_reader([b"1\n2\n3\n"]), writer)

        collected = [frame async for frame in framer.frames()]

        assert collected == [b"1", b"2", b"3"]


class TestWriteFrame:
    """Frame writing."""

    async def test_single_write_with_newline_then_drain(self, make_reader, writer):
        framer = LineFramer(make_reader([]), writer)

        await framer.write_frame(b'{"jsonrpc":"2.0"}')

        assert writer.writes == [b'{"jsonrpc":"2.0"}\n']
        assert writer.drains == 1

    async def test_payload_with_raw_newline_is_rejected(self, make_reader, writer):
        framer = LineFramer(make_reader([]), writer)

        with pytest.raises(FramingError):
            await framer.write_frame(b'{"a":\n1}')

        assert writer.writes == []

    async def test_written_frame_reads_back(self, make_reader, writer):
        out = LineFramer(make_reader([]), writer)
        await out.write_frame(b'{"id":7}')
        await out.write_frame(b'{"id":8}')

        back = LineFramer(make_reader([writer.data]), writer)

        assert await back.read_frame() == b'{"id":7}'
        assert await back.read_frame() == b'{"id":8}'
