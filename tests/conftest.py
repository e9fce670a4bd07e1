"""
Pytest configuration and fixtures for Skatteverket MCP Server tests.
"""

import json
from typing import Any, Dict, Iterable, List
from unittest.mock import AsyncMock

import pytest

from skatteverket_mcp_server.client.models import (
    HealthResponse,
    VatDecision,
    VatDecisionList,
    VatDraft,
    VatDraftList,
    VatSubmission,
    VatSubmissionList,
    VatValidationResponse,
)
from skatteverket_mcp_server.client.skatteverket_client import SkatteverketClient
from skatteverket_mcp_server.config.settings import (
    Config,
    ServerConfig,
    SkatteverketAPIConfig,
    ToolsConfig,
)


class ChunkReader:
    """Async byte reader that yields pre-set chunks, then end of stream."""

    def __init__(self, chunks: Iterable[bytes]):
        self._chunks: List[bytes] = list(chunks)
        self.reads = 0

    async def read(self, n: int) -> bytes:
        self.reads += 1
        if not self._chunks:
            return b""
        return self._chunks.pop(0)


class RecordingWriter:
    """Async byte writer that records every write and drain."""

    def __init__(self) -> None:
        self.writes: List[bytes] = []
        self.drains = 0

    def write(self, data: bytes) -> None:
        self.writes.append(data)

    async def drain(self) -> None:
        self.drains += 1

    @property
    def data(self) -> bytes:
        return b"".join(self.writes)

    def messages(self) -> List[Dict[str, Any]]:
        return [json.loads(line) for line in self.data.splitlines() if line.strip()]


def frames(*messages: Dict[str, Any]) -> bytes:
    """Encode messages as newline-delimited JSON input."""
    return b"".join(json.dumps(message).encode("utf-8") + b"\n" for message in messages)


INITIALIZE = {
    "jsonrpc": "2.0",
    "id": 1,
    "method": "initialize",
    "params": {
        "protocolVersion": "2024-11-05",
        "clientInfo": {"name": "test-client", "version": "1.0.0"},
        "capabilities": {},
    },
}


@pytest.fixture
def test_config():
    """Create a test configuration."""
    return Config(
        version="1.0.0-test",
        skatteverket=SkatteverketAPIConfig(
            base_url="http://localhost:8000",
            api_key="test-api-key",
            timeout_seconds=5,
            max_retries=1,
            retry_base_delay_seconds=0,
        ),
        server=ServerConfig(log_level="DEBUG", max_concurrent_requests=5),
        tools=ToolsConfig(),
    )


@pytest.fixture
def sample_draft():
    return VatDraft(
        redovisare="5567891234",
        period="2024-01",
        momsinkomst=100000,
        utgaendeMoms=25000,
        ingaendeMoms=10000,
        attBetala=15000,
        status="utkast",
    )


@pytest.fixture
def mock_client(sample_draft):
    """Create a mock Skatteverket client."""
    client = AsyncMock(spec=SkatteverketClient)
    client.connected = True

    client.ping.return_value = HealthResponse(status="ok", version="1.2.3")
    client.get_drafts.return_value = VatDraftList(drafts=[sample_draft], total=1)
    client.get_draft.return_value = sample_draft
    client.create_or_update_draft.return_value = sample_draft
    client.delete_draft.return_value = True
    client.validate_draft.return_value = VatValidationResponse(valid=True)
    client.lock_draft.return_value = True
    client.unlock_draft.return_value = True
    client.get_submissions.return_value = VatSubmissionList(
        submissions=[
            VatSubmission(
                redovisare="5567891234",
                period="2023-12",
                status="inlamnad",
                kvittonummer="KV-42",
                belopp=12000,
            )
        ],
        total=1,
    )
    client.get_submission.return_value = None
    client.get_decisions.return_value = VatDecisionList(
        decisions=[
            VatDecision(redovisare="5567891234", period="2023-11", status="beslutad", belopp=9000)
        ],
        total=1,
    )
    client.get_decision.return_value = None

    return client


@pytest.fixture
def make_reader():
    """Factory for chunked readers."""
    return ChunkReader


@pytest.fixture
def writer():
    return RecordingWriter()


@pytest.fixture
def encode_frames():
    return frames


@pytest.fixture
def initialize_request():
    return dict(INITIALIZE)
