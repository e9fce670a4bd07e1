"""
End-to-end tests of the assembled server over in-memory streams, plus
the command line.
"""

import json

import pytest
from click.testing import CliRunner

from skatteverket_mcp_server import __version__
from skatteverket_mcp_server.main import cli
from skatteverket_mcp_server.server import SkatteverketMCPServer


@pytest.fixture
def server(test_config, mock_client):
    return SkatteverketMCPServer(test_config, client=mock_client)


class TestSkatteverketMCPServer:
    """Whole-pipeline scenarios: bytes in, bytes out."""

    async def test_handshake_list_and_missing_resource(
        self, server, mock_client, make_reader, writer, encode_frames, initialize_request
    ):
        mock_client.get_draft.return_value = None
        data = encode_frames(
            initialize_request,
            {"jsonrpc": "2.0", "method": "initialized"},
            {"jsonrpc": "2.0", "id": 2, "method": "tools/list"},
            {
                "jsonrpc": "2.0",
                "id": 3,
                "method": "resources/read",
                "params": {"uri": "vat://drafts/000/2024-01"},
            },
            {
                "jsonrpc": "2.0",
                "id": "4",
                "method": "tools/call",
                "params": {"name": "get_vat_draft", "arguments": {"redovisare": "000", "period": "2024-01"}},
            },
        )

        await server.run(make_reader([data]), writer)

        init, tools, resource, call = writer.messages()

        assert init["id"] == 1
        assert init["result"]["serverInfo"] == {
            "name": "Skatteverket MCP Server",
            "version": __version__,
        }

        assert tools["id"] == 2
        assert "get_vat_drafts" in [tool["name"] for tool in tools["result"]["tools"]]

        assert resource["id"] == 3
        assert resource["error"]["code"] == -32002

        assert call["id"] == "4"
        assert call["result"] == {
            "content": [{"type": "text", "text": "No draft found for 000/2024-01"}],
            "isError": False,
        }

        mock_client.connect.assert_awaited_once()
        mock_client.disconnect.assert_awaited_once()
        assert not server.running

    async def test_gate_and_unknown_method(self, server, mock_client, make_reader, writer, encode_frames):
        data = encode_frames(
            {"jsonrpc": "2.0", "id": 1, "method": "tools/call", "params": {"name": "health_check"}},
            {"jsonrpc": "2.0", "id": 2, "method": "no/such/method"},
            {"jsonrpc": "2.0", "id": 3, "method": "ping"},
        )

        await server.run(make_reader([data]), writer)

        gated, unknown, ping = writer.messages()
        assert gated["error"] == {"code": -32000, "message": "Server not initialized"}
        assert unknown["error"]["code"] == -32601
        assert ping == {"jsonrpc": "2.0", "id": 3, "result": {}}
        mock_client.ping.assert_not_called()

    async def test_prompt_flow(self, server, make_reader, writer, encode_frames, initialize_request):
        data = encode_frames(
            initialize_request,
            {"jsonrpc": "2.0", "id": 2, "method": "prompts/get", "params": {"name": "check_status"}},
            {
                "jsonrpc": "2.0",
                "id": 3,
                "method": "prompts/get",
                "params": {"name": "review_draft", "arguments": {"redovisare": "X"}},
            },
            {"jsonrpc": "2.0", "id": 4, "method": "prompts/get", "params": {"name": "nope"}},
        )

        await server.run(make_reader([data]), writer)

        _, status, missing_argument, unknown = writer.messages()
        assert "all reporters" in status["result"]["messages"][0]["content"]["text"]
        assert missing_argument["error"]["code"] == -32602
        assert unknown["error"]["code"] == -32003

    async def test_tool_business_failure_is_success_response(
        self, server, mock_client, make_reader, writer, encode_frames, initialize_request
    ):
        from skatteverket_mcp_server.client.skatteverket_client import SkatteverketClientError

        mock_client.ping.side_effect = SkatteverketClientError("Failed to connect to Skatteverket API")
        data = encode_frames(
            initialize_request,
            {"jsonrpc": "2.0", "id": 2, "method": "tools/call", "params": {"name": "health_check"}},
        )

        await server.run(make_reader([data]), writer)

        _, call = writer.messages()
        assert "error" not in call
        assert call["result"]["isError"] is True
        assert call["result"]["content"][0]["text"] == "Error: Failed to connect to Skatteverket API"

    async def test_fractional_id_is_answered(self, server, make_reader, writer, encode_frames):
        await server.run(
            make_reader([encode_frames({"jsonrpc": "2.0", "id": 7.5, "method": "ping"})]), writer
        )

        assert writer.messages() == [{"jsonrpc": "2.0", "id": 7.5, "result": {}}]

    async def test_concurrent_dispatch_answers_every_request(
        self, test_config, mock_client, make_reader, writer, encode_frames, initialize_request
    ):
        test_config.server.concurrent_dispatch = True
        server = SkatteverketMCPServer(test_config, client=mock_client)
        data = encode_frames(
            initialize_request,
            *(
                {"jsonrpc": "2.0", "id": request_id, "method": "ping"}
                for request_id in range(2, 12)
            ),
        )

        await server.run(make_reader([data]), writer)

        assert sorted(message["id"] for message in writer.messages()) == list(range(1, 12))


class TestCli:
    def test_init_writes_config(self, tmp_path):
        path = tmp_path / "config.json"

        result = CliRunner().invoke(cli, ["init", "--config", str(path)])

        assert result.exit_code == 0
        assert f"Created configuration file: {path}" in result.output
        assert json.loads(path.read_text())["skatteverket"]["api_key"] == "${SKATTEVERKET_API_KEY}"

    def test_init_keeps_existing_file_when_declined(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{}")

        result = CliRunner().invoke(cli, ["init", "--config", str(path)], input="n\n")

        assert result.exit_code == 0
        assert path.read_text() == "{}"

    def test_serve_rejects_invalid_config(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"server": {"log_level": "LOUD"}}))

        result = CliRunner().invoke(cli, ["serve", "--config", str(path)])

        assert result.exit_code == 1
