"""Tests for the line-delimited stdio transport."""

import io
import json

import httpx
import pytest

from ontology_mcp.main import build_server
from ontology_mcp.stdio import StdioServer
from tests._helpers import StubBackend


def _lines(writer):
    return [json.loads(line) for line in writer.getvalue().splitlines() if line]


@pytest.fixture
def server(settings):
    backend = StubBackend(lambda request: httpx.Response(200, json={"response": "pong"}))
    return build_server(settings, transport=backend.transport)


class TestStdioServer:
    @pytest.mark.asyncio
    async def test_serve_answers_each_request(self, server):
        """
        Test the stdio loop end to end.

        Happy path: every request line gets one response and notifications get none.
        """
        requests = [
            {"jsonrpc": "2.0", "id": 1, "method": "initialize", "params": {}},
            {"jsonrpc": "2.0", "method": "notifications/initialized"},
            {"jsonrpc": "2.0", "id": 2, "method": "tools/call", "params": {"name": "mcp_ollama_run", "arguments": {"name": "m", "prompt": "ping"}}},
        ]
        reader = io.StringIO("\n".join(json.dumps(r) for r in requests) + "\n\n")
        writer = io.StringIO()

        await StdioServer(server, reader=reader, writer=writer).serve()

        responses = {r["id"]: r for r in _lines(writer)}
        assert set(responses) == {1, 2}
        assert responses[1]["result"]["serverInfo"]["name"] == "ontology-mcp"
        assert responses[2]["result"]["content"][0]["text"] == "pong"

    @pytest.mark.asyncio
    async def test_parse_error_line(self, server):
        """
        Error condition: a broken line gets a parse error with a null id.
        """
        writer = io.StringIO()
        stdio = StdioServer(server, reader=io.StringIO(""), writer=writer)

        await stdio.process_line("{broken")

        (response,) = _lines(writer)
        assert response["error"]["code"] == -32700
        assert response["id"] is None

    @pytest.mark.asyncio
    async def test_notification_writes_nothing(self, server):
        """Notifications produce no output."""
        writer = io.StringIO()
        stdio = StdioServer(server, reader=io.StringIO(""), writer=writer)

        await stdio.process_line(json.dumps({"jsonrpc": "2.0", "method": "notifications/cancelled"}))

        assert writer.getvalue() == ""

    @pytest.mark.asyncio
    async def test_batch_line(self, server):
        """A batch line is answered with a single array."""
        writer = io.StringIO()
        stdio = StdioServer(server, reader=io.StringIO(""), writer=writer)

        await stdio.process_line(json.dumps([{"jsonrpc": "2.0", "id": 1, "method": "ping"}, {"jsonrpc": "2.0", "id": 2, "method": "nope"}]))

        (batch,) = _lines(writer)
        assert batch[0] == {"jsonrpc": "2.0", "result": {}, "id": 1}
        assert batch[1]["error"]["code"] == -32601
