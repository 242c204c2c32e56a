# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""Unit tests for MCPProtocolClient"""

import pytest
from aiohttp import web

from gateway.mcp_exceptions import MCPProtocolError, MCPSessionLostError, MCPTransportError
from gateway.models.mcp import CallOutcome, ToolDescriptor


@pytest.fixture
async def session(mcp_server, negotiator):
    """Session negotiated against the mock server"""
    return await negotiator.negotiate(mcp_server.url, "tok", key="sbx-1")


def jsonrpc_handler(envelope_body):
    async def handler(payload, request):
        return web.json_response({"jsonrpc": "2.0", "id": payload["id"], **envelope_body})
    return handler


class TestListTools:
    """Test list_tools method"""

    @pytest.mark.parametrize("encoding", ["json", "sse"])
    async def test_lists_tools(self, mcp_server, client, session, encoding):
        """Should return descriptors for both encodings"""
        mcp_server.encoding = encoding

        tools = await client.list_tools(session)

        assert tools == [ToolDescriptor.from_dict(mcp_server.tools[0])]
        assert tools[0].name == "search"
        assert tools[0].input_schema["required"] == ["q"]

    async def test_request_shape(self, mcp_server, client, session):
        """Should send tools/list with the session header"""
        await client.list_tools(session)

        request = mcp_server.requests_for("tools/list")[0]
        assert request["payload"]["params"] == {}
        assert isinstance(request["payload"]["id"], int)
        assert request["headers"]["Mcp-Session-Id"] == "session-1"
        assert request["headers"]["Authorization"] == "Bearer tok"
        assert request["headers"]["Content-Type"].startswith("application/json")

    async def test_missing_tools_is_empty(self, mcp_server, client, session):
        """result.tools absent should give an empty list, not an error"""
        mcp_server.handlers["tools/list"] = jsonrpc_handler({"result": {}})

        assert await client.list_tools(session) == []

    async def test_jsonrpc_error_raises(self, mcp_server, client, session):
        mcp_server.handlers["tools/list"] = jsonrpc_handler({"error": {"code": -32000, "message": "gateway starting"}})

        with pytest.raises(MCPProtocolError, match="gateway starting"):
            await client.list_tools(session)

    async def test_unknown_session_raises_session_lost(self, mcp_server, client, session):
        mcp_server.drop_sessions()

        with pytest.raises(MCPSessionLostError):
            await client.list_tools(session)

    async def test_server_error_raises_transport_error(self, mcp_server, client, session):
        async def broken(payload, request):
            return web.Response(status=500, text="upstream exploded")

        mcp_server.handlers["tools/list"] = broken

        with pytest.raises(MCPTransportError, match="upstream exploded"):
            await client.list_tools(session)

    async def test_preserves_extra_descriptor_fields(self, mcp_server, client, session):
        mcp_server.tools = [{"name": "fetch", "inputSchema": {}, "annotations": {"readOnlyHint": True}}]

        tools = await client.list_tools(session)

        assert tools[0].to_dict() == {
            "name": "fetch",
            "description": "",
            "inputSchema": {},
            "annotations": {"readOnlyHint": True},
        }


class TestCallTool:
    """Test call_tool method"""

    @pytest.mark.parametrize("encoding", ["json", "sse", "sse-mislabelled"])
    async def test_success(self, mcp_server, client, session, encoding):
        mcp_server.encoding = encoding

        outcome = await client.call_tool(session, "search", {"q": "ai"})

        assert outcome == CallOutcome.ok({"content": [{"type": "text", "text": "ok"}]})
        request = mcp_server.requests_for("tools/call")[0]
        assert request["payload"]["params"] == {"name": "search", "arguments": {"q": "ai"}}

    async def test_jsonrpc_error_is_returned_not_raised(self, mcp_server, client, session):
        """error: {message: "X"} should become a failed outcome with message X"""
        mcp_server.handlers["tools/call"] = jsonrpc_handler({"error": {"code": -32602, "message": "X"}})

        outcome = await client.call_tool(session, "search", {})

        assert outcome.success is False
        assert outcome.message == "X"
        assert outcome.is_recoverable is False
        assert outcome.to_response() == {"result": {"error": "X"}, "isError": True}

    async def test_application_error_keeps_payload(self, mcp_server, client, session):
        """A result flagged isError is a failure that still carries the payload"""
        mcp_server.call_result = {"content": [{"type": "text", "text": "rate limited"}], "isError": True}

        outcome = await client.call_tool(session, "search", {"q": "ai"})

        assert outcome.success is False
        assert outcome.message == "rate limited"
        assert outcome.to_response() == {"result": mcp_server.call_result, "isError": True}

    async def test_unknown_session_raises_session_lost(self, mcp_server, client, session):
        mcp_server.drop_sessions()

        with pytest.raises(MCPSessionLostError):
            await client.call_tool(session, "search", {"q": "ai"})
