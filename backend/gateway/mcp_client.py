# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
MCP Protocol Client
tools/list and tools/call against an established session.
"""

import logging
from typing import Any, Dict, List, Optional

from gateway.core.config import Config, get_config
from gateway.mcp_session import MCPSession
from gateway.mcp_exceptions import MCPProtocolError
from gateway.mcp_transport import MCPTransport, MCPHttpResponse, raise_for_status
from gateway.models.mcp import ToolDescriptor, CallOutcome
from gateway.mcp_jsonrpc import (
    build_list_tools_request,
    build_call_tool_request,
    decode_envelope,
    error_message,
    flatten_text_content,
    next_request_id,
)

logger = logging.getLogger(__name__)


class MCPProtocolClient:
    """Issues JSON-RPC requests on a session; reads the session, never mutates it"""

    def __init__(self, transport: MCPTransport, config: Optional[Config] = None):
        config = config or get_config()
        self.transport = transport
        self.timeout_list = config.timeout_list
        self.timeout_call = config.timeout_call

    async def _send(self, session: MCPSession, payload: Dict[str, Any], timeout: float) -> Dict[str, Any]:
        """POST on the session and return the decoded envelope"""
        response: MCPHttpResponse = await self.transport.post(
            session.endpoint,
            payload,
            session.token,
            session_id=session.session_id,
            timeout=timeout,
        )
        raise_for_status(response, payload["method"])
        return decode_envelope(response.content_type, response.text)

    async def list_tools(self, session: MCPSession) -> List[ToolDescriptor]:
        """
        List tools using JSON-RPC tools/list.

        Raises:
            MCPSessionLostError: Remote no longer knows the session
            MCPTransportError: Other HTTP failure
            MCPProtocolError: Malformed body or JSON-RPC error
        """
        envelope = await self._send(session, build_list_tools_request(next_request_id()), self.timeout_list)

        if envelope.get("error"):
            raise MCPProtocolError(f"MCP error: {error_message(envelope['error'])}")

        result = envelope.get("result") or {}
        raw_tools = result.get("tools") if isinstance(result, dict) else None
        if not raw_tools:
            logger.warning(f"No tools returned by {session.endpoint}")
            return []

        tools = [ToolDescriptor.from_dict(t) for t in raw_tools if isinstance(t, dict)]
        logger.info(f"Found {len(tools)} tools: {', '.join(t.name for t in tools)}")
        return tools

    async def call_tool(self, session: MCPSession, name: str, arguments: Optional[Dict[str, Any]] = None) -> CallOutcome:
        """
        Call tool using JSON-RPC tools/call.

        A JSON-RPC error or a result flagged isError comes back as a failed
        CallOutcome; only transport and envelope problems raise.

        Raises:
            MCPSessionLostError: Remote no longer knows the session
            MCPTransportError: Other HTTP failure
            MCPProtocolError: Malformed body
        """
        logger.info(f"Calling tool {name} on {session.key or session.endpoint}")
        request = build_call_tool_request(next_request_id(), name, arguments)
        envelope = await self._send(session, request, self.timeout_call)

        if envelope.get("error"):
            message = error_message(envelope["error"])
            logger.warning(f"Tool {name} returned JSON-RPC error: {message}")
            return CallOutcome.failure(message)

        result = envelope.get("result")
        if isinstance(result, dict) and result.get("isError"):
            message = flatten_text_content(result) or f"Tool {name} reported an error"
            logger.warning(f"Tool {name} reported an error: {message[:200]}")
            return CallOutcome.failure(message, payload=result)

        return CallOutcome.ok(result)
