# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
JSON-RPC 2.0 Message Builders and Envelope Decoding for MCP Protocol

MCP gateways answer a POST either with a plain JSON body or with SSE framing
(`event: message\\ndata: {...}\\n\\n`). Some of them label SSE bodies as JSON,
so decoding sniffs the body as well as the declared content type.
"""

import json
import logging
import re
import time
from typing import Dict, Any, List, Optional

from gateway.mcp_exceptions import MCPProtocolError

logger = logging.getLogger(__name__)

SSE_DATA_LINE = re.compile(r"data:\s*(\{.*\})")

_last_request_id = 0


def next_request_id() -> int:
    """Millisecond timestamp, bumped when two requests land in the same millisecond"""
    global _last_request_id
    _last_request_id = max(_last_request_id + 1, int(time.time() * 1000))
    return _last_request_id


def build_initialize_request(request_id: int, protocol_version: str, client_info: Dict[str, Any]) -> Dict:
    """Build JSON-RPC initialize request"""
    return {
        "jsonrpc": "2.0",
        "id": request_id,
        "method": "initialize",
        "params": {
            "protocolVersion": protocol_version,
            "capabilities": {
                "tools": {}
            },
            "clientInfo": client_info
        }
    }


def build_initialized_notification() -> Dict:
    """Build JSON-RPC initialized notification (no id, no params)"""
    return {
        "jsonrpc": "2.0",
        "method": "notifications/initialized"
    }


def build_list_tools_request(request_id: int) -> Dict:
    """Build JSON-RPC tools/list request"""
    return {
        "jsonrpc": "2.0",
        "id": request_id,
        "method": "tools/list",
        "params": {}
    }


def build_call_tool_request(request_id: int, tool_name: str, arguments: Optional[Dict]) -> Dict:
    """Build JSON-RPC tools/call request"""
    return {
        "jsonrpc": "2.0",
        "id": request_id,
        "method": "tools/call",
        "params": {
            "name": tool_name,
            "arguments": arguments or {}
        }
    }


def is_sse_body(content_type: Optional[str], body: str) -> bool:
    """True when the body should be read as SSE framing"""
    return "text/event-stream" in (content_type or "").lower() or body.startswith("event:")


def decode_envelope(content_type: Optional[str], body: str) -> Dict[str, Any]:
    """
    Decode an MCP HTTP response body into a JSON-RPC envelope.

    Args:
        content_type: Value of the response Content-Type header (may be empty)
        body: Raw response text

    Returns:
        The envelope dict ({jsonrpc, id, result?, error?})

    Raises:
        MCPProtocolError: No parseable envelope in the body
    """
    if is_sse_body(content_type, body):
        envelope = _decode_sse(body)
    else:
        try:
            envelope = json.loads(body)
        except json.JSONDecodeError as e:
            raise MCPProtocolError(f"Invalid JSON-RPC body: {e}") from e

    if not isinstance(envelope, dict):
        raise MCPProtocolError(f"JSON-RPC envelope must be an object, got {type(envelope).__name__}")
    return envelope


def _decode_sse(body: str) -> Dict[str, Any]:
    """Pick the response envelope out of an SSE body"""
    envelopes: List[Any] = []
    for match in SSE_DATA_LINE.finditer(body):
        try:
            envelopes.append(json.loads(match.group(1)))
        except json.JSONDecodeError as e:
            logger.warning(f"Skipping unparseable SSE data line: {e}")

    if not envelopes:
        raise MCPProtocolError("malformed SSE body")

    # Servers may push notifications ahead of the actual response
    for envelope in envelopes:
        if isinstance(envelope, dict) and ("result" in envelope or "error" in envelope):
            return envelope
        if isinstance(envelope, dict) and "method" in envelope:
            logger.debug(f"Skipping server notification in SSE body: {envelope.get('method')}")
    return envelopes[0]


def error_message(error: Any) -> str:
    """Human-readable text of a JSON-RPC error member"""
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return json.dumps(error)


def flatten_text_content(result: Any) -> Optional[str]:
    """
    Join the text items of a tools/call result ({content: [{type: "text", text}]}).

    Returns None when the result is not in MCP content form.
    """
    if not isinstance(result, dict) or not isinstance(result.get("content"), list):
        return None
    return "\n".join(
        str(item.get("text", ""))
        for item in result["content"]
        if isinstance(item, dict) and item.get("type") == "text"
    )
