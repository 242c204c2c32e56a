# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
MCP HTTP Transport
Pooled aiohttp session, MCP request headers and HTTP status classification
shared by the session negotiator and the protocol client.
"""

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Dict, Any, Optional

import aiohttp

from gateway.mcp_exceptions import MCPTransportError, MCPSessionLostError

logger = logging.getLogger(__name__)

SESSION_HEADER = "Mcp-Session-Id"
ACCEPT = "application/json, text/event-stream"

# Bodies like "Sandbox not found", "session abc123 not found"
SESSION_NOT_FOUND = re.compile(r"\b(session|sandbox)\b.{0,80}?\bnot found\b", re.IGNORECASE | re.DOTALL)


@dataclass(frozen=True)
class MCPHttpResponse:
    """Fully read HTTP response from an MCP endpoint"""
    status: int
    content_type: str
    session_id: str
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


def is_session_lost(status: int, body: str) -> bool:
    """True when the remote reports the session or sandbox as unknown"""
    if status == 404:
        return True
    return status >= 400 and bool(SESSION_NOT_FOUND.search(body or ""))


def raise_for_status(response: MCPHttpResponse, operation: str) -> None:
    """
    Raise the transport error matching a non-2xx response.

    Raises:
        MCPSessionLostError: Remote no longer knows the session/sandbox
        MCPTransportError: Any other non-2xx status
    """
    if response.ok:
        return
    message = f"MCP {operation} failed: {response.status} - {response.text}"
    if is_session_lost(response.status, response.text):
        raise MCPSessionLostError(message, status=response.status, body=response.text)
    raise MCPTransportError(message, status=response.status, body=response.text)


class MCPTransport:
    """JSON-RPC over HTTP POST with a persistent connection pool"""

    def __init__(self, http_session: Optional[aiohttp.ClientSession] = None):
        self._http_session = http_session
        self._owns_session = http_session is None

    async def _get_http_session(self) -> aiohttp.ClientSession:
        """Get or create persistent HTTP session"""
        if self._http_session is None or self._http_session.closed:
            self._http_session = aiohttp.ClientSession()
            self._owns_session = True
        return self._http_session

    async def close(self):
        """Clean up resources"""
        if self._owns_session and self._http_session and not self._http_session.closed:
            await self._http_session.close()

    def build_headers(self, token: str, session_id: Optional[str] = None) -> Dict[str, str]:
        """Build HTTP headers for MCP requests"""
        headers = {
            "Accept": ACCEPT,
            "Content-Type": "application/json",
            "Authorization": f"Bearer {token}",
        }
        if session_id:
            headers[SESSION_HEADER] = session_id
        return headers

    async def post(
        self,
        endpoint: str,
        payload: Dict[str, Any],
        token: str,
        session_id: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> MCPHttpResponse:
        """
        POST one JSON-RPC message and read the whole response.

        Cancelling the calling task aborts the request and releases the
        connection back to the pool.

        Raises:
            MCPTransportError: Connection failure or timeout
        """
        http_session = await self._get_http_session()
        method = payload.get("method", "?")

        try:
            async with http_session.post(
                endpoint,
                json=payload,
                headers=self.build_headers(token, session_id),
                timeout=aiohttp.ClientTimeout(total=timeout),
            ) as response:
                text = await response.text()
                logger.debug(f"{method} -> {response.status} ({len(text)} bytes)")
                return MCPHttpResponse(
                    status=response.status,
                    content_type=response.headers.get("Content-Type", ""),
                    session_id=response.headers.get(SESSION_HEADER, ""),
                    text=text,
                )
        except asyncio.TimeoutError as e:
            raise MCPTransportError(f"MCP {method} timed out after {timeout}s for {endpoint}") from e
        except aiohttp.ClientError as e:
            raise MCPTransportError(f"MCP {method} request to {endpoint} failed: {e}") from e
