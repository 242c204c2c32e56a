# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
MCP Session Negotiator
Runs the initialize / notifications/initialized handshake and yields the
session identifier every later request must carry.
"""

import asyncio
import logging
from datetime import datetime
from typing import Dict, Optional

from gateway.core.config import Config, get_config
from gateway.core.logging import mask_token
from gateway.mcp_session import MCPSession
from gateway.mcp_exceptions import MCPProtocolError
from gateway.mcp_transport import MCPTransport, raise_for_status
from gateway.mcp_jsonrpc import (
    build_initialize_request,
    build_initialized_notification,
    decode_envelope,
    error_message,
    next_request_id,
)

logger = logging.getLogger(__name__)


class MCPSessionNegotiator:
    """Performs the MCP initialization handshake. Never retries."""

    def __init__(self, transport: MCPTransport, config: Optional[Config] = None):
        config = config or get_config()
        self.transport = transport
        self.protocol_version = config.mcp_protocol_version
        self.client_info: Dict[str, str] = config.get_client_info()
        self.timeout = config.timeout_init
        self.initialized_delay = config.initialized_delay

    async def negotiate(self, endpoint: str, token: str, key: str = "") -> MCPSession:
        """
        Perform the 2-step MCP handshake against endpoint.

        Args:
            endpoint: MCP gateway URL
            token: Bearer token for the endpoint
            key: Registry key the session will be stored under

        Returns:
            Established MCPSession

        Raises:
            MCPTransportError: Non-2xx status or connection failure
            MCPProtocolError: Initialize response has no usable JSON-RPC envelope
        """
        logger.info(f"Initializing MCP session for {endpoint} (token {mask_token(token)})")

        # Step 1: initialize
        init_request = build_initialize_request(next_request_id(), self.protocol_version, self.client_info)
        response = await self.transport.post(endpoint, init_request, token, timeout=self.timeout)
        raise_for_status(response, "initialize")

        session_id = response.session_id
        if not session_id:
            logger.warning(f"No Mcp-Session-Id header from {endpoint}; continuing without one")

        envelope = decode_envelope(response.content_type, response.text)
        if "error" in envelope:
            raise MCPProtocolError(f"Initialize error: {error_message(envelope['error'])}")

        init_result = envelope.get("result") or {}
        if not isinstance(init_result, dict):
            raise MCPProtocolError(f"Initialize result must be an object, got {type(init_result).__name__}")

        # Step 2: initialized notification
        notification = build_initialized_notification()
        notify_response = await self.transport.post(
            endpoint, notification, token, session_id=session_id, timeout=self.timeout
        )
        if not notify_response.ok:
            logger.warning(f"Initialized notification returned {notify_response.status}")

        await asyncio.sleep(self.initialized_delay)

        session = MCPSession(
            key=key,
            endpoint=endpoint,
            token=token,
            session_id=session_id,
            established=True,
            protocol_version=init_result.get("protocolVersion") or self.protocol_version,
            server_capabilities=init_result.get("capabilities") or {},
            server_info=init_result.get("serverInfo") or {},
            initialized_at=datetime.now(),
        )
        logger.info(f"MCP session initialized for {endpoint} with ID {session_id!r}")
        return session
