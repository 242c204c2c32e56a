# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Gateway Service - business logic behind the /api/mcp routes.

Handles:
- Sandbox creation + MCP handshake
- Tool listing and tool calls with session recovery
- Session teardown
"""

import logging
from typing import Any, Dict, List, Optional

from gateway.core.config import Config, get_config
from gateway.core.errors import SessionNotFoundError
from gateway.mcp_client import MCPProtocolClient
from gateway.mcp_exceptions import MCPError
from gateway.mcp_negotiator import MCPSessionNegotiator
from gateway.mcp_recovery import SessionRecovery
from gateway.mcp_session import MCPSession
from gateway.mcp_transport import MCPTransport
from gateway.models.mcp import CallOutcome, ToolDescriptor
from gateway.services.sandbox_provisioner import SandboxProvisioner
from gateway.session_registry import SessionStore, InMemorySessionStore

logger = logging.getLogger(__name__)


class GatewayService:
    """Creates MCP sessions on provisioned sandboxes and proxies tool operations"""

    def __init__(
        self,
        provisioner: SandboxProvisioner,
        store: Optional[SessionStore] = None,
        transport: Optional[MCPTransport] = None,
        config: Optional[Config] = None,
    ):
        self.config = config or get_config()
        self.provisioner = provisioner
        self.store = store or InMemorySessionStore()
        self.transport = transport or MCPTransport()
        self.negotiator = MCPSessionNegotiator(self.transport, self.config)
        self.client = MCPProtocolClient(self.transport, self.config)
        self.recovery = SessionRecovery(self.store, self.negotiator)

    async def close(self):
        """Clean up resources"""
        await self.transport.close()
        await self.provisioner.close()

    async def get_session(self, key: str) -> MCPSession:
        session = await self.store.get(key)
        if session is None:
            raise SessionNotFoundError(key)
        return session

    async def create_session(
        self,
        api_key: str,
        mcp_servers: Optional[Dict[str, Dict[str, Any]]] = None,
    ) -> Dict[str, str]:
        """
        Provision a sandbox and negotiate an MCP session on it.

        Args:
            api_key: Sandbox provider API key
            mcp_servers: MCP servers to enable (defaults from config)

        Returns:
            {sandboxId, mcpUrl, mcpToken}
        """
        servers = self.config.default_mcp_servers if mcp_servers is None else mcp_servers
        sandbox = await self.provisioner.provision(api_key, servers)

        try:
            session = await self.negotiator.negotiate(sandbox.mcp_url, sandbox.mcp_token, key=sandbox.sandbox_id)
        except MCPError:
            await self.provisioner.kill(sandbox.sandbox_id)
            raise
        await self.store.put(sandbox.sandbox_id, session)

        return {
            "sandboxId": sandbox.sandbox_id,
            "mcpUrl": sandbox.mcp_url,
            "mcpToken": sandbox.mcp_token,
        }

    async def get_sandbox_info(self, key: str) -> Dict[str, Any]:
        """Status of the sandbox behind a session"""
        session = await self.get_session(key)
        return {
            "sandboxId": key,
            "isRunning": await self.provisioner.is_running(key),
            "url": session.endpoint,
        }

    async def list_tools(self, key: str) -> Dict[str, Any]:
        """
        List tools of the session's MCP gateway.

        Raises:
            SessionNotFoundError: Unknown key
            MCPError: Listing failed (after one recovery attempt)
        """
        logger.info(f"Listing MCP tools for sandbox {key}")
        tools: List[ToolDescriptor] = await self.recovery.with_session_recovery(key, self.client.list_tools)
        return {
            "tools": [tool.to_dict() for tool in tools],
            "count": len(tools),
        }

    async def call_tool(self, key: str, tool_name: str, arguments: Optional[Dict[str, Any]] = None) -> CallOutcome:
        """
        Call a tool; remote failures come back as a failed CallOutcome.

        Raises:
            SessionNotFoundError: Unknown key
        """
        async def call(session: MCPSession) -> CallOutcome:
            return await self.client.call_tool(session, tool_name, arguments)

        try:
            return await self.recovery.with_session_recovery(key, call)
        except MCPError as e:
            logger.error(f"Tool {tool_name} failed on {key}: {e}")
            return CallOutcome.failure(str(e), is_recoverable=e.is_recoverable)

    async def teardown(self, key: str) -> Dict[str, str]:
        """Forget the session and kill its sandbox"""
        await self.get_session(key)
        await self.store.evict(key)
        self.recovery.forget(key)
        await self.provisioner.kill(key)
        return {"sandboxId": key, "status": "terminated"}
