# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Shared fixtures: mock MCP endpoint, transport, negotiator, client, registry.
"""

import pytest
from aiohttp.test_utils import TestServer

from gateway.mcp_client import MCPProtocolClient
from gateway.mcp_negotiator import MCPSessionNegotiator
from gateway.mcp_transport import MCPTransport
from gateway.session_registry import InMemorySessionStore

from tests.mock_mcp import MockMCPServer, make_test_config


@pytest.fixture
def config():
    """Config with the post-handshake delay disabled"""
    return make_test_config()


@pytest.fixture
async def mcp_server():
    """Running mock MCP gateway; url attribute points at its endpoint"""
    server = MockMCPServer()
    test_server = TestServer(server.make_app())
    await test_server.start_server()
    server.url = str(test_server.make_url("/mcp"))
    yield server
    await test_server.close()


@pytest.fixture
async def transport():
    transport = MCPTransport()
    yield transport
    await transport.close()


@pytest.fixture
def negotiator(transport, config):
    return MCPSessionNegotiator(transport, config)


@pytest.fixture
def client(transport, config):
    return MCPProtocolClient(transport, config)


@pytest.fixture
def store():
    return InMemorySessionStore()
