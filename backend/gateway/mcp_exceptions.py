# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
MCP Protocol Exception Classes
"""

from typing import Optional


class MCPError(Exception):
    """Base class for failures talking to a remote MCP endpoint"""

    is_recoverable = False


class MCPTransportError(MCPError):
    """Raised when the HTTP layer fails (non-2xx status, connection failure, timeout)"""

    def __init__(self, message: str, status: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status = status
        self.body = body


class MCPSessionLostError(MCPTransportError):
    """Raised when the remote no longer knows the session or sandbox (HTTP 404)"""

    is_recoverable = True


class MCPProtocolError(MCPError):
    """Raised when a JSON-RPC/SSE envelope is malformed or a listing returns an error"""
    pass
