# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
MCP Session Data Structure
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Any

from gateway.core.logging import mask_token


@dataclass(frozen=True)
class MCPSession:
    """Represents a negotiated MCP connection to one sandbox endpoint"""
    key: str
    endpoint: str
    token: str = field(repr=False)
    session_id: str = ""
    established: bool = False
    protocol_version: str = ""
    server_capabilities: Dict[str, Any] = field(default_factory=dict)
    server_info: Dict[str, Any] = field(default_factory=dict)
    initialized_at: datetime = field(default_factory=datetime.now)

    @property
    def masked_token(self) -> str:
        return mask_token(self.token)

    def describe(self) -> Dict[str, Any]:
        """Loggable summary; never includes the full token"""
        return {
            "key": self.key,
            "endpoint": self.endpoint,
            "token": self.masked_token,
            "session_id": self.session_id,
            "established": self.established,
        }
