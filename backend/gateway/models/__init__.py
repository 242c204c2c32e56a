# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""Data models for the MCP gateway."""

from gateway.models.mcp import (
    InitSessionRequest,
    CallToolRequest,
    ToolDescriptor,
    CallOutcome,
)

__all__ = [
    "InitSessionRequest",
    "CallToolRequest",
    "ToolDescriptor",
    "CallOutcome",
]
