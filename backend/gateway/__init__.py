# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
MCP Sandbox Gateway

MCP session negotiation, JSON/SSE envelope decoding and session recovery
behind a small FastAPI surface.
"""

__version__ = "1.0.0"
