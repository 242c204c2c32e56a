# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Test Suite for the MCP Sandbox Gateway

Structure:
- unit/: Unit tests for services
- test_*.py: MCP protocol layers and API routes against a mock MCP server
"""
