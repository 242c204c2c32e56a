# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Dependency injection for the gateway.

Provides FastAPI dependencies for the gateway service.
"""

from fastapi import Request


def get_gateway_service(request: Request):
    """Get the GatewayService created at startup (stored in app.state)."""
    return request.app.state.gateway
