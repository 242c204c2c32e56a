# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Service layer for the MCP gateway.
"""

from gateway.services.gateway_service import GatewayService
from gateway.services.sandbox_provisioner import (
    SandboxProvisioner,
    E2BSandboxProvisioner,
    ProvisionedSandbox,
)

__all__ = [
    "GatewayService",
    "SandboxProvisioner",
    "E2BSandboxProvisioner",
    "ProvisionedSandbox",
]
