# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Sandbox Provisioner

Creates remote execution sandboxes that expose an MCP gateway. The gateway
only needs the resulting URL + bearer token; everything else about the
sandbox stays behind this interface.
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from e2b import AsyncSandbox

from gateway.core.config import Config, get_config
from gateway.core.errors import ProvisioningError, sanitize_error_for_user

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProvisionedSandbox:
    sandbox_id: str
    mcp_url: str
    mcp_token: str = field(repr=False)


class SandboxProvisioner(ABC):
    """External collaborator that hands out MCP endpoints"""

    @abstractmethod
    async def provision(self, api_key: str, mcp_servers: Dict[str, Dict[str, Any]]) -> ProvisionedSandbox:
        ...

    @abstractmethod
    async def is_running(self, sandbox_id: str) -> bool:
        ...

    @abstractmethod
    async def kill(self, sandbox_id: str) -> bool:
        ...

    async def close(self) -> None:
        """Release provisioner resources"""
        return None


class E2BSandboxProvisioner(SandboxProvisioner):
    """Provisions E2B sandboxes running the E2B MCP gateway"""

    def __init__(self, config: Optional[Config] = None):
        config = config or get_config()
        self.sandbox_timeout = config.sandbox_timeout
        self.sandboxes: Dict[str, AsyncSandbox] = {}

    async def provision(self, api_key: str, mcp_servers: Dict[str, Dict[str, Any]]) -> ProvisionedSandbox:
        """
        Create an E2B sandbox with the given MCP servers enabled.

        Raises:
            ProvisioningError: Sandbox creation failed
        """
        logger.info(f"Creating E2B sandbox with MCP servers: {', '.join(mcp_servers)}")
        try:
            sandbox = await AsyncSandbox.create(
                api_key=api_key,
                mcp=mcp_servers,
                timeout=self.sandbox_timeout,
            )
            mcp_url = sandbox.get_mcp_url()
            mcp_token = await sandbox.get_mcp_token()
        except Exception as e:
            raise ProvisioningError(
                f"Failed to create MCP sandbox: {e}",
                details={"cause": sanitize_error_for_user(e)},
            ) from e

        sandbox_id = getattr(sandbox, "sandbox_id", None) or str(int(time.time() * 1000))
        self.sandboxes[sandbox_id] = sandbox
        logger.info(f"Sandbox {sandbox_id} created, MCP URL: {mcp_url}")
        return ProvisionedSandbox(sandbox_id=sandbox_id, mcp_url=mcp_url, mcp_token=mcp_token or "")

    async def is_running(self, sandbox_id: str) -> bool:
        sandbox = self.sandboxes.get(sandbox_id)
        if sandbox is None:
            return False
        try:
            return bool(await sandbox.is_running())
        except Exception as e:
            logger.warning(f"Could not check sandbox {sandbox_id}: {e}")
            return False

    async def kill(self, sandbox_id: str) -> bool:
        sandbox = self.sandboxes.pop(sandbox_id, None)
        if sandbox is None:
            return False
        try:
            await sandbox.kill()
        except Exception as e:
            logger.warning(f"Failed to kill sandbox {sandbox_id}: {e}")
            return False
        logger.info(f"Sandbox {sandbox_id} killed")
        return True

    async def close(self) -> None:
        # Sandboxes expire on their own timeout; only forget the handles
        self.sandboxes.clear()
