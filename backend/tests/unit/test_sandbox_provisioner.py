# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Unit tests for E2BSandboxProvisioner

Tests sandbox creation, status checks and kill handling with the E2B SDK mocked.
"""

import pytest
from unittest.mock import patch, AsyncMock, MagicMock

from gateway.core.errors import ProvisioningError
from gateway.services.sandbox_provisioner import E2BSandboxProvisioner
from tests.mock_mcp import make_test_config


def make_sandbox(sandbox_id="sbx-e2b-1"):
    sandbox = MagicMock()
    sandbox.sandbox_id = sandbox_id
    sandbox.get_mcp_url.return_value = "https://sbx-e2b-1.e2b.app/mcp"
    sandbox.get_mcp_token = AsyncMock(return_value="mcp-token-abcdefghij")
    sandbox.is_running = AsyncMock(return_value=True)
    sandbox.kill = AsyncMock(return_value=True)
    return sandbox


@pytest.fixture
def provisioner():
    return E2BSandboxProvisioner(make_test_config(sandbox_timeout=120))


class TestProvision:
    """Test provision method"""

    async def test_creates_sandbox_with_mcp_servers(self, provisioner):
        sandbox = make_sandbox()
        with patch("gateway.services.sandbox_provisioner.AsyncSandbox") as sdk:
            sdk.create = AsyncMock(return_value=sandbox)
            result = await provisioner.provision("e2b-key", {"duckduckgo": {}})

        sdk.create.assert_awaited_once_with(api_key="e2b-key", mcp={"duckduckgo": {}}, timeout=120)
        assert result.sandbox_id == "sbx-e2b-1"
        assert result.mcp_url == "https://sbx-e2b-1.e2b.app/mcp"
        assert result.mcp_token == "mcp-token-abcdefghij"
        assert "mcp-token" not in repr(result)

    async def test_wraps_sdk_failure(self, provisioner):
        with patch("gateway.services.sandbox_provisioner.AsyncSandbox") as sdk:
            sdk.create = AsyncMock(side_effect=RuntimeError("invalid api key"))

            with pytest.raises(ProvisioningError) as exc_info:
                await provisioner.provision("bad-key", {})

        assert exc_info.value.status_code == 500
        assert "invalid api key" in exc_info.value.message
        assert exc_info.value.details["cause"] == "RuntimeError: invalid api key"


class TestLifecycle:
    """Test is_running / kill / close"""

    @pytest.fixture
    async def sandbox(self, provisioner):
        sandbox = make_sandbox()
        with patch("gateway.services.sandbox_provisioner.AsyncSandbox") as sdk:
            sdk.create = AsyncMock(return_value=sandbox)
            await provisioner.provision("e2b-key", {})
        return sandbox

    async def test_is_running(self, provisioner, sandbox):
        assert await provisioner.is_running("sbx-e2b-1") is True
        assert await provisioner.is_running("unknown") is False

    async def test_is_running_reports_false_on_sdk_error(self, provisioner, sandbox):
        sandbox.is_running.side_effect = RuntimeError("network down")

        assert await provisioner.is_running("sbx-e2b-1") is False

    async def test_kill_forgets_sandbox(self, provisioner, sandbox):
        assert await provisioner.kill("sbx-e2b-1") is True

        sandbox.kill.assert_awaited_once()
        assert await provisioner.kill("sbx-e2b-1") is False

    async def test_kill_failure(self, provisioner, sandbox):
        sandbox.kill.side_effect = RuntimeError("already gone")

        assert await provisioner.kill("sbx-e2b-1") is False
        assert "sbx-e2b-1" not in provisioner.sandboxes

    async def test_close_clears_handles(self, provisioner, sandbox):
        await provisioner.close()

        assert provisioner.sandboxes == {}
