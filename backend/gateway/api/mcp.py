# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
MCP API Routes

Proxies the MCP session operations for the chat frontend:
- Create a sandbox and negotiate its MCP session
- Sandbox status and teardown
- List tools / call a tool
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError as PydanticValidationError

from gateway.core.dependencies import get_gateway_service
from gateway.core.errors import ValidationError
from gateway.models.mcp import InitSessionRequest, CallToolRequest
from gateway.services.gateway_service import GatewayService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/mcp", tags=["mcp"])


@router.post("/init")
async def init_session(
    body: InitSessionRequest,
    service: GatewayService = Depends(get_gateway_service)
) -> Dict[str, str]:
    """Create a sandbox with an MCP gateway and run the MCP handshake"""
    if not body.apiKey:
        raise ValidationError("E2B API key is required", field="apiKey")
    return await service.create_session(body.apiKey, body.mcpServers)


@router.get("/sandbox/{sandbox_id}")
async def get_sandbox(
    sandbox_id: str,
    service: GatewayService = Depends(get_gateway_service)
) -> Dict[str, Any]:
    """Get sandbox info"""
    return await service.get_sandbox_info(sandbox_id)


@router.delete("/sandbox/{sandbox_id}")
async def delete_sandbox(
    sandbox_id: str,
    service: GatewayService = Depends(get_gateway_service)
) -> Dict[str, str]:
    """Tear down the MCP session and kill its sandbox"""
    return await service.teardown(sandbox_id)


@router.get("/tools/{sandbox_id}")
async def list_tools(
    sandbox_id: str,
    service: GatewayService = Depends(get_gateway_service)
) -> Dict[str, Any]:
    """List available MCP tools"""
    return await service.list_tools(sandbox_id)


@router.post("/call/{sandbox_id}")
async def call_tool(
    sandbox_id: str,
    request: Request,
    service: GatewayService = Depends(get_gateway_service)
) -> Dict[str, Any]:
    """
    Call an MCP tool.

    Tool failures are answered with 200 and isError=true so the caller can
    hand them back to the model as data.
    """
    await service.get_session(sandbox_id)

    # Body is read only once the key is known to exist
    raw = await request.body()
    try:
        body = CallToolRequest.model_validate_json(raw) if raw.strip() else CallToolRequest()
    except PydanticValidationError as e:
        raise ValidationError("Invalid request body", details={"errors": e.errors(include_url=False, include_context=False)}) from e

    if not body.toolName:
        raise ValidationError("toolName is required", field="toolName")

    outcome = await service.call_tool(sandbox_id, body.toolName, body.args or {})
    return outcome.to_response()
