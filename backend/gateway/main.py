# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
MCP Sandbox Gateway - Main API
Creates E2B sandboxes with an MCP gateway and proxies MCP tool operations.

Endpoints:
- POST   /api/mcp/init          Create sandbox + MCP session
- GET    /api/mcp/sandbox/{id}  Sandbox info
- DELETE /api/mcp/sandbox/{id}  Tear down sandbox
- GET    /api/mcp/tools/{id}    List MCP tools
- POST   /api/mcp/call/{id}     Call MCP tool
"""
# Load environment variables from .env file (local development)
from dotenv import load_dotenv
from pathlib import Path as _PathForEnv
_env_path = _PathForEnv(__file__).parent.parent.parent / ".env"
if _env_path.exists():
    load_dotenv(_env_path)

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from gateway.api import mcp
from gateway.core.config import Config, get_config
from gateway.core.errors import GatewayError, sanitize_error_for_user
from gateway.core.logging import get_logger
from gateway.mcp_exceptions import MCPError, MCPTransportError
from gateway.services.gateway_service import GatewayService
from gateway.services.sandbox_provisioner import E2BSandboxProvisioner


def cors_headers(config: Config) -> dict:
    return {
        "Access-Control-Allow-Origin": config.cors_allow_origin,
        "Access-Control-Allow-Methods": "GET, POST, DELETE, OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type, Authorization",
    }


def create_app(gateway: Optional[GatewayService] = None, config: Optional[Config] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        gateway: Pre-built service (tests); created on startup when omitted
        config: Configuration (defaults to get_config())
    """
    config = config or get_config()
    logger = get_logger("gateway", log_level=config.log_level, log_format=config.log_format)
    headers = cors_headers(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("MCP gateway starting up...")
        if getattr(app.state, "gateway", None) is None:
            app.state.gateway = GatewayService(E2BSandboxProvisioner(config), config=config)
        logger.info(f"  MCP protocol: {config.mcp_protocol_version}")
        logger.info(f"  Default MCP servers: {', '.join(config.default_mcp_servers)}")

        yield

        logger.info("MCP gateway shutting down...")
        await app.state.gateway.close()

    app = FastAPI(
        title="MCP Sandbox Gateway",
        description="MCP session gateway for sandboxed tool servers",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.gateway = gateway

    # Permissive CORS on every response, preflight answered without a body
    @app.middleware("http")
    async def cors(request: Request, call_next):
        if request.method == "OPTIONS":
            return Response(status_code=204, headers=headers)
        response = await call_next(request)
        response.headers.update(headers)
        return response

    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(MCPError)
    async def mcp_error_handler(request: Request, exc: MCPError):
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
        details = {"type": exc.__class__.__name__}
        if isinstance(exc, MCPTransportError):
            details["status"] = exc.status
            details["body"] = exc.body
        return JSONResponse(status_code=500, content={"error": str(exc), "details": details})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": "Invalid request body", "details": {"errors": jsonable_encoder(exc.errors())}})

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        message = "Not found" if exc.status_code == 404 else str(exc.detail)
        return JSONResponse(status_code=exc.status_code, content={"error": message})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"{request.method} {request.url.path} crashed")
        return JSONResponse(
            status_code=500,
            content={"error": str(exc) or "Internal error", "details": sanitize_error_for_user(exc)},
            headers=headers,
        )

    @app.get("/health")
    async def health():
        """Health check"""
        return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

    app.include_router(mcp.router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    _config = get_config()
    uvicorn.run(app, host=_config.get_service_host(), port=_config.get_service_port())
