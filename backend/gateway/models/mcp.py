# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""MCP gateway data models."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from pydantic import BaseModel


# Request bodies. Required fields are optional here so the routes can answer
# with the gateway's own 400 messages instead of a generic 422.

class InitSessionRequest(BaseModel):
    apiKey: Optional[str] = None
    mcpServers: Optional[Dict[str, Dict[str, Any]]] = None


class CallToolRequest(BaseModel):
    toolName: Optional[str] = None
    args: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class ToolDescriptor:
    """One entry of a tools/list result"""
    name: str
    description: str = ""
    input_schema: Dict[str, Any] = field(default_factory=dict)
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ToolDescriptor":
        known = {"name", "description", "inputSchema"}
        return cls(
            name=data.get("name", ""),
            description=data.get("description") or "",
            input_schema=data.get("inputSchema") or {},
            extra={k: v for k, v in data.items() if k not in known},
        )

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.extra)
        data.update({
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        })
        return data


@dataclass(frozen=True)
class CallOutcome:
    """Result of a tools/call: an opaque success payload or a structured failure"""
    success: bool
    payload: Any = None
    message: str = ""
    is_recoverable: bool = False

    @classmethod
    def ok(cls, payload: Any) -> "CallOutcome":
        return cls(success=True, payload=payload)

    @classmethod
    def failure(cls, message: str, is_recoverable: bool = False, payload: Any = None) -> "CallOutcome":
        return cls(success=False, payload=payload, message=message, is_recoverable=is_recoverable)

    def to_response(self) -> Dict[str, Any]:
        """Shape returned by POST /api/mcp/call/{id}"""
        if self.success:
            return {"result": self.payload, "isError": False}
        if self.payload is not None:
            return {"result": self.payload, "isError": True}
        return {"result": {"error": self.message}, "isError": True}
