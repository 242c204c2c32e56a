# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Gateway Configuration - Single source of truth.
YAML is king. Env vars for secrets and deployment overrides.

All configuration lives in plain text (configs/gateway.yaml) so it can be
inspected with `cat`, `grep`, `yq`.
"""

import os
import yaml
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional


DEFAULT_CONFIG_PATH = str(Path(__file__).resolve().parents[3] / "configs" / "gateway.yaml")


def _default_mcp_servers() -> Dict[str, Dict[str, Any]]:
    return {
        "duckduckgo": {},
        "arxiv": {"storagePath": "/"},
    }


# =============================================================================
# CONFIGURATION DATACLASS
# =============================================================================

@dataclass(frozen=True)
class Config:
    """
    Immutable gateway configuration.
    All values from YAML. No hidden state.
    """

    # -- Server --
    service_host: str = "0.0.0.0"
    service_port: int = 8787
    cors_allow_origin: str = "*"

    # -- MCP protocol --
    mcp_protocol_version: str = "2024-11-05"
    mcp_client_name: str = "mcp-sandbox-gateway"
    mcp_client_version: str = "1.0.0"

    # -- MCP timeouts (seconds) --
    timeout_init: float = 30.0
    timeout_list: float = 10.0
    timeout_call: float = 300.0

    # Remote MCP gateways leave their "initializing" state asynchronously
    # after notifications/initialized; give them this long before first use.
    initialized_delay: float = 0.1

    # -- Sandbox --
    sandbox_timeout: int = 600
    default_mcp_servers: Dict[str, Dict[str, Any]] = field(default_factory=_default_mcp_servers)

    # -- Logging --
    log_level: str = "INFO"
    log_format: str = "json"

    def get_service_host(self) -> str:
        return self.service_host

    def get_service_port(self) -> int:
        return self.service_port

    def get_client_info(self) -> Dict[str, str]:
        """Client identity sent with the initialize request"""
        return {
            "name": self.mcp_client_name,
            "version": self.mcp_client_version,
        }


# =============================================================================
# LOADER
# =============================================================================

def load_config(path: str = DEFAULT_CONFIG_PATH) -> Config:
    """
    Load configuration from YAML.
    Returns defaults (plus env overrides) if file doesn't exist.
    """
    y: Dict[str, Any] = {}
    if Path(path).exists():
        with open(path) as f:
            y = yaml.safe_load(f) or {}

    # Helper to safely navigate nested dicts
    def get(d: dict, *keys, default=None):
        for k in keys:
            if not isinstance(d, dict):
                return default
            d = d.get(k, {})
        return d if d != {} else default

    defaults = Config()

    return Config(
        # Server
        service_host=os.getenv("GATEWAY_HOST") or get(y, "server", "host") or defaults.service_host,
        service_port=int(os.getenv("GATEWAY_PORT") or get(y, "server", "port") or defaults.service_port),
        cors_allow_origin=get(y, "server", "cors_allow_origin") or defaults.cors_allow_origin,

        # MCP protocol
        mcp_protocol_version=get(y, "mcp", "protocol_version") or defaults.mcp_protocol_version,
        mcp_client_name=get(y, "mcp", "client", "name") or defaults.mcp_client_name,
        mcp_client_version=get(y, "mcp", "client", "version") or defaults.mcp_client_version,

        # Timeouts
        timeout_init=float(os.getenv("MCP_TIMEOUT_INIT") or get(y, "mcp", "timeouts", "init") or defaults.timeout_init),
        timeout_list=float(os.getenv("MCP_TIMEOUT_LIST") or get(y, "mcp", "timeouts", "list") or defaults.timeout_list),
        timeout_call=float(os.getenv("MCP_TIMEOUT_CALL") or get(y, "mcp", "timeouts", "call") or defaults.timeout_call),
        initialized_delay=float(get(y, "mcp", "initialized_delay", default=defaults.initialized_delay)),

        # Sandbox
        sandbox_timeout=int(get(y, "sandbox", "timeout") or defaults.sandbox_timeout),
        default_mcp_servers=get(y, "sandbox", "default_mcp_servers") or _default_mcp_servers(),

        # Logging
        log_level=os.getenv("LOG_LEVEL") or get(y, "logging", "level") or defaults.log_level,
        log_format=get(y, "logging", "format") or defaults.log_format,
    )


# =============================================================================
# GLOBAL INSTANCE
# =============================================================================

_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create global config instance."""
    global _config
    if _config is None:
        config_path = os.getenv("GATEWAY_CONFIG_PATH", DEFAULT_CONFIG_PATH)
        _config = load_config(config_path)
    return _config


def reload_config() -> Config:
    """Force reload configuration."""
    global _config
    _config = None
    return get_config()
