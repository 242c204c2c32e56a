# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Core utilities and shared modules for the gateway.

This package contains:
- config: Configuration management
- dependencies: Dependency injection
- errors: Custom exceptions
- logging: Structured logging
"""

from gateway.core.config import get_config, Config
from gateway.core.errors import GatewayError, NotFoundError, ValidationError
from gateway.core.logging import get_logger

__all__ = [
    "get_config",
    "Config",
    "GatewayError",
    "NotFoundError",
    "ValidationError",
    "get_logger",
]
