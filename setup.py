# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Setup configuration for the MCP Sandbox Gateway
"""

from setuptools import setup, find_packages

setup(
    name="mcp-sandbox-gateway",
    version="1.0.0",
    description="MCP session gateway for E2B sandboxes: handshake, JSON/SSE decoding, session recovery",
    author="Jason Cafarelli",
    package_dir={"": "backend"},
    packages=find_packages(where="backend", include=["gateway", "gateway.*"]),
    python_requires=">=3.9",
    install_requires=[
        "fastapi>=0.110.0",
        "uvicorn>=0.27.0",
        "pydantic>=2.0.0",
        "aiohttp>=3.9.0",
        "PyYAML>=6.0",
        "python-dotenv>=1.0.0",
        "e2b>=2.3.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.23.0",
            "httpx>=0.27.0",
        ]
    },
)
