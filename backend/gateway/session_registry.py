# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Session Registry
Keyed store of negotiated MCP sessions, at most one live entry per key.

The in-memory store only works for a single process. Deployments running
several gateway instances plug in a shared store (e.g. Redis) behind the same
SessionStore interface.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Dict, Optional

from gateway.mcp_session import MCPSession

logger = logging.getLogger(__name__)


class SessionStore(ABC):
    """get / put / evict by key; last write wins, no TTL"""

    @abstractmethod
    async def get(self, key: str) -> Optional[MCPSession]:
        ...

    @abstractmethod
    async def put(self, key: str, session: MCPSession) -> None:
        ...

    @abstractmethod
    async def evict(self, key: str, expected: Optional[MCPSession] = None) -> bool:
        """
        Remove the entry for key.

        With expected set, only remove it if it is still that session, so a
        stale failure cannot evict a session negotiated after it.

        Returns:
            True if an entry was removed
        """
        ...


class InMemorySessionStore(SessionStore):
    """Process-local registry guarded by a single lock"""

    def __init__(self):
        self._sessions: Dict[str, MCPSession] = {}
        self._lock = threading.Lock()

    async def get(self, key: str) -> Optional[MCPSession]:
        with self._lock:
            return self._sessions.get(key)

    async def put(self, key: str, session: MCPSession) -> None:
        with self._lock:
            replaced = key in self._sessions
            self._sessions[key] = session
        logger.info(f"{'Replaced' if replaced else 'Stored'} MCP session for {key}")

    async def evict(self, key: str, expected: Optional[MCPSession] = None) -> bool:
        with self._lock:
            current = self._sessions.get(key)
            if current is None:
                return False
            if expected is not None and current is not expected:
                return False
            del self._sessions[key]
        logger.info(f"Evicted MCP session for {key}")
        return True
