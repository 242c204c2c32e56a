# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Session recovery for MCP operations.

When the remote reports a session as gone, the registry entry is evicted,
the handshake is re-run once against the same endpoint and token, and the
operation is retried once. Whatever the retry raises is final.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Dict, TypeVar

from gateway.core.errors import SessionNotFoundError
from gateway.core.logging import log_event
from gateway.mcp_exceptions import MCPSessionLostError
from gateway.mcp_negotiator import MCPSessionNegotiator
from gateway.mcp_session import MCPSession
from gateway.session_registry import SessionStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

SessionOperation = Callable[[MCPSession], Awaitable[T]]


class SessionRecovery:
    """Wraps registry lookup plus one evict / re-negotiate / retry cycle"""

    def __init__(self, store: SessionStore, negotiator: MCPSessionNegotiator):
        self.store = store
        self.negotiator = negotiator
        self.recovery_locks: Dict[str, asyncio.Lock] = {}

    def _lock_for(self, key: str) -> asyncio.Lock:
        if key not in self.recovery_locks:
            self.recovery_locks[key] = asyncio.Lock()
        return self.recovery_locks[key]

    def forget(self, key: str) -> None:
        """Drop the recovery lock of a key that is no longer served"""
        self.recovery_locks.pop(key, None)

    async def renegotiate(self, key: str, lost: MCPSession) -> MCPSession:
        """
        Replace a lost session, serialized per key.

        If another task already replaced it while we waited for the lock,
        that session is reused instead of negotiating again.
        """
        async with self._lock_for(key):
            current = await self.store.get(key)
            if current is not None and current is not lost:
                logger.info(f"Session for {key} already renegotiated")
                return current

            await self.store.evict(key, expected=lost)
            fresh = await self.negotiator.negotiate(lost.endpoint, lost.token, key=key)
            await self.store.put(key, fresh)
            return fresh

    async def with_session_recovery(self, key: str, operation: SessionOperation) -> T:
        """
        Run operation on the session stored under key.

        Raises:
            SessionNotFoundError: Nothing registered under key
            MCPError: Failure of the retried operation or of the re-negotiation
        """
        session = await self.store.get(key)
        if session is None:
            raise SessionNotFoundError(key)

        try:
            return await operation(session)
        except MCPSessionLostError as e:
            log_event(logger, f"Session lost for {key}, re-negotiating", level="WARNING", key=key, status=e.status, error=str(e))

        fresh = await self.renegotiate(key, session)
        return await operation(fresh)
