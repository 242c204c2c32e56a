# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""Unit tests for SessionRecovery (evict, re-negotiate once, retry once)"""

import asyncio

import pytest

from gateway.core.errors import SessionNotFoundError
from gateway.mcp_exceptions import MCPSessionLostError, MCPTransportError
from gateway.mcp_recovery import SessionRecovery


@pytest.fixture
def recovery(store, negotiator):
    return SessionRecovery(store, negotiator)


@pytest.fixture
async def registered(mcp_server, negotiator, store):
    """Negotiated session stored under sbx-1"""
    session = await negotiator.negotiate(mcp_server.url, "tok", key="sbx-1")
    await store.put("sbx-1", session)
    return session


async def test_unknown_key(recovery):
    async def operation(session):
        raise AssertionError("must not run")

    with pytest.raises(SessionNotFoundError):
        await recovery.with_session_recovery("nope", operation)


async def test_healthy_session_runs_once(mcp_server, recovery, registered):
    calls = []

    async def operation(session):
        calls.append(session)
        return "done"

    assert await recovery.with_session_recovery("sbx-1", operation) == "done"
    assert calls == [registered]
    assert mcp_server.init_count == 1


async def test_session_loss_renegotiates_and_retries_once(mcp_server, client, recovery, registered, store):
    """A not-found call triggers exactly one re-negotiation and one retry"""
    mcp_server.drop_sessions()

    async def call(session):
        return await client.call_tool(session, "search", {"q": "ai"})

    outcome = await recovery.with_session_recovery("sbx-1", call)

    assert outcome.success is True
    assert mcp_server.init_count == 2
    assert len(mcp_server.requests_for("tools/call")) == 2

    fresh = await store.get("sbx-1")
    assert fresh is not registered
    assert fresh.session_id == "session-2"
    assert mcp_server.requests_for("tools/call")[-1]["headers"]["Mcp-Session-Id"] == "session-2"


async def test_second_failure_surfaces_retry_error(mcp_server, recovery, registered):
    """If the retry fails too, its error (not the original) is surfaced"""
    attempts = []

    async def operation(session):
        attempts.append(session.session_id)
        if len(attempts) == 1:
            raise MCPSessionLostError("first failure", status=404, body="Session not found")
        raise MCPSessionLostError("retry failure", status=404, body="Sandbox not found")

    with pytest.raises(MCPSessionLostError, match="retry failure"):
        await recovery.with_session_recovery("sbx-1", operation)

    assert attempts == ["session-1", "session-2"]
    assert mcp_server.init_count == 2


async def test_other_errors_are_not_retried(mcp_server, recovery, registered):
    attempts = []

    async def operation(session):
        attempts.append(session)
        raise MCPTransportError("boom", status=500, body="boom")

    with pytest.raises(MCPTransportError, match="boom"):
        await recovery.with_session_recovery("sbx-1", operation)

    assert len(attempts) == 1
    assert mcp_server.init_count == 1


async def test_failed_renegotiation_leaves_no_entry(mcp_server, recovery, registered, store):
    """Handshake failure during recovery aborts without keeping the dead session"""
    from aiohttp import web

    async def reject(payload, request):
        return web.Response(status=503, text="gateway down")

    mcp_server.handlers["initialize"] = reject

    async def operation(session):
        raise MCPSessionLostError("gone", status=404)

    with pytest.raises(MCPTransportError, match="gateway down"):
        await recovery.with_session_recovery("sbx-1", operation)

    assert await store.get("sbx-1") is None


async def test_concurrent_losses_share_one_renegotiation(mcp_server, client, recovery, registered):
    """Calls failing together on one key should re-negotiate only once"""
    mcp_server.drop_sessions()

    async def call(session):
        return await client.call_tool(session, "search", {"q": "ai"})

    outcomes = await asyncio.gather(*(recovery.with_session_recovery("sbx-1", call) for _ in range(3)))

    assert all(outcome.success for outcome in outcomes)
    assert mcp_server.init_count == 2


async def test_forget_drops_recovery_lock(recovery, registered):
    await recovery.renegotiate("sbx-1", registered)
    assert "sbx-1" in recovery.recovery_locks

    recovery.forget("sbx-1")
    recovery.forget("never-seen")

    assert recovery.recovery_locks == {}
