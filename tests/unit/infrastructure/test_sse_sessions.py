"""
Unit tests for the SSE session registry.
"""

import uuid

import pytest

from toolhub.infrastructure.mcp.server.sse_sessions import SseSessionRegistry, format_event


def test_format_event():
    assert format_event("message", '{"id":1}') == 'event: message\ndata: {"id":1}\n\n'


@pytest.mark.asyncio
class TestSseSessionRegistry:
    """Tests for SseSessionRegistry and SseSession."""

    async def test_open_registers_session(self):
        registry = SseSessionRegistry()
        session = registry.open()

        assert len(registry) == 1
        assert registry.get(str(session.id)) is session
        assert session.endpoint == f"/mcp/messages?session={session.id}"

    async def test_get_unknown_or_malformed_id(self):
        registry = SseSessionRegistry()
        registry.open()

        assert registry.get(None) is None
        assert registry.get("not-a-session") is None
        assert registry.get(uuid.uuid4().hex) is None

    async def test_stream_starts_with_endpoint_then_messages(self):
        registry = SseSessionRegistry()
        session = registry.open()
        stream = session.events()

        first = await stream.__anext__()
        session.send({"jsonrpc": "2.0", "id": "1", "result": {}})
        second = await stream.__anext__()

        assert first == f"event: endpoint\ndata: {session.endpoint}\n\n"
        assert second == 'event: message\ndata: {"jsonrpc":"2.0","id":"1","result":{}}\n\n'
        await stream.aclose()

    async def test_close_ends_stream_after_queued_messages(self):
        registry = SseSessionRegistry()
        session = registry.open()
        session.send({"jsonrpc": "2.0", "id": "1", "result": {}})
        session.close()
        session.send({"jsonrpc": "2.0", "id": "2", "result": {}})

        events = [event async for event in session.events()]

        assert len(events) == 2
        assert events[1].startswith("event: message")
        assert len(registry) == 0

    async def test_closing_stream_discards_session(self):
        registry = SseSessionRegistry()
        session = registry.open()
        stream = session.events()
        await stream.__anext__()

        await stream.aclose()

        assert session.closed is True
        assert registry.get(str(session.id)) is None
        assert len(registry) == 0

    async def test_close_all(self):
        registry = SseSessionRegistry()
        first = registry.open()
        second = registry.open()

        registry.close_all()

        assert first.closed and second.closed
        assert len(registry) == 0
