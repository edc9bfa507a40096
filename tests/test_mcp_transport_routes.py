"""Tests for the SSE stream and message endpoint."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from api_wrapper.config import Settings
from api_wrapper.main import create_app
from api_wrapper.mcp_transport.schemas import MCPJSONRPCRequest
from api_wrapper.mcp_transport.session import SessionRegistry
from api_wrapper.mcp_transport.sse import (
    KEEPALIVE_FRAME,
    event_stream,
    format_sse_event,
    process_message,
    sse_endpoint,
)


@pytest.fixture
def client(sample_catalog):
    with TestClient(create_app(catalog=sample_catalog)) as test_client:
        yield test_client


@pytest.fixture
def session(client):
    return client.portal.call(client.app.state.sessions.open)


class TestMessagesEndpoint:
    """Tests for POST /messages."""

    def test_missing_session_id(self, client):
        response = client.post("/messages", json={"jsonrpc": "2.0", "id": 1, "method": "ping"})

        assert response.status_code == 400
        assert response.text == "Missing session_id"

    def test_unknown_session(self, client):
        response = client.post(
            "/messages",
            params={"session_id": "does-not-exist"},
            json={"jsonrpc": "2.0", "id": 1, "method": "ping"},
        )

        assert response.status_code == 404
        assert response.text == "Session not found"

    def test_invalid_json(self, client, session):
        response = client.post(
            "/messages",
            params={"session_id": session.id},
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.text == "Invalid JSON"

    def test_not_a_jsonrpc_object(self, client, session):
        response = client.post("/messages", params={"session_id": session.id}, json=[1, 2, 3])

        assert response.status_code == 400
        assert response.text == "Invalid JSON-RPC message"

    def test_wrong_method_not_allowed(self, client, session):
        response = client.get("/messages", params={"session_id": session.id})
        assert response.status_code == 405

    def test_closed_session_is_not_found(self, client, session):
        client.app.state.sessions.close(session.id)

        response = client.post(
            "/messages",
            params={"session_id": session.id},
            json={"jsonrpc": "2.0", "id": 1, "method": "ping"},
        )

        assert response.status_code == 404

    def test_accepted_and_delivered_on_stream(self, client, session):
        response = client.post(
            "/messages",
            params={"session_id": session.id},
            json={"jsonrpc": "2.0", "id": 1, "method": "initialize", "params": {}},
        )

        assert response.status_code == 202
        assert response.text == "Accepted"

        message = client.portal.call(session.receive, 5.0)
        envelope = json.loads(message)
        assert envelope["jsonrpc"] == "2.0"
        assert envelope["id"] == 1
        assert envelope["result"]["serverInfo"]["name"] == "Test API Gateway"
        assert "error" not in envelope

    def test_notification_accepted_without_response(self, client, session):
        response = client.post(
            "/messages",
            params={"session_id": session.id},
            json={"jsonrpc": "2.0", "method": "notifications/initialized"},
        )

        assert response.status_code == 202
        assert client.portal.call(session.receive, 0.1) is None

    def test_unknown_method_error_delivered(self, client, session):
        client.post(
            "/messages",
            params={"session_id": session.id},
            json={"jsonrpc": "2.0", "id": "abc", "method": "unknown/method"},
        )

        envelope = json.loads(client.portal.call(session.receive, 5.0))
        assert envelope == {
            "jsonrpc": "2.0",
            "id": "abc",
            "error": {"code": -32601, "message": "Method not found"},
        }


class TestEventStream:
    """Tests for the per-session SSE generator."""

    def test_format_sse_event(self):
        assert format_sse_event("message", '{"a":1}') == 'event: message\ndata: {"a":1}\n\n'

    @pytest.mark.asyncio
    async def test_endpoint_event_first_then_messages(self):
        registry = SessionRegistry()
        session = registry.open()
        stream = event_stream(registry, session, "/messages", keepalive_seconds=5)

        first = await stream.__anext__()
        assert first == f"event: endpoint\ndata: /messages?session_id={session.id}\n\n"

        await registry.send(session.id, '{"jsonrpc":"2.0","id":1,"result":{}}')
        second = await stream.__anext__()
        assert second == 'event: message\ndata: {"jsonrpc":"2.0","id":1,"result":{}}\n\n'

        await stream.aclose()

    @pytest.mark.asyncio
    async def test_keepalive_while_idle(self):
        registry = SessionRegistry()
        session = registry.open()
        stream = event_stream(registry, session, "/messages", keepalive_seconds=0.01)

        await stream.__anext__()
        assert await stream.__anext__() == KEEPALIVE_FRAME

        await stream.aclose()

    @pytest.mark.asyncio
    async def test_stream_ends_when_session_closed(self):
        registry = SessionRegistry()
        session = registry.open()
        stream = event_stream(registry, session, "/messages", keepalive_seconds=5)

        await stream.__anext__()
        registry.close(session.id)

        with pytest.raises(StopAsyncIteration):
            await stream.__anext__()

    @pytest.mark.asyncio
    async def test_stream_close_removes_session(self):
        registry = SessionRegistry()
        session = registry.open()
        stream = event_stream(registry, session, "/messages", keepalive_seconds=5)

        await stream.__anext__()
        await stream.aclose()

        assert registry.get(session.id) is None
        assert session.is_closed

    @pytest.mark.asyncio
    async def test_client_disconnect_ends_stream(self):
        registry = SessionRegistry()
        session = registry.open()
        request = MagicMock()
        request.is_disconnected = AsyncMock(return_value=True)
        stream = event_stream(registry, session, "/messages", keepalive_seconds=0.01, request=request)

        await stream.__anext__()
        with pytest.raises(StopAsyncIteration):
            await stream.__anext__()

        assert registry.get(session.id) is None

    @pytest.mark.asyncio
    async def test_sse_endpoint_opens_session(self):
        registry = SessionRegistry()
        settings = Settings(SSE_KEEPALIVE_SECONDS=1.0)

        response = await sse_endpoint(request=MagicMock(), registry=registry, settings=settings)

        assert response.media_type == "text/event-stream"
        assert response.headers["cache-control"] == "no-cache"
        assert len(registry) == 1
        registry.close_all()


class TestProcessMessage:
    """Tests for the per-message handler task."""

    @pytest.mark.asyncio
    async def test_response_queued_on_session(self, sample_catalog):
        registry = SessionRegistry()
        session = registry.open()
        request = MCPJSONRPCRequest(id=3, method="ping")

        await process_message(registry, session.id, request, sample_catalog, AsyncMock())

        assert json.loads(await session.receive(timeout=1)) == {"jsonrpc": "2.0", "id": 3, "result": {}}

    @pytest.mark.asyncio
    async def test_response_for_closed_session_discarded(self, sample_catalog):
        registry = SessionRegistry()
        session = registry.open()
        registry.close(session.id)
        request = MCPJSONRPCRequest(id=3, method="ping")

        with patch("api_wrapper.mcp_transport.sse.logger") as mock_logger:
            await process_message(registry, session.id, request, sample_catalog, AsyncMock())

        args, kwargs = mock_logger.debug.call_args
        assert args[0] == "message_discarded"
        assert kwargs["session_id"] == session.id
