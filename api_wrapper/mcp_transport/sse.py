"""SSE transport implementation for MCP protocol."""

import json
from typing import Annotated, AsyncIterator

import httpx
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import PlainTextResponse, StreamingResponse
from pydantic import ValidationError
from starlette.background import BackgroundTask
from structlog import get_logger

from api_wrapper.catalog.config import CatalogConfig
from api_wrapper.config import Settings, get_settings
from api_wrapper.dependencies import get_catalog, get_http_client, get_session_registry

from .exceptions import SessionClosedError, SessionNotFoundError
from .rpc import handle_jsonrpc_request
from .schemas import MCPJSONRPCRequest
from .session import Session, SessionRegistry

logger = get_logger(__name__)

router = APIRouter(prefix="", tags=["mcp-sse"])

KEEPALIVE_FRAME = ": ping\n\n"
SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


def format_sse_event(event: str, data: str) -> str:
    return f"event: {event}\ndata: {data}\n\n"


async def event_stream(
    registry: SessionRegistry,
    session: Session,
    messages_path: str,
    keepalive_seconds: float,
    request: Request | None = None,
) -> AsyncIterator[str]:
    """Stream loop for one session: the only consumer of its queue.

    Emits the endpoint event first, then one message event per queued
    envelope, with keepalive comments while idle. The session is closed
    when the loop ends for any reason (client disconnect, shutdown).
    """
    try:
        yield format_sse_event("endpoint", f"{messages_path}?session_id={session.id}")

        while True:
            try:
                message = await session.receive(timeout=keepalive_seconds)
            except SessionClosedError:
                break

            if message is None:
                if request is not None and await request.is_disconnected():
                    break
                yield KEEPALIVE_FRAME
                continue

            yield format_sse_event("message", message)
    finally:
        registry.close(session.id)


async def process_message(
    registry: SessionRegistry,
    session_id: str,
    rpc_request: MCPJSONRPCRequest,
    catalog: CatalogConfig,
    client: httpx.AsyncClient,
) -> None:
    """Handler task: run one JSON-RPC message and queue its response."""
    response = await handle_jsonrpc_request(rpc_request, catalog, client)
    if response is None:
        return

    payload = json.dumps(response.to_wire(), default=str)
    try:
        await registry.send(session_id, payload)
    except SessionNotFoundError:
        logger.debug(
            "message_discarded",
            session_id=session_id,
            method=rpc_request.method,
            request_id=rpc_request.id,
        )


@router.get("/sse", operation_id="sse_endpoint_get")
async def sse_endpoint(
    request: Request,
    registry: Annotated[SessionRegistry, Depends(get_session_registry)],
    settings: Annotated[Settings, Depends(get_settings)],
):
    """Open an SSE stream and announce its message endpoint."""
    session = registry.open()
    return StreamingResponse(
        event_stream(
            registry,
            session,
            messages_path=settings.MESSAGES_PATH,
            keepalive_seconds=settings.SSE_KEEPALIVE_SECONDS,
            request=request,
        ),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
        background=BackgroundTask(registry.close, session.id),
    )


@router.post("/messages", operation_id="messages_endpoint_post")
async def messages_endpoint(
    request: Request,
    registry: Annotated[SessionRegistry, Depends(get_session_registry)],
    catalog: Annotated[CatalogConfig, Depends(get_catalog)],
    client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
    session_id: Annotated[str | None, Query()] = None,
):
    """Accept one JSON-RPC message; the response is delivered on the stream."""
    if not session_id:
        return PlainTextResponse("Missing session_id", status_code=400)

    session = registry.get(session_id)
    if session is None:
        return PlainTextResponse("Session not found", status_code=404)

    try:
        body = await request.json()
    except ValueError:
        return PlainTextResponse("Invalid JSON", status_code=400)

    try:
        rpc_request = MCPJSONRPCRequest.model_validate(body)
    except ValidationError:
        return PlainTextResponse("Invalid JSON-RPC message", status_code=400)

    try:
        registry.spawn(
            session,
            process_message(registry, session.id, rpc_request, catalog, client),
        )
    except SessionNotFoundError:
        return PlainTextResponse("Session not found", status_code=404)

    return PlainTextResponse("Accepted", status_code=202)
