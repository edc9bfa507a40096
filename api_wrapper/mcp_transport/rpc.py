"""JSON-RPC method routing for MCP messages."""

import asyncio

import httpx
from pydantic import ValidationError
from structlog import get_logger

from api_wrapper.catalog.config import CatalogConfig

from .schemas import (
    MCPErrorCodes,
    MCPJSONRPCRequest,
    MCPJSONRPCResponse,
    MCPToolCallParams,
)
from .service import (
    handle_initialize,
    handle_ping,
    handle_tools_call,
    handle_tools_list,
)

logger = get_logger(__name__)


def _parse_tool_call_params(params: object) -> MCPToolCallParams | None:
    if not isinstance(params, dict):
        return None
    try:
        return MCPToolCallParams(**params)
    except (ValidationError, TypeError):
        return None


async def _route(
    request: MCPJSONRPCRequest,
    catalog: CatalogConfig,
    client: httpx.AsyncClient,
) -> MCPJSONRPCResponse | None:
    method = request.method

    try:
        if method == "initialize":
            result = await handle_initialize(catalog)
            return MCPJSONRPCResponse.success(request.id, result)

        elif method == "notifications/initialized":
            # Client is confirming initialization, just acknowledge
            return None

        elif method == "ping":
            return MCPJSONRPCResponse.success(request.id, await handle_ping())

        elif method == "tools/list":
            result = await handle_tools_list(catalog)
            return MCPJSONRPCResponse.success(request.id, result.model_dump(exclude_none=True))

        elif method == "tools/call":
            call_params = _parse_tool_call_params(request.params)
            if call_params is None:
                return MCPJSONRPCResponse.error_response(
                    request.id, MCPErrorCodes.INVALID_PARAMS, "Invalid params"
                )
            try:
                result = await handle_tools_call(catalog, client, call_params)
            except Exception as e:
                logger.error("tool_dispatch_failed", tool_name=call_params.name, error=str(e), exc_info=True)
                return MCPJSONRPCResponse.error_response(
                    request.id, MCPErrorCodes.TOOL_EXECUTION_ERROR, f"Tool execution failed: {e}"
                )
            return MCPJSONRPCResponse.success(request.id, result.model_dump(exclude_none=True))

        else:
            # Unknown notifications are ignored, unknown requests are errors
            if request.is_notification:
                return None
            return MCPJSONRPCResponse.error_response(
                request.id, MCPErrorCodes.METHOD_NOT_FOUND, "Method not found"
            )

    except asyncio.CancelledError:
        raise
    except Exception as e:
        logger.error("rpc_internal_error", method=method, error=str(e), exc_info=True)
        return MCPJSONRPCResponse.error_response(
            request.id, MCPErrorCodes.INTERNAL_ERROR, f"Internal error: {e}"
        )


async def handle_jsonrpc_request(
    request: MCPJSONRPCRequest,
    catalog: CatalogConfig,
    client: httpx.AsyncClient,
) -> MCPJSONRPCResponse | None:
    """Route one JSON-RPC message to its handler.

    Notifications (no id) are still executed but never answered.

    Args:
        request: Decoded envelope.
        catalog: Loaded tool catalog.
        client: HTTP client for upstream requests.

    Returns:
        The response envelope, or None when no response is due.
    """
    response = await _route(request, catalog, client)
    if request.is_notification:
        return None
    return response
