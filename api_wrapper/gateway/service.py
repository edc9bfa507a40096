"""Tool dispatch: catalog lookup, upstream call and result shaping."""

import asyncio
import time
from typing import Any, Mapping

import httpx
from structlog import get_logger

from api_wrapper.catalog.config import CatalogConfig
from api_wrapper.mcp_transport.schemas import MCPContent, MCPToolCallResult

from .exceptions import ToolExecutionError, ToolNotFoundError
from .translator import execute_tool_call

logger = get_logger(__name__)


def _error_result(text: str) -> MCPToolCallResult:
    return MCPToolCallResult(
        content=[MCPContent(type="text", text=text)],
        isError=True,
    )


async def invoke_tool(
    catalog: CatalogConfig,
    client: httpx.AsyncClient,
    name: str,
    arguments: Mapping[str, Any],
) -> str:
    """Look up a tool by exact name and execute it.

    Args:
        catalog: Loaded tool catalog.
        client: Shared HTTP client.
        name: Tool name.
        arguments: Caller arguments.

    Returns:
        Raw upstream response body.

    Raises:
        ToolNotFoundError: If no tool has this name.
        ToolExecutionError: If the upstream call cannot be built or fails.
    """
    tool = catalog.get_tool(name)
    if tool is None:
        raise ToolNotFoundError(name)

    return await execute_tool_call(
        client=client,
        tool=tool,
        arguments=arguments,
        token_env_var=catalog.auth.token_env_var,
    )


async def dispatch_tool(
    catalog: CatalogConfig,
    client: httpx.AsyncClient,
    name: str,
    arguments: Mapping[str, Any],
) -> MCPToolCallResult:
    """Invoke a tool and wrap the outcome as a tools/call result.

    Failures of the invocation itself are reported as a result with
    ``isError`` set, never raised, so callers can tell a failed tool apart
    from a malformed request.

    Args:
        catalog: Loaded tool catalog.
        client: Shared HTTP client.
        name: Tool name.
        arguments: Caller arguments.

    Returns:
        MCPToolCallResult holding the upstream body or an error message.
    """
    start_time = time.perf_counter()
    status = "success"
    error_code: str | None = None

    try:
        body = await invoke_tool(catalog, client, name, arguments)
        return MCPToolCallResult(content=[MCPContent(type="text", text=body)])
    except ToolNotFoundError as e:
        status, error_code = "error", e.code
        return _error_result(e.message)
    except ToolExecutionError as e:
        status, error_code = "error", e.code
        return _error_result(f"API call failed: {e.message}")
    except asyncio.CancelledError:
        status = "cancelled"
        raise
    except Exception:
        status = "error"
        raise
    finally:
        logger.info(
            "tool_invocation",
            tool_name=name,
            status=status,
            error_code=error_code,
            duration_ms=int((time.perf_counter() - start_time) * 1000),
        )
