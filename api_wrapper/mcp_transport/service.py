"""Business logic for MCP protocol handlers."""

from typing import Any

import httpx

from api_wrapper.catalog.config import CatalogConfig, ToolConfig
from api_wrapper.gateway.service import dispatch_tool

from .schemas import (
    MCPTool,
    MCPToolListResult,
    MCPToolCallParams,
    MCPToolCallResult,
)

PROTOCOL_VERSION = "2024-11-05"


def build_input_schema(tool: ToolConfig) -> dict[str, Any]:
    """Render a tool's declared parameters as a JSON schema object."""
    properties: dict[str, Any] = {}
    required: list[str] = []

    for name, param in tool.parameters.items():
        prop: dict[str, Any] = {
            "type": param.type,
            "description": param.description,
        }
        if param.default is not None:
            prop["default"] = param.default
        if param.enum:
            prop["enum"] = list(param.enum)
        properties[name] = prop
        if param.required:
            required.append(name)

    return {
        "type": "object",
        "properties": properties,
        "required": required,
    }


def _to_mcp_tool(tool: ToolConfig) -> MCPTool:
    return MCPTool(
        name=tool.name,
        description=tool.description,
        inputSchema=build_input_schema(tool),
    )


async def handle_initialize(catalog: CatalogConfig) -> dict[str, Any]:
    """Handle initialize request.

    Args:
        catalog: Loaded tool catalog.

    Returns:
        Server initialization response.
    """
    return {
        "protocolVersion": PROTOCOL_VERSION,
        "capabilities": {
            "tools": {}
        },
        "serverInfo": {
            "name": catalog.server.name,
            "version": catalog.server.version,
        }
    }


async def handle_ping() -> dict[str, Any]:
    return {}


async def handle_tools_list(catalog: CatalogConfig) -> MCPToolListResult:
    """Handle tools/list request.

    Args:
        catalog: Loaded tool catalog.

    Returns:
        Every catalog tool with its input schema, in catalog order.
    """
    return MCPToolListResult(tools=[_to_mcp_tool(tool) for tool in catalog.tools])


async def handle_tools_call(
    catalog: CatalogConfig,
    client: httpx.AsyncClient,
    params: MCPToolCallParams,
) -> MCPToolCallResult:
    """Handle tools/call request.

    Args:
        catalog: Loaded tool catalog.
        client: HTTP client for upstream requests.
        params: Validated tools/call parameters.

    Returns:
        Tool execution result, with isError set when the tool failed.
    """
    return await dispatch_tool(
        catalog=catalog,
        client=client,
        name=params.name,
        arguments=params.arguments,
    )
