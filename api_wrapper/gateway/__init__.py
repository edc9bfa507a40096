"""Gateway module - declarative tool calls translated into upstream HTTP requests."""

from .exceptions import (
    ToolExecutionError,
    ToolNotFoundError,
    InvalidEndpointError,
    UnresolvedPlaceholdersError,
    RequestFailedError,
    UpstreamError,
)
from .templating import resolve_template, stringify_value
from .translator import build_tool_request, execute_tool_call
from .service import dispatch_tool, invoke_tool


__all__ = [
    # Exceptions
    "ToolExecutionError",
    "ToolNotFoundError",
    "InvalidEndpointError",
    "UnresolvedPlaceholdersError",
    "RequestFailedError",
    "UpstreamError",
    # Templating
    "resolve_template",
    "stringify_value",
    # Translator
    "build_tool_request",
    "execute_tool_call",
    # Service
    "dispatch_tool",
    "invoke_tool",
]
