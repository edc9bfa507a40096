"""Pydantic schemas for MCP protocol messages."""

from typing import Any, Literal
from pydantic import BaseModel, Field, field_validator, model_validator


class MCPErrorCodes:
    """JSON-RPC error codes used by the gateway."""

    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603
    TOOL_EXECUTION_ERROR = -32000


class MCPTool(BaseModel):
    """MCP tool definition."""

    name: str
    description: str
    inputSchema: dict[str, Any]


class MCPToolListResult(BaseModel):
    """Result for tools/list."""

    tools: list[MCPTool]


class MCPToolCallParams(BaseModel):
    """Parameters for tools/call."""

    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)

    @field_validator("arguments", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return {} if value is None else value


class MCPContent(BaseModel):
    """Content item in tool response."""

    type: Literal["text", "image", "resource"]
    text: str | None = None
    data: str | None = None
    mimeType: str | None = None


class MCPToolCallResult(BaseModel):
    """Result for tools/call."""

    content: list[MCPContent]
    isError: bool = False


class MCPErrorDetail(BaseModel):
    """Error details in JSON-RPC format."""

    code: int
    message: str


class MCPJSONRPCRequest(BaseModel):
    """Generic JSON-RPC 2.0 request.

    A request without an id (or with a null id) is a notification and is
    never answered.
    """

    jsonrpc: Literal["2.0"] = "2.0"
    id: str | int | None = None
    method: str
    params: Any | None = None

    @property
    def is_notification(self) -> bool:
        return self.id is None


class MCPJSONRPCResponse(BaseModel):
    """Generic JSON-RPC 2.0 response carrying either a result or an error."""

    jsonrpc: Literal["2.0"] = "2.0"
    id: str | int | None = None
    result: Any | None = None
    error: MCPErrorDetail | None = None

    @model_validator(mode="after")
    def _result_or_error(self) -> "MCPJSONRPCResponse":
        if self.result is not None and self.error is not None:
            raise ValueError("response carries both result and error")
        return self

    @classmethod
    def success(cls, id: str | int | None, result: Any) -> "MCPJSONRPCResponse":
        """Create a successful response."""
        return cls(id=id, result=result)

    @classmethod
    def error_response(cls, id: str | int | None, code: int, message: str) -> "MCPJSONRPCResponse":
        """Create an error response."""
        return cls(id=id, error=MCPErrorDetail(code=code, message=message))

    def to_wire(self) -> dict[str, Any]:
        """Serialize with exactly one of ``result`` / ``error`` present."""
        data: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            data["error"] = self.error.model_dump()
        else:
            data["result"] = self.result
        return data
