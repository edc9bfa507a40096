"""Custom exceptions for tool execution."""

from api_wrapper.exceptions import APIWrapperError


class ToolExecutionError(APIWrapperError):
    """Base exception for failures inside a single tool invocation."""
    pass


class ToolNotFoundError(ToolExecutionError):
    """Raised when requested tool is not in the catalog.

    Attributes:
        tool_name: Name of the tool that was not found.
    """

    def __init__(self, tool_name: str):
        super().__init__(
            message=f"Tool not found: {tool_name}",
            code="TOOL_NOT_FOUND"
        )
        self.tool_name = tool_name


class InvalidEndpointError(ToolExecutionError):
    """Raised when a tool's configured endpoint is not a usable URL.

    Attributes:
        endpoint: The configured endpoint.
        reason: Why the endpoint was rejected.
    """

    def __init__(self, endpoint: str, reason: str):
        super().__init__(
            message=f"invalid endpoint URL '{endpoint}': {reason}",
            code="INVALID_ENDPOINT"
        )
        self.endpoint = endpoint
        self.reason = reason


class UnresolvedPlaceholdersError(ToolExecutionError):
    """Raised when a template still contains placeholders after substitution.

    Attributes:
        placeholders: Unresolved placeholder texts, verbatim and in order.
    """

    def __init__(self, placeholders: list[str]):
        super().__init__(
            message=f"missing template variables: {placeholders}",
            code="UNRESOLVED_PLACEHOLDERS"
        )
        self.placeholders = placeholders


class RequestFailedError(ToolExecutionError):
    """Raised when the outbound request fails at the transport level.

    Attributes:
        url: Target URL.
        cause: Underlying exception (timeout, connection error, ...).
    """

    def __init__(self, url: str, cause: Exception):
        super().__init__(
            message=f"request failed: {type(cause).__name__}: {cause}",
            code="REQUEST_FAILED"
        )
        self.url = url
        self.cause = cause


class UpstreamError(ToolExecutionError):
    """Raised when the upstream API returns an error status.

    Attributes:
        url: Target URL.
        status_code: HTTP status code from upstream.
        body: Raw response body, untruncated.
    """

    def __init__(self, url: str, status_code: int, body: str = ""):
        super().__init__(
            message=f"API returned error status {status_code}: {body}",
            code="UPSTREAM_ERROR"
        )
        self.url = url
        self.status_code = status_code
        self.body = body
