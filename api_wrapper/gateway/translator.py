"""Translate a tool definition plus caller arguments into an upstream HTTP call."""

import os
from typing import Any, Mapping

import httpx
from structlog import get_logger

from api_wrapper.catalog.config import ToolConfig
from .exceptions import (
    InvalidEndpointError,
    RequestFailedError,
    UpstreamError,
)
from .templating import resolve_template

logger = get_logger(__name__)

ALLOWED_SCHEMES = {"http", "https"}


def apply_defaults(tool: ToolConfig, arguments: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of ``arguments`` with declared defaults filled in.

    The caller's mapping is never mutated.
    """
    merged = dict(arguments)
    for name, param in tool.parameters.items():
        if name not in merged and param.default is not None:
            merged[name] = param.default
    return merged


def parse_endpoint(endpoint: str) -> httpx.URL:
    """Parse a tool endpoint.

    Raises:
        InvalidEndpointError: If the URL does not parse or is not an
            absolute http(s) URL.
    """
    try:
        url = httpx.URL(endpoint)
    except (httpx.InvalidURL, TypeError) as e:
        raise InvalidEndpointError(endpoint, str(e))

    if url.scheme not in ALLOWED_SCHEMES:
        raise InvalidEndpointError(endpoint, f"unsupported scheme '{url.scheme}'")
    if not url.host:
        raise InvalidEndpointError(endpoint, "missing host")
    return url


def build_tool_request(
    client: httpx.AsyncClient,
    tool: ToolConfig,
    arguments: Mapping[str, Any],
    token_env_var: str = "",
    environ: Mapping[str, str] | None = None,
) -> httpx.Request:
    """Build the outbound request for a tool call without sending it.

    Args:
        client: HTTP client used to build the request.
        tool: Tool definition from the catalog.
        arguments: Caller arguments.
        token_env_var: Name of the env var holding the bearer token.
        environ: Environment mapping, ``os.environ`` when omitted.

    Returns:
        A fully-resolved httpx.Request with the tool timeout attached.

    Raises:
        InvalidEndpointError: If the endpoint is not a valid URL.
        UnresolvedPlaceholdersError: If any template cannot be resolved.
    """
    env = os.environ if environ is None else environ
    values = apply_defaults(tool, arguments)
    url = parse_endpoint(tool.endpoint)

    # Values are sent as UTF-8 bytes; httpx only encodes str values as ASCII
    headers: dict[str, bytes] = {}
    content: bytes | None = None

    if tool.method == "GET":
        for key, template in tool.query_params.items():
            url = url.copy_add_param(key, resolve_template(template, values, env))
    else:
        content = resolve_template(tool.template, values, env).encode("utf-8")
        headers["Content-Type"] = b"application/json"

    token = env.get(token_env_var, "") if token_env_var else ""
    if token:
        headers["Authorization"] = f"Bearer {token}".encode("utf-8")

    for name, template in tool.headers.items():
        headers[name] = resolve_template(template, values, env).encode("utf-8")

    return client.build_request(
        tool.method,
        url,
        content=content,
        headers=headers,
        timeout=tool.timeout,
    )


async def execute_tool_call(
    client: httpx.AsyncClient,
    tool: ToolConfig,
    arguments: Mapping[str, Any],
    token_env_var: str = "",
    environ: Mapping[str, str] | None = None,
) -> str:
    """Execute a tool call against its upstream API.

    Args:
        client: Shared HTTP client.
        tool: Tool definition from the catalog.
        arguments: Caller arguments.
        token_env_var: Name of the env var holding the bearer token.
        environ: Environment mapping, ``os.environ`` when omitted.

    Returns:
        The raw upstream response body.

    Raises:
        InvalidEndpointError: If the endpoint is not a valid URL.
        UnresolvedPlaceholdersError: If any template cannot be resolved.
        RequestFailedError: On timeout or any other transport failure.
        UpstreamError: If upstream responds with status >= 400.
    """
    request = build_tool_request(client, tool, arguments, token_env_var, environ)
    url = str(request.url)

    try:
        response = await client.send(request)
    except httpx.TimeoutException as e:
        logger.warning("upstream_timeout", tool_name=tool.name, url=url, timeout=tool.timeout)
        raise RequestFailedError(url, e)
    except httpx.RequestError as e:
        logger.warning("upstream_request_failed", tool_name=tool.name, url=url, error=str(e))
        raise RequestFailedError(url, e)

    body = response.text
    if response.status_code >= 400:
        raise UpstreamError(url, response.status_code, body)

    return body
