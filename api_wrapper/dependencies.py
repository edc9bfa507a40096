"""Global dependencies for the application."""

import httpx
from fastapi import Request

from api_wrapper.catalog.config import CatalogConfig
from api_wrapper.mcp_transport.session import SessionRegistry


async def get_http_client(request: Request) -> httpx.AsyncClient:
    """Dependency to get the global shared HTTP client.

    This client is initialized in the app lifespan and shared across requests
    to enable connection pooling (keep-alive).

    Args:
        request: The FastAPI request object.

    Returns:
        The global httpx.AsyncClient instance.
    """
    return request.app.state.http_client


async def get_catalog(request: Request) -> CatalogConfig:
    """Dependency to get the tool catalog loaded at startup."""
    return request.app.state.catalog


async def get_session_registry(request: Request) -> SessionRegistry:
    """Dependency to get the live SSE session registry."""
    return request.app.state.sessions
