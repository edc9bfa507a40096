import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from .config import get_settings
from .log_config import configure_logging
from .catalog.config import CatalogConfig, load_catalog
from .mcp_transport.session import SessionRegistry
from .mcp_transport.sse import router as mcp_sse_router


def create_app(
    catalog: CatalogConfig | None = None,
    log_level: str | None = None,
) -> FastAPI:
    """Build the gateway application.

    Args:
        catalog: Pre-loaded catalog. When omitted the catalog is loaded from
            ``CATALOG_PATH`` at startup.
        log_level: Overrides ``LOG_LEVEL`` for this app.

    Returns:
        Configured FastAPI application.
    """
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(log_level or settings.LOG_LEVEL, settings.LOG_JSON)

        app.state.catalog = catalog if catalog is not None else load_catalog(settings.CATALOG_PATH)
        app.state.sessions = SessionRegistry(max_queue_size=settings.SSE_QUEUE_SIZE)

        # Per-request timeouts come from each tool definition
        app.state.http_client = httpx.AsyncClient(timeout=None)

        yield

        # Shutdown: end every open stream, then release the HTTP client
        app.state.sessions.close_all()
        await app.state.http_client.aclose()

    app = FastAPI(
        title=settings.APP_NAME,
        lifespan=lifespan,
        debug=settings.DEBUG
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health_check():
        return {"status": "ok", "app": settings.APP_NAME}

    app.include_router(mcp_sse_router)

    return app


app = create_app()
