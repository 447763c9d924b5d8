"""FastAPI application serving the MCP endpoint."""
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from api.routers import health, mcp
from core.config import Settings, get_settings
from db.session import engine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Release pooled database connections on shutdown."""
    logger.info("Starting %s", app.title)
    yield
    await engine.dispose()
    logger.info("Database engine disposed")


def create_app(settings: Settings) -> FastAPI:
    """Build the application with the health and MCP routes mounted."""
    application = FastAPI(
        title=f"{settings.mcp_server_name} MCP server",
        description="Stateless MCP server exposing a personal bookmark collection as tools.",
        version=settings.mcp_server_version,
        lifespan=lifespan,
    )
    application.include_router(health.router)
    application.include_router(mcp.router)
    return application


app = create_app(get_settings())
