"""Liveness probe for the MCP server and its database."""
import logging
from typing import Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import Settings, get_settings
from db.session import get_async_session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])

ComponentStatus = Literal["healthy", "unhealthy"]


class HealthResponse(BaseModel):
    """Server identity plus database reachability."""

    status: Literal["healthy", "degraded"]
    database: ComponentStatus
    server: str


async def _probe_database(db: AsyncSession) -> ComponentStatus:
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Database probe failed")
        return "unhealthy"
    return "healthy"


@router.get("/health", response_model=HealthResponse)
async def health_check(
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> HealthResponse:
    """The server stays up while the database is down, so that reads as degraded."""
    database = await _probe_database(db)
    return HealthResponse(
        status="healthy" if database == "healthy" else "degraded",
        database=database,
        server=f"{settings.mcp_server_name}/{settings.mcp_server_version}",
    )
