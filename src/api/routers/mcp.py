"""
Streamable-HTTP transport for the MCP endpoint.

The server is stateless: every JSON-RPC exchange is a single POST. There is
no event stream to open with GET and no session to end with DELETE.
"""
import json
import logging
from functools import partial
from typing import Any

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse
from mcp import types
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import authenticate_request
from core.config import Settings, get_settings
from db.session import get_async_session
from mcp_server import ToolContext, process_body
from mcp_server.protocol import jsonrpc_error
from services.url_scraper import scrape_url

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/mcp", tags=["mcp"])

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Accept, Authorization, Mcp-Session-Id",
}


def _json_response(content: Any) -> JSONResponse:  # noqa: ANN401
    return JSONResponse(content=content, headers=CORS_HEADERS)


def _method_not_allowed(message: str) -> PlainTextResponse:
    return PlainTextResponse(message, status_code=405, headers=CORS_HEADERS)


@router.options("")
@router.options("/")
async def mcp_preflight() -> Response:
    """CORS preflight."""
    return Response(status_code=204, headers=CORS_HEADERS)


@router.get("")
@router.get("/")
async def mcp_get() -> Response:
    """No server-initiated event stream is offered."""
    return _method_not_allowed("SSE not supported. Use POST for JSON-RPC requests.")


@router.delete("")
@router.delete("/")
async def mcp_delete() -> Response:
    """There is no session to terminate."""
    return _method_not_allowed("Session management not supported (stateless server).")


@router.post("")
@router.post("/")
async def mcp_post(
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> Response:
    """Handle one JSON-RPC message or batch."""
    content_type = request.headers.get("content-type", "")
    if "application/json" not in content_type.lower():
        return PlainTextResponse(
            "Content-Type must be application/json",
            status_code=415,
            headers=CORS_HEADERS,
        )

    auth = await authenticate_request(request, db, settings)
    if isinstance(auth, Response):
        auth.headers.update(CORS_HEADERS)
        return auth

    try:
        body = json.loads(await request.body())
    except ValueError:
        logger.debug("Rejecting unparseable MCP request body")
        return _json_response(jsonrpc_error(None, types.PARSE_ERROR, "Parse error: invalid JSON"))

    ctx = ToolContext(
        store=auth.store,
        user_id=auth.user_id,
        scraper=partial(
            scrape_url,
            timeout=settings.scrape_timeout,
            user_agent=settings.scrape_user_agent,
        ),
    )
    result = await process_body(body, ctx)

    if result is None:
        return Response(status_code=204, headers=CORS_HEADERS)
    return _json_response(result)
