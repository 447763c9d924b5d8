"""
JSON-RPC 2.0 dispatcher for the stateless MCP endpoint.

`process_body` takes a parsed request body (one message or a batch) and
returns the response payload: a response dict, a list of them, or None when
nothing should be sent back (every message was a notification).

Protocol failures travel as `McpError` and are converted to JSON-RPC error
envelopes here and only here. Exceptions raised by a tool handler never
become protocol errors: they are reported as `isError` tool results.
"""
import logging
from pathlib import Path
from typing import Any

from mcp import types
from mcp.shared.exceptions import McpError

from core.config import get_settings
from shared.mcp_utils import load_instructions

from .protocol import (
    JSONRPC_VERSION,
    MCP_PROTOCOL_VERSION,
    dump_result,
    jsonrpc_error,
    jsonrpc_success,
    protocol_error,
    tool_error,
)
from .tools import TOOL_DEFINITIONS, TOOL_REGISTRY, ToolContext

logger = logging.getLogger(__name__)

INSTRUCTIONS = load_instructions(Path(__file__).parent)

JsonRpcResponse = dict[str, Any]


def _initialize_result() -> types.InitializeResult:
    settings = get_settings()
    return types.InitializeResult(
        protocolVersion=MCP_PROTOCOL_VERSION,
        capabilities=types.ServerCapabilities(tools=types.ToolsCapability()),
        serverInfo=types.Implementation(
            name=settings.mcp_server_name,
            version=settings.mcp_server_version,
        ),
        instructions=INSTRUCTIONS,
    )


async def call_tool(params: dict[str, Any], ctx: ToolContext) -> types.CallToolResult:
    """
    Handle `tools/call`.

    Raises:
        McpError: INVALID_PARAMS if the tool name is missing or the arguments
            do not validate, METHOD_NOT_FOUND if no such tool is registered.
    """
    name = params.get("name")
    if not name or not isinstance(name, str):
        raise protocol_error(types.INVALID_PARAMS, "Missing tool name")

    tool = TOOL_REGISTRY.get(name)
    if tool is None:
        raise protocol_error(types.METHOD_NOT_FOUND, f"Unknown tool: {name}")

    raw_arguments = params.get("arguments") or {}
    if not isinstance(raw_arguments, dict):
        raise protocol_error(types.INVALID_PARAMS, "Tool arguments must be an object")
    arguments = tool.parse_arguments(raw_arguments)

    try:
        return await tool.handler(arguments, ctx)
    except Exception as e:
        logger.exception("Tool %s raised", name)
        return tool_error(f"Tool execution failed: {e}")


async def dispatch(method: str, params: dict[str, Any], ctx: ToolContext) -> Any:  # noqa: ANN401
    """Route a method to its implementation and return the (unserialized) result."""
    match method:
        case "initialize":
            return _initialize_result()
        case "ping":
            return {}
        case "notifications/initialized":
            return None
        case "tools/list":
            return {"tools": [dump_result(t) for t in TOOL_DEFINITIONS]}
        case "tools/call":
            return await call_tool(params, ctx)
        case _:
            raise protocol_error(types.METHOD_NOT_FOUND, f"Method not found: {method}")


def _is_valid_request(message: Any) -> bool:  # noqa: ANN401
    return (
        isinstance(message, dict)
        and message.get("jsonrpc") == JSONRPC_VERSION
        and isinstance(message.get("method"), str)
        and bool(message["method"])
    )


async def process_message(message: Any, ctx: ToolContext) -> JsonRpcResponse | None:  # noqa: ANN401
    """
    Process one JSON-RPC message.

    Returns None for notifications (no id), whether they succeed or fail, and
    for malformed messages that carry no id to answer.
    """
    request_id = message.get("id") if isinstance(message, dict) else None

    if not _is_valid_request(message):
        if request_id is None:
            logger.debug("Dropping malformed message without id")
            return None
        return jsonrpc_error(
            request_id,
            types.INVALID_REQUEST,
            "Invalid Request: missing jsonrpc or method",
        )

    is_notification = request_id is None
    params = message.get("params")
    if not isinstance(params, dict):
        params = {}

    try:
        result = await dispatch(message["method"], params, ctx)
    except McpError as e:
        if is_notification:
            return None
        return jsonrpc_error(request_id, e.error.code, e.error.message, e.error.data)
    except Exception as e:
        logger.exception("Internal error handling %s", message["method"])
        if is_notification:
            return None
        return jsonrpc_error(request_id, types.INTERNAL_ERROR, f"Internal error: {e}")

    if is_notification:
        return None
    return jsonrpc_success(request_id, dump_result(result))


async def process_body(
    body: Any,  # noqa: ANN401
    ctx: ToolContext,
) -> JsonRpcResponse | list[JsonRpcResponse] | None:
    """
    Process a parsed request body.

    Batch entries are handled one at a time in order; each contributes at
    most one response and a failing entry does not stop the rest. Returns
    None when there is nothing to send.
    """
    if isinstance(body, list):
        responses = []
        for message in body:
            response = await process_message(message, ctx)
            if response is not None:
                responses.append(response)
        return responses or None

    return await process_message(body, ctx)
