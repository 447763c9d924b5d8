"""
JSON-RPC 2.0 envelope helpers and MCP protocol constants.

Error codes and result types come from the MCP SDK (`mcp.types`); envelopes
are plain dicts ready for JSON serialization.
"""
from typing import Any

from mcp import types
from mcp.shared.exceptions import McpError

JSONRPC_VERSION = "2.0"
MCP_PROTOCOL_VERSION = "2025-03-26"

RequestId = str | int


def jsonrpc_success(request_id: RequestId | None, result: Any) -> dict[str, Any]:  # noqa: ANN401
    """Build a JSON-RPC success response."""
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}


def jsonrpc_error(
    request_id: RequestId | None,
    code: int,
    message: str,
    data: Any = None,  # noqa: ANN401
) -> dict[str, Any]:
    """
    Build a JSON-RPC error response.

    `request_id` is None when the request could not be parsed far enough to
    recover its id. `data` is omitted from the envelope when None.
    """
    error: dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "error": error}


def protocol_error(code: int, message: str) -> McpError:
    """Create the exception the dispatcher turns into a JSON-RPC error."""
    return McpError(types.ErrorData(code=code, message=message))


def tool_result(text: str) -> types.CallToolResult:
    """Successful tool result with a single text block."""
    return types.CallToolResult(content=[types.TextContent(type="text", text=text)])


def tool_error(text: str) -> types.CallToolResult:
    """Tool-level failure, reported inside a successful JSON-RPC response."""
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=text)],
        isError=True,
    )


def dump_result(result: Any) -> Any:  # noqa: ANN401
    """Serialize SDK models to JSON-ready dicts using protocol field names."""
    if isinstance(result, types.Result | types.Tool | types.CallToolResult):
        return result.model_dump(by_alias=True, exclude_none=True, mode="json")
    return result
