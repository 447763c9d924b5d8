"""Tests for JSON-RPC envelope helpers."""
from mcp import types

from mcp_server.protocol import (
    dump_result,
    jsonrpc_error,
    jsonrpc_success,
    protocol_error,
    tool_error,
    tool_result,
)


def test__jsonrpc_success() -> None:
    assert jsonrpc_success(7, {"ok": True}) == {"jsonrpc": "2.0", "id": 7, "result": {"ok": True}}


def test__jsonrpc_error__omits_empty_data() -> None:
    assert jsonrpc_error(None, -32700, "Parse error") == {
        "jsonrpc": "2.0",
        "id": None,
        "error": {"code": -32700, "message": "Parse error"},
    }


def test__jsonrpc_error__includes_data() -> None:
    envelope = jsonrpc_error("a", -32602, "Bad", data={"field": "query"})

    assert envelope["error"]["data"] == {"field": "query"}


def test__protocol_error__carries_code_and_message() -> None:
    error = protocol_error(types.METHOD_NOT_FOUND, "Unknown tool: nope")

    assert error.error.code == -32601
    assert error.error.message == "Unknown tool: nope"


def test__tool_result_and_error__serialize_with_protocol_names() -> None:
    assert dump_result(tool_result("done")) == {
        "content": [{"type": "text", "text": "done"}],
        "isError": False,
    }
    assert dump_result(tool_error("failed"))["isError"] is True


def test__dump_result__passes_plain_values_through() -> None:
    assert dump_result({}) == {}
    assert dump_result(None) is None
