"""Stateless MCP (JSON-RPC 2.0) server exposing the bookmark store as tools."""

from .dispatcher import process_body, process_message
from .tools import TOOL_REGISTRY, ToolContext, ToolName

__all__ = ["TOOL_REGISTRY", "ToolContext", "ToolName", "process_body", "process_message"]
