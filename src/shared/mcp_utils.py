"""
Loading of the MCP server's static text: tool descriptions and instructions.

Descriptions live next to the server code so they can be edited without
touching the handlers. `tools.yaml` maps each tool name to a `description`
and, for tools that take arguments, a `parameters` mapping of argument name
to description.
"""
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import yaml


class ToolDescriptionError(ValueError):
    """Raised when tools.yaml is missing a description the registry needs."""


def load_instructions(directory: Path) -> str:
    """Read the server instructions returned by `initialize`."""
    return (directory / "instructions.md").read_text(encoding="utf-8").strip()


def _clean(text: Any) -> Any:  # noqa: ANN401
    # Folded and literal block scalars keep a trailing newline
    return text.strip() if isinstance(text, str) else text


def load_tool_descriptions(directory: Path) -> dict[str, dict[str, Any]]:
    """
    Read tools.yaml.

    Returns `{tool: {"description": str, "parameters": {name: str}}}` with
    surrounding whitespace removed; tools without arguments get an empty
    `parameters` mapping.

    Raises:
        ToolDescriptionError: If a tool has no description.
    """
    with (directory / "tools.yaml").open(encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    tools: dict[str, dict[str, Any]] = {}
    for name, entry in raw.items():
        description = _clean((entry or {}).get("description"))
        if not description:
            raise ToolDescriptionError(f"Tool '{name}' has no description")
        parameters = (entry or {}).get("parameters") or {}
        tools[name] = {
            "description": description,
            "parameters": {key: _clean(value) for key, value in parameters.items()},
        }
    return tools


def build_input_schema(
    parameter_descriptions: Mapping[str, str],
    properties: Mapping[str, dict[str, Any]],
    required: Iterable[str] = (),
) -> dict[str, Any]:
    """
    Build a JSON Schema object for a tool's arguments.

    Each property schema is combined with its description from tools.yaml.

    Raises:
        ToolDescriptionError: If a property has no description.
    """
    schema_properties = {}
    for name, property_schema in properties.items():
        if name not in parameter_descriptions:
            raise ToolDescriptionError(f"Parameter '{name}' has no description")
        schema_properties[name] = {**property_schema, "description": parameter_descriptions[name]}

    schema: dict[str, Any] = {"type": "object", "properties": schema_properties}
    required = list(required)
    if required:
        schema["required"] = required
    return schema
