"""
Bookmark tools exposed over MCP.

The registry is a closed mapping from `ToolName` to a `RegisteredTool` that
pairs the MCP tool definition with a pydantic argument model and an async
handler. It is built once at import and never mutated.

Handlers translate their own known failures (store errors, missing rows)
into tool-level error results. Anything else they raise is caught by the
dispatcher and reported the same way.
"""
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Generic, TypeVar
from uuid import UUID

from mcp import types
from pydantic import ValidationError

from schemas.bookmark import BOOKMARK_STATUSES, BOOKMARK_TYPES
from schemas.mcp_tools import (
    CreateBookmarkArguments,
    DeleteBookmarkArguments,
    ListBookmarksArguments,
    NoArguments,
    RandomBookmarkArguments,
    SearchBookmarksArguments,
    ToolArguments,
    UpdateBookmarkArguments,
)
from schemas.validators import normalize_tags
from services import bookmark_creator
from services.bookmark_creator import Scraper
from services.bookmark_store import BookmarkStore
from services.exceptions import StoreError
from services.random_sampler import sample_bookmarks
from services.url_scraper import scrape_url
from shared.mcp_format import format_bookmark, format_bookmark_list, format_stats, format_tag_counts
from shared.mcp_utils import build_input_schema, load_tool_descriptions

from .protocol import protocol_error, tool_error, tool_result

logger = logging.getLogger(__name__)

_DESCRIPTIONS = load_tool_descriptions(Path(__file__).parent)


class ToolName(StrEnum):
    """Names of the registered tools."""

    SEARCH_BOOKMARKS = "search_bookmarks"
    LIST_BOOKMARKS = "list_bookmarks"
    LIST_TAGS = "list_tags"
    GET_STATS = "get_stats"
    RANDOM_BOOKMARK = "random_bookmark"
    CREATE_BOOKMARK = "create_bookmark"
    UPDATE_BOOKMARK = "update_bookmark"
    DELETE_BOOKMARK = "delete_bookmark"


@dataclass(frozen=True)
class ToolContext:
    """Per-request context handed to every tool handler."""

    store: BookmarkStore
    user_id: UUID
    scraper: Scraper = scrape_url


ArgsT = TypeVar("ArgsT", bound=ToolArguments)
ToolHandler = Callable[[ArgsT, ToolContext], Awaitable[types.CallToolResult]]


@dataclass(frozen=True)
class RegisteredTool(Generic[ArgsT]):
    """A tool definition bound to its argument model and handler."""

    definition: types.Tool
    arguments: type[ArgsT]
    handler: ToolHandler

    def parse_arguments(self, raw: Mapping[str, Any]) -> ArgsT:
        """
        Validate raw call arguments.

        Raises:
            McpError: INVALID_PARAMS when a required field is missing or a
                field has the wrong type or enum value.
        """
        try:
            return self.arguments.model_validate(raw)
        except ValidationError as e:
            details = "; ".join(
                f"{'.'.join(str(loc) for loc in err['loc']) or 'arguments'}: {err['msg']}"
                for err in e.errors()
            )
            raise protocol_error(
                types.INVALID_PARAMS,
                f"Invalid arguments for {self.definition.name}: {details}",
            ) from e


# --- Input schema helpers ---


_STRING = {"type": "string"}
_NUMBER = {"type": "number"}
_BOOLEAN = {"type": "boolean"}
_TAGS = {"type": "array", "items": {"type": "string"}}
_TYPE_ENUM = {"type": "string", "enum": BOOKMARK_TYPES}
_STATUS_ENUM = {"type": "string", "enum": BOOKMARK_STATUSES}


def _definition(
    name: ToolName,
    properties: dict[str, dict[str, Any]] | None = None,
    required: list[str] | None = None,
    read_only: bool = False,
) -> types.Tool:
    text = _DESCRIPTIONS[name.value]
    return types.Tool(
        name=name.value,
        description=text["description"],
        inputSchema=build_input_schema(text["parameters"], properties or {}, required or ()),
        annotations=types.ToolAnnotations(readOnlyHint=read_only),
    )


# --- Handlers ---


async def _handle_search_bookmarks(
    args: SearchBookmarksArguments,
    ctx: ToolContext,
) -> types.CallToolResult:
    try:
        bookmarks, count = await ctx.store.search_bookmarks(
            ctx.user_id, args.query, args.filters(), args.limit,
        )
    except StoreError as e:
        return tool_error(f"Search failed: {e}")
    return tool_result(format_bookmark_list(bookmarks, count))


async def _handle_list_bookmarks(
    args: ListBookmarksArguments,
    ctx: ToolContext,
) -> types.CallToolResult:
    try:
        bookmarks, count = await ctx.store.list_bookmarks(
            ctx.user_id,
            args.filters(),
            offset=args.offset,
            limit=args.limit,
            top=args.top,
        )
    except StoreError as e:
        return tool_error(f"List failed: {e}")
    return tool_result(format_bookmark_list(bookmarks, count))


async def _handle_list_tags(args: NoArguments, ctx: ToolContext) -> types.CallToolResult:  # noqa: ARG001
    try:
        tags = await ctx.store.tag_counts(ctx.user_id)
    except StoreError as e:
        return tool_error(f"Failed to list tags: {e}")
    return tool_result(format_tag_counts(tags))


async def _handle_get_stats(args: NoArguments, ctx: ToolContext) -> types.CallToolResult:  # noqa: ARG001
    try:
        stats = await ctx.store.stats(ctx.user_id)
    except StoreError as e:
        return tool_error(f"Stats failed: {e}")
    return tool_result(format_stats(stats))


async def _handle_random_bookmark(
    args: RandomBookmarkArguments,
    ctx: ToolContext,
) -> types.CallToolResult:
    try:
        sample = await sample_bookmarks(ctx.store, ctx.user_id, args.filters(), args.count)
    except StoreError as e:
        return tool_error(f"Random selection failed: {e}")

    if sample.population == 0:
        return tool_result("No matching bookmarks found.")
    if not sample.bookmarks:
        return tool_result("No bookmarks found.")
    return tool_result(format_bookmark_list(sample.bookmarks, len(sample.bookmarks)))


async def _handle_create_bookmark(
    args: CreateBookmarkArguments,
    ctx: ToolContext,
) -> types.CallToolResult:
    try:
        bookmark = await bookmark_creator.create_bookmark(
            ctx.store, ctx.user_id, args, ctx.scraper,
        )
    except StoreError as e:
        return tool_error(f"Create failed: {e}")
    if bookmark is None:
        return tool_error("Create succeeded but no data returned.")
    return tool_result(f"Bookmark created:\n\n{format_bookmark(bookmark)}")


async def _handle_update_bookmark(
    args: UpdateBookmarkArguments,
    ctx: ToolContext,
) -> types.CallToolResult:
    changes = args.changes()
    if not changes:
        return tool_error("No fields to update. Provide at least one field to change.")
    if changes.get("tags") is not None:
        changes["tags"] = normalize_tags(changes["tags"])
    changes["modified_at"] = datetime.now(UTC)

    try:
        bookmark = await ctx.store.update_bookmark(ctx.user_id, args.id, changes)
    except StoreError as e:
        return tool_error(f"Update failed: {e}")
    if bookmark is None:
        return tool_error("Bookmark not found or access denied.")
    return tool_result(f"Bookmark updated:\n\n{format_bookmark(bookmark)}")


async def _handle_delete_bookmark(
    args: DeleteBookmarkArguments,
    ctx: ToolContext,
) -> types.CallToolResult:
    values = {"status": "inactive", "modified_at": datetime.now(UTC)}
    try:
        bookmark = await ctx.store.update_bookmark(ctx.user_id, args.id, values)
    except StoreError as e:
        return tool_error(f"Delete failed: {e}")
    if bookmark is None:
        return tool_error("Bookmark not found or access denied.")
    return tool_result(f"Bookmark moved to trash:\n\n{format_bookmark(bookmark)}")


# --- Registry ---

_FILTER_PROPERTIES = {
    "limit": _NUMBER,
    "star": _BOOLEAN,
    "status": _STATUS_ENUM,
    "tag": _STRING,
    "type": _TYPE_ENUM,
}

TOOL_REGISTRY: Mapping[str, RegisteredTool] = MappingProxyType({
    ToolName.SEARCH_BOOKMARKS: RegisteredTool(
        definition=_definition(
            ToolName.SEARCH_BOOKMARKS,
            {"query": _STRING, **_FILTER_PROPERTIES},
            required=["query"],
            read_only=True,
        ),
        arguments=SearchBookmarksArguments,
        handler=_handle_search_bookmarks,
    ),
    ToolName.LIST_BOOKMARKS: RegisteredTool(
        definition=_definition(
            ToolName.LIST_BOOKMARKS,
            {
                **_FILTER_PROPERTIES,
                "offset": _NUMBER,
                "public": _BOOLEAN,
                "top": _BOOLEAN,
            },
            read_only=True,
        ),
        arguments=ListBookmarksArguments,
        handler=_handle_list_bookmarks,
    ),
    ToolName.LIST_TAGS: RegisteredTool(
        definition=_definition(ToolName.LIST_TAGS, read_only=True),
        arguments=NoArguments,
        handler=_handle_list_tags,
    ),
    ToolName.GET_STATS: RegisteredTool(
        definition=_definition(ToolName.GET_STATS, read_only=True),
        arguments=NoArguments,
        handler=_handle_get_stats,
    ),
    ToolName.RANDOM_BOOKMARK: RegisteredTool(
        definition=_definition(
            ToolName.RANDOM_BOOKMARK,
            {"count": _NUMBER, "tag": _STRING, "type": _TYPE_ENUM},
            read_only=True,
        ),
        arguments=RandomBookmarkArguments,
        handler=_handle_random_bookmark,
    ),
    ToolName.CREATE_BOOKMARK: RegisteredTool(
        definition=_definition(
            ToolName.CREATE_BOOKMARK,
            {
                "url": _STRING,
                "title": _STRING,
                "description": _STRING,
                "type": _TYPE_ENUM,
                "tags": _TAGS,
                "note": _STRING,
                "star": _BOOLEAN,
                "public": _BOOLEAN,
                "scrape": _BOOLEAN,
            },
            required=["url"],
        ),
        arguments=CreateBookmarkArguments,
        handler=_handle_create_bookmark,
    ),
    ToolName.UPDATE_BOOKMARK: RegisteredTool(
        definition=_definition(
            ToolName.UPDATE_BOOKMARK,
            {
                "id": _STRING,
                "title": _STRING,
                "description": _STRING,
                "note": _STRING,
                "tags": _TAGS,
                "type": _TYPE_ENUM,
                "star": _BOOLEAN,
                "public": _BOOLEAN,
                "status": _STATUS_ENUM,
            },
            required=["id"],
        ),
        arguments=UpdateBookmarkArguments,
        handler=_handle_update_bookmark,
    ),
    ToolName.DELETE_BOOKMARK: RegisteredTool(
        definition=_definition(
            ToolName.DELETE_BOOKMARK,
            {"id": _STRING},
            required=["id"],
        ),
        arguments=DeleteBookmarkArguments,
        handler=_handle_delete_bookmark,
    ),
})

TOOL_DEFINITIONS: tuple[types.Tool, ...] = tuple(t.definition for t in TOOL_REGISTRY.values())
