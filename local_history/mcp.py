"""
MCP stdio server for local-history-mcp.

Exposes the editor's Local History (VS Code / Cursor snapshots) as MCP tools
so AI agents can browse, search and restore earlier versions of files.

Usage:
    local-history mcp                                 # stdio server (via CLI)
    claude mcp add local-history -- local-history mcp # Claude Code integration

All tool calls are serialized through a single asyncio.Lock.
"""

import asyncio
import logging
from typing import Annotated, Callable, Optional, TypeVar

from mcp import types
from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from mcp.shared.exceptions import McpError
from mcp.types import INTERNAL_ERROR, INVALID_PARAMS, METHOD_NOT_FOUND, ErrorData, ToolAnnotations
from pydantic import Field, ValidationError

from .config import load_config
from .errors import EntryIndexError, HistoryNotFoundError
from .history import LocalHistory
from .logging_config import configure_logging
from .paths import is_absolute
from .types import local_time, utc_iso

logger = logging.getLogger(__name__)

T = TypeVar("T")

# ---------------------------------------------------------------------------
# Server setup
# ---------------------------------------------------------------------------

mcp = FastMCP(
    "local-history",
    instructions=(
        "Read-only access to the editor's Local History: every save of every "
        "file, newest first. List files with history, inspect or search past "
        "versions, and restore a file to an earlier version."
    ),
)

_history: Optional[LocalHistory] = None
_lock = asyncio.Lock()


def _get_history() -> LocalHistory:
    """Lazy-init LocalHistory on the OS default store.

    Must be called inside ``async with _lock``.
    """
    global _history
    if _history is None:
        _history = LocalHistory()
    return _history


# ---------------------------------------------------------------------------
# Tool annotations
# ---------------------------------------------------------------------------

_READ_ONLY = ToolAnnotations(readOnlyHint=True, destructiveHint=False)
_DESTRUCTIVE = ToolAnnotations(readOnlyHint=False, destructiveHint=True, idempotentHint=False)

_FILE_PATH_DESCRIPTION = (
    'The absolute path to the file (e.g. "/Users/user/project/biome.json"). '
    "A file:// URI is also accepted."
)


# ---------------------------------------------------------------------------
# Validation and error wrapping
# ---------------------------------------------------------------------------

def _require_absolute(file_path: str) -> None:
    if not is_absolute(file_path):
        raise McpError(ErrorData(
            code=INVALID_PARAMS,
            message="filePath must be an absolute path",
        ))


def _run(fn: Callable[[], T]) -> T:
    """Call into the history store, reporting unexpected failures as internal errors.

    Lookup outcomes (not found, index out of range) pass through for the
    tool to render as text.
    """
    try:
        return fn()
    except (McpError, HistoryNotFoundError, EntryIndexError):
        raise
    except Exception as e:
        logger.exception("Tool execution failed")
        raise McpError(ErrorData(
            code=INTERNAL_ERROR,
            message=f"Tool execution failed: {e}",
        )) from e


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------


@mcp.tool(
    description="List all files that have local history entries.",
    annotations=_READ_ONLY,
)
async def list_history_files() -> str:
    """List files with history."""
    async with _lock:
        histories = _run(lambda: _get_history().get_all_file_histories())

    lines = [f"Found {len(histories)} files with local history:"]
    for history in histories:
        latest = history.latest
        last_saved = utc_iso(latest.timestamp if latest else 0)
        lines.append("")
        lines.append(f"- {history.original_file_path}")
        lines.append(f"    {len(history.entries)} history entries")
        lines.append(f"    Last saved: {last_saved}")
    return "\n".join(lines)


@mcp.tool(
    description="Get the complete local history for a specific file, most recent first.",
    annotations=_READ_ONLY,
)
async def get_file_history(
    filePath: Annotated[str, Field(description=_FILE_PATH_DESCRIPTION)],
) -> str:
    """Show all entries for one file."""
    _require_absolute(filePath)
    async with _lock:
        history = _run(lambda: _get_history().find_history_by_file_path(filePath))

    if history is None:
        return f"No local history found for: {filePath}"

    blocks = []
    for index, entry in enumerate(history.entries):
        blocks.append(
            f"[{index}] {local_time(entry.timestamp)}\n"
            f"     File: {entry.relative_path}\n"
            f"     Size: {entry.size} characters"
        )
    return (
        f"History for: {history.original_file_path}\n"
        f"Total entries: {len(history.entries)}\n\n"
        f"History entries (most recent first):\n\n" + "\n\n".join(blocks)
    )


@mcp.tool(
    description="Get the content of one history entry for a file.",
    annotations=_READ_ONLY,
)
async def get_history_entry(
    filePath: Annotated[str, Field(description=_FILE_PATH_DESCRIPTION)],
    entryIndex: Annotated[int, Field(
        description="Index of the history entry (0 = most recent).",
    )],
) -> str:
    """Show one entry's content."""
    _require_absolute(filePath)
    async with _lock:
        try:
            history, entry = _run(
                lambda: _get_history().get_history_entry(filePath, entryIndex)
            )
        except (HistoryNotFoundError, EntryIndexError) as e:
            return str(e)

    return (
        f"History Entry {entryIndex} for: {history.original_file_path}\n"
        f"Timestamp: {local_time(entry.timestamp)}\n"
        f"Size: {entry.size} characters\n\n"
        f"Content:\n```\n{entry.content}\n```"
    )


@mcp.tool(
    description=(
        "Restore a file to a specific point in its local history. "
        "By default the current file is backed up first."
    ),
    annotations=_DESTRUCTIVE,
)
async def restore_from_history(
    filePath: Annotated[str, Field(description=_FILE_PATH_DESCRIPTION)],
    entryIndex: Annotated[int, Field(
        description="Index of the history entry to restore (0 = most recent).",
    )],
    createBackup: Annotated[bool, Field(
        description="Back up the current file before overwriting it.",
    )] = True,
) -> str:
    """Restore a file from history."""
    _require_absolute(filePath)
    async with _lock:
        result = _run(
            lambda: _get_history().restore_from_history(filePath, entryIndex, createBackup)
        )
    return result.message


@mcp.tool(
    description="Get statistics about the local history (total files, entries, location).",
    annotations=_READ_ONLY,
)
async def get_history_stats() -> str:
    """Store statistics."""
    async with _lock:
        stats = _run(lambda: _get_history().get_history_stats())

    average = stats.average_entries
    return (
        "Local History Statistics\n\n"
        f"History directory: {stats.history_dir_path}\n"
        f"Directory exists: {'yes' if stats.history_dir_exists else 'no'}\n"
        f"Total files with history: {stats.total_files}\n"
        f"Total history entries: {stats.total_entries}\n"
        f"Average entries per file: {f'{average:.1f}' if average is not None else 'N/A'}"
    )


@mcp.tool(
    description="Search for text across all local history entries (literal match, not regex).",
    annotations=_READ_ONLY,
)
async def search_history_content(
    searchTerm: Annotated[str, Field(description="The text to search for.")],
    caseSensitive: Annotated[bool, Field(
        description="Whether the search is case sensitive.",
    )] = False,
) -> str:
    """Search history content."""
    async with _lock:
        matches = _run(
            lambda: _get_history().search_history_content(searchTerm, caseSensitive)
        )

    if not matches:
        return f'No matches found for "{searchTerm}" in local history.'

    blocks = []
    for m in matches:
        plural = "" if m.match_count == 1 else "es"
        blocks.append(
            f"- {m.file}\n"
            f"    Entry {m.entry_index} ({m.timestamp})\n"
            f"    {m.match_count} match{plural}"
        )
    return f'Found {len(matches)} entries containing "{searchTerm}":\n\n' + "\n\n".join(blocks)


# ---------------------------------------------------------------------------
# Protocol errors
# ---------------------------------------------------------------------------

def _invalid_params_message(err: ValidationError) -> str:
    missing = [str(e["loc"][0]) for e in err.errors() if e["type"] == "missing"]
    if missing:
        noun = "parameter" if len(missing) == 1 else "parameters"
        return f"Missing required {noun}: {', '.join(missing)}"
    details = "; ".join(
        f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in err.errors()
    )
    return f"Invalid parameters: {details}"


def _protocol_error(err: BaseException) -> McpError:
    """Map the cause of a failed tool call onto a JSON-RPC error."""
    if isinstance(err, McpError):
        return err
    if isinstance(err, ValidationError):
        return McpError(ErrorData(code=INVALID_PARAMS, message=_invalid_params_message(err)))
    return McpError(ErrorData(code=INTERNAL_ERROR, message=f"Tool execution failed: {err}"))


async def _call_tool(req: types.CallToolRequest) -> types.ServerResult:
    """Handle tools/call so that errors reach the client as JSON-RPC errors.

    FastMCP's own handler folds every failure into a ``CallToolResult`` with
    ``isError`` set, dropping the error code.
    """
    name = req.params.name
    if mcp._tool_manager.get_tool(name) is None:
        raise McpError(ErrorData(code=METHOD_NOT_FOUND, message=f"Unknown tool: {name}"))
    try:
        result = await mcp.call_tool(name, req.params.arguments or {})
    except ToolError as e:
        raise _protocol_error(e.__cause__ or e) from e

    if isinstance(result, types.CallToolResult):
        return types.ServerResult(result)
    structured = None
    if isinstance(result, tuple):
        result, structured = result
    return types.ServerResult(types.CallToolResult(
        content=list(result),
        structuredContent=structured,
        isError=False,
    ))


mcp._mcp_server.request_handlers[types.CallToolRequest] = _call_tool


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main():
    """Run the MCP stdio server."""
    import os
    import signal
    # anyio's stdin reader shields the blocking readline from cancellation,
    # so the first Ctrl+C would otherwise be swallowed.
    signal.signal(signal.SIGINT, lambda *_: os._exit(130))

    config = load_config()
    configure_logging(config.effective_level)

    global _history
    # Resolve the store before serving: an unsupported OS fails here, not on
    # the first tool call.
    _history = LocalHistory()
    logger.info("Local History MCP server started on stdio (store: %s)", _history.history_dir)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
