"""
CLI interface for the editor's Local History.

Usage:
    local-history list
    local-history history /path/to/file.py
    local-history show /path/to/file.py 2
    local-history restore /path/to/file.py 2
    local-history search "needle"
    local-history mcp
"""

import json
from dataclasses import asdict
from typing import Optional

import typer
from typing_extensions import Annotated

from .config import load_config
from .errors import EntryIndexError, HistoryNotFoundError, UnsupportedPlatformError
from .history import LocalHistory
from .logging_config import configure_logging, enable_debug_mode
from .types import local_time, utc_iso


def _version_callback(value: bool):
    if value:
        from importlib.metadata import version
        print(f"local-history {version('local-history-mcp')}")
        raise typer.Exit()


def _verbose_callback(value: bool):
    if value:
        enable_debug_mode()


# Global state for CLI options
_json_output = False


def _json_callback(value: bool):
    global _json_output
    _json_output = value


def _get_json_output() -> bool:
    return _json_output


app = typer.Typer(
    name="local-history",
    help="Browse, search and restore VS Code / Cursor Local History.",
    no_args_is_help=True,
    rich_markup_mode=None,
)


@app.callback()
def main_callback(
    verbose: Annotated[bool, typer.Option(
        "--verbose", "-v",
        help="Enable debug-level logging to stderr",
        callback=_verbose_callback,
        is_eager=True,
    )] = False,
    output_json: Annotated[bool, typer.Option(
        "--json", "-j",
        help="Output as JSON",
        callback=_json_callback,
        is_eager=True,
    )] = False,
    version: Annotated[Optional[bool], typer.Option(
        "--version",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    )] = None,
):
    """Browse, search and restore VS Code / Cursor Local History."""


def _get_history() -> LocalHistory:
    try:
        return LocalHistory()
    except UnsupportedPlatformError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


def _fail(message: str) -> None:
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(1)


# -----------------------------------------------------------------------------
# Commands
# -----------------------------------------------------------------------------

@app.command("list")
def list_files():
    """List all files that have local history."""
    histories = _get_history().get_all_file_histories()

    if _get_json_output():
        typer.echo(json.dumps([
            {
                "path": h.original_file_path,
                "entries": len(h.entries),
                "last_saved": utc_iso(h.latest.timestamp) if h.latest else None,
            }
            for h in histories
        ], indent=2))
        return

    if not histories:
        typer.echo("No files with local history.")
        return
    for h in histories:
        last = local_time(h.latest.timestamp) if h.latest else "-"
        typer.echo(f"{last}  {len(h.entries):4d}  {h.path}")


@app.command()
def history(
    path: Annotated[str, typer.Argument(help="File path or file:// URI")],
):
    """Show all history entries for a file, most recent first."""
    found = _get_history().find_history_by_file_path(path)
    if found is None:
        _fail(f"No local history found for: {path}")

    if _get_json_output():
        typer.echo(json.dumps(found.to_dict(), indent=2))
        return

    typer.echo(f"History for: {found.original_file_path}")
    for index, entry in enumerate(found.entries):
        typer.echo(f"[{index}] {local_time(entry.timestamp)}  {entry.size:8d} chars  {entry.relative_path}")


@app.command()
def show(
    path: Annotated[str, typer.Argument(help="File path or file:// URI")],
    index: Annotated[int, typer.Argument(help="Entry index (0 = most recent)")] = 0,
):
    """Print the content of one history entry."""
    try:
        found, entry = _get_history().get_history_entry(path, index)
    except (HistoryNotFoundError, EntryIndexError) as e:
        _fail(str(e))

    if _get_json_output():
        typer.echo(json.dumps({
            "path": found.original_file_path,
            "index": index,
            "timestamp": entry.timestamp,
            "date": utc_iso(entry.timestamp),
            "content": entry.content,
        }, indent=2))
        return
    typer.echo(entry.content, nl=False)


@app.command()
def restore(
    path: Annotated[str, typer.Argument(help="File path or file:// URI")],
    index: Annotated[int, typer.Argument(help="Entry index to restore (0 = most recent)")],
    backup: Annotated[bool, typer.Option(
        "--backup/--no-backup",
        help="Copy the current file aside before overwriting it",
    )] = True,
):
    """Restore a file to one of its history entries."""
    result = _get_history().restore_from_history(path, index, create_backup=backup)

    if _get_json_output():
        typer.echo(json.dumps(asdict(result), indent=2))
    elif result.success:
        typer.echo(result.message)
    else:
        typer.echo(f"Error: {result.message}", err=True)
    if not result.success:
        raise typer.Exit(1)


@app.command()
def stats():
    """Show totals for the history store."""
    s = _get_history().get_history_stats()

    if _get_json_output():
        d = asdict(s)
        d["average_entries"] = s.average_entries
        typer.echo(json.dumps(d, indent=2))
        return

    average = f"{s.average_entries:.1f}" if s.average_entries is not None else "N/A"
    typer.echo(f"History directory: {s.history_dir_path}")
    typer.echo(f"Directory exists:  {'yes' if s.history_dir_exists else 'no'}")
    typer.echo(f"Files:             {s.total_files}")
    typer.echo(f"Entries:           {s.total_entries}")
    typer.echo(f"Average per file:  {average}")


@app.command()
def search(
    term: Annotated[str, typer.Argument(help="Text to search for (literal)")],
    case_sensitive: Annotated[bool, typer.Option(
        "--case-sensitive", "-c",
        help="Match case exactly",
    )] = False,
):
    """Search all history entries for text."""
    matches = _get_history().search_history_content(term, case_sensitive=case_sensitive)

    if _get_json_output():
        typer.echo(json.dumps([asdict(m) for m in matches], indent=2))
        return

    if not matches:
        typer.echo(f'No matches found for "{term}".')
        return
    for m in matches:
        plural = "" if m.match_count == 1 else "es"
        typer.echo(f"{m.file}  [{m.entry_index}] {m.timestamp}  {m.match_count} match{plural}")


@app.command()
def mcp():
    """Start MCP stdio server for AI agent integration."""
    from .mcp import main as mcp_main
    mcp_main()


# -----------------------------------------------------------------------------

def main():
    config = load_config()
    if config.verbose:
        enable_debug_mode()
    else:
        configure_logging(config.effective_level)
    try:
        app()
    except SystemExit:
        raise  # Let typer handle exit codes
    except KeyboardInterrupt:
        raise SystemExit(130)  # Standard exit code for Ctrl+C
    except Exception as e:
        # Log full traceback to file, show clean message to user
        from .errors import log_exception
        log_path = log_exception(e, context="local-history CLI", log_path=config.error_log_path)
        typer.echo(f"Error: {e}", err=True)
        typer.echo(f"Details logged to {log_path}", err=True)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
