"""
Thin CLI layer - orchestrates library components without business logic.

Copyright (c) 2026 Andrew Hundt
Licensed under the Apache License, Version 2.0
"""

import json
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from .engine import PREVIEW_SCOPES, ProjectDeleteError, RootNotFoundError, SessionCatalog
from .extractors import DEFAULT_PREVIEW_CHARS
from .filters import SessionFilter
from .formatters import format_size, get_formatter
from .menu import TerminalMenu
from .models import Project, Session
from .storage import LocalFileSystem

app = typer.Typer(
    help=(
        "Inventory, preview and delete Claude Code session transcripts stored in ~/.claude/projects/.\n\n"
        "Each project directory holds one JSONL file per session. This tool shows how much space they "
        "use, previews and renders them, and deletes stale ones by age, by selection, or by project.\n\n"
        "Override default paths with environment variables:\n\n"
        "  CLAUDE_CONFIG_DIR          Path to Claude config dir (default: ~/.claude)\n\n"
        "  AI_SESSION_CLEANER_CONFIG  Path to this tool's config file"
    ),
)
config_app = typer.Typer(
    help=(
        "View and manage the ai_session_cleaner config file.\n\n"
        "Config file location (priority order):\n\n"
        "  1. --config CLI flag\n"
        "  2. AI_SESSION_CLEANER_CONFIG env var\n"
        "  3. OS default: ~/Library/Application Support/ai_session_cleaner/config.json (macOS)\n"
        "               : ~/.config/ai_session_cleaner/config.json (Linux)"
    ),
)
app.add_typer(config_app, name="config", rich_help_panel="Configuration")

console = Console()
err_console = Console(stderr=True)

DEFAULT_AGE_DAYS = 30

# Module-level overrides set by global options
_g_claude_dir: Optional[str] = None
_g_config_path: Optional[str] = None
_config_cache: Optional[dict] = None  # lazily loaded, reset per process


def _get_config_file_path() -> Path:
    """Return the resolved config file path based on current priority chain."""
    if _g_config_path:
        return Path(_g_config_path).expanduser()
    env_val = os.getenv("AI_SESSION_CLEANER_CONFIG")
    if env_val:
        return Path(env_val).expanduser()
    return Path(typer.get_app_dir("ai_session_cleaner")) / "config.json"


def load_config() -> dict:
    """Load app config from JSON file. Returns empty dict if not found or unreadable.

    Config file location priority:
      1. ``--config`` CLI flag (set on the root app callback)
      2. ``AI_SESSION_CLEANER_CONFIG`` environment variable
      3. OS-appropriate default via ``typer.get_app_dir("ai_session_cleaner")``

    Supported keys (all optional):

    - ``claude_dir`` (string): Claude data root, used when neither
      ``--claude-dir`` nor ``CLAUDE_CONFIG_DIR`` is given.
    - ``preview_chars`` (int): preview length in characters (default 80).
    - ``preview_scope`` (string): ``"all"`` previews every session during a
      scan, ``"newest"`` only each project's newest session.
    - ``default_age_days`` (int): threshold for ``aisc old`` when no DAYS
      argument is given (default 30).

    Example ``config.json``::

        {
            "preview_chars": 100,
            "preview_scope": "newest",
            "default_age_days": 14
        }
    """
    global _config_cache
    if _config_cache is not None:
        return _config_cache

    config_file = _get_config_file_path()
    if config_file.exists():
        try:
            with open(config_file, encoding="utf-8") as f:
                _config_cache = json.load(f)
        except (json.JSONDecodeError, OSError) as exc:
            err_console.print(f"[yellow]Warning: could not load config {escape(str(config_file))}: {escape(str(exc))}[/yellow]")
            _config_cache = {}
        if not isinstance(_config_cache, dict):
            err_console.print(f"[yellow]Warning: config {escape(str(config_file))} is not a JSON object[/yellow]")
            _config_cache = {}
    else:
        _config_cache = {}

    return _config_cache


def _config_int(cfg: dict, key: str, default: int) -> int:
    """Integer config value; warn and fall back to default when it is not one."""
    value = cfg.get(key, default)
    try:
        return int(value)
    except (TypeError, ValueError):
        err_console.print(f"[yellow]Warning: invalid {key} {escape(repr(value))} in config, using {default}[/yellow]")
        return default


def _setup_logging(verbose: bool) -> None:
    """Route library log records to stderr through Rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False, show_time=False)],
    )
    logging.getLogger("ai_session_cleaner").setLevel(logging.DEBUG if verbose else logging.WARNING)


# ── Root app callback (global options) ────────────────────────────────────────

@app.callback(invoke_without_command=True)
def app_callback(
    ctx: typer.Context,
    claude_dir: Optional[str] = typer.Option(
        None, "--claude-dir",
        help=(
            "Path to the Claude configuration directory. "
            "Default: $CLAUDE_CONFIG_DIR if set, otherwise ~/.claude. "
            "Example: --claude-dir /Volumes/External/.claude"
        ),
        envvar="CLAUDE_CONFIG_DIR",
    ),
    config: Optional[str] = typer.Option(
        None, "--config",
        help=(
            "Path to the ai_session_cleaner config JSON file. "
            "Also overridable via AI_SESSION_CLEANER_CONFIG env var."
        ),
        envvar="AI_SESSION_CLEANER_CONFIG",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug details to stderr."),
) -> None:
    global _g_claude_dir, _g_config_path, _config_cache
    _g_claude_dir = claude_dir
    if config != _g_config_path:
        _g_config_path = config
        _config_cache = None  # invalidate cache when path changes
    _setup_logging(verbose)
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(0)


# ── Catalog factory ───────────────────────────────────────────────────────────

def get_catalog() -> SessionCatalog:
    """
    Create a catalog from global options, environment and config.

    Priority for Claude config dir: --claude-dir CLI flag > CLAUDE_CONFIG_DIR env var
    > config ``claude_dir`` > ~/.claude
    """
    cfg = load_config()
    claude_dir = _g_claude_dir or os.getenv("CLAUDE_CONFIG_DIR") or cfg.get("claude_dir")

    preview_scope = cfg.get("preview_scope", "all")
    if preview_scope not in PREVIEW_SCOPES:
        err_console.print(f"[yellow]Warning: ignoring invalid preview_scope {preview_scope!r}[/yellow]")
        preview_scope = "all"

    return SessionCatalog(
        gateway=LocalFileSystem(Path(claude_dir).expanduser() if claude_dir else None),
        preview_scope=preview_scope,
        preview_chars=_config_int(cfg, "preview_chars", DEFAULT_PREVIEW_CHARS),
    )


# ── Shared helper functions ───────────────────────────────────────────────────

def _catalog_call(fn, *args):
    """Run a catalog operation, turning a missing root or unreadable directory into exit code 1."""
    try:
        return fn(*args)
    except RootNotFoundError:
        err_console.print(
            "[yellow]Claude directory not found.[/yellow] "
            "Check that Claude Code is installed or pass --claude-dir."
        )
        raise typer.Exit(code=1)
    except OSError as exc:
        err_console.print(f"[red]Failed to scan projects:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1)


def _find_project_or_exit(projects: List[Project], key: str) -> Project:
    """Match a project by exact directory name or path, else by unique substring."""
    for project in projects:
        if project.name == key or str(project.path) == key:
            return project
    matches = [p for p in projects if key.lower() in p.name.lower()]
    if len(matches) == 1:
        return matches[0]
    if not matches:
        err_console.print(f"[red]Project not found:[/red] {escape(key)}")
    else:
        err_console.print(
            f"[red]Ambiguous project {escape(key)!r} matches {len(matches)} projects:[/red] "
            + ", ".join(escape(p.name) for p in matches[:5])
        )
    raise typer.Exit(code=1)


def _print_items(items: list, fmt: str, kind: str, title: str, empty_msg: str) -> None:
    """Render items in the requested format."""
    try:
        formatter = get_formatter(fmt, kind=kind, title=title)
    except ValueError as exc:
        err_console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)
    if fmt == "json":
        # Write directly to stdout: bypasses Rich markup rendering + ANSI codes
        sys.stdout.write(formatter.format_many(items) + "\n")
        return
    if not items:
        console.print(f"[yellow]{empty_msg}[/yellow]")
        return
    if fmt == "table":
        sys.stdout.write(formatter.format_many(items))
    else:
        console.print(formatter.format_many(items), markup=False, highlight=False)


def _confirm_or_abort(message: str, yes: bool) -> None:
    if yes:
        return
    if not typer.confirm(message, default=False):
        err_console.print("[yellow]Aborted.[/yellow]")
        raise typer.Exit(code=1)


def _do_delete(catalog: SessionCatalog, sessions: List[Session]) -> None:
    """Delete sessions and report how many went and how much space was freed."""
    deleted = catalog.delete_sessions(sessions)
    if deleted == len(sessions):
        freed = sum(s.size for s in sessions)
        console.print(f"[green]Deleted {deleted} sessions[/green] ({format_size(freed)})")
    else:
        console.print(f"[yellow]Deleted {deleted} of {len(sessions)} sessions[/yellow] (see warnings for failures)")


def _do_old(
    catalog: SessionCatalog,
    days: int,
    delete: bool = False,
    yes: bool = False,
    dry_run: bool = False,
    fmt: str = "table",
) -> None:
    """List sessions older than days; optionally delete them."""
    sessions = _catalog_call(catalog.old_sessions, days)
    if not delete:
        _print_items(sessions, fmt, "sessions", f"Sessions older than {days} days", f"No sessions older than {days} days found")
        return
    if not sessions:
        console.print(f"[yellow]No sessions older than {days} days found[/yellow]")
        return
    total = sum(s.size for s in sessions)
    err_console.print(f"Will delete {len(sessions)} sessions older than {days} days ({format_size(total)})")
    if dry_run:
        for s in sessions:
            err_console.print(f"  {escape(str(s.path))}")
        err_console.print("[yellow][dry run] no files deleted[/yellow]")
        return
    _confirm_or_abort(f"Delete {len(sessions)} sessions?", yes)
    _do_delete(catalog, sessions)


# ── Commands ─────────────────────────────────────────────────────────────────

@app.command()
def root() -> None:
    """Print the Claude data directory in use.

    Examples:
        aisc root
        aisc --claude-dir /tmp/claude root
    """
    found = get_catalog().locate_root()
    if found is None:
        err_console.print("[yellow]Claude directory not found.[/yellow]")
        raise typer.Exit(code=1)
    console.print(str(found), markup=False, highlight=False, soft_wrap=True)


@app.command()
def stats(
    fmt: str = typer.Option("table", "--format", "-f", help="Output format: table, json, plain."),
) -> None:
    """Show counts of projects and sessions and their total size."""
    totals = _catalog_call(get_catalog().statistics)
    if fmt == "json":
        sys.stdout.write(json.dumps(totals.to_dict(), indent=2) + "\n")
        return
    if fmt in ("plain", "csv"):
        console.print(get_formatter("plain").format(totals), markup=False, highlight=False)
        return
    console.print(
        f"""
[bold cyan]Session Statistics[/bold cyan]
  Projects:      {totals.total_projects}
  Sessions:      {totals.total_sessions}
  Total Size:    {format_size(totals.total_size)}
"""
    )


@app.command()
def projects(
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Show at most N projects."),
    fmt: str = typer.Option("table", "--format", "-f", help="Output format: table, json, plain."),
) -> None:
    """List projects with session counts and total size, sorted by name.

    Examples:
        aisc projects
        aisc projects --format json
    """
    found = _catalog_call(get_catalog().scan)
    if limit is not None:
        found = found[:limit]
    _print_items(found, fmt, "projects", "Projects", "No projects found")


@app.command()
def sessions(
    project: str = typer.Argument(..., help="Project directory name, full path, or unique substring."),
    older_than: Optional[int] = typer.Option(None, "--older-than", help="Only sessions older than N days."),
    min_size: int = typer.Option(0, "--min-size", help="Only sessions at least this many bytes."),
    name: Optional[str] = typer.Option(None, "--name", help="Glob on the session file name, e.g. 'ab84*'."),
    fmt: str = typer.Option("table", "--format", "-f", help="Output format: table, json, plain."),
) -> None:
    """List the sessions of one project, newest first.

    Examples:
        aisc sessions my-project
        aisc sessions my-project --older-than 30 --min-size 100000
    """
    found = _find_project_or_exit(_catalog_call(get_catalog().scan), project)
    session_filter = SessionFilter()
    if older_than is not None:
        session_filter.older_than(older_than)
    if min_size:
        session_filter.by_size(min_size)
    if name:
        session_filter.by_name(name)
    _print_items(
        session_filter(found.sessions), fmt, "sessions",
        f"Sessions in {found.name}", "No sessions found",
    )


@app.command()
def show(
    session_path: str = typer.Argument(..., help="Path to a session .jsonl file."),
) -> None:
    """Print a session transcript as readable, role-labelled text.

    Examples:
        aisc show ~/.claude/projects/-Users-me-proj/ab841016.jsonl | less
    """
    try:
        text = get_catalog().render_session(Path(session_path).expanduser())
    except OSError as exc:
        err_console.print(f"[red]Failed to read session content:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1)
    sys.stdout.write(text + "\n")


@app.command()
def old(
    days: Optional[int] = typer.Argument(None, help="Age threshold in days (default: config default_age_days or 30)."),
    delete: bool = typer.Option(False, "--delete", help="Delete the listed sessions."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what --delete would remove without removing it."),
    fmt: str = typer.Option("table", "--format", "-f", help="Output format: table, json, plain."),
) -> None:
    """List (or with --delete, remove) sessions older than DAYS whole days.

    A session qualifies when its age is strictly greater than DAYS.

    Examples:
        aisc old 30
        aisc old 90 --delete --dry-run
        aisc old 90 --delete --yes
    """
    if days is None:
        days = _config_int(load_config(), "default_age_days", DEFAULT_AGE_DAYS)
    if days < 0:
        err_console.print("[red]DAYS must be zero or positive[/red]")
        raise typer.Exit(code=1)
    _do_old(get_catalog(), days, delete=delete, yes=yes, dry_run=dry_run, fmt=fmt)


@app.command()
def delete(
    session_paths: List[str] = typer.Argument(..., help="Session .jsonl files to delete."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
) -> None:
    """Delete specific session files. Missing files are skipped, not fatal.

    Examples:
        aisc delete ~/.claude/projects/-Users-me-proj/ab841016.jsonl --yes
    """
    catalog = get_catalog()
    targets = []
    for raw in session_paths:
        path = Path(raw).expanduser()
        meta = catalog.gateway.stat_file(path)
        if meta is None:
            err_console.print(f"[yellow]Skipping missing file:[/yellow] {escape(str(path))}")
            continue
        targets.append(Session(name=path.name, path=path, size=meta[0], modified=meta[1]))
    if not targets:
        console.print("[yellow]Nothing to delete[/yellow]")
        return
    _confirm_or_abort(f"Delete {len(targets)} sessions?", yes)
    _do_delete(catalog, targets)


@app.command("delete-project")
def delete_project(
    project: str = typer.Argument(..., help="Project directory name, full path, or unique substring."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be removed without removing it."),
) -> None:
    """Delete a project directory and every session in it. Cannot be undone.

    Examples:
        aisc delete-project -Users-me-old-proj --dry-run
        aisc delete-project -Users-me-old-proj --yes
    """
    catalog = get_catalog()
    found = _find_project_or_exit(_catalog_call(catalog.scan), project)
    err_console.print(
        f"Will delete project {escape(found.name)} "
        f"({found.session_count} sessions, {format_size(found.total_size)})"
    )
    if dry_run:
        err_console.print("[yellow][dry run] nothing deleted[/yellow]")
        return
    _confirm_or_abort(f"Delete project '{found.name}' and all its sessions?", yes)
    try:
        catalog.delete_project(found)
    except ProjectDeleteError as exc:
        err_console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]Deleted project[/green] {escape(found.name)}")


@app.command()
def menu(
    pause: float = typer.Option(1.0, "--pause", help="Seconds transient messages stay on screen."),
) -> None:
    """Interactive menu: statistics, per-project cleanup, cleanup by age, project removal."""
    TerminalMenu(get_catalog(), console=console, pause=pause).run()


# ── Config app ───────────────────────────────────────────────────────────────

@config_app.command("path")
def config_path() -> None:
    """Print the config file path (whether or not the file exists).

    Examples:
        aisc config path
        aisc --config /tmp/my.json config path   # show path after override
    """
    console.print(str(_get_config_file_path()), markup=False, highlight=False, soft_wrap=True)


@config_app.command("show")
def config_show(
    fmt: str = typer.Option("table", "--format", "-f", help="Output format: table, json, plain."),
) -> None:
    """Show the effective configuration (file contents + resolved path).

    Examples:
        aisc config show
        aisc config show --format json
    """
    config_file = _get_config_file_path()
    cfg = load_config()

    if fmt == "json":
        sys.stdout.write(json.dumps({
            "config_file": str(config_file),
            "exists": config_file.exists(),
            "config": cfg,
        }, indent=2) + "\n")
        return

    console.print(f"Config file: [cyan]{escape(str(config_file))}[/cyan]", soft_wrap=True)
    if not config_file.exists():
        console.print("[yellow]File does not exist. Run 'aisc config init' to create it.[/yellow]")
        return

    if not cfg:
        console.print("[dim]File exists but is empty (no keys set).[/dim]")
        return

    if fmt in ("plain", "csv"):
        for k, v in cfg.items():
            console.print(f"{k}: {v}", markup=False, highlight=False)
        return

    from rich.table import Table
    table = Table(title=f"Config ({config_file.name})")
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for k, v in cfg.items():
        table.add_row(k, json.dumps(v) if not isinstance(v, str) else v)
    console.print(table)


_CONFIG_INIT_TEMPLATE = {
    "preview_chars": DEFAULT_PREVIEW_CHARS,
    "preview_scope": "all",
    "default_age_days": DEFAULT_AGE_DAYS,
}


@config_app.command("init")
def config_init(
    force: bool = typer.Option(
        False, "--force",
        help="Overwrite the config file if it already exists.",
    ),
) -> None:
    """Create a starter config.json with documented default values.

    Safe by default: will NOT overwrite an existing config file unless --force is given.

    Examples:
        aisc config init             # create if not exists
        aisc config init --force     # overwrite existing file
    """
    config_file = _get_config_file_path()

    if config_file.exists() and not force:
        err_console.print(
            f"[yellow]Config file already exists:[/yellow] {escape(str(config_file))}\n"
            "Use --force to overwrite."
        )
        raise typer.Exit(code=1)

    config_file.parent.mkdir(parents=True, exist_ok=True)
    config_file.write_text(json.dumps(_CONFIG_INIT_TEMPLATE, indent=2) + "\n", encoding="utf-8")

    # Invalidate cache so next command picks up the new file
    global _config_cache
    _config_cache = None

    console.print(f"[green]Created:[/green] {escape(str(config_file))}", soft_wrap=True)


# ── Entry point ───────────────────────────────────────────────────────────────

def cli_main():
    """CLI entry point."""
    app()
