"""
Output formatters with multiple output types.

Copyright (c) 2026 Andrew Hundt
Licensed under the Apache License, Version 2.0
"""

import json
from abc import ABC, abstractmethod
from typing import Any, List, Optional

from rich.console import Console
from rich.table import Table

from .models import Project, Session, Statistics

_SIZE_UNITS = ("B", "KB", "MB", "GB")


def format_size(num_bytes: int) -> str:
    """Human-readable byte count: '512 B', '1.5 KB', '3.2 MB'. Never above GB."""
    size = float(num_bytes)
    unit = 0
    while size >= 1024 and unit < len(_SIZE_UNITS) - 1:
        size /= 1024
        unit += 1
    if unit == 0:
        return f"{int(num_bytes)} B"
    return f"{size:.1f} {_SIZE_UNITS[unit]}"


def _short(text: Optional[str], limit: int) -> str:
    if not text:
        return ""
    return text if len(text) <= limit else text[:limit - 1] + "…"


class ResultFormatter(ABC):
    """Base formatter protocol."""

    @abstractmethod
    def format(self, data: Any) -> str:
        """Format data for output."""
        pass

    @abstractmethod
    def format_many(self, items: List[Any]) -> str:
        """Format multiple items."""
        pass


def _capture(table: Table) -> str:
    console = Console()
    with console.capture() as capture:
        console.print(table)
    return capture.get()


class ProjectTableFormatter(ResultFormatter):
    """Format projects as a Rich table."""

    def __init__(self, title: str = "Projects"):
        """Initialize with title."""
        self.title = title

    def format(self, data: Project) -> str:
        """Format single project."""
        lines = [
            f"Name:      {data.name}",
            f"Path:      {data.path}",
            f"Sessions:  {data.session_count}",
            f"Size:      {format_size(data.total_size)}",
            f"Latest:    {data.latest_content or '—'}",
        ]
        return "\n".join(lines)

    def format_many(self, items: List[Project]) -> str:
        """Format multiple projects as table."""
        table = Table(title=f"{self.title} ({len(items)} total)")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Project", style="cyan")
        table.add_column("Sessions", justify="right", style="magenta")
        table.add_column("Size", justify="right", style="green")
        table.add_column("Latest", style="dim")
        for i, item in enumerate(items, 1):
            table.add_row(
                str(i),
                item.name,
                str(item.session_count),
                format_size(item.total_size),
                _short(item.latest_content, 50),
            )
        return _capture(table)


class SessionTableFormatter(ResultFormatter):
    """Format sessions as a Rich table."""

    def __init__(self, title: str = "Sessions"):
        """Initialize with title."""
        self.title = title

    def format(self, data: Session) -> str:
        """Format single session."""
        lines = [
            f"Name:      {data.name}",
            f"Path:      {data.path}",
            f"Size:      {format_size(data.size)}",
            f"Modified:  {data.modified_datetime:%Y-%m-%d %H:%M}",
            f"Age:       {data.age_days()} days",
            f"Preview:   {data.content_preview or '—'}",
        ]
        return "\n".join(lines)

    def format_many(self, items: List[Session]) -> str:
        """Format multiple sessions as table."""
        table = Table(title=f"{self.title} ({len(items)} total)")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Session", style="cyan", no_wrap=True)
        table.add_column("Size", justify="right", style="green")
        table.add_column("Modified", style="blue")
        table.add_column("Age", justify="right", style="magenta")
        table.add_column("Preview", style="dim")
        for i, item in enumerate(items, 1):
            table.add_row(
                str(i),
                item.name,
                format_size(item.size),
                f"{item.modified_datetime:%Y-%m-%d %H:%M}",
                f"{item.age_days()}d",
                _short(item.content_preview, 60),
            )
        return _capture(table)


class JsonFormatter(ResultFormatter):
    """Format models as JSON via their to_dict()."""

    def format(self, data: Any) -> str:
        """Format single item."""
        return json.dumps(data.to_dict(), indent=2, ensure_ascii=False)

    def format_many(self, items: List[Any]) -> str:
        """Format multiple items as JSON array."""
        return json.dumps([item.to_dict() for item in items], indent=2, ensure_ascii=False)


class PlainFormatter(ResultFormatter):
    """Simple plain text formatter, one line per item."""

    def format(self, data: Any) -> str:
        """Format single item."""
        if isinstance(data, Project):
            return f"{data.name}\t{data.session_count}\t{format_size(data.total_size)}"
        if isinstance(data, Session):
            return f"{data.path}\t{format_size(data.size)}\t{data.age_days()}d\t{data.content_preview or ''}"
        if isinstance(data, Statistics):
            return (
                f"projects={data.total_projects} sessions={data.total_sessions} "
                f"size={format_size(data.total_size)}"
            )
        return str(data)

    def format_many(self, items: List[Any]) -> str:
        """Format multiple items."""
        return "\n".join(self.format(item) for item in items)


def get_formatter(format_type: str, kind: str = "sessions", title: Optional[str] = None) -> ResultFormatter:
    """Factory function to get formatter by output type and item kind.

    Args:
        format_type: "table", "json" or "plain".
        kind: "projects" or "sessions"; selects the table layout.
        title: Table title override.

    Raises:
        ValueError: If format_type is unknown.
    """
    fmt = format_type.lower()
    if fmt == "json":
        return JsonFormatter()
    if fmt in ("plain", "csv"):
        return PlainFormatter()
    if fmt == "table":
        if kind == "projects":
            return ProjectTableFormatter(title or "Projects")
        return SessionTableFormatter(title or "Sessions")
    raise ValueError(f"Unknown format: {format_type}")
