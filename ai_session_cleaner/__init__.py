"""
AI Session Cleaner - inventory, preview and delete Claude Code session transcripts.

A small library with a thin CLI layer for finding the per-project JSONL session
files under ~/.claude/projects, measuring them, rendering them as readable text,
and deleting stale ones.

Copyright (c) 2026 Andrew Hundt
Licensed under the Apache License, Version 2.0

Example usage as library:
    from ai_session_cleaner import SessionCatalog

    catalog = SessionCatalog()
    for project in catalog.scan():
        stale = catalog.filter_by_age(project.sessions, 90)
        catalog.delete_sessions(stale)
"""

try:
    from importlib.metadata import version
    __version__ = version("ai_session_cleaner")
except Exception:
    __version__ = "1.0.0"

__author__ = "Andrew Hundt"

from .engine import ProjectDeleteError, RootNotFoundError, SessionCatalog
from .extractors import NO_CONTENT, ContentExtractor
from .filters import SessionFilter
from .formatters import JsonFormatter, PlainFormatter, ProjectTableFormatter, ResultFormatter, SessionTableFormatter, format_size
from .models import Project, Role, Session, Statistics
from .storage import LocalFileSystem
from .types import FileSystemGateway, Formatter

__all__ = [
    "ContentExtractor",
    "FileSystemGateway",
    "Formatter",
    "JsonFormatter",
    "LocalFileSystem",
    "NO_CONTENT",
    "PlainFormatter",
    "Project",
    "ProjectDeleteError",
    "ProjectTableFormatter",
    "ResultFormatter",
    "Role",
    "RootNotFoundError",
    "Session",
    "SessionCatalog",
    "SessionFilter",
    "SessionTableFormatter",
    "Statistics",
    "format_size",
]
