"""
Command bridge for a desktop GUI shell.

Each function takes plain strings/ints, returns JSON-ready dicts or lists,
and reports failures as BridgeError carrying a user-facing message.

Copyright (c) 2026 Andrew Hundt
Licensed under the Apache License, Version 2.0
"""

from pathlib import Path
from typing import List, Optional

from .engine import ProjectDeleteError, RootNotFoundError, SessionCatalog
from .formatters import format_size
from .models import Project, Session


class BridgeError(Exception):
    """A command failed; str(exc) is the message to show the user."""


def session_dto(session: Session) -> dict:
    """Display-ready session: size as text, age in whole days."""
    return {
        "name": session.name,
        "path": str(session.path),
        "size": format_size(session.size),
        "age_days": session.age_days(),
        "content_preview": session.content_preview,
    }


def project_dto(project: Project) -> dict:
    """Display-ready project including its sessions."""
    return {
        "name": project.name,
        "path": str(project.path),
        "session_count": project.session_count,
        "total_size": format_size(project.total_size),
        "latest_content": project.latest_content,
        "sessions": [session_dto(s) for s in project.sessions],
    }


def _scan(catalog: SessionCatalog) -> List[Project]:
    try:
        return catalog.scan()
    except (RootNotFoundError, OSError) as exc:
        raise BridgeError(f"Failed to scan projects: {exc}") from exc


def _project_at(catalog: SessionCatalog, project_path: str) -> Project:
    path = Path(project_path)
    for project in _scan(catalog):
        if project.path == path:
            return project
    raise BridgeError("Project not found")


def find_claude_directory(catalog: SessionCatalog) -> Optional[str]:
    """Path of the data root, or None if there is none."""
    root = catalog.locate_root()
    return str(root) if root is not None else None


def get_statistics(catalog: SessionCatalog) -> dict:
    try:
        stats = catalog.statistics()
    except (RootNotFoundError, OSError) as exc:
        raise BridgeError(f"Failed to get statistics: {exc}") from exc
    return {
        "total_projects": stats.total_projects,
        "total_sessions": stats.total_sessions,
        "total_size": format_size(stats.total_size),
    }


def scan_projects(catalog: SessionCatalog) -> List[dict]:
    return [project_dto(p) for p in _scan(catalog)]


def get_project_sessions(catalog: SessionCatalog, project_path: str) -> List[dict]:
    return [session_dto(s) for s in _project_at(catalog, project_path).sessions]


def delete_sessions(catalog: SessionCatalog, session_paths: List[str]) -> int:
    """Delete the given session files; paths that no longer exist are skipped.

    Returns:
        Number of files removed.
    """
    sessions = []
    for raw in session_paths:
        path = Path(raw)
        meta = catalog.gateway.stat_file(path)
        if meta is None:
            continue
        size, mtime = meta
        sessions.append(Session(name=path.name, path=path, size=size, modified=mtime))
    return catalog.delete_sessions(sessions)


def delete_project(catalog: SessionCatalog, project_path: str) -> None:
    project = _project_at(catalog, project_path)
    try:
        catalog.delete_project(project)
    except ProjectDeleteError as exc:
        raise BridgeError(str(exc)) from exc


def filter_sessions_by_age(catalog: SessionCatalog, days: int) -> List[dict]:
    """Sessions older than days, across all projects."""
    try:
        sessions = catalog.old_sessions(days)
    except (RootNotFoundError, OSError) as exc:
        raise BridgeError(f"Failed to scan projects: {exc}") from exc
    return [session_dto(s) for s in sessions]


def delete_old_sessions(catalog: SessionCatalog, days: int) -> int:
    """Delete every session older than days. Returns the number removed."""
    try:
        sessions = catalog.old_sessions(days)
    except (RootNotFoundError, OSError) as exc:
        raise BridgeError(f"Failed to scan projects: {exc}") from exc
    return catalog.delete_sessions(sessions)


def get_session_content(catalog: SessionCatalog, session_path: str) -> str:
    """Rendered transcript of one session file."""
    try:
        return catalog.render_session(session_path)
    except OSError as exc:
        raise BridgeError(f"Failed to read session content: {exc}") from exc
