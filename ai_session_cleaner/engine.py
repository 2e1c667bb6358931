"""
Core session catalog: discovery, aggregation, age filtering and deletion.

Copyright (c) 2026 Andrew Hundt
Licensed under the Apache License, Version 2.0
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Union

from .extractors import DEFAULT_PREVIEW_CHARS, PREVIEW_LINE_LIMIT, ContentExtractor
from .filters import SessionFilter
from .models import Project, Session, Statistics
from .storage import LocalFileSystem
from .types import FileSystemGateway

logger = logging.getLogger(__name__)

SESSION_EXT = ".jsonl"

#: Preview every session, or only the newest one of each project.
PREVIEW_SCOPES = ("all", "newest")


class RootNotFoundError(LookupError):
    """No assistant data directory exists. An expected state, not a crash."""


class ProjectDeleteError(OSError):
    """Recursive removal of a project directory failed part-way."""


class SessionCatalog:
    """Inventory of projects and sessions under the assistant data root."""

    def __init__(
        self,
        gateway: Optional[FileSystemGateway] = None,
        extractor: Optional[ContentExtractor] = None,
        preview_scope: str = "all",
        preview_chars: int = DEFAULT_PREVIEW_CHARS,
    ):
        """Initialize catalog.

        Args:
            gateway: Filesystem access (default: LocalFileSystem on ~/.claude).
            extractor: Preview/transcript extractor.
            preview_scope: "all" previews every session at scan time; "newest"
                           previews only each project's newest session, which
                           keeps scans cheap on large histories.
            preview_chars: Maximum preview length in characters.

        Raises:
            ValueError: If preview_scope is not one of PREVIEW_SCOPES.
        """
        if preview_scope not in PREVIEW_SCOPES:
            raise ValueError(f"Invalid preview scope {preview_scope!r}; expected one of {PREVIEW_SCOPES}")
        self.gateway = gateway if gateway is not None else LocalFileSystem()
        self.extractor = extractor if extractor is not None else ContentExtractor()
        self.preview_scope = preview_scope
        self.preview_chars = preview_chars
        self._root: Optional[Path] = None

    # ── Root discovery ───────────────────────────────────────────────────────

    def locate_root(self) -> Optional[Path]:
        """Return the data root, remembered after the first successful lookup.

        A root removed after discovery is not noticed until reset().
        """
        if self._root is None:
            self._root = self.gateway.locate_root()
            if self._root is not None:
                logger.debug("Using data root %s", self._root)
        return self._root

    def reset(self) -> None:
        """Forget the remembered root so the next call looks it up again."""
        self._root = None

    def _require_root(self) -> Path:
        root = self.locate_root()
        if root is None:
            raise RootNotFoundError("Claude directory not found")
        return root

    @property
    def projects_dir(self) -> Path:
        """The ``projects`` directory under the root. Raises RootNotFoundError."""
        return self._require_root() / "projects"

    # ── Scanning ─────────────────────────────────────────────────────────────

    def scan(self) -> List[Project]:
        """Scan every project directory.

        Returns:
            Projects sorted by name, sessions newest first. Projects with no
            sessions are kept so they can still be deleted. Empty list if the
            root has no ``projects`` directory.

        Raises:
            RootNotFoundError: If no data root exists.
            OSError: If a directory cannot be read.
        """
        projects_dir = self.projects_dir
        try:
            project_dirs = self.gateway.list_child_directories(projects_dir)
        except (FileNotFoundError, NotADirectoryError):
            return []

        projects = []
        for project_dir in project_dirs:
            sessions = self.scan_sessions(project_dir, with_previews=self.preview_scope == "all")
            latest_content = None
            if sessions:
                if sessions[0].content_preview is None and self.preview_scope == "newest":
                    sessions[0] = self._with_preview(sessions[0])
                latest_content = sessions[0].content_preview
            projects.append(Project(
                name=project_dir.name,
                path=project_dir,
                sessions=sessions,
                latest_content=latest_content,
            ))

        projects.sort(key=lambda p: p.name)
        logger.debug("Scanned %d projects under %s", len(projects), projects_dir)
        return projects

    def scan_sessions(self, project_dir: Path, with_previews: bool = True) -> List[Session]:
        """List a project's sessions, newest first (ties keep listing order).

        Returns an empty list if the directory no longer exists.
        """
        sessions = [
            Session(name=path.name, path=path, size=size, modified=mtime)
            for path, size, mtime in self.gateway.list_files_with_extension(project_dir, SESSION_EXT)
        ]
        sessions.sort(key=lambda s: s.modified, reverse=True)
        if with_previews:
            sessions = [self._with_preview(s) for s in sessions]
        return sessions

    def _with_preview(self, session: Session) -> Session:
        return Session(
            name=session.name,
            path=session.path,
            size=session.size,
            modified=session.modified,
            content_preview=self.preview(session.path),
        )

    def preview(self, path: Path) -> Optional[str]:
        """Preview of one session file; None if it is blank or unreadable."""
        try:
            return self.extractor.extract_preview(self.gateway.read_lines(path, PREVIEW_LINE_LIMIT), self.preview_chars)
        except OSError as exc:
            logger.debug("No preview for %s: %s", path, exc)
            return None

    def find_project(self, key: Union[str, Path]) -> Optional[Project]:
        """Find a project by directory name or full path in a fresh scan."""
        key_str = str(key)
        for project in self.scan():
            if project.name == key_str or str(project.path) == key_str:
                return project
        return None

    # ── Age filtering ────────────────────────────────────────────────────────

    @staticmethod
    def filter_by_age(sessions: List[Session], threshold_days: int, now: Optional[float] = None) -> List[Session]:
        """Sessions older than threshold_days whole days (strictly greater)."""
        return SessionFilter().older_than(threshold_days, now).apply(sessions)

    def old_sessions(self, threshold_days: int, now: Optional[float] = None) -> List[Session]:
        """Sessions older than threshold_days across all projects, in project order."""
        result: List[Session] = []
        for project in self.scan():
            result.extend(self.filter_by_age(project.sessions, threshold_days, now))
        return result

    # ── Deletion ─────────────────────────────────────────────────────────────

    def delete_sessions(self, sessions: Iterable[Session]) -> int:
        """Delete session files, best effort.

        Per-file failures (including files already gone) are logged and
        skipped; they never abort the batch.

        Returns:
            Number of files actually removed.
        """
        deleted = 0
        failed = 0
        for session in sessions:
            if self.gateway.delete_file(session.path):
                deleted += 1
            else:
                failed += 1
        if failed:
            logger.warning("Deleted %d sessions, %d failed", deleted, failed)
        return deleted

    def delete_project(self, project: Project) -> None:
        """Remove a project directory and everything in it.

        Raises:
            ProjectDeleteError: If any part of the removal fails.
        """
        try:
            self.gateway.delete_directory_recursive(project.path)
        except OSError as exc:
            raise ProjectDeleteError(f"Failed to delete project {project.name!r}: {exc}") from exc
        logger.info("Deleted project %s (%d sessions)", project.name, project.session_count)

    # ── Aggregates and content ───────────────────────────────────────────────

    def statistics(self) -> Statistics:
        """Totals from a fresh full scan."""
        return Statistics.from_projects(self.scan())

    def render_session(self, path: Union[str, Path]) -> str:
        """Full human-readable transcript of one session file.

        Raises:
            OSError: If the file cannot be read.
        """
        return self.extractor.render_transcript(self.gateway.read_whole_file(Path(path)))
