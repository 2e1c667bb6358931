"""
Data models for session cleanup - using modern Python patterns.

Includes dataclasses and enums for sessions, projects and statistics.

Copyright (c) 2026 Andrew Hundt
Licensed under the Apache License, Version 2.0
"""

import datetime
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional

SECONDS_PER_DAY = 86400


class Role(str, Enum):
    """Speaker role of one transcript record."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"
    TOOL = "tool"
    FUNCTION = "function"
    ENTRY = "entry"

    @property
    def label(self) -> str:
        """Header label shown above the record's text in a rendered transcript."""
        return _ROLE_LABELS[self]


_ROLE_LABELS = {
    Role.USER: "\U0001f464 USER",
    Role.ASSISTANT: "\U0001f916 CLAUDE",
    Role.SYSTEM: "\u2699\ufe0f SYSTEM",
    Role.TOOL: "\U0001f6e0\ufe0f TOOL",
    Role.FUNCTION: "\U0001f4cc FUNCTION",
    Role.ENTRY: "\U0001f4dd ENTRY",
}


@dataclass(frozen=True)
class Session:
    """One JSONL transcript file.

    Attributes:
        name: File name (e.g., "ab841016-....jsonl")
        path: Full file path
        size: File size in bytes at scan time
        modified: POSIX modification time at scan time (seconds)
        content_preview: Short single-line summary of the first meaningful record
    """

    name: str
    path: Path
    size: int
    modified: float
    content_preview: Optional[str] = None

    def age_days(self, now: Optional[float] = None) -> int:
        """Whole days since last modification. Never negative, even under clock skew."""
        if now is None:
            now = time.time()
        elapsed = now - self.modified
        if elapsed <= 0:
            return 0
        return int(elapsed // SECONDS_PER_DAY)

    @property
    def modified_datetime(self) -> datetime.datetime:
        """Modification time in the local timezone."""
        return datetime.datetime.fromtimestamp(self.modified).astimezone()

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "path": str(self.path),
            "size": self.size,
            "modified": self.modified_datetime.strftime("%Y-%m-%dT%H:%M:%S"),
            "age_days": self.age_days(),
            "content_preview": self.content_preview,
        }


@dataclass
class Project:
    """Directory grouping the sessions of one workspace.

    Sessions are ordered newest-modified first. ``total_size`` is derived from
    ``sessions`` on every access so it cannot drift from their sizes.
    """

    name: str
    path: Path
    sessions: List[Session] = field(default_factory=list)
    latest_content: Optional[str] = None

    @property
    def total_size(self) -> int:
        """Sum of the sizes of all sessions in the project."""
        return sum(s.size for s in self.sessions)

    @property
    def session_count(self) -> int:
        """Number of sessions in this project."""
        return len(self.sessions)

    @property
    def is_empty(self) -> bool:
        """True when the directory holds no session files."""
        return not self.sessions

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "path": str(self.path),
            "session_count": self.session_count,
            "total_size": self.total_size,
            "latest_content": self.latest_content,
            "sessions": [s.to_dict() for s in self.sessions],
        }


@dataclass
class Statistics:
    """Totals across a single catalog scan."""

    total_projects: int = 0
    total_sessions: int = 0
    total_size: int = 0

    @classmethod
    def from_projects(cls, projects: Iterable[Project]) -> "Statistics":
        """Fold a scan snapshot into totals."""
        stats = cls()
        for project in projects:
            stats.total_projects += 1
            stats.total_sessions += project.session_count
            stats.total_size += project.total_size
        return stats

    @property
    def avg_sessions_per_project(self) -> float:
        """Average number of sessions per project."""
        if self.total_projects == 0:
            return 0.0
        return self.total_sessions / self.total_projects

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "total_projects": self.total_projects,
            "total_sessions": self.total_sessions,
            "total_size": self.total_size,
        }
