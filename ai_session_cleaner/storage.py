"""
Local filesystem gateway used by the session catalog.

Copyright (c) 2026 Andrew Hundt
Licensed under the Apache License, Version 2.0
"""

import itertools
import logging
import os
import shutil
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

logger = logging.getLogger(__name__)


def default_claude_dir() -> Path:
    """Default assistant data root: $CLAUDE_CONFIG_DIR if set, otherwise ~/.claude."""
    env_val = os.getenv("CLAUDE_CONFIG_DIR")
    if env_val:
        return Path(env_val).expanduser()
    return Path.home() / ".claude"


class LocalFileSystem:
    """FileSystemGateway over the local disk."""

    def __init__(self, claude_dir: Optional[Path] = None):
        """Initialize with the candidate root directory (default: ~/.claude)."""
        self.claude_dir = Path(claude_dir).expanduser() if claude_dir else default_claude_dir()

    def locate_root(self) -> Optional[Path]:
        if self.claude_dir.is_dir():
            return self.claude_dir
        return None

    def list_child_directories(self, root: Path) -> List[Path]:
        """List immediate subdirectories. Raises OSError if root is unreadable."""
        with os.scandir(root) as it:
            return [Path(entry.path) for entry in it if entry.is_dir()]

    def list_files_with_extension(self, directory: Path, ext: str) -> List[Tuple[Path, int, float]]:
        """List (path, size, mtime) for regular files named ``*<ext>``.

        Returns an empty list if ``directory`` is gone: a project can vanish
        between listing the root and scanning it.
        """
        results = []
        try:
            it = os.scandir(directory)
        except FileNotFoundError:
            return results
        with it:
            for entry in it:
                if not entry.name.endswith(ext) or not entry.is_file():
                    continue
                try:
                    st = entry.stat()
                except FileNotFoundError:
                    continue
                results.append((Path(entry.path), st.st_size, st.st_mtime))
        return results

    def read_lines(self, path: Path, limit: int) -> Iterator[str]:
        """Yield at most ``limit`` lines without reading the rest of the file."""
        with open(path, encoding="utf-8", errors="replace") as f:
            for line in itertools.islice(f, limit):
                yield line.rstrip("\r\n")

    def read_whole_file(self, path: Path) -> str:
        with open(path, encoding="utf-8", errors="replace") as f:
            return f.read()

    def stat_file(self, path: Path) -> Optional[Tuple[int, float]]:
        try:
            st = Path(path).stat()
        except FileNotFoundError:
            return None
        return st.st_size, st.st_mtime

    def delete_file(self, path: Path) -> bool:
        """Remove one file; log and return False on failure."""
        try:
            os.remove(path)
        except OSError as exc:
            logger.warning("Failed to delete %s: %s", path, exc)
            return False
        logger.debug("Deleted %s", path)
        return True

    def delete_directory_recursive(self, path: Path) -> None:
        """Remove a directory tree. Any failure propagates as OSError."""
        shutil.rmtree(path)
        logger.debug("Deleted directory %s", path)
