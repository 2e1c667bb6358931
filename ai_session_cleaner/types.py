"""
Type protocols for composable, extensible architecture.

Protocols allow dependency injection and multiple implementations.

Copyright (c) 2026 Andrew Hundt
Licensed under the Apache License, Version 2.0
"""

from pathlib import Path
from typing import Any, Iterator, List, Optional, Protocol, Tuple, runtime_checkable


@runtime_checkable
class FileSystemGateway(Protocol):
    """Protocol for the filesystem primitives the catalog consumes."""

    def locate_root(self) -> Optional[Path]:
        """Return the assistant data root if it exists and is a directory."""
        ...

    def list_child_directories(self, root: Path) -> List[Path]:
        """List immediate subdirectories of root."""
        ...

    def list_files_with_extension(self, directory: Path, ext: str) -> List[Tuple[Path, int, float]]:
        """List (path, size, mtime) of files in directory ending with ext."""
        ...

    def read_lines(self, path: Path, limit: int) -> Iterator[str]:
        """Lazily yield at most limit lines of a file."""
        ...

    def read_whole_file(self, path: Path) -> str:
        """Read a file's full text."""
        ...

    def stat_file(self, path: Path) -> Optional[Tuple[int, float]]:
        """Return (size, mtime) for a file, or None if it does not exist."""
        ...

    def delete_file(self, path: Path) -> bool:
        """Delete one file. Returns False instead of raising on failure."""
        ...

    def delete_directory_recursive(self, path: Path) -> None:
        """Remove a directory tree. Raises OSError on failure."""
        ...


@runtime_checkable
class Formatter(Protocol):
    """Protocol for output formatting."""

    def format(self, data: Any) -> str:
        """Format data for output."""
        ...

    def format_many(self, items: List[Any]) -> str:
        """Format multiple items."""
        ...
