"""
Composable session filters.

Copyright (c) 2026 Andrew Hundt
Licensed under the Apache License, Version 2.0
"""

import fnmatch
from typing import Callable, List, Optional

from .models import Session


class SessionFilter:
    """Composable session filter (all predicates ANDed)."""

    def __init__(self):
        """Initialize filter."""
        self._predicates: List[Callable[[Session], bool]] = []

    def older_than(self, days: int, now: Optional[float] = None) -> "SessionFilter":
        """Keep sessions whose age in whole days is strictly greater than days."""

        def predicate(s: Session) -> bool:
            return s.age_days(now) > days

        self._predicates.append(predicate)
        return self

    def by_size(self, min_size: int = 0, max_size: Optional[int] = None) -> "SessionFilter":
        """Filter by file size in bytes.

        Uses 'is not None' so max_size=0 correctly keeps only empty files.
        """

        def predicate(s: Session) -> bool:
            if s.size < min_size:
                return False
            if max_size is not None and s.size > max_size:
                return False
            return True

        self._predicates.append(predicate)
        return self

    def by_name(self, pattern: str) -> "SessionFilter":
        """Filter by case-insensitive glob on the file name (e.g. 'ab84*')."""
        pattern_lower = pattern.lower()

        def predicate(s: Session) -> bool:
            return fnmatch.fnmatchcase(s.name.lower(), pattern_lower)

        self._predicates.append(predicate)
        return self

    def custom(self, predicate: Callable[[Session], bool]) -> "SessionFilter":
        """Add custom filter predicate."""
        self._predicates.append(predicate)
        return self

    def apply(self, sessions: List[Session]) -> List[Session]:
        """Apply all filters, preserving input order."""
        result = sessions
        for predicate in self._predicates:
            result = [s for s in result if predicate(s)]
        return list(result)

    def __call__(self, sessions: List[Session]) -> List[Session]:
        """Support callable interface."""
        return self.apply(sessions)
