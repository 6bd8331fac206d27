"""
Per-file results and run statistics for sorting operations.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, Optional


class FileStatus(Enum):
    PROCESSED = "processed"
    SKIPPED = "skipped"
    ERROR = "error"


@dataclass(frozen=True)
class FileResult:
    """Outcome of processing one file."""
    path: Path
    status: FileStatus
    warnings: int = 0
    destination: Optional[Path] = None


class RunStats:
    """Aggregates FileResults into run totals."""

    def __init__(self, results: Iterable[FileResult] = ()):
        self._stats = {
            'processed': 0,
            'skipped': 0,
            'warnings': 0,
            'errors': 0,
        }
        for result in results:
            self.add(result)

    def add(self, result: FileResult) -> None:
        """Fold a single file result into the totals."""
        if result.status is FileStatus.PROCESSED:
            self._stats['processed'] += 1
        elif result.status is FileStatus.SKIPPED:
            self._stats['skipped'] += 1
        else:
            self._stats['errors'] += 1
        self._stats['warnings'] += result.warnings

    def get_stats(self) -> Dict[str, int]:
        """Get a copy of current statistics."""
        return self._stats.copy()

    def has_errors(self) -> bool:
        return self._stats['errors'] > 0

    @property
    def processed(self) -> int:
        return self._stats['processed']

    @property
    def skipped(self) -> int:
        return self._stats['skipped']

    @property
    def warnings(self) -> int:
        return self._stats['warnings']

    @property
    def errors(self) -> int:
        return self._stats['errors']
