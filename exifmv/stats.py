"""
Statistics tracking for relocation runs.
"""

import threading

from .file_operations import RelocationOutcome


class StatsManager:
    """Counts relocation outcomes; safe to update from worker threads."""

    def __init__(self):
        self._lock = threading.Lock()
        self._stats = {outcome.value: 0 for outcome in RelocationOutcome}
        self._stats['sidecars'] = 0
        self._stats['total_size'] = 0

    def record_outcome(self, outcome: RelocationOutcome, file_size: int = 0) -> None:
        """Record the outcome of one primary file."""
        with self._lock:
            self._stats[outcome.value] += 1
            if outcome is RelocationOutcome.MOVED:
                self._stats['total_size'] += file_size

    def record_sidecar(self, outcome: RelocationOutcome) -> None:
        """Record a relocated sidecar; a failed sidecar counts as a failure."""
        if outcome in (RelocationOutcome.MOVED, RelocationOutcome.DELETED_DUPLICATE):
            with self._lock:
                self._stats['sidecars'] += 1
        elif outcome is RelocationOutcome.FAILED:
            with self._lock:
                self._stats[outcome.value] += 1

    def get_count(self, outcome: RelocationOutcome) -> int:
        with self._lock:
            return self._stats[outcome.value]

    def get_total_files(self) -> int:
        """Get the number of files that reached any outcome."""
        with self._lock:
            return sum(self._stats[outcome.value] for outcome in RelocationOutcome)

    def get_total_size_mb(self) -> float:
        """Get total size of moved files in megabytes."""
        with self._lock:
            return self._stats['total_size'] / (1024 * 1024)

    def get_sidecars(self) -> int:
        with self._lock:
            return self._stats['sidecars']

    def has_errors(self) -> bool:
        """Check if any file failed."""
        return self.get_count(RelocationOutcome.FAILED) > 0
