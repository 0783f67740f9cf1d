"""
Core relocation functionality: walking the source tree and dispatching
each media file through the metadata, destination, and relocation steps.
"""

import os
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, FrozenSet, Iterator, List, Optional, Tuple

from rich.table import Table

from .config import RunConfig
from .constants import get_console, get_logger, is_media_file
from .errors import ExifmvError, TraversalError
from .file_operations import FileOperations, RelocationOutcome
from .progress import ProgressContext
from .stats import StatsManager
from .timestamps import get_capture_timestamp, wraps_forward


@dataclass
class FileResult:
    """What happened to one source file (and its sidecar)."""
    source: Path
    outcome: RelocationOutcome
    destination: Optional[Path] = None
    sidecar_outcome: Optional[RelocationOutcome] = None
    error: Optional[Exception] = None
    size: int = 0
    halted: bool = False


def walk_media_files(root: Path, recursive: bool = False, follow_symlinks: bool = False,
                     on_error: Optional[Callable[[TraversalError], None]] = None) -> Iterator[Path]:
    """Yield media files below root.

    Entries are visited in name order within each directory, and a
    subdirectory's contents are yielded before its next sibling. Hidden
    entries (leading '.') are skipped along with everything below them.
    Without ``recursive`` only the root's immediate children are considered.
    Read failures are passed to ``on_error`` (like ``os.walk``'s onerror)
    and the unreadable directory is skipped. A followed link back to a
    directory on the current path is reported the same way and not entered.
    """
    try:
        st = os.stat(root)
    except OSError as e:
        _report(on_error, _traversal_error(root, e))
        return

    yield from _walk_directory(Path(root), recursive, follow_symlinks, on_error,
                               frozenset([(st.st_dev, st.st_ino)]))


def _walk_directory(directory: Path, recursive: bool, follow_symlinks: bool,
                    on_error: Optional[Callable[[TraversalError], None]],
                    ancestors: FrozenSet[Tuple[int, int]]) -> Iterator[Path]:
    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda entry: entry.name)
    except OSError as e:
        _report(on_error, _traversal_error(directory, e))
        return

    for entry in entries:
        if entry.name.startswith('.'):
            continue

        try:
            if not follow_symlinks and entry.is_symlink():
                continue
            is_dir = entry.is_dir(follow_symlinks=follow_symlinks)
            is_file = not is_dir and entry.is_file(follow_symlinks=follow_symlinks)
        except OSError as e:
            _report(on_error, _traversal_error(Path(entry.path), e))
            continue

        if is_dir:
            if not recursive:
                continue
            try:
                st = entry.stat(follow_symlinks=follow_symlinks)
            except OSError as e:
                _report(on_error, _traversal_error(Path(entry.path), e))
                continue
            key = (st.st_dev, st.st_ino)
            if key in ancestors:
                _report(on_error, TraversalError(
                    f"Symbolic link loop at '{entry.path}', not descending."))
                continue
            yield from _walk_directory(Path(entry.path), recursive, follow_symlinks,
                                       on_error, ancestors | {key})
        elif is_file and is_media_file(entry.name):
            yield Path(entry.path)


def _report(on_error: Optional[Callable[[TraversalError], None]], error: TraversalError) -> None:
    if on_error is not None:
        on_error(error)


def _traversal_error(path: Path, cause: OSError) -> TraversalError:
    error = TraversalError(f"Unable to read '{path}'.")
    error.__cause__ = cause
    return error


class ExifMover:
    """Relocates every media file under the source root into date folders."""

    def __init__(self, config: RunConfig):
        self.config = config
        self.console = get_console()
        self.logger = get_logger()
        self.file_ops = FileOperations(config)
        self.stats_manager = StatsManager()
        self._halted = threading.Event()
        self._first_error: Optional[Exception] = None

    def _on_traversal_error(self, error: TraversalError) -> None:
        if self.config.halt_on_errors:
            raise error
        self.logger.warning(str(error))
        self.stats_manager.record_outcome(RelocationOutcome.FAILED)

    def find_source_files(self) -> List[Path]:
        """Walk the source root and collect media files in traversal order."""
        return list(walk_media_files(self.config.source,
                                     recursive=self.config.recursive,
                                     follow_symlinks=self.config.dereference,
                                     on_error=self._on_traversal_error))

    def process_file(self, source: Path) -> FileResult:
        """Run one file through capture time, destination, and relocation.

        Failures are returned in the result rather than raised.
        """
        if self._halted.is_set():
            self.logger.debug(f"Not processing {source}: run is halting")
            return FileResult(source=source, outcome=RelocationOutcome.FAILED, halted=True)

        destination = None
        try:
            capture = get_capture_timestamp(source)
            wrap = wraps_forward(capture, self.config.day_wrap)
            destination = self.file_ops.resolve_destination(capture, wrap, source)
            size = self.file_ops.file_size(source)
            outcome = self.file_ops.relocate(source, destination)
        except ExifmvError as e:
            self._note_failure()
            return FileResult(source=source, outcome=RelocationOutcome.FAILED,
                              destination=destination, error=e)

        result = FileResult(source=source, outcome=outcome, destination=destination, size=size)
        try:
            result.sidecar_outcome = self.file_ops.relocate_sidecar(source, destination)
        except ExifmvError as e:
            self._note_failure()
            result.sidecar_outcome = RelocationOutcome.FAILED
            result.error = e
        return result

    def _note_failure(self) -> None:
        """Stop workers from starting new files once a failure must halt the run."""
        if self.config.halt_on_errors:
            self._halted.set()

    def _record(self, result: FileResult) -> None:
        """Update stats and apply the halt-on-errors policy to one result."""
        if result.halted:
            return

        self.stats_manager.record_outcome(result.outcome, result.size)
        if result.sidecar_outcome is not None:
            self.stats_manager.record_sidecar(result.sidecar_outcome)

        if result.error is None:
            return

        if self.config.halt_on_errors:
            if self._first_error is None:
                self._first_error = result.error
                self.logger.error(f"Halting: {result.error}")
        else:
            self.logger.warning(str(result.error))
            cause = result.error.__cause__
            if cause is not None and self.config.verbose:
                self.logger.warning(f"  caused by: {cause}")

    def run(self, progress_ctx: Optional[ProgressContext] = None) -> StatsManager:
        """Relocate all media files; raise the first failure when halting on errors."""
        progress_ctx = progress_ctx or ProgressContext()
        files = self.find_source_files()
        self.logger.debug(f"Found {len(files)} media files under {self.config.source}")
        progress_ctx.start(len(files))

        with ThreadPoolExecutor(max_workers=self.config.jobs) as executor:
            futures = [executor.submit(self.process_file, path) for path in files]
            for future in as_completed(futures):
                result = future.result()
                self._record(result)
                progress_ctx.file_done(result.source.name)

        if self._first_error is not None:
            raise self._first_error

        if self.config.cleanup:
            self.file_ops.cleanup_source_directory(self.config.source)

        return self.stats_manager

    def print_summary(self) -> None:
        """Print processing summary."""
        stats = self.stats_manager
        table = Table(title="Relocation Summary")
        table.add_column("Outcome", style="cyan")
        table.add_column("Count", style="green")

        table.add_row("Moved", str(stats.get_count(RelocationOutcome.MOVED)))
        table.add_row("Already In Place", str(stats.get_count(RelocationOutcome.SKIPPED_IN_PLACE)))
        table.add_row("Exists, Different Size",
                      str(stats.get_count(RelocationOutcome.SKIPPED_DIFFERENT_SIZE)))
        table.add_row("Duplicates Deleted", str(stats.get_count(RelocationOutcome.DELETED_DUPLICATE)))
        table.add_row("Duplicates Kept", str(stats.get_count(RelocationOutcome.DUPLICATE_KEPT)))
        table.add_row("Sidecars", str(stats.get_sidecars()))
        table.add_row("Failed", str(stats.get_count(RelocationOutcome.FAILED)))

        size_mb = stats.get_total_size_mb()
        if size_mb > 1024:
            size_str = f"{size_mb/1024:.1f} GB"
        else:
            size_str = f"{size_mb:.1f} MB"
        table.add_row("Total Size Moved", size_str)

        self.console.print(table)
