"""
File operations for relocating media: destination paths, the move/skip/dedupe
decision, sidecars, and source cleanup.
"""

import enum
import os
from pathlib import Path
from typing import Optional

from send2trash import send2trash

from .config import DuplicatePolicy, RunConfig
from .constants import SIDECAR_SUFFIXES, get_logger
from .errors import FileOperationError
from .timestamps import CaptureTimestamp


class RelocationOutcome(enum.Enum):
    """Result of relocating one file."""
    MOVED = "moved"
    SKIPPED_IN_PLACE = "in_place"
    SKIPPED_DIFFERENT_SIZE = "different_size"
    DELETED_DUPLICATE = "deleted_duplicate"
    DUPLICATE_KEPT = "duplicate_kept"
    FAILED = "failed"


class FileOperations:
    """Destination resolution and the collision-safe relocation policy.

    A source file is only ever removed by a successful rename to a path that
    did not exist, or, under the remove/trash policy, after an equal-size file
    was found at its destination. Existing destinations are never written to.

    The existence check and the rename are not atomic together: two workers
    relocating different sources to the same destination can race. Callers
    that need a guarantee must serialize relocations per destination.
    """

    def __init__(self, config: RunConfig):
        self.config = config
        self.dry_run = config.dry_run
        self.logger = get_logger()

    def _report(self, message: str) -> None:
        """Log a non-mutating decision; only shown when verbose or dry-running."""
        if self.config.verbose or self.dry_run:
            self.logger.info(message)

    def _prefix(self) -> str:
        return "[DRY RUN] " if self.dry_run else ""

    def ensure_directory(self, directory: Path) -> None:
        """Create directory and parents if needed, with dry-run support."""
        if directory.is_dir():
            return

        if self.dry_run:
            self.logger.info(f"[DRY RUN] Would create directory {directory}")
            return

        try:
            # Concurrent workers may create the same bucket
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FileOperationError(
                f"Unable to create destination folder '{directory}'.") from e

    def resolve_destination(self, capture: CaptureTimestamp, wrap: int, source: Path) -> Path:
        """Build <dest>/<year>/<month>/<day>/<name> and make sure the folder exists.

        ``wrap`` is added to the day as-is; a capture wrapping past the last
        day of a month lands in day 29-32 of that month.
        """
        directory = (self.config.dest / str(capture.year) / f"{capture.month:02d}"
                     / f"{capture.day + wrap:02d}")
        self.ensure_directory(directory)

        name = source.name.lower() if self.config.make_lowercase else source.name
        return directory / name

    @staticmethod
    def find_sidecar(source: Path) -> Optional[Path]:
        """Return the first existing ``<name>.xmp`` / ``<name>.XMP`` next to source."""
        for suffix in SIDECAR_SUFFIXES:
            sidecar = source.with_name(source.name + suffix)
            if sidecar.is_file():
                return sidecar
        return None

    def sidecar_destination(self, sidecar: Path, source: Path, destination: Path) -> Path:
        """Append the sidecar's own suffix casing to the destination file name."""
        suffix = sidecar.name[len(source.name):]
        if self.config.make_lowercase:
            suffix = suffix.lower()
        return destination.with_name(destination.name + suffix)

    @staticmethod
    def file_size(path: Path) -> int:
        try:
            return path.stat().st_size
        except OSError as e:
            raise FileOperationError(f"Unable to read size of '{path}'.") from e

    @staticmethod
    def _same_file(source: Path, destination: Path) -> bool:
        try:
            return os.path.samefile(source, destination)
        except OSError as e:
            raise FileOperationError(
                f"Unable to compare {source} with {destination}.") from e

    def relocate(self, source: Path, destination: Path) -> RelocationOutcome:
        """Move source to destination unless it is already there or taken."""
        if source == destination:
            self._report(f"{source} is already in place, skipping.")
            return RelocationOutcome.SKIPPED_IN_PLACE

        if not os.path.lexists(destination):
            self.logger.info(f"{self._prefix()}{source} -> {destination}")
            if not self.dry_run:
                try:
                    os.rename(source, destination)
                except OSError as e:
                    raise FileOperationError(
                        f"Unable to move {source} to {destination}.") from e
            return RelocationOutcome.MOVED

        # Different spellings of one file (followed links, case-insensitive names)
        if self._same_file(source, destination):
            self._report(f"{source} is already in place as {destination}, skipping.")
            return RelocationOutcome.SKIPPED_IN_PLACE

        if self.file_size(source) == self.file_size(destination):
            return self._handle_duplicate(source, destination)

        self._report(f"{destination} exists and has different size; not moving {source}.")
        return RelocationOutcome.SKIPPED_DIFFERENT_SIZE

    def _handle_duplicate(self, source: Path, destination: Path) -> RelocationOutcome:
        """Apply the duplicate policy to a source whose equal-size copy exists."""
        policy = self.config.duplicate_policy

        if policy is DuplicatePolicy.REPORT:
            self._report(f"{source} is a duplicate of {destination}, keeping.")
            return RelocationOutcome.DUPLICATE_KEPT

        action = "Removing" if policy is DuplicatePolicy.REMOVE else "Trashing"
        self.logger.info(f"{self._prefix()}{action} {source}, duplicate of {destination}.")
        if self.dry_run:
            return RelocationOutcome.DUPLICATE_KEPT

        try:
            if policy is DuplicatePolicy.REMOVE:
                os.remove(source)
            else:
                send2trash(str(source))
        except Exception as e:
            raise FileOperationError(f"Failed to remove {source}.") from e
        return RelocationOutcome.DELETED_DUPLICATE

    def relocate_sidecar(self, source: Path, destination: Path) -> Optional[RelocationOutcome]:
        """Relocate the sidecar of an already relocated file, if it has one."""
        sidecar = self.find_sidecar(source)
        if sidecar is None:
            return None
        return self.relocate(sidecar, self.sidecar_destination(sidecar, source, destination))

    def cleanup_source_directory(self, root: Path) -> int:
        """Remove directories below root that are empty or hold only hidden files.

        Directories are visited deepest first, so a folder whose only content
        was an emptied subfolder and a .DS_Store goes too. Returns the count.
        """
        if self.dry_run:
            return 0

        removed = 0
        for thisdir, subdirs, _ in os.walk(root, topdown=False):
            for thissubdir in subdirs:
                path = Path(thisdir) / thissubdir
                if path.is_symlink():
                    continue
                if self._prune_directory(path):
                    removed += 1

        if removed:
            self.logger.info(f"Removed {removed} empty directories from {root}")
        return removed

    def _prune_directory(self, directory: Path) -> bool:
        """Delete directory's hidden files, then the directory itself."""
        try:
            entries = list(directory.iterdir())
        except OSError:
            return False

        for entry in entries:
            if not entry.name.startswith('.') or (entry.is_dir() and not entry.is_symlink()):
                return False

        for entry in entries:
            try:
                entry.unlink()
            except OSError as e:
                self.logger.warning(f"Could not remove {entry}: {e}")
                return False
            self.logger.debug(f"Removed hidden file {entry}")

        try:
            directory.rmdir()
        except OSError:
            return False
        return True
