"""
exifmv - Move images and videos into a year/month/day folder hierarchy.

Files are sorted by the capture time recorded in their EXIF metadata.
Nothing is overwritten, and a source file is only deleted when an
identically sized copy is already in place.
"""

__version__ = "0.4.1"


# Public API
from .cli import main
from .config import Config, DuplicatePolicy, RunConfig
from .core import ExifMover, walk_media_files
from .file_operations import FileOperations, RelocationOutcome
from .timestamps import CaptureTimestamp, DayWrapOffset, wraps_forward

__all__ = [ "main", "Config", "DuplicatePolicy", "RunConfig", "ExifMover", "walk_media_files",
            "FileOperations", "RelocationOutcome", "CaptureTimestamp", "DayWrapOffset",
            "wraps_forward" ]
