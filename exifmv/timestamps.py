"""Capture timestamps, EXIF parsing, and day-wrap arithmetic."""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

import exifread

from .constants import get_logger
from .errors import ConfigurationError, MetadataError


logger = get_logger()

CAPTURE_TAG = "EXIF DateTimeOriginal"

# EXIF stores "YYYY:MM:DD HH:MM:SS"; tolerate dash-separated dates and a T separator
EXIF_DATETIME_PATTERN = re.compile(
    r'^\s*(\d{4})[-:](\d{2})[-:](\d{2})[T ](\d{2}):(\d{2}):(\d{2})'
)
DAY_WRAP_PATTERN = re.compile(r'^(\d{1,2}):(\d{1,2})$')


@dataclass(frozen=True)
class CaptureTimestamp:
    """Naive capture date and time as recorded by the camera."""
    year: int
    month: int
    day: int
    hour: int
    minute: int
    second: int

    def __str__(self) -> str:
        return (f"{self.year:04d}-{self.month:02d}-{self.day:02d} "
                f"{self.hour:02d}:{self.minute:02d}:{self.second:02d}")


@dataclass(frozen=True)
class DayWrapOffset:
    """Time-of-day offset added to a capture before bucketing by day."""
    hour: int = 0
    minute: int = 0

    @classmethod
    def parse(cls, text: str) -> "DayWrapOffset":
        """Parse an ``H[H]:M[M]`` string, e.g. ``4:30``."""
        match = DAY_WRAP_PATTERN.match(text.strip()) if text else None
        if not match:
            raise ConfigurationError(
                f"Invalid day-wrap '{text}': expected H[H]:M[M], e.g. 4:30")

        hour, minute = int(match.group(1)), int(match.group(2))
        if hour > 23:
            raise ConfigurationError(f"Invalid day-wrap '{text}': hour must be 0-23")
        if minute > 59:
            raise ConfigurationError(f"Invalid day-wrap '{text}': minute must be 0-59")
        return cls(hour=hour, minute=minute)

    def __str__(self) -> str:
        return f"{self.hour}:{self.minute:02d}"


def wraps_forward(capture: CaptureTimestamp, offset: DayWrapOffset) -> int:
    """Return 1 if adding the offset to the capture time crosses midnight, else 0."""
    minute_carry = 1 if capture.minute + offset.minute > 59 else 0
    hour_sum = capture.hour + offset.hour + minute_carry
    return 1 if hour_sum > 23 else 0


def parse_exif_datetime(value: str) -> CaptureTimestamp:
    """Parse an EXIF date-time string into a CaptureTimestamp.

    Raises ValueError for blank camera fields ("0000:00:00 00:00:00" or
    spaces) and anything else that is not a calendar date and time.
    """
    match = EXIF_DATETIME_PATTERN.match(value)
    if not match:
        raise ValueError(f"not an EXIF date-time: '{value}'")

    year, month, day, hour, minute, second = (int(g) for g in match.groups())
    if not (1 <= month <= 12 and 1 <= day <= 31):
        raise ValueError(f"date out of range: '{value}'")
    if hour > 23 or minute > 59 or second > 60:
        raise ValueError(f"time out of range: '{value}'")

    return CaptureTimestamp(year, month, day, hour, minute, second)


def read_capture_timestamp(fh: BinaryIO) -> CaptureTimestamp:
    """Read the original capture timestamp from an open media file."""
    try:
        # details=False skips makernotes and thumbnails
        tags = exifread.process_file(fh, details=False)
    except Exception as e:
        raise MetadataError("Unable to read EXIF metadata.") from e

    field = tags.get(CAPTURE_TAG)
    if field is None:
        raise MetadataError("No DateTimeOriginal field found.")

    try:
        return parse_exif_datetime(str(field))
    except ValueError as e:
        raise MetadataError("Unable to parse DateTimeOriginal field.") from e


def get_capture_timestamp(file_path: Path) -> CaptureTimestamp:
    """Open a file and read its capture timestamp."""
    try:
        with open(file_path, 'rb') as fh:
            capture = read_capture_timestamp(fh)
    except MetadataError as e:
        raise MetadataError(f"Unable to get capture time of '{file_path}'.") from e
    except OSError as e:
        raise MetadataError(f"Unable to open '{file_path}'.") from e

    logger.debug(f"Capture time: {file_path} = {capture}")
    return capture
