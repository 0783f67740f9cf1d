"""
File extension constants and shared accessors for exifmv.
"""

import logging

from rich.console import Console

PROGRAM = "exifmv"

# File extension constants
RAW_EXTENSIONS = (
    ".3fr", ".ari", ".arw", ".bay", ".cap", ".cr2", ".cr3", ".crw", ".data",
    ".dcr", ".dcs", ".dng", ".drf", ".eip", ".erf", ".fff", ".gpr", ".iiq",
    ".k25", ".kdc", ".mdc", ".mef", ".mos", ".mrw", ".nef", ".nrw", ".obm",
    ".orf", ".pef", ".ptx", ".pxn", ".r3d", ".raf", ".raw", ".rw2", ".rwl",
    ".rwz", ".sr2", ".srf", ".srw", ".x3f",
)
IMAGE_EXTENSIONS = (
    ".fpx", ".gif", ".j2k", ".jfif", ".jif", ".jp2", ".jpeg", ".jpg", ".jpx",
    ".pcd", ".psd", ".tif", ".tiff",
)
PHOTO_EXTENSIONS = RAW_EXTENSIONS + IMAGE_EXTENSIONS
MOVIE_EXTENSIONS = (
    ".264", ".3g2", ".3gp", ".amv", ".asf", ".avi", ".cine", ".drc", ".f4a",
    ".f4b", ".f4p", ".f4v", ".flv", ".gifv", ".m2ts", ".m2v", ".m4p", ".m4v",
    ".mkv", ".mng", ".mp4", ".mpeg", ".mpg", ".mts", ".mxf", ".nsv", ".ogg",
    ".qt", ".roq", ".svi", ".vob", ".wmv", ".yuv",
)
VALID_EXTENSIONS = PHOTO_EXTENSIONS + MOVIE_EXTENSIONS

# Sidecar suffixes in lookup order
SIDECAR_SUFFIXES = (".xmp", ".XMP")

_console = None


def is_media_file(name: str) -> bool:
    """Check whether a file name ends in a recognized media extension."""
    return name.lower().endswith(VALID_EXTENSIONS)


def get_logger() -> logging.Logger:
    """Get the program logger."""
    return logging.getLogger(PROGRAM)


def get_console() -> Console:
    """Get the shared rich console used for logging and progress output."""
    global _console
    if _console is None:
        _console = Console()
    return _console
