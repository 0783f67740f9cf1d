"""
Exception hierarchy for exifmv.

Errors carry their cause through ordinary exception chaining
(``raise ... from exc``); ``format_error_chain`` renders the chain for the
command line.
"""

from typing import List


class ExifmvError(Exception):
    """Base exception for all exifmv errors."""
    pass


class ConfigurationError(ExifmvError):
    """Raised when run options cannot be parsed or are inconsistent."""
    pass


class TraversalError(ExifmvError):
    """Raised when a directory below the source root cannot be read."""
    pass


class MetadataError(ExifmvError):
    """Raised when a capture timestamp cannot be read from a file."""
    pass


class FileOperationError(ExifmvError):
    """Raised when creating, moving, or deleting a file fails."""
    pass


def error_chain(exc: BaseException) -> List[str]:
    """List the messages of an exception and its causes, outermost first."""
    messages = []
    seen = set()
    current = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        messages.append(str(current) or current.__class__.__name__)
        current = current.__cause__
    return messages


def format_error_chain(exc: BaseException) -> str:
    """Render an exception as an ``error:`` line followed by ``caused by:`` lines."""
    messages = error_chain(exc)
    lines = [f"error: {messages[0]}"]
    lines.extend(f"caused by: {message}" for message in messages[1:])
    return "\n".join(lines)
