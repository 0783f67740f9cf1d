"""
pytest configuration and fixtures for exifmv tests.
"""

import io
import struct
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import pytest

from exifmv.config import RunConfig


@dataclass
class CliResult:
    """Result from running CLI command."""
    exit_code: int
    output: str
    error: str


def build_exif_tiff(date_time_original: Optional[str], padding: int = 0,
                    fill: bytes = b'\x00') -> bytes:
    """Build a minimal little-endian TIFF whose EXIF IFD holds DateTimeOriginal.

    Without a date only IFD0 with a camera Model tag is written. ``padding``
    bytes of ``fill`` are appended so tests can control the file size and
    content independently.
    """
    header = b'II' + struct.pack('<HI', 42, 8)
    if date_time_original is not None:
        value = date_time_original.encode('ascii') + b'\x00'
        # IFD0 at 8: one ExifOffset entry pointing at the EXIF IFD at 26
        ifd0 = struct.pack('<H', 1) + struct.pack('<HHII', 0x8769, 4, 1, 26) + struct.pack('<I', 0)
        # EXIF IFD at 26: DateTimeOriginal, ASCII, value stored at 44
        exif_ifd = (struct.pack('<H', 1) + struct.pack('<HHII', 0x9003, 2, len(value), 44)
                    + struct.pack('<I', 0))
        data = header + ifd0 + exif_ifd + value
    else:
        ifd0 = (struct.pack('<H', 1) + struct.pack('<HHI', 0x0110, 2, 4) + b'cam\x00'
                + struct.pack('<I', 0))
        data = header + ifd0
    return data + fill * padding


@pytest.fixture
def exif_bytes():
    """Factory for in-memory EXIF media content."""
    return build_exif_tiff


@pytest.fixture
def make_media():
    """Helper to write a media file with a given capture time."""

    def create(path: Path, date_time_original: Optional[str] = "2023:07:14 12:30:00",
               padding: int = 0, fill: bytes = b'\x00') -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(build_exif_tiff(date_time_original, padding, fill))
        return path

    return create


@pytest.fixture
def source_dir(tmp_path):
    path = tmp_path / "source"
    path.mkdir()
    return path


@pytest.fixture
def dest_dir(tmp_path):
    # Not created up front; the resolver creates it on demand
    return tmp_path / "dest"


@pytest.fixture
def make_config(source_dir, dest_dir):
    """Factory for RunConfig values rooted at the test source/dest folders."""

    def create(**overrides) -> RunConfig:
        options = dict(source=source_dir, dest=dest_dir, jobs=2)
        options.update(overrides)
        return RunConfig(**options)

    return create


@pytest.fixture
def test_config_path(tmp_path):
    """Path for an isolated config file (not created)."""
    return tmp_path / "config" / "config.yml"


@pytest.fixture
def cli_runner():
    """Create a CLI runner that captures output and uses a test config."""

    def run_cli(*args, config_path=None):
        """Run exifmv CLI with given arguments.

        Args:
            *args: Command line arguments (source, dest, --flags, etc)
            config_path: Optional config path for test isolation

        Returns:
            CliResult with exit_code, output, and error
        """
        from exifmv.cli import main

        old_stdout = sys.stdout
        old_stderr = sys.stderr
        stdout = io.StringIO()
        stderr = io.StringIO()

        try:
            sys.stdout = stdout
            sys.stderr = stderr
            exit_code = main([str(a) for a in args], config_path=config_path)
            return CliResult(exit_code=exit_code, output=stdout.getvalue(),
                             error=stderr.getvalue())
        except SystemExit as e:
            # argparse errors and --help
            return CliResult(exit_code=e.code if e.code is not None else 0,
                             output=stdout.getvalue(), error=stderr.getvalue())
        finally:
            sys.stdout = old_stdout
            sys.stderr = old_stderr

    return run_cli
