"""
Configuration management for exifmv.
"""

import enum
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .constants import PROGRAM, get_logger
from .errors import ConfigurationError
from .timestamps import DayWrapOffset


class DuplicatePolicy(enum.Enum):
    """What to do with a source file whose equal-size copy is already in place."""
    REPORT = "report"
    REMOVE = "remove"
    TRASH = "trash"


@dataclass(frozen=True)
class RunConfig:
    """Options for one run, built once at startup and shared by every task."""
    source: Path
    dest: Path
    verbose: bool = False
    recursive: bool = False
    dry_run: bool = False
    make_lowercase: bool = False
    dereference: bool = False
    halt_on_errors: bool = False
    cleanup: bool = False
    day_wrap: DayWrapOffset = DayWrapOffset()
    duplicate_policy: DuplicatePolicy = DuplicatePolicy.REPORT
    jobs: int = 4


class Config:
    """Loads user defaults from the YAML configuration file.

    The file is only ever read; exifmv keeps no state between runs.
    """

    def __init__(self, config_path: Optional[Path] = None):
        # Default config location: ~/.<PROGRAM>/config.yml
        if config_path:
            self.config_path = Path(config_path)
        else:
            self.config_path = Path.home() / f".{PROGRAM}" / "config.yml"
        self.data = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        if not self.config_path.exists():
            return {}

        try:
            with open(self.config_path, 'r') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            get_logger().warning(f"Could not load config {self.config_path}: {e}")
            return {}

        if not isinstance(data, dict):
            get_logger().warning(f"Ignoring config {self.config_path}: not a mapping")
            return {}
        return data

    def get_flag(self, key: str) -> bool:
        """Get a boolean option (default: False)."""
        value = self.data.get(key, False)
        if not isinstance(value, bool):
            raise ConfigurationError(
                f"Invalid value for '{key}' in {self.config_path}: expected true or false")
        return value

    def get_day_wrap(self) -> Optional[str]:
        """Get the saved day-wrap string, e.g. '4:30'."""
        value = self.data.get('day_wrap')
        if value is None:
            return None
        # YAML 1.1 reads unquoted 4:30 as the base-60 integer 270
        if isinstance(value, int) and not isinstance(value, bool):
            return f"{value // 60}:{value % 60:02d}"
        return str(value)

    def get_duplicate_policy(self) -> DuplicatePolicy:
        """Get the duplicate policy (default: report only)."""
        value = self.data.get('duplicate_policy', DuplicatePolicy.REPORT.value)
        try:
            return DuplicatePolicy(str(value).lower())
        except ValueError:
            raise ConfigurationError(
                f"Invalid duplicate_policy '{value}' in {self.config_path}: "
                f"expected one of report, remove, trash")

    def get_jobs(self) -> Optional[int]:
        """Get the worker thread count, if set."""
        value = self.data.get('jobs')
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise ConfigurationError(
                f"Invalid jobs '{value}' in {self.config_path}: expected a positive integer")
        return value
