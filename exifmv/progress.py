"""Progress reporting for relocation runs."""

from typing import Optional

from rich.progress import Progress, TaskID


class ProgressContext:
    """Wraps an optional rich progress task so workers can report without checks.

    rich serializes updates internally, so one context may be shared by
    every worker thread.
    """

    def __init__(self, progress: Optional[Progress] = None, task: Optional[TaskID] = None):
        self.progress = progress
        self.task = task

    @property
    def is_active(self) -> bool:
        return self.progress is not None and self.task is not None

    def start(self, total: int, description: str = "Relocating files...") -> None:
        """Set the number of files once the walk has finished."""
        if self.is_active:
            self.progress.update(self.task, total=total, description=description)

    def file_done(self, name: str) -> None:
        """Advance by one file and show its name."""
        if self.is_active:
            self.progress.update(self.task, advance=1, description=f"Processed: {name}")
