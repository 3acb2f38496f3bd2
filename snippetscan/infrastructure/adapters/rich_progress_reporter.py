"""Rich-based progress reporter adapter for batch fingerprinting."""

from __future__ import annotations

import logging
import time

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)

from ...application.ports.progress_reporter import NullProgressReporter, ProgressContext, ProgressReporterPort

logger = logging.getLogger(__name__)


class RichProgressContext:
    """Batch progress shown as a rich progress bar."""

    def __init__(self, progress: Progress, task_id: TaskID, total_files: int) -> None:
        self.progress = progress
        self.task_id = task_id
        self.total_files = total_files
        self.completed = 0
        self.failed = 0

    def advance(self, path: str, failed: bool = False) -> None:
        self.completed += 1
        if failed:
            self.failed += 1
            self.progress.console.print(f"[red]Failed:[/red] {path}")
        self.progress.update(self.task_id, advance=1)

    def finish(self) -> None:
        """Mark batch as complete."""
        self.progress.update(self.task_id, completed=self.total_files)
        self.progress.stop_task(self.task_id)


class LoggingProgressContext:
    """Fallback progress context for non-interactive mode using logging."""

    def __init__(self, total_files: int, description: str, log_every: int = 100) -> None:
        """
        Initialize logging-based progress context.

        Args:
            total_files: Total number of files
            description: Description for progress
            log_every: Emit a progress line every N files
        """
        self.total_files = total_files
        self.description = description
        self.log_every = max(1, log_every)
        self.completed = 0
        self.failed = 0
        self.start_time = time.time()
        logger.info(f"Starting: {description} ({total_files} files)")

    def advance(self, path: str, failed: bool = False) -> None:
        self.completed += 1
        if failed:
            self.failed += 1
        if self.completed % self.log_every and self.completed != self.total_files:
            return
        elapsed = time.time() - self.start_time
        percentage = (self.completed / self.total_files * 100) if self.total_files > 0 else 0
        logger.info(
            f"Progress: {self.completed}/{self.total_files} files "
            f"({percentage:.1f}%) - Elapsed: {elapsed:.1f}s"
        )

    def finish(self) -> None:
        """Mark batch as complete."""
        elapsed = time.time() - self.start_time
        logger.info(
            f"Completed: {self.description} - "
            f"{self.completed} files ({self.failed} failed) in {elapsed:.1f}s"
        )


class RichProgressReporterAdapter(ProgressReporterPort):
    """
    Rich-based progress reporter adapter.

    Progress is drawn on stderr so that WFP or JSON written to stdout stays
    clean. When stderr is not a terminal, progress is logged instead.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(stderr=True)
        self.is_interactive = self.console.is_terminal
        self.progress: Progress | None = None

        if not self.is_interactive:
            logger.debug("Non-interactive mode detected - using structured logging for progress")

    def start_batch(
        self,
        total_files: int,
        description: str = "Fingerprinting files",
    ) -> ProgressContext:
        """
        Start progress reporting for a batch operation.

        Args:
            total_files: Total number of files to process
            description: Description for progress bar

        Returns:
            ProgressContext for updating progress
        """
        if not self.is_interactive:
            return LoggingProgressContext(total_files=total_files, description=description)

        if self.progress is None:
            self.progress = Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                MofNCompleteColumn(),
                TimeElapsedColumn(),
                TimeRemainingColumn(),
                console=self.console,
                transient=True,
            )
            self.progress.start()
        task_id = self.progress.add_task(description, total=total_files)
        return RichProgressContext(progress=self.progress, task_id=task_id, total_files=total_files)

    def cleanup(self) -> None:
        """Stop the progress display (call when done)."""
        if self.progress is not None:
            self.progress.stop()
            self.progress = None


def create_progress_reporter(show_progress: bool) -> ProgressReporterPort:
    """Rich reporter when progress is wanted, a silent one otherwise."""
    if show_progress:
        return RichProgressReporterAdapter()
    return NullProgressReporter()
