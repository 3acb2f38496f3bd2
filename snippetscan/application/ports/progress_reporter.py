"""Port interface for reporting progress while fingerprinting or scanning a batch of files."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Protocol


class ProgressContext(Protocol):
    """Context for batch progress."""

    def advance(self, path: str, failed: bool = False) -> None:
        """
        Record one processed file.

        Args:
            path: File that was processed
            failed: Whether processing of this file failed
        """
        ...

    def finish(self) -> None:
        """Mark batch as complete."""
        ...


class ProgressReporterPort(ABC):
    """Port for reporting progress during batch processing."""

    @abstractmethod
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
        pass

    def cleanup(self) -> None:
        """Release any display resources (call when done)."""
        pass


class NullProgressContext:
    """Progress context that records nothing."""

    def advance(self, path: str, failed: bool = False) -> None:
        pass

    def finish(self) -> None:
        pass


class NullProgressReporter(ProgressReporterPort):
    """Progress reporter used when no reporting is requested."""

    def start_batch(self, total_files: int, description: str = "Fingerprinting files") -> ProgressContext:
        return NullProgressContext()
