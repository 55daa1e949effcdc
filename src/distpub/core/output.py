from __future__ import annotations

"""Centralized output handling for publish operations."""

from enum import Enum
from typing import Any, Dict, Optional

from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TaskID,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)


class OutputLevel(Enum):
    """Output verbosity level."""

    QUIET = 0  # Only errors
    NORMAL = 1  # Standard with progress bar
    VERBOSE = 2  # All details


class RichReporter:
    """Upload progress reporter rendering one transfer bar per file.

    Implements the Reporter protocol. Bars are only shown in NORMAL mode;
    QUIET and VERBOSE modes keep the terminal free for messages.
    """

    def __init__(self, level: OutputLevel = OutputLevel.NORMAL, console: Optional[Console] = None):
        """Initialize reporter.

        Args:
            level: Output verbosity level
            console: Console to render to (default: stdout)
        """
        self.level = level
        self.console = console or Console()
        self.progress: Optional[Progress] = None
        self._tasks: Dict[int, TaskID] = {}
        self._next_id = 0

    def _ensure_progress(self) -> Optional[Progress]:
        if self.level != OutputLevel.NORMAL:
            return None
        if self.progress is None:
            self.progress = Progress(
                TextColumn("[bold blue]{task.description}"),
                BarColumn(),
                DownloadColumn(),
                TransferSpeedColumn(),
                TimeRemainingColumn(),
                console=self.console,
            )
            self.progress.start()
        return self.progress

    def on_progress(self, name: str, id: int) -> None:
        if self.progress and id in self._tasks:
            self.progress.update(self._tasks[id], description=name)

    def on_download_start(self, name: str, size: Optional[int]) -> int:
        id = self._next_id
        self._next_id += 1
        progress = self._ensure_progress()
        if progress is not None:
            self._tasks[id] = progress.add_task(name, total=size)
        return id

    def on_download_progress(self, id: int, inc: int) -> None:
        if self.progress and id in self._tasks:
            self.progress.update(self._tasks[id], advance=inc)

    def on_download_complete(self) -> None:
        """Stop rendering; called once after the last file."""
        if self.progress:
            self.progress.stop()
            self.progress = None
            self._tasks.clear()


class PublishOutputter:
    """Centralized output handler for publish operations.

    Handles output formatting for quiet/normal/verbose modes.
    """

    def __init__(self, level: OutputLevel = OutputLevel.NORMAL):
        """Initialize publish outputter.

        Args:
            level: Output verbosity level
        """
        self.level = level
        self.console = Console()
        self.err_console = Console(stderr=True)

    def reporter(self) -> RichReporter:
        """Create a progress reporter sharing this outputter's console."""
        return RichReporter(self.level, console=self.console)

    def header(self, registry: str, file_count: int) -> None:
        """Show publish header.

        Args:
            registry: Upload URL
            file_count: Number of files to upload
        """
        if self.level == OutputLevel.QUIET:
            return

        noun = "file" if file_count == 1 else "files"
        self.console.print(f"Publishing {file_count} {noun} to {registry}", style="bold")

    def uploading(self, filename: str, size_bytes: Optional[int]) -> None:
        """Show which file is being uploaded.

        Args:
            filename: Distribution filename
            size_bytes: File size in bytes, None if unknown
        """
        if self.level == OutputLevel.QUIET:
            return

        if size_bytes is None:
            self.console.print(f"Uploading {filename}")
            return

        size_mb = size_bytes / (1024 * 1024)
        self.console.print(f"Uploading {filename} ({size_mb:.1f} MB)")

    def info(self, message: str) -> None:
        if self.level == OutputLevel.QUIET:
            return

        self.console.print(message)

    def verbose(self, message: str) -> None:
        if self.level != OutputLevel.VERBOSE:
            return

        self.console.print(message)

    def success(self, message: str) -> None:
        if self.level == OutputLevel.QUIET:
            return

        self.console.print(f"✓ {message}", style="green")

    def warning(self, message: str) -> None:
        if self.level == OutputLevel.QUIET:
            return

        self.console.print(f"⚠️  {message}", style="yellow")

    def error(self, message: str) -> None:
        """Show error message (always shown, even in quiet mode).

        Args:
            message: Error message
        """
        self.err_console.print(f"✗ {message}", style="red", highlight=False, markup=False)

    def summary(self, **stats: Any) -> None:
        """Show summary statistics.

        Args:
            **stats: Statistics as key-value pairs
        """
        if self.level == OutputLevel.QUIET:
            return

        self.console.print("\n=== Summary ===", style="bold")
        for key, value in stats.items():
            # Convert key from snake_case to Title Case
            display_key = key.replace("_", " ").title()
            self.console.print(f"  {display_key}: {value}")
