from __future__ import annotations

"""
Publish orchestration.

Uploads a list of distribution files one after another to a single registry.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Tuple

import requests

from distpub.core.filename import DistFilename
from distpub.core.files import files_for_publishing
from distpub.core.progress import NullReporter, Reporter
from distpub.core.uploader import upload


@dataclass
class PublishSummary:
    """Result of publishing a set of files."""

    uploaded: List[Path] = field(default_factory=list)
    skipped: List[Path] = field(default_factory=list)


class Publisher:
    """Uploads distribution files to one registry.

    The session is shared across uploads and never modified. Files are
    uploaded sequentially in the order given; the first error aborts.
    """

    def __init__(
        self,
        session: requests.Session,
        registry: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        reporter: Optional[Reporter] = None,
        timeout: Optional[float] = None,
        logger: Optional[logging.Logger] = None,
        on_upload_start: Optional[Callable[[Path, DistFilename], None]] = None,
    ):
        """Initialize publisher.

        Args:
            session: Shared requests session
            registry: Upload URL
            username: Optional username
            password: Optional password
            reporter: Progress reporter (default: no progress output)
            timeout: Request timeout in seconds
            logger: Logger for diagnostics (default: module logger)
            on_upload_start: Called with (path, filename) before each upload
        """
        self.session = session
        self.registry = registry
        self.username = username
        self.password = password
        self.reporter = reporter or NullReporter()
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)
        self.on_upload_start = on_upload_start

    def upload_file(self, path: Path, filename: DistFilename) -> bool:
        """Upload a single file.

        Returns:
            True if newly uploaded, False if it already existed

        Raises:
            PublishError: If preparing or sending the file failed
        """
        return upload(
            path,
            filename,
            self.registry,
            self.session,
            self.username,
            self.password,
            self.reporter,
            timeout=self.timeout,
            logger=self.logger,
        )

    def publish_files(self, files: List[Tuple[Path, DistFilename]]) -> PublishSummary:
        """Upload already discovered files.

        Args:
            files: (path, filename) tuples from files_for_publishing()

        Returns:
            PublishSummary with uploaded and skipped files

        Raises:
            PublishError: On the first file that fails
        """
        summary = PublishSummary()
        try:
            for path, filename in files:
                if self.on_upload_start is not None:
                    self.on_upload_start(path, filename)
                if self.upload_file(path, filename):
                    self.logger.info(f"Uploaded {filename}")
                    summary.uploaded.append(path)
                else:
                    self.logger.info(f"File {filename} already exists, skipping")
                    summary.skipped.append(path)
        finally:
            self.reporter.on_download_complete()
        return summary

    def publish(self, patterns: List[str]) -> PublishSummary:
        """Discover files matching patterns and upload them.

        Args:
            patterns: Glob patterns

        Returns:
            PublishSummary with uploaded and skipped files

        Raises:
            PublishError: If discovery or any upload fails
        """
        return self.publish_files(files_for_publishing(patterns))
