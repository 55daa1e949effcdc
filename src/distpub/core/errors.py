from __future__ import annotations

"""
Exception hierarchy for publishing.

Errors come in three layers:

- discovery errors, raised while expanding path patterns
- preparation errors, raised for a single file before any network call
  (wrapped in PublishPrepareError)
- send errors, raised during or after the HTTP request
  (wrapped in PublishSendError)

The wrappers carry the originating file path (and the registry URL for send
errors); the specific failure is attached as ``__cause__`` so the full chain
can be rendered with :func:`format_error_chain`.
"""

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from distpub.core.filename import SourceDistFilename


class PublishError(Exception):
    """Base class for all publishing errors."""


class PatternError(PublishError):
    """A path pattern is not a valid glob pattern."""

    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid publish path: `{pattern}` ({reason})")


class GlobError(PublishError):
    """The filesystem walk failed while expanding a pattern."""

    def __init__(self, path: str, error: OSError):
        self.path = path
        self.error = error
        super().__init__(f"Failed to read `{path}`: {error}")


class NoFilesError(PublishError):
    """No file matched any of the given patterns."""

    def __init__(self) -> None:
        super().__init__("Path patterns didn't match any wheels or source distributions")


class InvalidFilenameError(PublishError):
    """A matched file is neither a wheel nor a source distribution."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"File is neither a wheel nor a source distribution: `{path}`")


class PublishPrepareError(PublishError):
    """Reading or hashing a file failed before it could be sent."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"Failed to publish: `{path}`")


class PublishSendError(PublishError):
    """Sending a file to the registry failed or was rejected."""

    def __init__(self, path: Path, registry: str):
        self.path = path
        self.registry = registry
        super().__init__(f"Failed to publish `{path}` to {registry}")


# Preparation failures (attached as __cause__ of PublishPrepareError)


class PrepareError(Exception):
    """Base class for per-file preparation failures."""


class PrepareIoError(PrepareError):
    def __init__(self, error: Exception):
        self.error = error
        super().__init__(str(error))


class MetadataError(PrepareError):
    """The wheel metadata reader failed."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Failed to read metadata: {reason}")


class Metadata23Error(PrepareError):
    """The core metadata could not be parsed or validated."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Failed to read metadata: {reason}")


class InvalidExtensionError(PrepareError):
    def __init__(self, filename: SourceDistFilename):
        self.filename = filename
        super().__init__(
            f"Only files ending in `.tar.gz` are valid source distributions: `{filename}`"
        )


class MissingPkgInfoError(PrepareError):
    def __init__(self) -> None:
        super().__init__("No PKG-INFO file found")


class MultiplePkgInfoError(PrepareError):
    def __init__(self, paths: str):
        self.paths = paths
        super().__init__(f"Multiple PKG-INFO files found: `{paths}`")


class ReadError(PrepareError):
    """An archive entry could not be read while it was the current entry."""

    def __init__(self, entry: str, error: Exception):
        self.entry = entry
        self.error = error
        super().__init__(f"Failed to read: `{entry}`")


# Send failures (attached as __cause__ of PublishSendError)


class SendError(Exception):
    """Base class for failures in or after the HTTP transport."""


class RequestFailedError(SendError):
    def __init__(self) -> None:
        super().__init__("Failed to send POST request")


class StatusNoBodyError(SendError):
    def __init__(self, status: int):
        self.status = status
        super().__init__(f"Upload failed with status {status}")


class StatusError(SendError):
    def __init__(self, status: int, message: str):
        self.status = status
        self.message = message
        super().__init__(f"Upload failed with status code {status}: {message}")


class PermissionDeniedError(SendError):
    """The registry returned 403 Forbidden."""

    def __init__(self, status: int, message: str):
        self.status = status
        self.message = message
        super().__init__(f"Permission denied (status code {status}): {message}")


class RedirectError(SendError):
    """The request was redirected away from the registry URL."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(
            "The request was redirected, but redirects are not allowed when publishing, "
            f"please use the canonical URL: `{url}`"
        )


def format_error_chain(error: BaseException) -> str:
    """Render an exception followed by its chain of causes.

    Args:
        error: Outermost exception

    Returns:
        Multi-line string, one ``Caused by:`` line per cause
    """
    lines = [str(error)]
    seen = {id(error)}
    cause = error.__cause__
    while cause is not None and id(cause) not in seen:
        seen.add(id(cause))
        lines.append(f"  Caused by: {cause}")
        cause = cause.__cause__
    return "\n".join(lines)
