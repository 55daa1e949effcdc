"""
File discovery for publishing.

Expands glob patterns into regular files and classifies each one as a wheel
or a source distribution.
"""

import fnmatch
import glob
import logging
import os
from pathlib import Path
from typing import Iterator, List, Tuple

from distpub.core.errors import (
    GlobError,
    InvalidFilenameError,
    NoFilesError,
    PatternError,
)
from distpub.core.filename import DistFilename, parse_dist_filename

logger = logging.getLogger(__name__)


def validate_pattern(pattern: str) -> None:
    """Check that a glob pattern is well-formed.

    Args:
        pattern: Glob pattern

    Raises:
        PatternError: If the pattern is empty, has an unclosed character
            class, or uses ``**`` inside a path component
    """
    if not pattern:
        raise PatternError(pattern, "empty pattern")

    for component in pattern.replace(os.sep, "/").split("/"):
        if "**" in component and component != "**":
            raise PatternError(
                pattern, "recursive wildcards must form a single path component"
            )

    i = 0
    while i < len(pattern):
        if pattern[i] == "[":
            # A ']' directly after '[' or '[!' is a literal member of the class
            j = i + 1
            if j < len(pattern) and pattern[j] == "!":
                j += 1
            if j < len(pattern) and pattern[j] == "]":
                j += 1
            close = pattern.find("]", j)
            if close == -1:
                raise PatternError(pattern, "invalid range pattern")
            i = close
        i += 1


def _list_dir(directory: str) -> List[Tuple[str, bool]]:
    """List a directory as sorted (name, is_dir) pairs.

    Raises:
        GlobError: If the directory exists but can't be read
    """
    try:
        with os.scandir(directory or os.curdir) as entries:
            return sorted(
                (entry.name, entry.is_dir(follow_symlinks=False)) for entry in entries
            )
    except (FileNotFoundError, NotADirectoryError):
        return []
    except OSError as e:
        raise GlobError(directory or os.curdir, e) from e


def _expand(base: str, parts: List[str]) -> Iterator[str]:
    """Yield paths below base matching the remaining pattern components."""
    if not parts:
        yield base
        return

    part, rest = parts[0], parts[1:]
    if part == "**":
        # Zero or more directories; hidden directories are not descended into
        yield from _expand(base, rest)
        for name, is_dir in _list_dir(base):
            if name.startswith("."):
                continue
            path = os.path.join(base, name)
            if is_dir:
                yield from _expand(path, parts)
            elif not rest:
                # A trailing ** also matches files
                yield path
        return

    if not glob.has_magic(part):
        path = os.path.join(base, part)
        if rest:
            if os.path.isdir(path):
                yield from _expand(path, rest)
        elif os.path.lexists(path):
            yield path
        return

    for name, _ in _list_dir(base):
        if name.startswith(".") and not part.startswith("."):
            continue
        if fnmatch.fnmatchcase(name, part):
            path = os.path.join(base, name)
            if not rest:
                yield path
            elif os.path.isdir(path):
                yield from _expand(path, rest)


def expand_pattern(pattern: str) -> List[str]:
    """Expand a glob pattern into sorted matching paths.

    Unlike :func:`glob.glob`, a directory that can't be read is an error
    instead of being skipped.

    Args:
        pattern: Glob pattern (``**`` matches any number of directories)

    Returns:
        Sorted list of matching paths, files and directories alike

    Raises:
        GlobError: If a directory on the way can't be listed
    """
    drive, rest = os.path.splitdrive(pattern.replace(os.sep, "/"))
    base = drive
    if rest.startswith("/"):
        base += os.sep
    parts = [part for part in rest.split("/") if part]
    return sorted(set(_expand(base, parts)))


def files_for_publishing(patterns: List[str]) -> List[Tuple[Path, DistFilename]]:
    """Expand patterns into classified distribution files.

    Files are returned in discovery order, deduplicated by resolved path.
    Directories and other non-regular files are skipped silently.

    Args:
        patterns: Glob patterns (``**`` matches recursively)

    Returns:
        List of (path, filename classification) tuples

    Raises:
        PatternError: If a pattern is invalid
        GlobError: If the filesystem walk fails
        NoFilesError: If no file matched
        InvalidFilenameError: If a matched file is not a distribution
    """
    seen: set[Path] = set()
    files: List[Tuple[Path, DistFilename]] = []

    for pattern in patterns:
        validate_pattern(pattern)
        for match in expand_pattern(pattern):
            dist = Path(match)
            try:
                if not dist.is_file():
                    continue
                canonical = dist.resolve()
            except OSError as e:
                raise GlobError(match, e) from e

            if canonical in seen:
                continue
            seen.add(canonical)

            filename = parse_dist_filename(dist.name)
            if filename is None:
                raise InvalidFilenameError(dist)

            logger.debug(f"Found {filename.filetype}: {dist}")
            files.append((dist, filename))

    if not files:
        raise NoFilesError()

    return files
