from __future__ import annotations

"""Wheel metadata reader.

Reads ``{name}-{version}.dist-info/METADATA`` from a wheel archive through a
seekable file object, without extracting anything to disk.
"""

import logging
import zipfile
import zlib
from typing import BinaryIO, List

from packaging.utils import canonicalize_name

from distpub.core.errors import MetadataError
from distpub.core.filename import WheelFilename

logger = logging.getLogger(__name__)


def find_dist_info(filename: WheelFilename, names: List[str]) -> str:
    """Find the ``.dist-info`` directory belonging to the wheel's project.

    Only top-level directories containing a METADATA file are considered, and
    the project part of the directory name must normalize to the same name as
    the wheel filename.

    Args:
        filename: Parsed wheel filename
        names: All member names of the archive

    Returns:
        Directory name, e.g. ``foo-1.0.dist-info``

    Raises:
        MetadataError: If zero or more than one directory matches
    """
    candidates = []
    for name in names:
        parts = name.split("/")
        if len(parts) != 2 or parts[1] != "METADATA":
            continue
        directory = parts[0]
        if not directory.endswith(".dist-info"):
            continue
        project = directory[: -len(".dist-info")].split("-", 1)[0]
        if canonicalize_name(project) == filename.normalized_name:
            candidates.append(directory)

    if not candidates:
        raise MetadataError(
            f"No .dist-info directory found for `{filename.normalized_name}`"
        )
    if len(candidates) > 1:
        raise MetadataError(
            f"Multiple .dist-info directories found: {', '.join(candidates)}"
        )
    return candidates[0]


def read_wheel_metadata(filename: WheelFilename, reader: BinaryIO) -> bytes:
    """Read the raw METADATA file of a wheel.

    Args:
        filename: Parsed wheel filename
        reader: Seekable binary file object positioned anywhere

    Returns:
        Raw METADATA bytes

    Raises:
        MetadataError: If the archive is invalid or has no usable METADATA
    """
    try:
        archive = zipfile.ZipFile(reader)
    except zipfile.BadZipFile as e:
        raise MetadataError(f"Invalid wheel archive `{filename}`: {e}") from e

    with archive:
        dist_info = find_dist_info(filename, archive.namelist())
        metadata_path = f"{dist_info}/METADATA"
        logger.debug(f"Reading {metadata_path} from {filename}")
        try:
            return archive.read(metadata_path)
        except (zipfile.BadZipFile, zlib.error, NotImplementedError, EOFError) as e:
            raise MetadataError(f"Failed to read `{metadata_path}`: {e}") from e
