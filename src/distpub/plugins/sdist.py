from __future__ import annotations

"""Source distribution PKG-INFO reader.

Source distributions are read as a forward-only gzip tar stream. The only
PKG-INFO that counts is the one directly below the single top-level
directory (``{name}-{version}/PKG-INFO``); nested copies, e.g. from vendored
projects or egg-info directories, are ignored.
"""

import logging
import tarfile
from pathlib import Path
from typing import List, Tuple

from distpub.core.errors import (
    MissingPkgInfoError,
    MultiplePkgInfoError,
    PrepareIoError,
    ReadError,
)

logger = logging.getLogger(__name__)


def is_top_level_pkg_info(entry_path: str) -> bool:
    """Whether an archive path is ``<top-level>/PKG-INFO``.

    A leading ``.`` counts as a directory level, so ``./PKG-INFO`` matches
    and ``./foo-1.0/PKG-INFO`` does not.
    """
    parts = entry_path.split("/")
    # Empty components and inner "." don't add a level
    parts = parts[:1] + [part for part in parts[1:] if part not in ("", ".")]
    return len(parts) == 2 and parts[1] == "PKG-INFO"


def source_dist_pkg_info(path: Path) -> bytes:
    """Extract the PKG-INFO file from a ``.tar.gz`` source distribution.

    Args:
        path: Path to the source distribution

    Returns:
        Raw PKG-INFO bytes

    Raises:
        MissingPkgInfoError: If there is no top-level PKG-INFO
        MultiplePkgInfoError: If there is more than one
        ReadError: If a PKG-INFO entry cannot be read
        PrepareIoError: If the archive itself cannot be read
    """
    pkg_infos: List[Tuple[str, bytes]] = []

    try:
        with open(path, "rb") as f, tarfile.open(fileobj=f, mode="r|gz") as archive:
            for member in archive:
                if not member.isfile() or not is_top_level_pkg_info(member.name):
                    continue
                # The stream is forward-only: read the entry while it is current
                try:
                    entry = archive.extractfile(member)
                    content = entry.read() if entry is not None else b""
                except (OSError, EOFError, tarfile.TarError) as e:
                    raise ReadError(member.name, e) from e
                logger.debug(f"Found {member.name} in {path.name}")
                pkg_infos.append((member.name, content))
    except (OSError, EOFError, tarfile.TarError) as e:
        raise PrepareIoError(e) from e

    if not pkg_infos:
        raise MissingPkgInfoError()
    if len(pkg_infos) > 1:
        raise MultiplePkgInfoError(", ".join(name for name, _ in pkg_infos))
    return pkg_infos[0][1]
