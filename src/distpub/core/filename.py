from __future__ import annotations

"""
Distribution filename classification.

A file is publishable when its base name parses either as a wheel filename
(``{name}-{version}(-{build})?-{python}-{abi}-{platform}.whl``) or as a source
distribution filename (``{name}-{version}{extension}``). Classification looks
at the name only and never touches the file.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from packaging.utils import (
    InvalidWheelFilename,
    canonicalize_name,
    parse_wheel_filename,
)
from packaging.version import InvalidVersion, Version

# PEP 508 project name
_NAME_PATTERN = re.compile(r"^([A-Z0-9]|[A-Z0-9][A-Z0-9._-]*[A-Z0-9])$", re.IGNORECASE)


class SourceDistExtension(Enum):
    """Archive extensions a source distribution may carry."""

    TAR_GZ = ".tar.gz"
    ZIP = ".zip"
    TAR_BZ2 = ".tar.bz2"
    TAR_XZ = ".tar.xz"
    TAR_ZST = ".tar.zst"
    TAR_LZ = ".tar.lz"
    TAR_LZMA = ".tar.lzma"
    TAR = ".tar"
    TGZ = ".tgz"
    TBZ = ".tbz"
    TXZ = ".txz"
    TLZ = ".tlz"

    @classmethod
    def from_filename(cls, filename: str) -> Optional[SourceDistExtension]:
        """Find the extension a filename ends with (longest match wins)."""
        lowered = filename.lower()
        matches = [ext for ext in cls if lowered.endswith(ext.value)]
        if not matches:
            return None
        return max(matches, key=lambda ext: len(ext.value))


@dataclass(frozen=True)
class SourceDistFilename:
    """Parsed source distribution filename."""

    name: str
    version: str
    extension: SourceDistExtension

    @property
    def filetype(self) -> str:
        return "sdist"

    @property
    def normalized_name(self) -> str:
        return canonicalize_name(self.name)

    def __str__(self) -> str:
        return f"{self.name}-{self.version}{self.extension.value}"


@dataclass(frozen=True)
class WheelFilename:
    """Parsed wheel filename.

    Each tag keeps its dot-separated parts in filename order, e.g. the python
    tag of ``foo-1.0-py2.py3-none-any.whl`` is ``("py2", "py3")``.
    """

    name: str
    version: str
    build_tag: Optional[str]
    python_tag: tuple[str, ...]
    abi_tag: tuple[str, ...]
    platform_tag: tuple[str, ...]

    @property
    def filetype(self) -> str:
        return "bdist_wheel"

    @property
    def normalized_name(self) -> str:
        return canonicalize_name(self.name)

    def __str__(self) -> str:
        parts = [self.name, self.version]
        if self.build_tag:
            parts.append(self.build_tag)
        parts.extend(
            [
                ".".join(self.python_tag),
                ".".join(self.abi_tag),
                ".".join(self.platform_tag),
            ]
        )
        return "-".join(parts) + ".whl"


DistFilename = Union[SourceDistFilename, WheelFilename]


def parse_wheel(filename: str) -> Optional[WheelFilename]:
    """Parse a wheel filename, returning None if it is not one."""
    if not filename.endswith(".whl"):
        return None
    try:
        parse_wheel_filename(filename)
    except InvalidWheelFilename:
        return None

    stem = filename[: -len(".whl")]
    parts = stem.split("-")
    if len(parts) == 6:
        name, version, build_tag, python_tag, abi_tag, platform_tag = parts
    else:
        name, version, python_tag, abi_tag, platform_tag = parts
        build_tag = None

    return WheelFilename(
        name=name,
        version=version,
        build_tag=build_tag,
        python_tag=tuple(python_tag.split(".")),
        abi_tag=tuple(abi_tag.split(".")),
        platform_tag=tuple(platform_tag.split(".")),
    )


def parse_source_dist(filename: str) -> Optional[SourceDistFilename]:
    """Parse a source distribution filename, returning None if it is not one."""
    extension = SourceDistExtension.from_filename(filename)
    if extension is None:
        return None

    stem = filename[: -len(extension.value)]
    if "-" not in stem:
        return None
    name, version = stem.rsplit("-", 1)

    if not _NAME_PATTERN.match(name):
        return None
    try:
        Version(version)
    except InvalidVersion:
        return None

    return SourceDistFilename(name=name, version=version, extension=extension)


def parse_dist_filename(filename: str) -> Optional[DistFilename]:
    """Classify a base filename as wheel or source distribution.

    Args:
        filename: File base name (no directory)

    Returns:
        WheelFilename, SourceDistFilename, or None if unrecognized
    """
    if filename.endswith(".whl"):
        return parse_wheel(filename)
    return parse_source_dist(filename)
