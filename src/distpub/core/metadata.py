from __future__ import annotations

"""
Core package metadata.

This module provides the Pydantic model for the core metadata fields sent to
a registry, and dispatch of metadata extraction by distribution kind.
"""

import logging
from email.message import Message
from email.parser import HeaderParser
from email.policy import compat32
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from packaging.metadata import parse_email
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from distpub.core.errors import InvalidExtensionError, Metadata23Error, PrepareIoError
from distpub.core.filename import (
    DistFilename,
    SourceDistExtension,
    SourceDistFilename,
    WheelFilename,
)
from distpub.plugins.sdist import source_dist_pkg_info
from distpub.plugins.wheel import read_wheel_metadata

logger = logging.getLogger(__name__)


def _parse_headers(content: Union[bytes, str]) -> Message:
    """Parse the header block of a metadata file without interpreting values."""
    if isinstance(content, bytes):
        content = content.decode("utf-8", errors="replace")
    return HeaderParser(policy=compat32).parsestr(content)


class PackageMetadata(BaseModel):
    """Core metadata of a distribution (PKG-INFO / METADATA).

    Scalar fields are None when the header is absent. Repeated fields keep
    the order of the headers in the source file.
    """

    model_config = ConfigDict(frozen=True)

    # Required fields
    metadata_version: str
    name: str
    version: str

    summary: Optional[str] = None
    description: Optional[str] = None
    description_content_type: Optional[str] = None
    author: Optional[str] = None
    author_email: Optional[str] = None
    maintainer: Optional[str] = None
    maintainer_email: Optional[str] = None
    license: Optional[str] = None
    keywords: Optional[str] = None
    home_page: Optional[str] = None
    download_url: Optional[str] = None
    requires_python: Optional[str] = None

    classifiers: List[str] = Field(default_factory=list)
    platforms: List[str] = Field(default_factory=list)
    requires_dist: List[str] = Field(default_factory=list)
    provides_dist: List[str] = Field(default_factory=list)
    obsoletes_dist: List[str] = Field(default_factory=list)
    requires_external: List[str] = Field(default_factory=list)
    project_urls: List[str] = Field(default_factory=list)

    @classmethod
    def parse(cls, content: Union[bytes, str]) -> PackageMetadata:
        """Parse an RFC 822 style metadata file.

        Args:
            content: Raw PKG-INFO or METADATA contents

        Returns:
            PackageMetadata instance

        Raises:
            Metadata23Error: If the content is not valid metadata
        """
        try:
            raw, unparsed = parse_email(content)
        except (ValueError, UnicodeDecodeError) as e:
            raise Metadata23Error(str(e)) from e

        data: Dict[str, Any] = {
            key: value
            for key, value in raw.items()
            if key in cls.model_fields and key not in ("keywords", "project_urls")
        }

        # Keywords and project URLs are sent as written in the file, not
        # rebuilt from the values packaging has split
        headers = _parse_headers(content)
        if headers.get("Keywords") is not None:
            data["keywords"] = headers["Keywords"]
        data["project_urls"] = headers.get_all("Project-URL", [])

        for header in ("metadata-version", "name", "version"):
            if header in unparsed:
                raise Metadata23Error(f"Invalid or duplicate `{header}` field")

        try:
            return cls(**data)
        except ValidationError as e:
            missing = ", ".join(str(err["loc"][0]) for err in e.errors())
            raise Metadata23Error(f"Missing or invalid fields: {missing}") from e


def read_metadata(path: Path, filename: DistFilename) -> PackageMetadata:
    """Extract and parse the core metadata of a distribution file.

    Args:
        path: Path to the distribution
        filename: Parsed filename, selects the archive format

    Returns:
        PackageMetadata instance

    Raises:
        InvalidExtensionError: For source distributions not ending in .tar.gz
        PrepareError: Any other preparation failure
    """
    if isinstance(filename, SourceDistFilename):
        if filename.extension != SourceDistExtension.TAR_GZ:
            # Legacy formats can be installed, but are not created or uploaded
            raise InvalidExtensionError(filename)
        contents = source_dist_pkg_info(path)
    elif isinstance(filename, WheelFilename):
        try:
            with open(path, "rb") as f:
                contents = read_wheel_metadata(filename, f)
        except OSError as e:
            raise PrepareIoError(e) from e
    else:
        raise TypeError(f"Unsupported distribution filename: {filename!r}")

    metadata = PackageMetadata.parse(contents)
    logger.debug(f"Read metadata for {metadata.name} {metadata.version} from {path.name}")
    return metadata
