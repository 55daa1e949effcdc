"""
Upload form fields.

Builds the non-file fields of the legacy upload API's multipart request from
a distribution's core metadata. Field names and order follow the reference
upload clients so the request body is byte-for-byte reproducible.
"""

import hashlib
from pathlib import Path
from typing import List, Optional, Tuple

from distpub.core.filename import DistFilename, WheelFilename
from distpub.core.metadata import PackageMetadata, read_metadata

FormFields = List[Tuple[str, str]]

HASH_CHUNK_SIZE = 65536


def hash_file(path: Path) -> str:
    """Calculate the SHA256 hex digest of a file, reading it in chunks.

    Args:
        path: File to hash

    Returns:
        Lowercase hex digest

    Raises:
        OSError: If the file cannot be read
    """
    sha256_hash = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(HASH_CHUNK_SIZE), b""):
            sha256_hash.update(chunk)
    return sha256_hash.hexdigest()


def build_form_fields(
    sha256_digest: str, filename: DistFilename, metadata: PackageMetadata
) -> FormFields:
    """Translate metadata into the ordered list of upload form fields.

    Args:
        sha256_digest: Hex digest of the distribution file
        filename: Parsed distribution filename
        metadata: Core metadata of the distribution

    Returns:
        Ordered (name, value) pairs; repeated fields appear once per value
    """
    fields: FormFields = [
        (":action", "file_upload"),
        ("sha256_digest", sha256_digest),
        ("protocol_version", "1"),
        ("metadata_version", metadata.metadata_version),
        # Sent as written in the metadata; registries normalize it themselves
        ("name", metadata.name),
        ("version", metadata.version),
        ("filetype", filename.filetype),
    ]

    if isinstance(filename, WheelFilename):
        fields.append(("pyversion", ".".join(filename.python_tag)))
    else:
        fields.append(("pyversion", "source"))

    optional = [
        ("summary", metadata.summary),
        ("description", metadata.description),
        ("description_content_type", metadata.description_content_type),
        ("author", metadata.author),
        ("author_email", metadata.author_email),
        ("maintainer", metadata.maintainer),
        ("maintainer_email", metadata.maintainer_email),
        ("license", metadata.license),
        ("keywords", metadata.keywords),
        ("home_page", metadata.home_page),
        ("download_url", metadata.download_url),
    ]
    fields.extend((name, value) for name, value in optional if value is not None)

    # GitLab rejects uploads without this field, so it is sent even when empty
    fields.append(("requires_python", metadata.requires_python or ""))

    repeated = [
        ("classifiers", metadata.classifiers),
        ("platform", metadata.platforms),
        ("requires_dist", metadata.requires_dist),
        ("provides_dist", metadata.provides_dist),
        ("obsoletes_dist", metadata.obsoletes_dist),
        ("requires_external", metadata.requires_external),
        ("project_urls", metadata.project_urls),
    ]
    for name, values in repeated:
        fields.extend((name, value) for value in values)

    return fields


def form_metadata(
    path: Path, filename: DistFilename, metadata: Optional[PackageMetadata] = None
) -> FormFields:
    """Hash a distribution and collect its upload form fields.

    Args:
        path: Path to the distribution
        filename: Parsed distribution filename
        metadata: Pre-parsed metadata (read from the file if not given)

    Returns:
        Ordered form fields

    Raises:
        OSError: If hashing fails
        PrepareError: If metadata extraction fails
    """
    sha256_digest = hash_file(path)
    if metadata is None:
        metadata = read_metadata(path, filename)
    return build_form_fields(sha256_digest, filename, metadata)
