from __future__ import annotations

"""
distpub - Publish Python distributions to package registries

A CLI tool and library for uploading wheels and source distributions to
PyPI-compatible registries (PyPI, Artifactory, Nexus, GitLab, pypiserver)
using the legacy multipart upload protocol.
"""

__version__ = "0.1.0"
__license__ = "MIT"

# Make version accessible
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _version

try:
    __version__ = _version("distpub")
except PackageNotFoundError:
    # Package not installed yet
    pass
