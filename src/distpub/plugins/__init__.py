"""Metadata readers for the supported distribution formats."""

from distpub.plugins.sdist import source_dist_pkg_info
from distpub.plugins.wheel import read_wheel_metadata

__all__ = [
    "read_wheel_metadata",
    "source_dist_pkg_info",
]
