"""
Core functionality for distpub.

This package provides file discovery, metadata extraction, form building,
the upload transport and response handling.
"""

from distpub.core.config import (
    ConfigLoader,
    GlobalConfig,
    ProxyConfig,
    RegistryConfig,
    SSLConfig,
    UploadConfig,
    create_example_config,
    load_config,
)
from distpub.core.errors import PublishError, format_error_chain
from distpub.core.filename import (
    DistFilename,
    SourceDistExtension,
    SourceDistFilename,
    WheelFilename,
    parse_dist_filename,
)

__all__ = [
    "ConfigLoader",
    "DistFilename",
    "GlobalConfig",
    "ProxyConfig",
    "PublishError",
    "RegistryConfig",
    "SSLConfig",
    "SourceDistExtension",
    "SourceDistFilename",
    "UploadConfig",
    "WheelFilename",
    "create_example_config",
    "format_error_chain",
    "load_config",
    "parse_dist_filename",
]
