"""
Configuration management for distpub.

This module provides Pydantic models for configuration validation and
YAML-based configuration loading with include support.
"""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

PYPI_UPLOAD_URL = "https://upload.pypi.org/legacy/"
TESTPYPI_UPLOAD_URL = "https://test.pypi.org/legacy/"

# Username that tells PyPI-compatible registries the password is an API token
TOKEN_USERNAME = "__token__"


class ProxyConfig(BaseModel):
    """HTTP proxy configuration."""

    http_proxy: Optional[str] = None
    https_proxy: Optional[str] = None
    no_proxy: Optional[str] = None


class SSLConfig(BaseModel):
    """SSL/TLS configuration for HTTPS connections."""

    # Path to CA bundle file (PEM format)
    ca_bundle: Optional[str] = None

    # Inline CA certificates (PEM format, multiple certs separated by newlines)
    ca_cert: Optional[str] = None

    # Disable SSL verification (not recommended for production)
    verify: bool = True

    # Client certificate for mTLS
    client_cert: Optional[str] = None
    client_key: Optional[str] = None


class RegistryConfig(BaseModel):
    """Upload target configuration."""

    name: str
    url: str  # legacy upload endpoint, e.g. https://upload.pypi.org/legacy/

    # Credentials (all optional; username without password defers to the session's auth)
    username: Optional[str] = None
    password: Optional[str] = None
    token: Optional[str] = None

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate upload URL scheme."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Invalid registry URL: {v}. Must start with http:// or https://")
        return v

    @model_validator(mode="after")
    def validate_credentials(self) -> "RegistryConfig":
        """Validate that a token is not combined with username/password."""
        if self.token and (self.password or (self.username and self.username != TOKEN_USERNAME)):
            raise ValueError(
                f"Registry '{self.name}': 'token' cannot be combined with "
                "'username'/'password'."
            )
        return self

    def credentials(self) -> tuple[Optional[str], Optional[str]]:
        """Get the (username, password) pair to upload with."""
        if self.token:
            return TOKEN_USERNAME, self.token
        return self.username, self.password


class UploadConfig(BaseModel):
    """Upload request configuration."""

    timeout: int = 300  # Request timeout in seconds

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        """Validate timeout value."""
        if v < 1:
            raise ValueError("timeout must be at least 1 second")
        return v


def default_registries() -> List[RegistryConfig]:
    """Registries that are always available, unless overridden by name."""
    return [
        RegistryConfig(name="pypi", url=PYPI_UPLOAD_URL),
        RegistryConfig(name="testpypi", url=TESTPYPI_UPLOAD_URL),
    ]


class GlobalConfig(BaseModel):
    """Global distpub configuration."""

    default_registry: str = "pypi"
    registries: List[RegistryConfig] = Field(default_factory=list)
    proxy: Optional[ProxyConfig] = None
    ssl: Optional[SSLConfig] = None
    upload: UploadConfig = Field(default_factory=UploadConfig)

    # Include pattern for additional config files
    include: Optional[str] = None

    def get_registry(self, name: Optional[str] = None) -> Optional[RegistryConfig]:
        """Get registry configuration by name.

        Configured registries take precedence over the built-in ones.

        Args:
            name: Registry name (default: default_registry)

        Returns:
            RegistryConfig or None if unknown
        """
        name = name or self.default_registry
        for registry in self.registries + default_registries():
            if registry.name == name:
                return registry
        return None


class ConfigLoader:
    """Configuration file loader with include support."""

    def __init__(self, config_path: Path):
        """Initialize config loader.

        Args:
            config_path: Path to main configuration file
        """
        self.config_path = config_path

    def load(self) -> GlobalConfig:
        """Load configuration from YAML file.

        Returns:
            GlobalConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not self.config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        try:
            with open(self.config_path) as f:
                config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"YAML syntax error in {self.config_path}:\n{e}") from e

        if "include" in config_data:
            config_data.setdefault("registries", [])
            config_data["registries"].extend(self._load_includes(config_data["include"]))

        try:
            return GlobalConfig(**config_data)
        except Exception as e:
            raise ValueError(f"Configuration validation error in {self.config_path}:\n{e}") from e

    def _load_includes(self, include_pattern: str) -> List[Dict[str, Any]]:
        """Load registries from included configuration files.

        Args:
            include_pattern: Glob pattern relative to the main config (e.g., "conf.d/*.yaml")

        Returns:
            List of registry dictionaries from included files
        """
        config_dir = self.config_path.parent
        config_files = sorted(config_dir.glob(include_pattern))

        all_registries = []
        for config_file in config_files:
            if config_file.suffix in [".yaml", ".yml"]:
                try:
                    with open(config_file) as f:
                        data = yaml.safe_load(f) or {}
                except yaml.YAMLError as e:
                    raise ValueError(f"YAML syntax error in {config_file}:\n{e}") from e
                all_registries.extend(data.get("registries", []))

        return all_registries


def load_config(config_path: Optional[Path] = None) -> GlobalConfig:
    """Load configuration from file.

    Priority:
    1. Explicit config_path parameter (--config CLI flag)
    2. DISTPUB_CONFIG environment variable
    3. Default locations (/etc/distpub/config.yaml, ~/.config/distpub/config.yaml, ./distpub.yaml)

    Args:
        config_path: Path to config file. If None, tries DISTPUB_CONFIG env or default locations.

    Returns:
        GlobalConfig instance

    Raises:
        FileNotFoundError: If an explicitly requested config file is missing
    """
    default_paths = [
        Path("/etc/distpub/config.yaml"),
        Path.home() / ".config" / "distpub" / "config.yaml",
        Path("distpub.yaml"),
    ]

    if config_path:
        paths_to_try = [config_path]
    elif os.environ.get("DISTPUB_CONFIG"):
        paths_to_try = [Path(os.environ["DISTPUB_CONFIG"])]
    else:
        paths_to_try = default_paths

    for path in paths_to_try:
        if path.exists():
            return ConfigLoader(path).load()

    if config_path:
        raise FileNotFoundError(f"Configuration file not found: {config_path}")
    elif os.environ.get("DISTPUB_CONFIG"):
        raise FileNotFoundError(
            f"Configuration file not found: {os.environ['DISTPUB_CONFIG']} (from DISTPUB_CONFIG)"
        )
    return GlobalConfig()


def create_example_config(output_path: Path) -> None:
    """Create an example configuration file.

    Args:
        output_path: Path to write example config
    """
    example_config = {
        "default_registry": "internal",
        "registries": [
            {
                "name": "internal",
                "url": "https://nexus.example.com/repository/pypi-internal/",
                "username": "deploy",
            },
            {
                "name": "testpypi",
                "url": TESTPYPI_UPLOAD_URL,
                "token": "pypi-...",
            },
        ],
        "proxy": {
            "https_proxy": "http://proxy.example.com:8080",
            "no_proxy": "localhost,127.0.0.1,.internal.domain",
        },
        "ssl": {
            "verify": True,
            "ca_bundle": "/etc/pki/tls/certs/ca-bundle.crt",
        },
        "upload": {
            "timeout": 300,
        },
        "include": "conf.d/*.yaml",
    }

    with open(output_path, "w") as f:
        yaml.dump(example_config, f, default_flow_style=False, sort_keys=False)
