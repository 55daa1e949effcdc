from __future__ import annotations

"""
HTTP session factory.

Builds the shared requests session used for uploads, applying proxy and
SSL/TLS settings. The session is treated as read-only once created.
"""

import atexit
import logging
import tempfile
from pathlib import Path
from typing import Optional

import requests

from distpub import __version__
from distpub.core.config import ProxyConfig, SSLConfig

logger = logging.getLogger(__name__)


def _remove_file(path: str) -> None:
    Path(path).unlink(missing_ok=True)


def create_session(
    proxy_config: Optional[ProxyConfig] = None,
    ssl_config: Optional[SSLConfig] = None,
) -> requests.Session:
    """Create a requests session with proxy and SSL/TLS configuration.

    Args:
        proxy_config: Optional proxy configuration
        ssl_config: Optional SSL/TLS configuration

    Returns:
        Configured requests session
    """
    session = requests.Session()
    session.headers.update({"User-Agent": f"distpub/{__version__}"})

    if proxy_config:
        proxies = {}
        if proxy_config.http_proxy:
            proxies["http"] = proxy_config.http_proxy
        if proxy_config.https_proxy:
            proxies["https"] = proxy_config.https_proxy
        if proxy_config.no_proxy:
            proxies["no_proxy"] = proxy_config.no_proxy
        session.proxies.update(proxies)

    if ssl_config:
        if not ssl_config.verify:
            # Disable SSL verification (not recommended)
            logger.warning("SSL certificate verification is disabled")
            session.verify = False
        elif ssl_config.ca_cert:
            # Inline CA certificate - requests needs a file path
            ca_file = tempfile.NamedTemporaryFile(mode="w", suffix=".pem", delete=False)
            ca_file.write(ssl_config.ca_cert)
            ca_file.close()
            atexit.register(_remove_file, ca_file.name)
            session.verify = ca_file.name
        elif ssl_config.ca_bundle:
            session.verify = ssl_config.ca_bundle

        # Client certificate for mTLS
        if ssl_config.client_cert:
            if ssl_config.client_key:
                session.cert = (ssl_config.client_cert, ssl_config.client_key)
            else:
                session.cert = ssl_config.client_cert

    return session
