"""Tests for the HTTP session factory."""

from pathlib import Path

from distpub import __version__
from distpub.core.client import create_session
from distpub.core.config import ProxyConfig, SSLConfig


def test_create_session_defaults():
    """Test a session without proxy or SSL settings."""
    session = create_session()

    assert session.headers["User-Agent"] == f"distpub/{__version__}"
    assert session.verify is True
    assert session.proxies == {}


def test_create_session_proxy():
    """Test proxy configuration."""
    session = create_session(
        proxy_config=ProxyConfig(
            https_proxy="http://proxy.example.com:8080",
            no_proxy="localhost,.internal",
        )
    )

    assert session.proxies == {
        "https": "http://proxy.example.com:8080",
        "no_proxy": "localhost,.internal",
    }


def test_create_session_ssl():
    """Test SSL verification settings."""
    session = create_session(ssl_config=SSLConfig(verify=False))
    assert session.verify is False

    session = create_session(ssl_config=SSLConfig(ca_bundle="/etc/ssl/ca.pem"))
    assert session.verify == "/etc/ssl/ca.pem"

    session = create_session(
        ssl_config=SSLConfig(client_cert="/etc/ssl/client.pem", client_key="/etc/ssl/client.key")
    )
    assert session.cert == ("/etc/ssl/client.pem", "/etc/ssl/client.key")


def test_create_session_inline_ca_cert():
    """Test that inline CA certificates are written to a file."""
    pem = "-----BEGIN CERTIFICATE-----\nMIIB\n-----END CERTIFICATE-----\n"

    session = create_session(ssl_config=SSLConfig(ca_cert=pem))

    assert Path(session.verify).read_text() == pem
