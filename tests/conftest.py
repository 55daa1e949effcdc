"""Shared fixtures: build real wheels and source distributions on the fly."""

import io
import tarfile
import zipfile
from pathlib import Path
from typing import Callable, Dict, Optional

import pytest
import requests

WHEEL_METADATA = """\
Metadata-Version: 2.1
Name: tqdm
Version: 4.66.1
Summary: Fast, Extensible Progress Meter
Maintainer-email: tqdm developers <devs@tqdm.ml>
License: MPL-2.0 AND MIT
Project-URL: homepage, https://tqdm.github.io
Project-URL: repository, https://github.com/tqdm/tqdm
Keywords: progressbar,progressmeter,progress
Classifier: Development Status :: 5 - Production/Stable
Classifier: Environment :: Console
Classifier: Programming Language :: Python :: 3
Requires-Python: >=3.7
Description-Content-Type: text/x-rst
Requires-Dist: colorama ; platform_system == "Windows"
Requires-Dist: pytest >=6 ; extra == 'dev'

tqdm means "progress" in Arabic.
"""

SDIST_PKG_INFO = """\
Metadata-Version: 2.3
Name: tqdm
Version: 999.0.0
Author-email: Charlie Marsh <charlie.r.marsh@gmail.com>
Classifier: Development Status :: 4 - Beta
Classifier: Programming Language :: Python
Description-Content-Type: text/markdown

# tqdm
"""


@pytest.fixture
def make_wheel(tmp_path: Path) -> Callable[..., Path]:
    """Factory building a wheel archive in tmp_path."""

    def _make_wheel(
        filename: str = "tqdm-4.66.1-py3-none-any.whl",
        metadata: Optional[str] = WHEEL_METADATA,
        dist_info: str = "tqdm-4.66.1.dist-info",
    ) -> Path:
        path = tmp_path / filename
        with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            archive.writestr("tqdm/__init__.py", "__version__ = '4.66.1'\n")
            if metadata is not None:
                archive.writestr(f"{dist_info}/METADATA", metadata)
            archive.writestr(f"{dist_info}/WHEEL", "Wheel-Version: 1.0\nRoot-Is-Purelib: true\n")
            archive.writestr(f"{dist_info}/RECORD", "")
        return path

    return _make_wheel


@pytest.fixture
def make_sdist(tmp_path: Path) -> Callable[..., Path]:
    """Factory building a gzip tar source distribution in tmp_path."""

    def _make_sdist(
        filename: str = "tqdm-999.0.0.tar.gz",
        entries: Optional[Dict[str, bytes]] = None,
    ) -> Path:
        if entries is None:
            entries = {
                "tqdm-999.0.0/PKG-INFO": SDIST_PKG_INFO.encode(),
                "tqdm-999.0.0/pyproject.toml": b"[project]\nname = 'tqdm'\n",
                "tqdm-999.0.0/src/tqdm/__init__.py": b"",
            }
        path = tmp_path / filename
        with tarfile.open(path, "w:gz") as archive:
            for name, content in entries.items():
                info = tarfile.TarInfo(name)
                info.size = len(content)
                archive.addfile(info, io.BytesIO(content))
        return path

    return _make_sdist


def make_response(
    status: int,
    body: bytes = b"",
    url: str = "https://example.org/upload",
    content_type: Optional[str] = None,
) -> requests.Response:
    """Build a fully read response as returned by the transport."""
    response = requests.Response()
    response.status_code = status
    response.url = url
    response._content = body
    response._content_consumed = True
    if content_type is not None:
        response.headers["Content-Type"] = content_type
    return response
