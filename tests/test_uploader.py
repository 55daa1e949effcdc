"""Tests for the upload transport."""

import base64
from typing import Dict, List, Optional
from unittest.mock import patch

import pytest
import requests
from conftest import make_response

from distpub.core.errors import (
    PublishPrepareError,
    PublishSendError,
    RequestFailedError,
    StatusError,
    format_error_chain,
)
from distpub.core.filename import parse_dist_filename
from distpub.core.progress import NullReporter
from distpub.core.uploader import (
    ACCEPT,
    build_request,
    prepare_form,
    upload,
    url_with_username,
)

REGISTRY = "https://example.org/upload"


class RecordingReporter:
    """Reporter that records all progress events."""

    def __init__(self):
        self.started: List[tuple] = []
        self.progress: Dict[int, int] = {}
        self.completed = 0

    def on_progress(self, name: str, id: int) -> None:
        pass

    def on_download_start(self, name: str, size: Optional[int]) -> int:
        self.started.append((name, size))
        return len(self.started) - 1

    def on_download_progress(self, id: int, inc: int) -> None:
        self.progress[id] = self.progress.get(id, 0) + inc

    def on_download_complete(self) -> None:
        self.completed += 1


@pytest.fixture
def session() -> requests.Session:
    """A session that ignores netrc and proxy settings of the environment."""
    session = requests.Session()
    session.trust_env = False
    return session


def test_build_request(make_wheel, session):
    """Test the headers and multipart body of an authenticated upload."""
    path = make_wheel()
    filename = parse_dist_filename(path.name)
    form = prepare_form(path, filename)
    reporter = RecordingReporter()

    with open(path, "rb") as f:
        request = build_request(
            path, filename, REGISTRY, session, "ferris", "F3RR!S", form, reporter, f
        )
        body = request.body.read()

    assert request.method == "POST"
    assert request.url == REGISTRY
    assert request.headers["Authorization"] == "Basic ZmVycmlzOkYzUlIhUw=="
    assert request.headers["Content-Type"].startswith("multipart/form-data; boundary=")
    assert request.headers["Accept"] == ACCEPT

    assert b'name=":action"' in body
    assert b"file_upload" in body
    assert b'name="content"; filename="tqdm-4.66.1-py3-none-any.whl"' in body
    assert path.read_bytes() in body
    # The file part comes after all metadata fields
    assert body.index(b'name="content"') > body.index(b'name="requires_dist"')
    assert int(request.headers["Content-Length"]) == len(body)

    # Progress covers exactly the file bytes
    assert reporter.started == [("tqdm-4.66.1-py3-none-any.whl", path.stat().st_size)]
    assert reporter.progress == {0: path.stat().st_size}


def test_build_request_utf8_credentials(make_sdist, session):
    """Test that non-ASCII credentials are UTF-8 encoded."""
    path = make_sdist()
    filename = parse_dist_filename(path.name)

    with open(path, "rb") as f:
        request = build_request(
            path, filename, REGISTRY, session, "jürgen", "pässword", [], NullReporter(), f
        )

    expected = base64.b64encode("jürgen:pässword".encode()).decode()
    assert request.headers["Authorization"] == f"Basic {expected}"


def test_build_request_without_credentials(make_sdist, session):
    """Test that no Authorization header is sent without credentials."""
    path = make_sdist()
    filename = parse_dist_filename(path.name)

    with open(path, "rb") as f:
        request = build_request(path, filename, REGISTRY, session, None, None, [], NullReporter(), f)

    assert "Authorization" not in request.headers
    assert request.url == REGISTRY


def test_build_request_username_only(make_sdist, session):
    """Test that a lone username is handed to the session's auth via the URL."""
    path = make_sdist()
    filename = parse_dist_filename(path.name)
    seen_urls = []

    def session_auth(request):
        seen_urls.append(request.url)
        request.headers["Authorization"] = "Basic from-keyring"
        return request

    session.auth = session_auth

    with open(path, "rb") as f:
        request = build_request(
            path, filename, REGISTRY, session, "ferris", None, [], NullReporter(), f
        )

    assert seen_urls == ["https://ferris@example.org/upload"]
    assert request.headers["Authorization"] == "Basic from-keyring"


def test_explicit_credentials_override_session_auth(make_sdist, session):
    """Test that username and password win over session auth."""
    path = make_sdist()
    filename = parse_dist_filename(path.name)
    session.auth = ("someone", "else")

    with open(path, "rb") as f:
        request = build_request(
            path, filename, REGISTRY, session, "ferris", "F3RR!S", [], NullReporter(), f
        )

    assert request.headers["Authorization"] == "Basic ZmVycmlzOkYzUlIhUw=="


def test_url_with_username():
    """Test quoting of usernames in URLs."""
    assert url_with_username(REGISTRY, "ferris") == "https://ferris@example.org/upload"
    assert url_with_username(REGISTRY, "a@b") == "https://a%40b@example.org/upload"


def test_upload_success(make_wheel, session):
    """Test a complete upload against a registry returning 200."""
    path = make_wheel()
    filename = parse_dist_filename(path.name)

    with patch.object(session, "send", return_value=make_response(200)) as send:
        result = upload(path, filename, REGISTRY, session, "ferris", "F3RR!S", NullReporter())

    assert result is True
    send.assert_called_once()
    request = send.call_args[0][0]
    assert request.headers["Authorization"] == "Basic ZmVycmlzOkYzUlIhUw=="
    assert send.call_args[1]["allow_redirects"] is True
    assert send.call_args[1]["stream"] is True


def test_upload_already_exists(make_sdist, session):
    """Test that a duplicate upload is reported as not uploaded."""
    path = make_sdist()
    filename = parse_dist_filename(path.name)

    with patch.object(session, "send", return_value=make_response(409)):
        result = upload(path, filename, REGISTRY, session, None, None, NullReporter())

    assert result is False


def test_upload_request_failed(make_sdist, session):
    """Test that transport failures are wrapped with path and registry."""
    path = make_sdist()
    filename = parse_dist_filename(path.name)

    with patch.object(
        session, "send", side_effect=requests.ConnectionError("Connection refused")
    ):
        with pytest.raises(PublishSendError) as exc_info:
            upload(path, filename, REGISTRY, session, None, None, NullReporter())

    error = exc_info.value
    assert error.path == path
    assert error.registry == REGISTRY
    assert isinstance(error.__cause__, RequestFailedError)
    assert isinstance(error.__cause__.__cause__, requests.ConnectionError)

    rendered = format_error_chain(error)
    assert "Failed to send POST request" in rendered
    assert "Connection refused" in rendered


def test_upload_rejected(make_sdist, session):
    """Test that a rejected upload carries the status error as cause."""
    path = make_sdist()
    filename = parse_dist_filename(path.name)

    with patch.object(session, "send", return_value=make_response(500, b"boom")):
        with pytest.raises(PublishSendError) as exc_info:
            upload(path, filename, REGISTRY, session, None, None, NullReporter())

    assert isinstance(exc_info.value.__cause__, StatusError)
    assert exc_info.value.__cause__.message == "boom"


def test_upload_prepare_failure_sends_nothing(tmp_path, session):
    """Test that metadata errors abort before any request is sent."""
    path = tmp_path / "tqdm-4.66.1.tar.gz"
    path.write_bytes(b"not a tarball")
    filename = parse_dist_filename(path.name)

    with patch.object(session, "send") as send:
        with pytest.raises(PublishPrepareError, match="Failed to publish"):
            upload(path, filename, REGISTRY, session, None, None, NullReporter())

    send.assert_not_called()


def test_build_request_leaves_file_to_caller(make_sdist, session):
    """Test that the request streams from the caller's file without closing it."""
    path = make_sdist()
    filename = parse_dist_filename(path.name)

    with pytest.raises(TypeError):
        build_request(path, filename, REGISTRY, session, None, None, [], NullReporter())

    with open(path, "rb") as f:
        request = build_request(path, filename, REGISTRY, session, None, None, [], NullReporter(), f)
        body = request.body.read()
        assert not f.closed

    assert path.read_bytes() in body
