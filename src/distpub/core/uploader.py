from __future__ import annotations

"""
Upload transport.

Builds the multipart POST request of the legacy upload API and sends it.
The distribution file is streamed into the request body, never loaded into
memory as a whole.
"""

import base64
import logging
from pathlib import Path
from typing import BinaryIO, Optional
from urllib.parse import quote

import requests
from requests.auth import AuthBase
from requests_toolbelt import MultipartEncoder
from urllib3.util import parse_url

from distpub.core.errors import (
    PrepareError,
    PrepareIoError,
    PublishPrepareError,
    PublishSendError,
    RequestFailedError,
    SendError,
)
from distpub.core.filename import DistFilename
from distpub.core.form import FormFields, form_metadata
from distpub.core.progress import ProgressReader, Reporter
from distpub.core.response import handle_response

logger = logging.getLogger(__name__)

# Ask PyPI for structured JSON errors, and other registries for plain text over HTML
ACCEPT = "application/json;q=0.9, text/plain;q=0.8, text/html;q=0.7"


class BasicAuth(AuthBase):
    """HTTP Basic authentication with UTF-8 encoded credentials.

    Attached per request, so it takes precedence over session auth and netrc.
    """

    def __init__(self, username: str, password: str):
        self.username = username
        self.password = password

    def __call__(self, request: requests.PreparedRequest) -> requests.PreparedRequest:
        credentials = base64.b64encode(f"{self.username}:{self.password}".encode()).decode("ascii")
        request.headers["Authorization"] = f"Basic {credentials}"
        return request


def url_with_username(url: str, username: str) -> str:
    """Put a username into the user-info part of a URL."""
    return parse_url(url)._replace(auth=quote(username, safe="")).url


def build_request(
    path: Path,
    filename: DistFilename,
    registry: str,
    session: requests.Session,
    username: Optional[str],
    password: Optional[str],
    form: FormFields,
    reporter: Reporter,
    fileobj: BinaryIO,
) -> requests.PreparedRequest:
    """Build the upload request.

    Args:
        path: Path to the distribution
        filename: Parsed distribution filename
        registry: Upload URL
        session: Session the request will be sent with
        username: Optional username
        password: Optional password
        form: Form fields from form_metadata()
        reporter: Progress reporter
        fileobj: The opened distribution file; it is read while the request is
            sent and must stay open until then. The caller closes it

    Returns:
        Prepared request with a streaming multipart body

    Raises:
        OSError: If the file can't be stat-ed
    """
    size = path.stat().st_size
    idx = reporter.on_download_start(str(filename), size)
    reader = ProgressReader(fileobj, lambda read: reporter.on_download_progress(idx, read))

    fields = list(form)
    fields.append(("content", (str(filename), reader, "application/octet-stream")))
    encoder = MultipartEncoder(fields=fields)

    url = registry
    if username is not None and password is None:
        # The session's auth handler looks up the password for this user
        url = url_with_username(registry, username)

    headers = {
        "Content-Type": encoder.content_type,
        "Accept": ACCEPT,
    }
    auth = None
    if username is not None and password is not None:
        logger.debug("Using username/password basic auth")
        auth = BasicAuth(username, password)

    request = requests.Request("POST", url, data=encoder, headers=headers, auth=auth)
    return session.prepare_request(request)


def prepare_form(path: Path, filename: DistFilename) -> FormFields:
    """Hash a file and build its form fields, wrapping failures with the path.

    Raises:
        PublishPrepareError: With the specific PrepareError as cause
    """
    try:
        return form_metadata(path, filename)
    except PrepareError as e:
        raise PublishPrepareError(path) from e
    except OSError as e:
        raise PublishPrepareError(path) from PrepareIoError(e)


def send_request(
    session: requests.Session,
    request: requests.PreparedRequest,
    timeout: Optional[float] = None,
) -> requests.Response:
    """Send a prepared request with the session's environment settings.

    Redirects are followed so the final URL can be checked afterwards.
    """
    settings = session.merge_environment_settings(request.url, {}, True, None, None)
    return session.send(request, allow_redirects=True, timeout=timeout, **settings)


def upload(
    path: Path,
    filename: DistFilename,
    registry: str,
    session: requests.Session,
    username: Optional[str],
    password: Optional[str],
    reporter: Reporter,
    timeout: Optional[float] = None,
    logger: logging.Logger = logger,
) -> bool:
    """Upload a file to a registry.

    Args:
        path: Path to the distribution
        filename: Parsed distribution filename
        registry: Upload URL
        session: Shared requests session
        username: Optional username
        password: Optional password
        reporter: Progress reporter
        timeout: Request timeout in seconds (default: none)
        logger: Logger for diagnostics

    Returns:
        True if the file was newly uploaded, False if it already existed

    Raises:
        PublishPrepareError: If reading the file failed (cause attached)
        PublishSendError: If sending failed or the registry rejected the file
    """
    form = prepare_form(path, filename)

    try:
        fileobj = open(path, "rb")
    except OSError as e:
        raise PublishPrepareError(path) from PrepareIoError(e)

    with fileobj:
        try:
            request = build_request(
                path, filename, registry, session, username, password, form, reporter, fileobj
            )
        except OSError as e:
            raise PublishPrepareError(path) from PrepareIoError(e)

        logger.info(f"Uploading {filename} to {registry}")
        try:
            response = send_request(session, request, timeout)
        except requests.RequestException as e:
            send_error = RequestFailedError()
            send_error.__cause__ = e
            raise PublishSendError(path, registry) from send_error

        try:
            return handle_response(registry, response, logger=logger)
        except SendError as e:
            raise PublishSendError(path, registry) from e
        finally:
            response.close()
