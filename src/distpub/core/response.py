from __future__ import annotations

"""
Upload response interpretation.

Turns the registry's HTTP response into "newly uploaded" (True), "already
exists" (False) or a SendError. Registries disagree on how to report a
duplicate upload; the known conventions are listed in ALREADY_EXISTS_QUIRKS
and checked top to bottom.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import requests
from pydantic import BaseModel, ValidationError
from urllib3.util import parse_url

from distpub.core.errors import (
    PermissionDeniedError,
    RedirectError,
    StatusError,
    StatusNoBodyError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AlreadyExistsQuirk:
    """A status code (and optional body phrases) meaning "file already exists"."""

    registry: str
    status: int
    # Any phrase must occur in the body; empty means the status alone matches
    phrases: Tuple[str, ...] = ()

    def matches(self, status: int, body: str) -> bool:
        if status != self.status:
            return False
        return not self.phrases or any(phrase in body for phrase in self.phrases)


ALREADY_EXISTS_QUIRKS: Tuple[AlreadyExistsQuirk, ...] = (
    AlreadyExistsQuirk("Artifactory", 403, ("overwrite artifact",)),
    AlreadyExistsQuirk("pypiserver", 409),
    AlreadyExistsQuirk("Nexus", 400, ("updating asset",)),
    AlreadyExistsQuirk("GitLab", 400, ("already been taken",)),
)


class RegistryErrorBody(BaseModel):
    """Structured error body of PyPI (warehouse).

    ``code`` holds the most specific message, e.g. "403 Invalid or
    non-existent authentication information. See ...", while ``message``
    and ``title`` are generic boilerplate.
    """

    code: str


def extract_error_message(body: str, content_type: Optional[str]) -> str:
    """Pick the most useful error message out of a response body.

    Args:
        body: Response body text
        content_type: Value of the Content-Type header, if any

    Returns:
        The ``code`` field of a JSON error body, otherwise the body itself
    """
    if content_type == "application/json":
        try:
            return RegistryErrorBody.model_validate_json(body).code
        except ValidationError:
            return body
    return body


def canonical_url(url: str) -> str:
    """Normalize a URL for comparison, dropping any user info."""
    prepared = requests.PreparedRequest()
    prepared.prepare_url(url, None)
    return parse_url(prepared.url)._replace(auth=None).url


def find_quirk(status: int, body: str) -> Optional[AlreadyExistsQuirk]:
    """Find the first registry quirk that reports this response as a duplicate."""
    for quirk in ALREADY_EXISTS_QUIRKS:
        if quirk.matches(status, body):
            return quirk
    return None


def handle_response(
    registry: str,
    response: requests.Response,
    logger: logging.Logger = logger,
) -> bool:
    """Classify an upload response.

    Args:
        registry: The URL the upload was sent to
        response: The (possibly redirected) final response
        logger: Logger for diagnostics

    Returns:
        True if the file was newly uploaded, False if it already existed

    Raises:
        RedirectError: If the final URL differs from the registry URL
        StatusNoBodyError: If the error body of a non-2xx response can't be read
        PermissionDeniedError: On 403 not caused by an existing file
        StatusError: On any other non-2xx status
    """
    status = response.status_code
    logger.debug(f"Response code for {registry}: {status}")
    logger.debug(f"Response headers for {registry}: {dict(response.headers)}")

    # A redirect turns the POST into a GET (Post/Redirect/Get), so a mistyped
    # index URL returns 200 without anything being uploaded
    if canonical_url(response.url) != canonical_url(registry):
        raise RedirectError(response.url)

    if 200 <= status < 300:
        if logger.isEnabledFor(logging.DEBUG):
            try:
                logger.debug(f"Response content for {registry}: {response.text}")
            except requests.RequestException as e:
                logger.debug(f"Failed to read response content for {registry}: {e}")
        return True

    content_type = response.headers.get("Content-Type")
    try:
        content = response.content
    except requests.RequestException as e:
        raise StatusNoBodyError(status) from e
    upload_error = content.decode("utf-8", errors="replace")

    logger.debug(f"Upload error response: {upload_error}")

    quirk = find_quirk(status, upload_error)
    if quirk is not None:
        logger.debug(f"Treating status {status} as existing file ({quirk.registry})")
        return False

    message = extract_error_message(upload_error, content_type)
    if status == 403:
        raise PermissionDeniedError(status, message)
    raise StatusError(status, message)
