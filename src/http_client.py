"""
Thin HTTP adapter shared by every tool.

Builds the Basic-auth header, performs exactly one outbound request via
``requests`` and classifies the response body as JSON or text from the
``Content-Type`` header.  No retries.
"""

from __future__ import annotations

import base64
import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

import requests

from .errors import UpstreamHTTPError
from .log_sanitizer import redact_headers

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30
JSON_CONTENT_TYPE = "application/json"


@dataclass
class HttpResponse:
    """Status and classified body of a single upstream response."""

    status: int
    reason: str
    body: Any
    content_type: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def is_json(self) -> bool:
        return JSON_CONTENT_TYPE in self.content_type.lower()

    def body_text(self) -> str:
        """Body as a string: pretty-printed JSON, or the raw text as received."""
        if self.is_json:
            return json.dumps(self.body, indent=2)
        return self.body if isinstance(self.body, str) else str(self.body)


def basic_auth_header(user: str, secret: str) -> str:
    """Return the ``Authorization`` value for Basic auth.

    Azure DevOps accepts any (or an empty) user name together with a PAT as
    the secret.
    """
    token = base64.b64encode(f"{user or ''}:{secret or ''}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


def parse_body(response: requests.Response) -> Any:
    """Parse JSON when the content type says so, otherwise return text."""
    content_type = response.headers.get("content-type", "") or ""
    if JSON_CONTENT_TYPE in content_type.lower():
        return response.json()
    return response.text


def send_request(
    method: str,
    url: str,
    headers: Optional[dict] = None,
    body: Any = None,
    auth: Optional[tuple[str, str]] = None,
) -> HttpResponse:
    """
    Perform one outbound HTTP request.

    Args:
        method: HTTP verb (GET, POST, PUT, DELETE, PATCH).
        url: Absolute target URL.
        headers: Optional extra request headers.
        body: Optional payload; JSON-encoded when given.
        auth: Optional ``(user, secret)`` pair for Basic auth.  Overrides any
              Authorization header passed in *headers*.

    Returns:
        HttpResponse with the status code and the classified body.

    Raises:
        requests.RequestException: network failure.
        ValueError: the response claimed JSON but did not parse.
    """
    request_headers = dict(headers or {})
    if auth is not None:
        request_headers["Authorization"] = basic_auth_header(*auth)

    logger.debug(
        "%s %s headers=%s", method.upper(), url, redact_headers(request_headers)
    )
    resp = requests.request(
        method.upper(),
        url,
        headers=request_headers,
        json=body,
        timeout=REQUEST_TIMEOUT,
    )
    content_type = resp.headers.get("content-type", "") or ""
    result = HttpResponse(
        status=resp.status_code,
        reason=resp.reason or "",
        body=parse_body(resp),
        content_type=content_type,
    )
    logger.debug("%s %s -> %s", method.upper(), url, result.status)
    return result


def raise_for_status(response: HttpResponse, context: str = "Request failed") -> HttpResponse:
    """Raise :class:`UpstreamHTTPError` for non-2xx responses, else return *response*."""
    if not response.ok:
        raise UpstreamHTTPError(response.status, response.body_text(), context)
    return response
