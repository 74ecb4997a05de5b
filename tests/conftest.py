"""
Shared test configuration.

Clears Azure DevOps / Teams settings from the environment so no test can
reach a real endpoint, and provides a factory for fake ``requests``
responses used with ``unittest.mock.patch``.
"""

import json
import os
import sys

import pytest
from requests.structures import CaseInsensitiveDict

# Ensure src is importable from all test files
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# ---------------------------------------------------------------------------
# Blank out credentials so that load_dotenv() in mcp_server.py cannot
# inject real values: load_dotenv(override=False), the default, treats
# these as already set.
# ---------------------------------------------------------------------------
_CREDENTIAL_VARS = [
    "AZURE_USERNAME",
    "AZURE_PASSWORD",
    "TEAMS_WEBHOOK_URL",
]

for var in _CREDENTIAL_VARS:
    os.environ[var] = ""


class FakeResponse:
    """Just enough of ``requests.Response`` for the HTTP adapter."""

    def __init__(self, status_code=200, json_body=None, text=None,
                 content_type=None, reason="OK"):
        self.status_code = status_code
        self.reason = reason
        self._json_body = json_body
        if text is None:
            text = json.dumps(json_body) if json_body is not None else ""
        self.text = text
        if content_type is None:
            content_type = (
                "application/json; charset=utf-8" if json_body is not None
                else "text/plain"
            )
        self.headers = CaseInsensitiveDict({"Content-Type": content_type})

    def json(self):
        if self._json_body is None:
            return json.loads(self.text)
        return self._json_body


@pytest.fixture
def fake_response():
    """Factory fixture: ``fake_response(status_code=..., json_body=...)``."""
    return FakeResponse


def api_item(item_id, title, state, assigned=None, tags=""):
    """A raw work item as returned by the workitemsbatch endpoint."""
    fields = {
        "System.Id": item_id,
        "System.Title": title,
        "System.State": state,
        "System.CreatedDate": "2024-01-02T03:04:05.12Z",
        "System.ChangedDate": "2024-02-03T04:05:06Z",
        "System.Tags": tags,
    }
    if assigned:
        fields["System.AssignedTo"] = {
            "displayName": assigned,
            "uniqueName": f"{assigned.lower().replace(' ', '.')}@example.com",
        }
    return {"id": item_id, "fields": fields}


@pytest.fixture
def make_api_item():
    return api_item
