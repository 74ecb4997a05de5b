"""
Azure DevOps REST API client for work item queries.
"""

from __future__ import annotations

import logging

from .errors import UpstreamHTTPError
from .http_client import HttpResponse, raise_for_status, send_request
from .models import FIELDS

logger = logging.getLogger(__name__)

#: Maximum number of ids the workitemsbatch endpoint accepts per call.
BATCH_SIZE = 200

ISSUES_QUERY = (
    "SELECT [System.Id] FROM WorkItems "
    "WHERE [System.TeamProject] = @project "
    "AND [System.WorkItemType] = 'Issue' "
    "ORDER BY [System.ChangedDate] DESC"
)


class DevOpsClient:
    """Client for Azure DevOps work item reads using Basic auth (user + PAT)."""

    def __init__(self, organization=None, project=None, username="", pat="", api_version="7.1"):
        self.organization = organization
        self.project = project
        self.username = username
        self.pat = pat
        self.api_version = api_version

    @property
    def auth(self) -> tuple[str, str]:
        """``(user, secret)`` pair handed to the HTTP adapter."""
        return (self.username or "", self.pat or "")

    @property
    def base_url(self):
        """Get base URL for Azure DevOps API."""
        return f"https://dev.azure.com/{self.organization}/{self.project}/_apis/wit"

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def run_wiql(self, query_text):
        """
        Execute a WIQL query and return matching work item IDs.

        Args:
            query_text: A WIQL query string.

        Returns:
            List of integer work item IDs, in the order the query returned them.
        """
        url = f"{self.base_url}/wiql?api-version={self.api_version}"
        resp = send_request("POST", url, body={"query": query_text}, auth=self.auth)
        raise_for_status(resp, "WIQL query failed")
        return [item["id"] for item in self._json(resp).get("workItems", [])]

    def query_issue_ids(self):
        """IDs of every Issue work item, most recently changed first."""
        return self.run_wiql(ISSUES_QUERY)

    def get_work_items_batch(self, ids, fields=None):
        """
        Fetch work item details in batches of 200 (API limit).

        Args:
            ids: List of work item IDs.
            fields: List of field reference names. Uses default set if None.

        Returns:
            List of raw work item dicts from the API.
        """
        if not ids:
            return []
        if fields is None:
            fields = FIELDS

        url = f"{self.base_url}/workitemsbatch?api-version={self.api_version}"
        items = []
        for i in range(0, len(ids), BATCH_SIZE):
            batch = list(ids[i:i + BATCH_SIZE])
            resp = send_request(
                "POST", url, body={"ids": batch, "fields": list(fields)}, auth=self.auth
            )
            raise_for_status(resp, "Work item batch request failed")
            items.extend(self._json(resp).get("value", []))
        logger.info("Fetched %d work items for %d ids", len(items), len(ids))
        return items

    def get_work_item(self, work_item_id):
        """
        Get a single work item by ID.

        Returns:
            The HttpResponse; its body is the parsed work item when JSON.
        """
        url = f"{self.base_url}/workitems/{work_item_id}?api-version={self.api_version}"
        return send_request("GET", url, auth=self.auth)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _json(resp: HttpResponse) -> dict:
        """Return the JSON body, failing when the API answered with something else."""
        if not isinstance(resp.body, dict):
            raise UpstreamHTTPError(resp.status, resp.body_text(), "Unexpected non-JSON response")
        return resp.body
