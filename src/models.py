"""
Pydantic models for the work items this server handles.

* **WorkItem** is the flattened view of an Azure DevOps work item that is
  persisted in the issue snapshot and rendered into the HTML report.  It is
  built from the API's field bag (``System.Title``, ``System.State`` ...)
  and serialised with camelCase keys.
* **ReportTable** is what comes back out of the HTML report: a header row
  plus positional data rows.  Cells are matched to WorkItem fields by
  column order only.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ---------------------------------------------------------------------------
# Field reference names
# ---------------------------------------------------------------------------

#: Fields requested from the work-item batch endpoint.
FIELDS = [
    "System.Id",
    "System.Title",
    "System.State",
    "System.AssignedTo",
    "System.CreatedDate",
    "System.ChangedDate",
    "System.Tags",
]


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------

class WorkItem(BaseModel):
    """A single work item as stored in the snapshot."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    title: str = ""
    state: str = ""
    assigned_to: Optional[str] = Field(default=None, alias="assignedTo")
    created_date: Optional[datetime] = Field(default=None, alias="createdDate")
    changed_date: Optional[datetime] = Field(default=None, alias="changedDate")
    tags: str = ""

    @field_validator("assigned_to", mode="before")
    @classmethod
    def _identity_to_name(cls, value: Any) -> Optional[str]:
        """Azure DevOps returns identities as objects; keep the display name."""
        if isinstance(value, dict):
            return value.get("displayName") or value.get("uniqueName")
        return value or None

    @field_validator("title", "state", "tags", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @classmethod
    def from_api(cls, raw: dict) -> "WorkItem":
        """Build a WorkItem from a raw ``{"id": ..., "fields": {...}}`` API dict."""
        f = raw.get("fields", {})
        return cls(
            id=raw.get("id", f.get("System.Id")),
            title=f.get("System.Title", ""),
            state=f.get("System.State", ""),
            assignedTo=f.get("System.AssignedTo"),
            createdDate=f.get("System.CreatedDate"),
            changedDate=f.get("System.ChangedDate"),
            tags=f.get("System.Tags", ""),
        )

    def to_json_dict(self) -> dict:
        """JSON-ready dict with camelCase keys and ISO-8601 dates."""
        return self.model_dump(mode="json", by_alias=True)


class ReportTable(BaseModel):
    """Header row and data rows extracted from an HTML report table."""

    headers: list[str] = []
    rows: list[list[str]] = []
