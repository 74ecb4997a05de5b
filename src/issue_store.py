"""
Issue snapshot persistence.

The snapshot is one JSON array of work items on local disk.  The fetch
tool is its only writer and the ``get-issues-by-state`` prompt its only
reader.  There is no locking: the server is meant for one interactive
session at a time, and an overlapping fetch/read simply observes the last
complete write.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Iterable

from .errors import IssueStoreError
from .models import WorkItem

logger = logging.getLogger(__name__)


def save_issues(items: Iterable[WorkItem | dict], path: str) -> str:
    """Overwrite *path* with the pretty-printed JSON array of *items*."""
    records = [
        item.to_json_dict() if isinstance(item, WorkItem) else item
        for item in items
    ]
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(records, f, indent=2, ensure_ascii=False)
    logger.info("Saved %d issues to %s", len(records), path)
    return path


def load_issues(path: str) -> list[dict]:
    """
    Read the snapshot back.

    Raises:
        IssueStoreError: the file is absent, unreadable, or not a JSON array
            of objects.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise IssueStoreError(f"Failed to read or parse issues file {path}: {e}") from e
    if not isinstance(data, list):
        raise IssueStoreError(f"Failed to read or parse issues file {path}: expected a JSON array")
    if not all(isinstance(item, dict) for item in data):
        raise IssueStoreError(f"Failed to read or parse issues file {path}: entries must be JSON objects")
    return data


def filter_by_state(items: Iterable[dict], state: str) -> list[dict]:
    """Items whose ``state`` equals *state* exactly (case-sensitive)."""
    return [item for item in items if item.get("state") == state]
