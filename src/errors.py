"""
Exception classes for the Azure DevOps / Teams MCP server.

Every tool handler catches these at its boundary and turns them into a
text message for the MCP client, so nothing here ever reaches the
transport as a protocol fault.
"""

from __future__ import annotations

from typing import Optional


class AzureMcpError(Exception):
    """Base exception.

    Attributes:
        status_code: HTTP status code of the failing upstream response, if any.
        message: Human-readable error message.
    """

    def __init__(self, message: str = "Azure MCP error", status_code: Optional[int] = None):
        self.status_code = status_code
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        if self.status_code:
            return f"[{self.status_code}] {self.message}"
        return self.message


class UpstreamHTTPError(AzureMcpError):
    """An upstream API (Azure DevOps or Teams) answered with a non-2xx status."""

    def __init__(self, status_code: int, body: str = "", context: str = "Request failed"):
        self.body = body
        message = f"{context}: HTTP {status_code}"
        if body:
            message += f" - {body}"
        super().__init__(message, status_code)


class IssueStoreError(AzureMcpError):
    """The issue snapshot file is missing or cannot be parsed."""


class ReportError(AzureMcpError):
    """The HTML report is missing or holds no table."""


class ConfigurationError(AzureMcpError):
    """A required setting (e.g. the Teams webhook URL) is not configured."""
