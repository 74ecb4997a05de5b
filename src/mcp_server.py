"""
MCP Server for Azure DevOps work items and Microsoft Teams reporting.

Exposes Azure DevOps issue queries, generic HTTP passthroughs and Teams
posting as MCP tools, plus two prompts and a work-item resource, so that
any MCP-compatible client (VS Code Copilot, Claude Desktop, etc.) can
pull issues, render a report and share it with a channel.

Every handler catches its own failures and answers with a text message;
nothing is raised back through the transport.

Usage:
    # stdio transport (default – for VS Code / Claude Desktop)
    python -m src.mcp_server

    # SSE transport (for browser / remote clients)
    python -m src.mcp_server --transport sse --port 8000

Environment variables (or .env file):
    AZURE_USERNAME, AZURE_PASSWORD   fallback Basic-auth credentials (PAT)
    AZURE_DEVOPS_ORG_NAME            (default: CollabMCP)
    AZURE_DEVOPS_PROJECT_NAME        (default: Collabro)
    AZURE_DEVOPS_API_VERSION         (default: 7.1)
    TEAMS_WEBHOOK_URL                webhook used by postReportToTeams
    AZURE_ISSUES_FILE                snapshot path (default: src/data/azzureissues.json)
    WORK_ITEM_REPORT_FILE            report path (default: work_item_report.html)
    MCP_LOG_LEVEL                    (default: INFO)
"""

from __future__ import annotations

import json
import logging
import os
import sys
from typing import Any, Literal, Optional
from urllib.parse import urlparse

# Package and project root directories
_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))
_PROJECT_ROOT = os.path.dirname(_PACKAGE_DIR)

from dotenv import load_dotenv
from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

# ---------------------------------------------------------------------------
# Local imports
# ---------------------------------------------------------------------------
from .devops_client import DevOpsClient
from .errors import ConfigurationError
from .http_client import HttpResponse, raise_for_status, send_request
from .issue_store import filter_by_state, load_issues, save_issues
from .log_sanitizer import safe_error_text
from .models import WorkItem
from .report_service import (
    load_report,
    parse_html_table,
    render_html,
    save_report,
    to_adaptive_card,
)
from .teams_client import format_json_message, post_adaptive_card, post_to_webhook

# ---------------------------------------------------------------------------
# Bootstrap
# ---------------------------------------------------------------------------

load_dotenv()

AZURE_USERNAME = os.getenv("AZURE_USERNAME", "")
AZURE_PASSWORD = os.getenv("AZURE_PASSWORD", "")
ORG = os.getenv("AZURE_DEVOPS_ORG_NAME", "CollabMCP")
PROJECT = os.getenv("AZURE_DEVOPS_PROJECT_NAME", "Collabro")
API_VERSION = os.getenv("AZURE_DEVOPS_API_VERSION", "7.1")
TEAMS_WEBHOOK_URL = os.getenv("TEAMS_WEBHOOK_URL", "")
LOG_LEVEL = os.getenv("MCP_LOG_LEVEL", "INFO")

_ISSUES_FILE = os.getenv(
    "AZURE_ISSUES_FILE", os.path.join(_PACKAGE_DIR, "data", "azzureissues.json")
)
_REPORT_FILE = os.getenv(
    "WORK_ITEM_REPORT_FILE", os.path.join(_PROJECT_ROOT, "work_item_report.html")
)

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "azure-mcp",
    dependencies=["requests", "python-dotenv", "pydantic", "beautifulsoup4"],
)

HTTP_METHODS = Literal["GET", "POST", "PUT", "DELETE", "PATCH"]


def _get_client(username: Optional[str] = None, pat: Optional[str] = None) -> DevOpsClient:
    """Return a DevOpsClient, falling back to the env credentials for missing values."""
    return DevOpsClient(
        ORG,
        PROJECT,
        username or AZURE_USERNAME,
        pat or AZURE_PASSWORD,
        api_version=API_VERSION,
    )


def _require_http_url(url: str) -> str:
    parsed = urlparse(url or "")
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"Invalid URL: {url!r}")
    return url


def _format_response(resp: HttpResponse) -> str:
    """``Status: N`` / ``Response: ...`` text shared by the passthrough tools."""
    return f"Status: {resp.status}\nResponse: {resp.body_text()}"


def _failure(prefix: str, error: Exception) -> str:
    logger.error(safe_error_text(error, prefix))
    return f"{prefix}: {error}"


# ═══════════════════════════════════════════════════════════════════════════
# MCP PROMPTS
# ═══════════════════════════════════════════════════════════════════════════


@mcp.prompt(
    name="get-issues-by-state",
    description="List the titles of saved Azure DevOps issues in a given state",
)
def get_issues_by_state(state: str) -> str:
    """
    Filter the last fetched issue snapshot by exact state.

    Args:
        state: Work item state, e.g. "To Do", "Doing", "Done".
    """
    try:
        matching = filter_by_state(load_issues(_ISSUES_FILE), state)
    except Exception as e:
        return _failure("Failed to load issues", e)

    if not matching:
        return f"No issues found with state '{state}'."
    titles = "\n".join(f"- {item.get('title', '')}" for item in matching)
    return f"Issues with state '{state}' ({len(matching)}):\n{titles}"


@mcp.prompt(
    name="get-azure-workitem",
    description="Prompt to get an Azure DevOps work item by ID",
)
def get_azure_workitem_prompt(id: str) -> str:
    """Ask the model to fetch one work item."""
    return f"Fetch the Azure DevOps work item with ID {id}."


# ═══════════════════════════════════════════════════════════════════════════
# MCP TOOLS
# ═══════════════════════════════════════════════════════════════════════════


@mcp.tool(
    name="getazzureIssuesid",
    description=(
        "Fetch all Azure DevOps issues (most recently changed first), save them "
        "to the local issue snapshot and optionally render an HTML report"
    ),
    annotations=ToolAnnotations(
        title="Fetch Azure DevOps Issues",
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=True,
    ),
)
def get_azure_issues(
    username: Optional[str] = None,
    pat: Optional[str] = None,
    generate_report: bool = True,
) -> str:
    """
    Run the Issue WIQL query, batch-fetch details and persist the snapshot.

    The snapshot is overwritten on every call.  When *generate_report* is
    True the HTML report is rewritten as well.

    Args:
        username: Azure DevOps user name (falls back to AZURE_USERNAME).
        pat: Personal access token (falls back to AZURE_PASSWORD).
        generate_report: Whether to render the HTML report (default True).
    """
    try:
        client = _get_client(username, pat)
        ids = client.query_issue_ids()
        raw_items = client.get_work_items_batch(ids)
        items = [WorkItem.from_api(raw) for raw in raw_items]

        save_issues(items, _ISSUES_FILE)
        lines = [
            f"Found {len(ids)} issue IDs, fetched details for {len(items)} issues.",
            f"Issues saved to: {_ISSUES_FILE}",
        ]
        if generate_report:
            save_report(render_html(items), _REPORT_FILE)
            lines.append(f"HTML report saved to: {_REPORT_FILE}")
        return "\n".join(lines)
    except Exception as e:
        return _failure("Failed to fetch Azure DevOps issues", e)


@mcp.tool(
    name="getIssuesDetailsById",
    description="Fetch details for specific Azure DevOps work item IDs",
    annotations=ToolAnnotations(
        title="Get Issue Details By ID",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=True,
    ),
)
def get_issues_details_by_id(username: str, pat: str, ids: list[int]) -> str:
    """
    Batch-fetch work items by ID.  The local snapshot is not touched.

    Args:
        username: Azure DevOps user name.
        pat: Personal access token.
        ids: Work item IDs to fetch.
    """
    try:
        client = _get_client(username, pat)
        items = client.get_work_items_batch(list(ids))
        return json.dumps(items, indent=2)
    except Exception as e:
        return _failure("Failed to fetch work item details", e)


@mcp.tool(
    name="postReportToTeams",
    description="Post the last generated work item report to Microsoft Teams as an Adaptive Card",
    annotations=ToolAnnotations(
        title="Post Report To Teams",
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=False,
        openWorldHint=True,
    ),
)
def post_report_to_teams() -> str:
    """Parse the saved HTML report and post it as an Adaptive Card."""
    try:
        if not TEAMS_WEBHOOK_URL:
            raise ConfigurationError("TEAMS_WEBHOOK_URL is not configured")
        table = parse_html_table(load_report(_REPORT_FILE))
        card = to_adaptive_card(table.headers, table.rows)
        resp = post_adaptive_card(TEAMS_WEBHOOK_URL, card)
        if not resp.ok:
            return f"Failed to post report to Teams: {resp.status} {resp.reason}"
        return f"Report posted to Teams ({len(table.rows)} work items)."
    except Exception as e:
        return _failure("Failed to post report to Teams", e)


@mcp.tool(
    name="api-request",
    description="Make a generic API request to any endpoint",
    annotations=ToolAnnotations(
        title="API Request",
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=False,
        openWorldHint=True,
    ),
)
def api_request(
    url: str,
    method: HTTP_METHODS,
    headers: Optional[dict[str, str]] = None,
    body: Any = None,
) -> str:
    """
    Send one HTTP request and return the status and response body.

    Args:
        url: Absolute http(s) URL.
        method: GET, POST, PUT, DELETE or PATCH.
        headers: Optional request headers.
        body: Optional payload, sent as JSON.
    """
    try:
        resp = send_request(method, _require_http_url(url), headers=headers, body=body)
        return _format_response(resp)
    except Exception as e:
        return _failure("API request failed", e)


@mcp.tool(
    name="azure-api-get",
    description="Make a GET request to an Azure DevOps API endpoint using Basic Auth",
    annotations=ToolAnnotations(
        title="Azure API GET Request",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    ),
)
def azure_api_get(
    url: str,
    username: str,
    password: str,
    headers: Optional[dict[str, str]] = None,
) -> str:
    """
    GET an Azure DevOps endpoint with Basic auth.

    Args:
        url: Azure DevOps REST URL.
        username: User name (may be empty when using a PAT).
        password: Password or personal access token.
        headers: Optional extra headers.
    """
    try:
        resp = send_request(
            "GET", _require_http_url(url), headers=headers, auth=(username, password)
        )
        return _format_response(resp)
    except Exception as e:
        return _failure("Azure API request failed", e)


@mcp.tool(
    name="azure-api-get-and-post-teams",
    description="Fetch data from Azure DevOps API and post it to a Microsoft Teams channel",
    annotations=ToolAnnotations(
        title="Azure API GET and Post to Teams",
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=False,
        openWorldHint=False,
    ),
)
def azure_api_get_and_post_teams(
    url: str,
    teamsWebhookUrl: str,
    username: Optional[str] = None,
    password: Optional[str] = None,
    headers: Optional[dict[str, str]] = None,
) -> str:
    """
    GET an Azure DevOps endpoint and post the result to Teams as a JSON code block.

    Args:
        url: Azure DevOps REST URL.
        teamsWebhookUrl: Teams incoming-webhook URL.
        username: User name (falls back to AZURE_USERNAME).
        password: Password or PAT (falls back to AZURE_PASSWORD).
        headers: Optional extra headers for the Azure DevOps call.
    """
    try:
        user = username or AZURE_USERNAME
        secret = password or AZURE_PASSWORD
        resp = send_request(
            "GET", _require_http_url(url), headers=headers, auth=(user, secret)
        )
        raise_for_status(resp, "Azure DevOps request failed")

        message = format_json_message("Azure DevOps API Response", resp.body)
        teams_resp = post_to_webhook(_require_http_url(teamsWebhookUrl), message)
        if not teams_resp.ok:
            return f"Failed to post to Teams: {teams_resp.status} {teams_resp.reason}"
        return "Successfully fetched from Azure DevOps and posted to Teams."
    except Exception as e:
        return _failure("Operation failed", e)


# ═══════════════════════════════════════════════════════════════════════════
# MCP RESOURCES
# ═══════════════════════════════════════════════════════════════════════════


@mcp.resource(
    "azure://workitems/{id}",
    name="azure-workitem",
    description="Get an Azure DevOps work item by ID",
    mime_type="application/json",
)
def azure_workitem(id: str) -> str:
    """Single work item as JSON, or ``{"error": ...}`` on failure."""
    try:
        resp = _get_client().get_work_item(id)
        raise_for_status(resp, f"Failed to get work item {id}")
        return json.dumps(resp.body, indent=2)
    except Exception as e:
        logger.error(safe_error_text(e, f"azure-workitem {id}"))
        return json.dumps({"error": str(e)})


# ═══════════════════════════════════════════════════════════════════════════
# Entry point
# ═══════════════════════════════════════════════════════════════════════════


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Send log records to stderr; stdout carries the stdio transport."""
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def main(argv: Optional[list[str]] = None) -> None:
    import argparse

    parser = argparse.ArgumentParser(description="Azure DevOps / Teams MCP Server")
    parser.add_argument(
        "--transport",
        choices=["stdio", "sse"],
        default="stdio",
        help="MCP transport (default: stdio)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port for SSE transport (default: 8000)",
    )
    args = parser.parse_args(argv)

    configure_logging()
    logger.info("Starting azure-mcp server (%s transport)", args.transport)

    if args.transport == "sse":
        mcp.settings.port = args.port
        mcp.run(transport="sse")
    else:
        mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
