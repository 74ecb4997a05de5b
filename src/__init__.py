"""
Source package for the Azure DevOps / Teams MCP server.
"""

from .devops_client import DevOpsClient
from .errors import (
    AzureMcpError,
    UpstreamHTTPError,
    IssueStoreError,
    ReportError,
    ConfigurationError,
)
from .http_client import (
    HttpResponse,
    basic_auth_header,
    send_request,
    raise_for_status,
)
from .issue_store import save_issues, load_issues, filter_by_state
from .models import WorkItem, ReportTable, FIELDS
from .report_service import (
    render_html,
    save_report,
    load_report,
    parse_html_table,
    to_adaptive_card,
)
from .teams_client import (
    adaptive_card_message,
    format_json_message,
    post_to_webhook,
    post_adaptive_card,
)

__all__ = [
    'DevOpsClient',
    'AzureMcpError', 'UpstreamHTTPError', 'IssueStoreError', 'ReportError',
    'ConfigurationError',
    'HttpResponse', 'basic_auth_header', 'send_request', 'raise_for_status',
    'save_issues', 'load_issues', 'filter_by_state',
    'WorkItem', 'ReportTable', 'FIELDS',
    'render_html', 'save_report', 'load_report', 'parse_html_table',
    'to_adaptive_card',
    'adaptive_card_message', 'format_json_message', 'post_to_webhook',
    'post_adaptive_card',
]
