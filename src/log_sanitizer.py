"""
Redaction helpers so credentials never end up in log lines.

Basic-auth headers carry base64("user:PAT"), which is trivially reversible,
so anything that looks like an Authorization value or a password/PAT
assignment is masked before logging.
"""

import re

REDACTED = "***REDACTED***"

SENSITIVE_PATTERNS = [
    (re.compile(r'(basic\s+)([a-zA-Z0-9+/]+=*)', re.IGNORECASE), rf'\1{REDACTED}'),
    (re.compile(r'(bearer\s+)([a-zA-Z0-9\-._~+/]+=*)', re.IGNORECASE), rf'\1{REDACTED}'),
    (re.compile(r'(password["\']?\s*[:=]\s*["\']?)([^"\'\s,}]+)', re.IGNORECASE), rf'\1{REDACTED}'),
    (re.compile(r'(pat["\']?\s*[:=]\s*["\']?)([^"\'\s,}]+)', re.IGNORECASE), rf'\1{REDACTED}'),
    (re.compile(r'(token["\']?\s*[:=]\s*["\']?)([^"\'\s,}]+)', re.IGNORECASE), rf'\1{REDACTED}'),
]

_SENSITIVE_HEADERS = {"authorization", "proxy-authorization", "cookie"}


def sanitize_log_message(message: str) -> str:
    """Return *message* with password, PAT, token and auth-header values masked."""
    if not message:
        return message
    sanitized = message
    for pattern, replacement in SENSITIVE_PATTERNS:
        sanitized = pattern.sub(replacement, sanitized)
    return sanitized


def redact_headers(headers: dict | None) -> dict:
    """Copy of *headers* with credential-bearing values replaced."""
    if not headers:
        return {}
    return {
        k: (REDACTED if k.lower() in _SENSITIVE_HEADERS else v)
        for k, v in headers.items()
    }


def safe_error_text(error: Exception, context: str = "") -> str:
    """Sanitized ``context: ErrorType: message`` string for logging."""
    text = f"{type(error).__name__}: {sanitize_log_message(str(error))}"
    return f"{context}: {text}" if context else text
