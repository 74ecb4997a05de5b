"""
Microsoft Teams incoming-webhook client.

Webhooks accept either a plain ``{"text": ...}`` payload or a ``message``
envelope carrying an Adaptive Card attachment.
"""

import json
import logging

from .http_client import HttpResponse, send_request

logger = logging.getLogger(__name__)

ADAPTIVE_CARD_CONTENT_TYPE = "application/vnd.microsoft.card.adaptive"


def format_json_message(title, data):
    """Wrap *data* as a fenced JSON code block under *title*."""
    return {"text": f"{title}:\n```json\n{json.dumps(data, indent=2)}\n```"}


def adaptive_card_message(card):
    """Teams ``message`` envelope for a single Adaptive Card."""
    return {
        "type": "message",
        "attachments": [
            {
                "contentType": ADAPTIVE_CARD_CONTENT_TYPE,
                "contentUrl": None,
                "content": card,
            }
        ],
    }


def post_to_webhook(webhook_url, payload) -> HttpResponse:
    """POST *payload* as JSON to the webhook and return the response."""
    resp = send_request(
        "POST",
        webhook_url,
        headers={"Content-Type": "application/json"},
        body=payload,
    )
    if resp.ok:
        logger.info("Posted to Teams webhook (HTTP %s)", resp.status)
    else:
        logger.warning("Teams webhook answered HTTP %s %s", resp.status, resp.reason)
    return resp


def post_adaptive_card(webhook_url, card) -> HttpResponse:
    """Post an Adaptive Card."""
    return post_to_webhook(webhook_url, adaptive_card_message(card))
