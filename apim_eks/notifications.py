"""
Slack notification utilities.

Token sync and rotation report their outcome to a Slack incoming webhook
when `ENABLE_NOTIFICATIONS=true` and `SLACK_WEBHOOK_URL` is set.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

import requests

from apim_eks.common import env_flag, optional_env

logger = logging.getLogger(__name__)

WEBHOOK_TIMEOUT_SECONDS = 10

STATUS_STYLES = {
    "success": ("good", "✅"),
    "warning": ("warning", "⚠️"),
    "error": ("danger", "❌"),
}


def build_slack_payload(
    status: str,
    message: str,
    *,
    gateway_id: str,
    cluster: str,
    timestamp: Optional[datetime] = None,
) -> dict:
    """
    Build the webhook JSON body.

    Unknown statuses get the success styling.
    """
    color, emoji = STATUS_STYLES.get(status, STATUS_STYLES["success"])
    stamp = (timestamp or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")
    return {
        "text": f"{emoji} APIM Token Sync: {status}",
        "attachments": [
            {
                "color": color,
                "fields": [
                    {"title": "Gateway ID", "value": gateway_id, "short": True},
                    {"title": "Cluster", "value": cluster, "short": True},
                    {"title": "Message", "value": message, "short": False},
                    {"title": "Timestamp", "value": stamp, "short": True},
                ],
            }
        ],
    }


def send_slack_notification(status: str, message: str) -> bool:
    """
    Post one notification.

    Returns:
        True if the webhook accepted it, False if disabled or delivery failed
    """
    webhook_url = optional_env("SLACK_WEBHOOK_URL")
    if not env_flag("ENABLE_NOTIFICATIONS") or not webhook_url:
        return False

    payload = build_slack_payload(
        status,
        message,
        gateway_id=optional_env("GATEWAY_ID"),
        cluster=optional_env("EKS_CLUSTER_NAME"),
    )
    try:
        response = requests.post(webhook_url, json=payload, timeout=WEBHOOK_TIMEOUT_SECONDS)
        response.raise_for_status()
    except requests.RequestException as exc:
        logger.warning("Slack notification failed: %s", exc)
        return False

    logger.debug("Slack notification sent (%s)", status)
    return True
