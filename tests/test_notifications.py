"""
Script: tests/test_notifications.py
What: Tests Slack notification payloads and delivery.
Doing: Mocks `requests.post` and toggles the notification settings.
Goal: Make notification failures warnings, never command failures.
"""

from __future__ import annotations

import os
import unittest
from datetime import datetime
from unittest import mock

import requests

from apim_eks import notifications
from apim_eks.notifications import build_slack_payload, send_slack_notification


class SlackPayloadTests(unittest.TestCase):
    def test_error_styling_and_fields(self) -> None:
        payload = build_slack_payload(
            "error",
            "list-keys failed",
            gateway_id="gw-1",
            cluster="prod-eks",
            timestamp=datetime(2026, 3, 1, 8, 30, 0),
        )
        self.assertEqual(payload["text"], "❌ APIM Token Sync: error")
        attachment = payload["attachments"][0]
        self.assertEqual(attachment["color"], "danger")
        fields = {field["title"]: field["value"] for field in attachment["fields"]}
        self.assertEqual(fields["Gateway ID"], "gw-1")
        self.assertEqual(fields["Cluster"], "prod-eks")
        self.assertEqual(fields["Message"], "list-keys failed")
        self.assertEqual(fields["Timestamp"], "2026-03-01 08:30:00")

    def test_unknown_status_uses_success_color(self) -> None:
        payload = build_slack_payload("other", "x", gateway_id="g", cluster="c")
        self.assertEqual(payload["attachments"][0]["color"], "good")


class SendSlackNotificationTests(unittest.TestCase):
    ENV = {
        "ENABLE_NOTIFICATIONS": "true",
        "SLACK_WEBHOOK_URL": "https://hooks.example/T/B/X",
        "GATEWAY_ID": "gw-1",
        "EKS_CLUSTER_NAME": "prod-eks",
    }

    def test_disabled_does_not_post(self) -> None:
        with mock.patch.dict(os.environ, {"SLACK_WEBHOOK_URL": "https://hooks.example"}, clear=True):
            with mock.patch.object(notifications.requests, "post") as post:
                self.assertFalse(send_slack_notification("success", "ok"))
        post.assert_not_called()

    def test_posts_json_payload(self) -> None:
        with mock.patch.dict(os.environ, self.ENV, clear=True):
            with mock.patch.object(notifications.requests, "post") as post:
                self.assertTrue(send_slack_notification("success", "synced"))
        url = post.call_args[0][0]
        kwargs = post.call_args[1]
        self.assertEqual(url, "https://hooks.example/T/B/X")
        self.assertEqual(kwargs["timeout"], notifications.WEBHOOK_TIMEOUT_SECONDS)
        self.assertEqual(kwargs["json"]["attachments"][0]["color"], "good")

    def test_delivery_failure_is_not_raised(self) -> None:
        error = requests.ConnectionError("down")
        with mock.patch.dict(os.environ, self.ENV, clear=True):
            with mock.patch.object(notifications.requests, "post", side_effect=error), mock.patch.object(
                notifications.logger, "warning"
            ) as warning:
                self.assertFalse(send_slack_notification("error", "x"))
        warning.assert_called_once_with("Slack notification failed: %s", error)


if __name__ == "__main__":
    unittest.main()
