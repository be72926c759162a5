"""Chat webhook notification delivery.

Posts notifications to Slack-compatible incoming webhooks (Mattermost).
"""

from dataclasses import dataclass
from typing import Any, Dict

import requests

from cloud_lambdas.handlers.notifications.notifiers.base import Notifier
from cloud_lambdas.handlers.notifications.notifiers.model import (
    NotificationContent,
    NotifierResult,
    WebhookTarget,
)

DEFAULT_WEBHOOK_TIMEOUT_SECONDS = 5.0


def format_text(content: NotificationContent) -> str:
    """Render the subject and message as the webhook `text`.

    The subject is separated from the message by a horizontal rule.
    """
    if not content.subject:
        return content.message
    return f"{content.subject}\n---\n{content.message}"


def build_webhook_payload(content: NotificationContent, target: WebhookTarget) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "username": target.username,
        "icon_url": target.icon_url,
        "text": format_text(content),
    }
    if content.attachments:
        payload["attachments"] = [attachment.to_dict() for attachment in content.attachments]
    return payload


@dataclass
class WebhookNotifier(Notifier[WebhookTarget]):
    """Notifier implementation for chat incoming webhooks.

    Delivery is a single POST bounded by `timeout`; it is not retried. Only an
    HTTP 200 reply counts as delivered.

    Example:
        ```python
        notifier = WebhookNotifier()
        result = notifier.notify(
            content=NotificationContent(subject="ELB Cleanup", message="Deleted 3 load balancers"),
            target=WebhookTarget(url="https://chat.example.com/hooks/abc123"),
        )
        ```
    """

    timeout: float = DEFAULT_WEBHOOK_TIMEOUT_SECONDS

    def notify(self, content: NotificationContent, target: WebhookTarget) -> NotifierResult:
        """Post a notification to a chat webhook.

        Args:
            content (NotificationContent): The notification content.
            target (WebhookTarget): The webhook URL and the identity to post as.

        Returns:
            Result indicating success or failure with response details.
        """
        try:
            response = requests.post(
                target.url,
                json=build_webhook_payload(content, target),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            return NotifierResult(
                target=target.to_dict(),
                success=False,
                response=str(e),
            )
        if response.status_code != requests.codes.ok:
            return NotifierResult(
                target=target.to_dict(),
                success=False,
                response=f"received status code {response.status_code}: {response.text}",
            )
        return NotifierResult(
            target=target.to_dict(),
            success=True,
            response=response.text,
        )
