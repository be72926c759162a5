"""Notification routing handler.

Provides the Lambda handler that relays a notification to chat webhooks.
"""

from dataclasses import dataclass, field
from typing import List

from cloud_lambdas.common.handler import LambdaHandler
from cloud_lambdas.handlers.notifications.model import (
    NotificationRequest,
    NotificationResponse,
)
from cloud_lambdas.handlers.notifications.notifiers.base import Notifier
from cloud_lambdas.handlers.notifications.notifiers.model import NotifierResult
from cloud_lambdas.handlers.notifications.notifiers.webhook import WebhookNotifier


@dataclass  # type: ignore[misc] # mypy #5374
class NotificationRouter(LambdaHandler[NotificationRequest, NotificationResponse]):
    """Handler for routing notifications to delivery channels.

    Each target is offered to the notifiers in order (chain of responsibility).
    The first notifier that can parse the target delivers the notification.
    A failed delivery does not stop delivery to the remaining targets.

    Attributes:
        notifiers: List of notifier instances to try in order.

    Example:
        ```python
        handler = NotificationRouter.get_handler()
        # Or with custom notifiers
        handler = NotificationRouter.get_handler(notifiers=[WebhookNotifier(timeout=2)])
        ```
    """

    notifiers: List[Notifier] = field(default_factory=list)

    def __post_init__(self):
        super().__post_init__()
        if not self.notifiers:
            self.notifiers = [WebhookNotifier()]

    def handle(self, request: NotificationRequest) -> NotificationResponse:
        """Deliver the notification content to each target.

        Args:
            request (NotificationRequest): Request containing content and target specifications.

        Returns:
            Response containing results for each target.
        """
        results: List[NotifierResult] = []
        for target in request.targets:
            for notifier in self.notifiers:
                try:
                    target = notifier.parse_target(target=target)
                except Exception as e:
                    self.logger.error(f"Could not parse target {target} with {str(notifier)}: {e}")
                    continue
                else:
                    self.logger.info(f"{str(notifier)} handling target {target}")
                    result = notifier.notify(content=request.content, target=target)
                    if not result.success:
                        self.logger.error(f"Failed to notify {target}: {result.response}")
                    results.append(result)
                    break
            else:
                self.logger.error(f"No notifier could handle target {target}")
                results.append(
                    NotifierResult(
                        target=target if isinstance(target, dict) else target.to_dict(),
                        success=False,
                        response="No notifier could handle target",
                    )
                )
        return NotificationResponse(results=results)


handler = NotificationRouter.get_handler()
