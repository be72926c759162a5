"""Notification data models.

Defines the request and response models of the notification router.
"""

__all__ = [
    "NotificationRequest",
    "NotificationResponse",
]

from dataclasses import dataclass
from typing import List

from aibs_informatics_core.models.base import ListField, SchemaModel, custom_field

from cloud_lambdas.handlers.notifications.notifiers.model import (
    NotificationContent,
    NotifierResult,
    WebhookTarget,
)


@dataclass
class NotificationRequest(SchemaModel):
    """Request model for sending notifications.

    Attributes:
        content: The notification content to deliver.
        targets: Webhooks to deliver the content to.
    """

    content: NotificationContent = custom_field(mm_field=NotificationContent.as_mm_field())
    targets: List[WebhookTarget] = custom_field(
        mm_field=ListField(WebhookTarget.as_mm_field()),
    )


@dataclass
class NotificationResponse(SchemaModel):
    """Response model for notification delivery.

    Attributes:
        results: One result per requested target, in request order.
    """

    results: List[NotifierResult] = custom_field(mm_field=ListField(NotifierResult.as_mm_field()))
