"""Notifier data models.

Defines the content, target and result models for chat notification delivery.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, TypeVar, Union

import marshmallow as mm
from aibs_informatics_core.models.base import (
    BooleanField,
    ListField,
    RawField,
    SchemaModel,
    StringField,
    custom_field,
)
from aibs_informatics_core.utils.json import JSON

NOTIFIER_TARGET = TypeVar("NOTIFIER_TARGET", bound="NotifierTarget")
"""Type variable for notifier target types."""


MESSAGE_KEY_ALIASES = ["body", "content", "text"]
"""Alternative field names accepted for the message content."""

ALERT_COLOR = "#FF0000"
SUCCESS_COLOR = "#00FF33"

DEFAULT_WEBHOOK_USERNAME = "Cloud Lambdas"


# ----------------------------------------------------------
# Notification Content
# ----------------------------------------------------------


@dataclass
class ChatAttachmentField(SchemaModel):
    """A titled field rendered inside a chat message attachment.

    Attributes:
        title: Field title, rendered in bold.
        value: Field body. Markdown is rendered by Mattermost.
        short: Whether the field may be laid out side by side with other short fields.
    """

    title: str = custom_field(mm_field=StringField())
    value: str = custom_field(mm_field=StringField(), default="")
    short: bool = custom_field(mm_field=BooleanField(), default=False)


@dataclass
class ChatAttachment(SchemaModel):
    """A Slack-compatible message attachment: a colored bar with titled fields."""

    fields: List[ChatAttachmentField] = custom_field(
        mm_field=ListField(ChatAttachmentField.as_mm_field()), default_factory=list
    )
    color: str = custom_field(mm_field=StringField(), default=ALERT_COLOR)


@dataclass
class NotificationContent(SchemaModel):
    """Content of a chat notification.

    Attributes:
        subject: Headline of the notification. May be empty.
        message: The body text of the notification.
        attachments: Optional attachments rendered below the text.
    """

    subject: str = custom_field(mm_field=StringField())
    message: str = custom_field(mm_field=StringField())
    attachments: List[ChatAttachment] = custom_field(
        mm_field=ListField(ChatAttachment.as_mm_field()), default_factory=list
    )

    @classmethod
    @mm.pre_load
    def _parse_fields(cls, data: Dict[str, Any], **kwargs) -> Dict[str, Any]:
        data = dict(data)
        for key_alias in MESSAGE_KEY_ALIASES:
            if key_alias in data and "message" not in data:
                data["message"] = data.pop(key_alias)
                break
        return data


# ----------------------------------------------------------
# Notifier Target Models
# ----------------------------------------------------------


@dataclass
class NotifierTarget(SchemaModel):
    """Base class for notification delivery targets."""

    pass


@dataclass
class WebhookTarget(NotifierTarget):
    """Incoming webhook of a Slack-compatible chat server (e.g. Mattermost).

    Attributes:
        url: The incoming webhook URL.
        username: Display name the message is posted under.
        icon_url: Avatar the message is posted with.
    """

    url: str = custom_field(
        mm_field=StringField(validate=mm.validate.URL(schemes={"http", "https"}, require_tld=False))
    )
    username: str = custom_field(mm_field=StringField(), default=DEFAULT_WEBHOOK_USERNAME)
    icon_url: str = custom_field(mm_field=StringField(), default="")


# ----------------------------------------------------------
# Notifier Result Model
# ----------------------------------------------------------


@dataclass
class NotifierResult(SchemaModel):
    """Result of a notification delivery attempt.

    Attributes:
        target: The target the notification was sent to.
        success: Whether the delivery was successful.
        response: The raw response (or error) from the delivery.
    """

    target: Union[dict, NotifierTarget] = custom_field(mm_field=RawField())
    success: bool = custom_field(mm_field=BooleanField())
    response: JSON = custom_field(mm_field=RawField())

    @classmethod
    @mm.post_dump
    def _serialize_target(cls, data: Dict[str, Any], **kwargs) -> Dict[str, Any]:
        target = data.pop("target")
        if isinstance(target, NotifierTarget):
            target = target.to_dict()
        data["target"] = target
        return data
