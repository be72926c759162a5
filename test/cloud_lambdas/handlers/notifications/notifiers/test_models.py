from marshmallow import ValidationError
from pytest import mark, param, raises

from cloud_lambdas.handlers.notifications.notifiers.model import (
    ALERT_COLOR,
    DEFAULT_WEBHOOK_USERNAME,
    ChatAttachment,
    ChatAttachmentField,
    NotificationContent,
    NotifierResult,
    WebhookTarget,
)
from test.base import does_not_raise

WEBHOOK_URL = "https://chat.example.com/hooks/abc123"


@mark.parametrize(
    "value,expected,raise_expectation",
    [
        param(
            {"url": WEBHOOK_URL},
            WebhookTarget(url=WEBHOOK_URL, username=DEFAULT_WEBHOOK_USERNAME, icon_url=""),
            does_not_raise(),
            id="simple",
        ),
        param(
            {"url": "http://mattermost:8065/hooks/abc", "username": "Cloud Auth"},
            WebhookTarget(url="http://mattermost:8065/hooks/abc", username="Cloud Auth"),
            does_not_raise(),
            id="allows hosts without tld",
        ),
        param(
            {"url": "ftp://chat.example.com/hooks/abc123"},
            None,
            raises(ValidationError),
            id="rejects non http schemes",
        ),
        param(
            {"username": "Cloud Auth"},
            None,
            raises(ValidationError),
            id="requires url",
        ),
    ],
)
def test__WebhookTarget__from_dict(value, expected, raise_expectation):
    with raise_expectation:
        actual = WebhookTarget.from_dict(value)

    if expected:
        assert actual == expected


@mark.parametrize(
    "value,expected,raise_expectation",
    [
        param(
            {"subject": "subject", "message": "message"},
            NotificationContent(subject="subject", message="message"),
            does_not_raise(),
            id="simple",
        ),
        param(
            {"subject": "subject", "body": "message", "content": "content"},
            NotificationContent(subject="subject", message="message"),
            does_not_raise(),
            id="handles aliases",
        ),
        param(
            {
                "subject": "ELB Cleanup",
                "text": "Deleted 2 load balancers",
                "attachments": [
                    {"fields": [{"title": "Deleted", "value": "elb-1\nelb-2", "short": True}]}
                ],
            },
            NotificationContent(
                subject="ELB Cleanup",
                message="Deleted 2 load balancers",
                attachments=[
                    ChatAttachment(
                        fields=[
                            ChatAttachmentField(title="Deleted", value="elb-1\nelb-2", short=True)
                        ],
                        color=ALERT_COLOR,
                    )
                ],
            ),
            does_not_raise(),
            id="parses attachments",
        ),
    ],
)
def test__NotificationContent__from_dict(value, expected, raise_expectation):
    with raise_expectation:
        actual = NotificationContent.from_dict(value)

    if expected:
        assert actual == expected


def test__NotificationContent__from_dict__does_not_mutate_input():
    value = {"subject": "subject", "body": "message"}

    NotificationContent.from_dict(value)

    assert value == {"subject": "subject", "body": "message"}


def test__NotifierResult__to_dict__serializes_target_model():
    target = WebhookTarget(url=WEBHOOK_URL)
    result = NotifierResult(target=target, success=True, response="ok")

    assert result.to_dict() == {
        "target": target.to_dict(),
        "success": True,
        "response": "ok",
    }
