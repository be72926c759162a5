from test.cloud_lambdas.base import LambdaHandlerTestCase
from unittest import mock

from cloud_lambdas.handlers.notifications.model import NotificationRequest
from cloud_lambdas.handlers.notifications.notifiers.model import (
    NotificationContent,
    WebhookTarget,
)
from cloud_lambdas.handlers.notifications.notifiers.webhook import WebhookNotifier
from cloud_lambdas.handlers.notifications.router import NotificationRouter

WEBHOOK_URL_1 = "https://chat.example.com/hooks/abc123"
WEBHOOK_URL_2 = "https://chat.example.com/hooks/def456"


class NotificationRouterTests(LambdaHandlerTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.mock_post = self.create_patch(
            "cloud_lambdas.handlers.notifications.notifiers.webhook.requests.post"
        )
        self.mock_post.return_value = mock.MagicMock(status_code=200, text="ok")

    def test__post_init__defaults_to_webhook_notifier(self):
        router = NotificationRouter()
        self.assertEqual(len(router.notifiers), 1)
        self.assertIsInstance(router.notifiers[0], WebhookNotifier)

    def test__handle__delivers_to_every_target(self):
        router = NotificationRouter()
        request = NotificationRequest(
            content=NotificationContent(subject="subject", message="message"),
            targets=[WebhookTarget(url=WEBHOOK_URL_1), WebhookTarget(url=WEBHOOK_URL_2)],
        )

        response = router.handle(request)

        self.assertEqual(len(response.results), 2)
        self.assertTrue(all(result.success for result in response.results))
        self.assertListEqual(
            [call.args[0] for call in self.mock_post.call_args_list],
            [WEBHOOK_URL_1, WEBHOOK_URL_2],
        )

    def test__handle__failed_target_does_not_stop_delivery(self):
        self.mock_post.side_effect = [
            mock.MagicMock(status_code=500, text="boom"),
            mock.MagicMock(status_code=200, text="ok"),
        ]
        router = NotificationRouter()
        request = NotificationRequest(
            content=NotificationContent(subject="subject", message="message"),
            targets=[WebhookTarget(url=WEBHOOK_URL_1), WebhookTarget(url=WEBHOOK_URL_2)],
        )

        response = router.handle(request)

        self.assertListEqual([result.success for result in response.results], [False, True])

    def test__handler__handles_event(self):
        handler = NotificationRouter.get_handler(notifiers=[WebhookNotifier(timeout=1)])
        event = {
            "content": {"subject": "subject", "body": "message"},
            "targets": [{"url": WEBHOOK_URL_1, "username": "Cloud Auth"}],
        }

        self.assertHandles(
            handler,
            event,
            {
                "results": [
                    {
                        "target": {"url": WEBHOOK_URL_1, "username": "Cloud Auth", "icon_url": ""},
                        "success": True,
                        "response": "ok",
                    }
                ]
            },
        )
        self.assertEqual(self.mock_post.call_args.kwargs["timeout"], 1)

    def test__handler__rejects_invalid_target(self):
        handler = NotificationRouter.get_handler()
        event = {
            "content": {"subject": "subject", "message": "message"},
            "targets": [{"url": "not a url"}],
        }

        with self.assertRaises(Exception):
            handler(event, self.context)
