import importlib
import logging
import sys
from test.cloud_lambdas.base import LambdaHandlerTestCase, create_api_gateway_event

import requests

from cloud_lambdas.handlers.cloud_server_auth.exceptions import ConfigurationError

MODULE_NAME = "cloud_lambdas.handlers.cloud_server_auth.lambda_function"


class LambdaFunctionTests(LambdaHandlerTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.unset_env_vars("CLOUD_SERVER", "MATTERMOST_WEBHOOK")
        root_logger = logging.getLogger()
        self.addCleanup(root_logger.setLevel, root_logger.level)
        self.addCleanup(sys.modules.pop, MODULE_NAME, None)
        sys.modules.pop(MODULE_NAME, None)

    def import_lambda_function(self):
        module = importlib.import_module(MODULE_NAME)
        self.addCleanup(logging.getLogger().removeHandler, module.proxy.logger.registered_handler)
        return module

    def test__import__builds_handler_from_environment(self):
        self.set_cloud_server_env_vars("https://cloud.example.com")

        module = self.import_lambda_function()

        self.assertTrue(callable(module.handler))
        self.assertEqual(module.proxy.config.cloud_server_url, "https://cloud.example.com")

    def test__import__missing_configuration_fails(self):
        with self.assertRaises(ConfigurationError):
            importlib.import_module(MODULE_NAME)

    def test__import__invalid_cloud_server_fails(self):
        self.set_cloud_server_env_vars("cloud.example.com")

        with self.assertRaises(ConfigurationError):
            importlib.import_module(MODULE_NAME)

    def test__handler__relays_request(self):
        self.set_cloud_server_env_vars("https://cloud.example.com")
        upstream = requests.Response()
        upstream.status_code = 201
        upstream._content = b'{"id": "abc"}'
        mock_send = self.create_patch("requests.Session.send")
        mock_send.return_value = upstream

        module = self.import_lambda_function()
        response = module.handler(
            create_api_gateway_event(path="/api/installation", method="POST", body="{}"),
            self.context,
        )

        self.assertEqual(response["statusCode"], 201)
        self.assertEqual(response["body"], '{"id": "abc"}')
        self.assertEqual(
            mock_send.call_args.args[0].url, "https://cloud.example.com/api/installation"
        )
