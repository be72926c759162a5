import json
from dataclasses import dataclass
from test.cloud_lambdas.base import (
    LambdaHandlerTestCase,
    create_api_gateway_event,
    get_response_header,
)

from aws_lambda_powertools.event_handler import APIGatewayRestResolver

from cloud_lambdas.common.api.resolver import ApiResolverBuilder, error_response


@dataclass
class HealthApi(ApiResolverBuilder):
    def register_routes(self, app: APIGatewayRestResolver) -> None:
        app.get("/health")(self.health)
        app.get("/fail")(self.fail)

    def health(self):
        return {"status": "OK"}

    def fail(self):
        raise ValueError("why not")


class ApiResolverBuilderTests(LambdaHandlerTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.builder = HealthApi()

    def test__register_routes__adds_routes(self):
        assert len(self.builder.app._route_keys) == 2
        assert self.builder.app._route_keys == ["GET/health", "GET/fail"]

    def test__register_routes__noop_by_default(self):
        builder = ApiResolverBuilder()
        assert builder.app._route_keys == []

    def test__resolve__succeeds(self):
        event = create_api_gateway_event(path="/health", method="GET")
        lambda_handler = self.builder.get_lambda_handler()
        response = lambda_handler(event, self.context)
        assert response["statusCode"] == 200
        assert json.loads(response["body"]) == {"status": "OK"}

    def test__resolve__handles_not_found_error(self):
        event = create_api_gateway_event(path="/does_not_exist", method="GET")
        lambda_handler = self.builder.get_lambda_handler()
        response = lambda_handler(event, self.context)
        assert response["statusCode"] == 404
        assert json.loads(response["body"]) == {
            "error": "Could not find route GET /does_not_exist"
        }

    def test__resolve__handles_handler_failure(self):
        event = create_api_gateway_event(path="/fail", method="GET")
        lambda_handler = self.builder.get_lambda_handler()
        response = lambda_handler(event, self.context)
        assert response["statusCode"] == 500
        assert json.loads(response["body"]) == {"error": "why not"}
        assert get_response_header(response, "Content-Type") == "application/json"

    def test__resolve__updates_logging(self):
        event = create_api_gateway_event(
            path="/health", method="GET", headers={"X-Log-Level": "DEBUG"}
        )
        lambda_handler = self.builder.get_lambda_handler()
        response = lambda_handler(event, self.context)
        assert response["statusCode"] == 200
        assert self.builder.logger.log_level == 10

    def test__resolve__handles_invalid_logging_level(self):
        event = create_api_gateway_event(
            path="/health", method="GET", headers={"X-Log-Level": "DOES_NOT_DEBUG"}
        )
        lambda_handler = self.builder.get_lambda_handler()
        response = lambda_handler(event, self.context)
        assert response["statusCode"] == 200


def test__error_response__builds_json_error_body():
    response = error_response(401, "/api/other is not an authorized path")

    assert response.status_code == 401
    assert response.headers["Content-Type"] == "application/json"
    assert json.loads(response.body) == {"error": "/api/other is not an authorized path"}
