"""API Gateway resolver builder for Lambda handlers.

Provides a base class for API Gateway REST (proxy integration) Lambdas
built on the AWS Lambda Powertools event handler.
"""

__all__ = [
    "ApiResolverBuilder",
    "error_response",
]
import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, ClassVar, Union

from aibs_informatics_core.collections import PostInitMixin
from aibs_informatics_core.utils.json import JSON, JSONObject
from aws_lambda_powertools.event_handler import APIGatewayRestResolver, content_types
from aws_lambda_powertools.event_handler.api_gateway import Response
from aws_lambda_powertools.event_handler.exceptions import NotFoundError
from aws_lambda_powertools.event_handler.middlewares import NextMiddleware
from aws_lambda_powertools.logging.correlation_paths import API_GATEWAY_REST
from aws_lambda_powertools.utilities.data_classes import APIGatewayProxyEvent
from aws_lambda_powertools.utilities.typing import LambdaContext

from cloud_lambdas.common.logging import LoggingMixins
from cloud_lambdas.common.metrics import MetricsMixins

LambdaEvent = Union[JSON]  # type: ignore  # https://github.com/python/mypy/issues/7866

LambdaHandlerType = Callable[[LambdaEvent, LambdaContext], JSONObject]

LOG_LEVEL_HEADER = "X-Log-Level"


def error_response(status_code: int, message: str) -> Response:
    """Build a JSON error response of the form `{"error": "<message>"}`."""
    return Response(
        status_code=status_code,
        content_type=content_types.APPLICATION_JSON,
        body=json.dumps({"error": message}),
    )


@dataclass
class ApiResolverBuilder(LoggingMixins, MetricsMixins, PostInitMixin):
    """Builder for API Gateway REST resolvers.

    Wires a logging middleware, a catch-all exception handler and a not-found
    handler into an `APIGatewayRestResolver`. Subclasses add their routes in
    `register_routes` and may register more specific exception handlers.

    Example:
        ```python
        @dataclass
        class HealthApi(ApiResolverBuilder):
            def register_routes(self, app: APIGatewayRestResolver) -> None:
                app.get("/health")(lambda: {"status": "OK"})

        handler = HealthApi().get_lambda_handler()
        ```
    """

    app: APIGatewayRestResolver = field(default_factory=APIGatewayRestResolver)

    metric_name_prefix: ClassVar[str] = "ApiResolver"

    def __post_init__(self):
        super().__post_init__()
        self.logger = self.get_logger(service=self.service_name(), add_to_root=False)

        def logging_middleware(
            app: APIGatewayRestResolver, next_middleware: NextMiddleware
        ) -> Response:
            self.update_logging_level(app.current_event)
            return next_middleware(app)

        self.app.use(middlewares=[logging_middleware])

        self.app.exception_handler(Exception)(self.handle_exception)
        self.app.not_found(self.handle_not_found)

        self.register_routes(self.app)

    def register_routes(self, app: APIGatewayRestResolver) -> None:
        """Register the routes served by this resolver."""
        pass

    def handle_exception(self, e: Exception) -> Response:
        """Handle uncaught exceptions in request processing.

        Args:
            e (Exception): The exception that was raised.

        Returns:
            A JSON error Response with status 500.
        """
        metadata = {
            "path": self.app.current_event.path,
            "request_id": self.app.lambda_context.aws_request_id,
        }
        self.logger.exception(f"{e}", extra=metadata)
        return error_response(500, str(e))

    def update_logging_level(self, event: APIGatewayProxyEvent) -> None:
        """Update the logging level from the 'X-Log-Level' request header, if present."""
        if log_level := event.headers.get(LOG_LEVEL_HEADER):
            try:
                self.logger.setLevel(log_level)
            except Exception as e:
                self.logger.warning(f"Failed to set log level to {log_level}: {e}")

    def handle_not_found(self, e: NotFoundError) -> Response:
        """Handle requests whose method and path match no route."""
        event = self.app.current_event
        msg = f"Could not find route {event.http_method} {event.path}"
        self.logger.warning(msg)
        self.metrics.add_count_metric("RouteNotFound", 1)
        return error_response(404, msg)

    def handle(self, event: LambdaEvent, context: LambdaContext) -> JSONObject:
        """Resolve an API Gateway event to its route and return the proxy response.

        Error responses produced by the exception handlers (status >= 400) are
        recorded as failures.

        Raises:
            Exception: If resolution fails outside of the registered exception handlers.
        """
        start = datetime.now()
        try:
            self.logger.info(f"Handling API Lambda event: {event}")
            response = self.app.resolve(event, context)
            if response.get("statusCode", 500) >= 400:
                self.metrics.add_failure_metric(self.metric_name_prefix)
            else:
                self.metrics.add_success_metric(self.metric_name_prefix)
            self.metrics.add_duration_metric(start, name=self.metric_name_prefix)
            return response
        except Exception as e:
            self.logger.error(f"API Lambda handler failed with following error: {e}")
            self.metrics.add_failure_metric(self.metric_name_prefix)
            self.metrics.add_duration_metric(start, name=self.metric_name_prefix)
            raise e

    def get_lambda_handler(self, *args, **kwargs) -> LambdaHandlerType:
        """Create a Lambda handler function for this resolver.

        Wraps `handle` with Lambda context injection (correlated on the API
        Gateway request id) and metrics flushing, including a cold start metric.
        """
        lambda_handler = self.handle

        lambda_handler = self.logger.inject_lambda_context(correlation_id_path=API_GATEWAY_REST)(
            lambda_handler
        )
        lambda_handler = self.metrics.log_metrics(capture_cold_start_metric=True)(lambda_handler)  # type: ignore

        return lambda_handler
