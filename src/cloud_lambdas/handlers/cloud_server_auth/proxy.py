"""Authenticating reverse proxy for the cloud server API.

Requests arrive through an API Gateway proxy integration. Allow-listed paths
are relayed to the cloud server and its reply is passed back unchanged. Any
failure is answered with a JSON error body and reported to Mattermost.
"""

__all__ = [
    "CloudServerAuthProxy",
    "build_failure_message",
    "encode_query",
    "get_forward_headers",
    "get_request_body",
    "parse_request_path",
]

import base64
import re
from dataclasses import dataclass, field
from typing import ClassVar, Dict, List, Mapping, Optional
from urllib.parse import urlencode, urljoin, urlsplit, urlunsplit

import requests
from aws_lambda_powertools.event_handler import APIGatewayRestResolver, content_types
from aws_lambda_powertools.event_handler.api_gateway import Response
from aws_lambda_powertools.utilities.data_classes import APIGatewayProxyEvent
from requests.utils import requote_uri

from cloud_lambdas.common.api.resolver import ApiResolverBuilder, error_response
from cloud_lambdas.handlers.cloud_server_auth.authorization import is_authorized
from cloud_lambdas.handlers.cloud_server_auth.config import CloudServerAuthConfig
from cloud_lambdas.handlers.cloud_server_auth.exceptions import (
    AuthorizationError,
    CloudAuthError,
    PathParseError,
    UpstreamError,
)
from cloud_lambdas.handlers.notifications.notifiers.model import (
    NotificationContent,
    NotifierResult,
)
from cloud_lambdas.handlers.notifications.notifiers.webhook import WebhookNotifier

PROXY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]

# Lower-cased. The client Accept-Encoding is dropped so the cloud server replies
# uncompressed. http.client then sends its own `Accept-Encoding: identity`, which asks
# for the same thing.
EXCLUDED_FORWARD_HEADERS = frozenset({"accept-encoding", "host", "content-length"})

FAILURE_SUBJECT = "Cloud Auth Failure"

CONTROL_CHARACTER_PATTERN = re.compile(r"[\x00-\x1f\x7f]")
INVALID_ESCAPE_PATTERN = re.compile(r"%(?![0-9A-Fa-f]{2})")


# ----------------------------------------------------------
# Request helpers
# ----------------------------------------------------------


def parse_request_path(path: str) -> str:
    """Parse the inbound request path into a relative reference.

    Any query or fragment on the path is discarded; the query is rebuilt from
    the event's query parameters.

    Raises:
        PathParseError: If the path holds control characters or malformed
            percent escapes, cannot be parsed, or names a scheme or host.
    """
    if CONTROL_CHARACTER_PATTERN.search(path):
        raise PathParseError(f'parse "{path}": invalid control character in URL')
    if match := INVALID_ESCAPE_PATTERN.search(path):
        escape = path[match.start() : match.start() + 3]
        raise PathParseError(f'parse "{path}": invalid URL escape "{escape}"')
    try:
        parsed = urlsplit(path)
    except ValueError as e:
        raise PathParseError(f'parse "{path}": {e}') from e
    if parsed.scheme or parsed.netloc:
        raise PathParseError(f'parse "{path}": must be a relative reference')
    return parsed.path


def encode_query(
    query_params: Optional[Mapping[str, str]] = None,
    multi_value_query_params: Optional[Mapping[str, List[str]]] = None,
) -> str:
    """Form-encode query parameters with keys in sorted order.

    Every value of a multi-valued key is kept, in order. A single-valued
    parameter is only used for keys that have no multi-value entry.
    """
    values: Dict[str, List[str]] = {
        key: list(key_values) for key, key_values in (multi_value_query_params or {}).items()
    }
    for key, value in (query_params or {}).items():
        values.setdefault(key, [value])
    return urlencode([(key, value) for key in sorted(values) for value in values[key]])


def get_forward_headers(event: APIGatewayProxyEvent) -> Dict[str, str]:
    """Headers to relay upstream, multi-value headers joined with ", "."""
    headers: Dict[str, str] = {}
    for key, values in (event.get("multiValueHeaders") or {}).items():
        headers[key] = ", ".join(values)
    for key, value in (event.get("headers") or {}).items():
        headers.setdefault(key, value)
    return {
        key: value
        for key, value in headers.items()
        if key.lower() not in EXCLUDED_FORWARD_HEADERS
    }


def get_request_body(event: APIGatewayProxyEvent) -> Optional[bytes]:
    body = event.body
    if body is None:
        return None
    if event.is_base64_encoded:
        return base64.b64decode(body)
    return body.encode("utf-8")


def get_request_id(event: APIGatewayProxyEvent) -> str:
    return (event.get("requestContext") or {}).get("requestId", "")


def build_failure_message(event: APIGatewayProxyEvent, error: Exception) -> str:
    message = (
        f"Error: {error}\n"
        f"Method: {event.http_method}\n"
        f"Path: {event.path}\n"
        f"Request ID: {get_request_id(event)}\n"
    )
    if event.body:
        message += f"```\n{event.body}\n```"
    return message


# ----------------------------------------------------------
# Proxy
# ----------------------------------------------------------


@dataclass
class CloudServerAuthProxy(ApiResolverBuilder):
    """Relays allow-listed API Gateway requests to the cloud server.

    Every method and path is routed to `forward`. Errors raised while
    forwarding are `CloudAuthError`s carrying their HTTP status; they are
    logged, counted, reported through `notify_failure` and answered with
    `{"error": "<message>"}`.

    Attributes:
        config: Cloud server and webhook settings.
        session: HTTP session used for the upstream call.
        notifier: Delivers failure notifications. Defaults to a
            `WebhookNotifier` with the configured webhook timeout.

    Example:
        ```python
        proxy = CloudServerAuthProxy(config=CloudServerAuthConfig.from_env())
        handler = proxy.get_lambda_handler()
        ```
    """

    config: CloudServerAuthConfig = field(default_factory=CloudServerAuthConfig.from_env)
    session: requests.Session = field(default_factory=requests.Session)
    notifier: Optional[WebhookNotifier] = None

    metric_name_prefix: ClassVar[str] = "CloudServerAuth"

    def register_routes(self, app: APIGatewayRestResolver) -> None:
        app.route(rule=".+", method=PROXY_METHODS)(self.forward)
        app.exception_handler(CloudAuthError)(self.handle_auth_failure)

    def build_target_url(self, event: APIGatewayProxyEvent) -> str:
        """Resolve the request path and query against the cloud server URL.

        Raises:
            ConfigurationError: If the cloud server URL is invalid.
            PathParseError: If the request path cannot be parsed.
        """
        base_url = self.config.parse_cloud_server_url()
        path = parse_request_path(event.path or "")
        query = encode_query(
            event.get("queryStringParameters"),
            event.get("multiValueQueryStringParameters"),
        )
        return requote_uri(urljoin(base_url, urlunsplit(("", "", path, query, ""))))

    def forward(self) -> Response:
        """Relay the current request to the cloud server.

        Raises:
            AuthorizationError: If the resolved path is not allow-listed.
            UpstreamError: If the cloud server cannot be reached or its
                response body cannot be read.
        """
        event = self.app.current_event
        self.logger.info(f"Initial path: {event.path}")
        self.logger.info(f"Initial query parameters: {event.get('queryStringParameters')}")

        target_url = self.build_target_url(event)
        if not is_authorized(target_url):
            raise AuthorizationError(f"{urlsplit(target_url).path} is not an authorized path")

        self.logger.info(f"Final API call: Method {event.http_method} | {target_url}")
        request = requests.Request(
            method=event.http_method,
            url=target_url,
            headers=get_forward_headers(event),
            data=get_request_body(event),
        ).prepare()
        try:
            response = self.session.send(request, timeout=self.config.upstream_timeout)
        except requests.RequestException as e:
            raise UpstreamError(f"failed when making request to cloud server: {e}") from e

        try:
            body = response.content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise UpstreamError(f"failed to read cloud server response body: {e}") from e

        self.logger.info("Success!")
        return Response(
            status_code=response.status_code,
            content_type=content_types.APPLICATION_JSON,
            body=body,
        )

    def handle_auth_failure(self, e: CloudAuthError) -> Response:
        event = self.app.current_event
        self.logger.error(
            f"Auth Failure: {e}",
            extra={
                "error_type": type(e).__name__,
                "status_code": e.status_code,
                "method": event.http_method,
                "path": event.path,
                "request_id": get_request_id(event),
            },
        )
        self.metrics.add_count_metric(type(e).__name__, 1)
        self.notify_failure(event, e)
        return error_response(e.status_code, str(e))

    def handle_exception(self, e: Exception) -> Response:
        self.logger.exception(f"Unexpected error while relaying request: {e}")
        return self.handle_auth_failure(CloudAuthError(str(e)))

    def notify_failure(self, event: APIGatewayProxyEvent, error: Exception) -> NotifierResult:
        """Report a failed request to the Mattermost webhook.

        Delivery is best effort. Problems are logged and returned as an
        unsuccessful result, never raised.
        """
        target = self.config.webhook_target
        try:
            content = NotificationContent(
                subject=FAILURE_SUBJECT, message=build_failure_message(event, error)
            )
            notifier = self.notifier or WebhookNotifier(timeout=self.config.webhook_timeout)
            result = notifier.notify(content=content, target=target)
        except Exception as e:
            self.logger.exception(f"Mattermost Webhook Error: {e}")
            return NotifierResult(target=target.to_dict(), success=False, response=str(e))
        if not result.success:
            self.logger.error(f"Mattermost Webhook Error: {result.response}")
        return result
