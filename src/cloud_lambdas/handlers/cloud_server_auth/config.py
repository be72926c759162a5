"""Configuration of the cloud server auth proxy."""

from dataclasses import dataclass
from urllib.parse import urlsplit

from aibs_informatics_core.models.base import FloatField, SchemaModel, StringField, custom_field
from aibs_informatics_core.utils.os_operations import get_env_var

from cloud_lambdas.handlers.cloud_server_auth.exceptions import ConfigurationError
from cloud_lambdas.handlers.notifications.notifiers.model import WebhookTarget

CLOUD_SERVER_ENV_VAR = "CLOUD_SERVER"
MATTERMOST_WEBHOOK_ENV_VAR = "MATTERMOST_WEBHOOK"
CLOUD_SERVER_TIMEOUT_ENV_VAR = "CLOUD_SERVER_TIMEOUT_SECONDS"
MATTERMOST_WEBHOOK_TIMEOUT_ENV_VAR = "MATTERMOST_WEBHOOK_TIMEOUT_SECONDS"

DEFAULT_UPSTREAM_TIMEOUT_SECONDS = 10.0
DEFAULT_WEBHOOK_TIMEOUT_SECONDS = 5.0

WEBHOOK_USERNAME = "Cloud Auth"
WEBHOOK_ICON_URL = "https://images2.minutemediacdn.com/image/upload/c_fill,g_auto,h_1248,w_2220/f_auto,q_auto,w_1100/v1555925520/shape/mentalfloss/800px-princesslineup.jpg"  # noqa: E501


def _get_required_env_var(key: str) -> str:
    value = get_env_var(key)
    if not value:
        raise ConfigurationError(f"environment variable {key} is not set")
    return value


def _get_timeout_env_var(key: str, default: float) -> float:
    value = get_env_var(key)
    if not value:
        return default
    try:
        timeout = float(value)
    except ValueError as e:
        raise ConfigurationError(f"environment variable {key}={value} is not a number") from e
    if timeout <= 0:
        raise ConfigurationError(f"environment variable {key}={value} must be positive")
    return timeout


@dataclass
class CloudServerAuthConfig(SchemaModel):
    """Settings of the cloud server auth proxy.

    Built once per process with `from_env` and passed to the proxy. Direct
    construction does not validate, the proxy validates again per request.

    Attributes:
        cloud_server_url: Base URL that authorized paths are resolved against.
        webhook_url: Mattermost incoming webhook for failure notifications.
        upstream_timeout: Timeout in seconds of the call to the cloud server.
        webhook_timeout: Timeout in seconds of the failure notification.
    """

    cloud_server_url: str = custom_field(mm_field=StringField())
    webhook_url: str = custom_field(mm_field=StringField())
    upstream_timeout: float = custom_field(
        mm_field=FloatField(), default=DEFAULT_UPSTREAM_TIMEOUT_SECONDS
    )
    webhook_timeout: float = custom_field(
        mm_field=FloatField(), default=DEFAULT_WEBHOOK_TIMEOUT_SECONDS
    )

    @classmethod
    def from_env(cls) -> "CloudServerAuthConfig":
        """Load and validate the configuration from environment variables.

        Raises:
            ConfigurationError: If a variable is missing or invalid.
        """
        config = cls(
            cloud_server_url=_get_required_env_var(CLOUD_SERVER_ENV_VAR),
            webhook_url=_get_required_env_var(MATTERMOST_WEBHOOK_ENV_VAR),
            upstream_timeout=_get_timeout_env_var(
                CLOUD_SERVER_TIMEOUT_ENV_VAR, DEFAULT_UPSTREAM_TIMEOUT_SECONDS
            ),
            webhook_timeout=_get_timeout_env_var(
                MATTERMOST_WEBHOOK_TIMEOUT_ENV_VAR, DEFAULT_WEBHOOK_TIMEOUT_SECONDS
            ),
        )
        config.validate()
        return config

    def validate(self) -> None:
        self.parse_cloud_server_url()
        if not self.webhook_url:
            raise ConfigurationError("Mattermost webhook URL is not set")

    def parse_cloud_server_url(self) -> str:
        """Return the cloud server URL after checking it is an absolute http(s) URL.

        Raises:
            ConfigurationError: If the URL is empty, unparsable or not absolute.
        """
        if not self.cloud_server_url:
            raise ConfigurationError("cloud server URL is not set")
        try:
            parsed = urlsplit(self.cloud_server_url)
        except ValueError as e:
            raise ConfigurationError(
                f"cloud server URL {self.cloud_server_url} is invalid: {e}"
            ) from e
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigurationError(
                f"cloud server URL {self.cloud_server_url} is invalid: "
                "must be an absolute http(s) URL"
            )
        return self.cloud_server_url

    @property
    def webhook_target(self) -> WebhookTarget:
        return WebhookTarget(
            url=self.webhook_url, username=WEBHOOK_USERNAME, icon_url=WEBHOOK_ICON_URL
        )
