from aibs_informatics_core.exceptions import ApplicationException


class CloudAuthError(ApplicationException):
    """Base error of the cloud server auth proxy.

    Every subclass maps to the HTTP status returned to the caller.
    """

    status_code: int = 500


class ConfigurationError(CloudAuthError):
    """The proxy configuration is missing or invalid."""

    status_code = 500


class PathParseError(CloudAuthError):
    """The inbound request path could not be parsed."""

    status_code = 400


class AuthorizationError(CloudAuthError):
    """The requested path is not on the allow-list."""

    status_code = 401


class UpstreamError(CloudAuthError):
    """The cloud server could not be reached or its response could not be read."""

    status_code = 500
