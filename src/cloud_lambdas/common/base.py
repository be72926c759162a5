from aibs_informatics_core.utils.os_operations import get_env_var
from aws_lambda_powertools.utilities.typing import LambdaContext

CONTEXT_ATTR = "_context"

SERVICE_NAME_ENV_VAR = "POWERTOOLS_SERVICE_NAME"


class HandlerMixins:
    """Mixin class providing common handler utilities.

    Gives access to the Lambda context of the current invocation and to the
    names used to label logs and metrics.

    Attributes:
        context: The AWS Lambda context object for the current invocation.
    """

    @property
    def context(self) -> LambdaContext:
        """Get the Lambda context for the current invocation.

        Raises:
            ValueError: If context has not been set.
        """
        if not hasattr(self, CONTEXT_ATTR):
            raise ValueError(f"Lambda context has not been set on {self.__class__.__name__}")
        return getattr(self, CONTEXT_ATTR)

    @context.setter
    def context(self, value: LambdaContext):
        setattr(self, CONTEXT_ATTR, value)

    @classmethod
    def handler_name(cls) -> str:
        """Name of this handler class, used as a metric dimension."""
        return cls.__name__

    @classmethod
    def service_name(cls) -> str:
        """Service name for logs and metrics.

        Deployed functions set `POWERTOOLS_SERVICE_NAME`; otherwise the class
        name is used.
        """
        return get_env_var(SERVICE_NAME_ENV_VAR, default_value=cls.__name__)
