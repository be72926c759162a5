from dataclasses import dataclass
from typing import Callable, Generic, Optional, Tuple, Type, TypeVar, Union, get_args, get_origin

from aibs_informatics_core.models.base import ModelProtocol
from aibs_informatics_core.utils.json import JSON
from aws_lambda_powertools.utilities.typing import LambdaContext

from cloud_lambdas.common.base import HandlerMixins
from cloud_lambdas.common.logging import LoggingMixins

LambdaEvent = Union[JSON]  # type: ignore # https://github.com/python/mypy/issues/7866
LambdaHandlerType = Callable[[LambdaEvent, LambdaContext], Optional[JSON]]

REQUEST = TypeVar("REQUEST", bound=ModelProtocol)
RESPONSE = TypeVar("RESPONSE", bound=ModelProtocol)


@dataclass  # type: ignore[misc] # mypy #5374
class LambdaHandler(LoggingMixins, HandlerMixins, Generic[REQUEST, RESPONSE]):
    """Base class for Lambdas that take and return a model.

    The request and response models are the generic parameters of the
    subclass. The event is loaded into the request model with `from_dict` and
    the returned response is dumped with `to_dict`.

    Example:
        ```python
        class PingHandler(LambdaHandler[PingRequest, PingResponse]):
            def handle(self, request: PingRequest) -> PingResponse:
                return PingResponse(message=f"pong {request.name}")

        handler = PingHandler.get_handler()
        ```
    """

    def __post_init__(self):
        self.context = LambdaContext()

    def handle(self, request: REQUEST) -> Optional[RESPONSE]:
        raise NotImplementedError(f"{self.__class__.__name__} must implement `handle`")

    @classmethod
    def _get_model_classes(cls) -> Tuple[Type[REQUEST], Type[RESPONSE]]:
        for klass in cls.__mro__:
            for base in klass.__dict__.get("__orig_bases__", ()):
                if get_origin(base) is not LambdaHandler:
                    continue
                request_cls, response_cls = get_args(base)
                if not isinstance(request_cls, TypeVar) and not isinstance(response_cls, TypeVar):
                    return request_cls, response_cls
        raise TypeError(f"{cls.__name__} does not declare its request and response models")

    @classmethod
    def get_request_cls(cls) -> Type[REQUEST]:
        return cls._get_model_classes()[0]

    @classmethod
    def get_response_cls(cls) -> Type[RESPONSE]:
        return cls._get_model_classes()[1]

    @classmethod
    def deserialize_request(cls, request: LambdaEvent) -> REQUEST:
        return cls.get_request_cls().from_dict(request)

    @classmethod
    def serialize_response(cls, response: RESPONSE) -> JSON:
        return response.to_dict()

    @classmethod
    def get_handler(cls, *args, **kwargs) -> LambdaHandlerType:
        """Build the Lambda entrypoint function for this handler class.

        Each invocation creates a new handler instance from `args` and
        `kwargs`, loads the request, calls `handle` and returns the dumped
        response (or None).
        """
        logger = cls.get_logger(service=cls.service_name(), add_to_root=False)

        @logger.inject_lambda_context(log_event=True)
        def handler(event: LambdaEvent, context: LambdaContext) -> Optional[JSON]:
            lambda_handler = cls(*args, **kwargs)  # type: ignore[call-arg]
            lambda_handler.log = logger
            lambda_handler.context = context
            lambda_handler.add_logger_to_root()

            request = lambda_handler.deserialize_request(event)
            logger.info(f"{lambda_handler} handling {request}")
            response = lambda_handler.handle(request=request)
            if response:
                return lambda_handler.serialize_response(response)
            logger.info(f"{lambda_handler} returned no response")
            return None

        return handler

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
