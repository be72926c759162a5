"""Base notifier class for notification delivery.

Provides the abstract base class for implementing notification
delivery to different channels.
"""

from abc import abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Generic, Type, Union

from cloud_lambdas.handlers.notifications.notifiers.model import (
    NOTIFIER_TARGET,
    NotificationContent,
    NotifierResult,
)


@dataclass
class Notifier(Generic[NOTIFIER_TARGET]):
    """Abstract base class for notification delivery implementations.

    Subclasses implement the delivery for one kind of target. `notify` must
    not raise: delivery errors are reported through an unsuccessful
    `NotifierResult` so that callers can log and move on.

    Type Parameters:
        NOTIFIER_TARGET: The target model type for this notifier.

    Example:
        ```python
        @dataclass
        class StdoutNotifier(Notifier[StdoutTarget]):
            def notify(self, content: NotificationContent, target: StdoutTarget) -> NotifierResult:
                print(content.message)
                return NotifierResult(target=target.to_dict(), success=True, response="")
        ```
    """

    @classmethod
    def notifier_target_class(cls) -> Type[NOTIFIER_TARGET]:
        return cls.__orig_bases__[0].__args__[0]  # type: ignore

    @abstractmethod
    def notify(self, content: NotificationContent, target: NOTIFIER_TARGET) -> NotifierResult:
        """Deliver a notification to the target.

        Args:
            content (NotificationContent): The notification content to deliver.
            target (NOTIFIER_TARGET): The delivery target specification.

        Returns:
            Result indicating success or failure.
        """
        raise NotImplementedError("Please implement `notify` method")  # pragma: no cover

    @classmethod
    def parse_target(cls, target: Union[Dict[str, Any], NOTIFIER_TARGET]) -> NOTIFIER_TARGET:
        """Parse a target from a dictionary or validate an existing target.

        Raises:
            ValueError: If the target cannot be parsed.
        """
        if isinstance(target, cls.notifier_target_class()):
            return target
        elif isinstance(target, dict):
            return cls.notifier_target_class().from_dict(target)
        else:
            raise ValueError(f"Could not parse target {target} as {cls.notifier_target_class()}")

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}"
