"""Structured JSON logging for the Lambda handlers, via AWS Lambda Powertools."""

import logging
from typing import Optional, Union

from aibs_informatics_core.utils.logging import get_all_handlers
from aibs_informatics_core.utils.os_operations import get_env_var
from aws_lambda_powertools.logging import Logger

from cloud_lambdas.common.base import HandlerMixins

LOG_LEVEL_ENV_VARS = ("POWERTOOLS_LOG_LEVEL", "LOG_LEVEL")
AWS_EXECUTION_ENV_VAR = "AWS_EXECUTION_ENV"


def resolve_log_level() -> str:
    """Level for service loggers.

    `POWERTOOLS_LOG_LEVEL` or `LOG_LEVEL` when set, else INFO in the Lambda
    runtime and DEBUG locally.
    """
    if log_level := get_env_var(*LOG_LEVEL_ENV_VARS):
        return log_level.upper()
    return "INFO" if get_env_var(AWS_EXECUTION_ENV_VAR) else "DEBUG"


class LoggingMixins(HandlerMixins):
    """Gives a handler a lazily created service `logger` (also reachable as `log`)."""

    @property
    def log(self) -> Logger:
        return self.logger

    @log.setter
    def log(self, value: Logger):
        self.logger = value

    @property
    def logger(self) -> Logger:
        try:
            return self._logger
        except AttributeError:
            self.logger = self.get_logger(self.service_name())
        return self.logger

    @logger.setter
    def logger(self, value: Logger):
        self._logger = value

    @classmethod
    def get_logger(cls, service: Optional[str] = None, add_to_root: bool = False) -> Logger:
        return get_service_logger(service=service, add_to_root=add_to_root)

    def add_logger_to_root(self):
        """Route root logger records (requests, urllib3) through this handler's formatter."""
        add_handler_to_logger(self.logger, None)


def get_service_logger(
    service: Optional[str] = None,
    add_to_root: bool = False,
    level: Optional[str] = None,
) -> Logger:
    """Powertools logger for `service`, at `level` or `resolve_log_level()`."""
    service_logger = Logger(service=service, level=level or resolve_log_level())
    if add_to_root:
        add_handler_to_logger(service_logger)
    return service_logger


def add_handler_to_logger(
    source_logger: Logger, target_logger: Union[str, logging.Logger, None] = None
):
    """Attach the handler of `source_logger` to `target_logger` once.

    A name or None (the root logger) is looked up first, and its level is
    lowered to the source level when that is more verbose.
    """
    handler = source_logger.registered_handler

    if target_logger is None or isinstance(target_logger, str):
        target_logger = logging.getLogger(target_logger)
        target_logger.setLevel(min(source_logger.log_level, target_logger.getEffectiveLevel()))

    if handler not in get_all_handlers(target_logger):
        target_logger.addHandler(handler)
