"""CloudWatch embedded metrics for API Lambdas."""

from datetime import datetime
from typing import Optional

from aibs_informatics_core.utils.os_operations import get_env_var
from aws_lambda_powertools.metrics import Metrics, MetricUnit

from cloud_lambdas.common.base import HandlerMixins

METRICS_NAMESPACE_ENV_VAR = "POWERTOOLS_METRICS_NAMESPACE"
DEFAULT_METRICS_NAMESPACE = "CloudLambdas"


class EnhancedMetrics(Metrics):
    """Metrics with count, duration and success/failure helpers."""

    def add_count_metric(self, name: str, value: float):
        self.add_metric(name=name, unit=MetricUnit.Count, value=value)

    def add_duration_metric(self, start: datetime, name: str = ""):
        """Record the milliseconds elapsed since `start` as '{name}Duration'."""
        duration = datetime.now(start.tzinfo) - start
        self.add_metric(
            name=f"{name}Duration",
            unit=MetricUnit.Milliseconds,
            value=duration.total_seconds() * 1000,
        )

    def add_success_metric(self, name: str = ""):
        self.add_count_metric(f"{name}Success", 1)
        self.add_count_metric(f"{name}Failure", 0)

    def add_failure_metric(self, name: str = ""):
        self.add_count_metric(f"{name}Success", 0)
        self.add_count_metric(f"{name}Failure", 1)


class MetricsMixins(HandlerMixins):
    """Lazily created `EnhancedMetrics`, with the handler name as a dimension."""

    @property
    def metrics(self) -> EnhancedMetrics:
        try:
            return self._metrics
        except AttributeError:
            self._metrics = self.get_metrics(service=self.service_name())
            self._metrics.add_dimension(name="handler_name", value=self.handler_name())
        return self._metrics

    @classmethod
    def get_metrics(
        cls, service: Optional[str] = None, namespace: Optional[str] = None
    ) -> EnhancedMetrics:
        """Create metrics published under `namespace`.

        The namespace defaults to `POWERTOOLS_METRICS_NAMESPACE`, then `CloudLambdas`.
        """
        namespace = namespace or get_env_var(
            METRICS_NAMESPACE_ENV_VAR, default_value=DEFAULT_METRICS_NAMESPACE
        )
        return EnhancedMetrics(service=service, namespace=namespace)
