import logging
from enum import Enum
from typing import Protocol

from prometheus_client import REGISTRY, CollectorRegistry, Counter

logger = logging.getLogger(__name__)


class MetricName(str, Enum):
    err = "err"
    warn = "warn"
    badserverresponse = "badserverresponse"


class Metrics(Protocol):
    """
    Metrics sink consumed by the validator.
    Implementations are fire-and-forget and must never raise to the caller.
    """

    def record_size_validation(self, bidder: str, account_id: str, outcome: MetricName) -> None:
        ...

    def record_secure_validation(self, bidder: str, account_id: str, outcome: MetricName) -> None:
        ...

    def record_adapter_request_error(self, bidder: str, error_kind: MetricName) -> None:
        ...


class PrometheusMetrics:
    """
    Prometheus-backed metrics sink.

    Counters:
        bid_validation_size_total{bidder, account, outcome}
        bid_validation_secure_total{bidder, account, outcome}
        adapter_request_errors_total{bidder, error_kind}

    Pass a dedicated CollectorRegistry to keep several instances apart
    (the default registry rejects duplicate metric names).
    """

    def __init__(self, registry: CollectorRegistry = REGISTRY):
        self.size_validation = Counter(
            "bid_validation_size",
            "Banner size validation violations",
            ["bidder", "account", "outcome"],
            registry=registry,
        )
        self.secure_validation = Counter(
            "bid_validation_secure",
            "Secure markup validation violations",
            ["bidder", "account", "outcome"],
            registry=registry,
        )
        self.adapter_request_errors = Counter(
            "adapter_request_errors",
            "Bidder adapter request errors",
            ["bidder", "error_kind"],
            registry=registry,
        )

    def record_size_validation(self, bidder: str, account_id: str, outcome: MetricName) -> None:
        self._inc(self.size_validation, bidder=bidder, account=account_id, outcome=outcome.value)

    def record_secure_validation(self, bidder: str, account_id: str, outcome: MetricName) -> None:
        self._inc(self.secure_validation, bidder=bidder, account=account_id, outcome=outcome.value)

    def record_adapter_request_error(self, bidder: str, error_kind: MetricName) -> None:
        self._inc(self.adapter_request_errors, bidder=bidder, error_kind=error_kind.value)

    @staticmethod
    def _inc(counter: Counter, **labels) -> None:
        try:
            counter.labels(**labels).inc()
        except Exception as e:
            # Metrics must never break the bid path
            logger.error("Failed to record metric %s: %s", labels, e)
