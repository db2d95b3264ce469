"""Telemetry sinks for delivery outcomes.

``PrometheusTelemetryEmitter`` is the default: one counter, labelled by
message type, event, outcome, duplicate flag and template.  Recipients and
idempotency keys stay out of the labels.  ``LoggingTelemetryEmitter`` writes
the full event to the ``notifier.telemetry`` logger instead.
"""
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Mapping, Protocol

from prometheus_client import REGISTRY, CollectorRegistry, Counter

logger = logging.getLogger("notifier.telemetry")

METRIC_LABELS = ("message_type", "event", "outcome", "duplicate", "template")


class TelemetryEmitter(Protocol):
    def emit(self, event_name: str, measurements: Mapping[str, Any], tags: Mapping[str, Any]) -> None:
        ...


class LoggingTelemetryEmitter:
    """Write telemetry events to the ``notifier.telemetry`` logger."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log or logger

    def emit(self, event_name: str, measurements: Mapping[str, Any], tags: Mapping[str, Any]) -> None:
        self._log.info(
            "telemetry event=%s measurements=%s tags=%s",
            event_name,
            dict(measurements),
            dict(tags),
        )


class PrometheusTelemetryEmitter:
    """Count delivery events in a ``prometheus_client`` Counter.

    Parameters
    ----------
    namespace:
        Metric name prefix; the counter is ``<namespace>_messages_total``.
    registry:
        Registry the counter is registered in.  Each registry can hold one
        emitter per namespace.
    """

    def __init__(self, namespace: str = "notifier", registry: CollectorRegistry | None = None) -> None:
        self.counter = Counter(
            "messages",
            "Notification delivery outcomes",
            METRIC_LABELS,
            namespace=namespace,
            registry=registry if registry is not None else REGISTRY,
        )

    def emit(self, event_name: str, measurements: Mapping[str, Any], tags: Mapping[str, Any]) -> None:
        self.counter.labels(
            message_type=str(tags.get("message_type", "unknown")),
            event=event_name.rpartition(".")[2],
            outcome=str(tags.get("outcome", "unknown")),
            duplicate="true" if tags.get("duplicate") else "false",
            template=str(tags.get("template", "unknown")),
        ).inc(measurements.get("count", 1))


@lru_cache(maxsize=None)
def default_prometheus_emitter(namespace: str = "notifier") -> PrometheusTelemetryEmitter:
    """Process-wide emitter on the default registry, served by ``/metrics``."""
    return PrometheusTelemetryEmitter(namespace)
