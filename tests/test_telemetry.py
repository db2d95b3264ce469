"""Tests for notifier/observability/telemetry.py — Prometheus counter."""
from __future__ import annotations

import pytest
from prometheus_client import CollectorRegistry, generate_latest

from notifier.core.constants import MessageType
from notifier.delivery.effects import EffectDispatcher
from notifier.delivery.outcomes import DeliveryContext, Outcome, OutcomeKind
from notifier.observability.telemetry import PrometheusTelemetryEmitter

CONTEXT = DeliveryContext(
    message_type=MessageType.SMS,
    template="booking_checkin_reminder",
    recipient="14155551234",
    idempotency_key="key-1",
)


def _sample(registry, **labels):
    return registry.get_sample_value("acme_messages_total", labels)


@pytest.fixture()
def registry():
    return CollectorRegistry()


class TestPrometheusTelemetryEmitter:
    def test_counts_outcomes_by_label(self, registry):
        dispatcher = EffectDispatcher(
            PrometheusTelemetryEmitter("acme", registry=registry),
            reporter=_NullReporter(),
            event_prefix="acme",
        )

        dispatcher.dispatch(Outcome(kind=OutcomeKind.NEW_SEND_SUCCESS), CONTEXT)
        dispatcher.dispatch(Outcome(kind=OutcomeKind.DUPLICATE_NORMAL), CONTEXT)
        dispatcher.dispatch(Outcome(kind=OutcomeKind.DUPLICATE_NORMAL), CONTEXT)

        common = {"message_type": "sms", "event": "sent", "template": "booking_checkin_reminder"}
        assert _sample(registry, outcome="new_send_success", duplicate="false", **common) == 1.0
        assert _sample(registry, outcome="duplicate_normal", duplicate="true", **common) == 2.0

    def test_failure_event_label(self, registry):
        emitter = PrometheusTelemetryEmitter("acme", registry=registry)

        emitter.emit(
            "acme.email.send_failed",
            {"count": 1},
            {"message_type": "email", "template": "password_changed", "outcome": "send_failure", "duplicate": False},
        )

        assert _sample(
            registry,
            message_type="email",
            event="send_failed",
            outcome="send_failure",
            duplicate="false",
            template="password_changed",
        ) == 1.0

    def test_recipient_and_key_never_exported(self, registry):
        dispatcher = EffectDispatcher(
            PrometheusTelemetryEmitter("acme", registry=registry),
            reporter=_NullReporter(),
            event_prefix="acme",
        )

        dispatcher.dispatch(Outcome(kind=OutcomeKind.NEW_SEND_SUCCESS), CONTEXT)

        exposition = generate_latest(registry).decode()
        assert "acme_messages_total" in exposition
        assert "14155551234" not in exposition
        assert "key-1" not in exposition


class _NullReporter:
    def capture(self, message_or_exception, context, tags):
        pass
