"""Effect layer: turn a terminal Outcome into telemetry and error reports.

Every outcome emits exactly one telemetry event.  Operational failures
(``REPORTED_KINDS``) additionally file exactly one error report.  Both sinks
are fire-and-forget: a failing sink is logged and never reaches the caller.
"""
from __future__ import annotations

import logging
from typing import Any

from notifier.core.constants import EVENT_SEND_FAILED, EVENT_SENT
from notifier.delivery.outcomes import REPORTED_KINDS, DeliveryContext, Outcome
from notifier.observability.error_reporting import ErrorReporter
from notifier.observability.telemetry import TelemetryEmitter

logger = logging.getLogger(__name__)


class EffectDispatcher:
    def __init__(
        self,
        telemetry: TelemetryEmitter,
        reporter: ErrorReporter,
        *,
        event_prefix: str = "notifier",
    ) -> None:
        self._telemetry = telemetry
        self._reporter = reporter
        self._event_prefix = event_prefix

    def dispatch(self, outcome: Outcome, context: DeliveryContext) -> None:
        self._emit_telemetry(outcome, context)
        if outcome.kind in REPORTED_KINDS:
            self._file_report(outcome, context)

    def event_name(self, outcome: Outcome, context: DeliveryContext) -> str:
        suffix = EVENT_SENT if outcome.is_success else EVENT_SEND_FAILED
        return f"{self._event_prefix}.{context.message_type.value}.{suffix}"

    # -- telemetry ----------------------------------------------------------

    def _emit_telemetry(self, outcome: Outcome, context: DeliveryContext) -> None:
        tags: dict[str, Any] = {
            "message_type": context.message_type.value,
            "template": context.template or "unknown",
            "recipient": context.recipient,
            "idempotency_key": context.idempotency_key,
            "duplicate": outcome.is_duplicate,
            "outcome": outcome.kind.value,
        }
        if not outcome.is_success:
            tags["reason"] = outcome.detail or outcome.kind.value
        if outcome.violation is not None and outcome.violation.constraint_name:
            tags["constraint"] = outcome.violation.constraint_name

        try:
            self._telemetry.emit(self.event_name(outcome, context), {"count": 1}, tags)
        except Exception:
            logger.exception("Telemetry emission failed for outcome=%s", outcome.kind.value)

    # -- error reports ------------------------------------------------------

    def _file_report(self, outcome: Outcome, context: DeliveryContext) -> None:
        message_type = context.message_type.value
        report_context: dict[str, Any] = {
            "message_type": message_type,
            "template": context.template,
            "recipient": context.recipient,
            "user_id": context.user_id,
            "idempotency_key": context.idempotency_key,
            "outcome": outcome.kind.value,
            "detail": outcome.detail,
        }
        if outcome.violation is not None:
            report_context["constraint"] = outcome.violation.constraint_name
            report_context["constraint_kind"] = outcome.violation.kind.value
        tags = {
            f"{message_type}_template": context.template,
            "error_type": outcome.kind.value,
            "has_user_id": context.user_id is not None,
        }
        subject = outcome.error if outcome.error is not None else (
            f"{message_type} delivery failed: {outcome.detail or outcome.kind.value}"
        )

        try:
            self._reporter.capture(subject, report_context, tags)
        except Exception:
            logger.exception("Error report failed for outcome=%s", outcome.kind.value)
