"""Wiring for production coordinators.

Builds one :class:`SendCoordinator` per message type from settings, with
the default templates, provider adapters, a Prometheus telemetry counter
and a logging error reporter.  Every collaborator can be overridden, which
is how tests and alternative deployments inject their own.
"""
from __future__ import annotations

from sqlalchemy.orm import sessionmaker

from notifier.core.constants import MessageType
from notifier.core.settings import Settings, get_settings
from notifier.delivery.coordinator import SendCoordinator
from notifier.delivery.effects import EffectDispatcher
from notifier.ledger.idempotency_ledger import IdempotencyLedger, Ledger
from notifier.observability.error_reporting import ErrorReporter, LoggingErrorReporter
from notifier.observability.telemetry import (
    LoggingTelemetryEmitter,
    TelemetryEmitter,
    default_prometheus_emitter,
)
from notifier.senders.base import ExternalSenderAdapter
from notifier.senders.flowroute_sms import FlowrouteSmsSender
from notifier.senders.smtp_email import SmtpEmailSender
from notifier.templates.base import TemplateRegistry
from notifier.templates.email import default_email_templates
from notifier.templates.sms import default_sms_templates


def default_sender(message_type: MessageType, settings: Settings) -> ExternalSenderAdapter:
    if message_type is MessageType.SMS:
        return FlowrouteSmsSender(
            access_key=settings.flowroute_access_key,
            secret_key=settings.flowroute_secret_key,
            from_number=settings.flowroute_from_number,
            base_url=settings.flowroute_api_base_url,
            timeout_s=settings.flowroute_timeout_s,
            environment=settings.app_env,
        )
    return SmtpEmailSender(
        settings.smtp_host,
        settings.smtp_port,
        from_email=settings.smtp_from_email,
        timeout_s=settings.smtp_timeout_s,
    )


def default_templates(message_type: MessageType) -> TemplateRegistry:
    if message_type is MessageType.SMS:
        return TemplateRegistry(default_sms_templates())
    return TemplateRegistry(default_email_templates())


def default_telemetry(settings: Settings) -> TelemetryEmitter:
    if settings.telemetry_backend == "logging":
        return LoggingTelemetryEmitter()
    return default_prometheus_emitter(settings.telemetry_event_prefix)


def build_coordinator(
    message_type: MessageType,
    *,
    session_factory: sessionmaker | None = None,
    ledger: Ledger | None = None,
    sender: ExternalSenderAdapter | None = None,
    templates: TemplateRegistry | None = None,
    telemetry: TelemetryEmitter | None = None,
    reporter: ErrorReporter | None = None,
    settings: Settings | None = None,
) -> SendCoordinator:
    """Return a coordinator for *message_type*.

    Either *ledger* or *session_factory* must be given.
    """
    settings = settings or get_settings()
    if ledger is None:
        if session_factory is None:
            raise ValueError("build_coordinator needs a ledger or a session_factory")
        ledger = IdempotencyLedger(session_factory)

    dispatcher = EffectDispatcher(
        telemetry or default_telemetry(settings),
        reporter or LoggingErrorReporter(),
        event_prefix=settings.telemetry_event_prefix,
    )
    return SendCoordinator(
        message_type=message_type,
        ledger=ledger,
        sender=sender or default_sender(message_type, settings),
        templates=templates or default_templates(message_type),
        dispatcher=dispatcher,
    )
