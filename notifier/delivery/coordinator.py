"""SendCoordinator: the idempotent send pipeline for one message type.

Flow
----
    normalize recipient -> resolve renderer -> render
        -> ledger attempt (insert + provider send, one transaction)
        -> classify -> dispatch effects -> Result

Rules
-----
- The provider is never called for an invalid recipient, an unknown
  template, or a key that is already in the ledger.
- Duplicates are not errors: both the clean and the raced duplicate
  signals return ``Success(already_sent=True)``.
- A provider failure leaves no ledger entry behind, so retrying with the
  same key is a fresh attempt.
- ``send`` never raises.  Anything unexpected becomes ``Failure(UNEXPECTED)``.
- The ledger key holds the template name exactly as the caller passed it,
  and params are stored in their JSON form.
- Failure details name exception types only, never driver messages.

Precondition
------------
On a lost race the losing attempt's provider call has already happened and
is discarded.  That is harmless for notifications, where a second identical
SMS or email is a nuisance, but it means this pipeline must only guard side
effects that are safe to execute more than once.
"""
from __future__ import annotations

import logging
from collections.abc import Collection, Mapping
from dataclasses import replace
from typing import Any, Callable

from pydantic_core import to_jsonable_python

from notifier.core.constants import IDEMPOTENCY_CONSTRAINT_NAMES, MessageType
from notifier.delivery.classifier import classify_attempt
from notifier.delivery.effects import EffectDispatcher
from notifier.delivery.outcomes import DeliveryContext, Outcome, OutcomeKind, Result
from notifier.ledger.idempotency_ledger import Ledger, LedgerEntry
from notifier.normalization.email_normalizer import normalize_email
from notifier.normalization.phone_normalizer import normalize_phone
from notifier.senders.base import ExternalSenderAdapter, SendOutcome
from notifier.templates.base import TemplateRegistry

logger = logging.getLogger(__name__)

RecipientNormalizer = Callable[[object], str | None]

_DEFAULT_NORMALIZERS: dict[MessageType, RecipientNormalizer] = {
    MessageType.SMS: normalize_phone,
    MessageType.EMAIL: normalize_email,
}


class SendCoordinator:
    """Idempotent ``send`` for one message type.

    Parameters
    ----------
    message_type:
        ``MessageType.SMS`` or ``MessageType.EMAIL``.
    ledger:
        Store that runs the atomic insert-plus-send attempt.
    sender:
        Provider adapter for this message type.
    templates:
        Registry the template name is resolved against.
    dispatcher:
        Effect layer for telemetry and error reports.
    normalize_recipient:
        Overrides the default normalizer for *message_type*.
    idempotency_constraints:
        Constraint names that identify the ledger's uniqueness invariant.
    """

    def __init__(
        self,
        *,
        message_type: MessageType,
        ledger: Ledger,
        sender: ExternalSenderAdapter,
        templates: TemplateRegistry,
        dispatcher: EffectDispatcher,
        normalize_recipient: RecipientNormalizer | None = None,
        idempotency_constraints: Collection[str] = IDEMPOTENCY_CONSTRAINT_NAMES,
    ) -> None:
        self.message_type = message_type
        self._ledger = ledger
        self._sender = sender
        self._templates = templates
        self._dispatcher = dispatcher
        self._normalize = normalize_recipient or _DEFAULT_NORMALIZERS[message_type]
        self._idempotency_constraints = frozenset(idempotency_constraints)

    # -- public API ---------------------------------------------------------

    def send(
        self,
        recipient: str,
        idempotency_key: str,
        template: str,
        params: Mapping[str, Any] | None = None,
        user_id: str | None = None,
    ) -> Result:
        """Send *template* to *recipient* at most once per idempotency key."""
        outcome, context = self.decide(recipient, idempotency_key, template, params, user_id)
        self._dispatcher.dispatch(outcome, context)
        return outcome.to_result()

    def decide(
        self,
        recipient: str,
        idempotency_key: str,
        template: str,
        params: Mapping[str, Any] | None = None,
        user_id: str | None = None,
    ) -> tuple[Outcome, DeliveryContext]:
        """Run the attempt and classify it without dispatching any effect."""
        params_dict = dict(params) if isinstance(params, Mapping) else {}
        context = DeliveryContext(
            message_type=self.message_type,
            template=template,
            recipient=recipient if isinstance(recipient, str) else repr(recipient),
            idempotency_key=idempotency_key,
            user_id=user_id,
            params=params_dict,
        )
        try:
            return self._decide(context, recipient)
        except Exception as exc:
            logger.exception(
                "Unexpected error in %s send (template=%s)",
                self.message_type.value,
                template,
            )
            outcome = Outcome(
                kind=OutcomeKind.UNEXPECTED,
                detail=f"unexpected error: {type(exc).__name__}",
                error=exc,
            )
            return outcome, context

    # -- pipeline -----------------------------------------------------------

    def _decide(self, context: DeliveryContext, raw_recipient: object) -> tuple[Outcome, DeliveryContext]:
        normalized = self._normalize(raw_recipient)
        if not normalized:
            logger.info(
                "%s not sent - invalid recipient format (template=%s)",
                self.message_type.value,
                context.template,
            )
            return Outcome(kind=OutcomeKind.INVALID_RECIPIENT, detail="invalid recipient format"), context

        context = replace(context, recipient=normalized)

        renderer = self._templates.get(context.template)
        if renderer is None:
            logger.error("Template not found for %s template=%s", self.message_type.value, context.template)
            return (
                Outcome(
                    kind=OutcomeKind.UNKNOWN_TEMPLATE,
                    detail=f"template not found: {context.template}",
                ),
                context,
            )

        body = renderer.render(context.params or {})
        entry = LedgerEntry(
            message_type=self.message_type,
            idempotency_key=context.idempotency_key,
            message_template=context.template,
            recipient=normalized,
            rendered_message=body,
            params=to_jsonable_python(context.params, fallback=str),
            user_id=context.user_id,
        )

        attempt = self._ledger.attempt(entry, lambda: self._deliver(normalized, body))
        outcome = classify_attempt(attempt, idempotency_constraints=self._idempotency_constraints)

        if outcome.is_duplicate:
            logger.info(
                "Duplicate %s detected (%s), treating as success (template=%s)",
                self.message_type.value,
                outcome.kind.value,
                context.template,
            )
        elif outcome.is_success:
            logger.debug("%s sent (template=%s)", self.message_type.value, context.template)
        else:
            logger.error(
                "%s send failed: outcome=%s detail=%s",
                self.message_type.value,
                outcome.kind.value,
                outcome.detail,
            )
        return outcome, context

    def _deliver(self, recipient: str, body: str) -> SendOutcome:
        try:
            return self._sender.send(recipient, body)
        except Exception as exc:
            logger.warning("%s provider raised %s", self.message_type.value, type(exc).__name__)
            return SendOutcome.failure(f"provider raised {type(exc).__name__}")
