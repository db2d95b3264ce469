"""Outcome and result types for one delivery attempt.

An :class:`Outcome` is the classified terminal state of an attempt.  It is
translated into a caller-facing :data:`Result` and, separately, into
telemetry and error reports by the effect layer.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from notifier.core.constants import MessageType
from notifier.ledger.constraints import ConstraintViolation


class OutcomeKind(str, Enum):
    NEW_SEND_SUCCESS = "new_send_success"
    DUPLICATE_NORMAL = "duplicate_normal"
    DUPLICATE_RACE = "duplicate_race"
    SEND_FAILURE = "send_failure"
    PERSISTENCE_FAILURE = "persistence_failure"
    UNEXPECTED = "unexpected"
    INVALID_RECIPIENT = "invalid_recipient"
    UNKNOWN_TEMPLATE = "unknown_template"


SUCCESS_KINDS: frozenset[OutcomeKind] = frozenset({
    OutcomeKind.NEW_SEND_SUCCESS,
    OutcomeKind.DUPLICATE_NORMAL,
    OutcomeKind.DUPLICATE_RACE,
})

DUPLICATE_KINDS: frozenset[OutcomeKind] = frozenset({
    OutcomeKind.DUPLICATE_NORMAL,
    OutcomeKind.DUPLICATE_RACE,
})

# Operational failures that get an error report.
REPORTED_KINDS: frozenset[OutcomeKind] = frozenset({
    OutcomeKind.SEND_FAILURE,
    OutcomeKind.PERSISTENCE_FAILURE,
    OutcomeKind.UNEXPECTED,
    OutcomeKind.UNKNOWN_TEMPLATE,
})

# Failures a job runner should retry with the same idempotency key.
RETRYABLE_KINDS: frozenset[OutcomeKind] = frozenset({
    OutcomeKind.SEND_FAILURE,
    OutcomeKind.PERSISTENCE_FAILURE,
    OutcomeKind.UNEXPECTED,
})


@dataclass(frozen=True)
class Outcome:
    kind: OutcomeKind
    provider_message_id: str | None = None
    detail: str | None = None
    violation: ConstraintViolation | None = None
    error: BaseException | None = field(default=None, compare=False)

    @property
    def is_success(self) -> bool:
        return self.kind in SUCCESS_KINDS

    @property
    def is_duplicate(self) -> bool:
        return self.kind in DUPLICATE_KINDS

    def to_result(self) -> Result:
        if self.is_success:
            return Success(
                already_sent=self.is_duplicate,
                provider_message_id=self.provider_message_id,
            )
        return Failure(reason=self.kind, detail=self.detail or self.kind.value)


@dataclass(frozen=True)
class DeliveryContext:
    """Who and what an attempt was for.  Attached to every effect."""

    message_type: MessageType
    template: str
    recipient: str
    idempotency_key: str
    user_id: str | None = None
    params: dict[str, Any] | None = None


@dataclass(frozen=True)
class Success:
    already_sent: bool
    provider_message_id: str | None = None

    ok = True


@dataclass(frozen=True)
class Failure:
    reason: OutcomeKind
    detail: str

    ok = False

    @property
    def retryable(self) -> bool:
        return self.reason in RETRYABLE_KINDS


Result = Union[Success, Failure]
