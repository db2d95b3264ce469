"""Pure classification of ledger and provider signals into an Outcome.

Race detection lives here so it can be exercised without a store or a
network call: a constraint violation reported at commit time is a duplicate
only when its identity is one of the idempotency constraint names.
"""
from __future__ import annotations

from collections.abc import Collection

from notifier.core.constants import IDEMPOTENCY_CONSTRAINT_NAMES
from notifier.delivery.outcomes import Outcome, OutcomeKind
from notifier.ledger.constraints import ConstraintKind, ConstraintViolation
from notifier.ledger.idempotency_ledger import InsertSignal, LedgerAttempt
from notifier.senders.base import SendOutcome


def is_idempotency_violation(
    violation: ConstraintViolation | None,
    idempotency_constraints: Collection[str] = IDEMPOTENCY_CONSTRAINT_NAMES,
) -> bool:
    if violation is None or violation.constraint_name is None:
        return False
    if violation.kind not in (ConstraintKind.UNIQUE, ConstraintKind.UNKNOWN):
        return False
    return violation.constraint_name in idempotency_constraints


def classify_outcome(
    insert: InsertSignal,
    send: SendOutcome | None,
    error: BaseException | None = None,
    *,
    violation: ConstraintViolation | None = None,
    idempotency_constraints: Collection[str] = IDEMPOTENCY_CONSTRAINT_NAMES,
) -> Outcome:
    """Map one attempt's signals to its terminal :class:`Outcome`.

    Parameters
    ----------
    insert:
        What happened to the ledger write.
    send:
        The provider's answer, or ``None`` when the provider was not called.
    error:
        The exception behind a rejected write, if any.
    violation:
        Structured identity of the constraint behind a rejected write.
    idempotency_constraints:
        Constraint names that enforce the ledger's uniqueness invariant.
    """
    if insert is InsertSignal.DUPLICATE:
        return Outcome(kind=OutcomeKind.DUPLICATE_NORMAL)

    if insert is InsertSignal.REJECTED:
        if is_idempotency_violation(violation, idempotency_constraints):
            return Outcome(kind=OutcomeKind.DUPLICATE_NORMAL, violation=violation)
        return Outcome(
            kind=OutcomeKind.PERSISTENCE_FAILURE,
            detail=_describe("ledger write rejected", violation, error),
            violation=violation,
            error=error,
        )

    if insert is InsertSignal.COMMIT_REJECTED:
        if is_idempotency_violation(violation, idempotency_constraints):
            # Another attempt committed first; this attempt's send is a harmless duplicate.
            return Outcome(kind=OutcomeKind.DUPLICATE_RACE, violation=violation)
        return Outcome(
            kind=OutcomeKind.UNEXPECTED,
            detail=_describe("ledger commit rejected after send", violation, error),
            violation=violation,
            error=error,
        )

    if insert is InsertSignal.INSERTED:
        if send is None:
            return Outcome(
                kind=OutcomeKind.UNEXPECTED,
                detail="ledger entry inserted but provider was not called",
                error=error,
            )
        if send.ok:
            return Outcome(kind=OutcomeKind.NEW_SEND_SUCCESS, provider_message_id=send.provider_message_id)
        return Outcome(
            kind=OutcomeKind.SEND_FAILURE,
            detail=send.reason or "provider reported failure",
            error=error,
        )

    return Outcome(kind=OutcomeKind.UNEXPECTED, detail=f"unrecognised insert signal {insert!r}", error=error)


def classify_attempt(
    attempt: LedgerAttempt,
    *,
    idempotency_constraints: Collection[str] = IDEMPOTENCY_CONSTRAINT_NAMES,
) -> Outcome:
    return classify_outcome(
        attempt.insert,
        attempt.send,
        attempt.error,
        violation=attempt.violation,
        idempotency_constraints=idempotency_constraints,
    )


def _describe(prefix: str, violation: ConstraintViolation | None, error: BaseException | None) -> str:
    parts = [prefix]
    if violation is not None:
        parts.append(f"constraint={violation.constraint_name or 'unknown'} kind={violation.kind.value}")
    if error is not None:
        parts.append(f"error={type(error).__name__}")
    return "; ".join(parts)
