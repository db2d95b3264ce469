"""Atomic insert-plus-send attempts against the idempotency ledger.

:meth:`IdempotencyLedger.attempt` runs one transaction that spans exactly one
ledger insert and one provider call:

1. A visible entry for the natural key short-circuits with ``DUPLICATE``.
2. The entry is inserted and flushed.  A store rejection at this point means
   the provider was never called (``REJECTED``).
3. The provider is called.  On failure the transaction is rolled back so the
   key stays available for a later attempt.
4. On provider success the transaction is committed.  A rejection here means
   a concurrent attempt won the race after this one already sent
   (``COMMIT_REJECTED``).

The ledger reports what happened; it does not decide what it means.  See
:func:`notifier.delivery.classifier.classify_outcome`.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Protocol
from uuid import UUID

from sqlalchemy import MetaData
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from notifier.core.constants import MessageType
from notifier.db.models import MessageIdempotency
from notifier.db.repositories import MessageIdempotencyRepository
from notifier.ledger.constraints import ConstraintViolation, extract_violation
from notifier.senders.base import SendOutcome

logger = logging.getLogger(__name__)


class InsertSignal(str, Enum):
    INSERTED = "inserted"
    DUPLICATE = "duplicate"
    REJECTED = "rejected"
    COMMIT_REJECTED = "commit_rejected"


@dataclass(frozen=True)
class LedgerEntry:
    message_type: MessageType
    idempotency_key: str
    message_template: str
    recipient: str
    rendered_message: str
    params: dict[str, Any] | None = None
    user_id: str | None = None


@dataclass(frozen=True)
class LedgerAttempt:
    """Raw signals from one attempt, before classification."""

    insert: InsertSignal
    send: SendOutcome | None = None
    violation: ConstraintViolation | None = None
    error: BaseException | None = field(default=None, compare=False)
    record_id: UUID | None = None


class Ledger(Protocol):
    def attempt(self, entry: LedgerEntry, deliver: Callable[[], SendOutcome]) -> LedgerAttempt:
        ...


class IdempotencyLedger:
    """SQLAlchemy-backed ledger.  One short-lived session per attempt."""

    def __init__(self, session_factory: sessionmaker, *, metadata: MetaData | None = None) -> None:
        self._session_factory = session_factory
        self._metadata = metadata

    def attempt(self, entry: LedgerEntry, deliver: Callable[[], SendOutcome]) -> LedgerAttempt:
        with self._session_factory() as db:
            repo = MessageIdempotencyRepository(db)
            try:
                existing = repo.find_by_natural_key(
                    message_type=entry.message_type,
                    idempotency_key=entry.idempotency_key,
                    message_template=entry.message_template,
                )
                if existing is not None:
                    logger.debug(
                        "Ledger entry already present: type=%s template=%s",
                        entry.message_type.value,
                        entry.message_template,
                    )
                    return LedgerAttempt(insert=InsertSignal.DUPLICATE, record_id=existing.id)

                record = repo.create(
                    message_type=entry.message_type,
                    idempotency_key=entry.idempotency_key,
                    message_template=entry.message_template,
                    recipient=entry.recipient,
                    user_id=entry.user_id,
                    params=entry.params,
                    rendered_message=entry.rendered_message,
                )
            except IntegrityError as exc:
                db.rollback()
                return LedgerAttempt(
                    insert=InsertSignal.REJECTED,
                    violation=extract_violation(exc, self._metadata),
                    error=exc,
                )
            except SQLAlchemyError as exc:
                db.rollback()
                logger.warning("Ledger insert failed before send: %s", type(exc).__name__)
                return LedgerAttempt(insert=InsertSignal.REJECTED, error=exc)

            record_id = record.id
            outcome = deliver()
            if not outcome.ok:
                db.rollback()
                return LedgerAttempt(insert=InsertSignal.INSERTED, send=outcome)

            try:
                db.commit()
            except IntegrityError as exc:
                db.rollback()
                return LedgerAttempt(
                    insert=InsertSignal.COMMIT_REJECTED,
                    send=outcome,
                    violation=extract_violation(exc, self._metadata),
                    error=exc,
                )
            except SQLAlchemyError as exc:
                db.rollback()
                logger.warning("Ledger commit failed after send: %s", type(exc).__name__)
                return LedgerAttempt(insert=InsertSignal.COMMIT_REJECTED, send=outcome, error=exc)

            return LedgerAttempt(insert=InsertSignal.INSERTED, send=outcome, record_id=record_id)

    def list_user_messages(self, user_id: str, *, limit: int = 50, offset: int = 0) -> list[MessageIdempotency]:
        """Ledger entries for *user_id*, most recent first."""
        with self._session_factory() as db:
            return MessageIdempotencyRepository(db).list_for_user(user_id, limit=limit, offset=offset)

    def count_user_messages(self, user_id: str) -> int:
        with self._session_factory() as db:
            return MessageIdempotencyRepository(db).count_for_user(user_id)
