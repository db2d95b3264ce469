"""FastAPI dependency injection — ledger and coordinator factories."""
from __future__ import annotations

from fastapi import Depends
from sqlalchemy.orm import sessionmaker

from notifier.core.constants import MessageType
from notifier.db.session import get_session_factory
from notifier.delivery.coordinator import SendCoordinator
from notifier.delivery.factory import build_coordinator
from notifier.ledger.idempotency_ledger import IdempotencyLedger


def get_sessionmaker() -> sessionmaker:
    return get_session_factory()


def get_ledger(session_factory: sessionmaker = Depends(get_sessionmaker)) -> IdempotencyLedger:
    """Return the ledger bound to the application's session factory."""
    return IdempotencyLedger(session_factory)


def get_sms_coordinator(ledger: IdempotencyLedger = Depends(get_ledger)) -> SendCoordinator:
    return build_coordinator(MessageType.SMS, ledger=ledger)


def get_email_coordinator(ledger: IdempotencyLedger = Depends(get_ledger)) -> SendCoordinator:
    return build_coordinator(MessageType.EMAIL, ledger=ledger)
