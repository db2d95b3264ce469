import os
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from notifier.core.constants import MessageType
from notifier.db.base import Base
from notifier.delivery.coordinator import SendCoordinator
from notifier.delivery.effects import EffectDispatcher
from notifier.ledger.idempotency_ledger import IdempotencyLedger
from notifier.senders.base import SendOutcome
from notifier.templates.base import TemplateRegistry
from notifier.templates.email import default_email_templates
from notifier.templates.sms import default_sms_templates


@pytest.fixture()
def engine():
    """In-memory SQLite engine with the ledger table created."""
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine) -> sessionmaker:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, class_=Session)


@pytest.fixture()
def ledger(session_factory) -> IdempotencyLedger:
    return IdempotencyLedger(session_factory)


@pytest.fixture()
def sender() -> MagicMock:
    mock = MagicMock()
    mock.send.return_value = SendOutcome.success("mdr2-abc123")
    return mock


@pytest.fixture()
def telemetry() -> MagicMock:
    return MagicMock()


@pytest.fixture()
def reporter() -> MagicMock:
    return MagicMock()


@pytest.fixture()
def dispatcher(telemetry, reporter) -> EffectDispatcher:
    return EffectDispatcher(telemetry, reporter, event_prefix="notifier")


@pytest.fixture()
def sms_coordinator(ledger, sender, dispatcher) -> SendCoordinator:
    return SendCoordinator(
        message_type=MessageType.SMS,
        ledger=ledger,
        sender=sender,
        templates=TemplateRegistry(default_sms_templates()),
        dispatcher=dispatcher,
    )


@pytest.fixture()
def email_coordinator(ledger, sender, dispatcher) -> SendCoordinator:
    return SendCoordinator(
        message_type=MessageType.EMAIL,
        ledger=ledger,
        sender=sender,
        templates=TemplateRegistry(default_email_templates()),
        dispatcher=dispatcher,
    )


@pytest.fixture
def client(
    monkeypatch: pytest.MonkeyPatch,
    session_factory,
    sms_coordinator,
    email_coordinator,
) -> TestClient:
    """TestClient with the ledger and coordinators bound to the in-memory store."""
    monkeypatch.setenv("DATABASE_URL", "sqlite+pysqlite:///:memory:")

    from notifier.core.settings import get_settings

    get_settings.cache_clear()

    from notifier.api.deps import get_email_coordinator, get_sessionmaker, get_sms_coordinator
    from notifier.main import app

    app.dependency_overrides[get_sessionmaker] = lambda: session_factory
    app.dependency_overrides[get_sms_coordinator] = lambda: sms_coordinator
    app.dependency_overrides[get_email_coordinator] = lambda: email_coordinator

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    get_settings.cache_clear()
    os.environ.pop("DATABASE_URL", None)
