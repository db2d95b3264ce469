"""Tests for notifier/ledger/constraints.py — constraint identity extraction."""
from __future__ import annotations

from types import SimpleNamespace
from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError

from notifier.core.constants import IDEMPOTENCY_CONSTRAINT_NAME, IDEMPOTENCY_TABLE, MessageType
from notifier.db.models import MessageIdempotency
from notifier.ledger.constraints import ConstraintKind, extract_violation


def _row(**overrides) -> MessageIdempotency:
    values = dict(
        message_type=MessageType.SMS,
        idempotency_key="key-1",
        message_template="booking_checkin_reminder",
        recipient="14155551234",
        rendered_message="Hi!",
    )
    values.update(overrides)
    return MessageIdempotency(**values)


def _integrity_error(session_factory, first: MessageIdempotency, second: MessageIdempotency) -> IntegrityError:
    with session_factory() as db:
        db.add(first)
        db.commit()
    with session_factory() as db:
        db.add(second)
        with pytest.raises(IntegrityError) as excinfo:
            db.flush()
        db.rollback()
    return excinfo.value


# ===========================================================================
# SQLite
# ===========================================================================

class TestSqliteViolations:
    def test_duplicate_natural_key_resolves_to_named_constraint(self, session_factory):
        exc = _integrity_error(session_factory, _row(), _row(recipient="14155550000"))

        violation = extract_violation(exc)

        assert violation.kind is ConstraintKind.UNIQUE
        assert violation.constraint_name == IDEMPOTENCY_CONSTRAINT_NAME
        assert violation.table == IDEMPOTENCY_TABLE
        assert set(violation.columns) == {"message_type", "idempotency_key", "message_template"}

    def test_duplicate_primary_key_is_a_different_constraint(self, session_factory):
        entry_id = uuid4()
        exc = _integrity_error(
            session_factory,
            _row(id=entry_id),
            _row(id=entry_id, idempotency_key="key-2"),
        )

        violation = extract_violation(exc)

        assert violation.kind is ConstraintKind.UNIQUE
        assert violation.constraint_name == f"{IDEMPOTENCY_TABLE}_pkey"

    def test_not_null_violation(self, session_factory):
        with session_factory() as db:
            db.add(_row(recipient=None))
            with pytest.raises(IntegrityError) as excinfo:
                db.flush()
            db.rollback()

        violation = extract_violation(excinfo.value)

        assert violation.kind is ConstraintKind.NOT_NULL
        assert violation.constraint_name is None
        assert violation.columns == ("recipient",)

    def test_named_index_form(self):
        exc = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed: index 'uq_custom'"))
        violation = extract_violation(exc)
        assert violation.kind is ConstraintKind.UNIQUE
        assert violation.constraint_name == "uq_custom"

    def test_unrecognised_message_is_unknown(self):
        exc = IntegrityError("INSERT", {}, Exception("database is on fire"))
        violation = extract_violation(exc)
        assert violation.kind is ConstraintKind.UNKNOWN
        assert violation.constraint_name is None


# ===========================================================================
# Postgres
# ===========================================================================

class _FakePgError(Exception):
    def __init__(self, sqlstate: str, constraint_name: str | None, column_name: str | None = None):
        super().__init__("pg error")
        self.sqlstate = sqlstate
        self.diag = SimpleNamespace(
            constraint_name=constraint_name,
            table_name=IDEMPOTENCY_TABLE,
            column_name=column_name,
        )


class TestPostgresViolations:
    def test_unique_violation_reads_diag(self):
        orig = _FakePgError("23505", IDEMPOTENCY_CONSTRAINT_NAME)
        violation = extract_violation(IntegrityError("INSERT", {}, orig))

        assert violation.kind is ConstraintKind.UNIQUE
        assert violation.constraint_name == IDEMPOTENCY_CONSTRAINT_NAME
        assert violation.table == IDEMPOTENCY_TABLE

    def test_not_null_violation_reports_column(self):
        orig = _FakePgError("23502", None, column_name="recipient")
        violation = extract_violation(IntegrityError("INSERT", {}, orig))

        assert violation.kind is ConstraintKind.NOT_NULL
        assert violation.columns == ("recipient",)

    def test_psycopg2_pgcode_supported(self):
        orig = _FakePgError("", "some_fk")
        orig.sqlstate = None
        orig.pgcode = "23503"
        violation = extract_violation(IntegrityError("INSERT", {}, orig))

        assert violation.kind is ConstraintKind.FOREIGN_KEY
        assert violation.constraint_name == "some_fk"

    def test_unmapped_sqlstate_is_unknown(self):
        orig = _FakePgError("23P01", "exclusion_thing")
        violation = extract_violation(IntegrityError("INSERT", {}, orig))
        assert violation.kind is ConstraintKind.UNKNOWN
