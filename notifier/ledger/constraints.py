"""Structured identity for constraint violations raised by the store.

Database drivers report constraint failures in different shapes.  Postgres
drivers (psycopg 3 and psycopg2) expose the violated constraint through
``exc.diag`` and the SQLSTATE code.  SQLite only reports the affected columns
in the error message, so those are resolved back to the named constraint
declared in the SQLAlchemy metadata.

Everything downstream works with :class:`ConstraintViolation` values and never
inspects driver messages.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from sqlalchemy import Index, MetaData, PrimaryKeyConstraint, Table, UniqueConstraint
from sqlalchemy.exc import IntegrityError

from notifier.db.base import Base


class ConstraintKind(str, Enum):
    UNIQUE = "unique"
    FOREIGN_KEY = "foreign_key"
    NOT_NULL = "not_null"
    CHECK = "check"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ConstraintViolation:
    """Which constraint rejected a write, as reported by the store."""

    kind: ConstraintKind
    constraint_name: str | None
    table: str | None = None
    columns: tuple[str, ...] = ()


_SQLSTATE_KINDS: dict[str, ConstraintKind] = {
    "23505": ConstraintKind.UNIQUE,
    "23503": ConstraintKind.FOREIGN_KEY,
    "23502": ConstraintKind.NOT_NULL,
    "23514": ConstraintKind.CHECK,
}

_SQLITE_KINDS: dict[str, ConstraintKind] = {
    "UNIQUE": ConstraintKind.UNIQUE,
    "FOREIGN KEY": ConstraintKind.FOREIGN_KEY,
    "NOT NULL": ConstraintKind.NOT_NULL,
    "CHECK": ConstraintKind.CHECK,
}

_SQLITE_MESSAGE = re.compile(r"^(UNIQUE|NOT NULL|CHECK|FOREIGN KEY) constraint failed(?::\s*(.*))?$")
_SQLITE_INDEX = re.compile(r"^index '([^']+)'$")


def extract_violation(exc: IntegrityError, metadata: MetaData | None = None) -> ConstraintViolation:
    """Return the structured identity of the constraint behind *exc*."""
    orig = getattr(exc, "orig", None)
    diag = getattr(orig, "diag", None)
    if diag is not None:
        return _from_postgres(orig, diag)

    message = str(orig) if orig is not None else str(exc)
    return _from_sqlite(message.strip(), metadata if metadata is not None else Base.metadata)


def _from_postgres(orig: object, diag: object) -> ConstraintViolation:
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    column = getattr(diag, "column_name", None)
    return ConstraintViolation(
        kind=_SQLSTATE_KINDS.get(sqlstate or "", ConstraintKind.UNKNOWN),
        constraint_name=getattr(diag, "constraint_name", None),
        table=getattr(diag, "table_name", None),
        columns=(column,) if column else (),
    )


def _from_sqlite(message: str, metadata: MetaData) -> ConstraintViolation:
    match = _SQLITE_MESSAGE.match(message)
    if match is None:
        return ConstraintViolation(kind=ConstraintKind.UNKNOWN, constraint_name=None)

    kind = _SQLITE_KINDS[match.group(1)]
    detail = (match.group(2) or "").strip()

    index_match = _SQLITE_INDEX.match(detail)
    if index_match:
        return ConstraintViolation(kind=kind, constraint_name=index_match.group(1))

    if kind is not ConstraintKind.UNIQUE and kind is not ConstraintKind.NOT_NULL:
        # CHECK reports the constraint name; FOREIGN KEY reports nothing.
        return ConstraintViolation(kind=kind, constraint_name=detail or None)

    qualified = [item.strip() for item in detail.split(",") if item.strip()]
    table_name = qualified[0].rpartition(".")[0] if qualified else None
    columns = tuple(item.rpartition(".")[2] for item in qualified)

    name = None
    if kind is ConstraintKind.UNIQUE and table_name in metadata.tables:
        name = _unique_constraint_name(metadata.tables[table_name], columns)

    return ConstraintViolation(kind=kind, constraint_name=name, table=table_name, columns=columns)


def _unique_constraint_name(table: Table, columns: tuple[str, ...]) -> str | None:
    wanted = frozenset(columns)

    for constraint in table.constraints:
        if not isinstance(constraint, (UniqueConstraint, PrimaryKeyConstraint)):
            continue
        if frozenset(column.name for column in constraint.columns) != wanted:
            continue
        if isinstance(constraint, PrimaryKeyConstraint):
            # Postgres naming convention, so both backends report the same identity.
            return constraint.name or f"{table.name}_pkey"
        return constraint.name

    for index in table.indexes:
        if isinstance(index, Index) and index.unique and frozenset(column.name for column in index.columns) == wanted:
            return index.name

    return None
