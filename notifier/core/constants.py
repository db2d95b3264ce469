"""Shared constants for the notification ledger and delivery pipeline.

Constraint identity
-------------------
The ledger's uniqueness invariant is enforced by a single named constraint
over ``(message_type, idempotency_key, message_template)``.  Databases that
were migrated before the constraint was given an explicit name carry the
Postgres-generated identifier instead (truncated to 63 characters), so both
names identify the same invariant.
"""
from __future__ import annotations

from enum import Enum


class MessageType(str, Enum):
    EMAIL = "email"
    SMS = "sms"


IDEMPOTENCY_TABLE = "message_idempotency_entries"

IDEMPOTENCY_CONSTRAINT_NAME = "message_idempotency_entries_unique_index"
LEGACY_IDEMPOTENCY_CONSTRAINT_NAME = "message_idempotency_entries_message_type_idempotency_key_messag"

IDEMPOTENCY_CONSTRAINT_NAMES: frozenset[str] = frozenset({
    IDEMPOTENCY_CONSTRAINT_NAME,
    LEGACY_IDEMPOTENCY_CONSTRAINT_NAME,
})

# Environments where provider adapters validate but never hit the network.
LOWER_ENVIRONMENTS: frozenset[str] = frozenset({"local", "dev", "test", "sandbox"})

# Telemetry event suffixes: <prefix>.<message_type>.<suffix>
EVENT_SENT = "sent"
EVENT_SEND_FAILED = "send_failed"
