from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID, uuid4

from sqlalchemy import JSON, DateTime, Enum, Index, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from notifier.core.constants import IDEMPOTENCY_CONSTRAINT_NAME, IDEMPOTENCY_TABLE, MessageType
from notifier.db.base import Base


class MessageIdempotency(Base):
    """Durable proof that a notification was handed to its provider.

    Rows are written once, on the winning attempt for a natural key, and are
    never updated or deleted.
    """

    __tablename__ = IDEMPOTENCY_TABLE
    __table_args__ = (
        UniqueConstraint(
            "message_type",
            "idempotency_key",
            "message_template",
            name=IDEMPOTENCY_CONSTRAINT_NAME,
        ),
        Index("ix_message_idempotency_entries_user_id", "user_id"),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    message_type: Mapped[MessageType] = mapped_column(
        Enum(
            MessageType,
            name="message_type",
            native_enum=False,
            length=16,
            values_callable=lambda members: [member.value for member in members],
        ),
        nullable=False,
    )
    idempotency_key: Mapped[str] = mapped_column(String(255), nullable=False)
    message_template: Mapped[str] = mapped_column(String(128), nullable=False)
    recipient: Mapped[str] = mapped_column(String(320), nullable=False)
    user_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    params: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    rendered_message: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
    )
