from __future__ import annotations

from typing import Generic, TypeVar

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from notifier.core.constants import MessageType
from notifier.db import models

ModelT = TypeVar("ModelT")


class BaseRepository(Generic[ModelT]):
    model: type[ModelT]

    def __init__(self, db: Session):
        self.db = db

    def create(self, **kwargs) -> ModelT:
        entity = self.model(**kwargs)
        self.db.add(entity)
        self.db.flush()
        return entity


class MessageIdempotencyRepository(BaseRepository[models.MessageIdempotency]):
    """Ledger access.  No update or delete: entries are append-only."""

    model = models.MessageIdempotency

    def find_by_natural_key(
        self,
        *,
        message_type: MessageType,
        idempotency_key: str,
        message_template: str,
    ) -> models.MessageIdempotency | None:
        stmt = select(self.model).where(
            self.model.message_type == message_type,
            self.model.idempotency_key == idempotency_key,
            self.model.message_template == message_template,
        )
        return self.db.execute(stmt).scalars().first()

    def list_for_user(self, user_id: str, limit: int = 50, offset: int = 0) -> list[models.MessageIdempotency]:
        stmt = (
            select(self.model)
            .where(self.model.user_id == user_id)
            .order_by(self.model.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(self.db.execute(stmt).scalars().all())

    def count_for_user(self, user_id: str) -> int:
        stmt = select(func.count()).select_from(self.model).where(self.model.user_id == user_id)
        return int(self.db.execute(stmt).scalar_one())
