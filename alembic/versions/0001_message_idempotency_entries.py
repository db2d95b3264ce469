"""Create message_idempotency_entries

Revision ID: 0001_message_idempotency_entries
Revises:
Create Date: 2026-10-18

"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa


revision: str = "0001_message_idempotency_entries"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "message_idempotency_entries",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("message_type", sa.String(length=16), nullable=False),
        sa.Column("idempotency_key", sa.String(length=255), nullable=False),
        sa.Column("message_template", sa.String(length=128), nullable=False),
        sa.Column("recipient", sa.String(length=320), nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=True),
        sa.Column("params", sa.JSON(), nullable=True),
        sa.Column("rendered_message", sa.Text(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id", name="message_idempotency_entries_pkey"),
        sa.UniqueConstraint(
            "message_type",
            "idempotency_key",
            "message_template",
            name="message_idempotency_entries_unique_index",
        ),
    )
    op.create_index(
        "ix_message_idempotency_entries_user_id",
        "message_idempotency_entries",
        ["user_id"],
    )


def downgrade() -> None:
    op.drop_index(
        "ix_message_idempotency_entries_user_id",
        table_name="message_idempotency_entries",
    )
    op.drop_table("message_idempotency_entries")
