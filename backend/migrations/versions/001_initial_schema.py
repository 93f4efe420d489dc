"""Initial schema — the key-value table.

Revision: 001_initial_schema
Created:  2026-10-19

Creates kv_entries, the single table behind SqlKeyValueStore. The history
log and the live split are each one row in it; their JSON layout is owned by
the marshmallow schemas, not by the database, so adding a field to a split
never needs a migration here.

Append-only:
  This file must NEVER be edited after it has been applied to any database.
  If a schema change is required, create a NEW migration file.
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# ── Alembic revision identifiers ──────────────────────────────────────────
revision: str = "001_initial_schema"
down_revision: str | None = None      # first migration — no parent
branch_labels: tuple | None = None
depends_on: tuple | None = None


def upgrade() -> None:
    op.create_table(
        "kv_entries",
        sa.Column("key", sa.String(length=255), primary_key=True),
        sa.Column("value", sa.LargeBinary(), nullable=False),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )


def downgrade() -> None:
    op.drop_table("kv_entries")
