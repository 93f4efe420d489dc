"""
models/kv_entry.py — Key-value table backing the persistence provider.

One row per namespaced key:
  <namespace>_history        → JSON list of history entries, most recent first
  <namespace>_current_split  → JSON object of the live split

No business logic. No imports from services or routes.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, LargeBinary, String, func
from sqlalchemy.orm import Mapped, mapped_column

from backend.app.extensions import db


class KeyValueEntry(db.Model):
    __tablename__ = "kv_entries"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)

    # Opaque bytes. The history store writes UTF-8 JSON here.
    value: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<KeyValueEntry key={self.key!r} bytes={len(self.value or b'')}>"
