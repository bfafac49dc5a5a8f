"""
BlueprintRecord -- one stored blueprint per row.

The full blueprint (fields included) lives in ``payload`` in the persisted
snapshot shape; ``name`` and the timestamps are duplicated into columns for
inspection and ordering only.  ``sort_order`` preserves catalog order.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from contract_kernel.db.base import Base


class BlueprintRecord(Base):
    __tablename__ = "blueprints"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    sort_order: Mapped[int] = mapped_column(nullable=False)
    payload: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(nullable=False)
    updated_at: Mapped[datetime] = mapped_column(nullable=False)

    def __repr__(self) -> str:
        return f"<BlueprintRecord {self.id} {self.name!r}>"
