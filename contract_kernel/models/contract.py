"""
ContractRecord -- one stored contract per row.

``payload`` holds the full contract in the persisted snapshot shape.
``status`` and ``blueprint_id`` are indexed copies so stored state can be
queried by lifecycle stage without decoding payloads.  There is no foreign
key to ``blueprints``: a contract outlives the blueprint it was created from.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from contract_kernel.db.base import Base


class ContractRecord(Base):
    __tablename__ = "contracts"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    blueprint_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    sort_order: Mapped[int] = mapped_column(nullable=False)
    payload: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(nullable=False)
    updated_at: Mapped[datetime] = mapped_column(nullable=False)

    def __repr__(self) -> str:
        return f"<ContractRecord {self.id} {self.status}>"
