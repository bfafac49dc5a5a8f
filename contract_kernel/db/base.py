"""
Module: contract_kernel.db.base
Responsibility: Declarative base class for the snapshot ORM models.  Provides
    the type annotation map for consistent column types.
Architecture position: Kernel > DB.  This is the lowest-level import target
    within the persistence side of the kernel.  This module MUST NOT import
    from models/, services/, selectors/, or domain/.

Invariants enforced:
    - datetime maps to DateTime(timezone=True) -- always timezone-aware.
    - Identifiers are opaque strings (seed ids are human-readable slugs, not
      UUIDs), so primary keys are declared per model as String columns.
"""

from datetime import datetime
from typing import Any, ClassVar

from sqlalchemy import JSON, DateTime, Integer
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Declarative base for all SQLAlchemy models.

    Guarantees:
        - datetime maps to DateTime(timezone=True).
        - dict[str, Any] maps to JSON.
        - int maps to Integer.
    """

    type_annotation_map: ClassVar[dict] = {
        datetime: DateTime(timezone=True),
        dict[str, Any]: JSON,
        int: Integer,
    }
