"""
Blueprint value objects (``contract_kernel.domain.blueprint``).

A blueprint is a reusable template: a name, a description, and an ordered
tuple of ``BlueprintField`` definitions.  The records here are frozen;
the ``TemplateCatalog`` produces new instances for every change.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Iterable

from contract_kernel.domain.fields import BlueprintField, FieldEditor, FieldType


class ReorderDirection(str, Enum):
    UP = "up"
    DOWN = "down"


@dataclass(frozen=True)
class Blueprint:
    """A reusable contract template.

    Guarantees: ``fields`` is ordered by ``position`` and positions run
    0..n-1 without gaps (maintained by the catalog).
    """

    id: str
    name: str
    description: str
    fields: tuple[BlueprintField, ...]
    created_at: datetime
    updated_at: datetime

    def get_field(self, field_id: str) -> BlueprintField | None:
        for f in self.fields:
            if f.id == field_id:
                return f
        return None

    def field_index(self, field_id: str) -> int:
        """Index of the field, or -1 when absent."""
        for index, f in enumerate(self.fields):
            if f.id == field_id:
                return index
        return -1


@dataclass(frozen=True)
class FieldInput:
    """Data for a new field; the catalog assigns ``id`` and ``position``."""

    type: FieldType
    label: str
    required: bool = False
    editable_by: FieldEditor | None = None
    placeholder: str | None = None
    default_checked: bool | None = None

    def build(self, field_id: str, position: int) -> BlueprintField:
        return BlueprintField(
            id=field_id,
            type=self.type,
            label=self.label,
            position=position,
            required=self.required,
            editable_by=self.editable_by,
            placeholder=self.placeholder,
            default_checked=self.default_checked,
        )


@dataclass(frozen=True)
class BlueprintInput:
    """Data required to create a new blueprint."""

    name: str
    description: str = ""
    fields: tuple[BlueprintField | FieldInput, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class BlueprintPatch:
    """Partial update of a blueprint; ``None`` leaves an attribute untouched."""

    name: str | None = None
    description: str | None = None
    fields: tuple[BlueprintField | FieldInput, ...] | None = None


def normalize_positions(fields: Iterable[BlueprintField]) -> tuple[BlueprintField, ...]:
    """Re-number positions to 0..n-1 keeping the given relative order."""
    return tuple(
        f if f.position == index else replace(f, position=index)
        for index, f in enumerate(fields)
    )
