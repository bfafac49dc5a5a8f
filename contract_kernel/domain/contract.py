"""
Contract value objects (``contract_kernel.domain.contract``).

Invariants enforced
-------------------
* ``status`` is always a ``ContractStatus`` member.
* ``fields`` is a tuple of ``ContractField`` copies taken at creation time;
  the contract holds no reference to its blueprint beyond the
  ``blueprint_id`` and the denormalized ``blueprint_name``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from contract_kernel.domain.blueprint import Blueprint
from contract_kernel.domain.fields import ContractField, FieldType
from contract_kernel.domain.lifecycle import ContractStatus, require_status


@dataclass(frozen=True)
class Contract:
    """A contract instance created from a blueprint."""

    id: str
    name: str
    blueprint_id: str
    blueprint_name: str
    status: ContractStatus
    fields: tuple[ContractField, ...]
    created_at: datetime
    updated_at: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "status", require_status(self.status))
        object.__setattr__(self, "fields", tuple(self.fields))

    def get_field(self, field_id: str) -> ContractField | None:
        for f in self.fields:
            if f.id == field_id:
                return f
        return None

    def first_field_of_type(self, field_type: FieldType) -> ContractField | None:
        for f in self.fields:
            if f.type is field_type:
                return f
        return None


def snapshot_fields(blueprint: Blueprint) -> tuple[ContractField, ...]:
    """Copy a blueprint's field definitions into fresh contract fields."""
    return tuple(ContractField.from_definition(f) for f in blueprint.fields)
