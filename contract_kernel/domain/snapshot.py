"""
Workspace snapshot (``contract_kernel.domain.snapshot``).

Responsibility
--------------
Converts the full kernel state -- blueprints and contracts -- to and from
plain JSON-compatible dicts.  The dict shape is the persisted shape used by
earlier releases of the application (camelCase keys, ISO-8601 timestamps),
so previously stored state can be loaded unchanged.

Architecture position
---------------------
**Kernel domain layer** -- pure functions.  Storage lives in
``contract_kernel.services.snapshot_store``.

Failure modes
-------------
* Missing keys, wrong types, unknown enum values  -> ``SnapshotFormatError``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from contract_kernel.domain.blueprint import Blueprint
from contract_kernel.domain.contract import Contract
from contract_kernel.domain.fields import BlueprintField, ContractField
from contract_kernel.exceptions import ContractKernelError, SnapshotFormatError


@dataclass(frozen=True)
class WorkspaceSnapshot:
    """Complete serializable state: ``{blueprints, contracts}``."""

    blueprints: tuple[Blueprint, ...] = field(default_factory=tuple)
    contracts: tuple[Contract, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "blueprints": [blueprint_to_dict(b) for b in self.blueprints],
            "contracts": [contract_to_dict(c) for c in self.contracts],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WorkspaceSnapshot:
        if not isinstance(data, dict):
            raise SnapshotFormatError("snapshot", f"expected object, got {type(data).__name__}")
        return cls(
            blueprints=tuple(blueprint_from_dict(b) for b in data.get("blueprints") or ()),
            contracts=tuple(contract_from_dict(c) for c in data.get("contracts") or ()),
        )


# ---------------------------------------------------------------------------
# Timestamps
# ---------------------------------------------------------------------------


def format_timestamp(value: datetime) -> str:
    """ISO-8601 UTC with millisecond precision and a ``Z`` suffix."""
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    else:
        raise ValueError(f"Cannot parse timestamp from {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# ---------------------------------------------------------------------------
# Fields
# ---------------------------------------------------------------------------


def _field_common(f: BlueprintField | ContractField) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": f.id,
        "type": f.type.value,
        "label": f.label,
        "position": f.position,
        "required": f.required,
    }
    if f.editable_by is not None:
        data["editableBy"] = f.editable_by.value
    if f.placeholder is not None:
        data["placeholder"] = f.placeholder
    return data


def blueprint_field_to_dict(f: BlueprintField) -> dict[str, Any]:
    data = _field_common(f)
    if f.default_checked is not None:
        data["defaultChecked"] = f.default_checked
    return data


def blueprint_field_from_dict(data: dict[str, Any]) -> BlueprintField:
    return BlueprintField(
        id=str(data["id"]),
        type=data["type"],
        label=str(data["label"]),
        position=int(data.get("position", 0)),
        required=bool(data.get("required", False)),
        editable_by=data.get("editableBy"),
        placeholder=data.get("placeholder"),
        default_checked=data.get("defaultChecked"),
    )


def contract_field_to_dict(f: ContractField) -> dict[str, Any]:
    data = _field_common(f)
    data["value"] = f.value
    return data


def contract_field_from_dict(data: dict[str, Any]) -> ContractField:
    return ContractField(
        id=str(data["id"]),
        type=data["type"],
        label=str(data["label"]),
        position=int(data.get("position", 0)),
        required=bool(data.get("required", False)),
        editable_by=data.get("editableBy"),
        placeholder=data.get("placeholder"),
        value=data.get("value"),
    )


# ---------------------------------------------------------------------------
# Blueprints and contracts
# ---------------------------------------------------------------------------


def blueprint_to_dict(blueprint: Blueprint) -> dict[str, Any]:
    return {
        "id": blueprint.id,
        "name": blueprint.name,
        "description": blueprint.description,
        "fields": [blueprint_field_to_dict(f) for f in blueprint.fields],
        "createdAt": format_timestamp(blueprint.created_at),
        "updatedAt": format_timestamp(blueprint.updated_at),
    }


def blueprint_from_dict(data: dict[str, Any]) -> Blueprint:
    try:
        fields = sorted(
            (blueprint_field_from_dict(f) for f in data.get("fields") or ()),
            key=lambda f: f.position,
        )
        return Blueprint(
            id=str(data["id"]),
            name=str(data["name"]),
            description=str(data.get("description") or ""),
            fields=tuple(fields),
            created_at=parse_timestamp(data["createdAt"]),
            updated_at=parse_timestamp(data["updatedAt"]),
        )
    except (KeyError, TypeError, ValueError, ContractKernelError) as exc:
        raise SnapshotFormatError("blueprint", f"{type(exc).__name__}: {exc}") from exc


def contract_to_dict(contract: Contract) -> dict[str, Any]:
    return {
        "id": contract.id,
        "name": contract.name,
        "blueprintId": contract.blueprint_id,
        "blueprintName": contract.blueprint_name,
        "status": contract.status.value,
        "fields": [contract_field_to_dict(f) for f in contract.fields],
        "createdAt": format_timestamp(contract.created_at),
        "updatedAt": format_timestamp(contract.updated_at),
    }


def contract_from_dict(data: dict[str, Any]) -> Contract:
    try:
        return Contract(
            id=str(data["id"]),
            name=str(data["name"]),
            blueprint_id=str(data["blueprintId"]),
            blueprint_name=str(data.get("blueprintName") or ""),
            status=data["status"],
            fields=tuple(contract_field_from_dict(f) for f in data.get("fields") or ()),
            created_at=parse_timestamp(data["createdAt"]),
            updated_at=parse_timestamp(data["updatedAt"]),
        )
    except (KeyError, TypeError, ValueError, ContractKernelError) as exc:
        raise SnapshotFormatError("contract", f"{type(exc).__name__}: {exc}") from exc
