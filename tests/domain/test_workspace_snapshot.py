"""
Tests for the workspace snapshot codec (``contract_kernel.domain.snapshot``).

The dict shape is the stored format (camelCase keys, ISO-8601 timestamps
with millisecond precision), so these tests pin exact keys.
"""

from datetime import datetime, timedelta, timezone

import pytest

from contract_kernel.domain.blueprint import Blueprint
from contract_kernel.domain.contract import Contract
from contract_kernel.domain.fields import BlueprintField, ContractField, FieldEditor, FieldType
from contract_kernel.domain.lifecycle import ContractStatus
from contract_kernel.domain.snapshot import (
    WorkspaceSnapshot,
    blueprint_from_dict,
    blueprint_to_dict,
    contract_from_dict,
    contract_to_dict,
    format_timestamp,
    parse_timestamp,
)
from contract_kernel.exceptions import SnapshotFormatError

NOW = datetime(2026, 2, 3, 4, 5, 6, 789000, tzinfo=timezone.utc)


@pytest.fixture
def blueprint() -> Blueprint:
    return Blueprint(
        id="bp-1",
        name="NDA",
        description="Mutual NDA",
        fields=(
            BlueprintField(id="name", type=FieldType.TEXT, label="Party", position=0,
                           required=True, placeholder="Jane Doe"),
            BlueprintField(id="ok", type=FieldType.CHECKBOX, label="Agree", position=1,
                           default_checked=False, editable_by=FieldEditor.CLIENT),
        ),
        created_at=NOW,
        updated_at=NOW,
    )


@pytest.fixture
def contract() -> Contract:
    return Contract(
        id="c-1",
        name="Acme NDA",
        blueprint_id="bp-1",
        blueprint_name="NDA",
        status=ContractStatus.SENT,
        fields=(
            ContractField(id="name", type=FieldType.TEXT, label="Party", position=0, value="Acme"),
            ContractField(id="sig", type=FieldType.SIGNATURE, label="Signature", position=1,
                          editable_by=FieldEditor.CLIENT),
        ),
        created_at=NOW,
        updated_at=NOW + timedelta(minutes=5),
    )


class TestTimestamps:
    def test_millisecond_z_format(self):
        assert format_timestamp(NOW) == "2026-02-03T04:05:06.789Z"

    def test_offset_normalized_to_utc(self):
        plus_two = NOW.astimezone(timezone(timedelta(hours=2)))
        assert format_timestamp(plus_two) == "2026-02-03T04:05:06.789Z"

    def test_parse_z_suffix(self):
        assert parse_timestamp("2026-02-03T04:05:06.789Z") == NOW

    def test_naive_treated_as_utc(self):
        parsed = parse_timestamp("2026-02-03T04:05:06")
        assert parsed.tzinfo is not None
        assert parsed.utcoffset() == timedelta(0)

    def test_unparseable(self):
        with pytest.raises(ValueError):
            parse_timestamp(12345)


class TestBlueprintDict:
    def test_keys(self, blueprint):
        data = blueprint_to_dict(blueprint)
        assert set(data) == {"id", "name", "description", "fields", "createdAt", "updatedAt"}
        assert data["fields"][0] == {
            "id": "name", "type": "TEXT", "label": "Party", "position": 0,
            "required": True, "placeholder": "Jane Doe",
        }
        assert data["fields"][1]["editableBy"] == "client"
        assert data["fields"][1]["defaultChecked"] is False

    def test_round_trip(self, blueprint):
        assert blueprint_from_dict(blueprint_to_dict(blueprint)) == blueprint

    def test_fields_sorted_by_position(self, blueprint):
        data = blueprint_to_dict(blueprint)
        data["fields"].reverse()
        assert [f.id for f in blueprint_from_dict(data).fields] == ["name", "ok"]

    def test_missing_key(self, blueprint):
        data = blueprint_to_dict(blueprint)
        del data["createdAt"]
        with pytest.raises(SnapshotFormatError) as exc_info:
            blueprint_from_dict(data)
        assert exc_info.value.entity == "blueprint"

    def test_unknown_field_type(self, blueprint):
        data = blueprint_to_dict(blueprint)
        data["fields"][0]["type"] = "NUMBER"
        with pytest.raises(SnapshotFormatError):
            blueprint_from_dict(data)


class TestContractDict:
    def test_keys(self, contract):
        data = contract_to_dict(contract)
        assert data["blueprintId"] == "bp-1"
        assert data["blueprintName"] == "NDA"
        assert data["status"] == "SENT"
        assert data["fields"][1]["value"] is None
        assert data["updatedAt"] == "2026-02-03T04:10:06.789Z"

    def test_round_trip(self, contract):
        assert contract_from_dict(contract_to_dict(contract)) == contract

    def test_unknown_status(self, contract):
        data = contract_to_dict(contract)
        data["status"] = "ARCHIVED"
        with pytest.raises(SnapshotFormatError) as exc_info:
            contract_from_dict(data)
        assert exc_info.value.code == "SNAPSHOT_FORMAT"


class TestWorkspaceSnapshot:
    def test_round_trip(self, blueprint, contract):
        snapshot = WorkspaceSnapshot(blueprints=(blueprint,), contracts=(contract,))
        assert WorkspaceSnapshot.from_dict(snapshot.to_dict()) == snapshot

    def test_empty(self):
        assert WorkspaceSnapshot.from_dict({}) == WorkspaceSnapshot()

    def test_not_a_mapping(self):
        with pytest.raises(SnapshotFormatError):
            WorkspaceSnapshot.from_dict(["blueprints"])  # type: ignore[arg-type]
