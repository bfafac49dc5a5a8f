"""
Tests for TemplateCatalog (``contract_kernel.services.template_catalog``).

Invariants tested:
- Positions are 0..n-1 after every structural change.
- add_field appends; delete_field closes the gap; reorder_field swaps with
  the neighbour and is a no-op at the boundary.
- Every field change stamps updated_at.
- Seeds are always present after construction; user blueprints survive.
"""

from dataclasses import replace

import pytest

from contract_kernel.domain.blueprint import (
    BlueprintInput,
    BlueprintPatch,
    FieldInput,
    ReorderDirection,
)
from contract_kernel.domain.fields import BlueprintField, FieldEditor, FieldType
from contract_kernel.services.template_catalog import TemplateCatalog, reconcile_seeds

SEED_IDS = [
    "default-employment-contract",
    "default-nda",
    "default-freelance",
    "default-rental",
]


def _positions(blueprint) -> list[int]:
    return [f.position for f in blueprint.fields]


@pytest.fixture
def three_field_blueprint(catalog):
    return catalog.create(BlueprintInput(
        name="Service Order",
        description="Simple order form",
        fields=(
            FieldInput(type=FieldType.TEXT, label="Customer", required=True),
            FieldInput(type=FieldType.DATE, label="Due"),
            FieldInput(type=FieldType.SIGNATURE, label="Sign", editable_by=FieldEditor.CLIENT),
        ),
    ))


# =========================================================================
# Seeds
# =========================================================================


class TestSeedReconciliation:
    def test_seeds_present_on_empty_state(self, catalog):
        assert [b.id for b in catalog.list()] == SEED_IDS
        assert catalog.seed_ids == frozenset(SEED_IDS)

    def test_missing_seed_reinserted(self, seed_blueprints):
        persisted = [b for b in seed_blueprints if b.id != "default-nda"]
        catalog = TemplateCatalog(seeds=seed_blueprints, persisted=persisted)
        assert "default-nda" in catalog

    def test_user_blueprints_preserved_in_order(self, seed_blueprints, catalog):
        first = catalog.create(BlueprintInput(name="First"))
        second = catalog.create(BlueprintInput(name="Second"))

        reloaded = TemplateCatalog(seeds=seed_blueprints, persisted=[second, first])
        assert [b.id for b in reloaded.list()] == SEED_IDS + [second.id, first.id]
        assert reloaded.get(first.id) == first

    def test_stale_seed_copy_replaced_by_canonical(self, seed_blueprints):
        stale = replace(seed_blueprints[1], name="Old NDA name", fields=())
        merged = reconcile_seeds(seed_blueprints, [stale])
        assert merged[1] == seed_blueprints[1]
        assert len(merged) == len(seed_blueprints)

    def test_deleted_seed_returns_after_reload(self, seed_blueprints, catalog):
        assert catalog.delete("default-rental")
        reloaded = TemplateCatalog(seeds=seed_blueprints, persisted=catalog.snapshot())
        assert "default-rental" in reloaded

    def test_is_seed(self, catalog, three_field_blueprint):
        assert catalog.is_seed("default-nda")
        assert not catalog.is_seed(three_field_blueprint.id)


# =========================================================================
# Blueprint CRUD
# =========================================================================


class TestBlueprintCrud:
    def test_create_assigns_ids_and_positions(self, catalog, three_field_blueprint, deterministic_clock):
        bp = three_field_blueprint
        assert bp.id in catalog
        assert _positions(bp) == [0, 1, 2]
        assert len({f.id for f in bp.fields}) == 3
        assert bp.created_at == bp.updated_at == deterministic_clock.now()

    def test_create_keeps_explicit_field_ids(self, catalog):
        bp = catalog.create(BlueprintInput(
            name="Explicit",
            fields=(BlueprintField(id="given", type=FieldType.TEXT, label="Given", position=7),),
        ))
        assert bp.fields[0].id == "given"
        assert bp.fields[0].position == 0

    def test_create_rejects_duplicate_field_ids(self, catalog):
        dup = BlueprintField(id="x", type=FieldType.TEXT, label="X")
        with pytest.raises(ValueError):
            catalog.create(BlueprintInput(name="Dup", fields=(dup, dup)))

    def test_update_partial(self, catalog, three_field_blueprint, deterministic_clock):
        deterministic_clock.advance(60)
        updated = catalog.update(three_field_blueprint.id, BlueprintPatch(name="Renamed"))
        assert updated.name == "Renamed"
        assert updated.description == "Simple order form"
        assert updated.fields == three_field_blueprint.fields
        assert updated.updated_at > three_field_blueprint.updated_at
        assert catalog.get(three_field_blueprint.id) == updated

    def test_update_missing(self, catalog):
        assert catalog.update("nope", BlueprintPatch(name="x")) is None

    def test_delete(self, catalog, three_field_blueprint):
        assert catalog.delete(three_field_blueprint.id)
        assert catalog.get(three_field_blueprint.id) is None
        assert not catalog.delete(three_field_blueprint.id)

    def test_reads_return_frozen_values(self, catalog):
        listed = catalog.list()
        listed.clear()
        assert len(catalog) == 4


# =========================================================================
# Field operations
# =========================================================================


class TestFieldOperations:
    def test_add_field_appends(self, catalog, three_field_blueprint, deterministic_clock):
        deterministic_clock.advance(5)
        added = catalog.add_field(
            three_field_blueprint.id,
            FieldInput(type=FieldType.CHECKBOX, label="Rush", default_checked=True),
        )
        bp = catalog.get(three_field_blueprint.id)
        assert added.position == 3
        assert bp.fields[-1] == added
        assert bp.updated_at == deterministic_clock.now()

    def test_add_field_to_missing_blueprint(self, catalog):
        assert catalog.add_field("nope", FieldInput(type=FieldType.TEXT, label="x")) is None

    def test_update_field_in_place(self, catalog, three_field_blueprint):
        target = three_field_blueprint.fields[1]
        assert catalog.update_field(three_field_blueprint.id, target.id, label="Due date", required=True)
        field = catalog.get(three_field_blueprint.id).fields[1]
        assert (field.id, field.label, field.required, field.position) == (
            target.id, "Due date", True, 1,
        )

    def test_update_field_rejects_position_and_id(self, catalog, three_field_blueprint):
        field_id = three_field_blueprint.fields[0].id
        with pytest.raises(TypeError):
            catalog.update_field(three_field_blueprint.id, field_id, position=2)
        with pytest.raises(TypeError):
            catalog.update_field(three_field_blueprint.id, field_id, id="other")

    def test_update_missing_field(self, catalog, three_field_blueprint):
        assert not catalog.update_field(three_field_blueprint.id, "nope", label="x")
        assert not catalog.update_field("nope", "nope", label="x")

    def test_delete_field_renormalizes(self, catalog, three_field_blueprint):
        first, middle, last = three_field_blueprint.fields
        assert catalog.delete_field(three_field_blueprint.id, middle.id)
        bp = catalog.get(three_field_blueprint.id)
        assert [f.id for f in bp.fields] == [first.id, last.id]
        assert _positions(bp) == [0, 1]

    def test_delete_missing_field(self, catalog, three_field_blueprint):
        before = catalog.get(three_field_blueprint.id)
        assert not catalog.delete_field(three_field_blueprint.id, "nope")
        assert catalog.get(three_field_blueprint.id) == before

    def test_reorder_up(self, catalog, three_field_blueprint):
        a, b, c = three_field_blueprint.fields
        assert catalog.reorder_field(three_field_blueprint.id, c.id, "up")
        bp = catalog.get(three_field_blueprint.id)
        assert [f.id for f in bp.fields] == [a.id, c.id, b.id]
        assert _positions(bp) == [0, 1, 2]

    def test_reorder_down(self, catalog, three_field_blueprint):
        a, b, c = three_field_blueprint.fields
        assert catalog.reorder_field(three_field_blueprint.id, a.id, ReorderDirection.DOWN)
        assert [f.id for f in catalog.get(three_field_blueprint.id).fields] == [b.id, a.id, c.id]

    @pytest.mark.parametrize("index,direction", [(0, "up"), (2, "down")])
    def test_reorder_at_boundary_is_noop(self, catalog, three_field_blueprint, deterministic_clock, index, direction):
        deterministic_clock.advance(30)
        field_id = three_field_blueprint.fields[index].id
        assert not catalog.reorder_field(three_field_blueprint.id, field_id, direction)
        assert catalog.get(three_field_blueprint.id) == three_field_blueprint

    def test_reorder_bad_direction(self, catalog, three_field_blueprint):
        with pytest.raises(ValueError):
            catalog.reorder_field(three_field_blueprint.id, three_field_blueprint.fields[0].id, "left")

    def test_field_change_logged(self, catalog, three_field_blueprint, captured_logs):
        catalog.delete_field(three_field_blueprint.id, three_field_blueprint.fields[0].id)
        records = [r for r in captured_logs() if r["message"] == "blueprint_field_deleted"]
        assert records and records[0]["blueprint_id"] == three_field_blueprint.id
