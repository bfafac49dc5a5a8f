"""
TemplateCatalog -- owner of the blueprint collection.

Responsibility:
    CRUD over blueprints and their ordered field lists.  Every structural
    field change re-normalizes positions to a contiguous 0-based sequence
    and stamps the blueprint's ``updated_at``.

Architecture position:
    Kernel > Services -- in-memory write side.  Holds the only mutable
    reference to the blueprint collection; callers receive frozen
    ``Blueprint`` values and can only change state through this class.

Invariants enforced:
    - Field positions are 0..n-1 in display order after every operation.
    - Field ids are unique within a blueprint.
    - Seed blueprints are always present after construction
      (``reconcile_seeds``).
    - Deleting a blueprint never touches contracts created from it.

Failure modes:
    - Unknown blueprint / field ids: ``None`` or ``False``, no mutation.
    - Duplicate field ids in caller input: ``ValueError``.
    - Patching ``id`` or ``position`` through ``update_field``: ``TypeError``.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Iterable, Iterator

from contract_kernel.domain.blueprint import (
    Blueprint,
    BlueprintInput,
    BlueprintPatch,
    FieldInput,
    ReorderDirection,
    normalize_positions,
)
from contract_kernel.domain.clock import Clock, SystemClock
from contract_kernel.domain.fields import BlueprintField
from contract_kernel.domain.identifiers import IdFactory, generate_id
from contract_kernel.logging_config import get_logger

logger = get_logger("services.template_catalog")

_PATCHABLE_FIELD_ATTRS = frozenset({
    "type",
    "label",
    "required",
    "editable_by",
    "placeholder",
    "default_checked",
})


def reconcile_seeds(
    seeds: Iterable[Blueprint],
    persisted: Iterable[Blueprint],
) -> list[Blueprint]:
    """Union the seed set with persisted blueprints by id.

    Seeds come first and always in their canonical form; persisted copies
    of a seed id are discarded.  Every other persisted blueprint is kept
    verbatim and in its stored order.
    """
    seed_list = list(seeds)
    seed_ids = {b.id for b in seed_list}
    user_blueprints = [b for b in persisted if b.id not in seed_ids]
    return seed_list + user_blueprints


class TemplateCatalog:
    """
    In-memory blueprint catalog.

    Contract:
        All reads return frozen values; all writes go through the methods
        below and replace the stored value atomically.

    Non-goals:
        - No versioning of templates.
        - No propagation of changes to existing contracts.
    """

    def __init__(
        self,
        seeds: Iterable[Blueprint] = (),
        persisted: Iterable[Blueprint] = (),
        clock: Clock | None = None,
        id_factory: IdFactory | None = None,
    ):
        self._clock = clock or SystemClock()
        self._new_id = id_factory or generate_id
        seed_list = list(seeds)
        self._seed_ids = frozenset(b.id for b in seed_list)
        self._blueprints: dict[str, Blueprint] = {
            b.id: b for b in reconcile_seeds(seed_list, persisted)
        }
        logger.debug(
            "template_catalog_loaded",
            extra={
                "blueprint_count": len(self._blueprints),
                "seed_count": len(self._seed_ids),
            },
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list(self) -> list[Blueprint]:
        return list(self._blueprints.values())

    def get(self, blueprint_id: str) -> Blueprint | None:
        return self._blueprints.get(blueprint_id)

    def __len__(self) -> int:
        return len(self._blueprints)

    def __contains__(self, blueprint_id: object) -> bool:
        return blueprint_id in self._blueprints

    def __iter__(self) -> Iterator[Blueprint]:
        return iter(self.list())

    @property
    def seed_ids(self) -> frozenset[str]:
        return self._seed_ids

    def is_seed(self, blueprint_id: str) -> bool:
        return blueprint_id in self._seed_ids

    def snapshot(self) -> tuple[Blueprint, ...]:
        return tuple(self._blueprints.values())

    # ------------------------------------------------------------------
    # Blueprint CRUD
    # ------------------------------------------------------------------

    def create(self, data: BlueprintInput) -> Blueprint:
        """
        Create a new blueprint.

        Fields given as ``FieldInput`` receive fresh ids; fields given as
        ``BlueprintField`` keep theirs.  Positions follow the given order.

        Raises:
            ValueError: If two fields share an id.
        """
        now = self._clock.now()
        blueprint = Blueprint(
            id=self._new_id(),
            name=data.name,
            description=data.description,
            fields=self._build_fields(data.fields),
            created_at=now,
            updated_at=now,
        )
        self._blueprints[blueprint.id] = blueprint
        logger.info(
            "blueprint_created",
            extra={
                "blueprint_id": blueprint.id,
                "field_count": len(blueprint.fields),
            },
        )
        return blueprint

    def update(self, blueprint_id: str, patch: BlueprintPatch) -> Blueprint | None:
        """Apply a partial update. Returns the new value, or None if absent."""
        blueprint = self._blueprints.get(blueprint_id)
        if blueprint is None:
            logger.warning("blueprint_not_found", extra={"blueprint_id": blueprint_id})
            return None

        changes: dict[str, Any] = {}
        if patch.name is not None:
            changes["name"] = patch.name
        if patch.description is not None:
            changes["description"] = patch.description
        if patch.fields is not None:
            changes["fields"] = self._build_fields(patch.fields)

        updated = self._commit(blueprint, **changes)
        logger.info(
            "blueprint_updated",
            extra={"blueprint_id": blueprint_id, "changed": sorted(changes)},
        )
        return updated

    def delete(self, blueprint_id: str) -> bool:
        """Remove a blueprint. Contracts created from it are unaffected."""
        if self._blueprints.pop(blueprint_id, None) is None:
            return False
        logger.info(
            "blueprint_deleted",
            extra={"blueprint_id": blueprint_id, "was_seed": self.is_seed(blueprint_id)},
        )
        return True

    # ------------------------------------------------------------------
    # Field operations
    # ------------------------------------------------------------------

    def add_field(self, blueprint_id: str, data: FieldInput) -> BlueprintField | None:
        """Append a field at ``position = current field count``."""
        blueprint = self._blueprints.get(blueprint_id)
        if blueprint is None:
            return None

        new_field = data.build(self._unique_field_id(blueprint), len(blueprint.fields))
        self._commit(blueprint, fields=blueprint.fields + (new_field,))
        logger.info(
            "blueprint_field_added",
            extra={
                "blueprint_id": blueprint_id,
                "field_id": new_field.id,
                "field_type": new_field.type,
                "position": new_field.position,
            },
        )
        return new_field

    def update_field(self, blueprint_id: str, field_id: str, **changes: Any) -> bool:
        """
        Patch a field's attributes in place (position unchanged).

        Raises:
            TypeError: If ``changes`` names an attribute that may not be
                patched (``id``, ``position``) or does not exist.
        """
        illegal = set(changes) - _PATCHABLE_FIELD_ATTRS
        if illegal:
            raise TypeError(f"Cannot patch field attribute(s): {sorted(illegal)}")

        blueprint = self._blueprints.get(blueprint_id)
        if blueprint is None:
            return False
        index = blueprint.field_index(field_id)
        if index == -1:
            return False

        fields = list(blueprint.fields)
        fields[index] = replace(fields[index], **changes)
        self._commit(blueprint, fields=tuple(fields))
        logger.info(
            "blueprint_field_updated",
            extra={
                "blueprint_id": blueprint_id,
                "field_id": field_id,
                "changed": sorted(changes),
            },
        )
        return True

    def delete_field(self, blueprint_id: str, field_id: str) -> bool:
        """Remove a field and close the gap in positions."""
        blueprint = self._blueprints.get(blueprint_id)
        if blueprint is None or blueprint.field_index(field_id) == -1:
            return False

        remaining = normalize_positions(f for f in blueprint.fields if f.id != field_id)
        self._commit(blueprint, fields=remaining)
        logger.info(
            "blueprint_field_deleted",
            extra={"blueprint_id": blueprint_id, "field_id": field_id},
        )
        return True

    def reorder_field(
        self,
        blueprint_id: str,
        field_id: str,
        direction: ReorderDirection | str,
    ) -> bool:
        """
        Swap a field with its neighbour in ``direction``.

        Returns False (no-op) when the field already sits at that boundary
        or when the blueprint / field does not exist.

        Raises:
            ValueError: If ``direction`` is not "up" or "down".
        """
        direction = ReorderDirection(direction)
        blueprint = self._blueprints.get(blueprint_id)
        if blueprint is None:
            return False
        index = blueprint.field_index(field_id)
        if index == -1:
            return False

        target = index - 1 if direction is ReorderDirection.UP else index + 1
        if target < 0 or target >= len(blueprint.fields):
            return False

        fields = list(blueprint.fields)
        fields[index], fields[target] = fields[target], fields[index]
        self._commit(blueprint, fields=normalize_positions(fields))
        logger.info(
            "blueprint_field_reordered",
            extra={
                "blueprint_id": blueprint_id,
                "field_id": field_id,
                "direction": direction,
                "from_position": index,
                "to_position": target,
            },
        )
        return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _commit(self, blueprint: Blueprint, **changes: Any) -> Blueprint:
        updated = replace(blueprint, updated_at=self._clock.now(), **changes)
        self._blueprints[blueprint.id] = updated
        return updated

    def _build_fields(
        self,
        items: Iterable[BlueprintField | FieldInput],
    ) -> tuple[BlueprintField, ...]:
        fields: list[BlueprintField] = []
        seen: set[str] = set()
        for index, item in enumerate(items):
            if isinstance(item, FieldInput):
                built = item.build(self._new_id(), index)
            else:
                built = item
            if built.id in seen:
                raise ValueError(f"Duplicate field id: {built.id}")
            seen.add(built.id)
            fields.append(built)
        return normalize_positions(fields)

    def _unique_field_id(self, blueprint: Blueprint) -> str:
        existing = {f.id for f in blueprint.fields}
        field_id = self._new_id()
        while field_id in existing:
            field_id = self._new_id()
        return field_id
