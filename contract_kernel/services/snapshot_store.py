"""
SnapshotStore -- SQLAlchemy persistence for the workspace snapshot.

Responsibility:
    Saves the complete ``{blueprints, contracts}`` state after a mutation
    and loads it back at startup.  The kernel itself is storage-agnostic;
    this is the default persistence collaborator.

Architecture position:
    Kernel > Services -- imperative shell.  Uses models/ and domain/snapshot.

Invariants enforced:
    - ``save`` replaces the stored state as a whole within the caller's
      transaction (flush only).  A rollback leaves the previous state.
    - Row order (``sort_order``) reproduces catalog and repository order.

Failure modes:
    - Stored payloads that cannot be decoded -> ``SnapshotFormatError``.
"""

from __future__ import annotations

from sqlalchemy import func, select

from contract_kernel.domain.snapshot import (
    WorkspaceSnapshot,
    blueprint_from_dict,
    blueprint_to_dict,
    contract_from_dict,
    contract_to_dict,
)
from contract_kernel.logging_config import get_logger
from contract_kernel.models.blueprint import BlueprintRecord
from contract_kernel.models.contract import ContractRecord
from contract_kernel.services.base import BaseService

logger = get_logger("services.snapshot_store")


class SnapshotStore(BaseService):
    """Reads and writes ``WorkspaceSnapshot`` rows."""

    def has_state(self) -> bool:
        """True if any blueprint or contract has been stored."""
        blueprints = self.session.execute(select(func.count()).select_from(BlueprintRecord)).scalar_one()
        contracts = self.session.execute(select(func.count()).select_from(ContractRecord)).scalar_one()
        return bool(blueprints or contracts)

    def load(self) -> WorkspaceSnapshot:
        """Load the stored snapshot (empty if nothing was saved)."""
        blueprint_rows = self.session.execute(
            select(BlueprintRecord).order_by(BlueprintRecord.sort_order)
        ).scalars().all()
        contract_rows = self.session.execute(
            select(ContractRecord).order_by(ContractRecord.sort_order)
        ).scalars().all()

        snapshot = WorkspaceSnapshot(
            blueprints=tuple(blueprint_from_dict(row.payload) for row in blueprint_rows),
            contracts=tuple(contract_from_dict(row.payload) for row in contract_rows),
        )
        logger.debug(
            "snapshot_loaded",
            extra={
                "blueprint_count": len(snapshot.blueprints),
                "contract_count": len(snapshot.contracts),
            },
        )
        return snapshot

    def save(self, snapshot: WorkspaceSnapshot) -> None:
        """Replace the stored state with ``snapshot``.

        Rows are updated in place by id; rows whose id is absent from the
        snapshot are deleted.
        """
        stored_blueprints = {
            row.id: row
            for row in self.session.execute(select(BlueprintRecord)).scalars()
        }
        for index, blueprint in enumerate(snapshot.blueprints):
            row = stored_blueprints.pop(blueprint.id, None)
            if row is None:
                row = BlueprintRecord(id=blueprint.id)
                self.session.add(row)
            row.name = blueprint.name
            row.sort_order = index
            row.payload = blueprint_to_dict(blueprint)
            row.created_at = blueprint.created_at
            row.updated_at = blueprint.updated_at
        for row in stored_blueprints.values():
            self.session.delete(row)

        stored_contracts = {
            row.id: row
            for row in self.session.execute(select(ContractRecord)).scalars()
        }
        for index, contract in enumerate(snapshot.contracts):
            row = stored_contracts.pop(contract.id, None)
            if row is None:
                row = ContractRecord(id=contract.id)
                self.session.add(row)
            row.name = contract.name
            row.blueprint_id = contract.blueprint_id
            row.status = contract.status.value
            row.sort_order = index
            row.payload = contract_to_dict(contract)
            row.created_at = contract.created_at
            row.updated_at = contract.updated_at
        for row in stored_contracts.values():
            self.session.delete(row)

        self.session.flush()
        logger.debug(
            "snapshot_saved",
            extra={
                "blueprint_count": len(snapshot.blueprints),
                "contract_count": len(snapshot.contracts),
            },
        )
