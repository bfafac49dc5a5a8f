"""
ContractRepository -- owner of the contract collection.

Responsibility:
    Creates contracts by snapshotting a blueprint's fields, applies
    field-value replacements under lifecycle-gated rules, and applies
    transitions validated by the lifecycle engine.  No status or field
    mutation can bypass ``contract_kernel.domain.lifecycle``.

Architecture position:
    Kernel > Services -- in-memory write side.  Blueprints are resolved
    through an injected ``BlueprintLookup`` (normally the TemplateCatalog);
    the repository never holds blueprint objects after ``create`` returns.

Invariants enforced:
    - Snapshot semantics: contract fields are independent copies taken at
      creation; ``replace_fields`` may change values only, never the shape
      (id, type, label, position, required, editable_by, placeholder).
    - Status changes only through ``transition`` and only along
      ``CONTRACT_TRANSITIONS``.
    - Field writes only while the status accepts them (CREATED, SENT).

Failure modes:
    - ``create`` with an unknown blueprint id -> ``BlueprintNotFoundError``.
    - Every other rejected request returns False (or a failed
      ``TransitionResult`` / ``EditResult``) and leaves state untouched.
    - ``require_transition`` / ``require_field_value`` raise the matching
      ``ContractError`` / ``FieldNotFoundError`` instead, also without
      mutation.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Iterator, Protocol, Sequence

from contract_kernel.domain.blueprint import Blueprint
from contract_kernel.domain.clock import Clock, SystemClock
from contract_kernel.domain.contract import Contract, snapshot_fields
from contract_kernel.domain.fields import ContractField, FieldValue, value_matches_type
from contract_kernel.domain.identifiers import IdFactory, generate_id
from contract_kernel.domain.lifecycle import (
    REASON_CONTRACT_NOT_FOUND,
    REASON_FIELD_NOT_FOUND,
    REASON_FIELD_SHAPE_MISMATCH,
    REASON_INVALID_FIELD_VALUE,
    REASON_INVALID_TRANSITION,
    REASON_NOT_EDITABLE,
    ContractStatus,
    EditResult,
    TransitionResult,
    accepts_field_writes,
    can_transition,
    require_status,
)
from contract_kernel.exceptions import (
    BlueprintNotFoundError,
    ContractNotEditableError,
    ContractNotFoundError,
    FieldNotFoundError,
    InvalidTransitionError,
)
from contract_kernel.logging_config import LogContext, get_logger

logger = get_logger("services.contract_repository")


class BlueprintLookup(Protocol):
    """Anything that resolves a blueprint id (the TemplateCatalog)."""

    def get(self, blueprint_id: str) -> Blueprint | None:
        ...


class ContractRepository:
    """
    In-memory contract repository.

    Contract:
        Stored contracts are frozen values; every accepted mutation stores a
        new value with a fresh ``updated_at``.  Reads observe the latest
        accepted write.

    Non-goals:
        - Deletion is not lifecycle-protected: any contract may be deleted.
        - No field-level enforcement in SENT status; restricting the write
          to client fields is the caller's responsibility.
    """

    def __init__(
        self,
        blueprints: BlueprintLookup,
        contracts: Iterable[Contract] = (),
        clock: Clock | None = None,
        id_factory: IdFactory | None = None,
    ):
        self._blueprints = blueprints
        self._clock = clock or SystemClock()
        self._new_id = id_factory or generate_id
        self._contracts: dict[str, Contract] = {c.id: c for c in contracts}

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def all(self) -> list[Contract]:
        """All contracts in insertion order."""
        return list(self._contracts.values())

    def list(self) -> list[Contract]:
        return self.all()

    def get(self, contract_id: str) -> Contract | None:
        return self._contracts.get(contract_id)

    def search(self, query: str) -> list[Contract]:
        """Case-insensitive substring match on contract or blueprint name."""
        needle = query.lower()
        return [
            c for c in self._contracts.values()
            if needle in c.name.lower() or needle in c.blueprint_name.lower()
        ]

    def __len__(self) -> int:
        return len(self._contracts)

    def __contains__(self, contract_id: object) -> bool:
        return contract_id in self._contracts

    def __iter__(self) -> Iterator[Contract]:
        return iter(self.all())

    def snapshot(self) -> tuple[Contract, ...]:
        return tuple(self._contracts.values())

    # ------------------------------------------------------------------
    # Creation / deletion
    # ------------------------------------------------------------------

    def create(self, name: str, blueprint_id: str) -> Contract:
        """
        Create a contract from a blueprint.

        The caller is responsible for trimming and validating ``name``.

        Raises:
            BlueprintNotFoundError: If ``blueprint_id`` does not resolve.
        """
        blueprint = self._blueprints.get(blueprint_id)
        if blueprint is None:
            logger.error("blueprint_not_found", extra={"blueprint_id": blueprint_id})
            raise BlueprintNotFoundError(blueprint_id)

        now = self._clock.now()
        contract = Contract(
            id=self._new_id(),
            name=name,
            blueprint_id=blueprint.id,
            blueprint_name=blueprint.name,
            status=ContractStatus.CREATED,
            fields=snapshot_fields(blueprint),
            created_at=now,
            updated_at=now,
        )
        self._contracts[contract.id] = contract
        logger.info(
            "contract_created",
            extra={
                "contract_id": contract.id,
                "blueprint_id": blueprint.id,
                "field_count": len(contract.fields),
            },
        )
        return contract

    def delete(self, contract_id: str) -> bool:
        """Remove a contract at any status. False if absent."""
        contract = self._contracts.pop(contract_id, None)
        if contract is None:
            return False
        logger.info(
            "contract_deleted",
            extra={"contract_id": contract_id, "status": contract.status},
        )
        return True

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def evaluate_transition(
        self,
        contract_id: str,
        new_status: ContractStatus | str,
    ) -> TransitionResult:
        """Check a requested status change without applying it."""
        new_status = require_status(new_status)
        contract = self._contracts.get(contract_id)
        if contract is None:
            return TransitionResult(
                success=False,
                contract_id=contract_id,
                to_status=new_status,
                reason=REASON_CONTRACT_NOT_FOUND,
            )
        if not can_transition(contract.status, new_status):
            return TransitionResult(
                success=False,
                contract_id=contract_id,
                from_status=contract.status,
                to_status=new_status,
                reason=REASON_INVALID_TRANSITION,
            )
        return TransitionResult(
            success=True,
            contract_id=contract_id,
            from_status=contract.status,
            to_status=new_status,
        )

    def transition(self, contract_id: str, new_status: ContractStatus | str) -> bool:
        """Apply a status change if the transition table allows it."""
        result = self.evaluate_transition(contract_id, new_status)
        with LogContext.bind(contract_id=contract_id):
            if not result.success:
                logger.warning(
                    "contract_transition_rejected",
                    extra={
                        "from_status": result.from_status,
                        "to_status": result.to_status,
                        "reason": result.reason,
                    },
                )
                return False

            contract = self._contracts[contract_id]
            self._contracts[contract_id] = replace(
                contract,
                status=result.to_status,
                updated_at=self._clock.now(),
            )
            logger.info(
                "contract_transitioned",
                extra={
                    "from_status": result.from_status,
                    "to_status": result.to_status,
                },
            )
        return True

    def require_transition(
        self,
        contract_id: str,
        new_status: ContractStatus | str,
    ) -> Contract:
        """
        Apply a status change or raise.

        Raising counterpart of ``transition`` for callers that treat a
        rejected change as an error.

        Raises:
            ContractNotFoundError: If the contract does not exist.
            InvalidTransitionError: If the table does not allow the change.
        """
        result = self.evaluate_transition(contract_id, new_status)
        if result.reason == REASON_CONTRACT_NOT_FOUND:
            raise ContractNotFoundError(contract_id)
        if not result.success:
            raise InvalidTransitionError(
                contract_id,
                result.from_status.value,
                result.to_status.value,
            )
        self.transition(contract_id, result.to_status)
        return self._contracts[contract_id]

    # ------------------------------------------------------------------
    # Field values
    # ------------------------------------------------------------------

    def evaluate_edit(
        self,
        contract_id: str,
        new_fields: Sequence[ContractField] | None = None,
    ) -> EditResult:
        """
        Check a field replacement without applying it.

        With ``new_fields=None`` only the status gate is evaluated.
        """
        contract = self._contracts.get(contract_id)
        if contract is None:
            return EditResult(
                success=False,
                contract_id=contract_id,
                reason=REASON_CONTRACT_NOT_FOUND,
            )
        if not accepts_field_writes(contract.status):
            return EditResult(
                success=False,
                contract_id=contract_id,
                status=contract.status,
                reason=REASON_NOT_EDITABLE,
            )
        if new_fields is None:
            return EditResult(success=True, contract_id=contract_id, status=contract.status)

        if len(new_fields) != len(contract.fields):
            return EditResult(
                success=False,
                contract_id=contract_id,
                status=contract.status,
                reason=REASON_FIELD_SHAPE_MISMATCH,
            )
        for current, proposed in zip(contract.fields, new_fields):
            if not current.same_shape(proposed):
                return EditResult(
                    success=False,
                    contract_id=contract_id,
                    status=contract.status,
                    reason=REASON_FIELD_SHAPE_MISMATCH,
                    field_id=proposed.id,
                )
            if not value_matches_type(proposed.type, proposed.value):
                return EditResult(
                    success=False,
                    contract_id=contract_id,
                    status=contract.status,
                    reason=REASON_INVALID_FIELD_VALUE,
                    field_id=proposed.id,
                )
        return EditResult(success=True, contract_id=contract_id, status=contract.status)

    def replace_fields(
        self,
        contract_id: str,
        new_fields: Sequence[ContractField],
    ) -> bool:
        """Commit new field values if the contract is CREATED or SENT."""
        new_fields = tuple(new_fields)
        result = self.evaluate_edit(contract_id, new_fields)
        with LogContext.bind(contract_id=contract_id):
            if not result.success:
                logger.warning(
                    "contract_edit_rejected",
                    extra={
                        "status": result.status,
                        "reason": result.reason,
                        "field_id": result.field_id,
                    },
                )
                return False

            contract = self._contracts[contract_id]
            changed = [
                new.id for old, new in zip(contract.fields, new_fields)
                if old.value != new.value
            ]
            self._contracts[contract_id] = replace(
                contract,
                fields=new_fields,
                updated_at=self._clock.now(),
            )
            logger.info(
                "contract_fields_replaced",
                extra={"status": contract.status, "changed_fields": changed},
            )
        return True

    def set_field_value(self, contract_id: str, field_id: str, value: FieldValue) -> bool:
        """Change one field's value through the ``replace_fields`` gate."""
        contract = self._contracts.get(contract_id)
        if contract is None or contract.get_field(field_id) is None:
            logger.warning(
                "contract_edit_rejected",
                extra={
                    "contract_id": contract_id,
                    "reason": (
                        REASON_CONTRACT_NOT_FOUND if contract is None
                        else REASON_FIELD_NOT_FOUND
                    ),
                    "field_id": field_id,
                },
            )
            return False
        return self.replace_fields(
            contract_id,
            [f.with_value(value) if f.id == field_id else f for f in contract.fields],
        )

    def require_field_value(
        self,
        contract_id: str,
        field_id: str,
        value: FieldValue,
    ) -> Contract:
        """
        Change one field's value or raise.

        Raises:
            ContractNotFoundError: If the contract does not exist.
            FieldNotFoundError: If the contract has no such field.
            ContractNotEditableError: If the status does not accept writes.
            ValueError: If ``value`` does not fit the field type.
        """
        contract = self._contracts.get(contract_id)
        if contract is None:
            raise ContractNotFoundError(contract_id)
        target = contract.get_field(field_id)
        if target is None:
            raise FieldNotFoundError(contract_id, field_id)
        if not accepts_field_writes(contract.status):
            raise ContractNotEditableError(contract_id, contract.status.value)
        if not value_matches_type(target.type, value):
            raise ValueError(f"Invalid value for {target.type.value} field {field_id}: {value!r}")
        self.set_field_value(contract_id, field_id, value)
        return self._contracts[contract_id]
