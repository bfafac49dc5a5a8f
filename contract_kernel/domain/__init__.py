"""
Pure domain layer.

This module contains immutable value objects and the lifecycle engine
with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- Time/clock (beyond the injectable Clock interface)
- I/O

All domain objects are frozen and deterministic.
"""

from contract_kernel.domain.blueprint import (
    Blueprint,
    BlueprintInput,
    BlueprintPatch,
    FieldInput,
    ReorderDirection,
    normalize_positions,
)
from contract_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from contract_kernel.domain.contract import Contract, snapshot_fields
from contract_kernel.domain.fields import (
    FIELD_TYPE_LABELS,
    BlueprintField,
    ContractField,
    FieldEditor,
    FieldType,
    FieldValue,
)
from contract_kernel.domain.identifiers import IdFactory, generate_id
from contract_kernel.domain.lifecycle import (
    CATEGORY_LABELS,
    CONTRACT_TRANSITIONS,
    LIFECYCLE_STEPS,
    STATUS_CATEGORY,
    STATUS_LABELS,
    TRANSITION_LABELS,
    TRANSITION_MESSAGES,
    ContractStatus,
    DashboardCategory,
    EditResult,
    SignatureStage,
    StepState,
    TransitionResult,
    accepts_field_writes,
    can_transition,
    category_of,
    is_editable,
    is_terminal,
    signature_stage,
    statuses_for_category,
    step_state,
    valid_transitions,
)
from contract_kernel.domain.snapshot import WorkspaceSnapshot

__all__ = [
    # Lifecycle
    "ContractStatus",
    "DashboardCategory",
    "CONTRACT_TRANSITIONS",
    "STATUS_CATEGORY",
    "STATUS_LABELS",
    "CATEGORY_LABELS",
    "TRANSITION_LABELS",
    "TRANSITION_MESSAGES",
    "LIFECYCLE_STEPS",
    "StepState",
    "SignatureStage",
    "TransitionResult",
    "EditResult",
    "can_transition",
    "valid_transitions",
    "is_editable",
    "accepts_field_writes",
    "is_terminal",
    "category_of",
    "statuses_for_category",
    "step_state",
    "signature_stage",
    # Fields
    "FieldType",
    "FieldEditor",
    "FieldValue",
    "FIELD_TYPE_LABELS",
    "BlueprintField",
    "ContractField",
    # Blueprints
    "Blueprint",
    "BlueprintInput",
    "BlueprintPatch",
    "FieldInput",
    "ReorderDirection",
    "normalize_positions",
    # Contracts
    "Contract",
    "snapshot_fields",
    # Snapshot
    "WorkspaceSnapshot",
    # Clock / ids
    "Clock",
    "SystemClock",
    "DeterministicClock",
    "IdFactory",
    "generate_id",
]
