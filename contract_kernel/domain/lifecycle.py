"""
Contract lifecycle engine (``contract_kernel.domain.lifecycle``).

Responsibility
--------------
The finite state machine governing contract status: transition legality,
editability, terminal detection and the status -> dashboard category map.
Everything here is a pure function of immutable lookup tables.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects and functions.  ZERO I/O.
No imports from ``db/``, ``services/``, ``selectors/``, or outer layers.

Invariants enforced
-------------------
* ``CONTRACT_TRANSITIONS`` is the single source of truth for legal status
  changes.  The order of each target tuple is the order in which actions
  are presented and must not change.
* Terminal statuses are exactly those with no outgoing transitions.
* Every status maps to exactly one category, and
  ``statuses_for_category`` is the exact inverse of ``category_of``.
* Both tables are validated once at import (``validate_lifecycle_tables``).
* Values that are not members of ``ContractStatus`` / ``DashboardCategory``
  raise immediately; they are never coerced.

Flow::

    CREATED -> APPROVED -> SENT -> SIGNED -> LOCKED
       ^          |          |
       +----------+          |
    (CREATED, APPROVED, SENT) -> REVOKED
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from contract_kernel.exceptions import (
    LifecycleConfigurationError,
    UnknownCategoryError,
    UnknownStatusError,
)


# =========================================================================
# Statuses and categories
# =========================================================================


class ContractStatus(str, Enum):
    """Contract lifecycle states."""

    CREATED = "CREATED"
    APPROVED = "APPROVED"
    SENT = "SENT"
    SIGNED = "SIGNED"
    LOCKED = "LOCKED"
    REVOKED = "REVOKED"


class DashboardCategory(str, Enum):
    """Coarse grouping of statuses for dashboard filtering.

    ALL is a filter value only; no status maps to it.
    """

    ALL = "ALL"
    ACTIVE = "ACTIVE"
    PENDING = "PENDING"
    SIGNED = "SIGNED"
    ARCHIVED = "ARCHIVED"


# =========================================================================
# Lookup tables
# =========================================================================

CONTRACT_TRANSITIONS: Mapping[ContractStatus, tuple[ContractStatus, ...]] = MappingProxyType({
    ContractStatus.CREATED: (ContractStatus.APPROVED, ContractStatus.REVOKED),
    # APPROVED -> CREATED is "revert to draft"
    ContractStatus.APPROVED: (
        ContractStatus.SENT,
        ContractStatus.CREATED,
        ContractStatus.REVOKED,
    ),
    ContractStatus.SENT: (ContractStatus.SIGNED, ContractStatus.REVOKED),
    ContractStatus.SIGNED: (ContractStatus.LOCKED,),
    ContractStatus.LOCKED: (),
    ContractStatus.REVOKED: (),
})

STATUS_CATEGORY: Mapping[ContractStatus, DashboardCategory] = MappingProxyType({
    ContractStatus.CREATED: DashboardCategory.ACTIVE,
    ContractStatus.APPROVED: DashboardCategory.ACTIVE,
    ContractStatus.SENT: DashboardCategory.PENDING,
    ContractStatus.SIGNED: DashboardCategory.SIGNED,
    ContractStatus.LOCKED: DashboardCategory.SIGNED,
    ContractStatus.REVOKED: DashboardCategory.ARCHIVED,
})

EDITABLE_STATUSES: frozenset[ContractStatus] = frozenset({ContractStatus.CREATED})

# SENT admits the client's signing-step write on top of full CREATED editing.
FIELD_WRITE_STATUSES: frozenset[ContractStatus] = EDITABLE_STATUSES | {ContractStatus.SENT}

TERMINAL_STATUSES: frozenset[ContractStatus] = frozenset(
    status for status, targets in CONTRACT_TRANSITIONS.items() if not targets
)

STATUS_LABELS: Mapping[ContractStatus, str] = MappingProxyType({
    ContractStatus.CREATED: "Created",
    ContractStatus.APPROVED: "Approved",
    ContractStatus.SENT: "Sent",
    ContractStatus.SIGNED: "Signed",
    ContractStatus.LOCKED: "Locked",
    ContractStatus.REVOKED: "Revoked",
})

CATEGORY_LABELS: Mapping[DashboardCategory, str] = MappingProxyType({
    DashboardCategory.ALL: "All Contracts",
    DashboardCategory.ACTIVE: "Active",
    DashboardCategory.PENDING: "Pending",
    DashboardCategory.SIGNED: "Signed",
    DashboardCategory.ARCHIVED: "Archived",
})

# Button text for the action that moves a contract INTO the keyed status.
TRANSITION_LABELS: Mapping[ContractStatus, str] = MappingProxyType({
    ContractStatus.CREATED: "Create",
    ContractStatus.APPROVED: "Approve",
    ContractStatus.SENT: "Send",
    ContractStatus.SIGNED: "Mark as Signed",
    ContractStatus.LOCKED: "Lock",
    ContractStatus.REVOKED: "Revoke",
})

TRANSITION_MESSAGES: Mapping[ContractStatus, str] = MappingProxyType({
    ContractStatus.CREATED: "Contract reverted to draft. You can now edit fields.",
    ContractStatus.APPROVED: "Contract approved internally. Ready to send to client.",
    ContractStatus.SENT: "Contract sent to client.",
    ContractStatus.SIGNED: "Contract has been signed.",
    ContractStatus.LOCKED: "Contract locked and archived. No further changes possible.",
    ContractStatus.REVOKED: "Contract revoked and moved to archive.",
})

# Happy path rendered as a progress tracker. REVOKED is deliberately absent.
LIFECYCLE_STEPS: tuple[ContractStatus, ...] = (
    ContractStatus.CREATED,
    ContractStatus.APPROVED,
    ContractStatus.SENT,
    ContractStatus.SIGNED,
    ContractStatus.LOCKED,
)


class StepState(str, Enum):
    """Progress of one lifecycle step relative to the current status."""

    COMPLETED = "completed"
    CURRENT = "current"
    PENDING = "pending"


class SignatureStage(str, Enum):
    """Where the signing step stands for a given status."""

    DRAFTING = "drafting"
    PENDING = "pending"
    SIGNED = "signed"


# =========================================================================
# Coercion (fail fast on programmer error)
# =========================================================================


def require_status(value: Any) -> ContractStatus:
    """Return ``value`` as a ContractStatus or raise UnknownStatusError."""
    if isinstance(value, ContractStatus):
        return value
    if isinstance(value, str) and not isinstance(value, Enum):
        try:
            return ContractStatus(value)
        except ValueError:
            raise UnknownStatusError(value) from None
    raise UnknownStatusError(value)


def require_category(value: Any) -> DashboardCategory:
    """Return ``value`` as a DashboardCategory or raise UnknownCategoryError."""
    if isinstance(value, DashboardCategory):
        return value
    if isinstance(value, str) and not isinstance(value, Enum):
        try:
            return DashboardCategory(value)
        except ValueError:
            raise UnknownCategoryError(value) from None
    raise UnknownCategoryError(value)


# =========================================================================
# Queries
# =========================================================================


def can_transition(from_status: ContractStatus | str, to_status: ContractStatus | str) -> bool:
    """True iff ``to_status`` is in ``from_status``'s allowed-to list."""
    return require_status(to_status) in CONTRACT_TRANSITIONS[require_status(from_status)]


def valid_transitions(status: ContractStatus | str) -> tuple[ContractStatus, ...]:
    """Allowed target statuses, in their fixed presentation order."""
    return CONTRACT_TRANSITIONS[require_status(status)]


def is_editable(status: ContractStatus | str) -> bool:
    """True iff field values may be bulk-replaced (CREATED only)."""
    return require_status(status) in EDITABLE_STATUSES


def accepts_field_writes(status: ContractStatus | str) -> bool:
    """True iff the repository may commit a field-value replacement.

    Wider than ``is_editable``: a SENT contract accepts the signing write.
    Which fields the client actually changes is the caller's concern.
    """
    return require_status(status) in FIELD_WRITE_STATUSES


def is_terminal(status: ContractStatus | str) -> bool:
    """True iff the status has no outgoing transitions."""
    return not CONTRACT_TRANSITIONS[require_status(status)]


def category_of(status: ContractStatus | str) -> DashboardCategory:
    """Dashboard category for a status. Never returns ALL."""
    return STATUS_CATEGORY[require_status(status)]


def statuses_for_category(category: DashboardCategory | str) -> tuple[ContractStatus, ...]:
    """Statuses belonging to ``category`` in declaration order; ALL yields every status."""
    category = require_category(category)
    if category is DashboardCategory.ALL:
        return tuple(ContractStatus)
    return tuple(s for s in ContractStatus if STATUS_CATEGORY[s] is category)


def step_state(current: ContractStatus | str, step: ContractStatus | str) -> StepState:
    """Progress of ``step`` on the happy path when the contract is at ``current``.

    A REVOKED contract reports every step as pending.
    """
    current = require_status(current)
    step = require_status(step)
    if current not in LIFECYCLE_STEPS or step not in LIFECYCLE_STEPS:
        return StepState.PENDING
    step_index = LIFECYCLE_STEPS.index(step)
    current_index = LIFECYCLE_STEPS.index(current)
    if step_index < current_index:
        return StepState.COMPLETED
    if step_index == current_index:
        return StepState.CURRENT
    return StepState.PENDING


def signature_stage(status: ContractStatus | str) -> SignatureStage:
    """Where signing stands at ``status``; REVOKED reports drafting."""
    status = require_status(status)
    if status is ContractStatus.SENT:
        return SignatureStage.PENDING
    if status in (ContractStatus.SIGNED, ContractStatus.LOCKED):
        return SignatureStage.SIGNED
    return SignatureStage.DRAFTING


# =========================================================================
# Table validation
# =========================================================================


def validate_lifecycle_tables(
    transitions: Mapping[ContractStatus, tuple[ContractStatus, ...]] = CONTRACT_TRANSITIONS,
    categories: Mapping[ContractStatus, DashboardCategory] = STATUS_CATEGORY,
) -> None:
    """Check that the transition table and category map agree.

    Raises:
        LifecycleConfigurationError: listing every problem found.
    """
    problems: list[str] = []
    for status in ContractStatus:
        if status not in transitions:
            problems.append(f"{status.value} missing from transition table")
        if status not in categories:
            problems.append(f"{status.value} has no category")
        elif categories[status] is DashboardCategory.ALL:
            problems.append(f"{status.value} mapped to ALL")

    for source, targets in transitions.items():
        if len(set(targets)) != len(targets):
            problems.append(f"{source.value} lists a target twice")
        for target in targets:
            if not isinstance(target, ContractStatus):
                problems.append(f"{source.value} -> {target!r} is not a status")
            elif target == source:
                problems.append(f"{source.value} transitions to itself")

    for category in DashboardCategory:
        if category is DashboardCategory.ALL:
            continue
        if category not in categories.values():
            problems.append(f"category {category.value} has no statuses")

    if problems:
        raise LifecycleConfigurationError(problems)


# =========================================================================
# Results
# =========================================================================

REASON_OK = "ok"
REASON_CONTRACT_NOT_FOUND = "contract_not_found"
REASON_INVALID_TRANSITION = "invalid_transition"
REASON_NOT_EDITABLE = "not_editable"
REASON_FIELD_NOT_FOUND = "field_not_found"
REASON_FIELD_SHAPE_MISMATCH = "field_shape_mismatch"
REASON_INVALID_FIELD_VALUE = "invalid_field_value"


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of evaluating a requested status change.

    Carries both statuses so a rejected request can be turned into a
    user-facing message without a second lookup.
    """

    success: bool
    contract_id: str
    from_status: ContractStatus | None = None
    to_status: ContractStatus | None = None
    reason: str = REASON_OK

    def __bool__(self) -> bool:
        return self.success


@dataclass(frozen=True)
class EditResult:
    """Outcome of evaluating a field-value edit."""

    success: bool
    contract_id: str
    status: ContractStatus | None = None
    reason: str = REASON_OK
    field_id: str | None = None

    def __bool__(self) -> bool:
        return self.success


validate_lifecycle_tables()
