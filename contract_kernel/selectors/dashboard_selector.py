"""
Module: contract_kernel.selectors.dashboard_selector
Responsibility: Derived dashboard views -- category counts, the filtered and
    sorted contract list, per-field edit permissions and the legal actions
    for a contract.
Architecture position: Kernel > Selectors.  May import from domain/.
    Selectors NEVER create, modify, or delete data.

Invariants enforced:
    - Nothing here is stored: every view is recomputed from the contracts
      passed in, so it can never disagree with lifecycle state.
    - Categories come only from ``category_of`` / ``statuses_for_category``.
    - Field permissions: CREATED enables manager/both (and unset) fields,
      SENT enables client/both fields, every other status disables all.
    - A contract is ready to sign only when ``missing_client_fields`` is
      empty.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping, Protocol

from contract_kernel.domain.contract import Contract
from contract_kernel.domain.fields import ContractField, FieldEditor, FieldType
from contract_kernel.domain.lifecycle import (
    TRANSITION_LABELS,
    ContractStatus,
    DashboardCategory,
    category_of,
    require_category,
    require_status,
    statuses_for_category,
    valid_transitions,
)

_EDITORS_BY_STATUS: dict[ContractStatus, frozenset[FieldEditor]] = {
    ContractStatus.CREATED: frozenset({FieldEditor.MANAGER, FieldEditor.BOTH}),
    ContractStatus.SENT: frozenset({FieldEditor.CLIENT, FieldEditor.BOTH}),
}


class ContractSource(Protocol):
    """Read access to the current contracts (the ContractRepository)."""

    def all(self) -> list[Contract]:
        ...

    def get(self, contract_id: str) -> Contract | None:
        ...


@dataclass(frozen=True)
class ActionOption:
    """A transition the UI may offer, with its button label."""

    target: ContractStatus
    label: str


@dataclass(frozen=True)
class DashboardView:
    """Counts per category plus the contracts visible under the filter."""

    category: DashboardCategory
    query: str
    counts: Mapping[DashboardCategory, int]
    contracts: tuple[Contract, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "counts", MappingProxyType(dict(self.counts)))
        object.__setattr__(self, "contracts", tuple(self.contracts))

    @property
    def is_empty(self) -> bool:
        return not self.contracts


def category_counts(contracts: Iterable[Contract]) -> dict[DashboardCategory, int]:
    """Number of contracts per category; ALL is the total."""
    tally = Counter(category_of(c.status) for c in contracts)
    counts = {category: tally.get(category, 0) for category in DashboardCategory}
    counts[DashboardCategory.ALL] = sum(tally.values())
    return counts


def filter_contracts(
    contracts: Iterable[Contract],
    category: DashboardCategory | str = DashboardCategory.ALL,
    query: str = "",
) -> list[Contract]:
    """Filter by category, then by name search, newest first."""
    category = require_category(category)
    result = list(contracts)

    if category is not DashboardCategory.ALL:
        statuses = frozenset(statuses_for_category(category))
        result = [c for c in result if c.status in statuses]

    needle = query.strip().lower()
    if needle:
        result = [
            c for c in result
            if needle in c.name.lower() or needle in c.blueprint_name.lower()
        ]

    return sorted(result, key=lambda c: c.created_at, reverse=True)


def is_field_enabled(status: ContractStatus | str, field: ContractField) -> bool:
    """Whether ``field`` is fillable by the acting party at ``status``."""
    editors = _EDITORS_BY_STATUS.get(require_status(status))
    if editors is None:
        return False
    return field.effective_editor in editors


def field_permissions(contract: Contract) -> dict[str, bool]:
    """Field id -> enabled, for rendering the contract form."""
    return {f.id: is_field_enabled(contract.status, f) for f in contract.fields}


def _is_blank(field: ContractField) -> bool:
    if field.type is FieldType.CHECKBOX:
        return field.value is not True
    return not field.value or (isinstance(field.value, str) and not field.value.strip())


def missing_client_fields(contract: Contract) -> tuple[ContractField, ...]:
    """Required client-fillable fields still empty or unchecked.

    The signature itself is excluded: it is captured by the signing step.
    Signing must not proceed while this is non-empty.
    """
    return tuple(
        f for f in contract.fields
        if f.required
        and not f.is_signature
        and f.effective_editor in (FieldEditor.CLIENT, FieldEditor.BOTH)
        and _is_blank(f)
    )


def available_actions(contract: Contract) -> tuple[ActionOption, ...]:
    """Legal transitions for the contract, in presentation order."""
    return tuple(
        ActionOption(target=target, label=TRANSITION_LABELS[target])
        for target in valid_transitions(contract.status)
    )


class DashboardSelector:
    """
    Dashboard read model over a contract source.

    Contract:
        Read-only.  Every call recomputes from ``source.all()``.
    """

    def __init__(self, source: ContractSource):
        self.source = source

    def counts(self) -> dict[DashboardCategory, int]:
        return category_counts(self.source.all())

    def build_view(
        self,
        category: DashboardCategory | str = DashboardCategory.ALL,
        query: str = "",
    ) -> DashboardView:
        contracts = self.source.all()
        category = require_category(category)
        return DashboardView(
            category=category,
            query=query,
            counts=category_counts(contracts),
            contracts=tuple(filter_contracts(contracts, category, query)),
        )

    def field_permissions(self, contract_id: str) -> dict[str, bool] | None:
        contract = self.source.get(contract_id)
        if contract is None:
            return None
        return field_permissions(contract)

    def available_actions(self, contract_id: str) -> tuple[ActionOption, ...]:
        contract = self.source.get(contract_id)
        if contract is None:
            return ()
        return available_actions(contract)
