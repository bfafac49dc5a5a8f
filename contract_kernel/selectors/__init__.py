"""Selectors for the contract kernel (read side)."""

from contract_kernel.selectors.dashboard_selector import (
    ActionOption,
    DashboardSelector,
    DashboardView,
    available_actions,
    category_counts,
    field_permissions,
    filter_contracts,
    is_field_enabled,
    missing_client_fields,
)

__all__ = [
    "ActionOption",
    "DashboardSelector",
    "DashboardView",
    "available_actions",
    "category_counts",
    "field_permissions",
    "filter_contracts",
    "is_field_enabled",
    "missing_client_fields",
]
