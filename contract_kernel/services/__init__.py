"""Services for the contract kernel (write side)."""

from contract_kernel.services.contract_repository import BlueprintLookup, ContractRepository
from contract_kernel.services.snapshot_store import SnapshotStore
from contract_kernel.services.template_catalog import TemplateCatalog, reconcile_seeds

__all__ = [
    "BlueprintLookup",
    "ContractRepository",
    "SnapshotStore",
    "TemplateCatalog",
    "reconcile_seeds",
]
