"""ORM models for snapshot persistence."""

from contract_kernel.models.blueprint import BlueprintRecord
from contract_kernel.models.contract import ContractRecord

__all__ = [
    "BlueprintRecord",
    "ContractRecord",
]
