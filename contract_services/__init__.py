"""
contract_services -- orchestration over the contract kernel.

Dependency direction (enforced by tests/architecture/test_kernel_boundary.py):
    contract_services/ -> contract_kernel/, contract_config/  (allowed)
    contract_kernel/   -> contract_services/                  (FORBIDDEN)
"""

from contract_services.workspace import ContractWorkspace

__all__ = ["ContractWorkspace"]
