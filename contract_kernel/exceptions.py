"""
Typed Exception Hierarchy for the Contract Kernel.

===============================================================================
WHEN THE KERNEL RAISES
===============================================================================

Most kernel operations do NOT raise.  Referential misses (unknown blueprint,
contract or field id) and lifecycle-illegal requests (a transition the table
does not allow, an edit in a non-editable status) are expected conditions and
are reported through ``bool`` / ``None`` / result objects.

The kernel raises in exactly two situations:

  1. ``ContractRepository.create`` with a blueprint id that does not resolve.
     This is a referential-integrity problem the caller must surface, so it
     is the one distinguishable error (``BlueprintNotFoundError``).

  2. Programmer errors: a status, category or field type value that is not a
     member of its enum reached the lifecycle engine, the lifecycle tables
     are internally inconsistent, or a persisted snapshot is malformed.
     These indicate a broken invariant upstream and fail loudly.

The remaining classes (``ContractNotFoundError``, ``InvalidTransitionError``,
``ContractNotEditableError``, ``FieldNotFoundError``) are provided for callers
that prefer to turn a rejected result into an exception at their boundary.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    ContractKernelError (base)
    |
    +-- BlueprintError
    |   +-- BlueprintNotFoundError
    |   +-- FieldNotFoundError
    |
    +-- ContractError
    |   +-- ContractNotFoundError
    |   +-- InvalidTransitionError
    |   +-- ContractNotEditableError
    |
    +-- LifecycleError
    |   +-- UnknownStatusError
    |   +-- UnknownCategoryError
    |   +-- UnknownFieldTypeError
    |   +-- LifecycleConfigurationError
    |
    +-- SnapshotError
        +-- SnapshotFormatError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category    | Code                        | When Raised
------------|-----------------------------|-----------------------------------
Blueprint   | BLUEPRINT_NOT_FOUND         | create() from a missing blueprint
            | FIELD_NOT_FOUND             | Field id not in blueprint/contract
------------|-----------------------------|-----------------------------------
Contract    | CONTRACT_NOT_FOUND          | Contract id doesn't exist
            | INVALID_TRANSITION          | Transition not in the table
            | CONTRACT_NOT_EDITABLE       | Field edit outside CREATED/SENT
------------|-----------------------------|-----------------------------------
Lifecycle   | UNKNOWN_STATUS              | Value is not a ContractStatus
            | UNKNOWN_CATEGORY            | Value is not a DashboardCategory
            | UNKNOWN_FIELD_TYPE          | Value is not a FieldType
            | LIFECYCLE_CONFIGURATION     | Transition/category tables disagree
------------|-----------------------------|-----------------------------------
Snapshot    | SNAPSHOT_FORMAT             | Persisted payload cannot be parsed
"""

from typing import Any


class ContractKernelError(Exception):
    """
    Base exception for all contract kernel errors.

    All subclasses carry a ``code`` class attribute for machine-readable
    error identification.
    """

    code: str = "CONTRACT_KERNEL_ERROR"


# Blueprint-related exceptions


class BlueprintError(ContractKernelError):
    """Base exception for blueprint-related errors."""

    code: str = "BLUEPRINT_ERROR"


class BlueprintNotFoundError(BlueprintError):
    """Blueprint with given ID was not found."""

    code: str = "BLUEPRINT_NOT_FOUND"

    def __init__(self, blueprint_id: str):
        self.blueprint_id = blueprint_id
        super().__init__(f"Blueprint not found: {blueprint_id}")


class FieldNotFoundError(BlueprintError):
    """Field with given ID does not exist on its owner."""

    code: str = "FIELD_NOT_FOUND"

    def __init__(self, owner_id: str, field_id: str):
        self.owner_id = owner_id
        self.field_id = field_id
        super().__init__(f"Field {field_id} not found on {owner_id}")


# Contract-related exceptions


class ContractError(ContractKernelError):
    """Base exception for contract-related errors."""

    code: str = "CONTRACT_ERROR"


class ContractNotFoundError(ContractError):
    """Contract with given ID was not found."""

    code: str = "CONTRACT_NOT_FOUND"

    def __init__(self, contract_id: str):
        self.contract_id = contract_id
        super().__init__(f"Contract not found: {contract_id}")


class InvalidTransitionError(ContractError):
    """Requested status change is not in the transition table."""

    code: str = "INVALID_TRANSITION"

    def __init__(self, contract_id: str, from_status: str, to_status: str):
        self.contract_id = contract_id
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Invalid transition for contract {contract_id}: "
            f"{from_status} -> {to_status}"
        )


class ContractNotEditableError(ContractError):
    """Field values cannot be changed in the contract's current status."""

    code: str = "CONTRACT_NOT_EDITABLE"

    def __init__(self, contract_id: str, status: str):
        self.contract_id = contract_id
        self.status = status
        super().__init__(
            f"Contract {contract_id} is not editable in status {status}"
        )


# Lifecycle (programmer) errors


class LifecycleError(ContractKernelError):
    """Base exception for broken lifecycle invariants."""

    code: str = "LIFECYCLE_ERROR"


class UnknownStatusError(LifecycleError):
    """A value that is not a ContractStatus reached the lifecycle engine."""

    code: str = "UNKNOWN_STATUS"

    def __init__(self, value: Any):
        self.value = repr(value)
        super().__init__(f"Unknown contract status: {value!r}")


class UnknownCategoryError(LifecycleError):
    """A value that is not a DashboardCategory reached the lifecycle engine."""

    code: str = "UNKNOWN_CATEGORY"

    def __init__(self, value: Any):
        self.value = repr(value)
        super().__init__(f"Unknown dashboard category: {value!r}")


class UnknownFieldTypeError(LifecycleError):
    """A value that is not a FieldType was used to build a field."""

    code: str = "UNKNOWN_FIELD_TYPE"

    def __init__(self, value: Any):
        self.value = repr(value)
        super().__init__(f"Unknown field type: {value!r}")


class LifecycleConfigurationError(LifecycleError):
    """The transition table and category map are inconsistent."""

    code: str = "LIFECYCLE_CONFIGURATION"

    def __init__(self, problems: list[str]):
        self.problems = problems
        super().__init__(
            f"Lifecycle tables are inconsistent: {'; '.join(problems)}"
        )


# Snapshot exceptions


class SnapshotError(ContractKernelError):
    """Base exception for snapshot serialization errors."""

    code: str = "SNAPSHOT_ERROR"


class SnapshotFormatError(SnapshotError):
    """A persisted snapshot payload could not be parsed."""

    code: str = "SNAPSHOT_FORMAT"

    def __init__(self, entity: str, reason: str):
        self.entity = entity
        self.reason = reason
        super().__init__(f"Malformed {entity} in snapshot: {reason}")
