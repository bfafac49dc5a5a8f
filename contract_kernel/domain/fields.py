"""
Field value objects (``contract_kernel.domain.fields``).

Responsibility
--------------
Field types, field editors, and the two field records: ``BlueprintField``
(a definition owned by a blueprint) and ``ContractField`` (the frozen copy
of a definition owned by a contract, plus its value).

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.

Invariants enforced
-------------------
* ``type`` is always a ``FieldType`` member; anything else raises
  ``UnknownFieldTypeError``.
* ``placeholder`` exists only on TEXT fields and ``default_checked`` only on
  CHECKBOX fields; construction clears them for other types.
* A ContractField's value matches its type (see ``value_matches_type``).
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Union

from contract_kernel.exceptions import UnknownFieldTypeError

FieldValue = Union[str, bool, None]


class FieldType(str, Enum):
    """Supported input types for a field."""

    TEXT = "TEXT"
    DATE = "DATE"
    SIGNATURE = "SIGNATURE"
    CHECKBOX = "CHECKBOX"


FIELD_TYPE_LABELS: Mapping[FieldType, str] = MappingProxyType({
    FieldType.TEXT: "Text Input",
    FieldType.DATE: "Date Picker",
    FieldType.SIGNATURE: "Signature",
    FieldType.CHECKBOX: "Checkbox",
})


class FieldEditor(str, Enum):
    """Which party may fill a field.

    manager fills fields while the contract is a draft (CREATED), client
    fills fields while the contract awaits signature (SENT).
    """

    MANAGER = "manager"
    CLIENT = "client"
    BOTH = "both"


DEFAULT_EDITOR = FieldEditor.MANAGER


def require_field_type(value: Any) -> FieldType:
    """Return ``value`` as a FieldType or raise UnknownFieldTypeError."""
    if isinstance(value, FieldType):
        return value
    if isinstance(value, str) and not isinstance(value, Enum):
        try:
            return FieldType(value)
        except ValueError:
            raise UnknownFieldTypeError(value) from None
    raise UnknownFieldTypeError(value)


def _editor_or_none(value: Any) -> FieldEditor | None:
    if value is None:
        return None
    return FieldEditor(value)


def initial_value(field_type: FieldType, default_checked: bool | None = None) -> FieldValue:
    """Value a freshly created contract field starts with."""
    if require_field_type(field_type) is FieldType.CHECKBOX:
        return bool(default_checked) if default_checked is not None else False
    return None


def value_matches_type(field_type: FieldType, value: Any) -> bool:
    """Check that ``value`` is a legal value for a field of ``field_type``.

    TEXT / DATE hold strings, SIGNATURE holds base64 image data, each may be
    empty (None).  CHECKBOX holds a strict bool.
    """
    field_type = require_field_type(field_type)
    if field_type is FieldType.CHECKBOX:
        return isinstance(value, bool)
    return value is None or (isinstance(value, str) and not isinstance(value, Enum))


@dataclass(frozen=True)
class BlueprintField:
    """A single configurable field within a blueprint.

    ``position`` is 0-based and contiguous within the owning blueprint; the
    catalog re-normalizes it after every structural change.
    """

    id: str
    type: FieldType
    label: str
    position: int = 0
    required: bool = False
    editable_by: FieldEditor | None = None
    placeholder: str | None = None
    default_checked: bool | None = None

    def __post_init__(self) -> None:
        field_type = require_field_type(self.type)
        object.__setattr__(self, "type", field_type)
        object.__setattr__(self, "editable_by", _editor_or_none(self.editable_by))
        if field_type is not FieldType.TEXT:
            object.__setattr__(self, "placeholder", None)
        if field_type is not FieldType.CHECKBOX:
            object.__setattr__(self, "default_checked", None)

    @property
    def effective_editor(self) -> FieldEditor:
        """The editor, with unset resolved to manager."""
        return self.editable_by or DEFAULT_EDITOR

    def at_position(self, position: int) -> BlueprintField:
        return replace(self, position=position)


@dataclass(frozen=True)
class ContractField:
    """A contract's own copy of a blueprint field, plus its value.

    Everything except ``value`` is fixed when the contract is created and is
    never re-synchronized from the source blueprint.
    """

    id: str
    type: FieldType
    label: str
    position: int
    required: bool = False
    editable_by: FieldEditor | None = None
    placeholder: str | None = None
    value: FieldValue = None

    def __post_init__(self) -> None:
        field_type = require_field_type(self.type)
        object.__setattr__(self, "type", field_type)
        object.__setattr__(self, "editable_by", _editor_or_none(self.editable_by))
        if field_type is not FieldType.TEXT:
            object.__setattr__(self, "placeholder", None)

    @classmethod
    def from_definition(cls, definition: BlueprintField) -> ContractField:
        """Snapshot a blueprint field into a new, independent contract field."""
        return cls(
            id=definition.id,
            type=definition.type,
            label=definition.label,
            position=definition.position,
            required=definition.required,
            editable_by=definition.editable_by,
            placeholder=definition.placeholder,
            value=initial_value(definition.type, definition.default_checked),
        )

    @property
    def effective_editor(self) -> FieldEditor:
        return self.editable_by or DEFAULT_EDITOR

    @property
    def is_signature(self) -> bool:
        return self.type is FieldType.SIGNATURE

    def with_value(self, value: FieldValue) -> ContractField:
        return replace(self, value=value)

    def same_shape(self, other: ContractField) -> bool:
        """True if ``other`` differs from this field at most in ``value``."""
        return replace(other, value=self.value) == self
