"""
End-to-end: the NDA walk-through on the kernel services alone.

Blueprint "NDA" with a required TEXT field and a client SIGNATURE field;
the contract is driven CREATED -> APPROVED -> SENT -> SIGNED -> LOCKED with
the illegal shortcuts and late edits rejected along the way.
"""

from contract_kernel.domain.blueprint import BlueprintInput, FieldInput
from contract_kernel.domain.fields import FieldEditor, FieldType
from contract_kernel.domain.lifecycle import ContractStatus, DashboardCategory
from contract_kernel.selectors.dashboard_selector import DashboardSelector

S = ContractStatus

SIGNATURE_DATA = "data:image/png;base64,iVBORw0KGgo="


def test_nda_walkthrough(catalog, repository, captured_logs):
    blueprint = catalog.create(BlueprintInput(
        name="NDA",
        fields=(
            FieldInput(type=FieldType.TEXT, label="Party", required=True),
            FieldInput(type=FieldType.SIGNATURE, label="Signature", editable_by=FieldEditor.CLIENT),
        ),
    ))
    text_field, signature_field = blueprint.fields

    contract = repository.create("Acme NDA", blueprint.id)
    assert contract.status is S.CREATED
    assert len(contract.fields) == 2
    assert contract.get_field(signature_field.id).value is None

    assert repository.transition(contract.id, S.APPROVED)
    assert repository.transition(contract.id, S.SENT)

    assert not repository.transition(contract.id, S.LOCKED)
    assert repository.get(contract.id).status is S.SENT

    current = repository.get(contract.id)
    signed_fields = [
        f.with_value(SIGNATURE_DATA) if f.id == signature_field.id else f
        for f in current.fields
    ]
    assert repository.replace_fields(contract.id, signed_fields)

    assert repository.transition(contract.id, S.SIGNED)
    assert repository.transition(contract.id, S.LOCKED)

    locked = repository.get(contract.id)
    assert not repository.replace_fields(
        contract.id,
        [f.with_value("late edit") if f.id == text_field.id else f for f in locked.fields],
    )
    assert not repository.transition(contract.id, S.REVOKED)

    final = repository.get(contract.id)
    assert final.status is S.LOCKED
    assert final.get_field(signature_field.id).value == SIGNATURE_DATA
    assert final.get_field(text_field.id).value is None

    view = DashboardSelector(repository).build_view(DashboardCategory.SIGNED)
    assert [c.id for c in view.contracts] == [contract.id]

    messages = [r["message"] for r in captured_logs()]
    assert messages.count("contract_transitioned") == 4
    assert messages.count("contract_transition_rejected") == 2
    assert messages.count("contract_edit_rejected") == 1
