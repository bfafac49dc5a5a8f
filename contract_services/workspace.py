"""
contract_services.workspace -- the assembled contract workspace.

Responsibility:
    Wires configuration, persistence, the template catalog, the contract
    repository and the dashboard selector into one object, and exposes the
    user-level lifecycle actions (approve, send, sign, lock, revoke,
    revert to draft).

Architecture position:
    Services -- orchestration over the kernel.  This is the only module
    that builds database engines and decides when state is persisted.

Invariants enforced:
    - Every status change goes through ``ContractRepository.transition``.
    - With ``autosave`` on, the full snapshot is written after every
      successful mutation; rejected operations write nothing.
    - ``sign`` writes the signature only when the SENT -> SIGNED transition
      is legal and the client's required fields are filled, so a rejected
      signing leaves the contract untouched.
    - Each workspace owns its engine; closing one never affects another.

Failure modes:
    - ``FileNotFoundError`` / ``ConfigurationError`` from settings loading.
    - ``SnapshotFormatError`` if stored rows cannot be decoded.
    - ``BlueprintNotFoundError`` from ``create_contract``.

Usage:
    with ContractWorkspace.open() as workspace:
        nda = workspace.create_contract("Acme NDA", "default-nda")
        workspace.approve(nda.id)
        workspace.send(nda.id, "client@example.com")
"""

from __future__ import annotations

from typing import Any, Sequence

from sqlalchemy.engine import Engine

from contract_config import WorkspaceSettings, get_active_settings, get_seed_blueprints
from contract_kernel.db.engine import (
    build_engine,
    build_session_factory,
    create_tables,
    session_scope,
)
from contract_kernel.domain.blueprint import (
    Blueprint,
    BlueprintInput,
    BlueprintPatch,
    FieldInput,
    ReorderDirection,
)
from contract_kernel.domain.clock import Clock
from contract_kernel.domain.contract import Contract
from contract_kernel.domain.fields import BlueprintField, ContractField, FieldType, FieldValue
from contract_kernel.domain.identifiers import IdFactory
from contract_kernel.domain.lifecycle import (
    TRANSITION_MESSAGES,
    ContractStatus,
    DashboardCategory,
    can_transition,
)
from contract_kernel.domain.snapshot import WorkspaceSnapshot
from contract_kernel.logging_config import LogContext, configure_logging, get_logger
from contract_kernel.selectors.dashboard_selector import (
    ActionOption,
    DashboardSelector,
    DashboardView,
    missing_client_fields,
)
from contract_kernel.services.contract_repository import ContractRepository
from contract_kernel.services.snapshot_store import SnapshotStore
from contract_kernel.services.template_catalog import TemplateCatalog

logger = get_logger("services.workspace")


class ContractWorkspace:
    """Catalog + repository + persistence behind one facade.

    Contract:
        Mutating methods return what the underlying kernel service returns
        (bool, value, or None) and persist on success.  Reads never touch
        the database.

    Non-goals:
        - No multi-process coordination; the last writer wins.
        - No authorization: any caller may invoke any action.
    """

    def __init__(
        self,
        catalog: TemplateCatalog,
        contracts: ContractRepository,
        engine: Engine,
        settings: WorkspaceSettings | None = None,
    ) -> None:
        self.settings = settings or WorkspaceSettings()
        self.catalog = catalog
        self.contracts = contracts
        self.selector = DashboardSelector(contracts)
        self.engine = engine
        self._session_factory = build_session_factory(engine)
        self._closed = False

    @classmethod
    def open(
        cls,
        settings: WorkspaceSettings | None = None,
        clock: Clock | None = None,
        id_factory: IdFactory | None = None,
    ) -> ContractWorkspace:
        """
        Build a workspace from stored state.

        Loads settings (``get_active_settings`` when none are given),
        builds an engine owned by this workspace, creates tables, loads the
        stored snapshot and reconciles it with the seed blueprints.  The
        reconciled state is written back immediately so the seeds are
        always stored.
        """
        settings = settings or get_active_settings()
        configure_logging(level=settings.log_level)
        engine = build_engine(settings.database_url, echo=settings.echo_sql)
        try:
            create_tables(engine)
            with session_scope(build_session_factory(engine)) as session:
                stored = SnapshotStore(session).load()

            catalog = TemplateCatalog(
                seeds=get_seed_blueprints(settings),
                persisted=stored.blueprints,
                clock=clock,
                id_factory=id_factory,
            )
            contracts = ContractRepository(
                catalog,
                contracts=stored.contracts,
                clock=clock,
                id_factory=id_factory,
            )
            workspace = cls(catalog, contracts, engine, settings)
            workspace.flush()
        except Exception:
            engine.dispose()
            raise

        logger.info(
            "workspace_opened",
            extra={
                "blueprint_count": len(catalog),
                "contract_count": len(contracts),
                "autosave": settings.autosave,
            },
        )
        return workspace

    def __enter__(self) -> ContractWorkspace:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def close(self) -> None:
        """Write the final snapshot and dispose this workspace's engine. Idempotent."""
        if self._closed:
            return
        try:
            self.flush()
        finally:
            self.engine.dispose()
            self._closed = True
        logger.info("workspace_closed")

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def snapshot(self) -> WorkspaceSnapshot:
        return WorkspaceSnapshot(
            blueprints=self.catalog.snapshot(),
            contracts=self.contracts.snapshot(),
        )

    def flush(self) -> None:
        """Persist the full current state in one transaction."""
        with session_scope(self._session_factory) as session:
            SnapshotStore(session).save(self.snapshot())

    def _persist_if(self, changed: Any) -> Any:
        if changed and self.settings.autosave:
            self.flush()
        return changed

    # ------------------------------------------------------------------
    # Blueprints
    # ------------------------------------------------------------------

    def create_blueprint(self, data: BlueprintInput) -> Blueprint:
        return self._persist_if(self.catalog.create(data))

    def update_blueprint(self, blueprint_id: str, patch: BlueprintPatch) -> Blueprint | None:
        return self._persist_if(self.catalog.update(blueprint_id, patch))

    def delete_blueprint(self, blueprint_id: str) -> bool:
        return self._persist_if(self.catalog.delete(blueprint_id))

    def add_field(self, blueprint_id: str, data: FieldInput) -> BlueprintField | None:
        return self._persist_if(self.catalog.add_field(blueprint_id, data))

    def update_field(self, blueprint_id: str, field_id: str, **changes: Any) -> bool:
        return self._persist_if(self.catalog.update_field(blueprint_id, field_id, **changes))

    def delete_field(self, blueprint_id: str, field_id: str) -> bool:
        return self._persist_if(self.catalog.delete_field(blueprint_id, field_id))

    def reorder_field(
        self,
        blueprint_id: str,
        field_id: str,
        direction: ReorderDirection | str,
    ) -> bool:
        return self._persist_if(self.catalog.reorder_field(blueprint_id, field_id, direction))

    # ------------------------------------------------------------------
    # Contracts
    # ------------------------------------------------------------------

    def create_contract(self, name: str, blueprint_id: str) -> Contract:
        """
        Create a contract from a blueprint.

        Raises:
            ValueError: If ``name`` is blank.
            BlueprintNotFoundError: If ``blueprint_id`` does not resolve.
        """
        name = name.strip()
        if not name:
            raise ValueError("Contract name is required")
        return self._persist_if(self.contracts.create(name, blueprint_id))

    def delete_contract(self, contract_id: str) -> bool:
        return self._persist_if(self.contracts.delete(contract_id))

    def replace_fields(self, contract_id: str, fields: Sequence[ContractField]) -> bool:
        return self._persist_if(self.contracts.replace_fields(contract_id, fields))

    def set_field_value(self, contract_id: str, field_id: str, value: FieldValue) -> bool:
        return self._persist_if(self.contracts.set_field_value(contract_id, field_id, value))

    def transition(self, contract_id: str, status: ContractStatus | str) -> bool:
        return self._persist_if(self.contracts.transition(contract_id, status))

    # ------------------------------------------------------------------
    # Lifecycle actions
    # ------------------------------------------------------------------

    def approve(self, contract_id: str) -> bool:
        return self.transition(contract_id, ContractStatus.APPROVED)

    def revert_to_draft(self, contract_id: str) -> bool:
        return self.transition(contract_id, ContractStatus.CREATED)

    def lock(self, contract_id: str) -> bool:
        return self.transition(contract_id, ContractStatus.LOCKED)

    def revoke(self, contract_id: str) -> bool:
        return self.transition(contract_id, ContractStatus.REVOKED)

    def send(self, contract_id: str, recipient_email: str, message: str = "") -> bool:
        """Mark a contract as sent to ``recipient_email``.

        Delivery is simulated: the send is recorded in the log only.
        """
        recipient = recipient_email.strip()
        with LogContext.bind(contract_id=contract_id):
            if not recipient:
                logger.warning("contract_send_rejected", extra={"reason": "missing_recipient"})
                return False
            if not self.transition(contract_id, ContractStatus.SENT):
                return False
            logger.info(
                "contract_sent",
                extra={"recipient": recipient, "message_length": len(message)},
            )
        return True

    def sign(self, contract_id: str, signature: str | None = None) -> bool:
        """Record the client's signature and move the contract to SIGNED.

        The signature (base64 image data) goes into the contract's first
        SIGNATURE field, if it has one.  Nothing is written unless the
        contract can currently be signed and every required client field
        (other than the signature) has been completed.
        """
        contract = self.contracts.get(contract_id)
        if contract is None or not can_transition(contract.status, ContractStatus.SIGNED):
            logger.warning(
                "contract_sign_rejected",
                extra={
                    "contract_id": contract_id,
                    "status": contract.status if contract else None,
                    "reason": "invalid_transition" if contract else "contract_not_found",
                },
            )
            return False

        missing = missing_client_fields(contract)
        if missing:
            logger.warning(
                "contract_sign_rejected",
                extra={
                    "contract_id": contract_id,
                    "status": contract.status,
                    "reason": "missing_required_fields",
                    "missing_fields": [f.label for f in missing],
                },
            )
            return False

        signature_field = contract.first_field_of_type(FieldType.SIGNATURE)
        if signature_field is not None and signature:
            if not self.contracts.set_field_value(contract_id, signature_field.id, signature):
                return False
        return self._persist_if(self.contracts.transition(contract_id, ContractStatus.SIGNED))

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def dashboard(
        self,
        category: DashboardCategory | str = DashboardCategory.ALL,
        query: str = "",
    ) -> DashboardView:
        return self.selector.build_view(category, query)

    def available_actions(self, contract_id: str) -> tuple[ActionOption, ...]:
        return self.selector.available_actions(contract_id)

    def field_permissions(self, contract_id: str) -> dict[str, bool] | None:
        return self.selector.field_permissions(contract_id)

    @staticmethod
    def transition_message(status: ContractStatus) -> str:
        """Confirmation text shown after a successful move into ``status``."""
        return TRANSITION_MESSAGES[status]
