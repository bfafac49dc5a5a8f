"""
Pytest fixtures for the contract workspace test suite.

Provides:
- Structured logging configured once per session, plus captured JSON logs
- Deterministic clock and sequential id factory
- In-memory SQLite engine / session for the snapshot store
- Catalog and repository fixtures seeded with the packaged blueprints
"""

import json
import logging
from io import StringIO
from typing import Generator

import pytest
from sqlalchemy.orm import Session

from contract_config.loader import load_seed_blueprints
from contract_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from contract_kernel.domain.clock import DeterministicClock
from contract_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from contract_kernel.services.contract_repository import ContractRepository
from contract_kernel.services.template_catalog import TemplateCatalog


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture contract_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, repository):
            repository.transition(contract_id, "LOCKED")
            logs = captured_logs()
            assert any(r["message"] == "contract_transition_rejected" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    handler.setLevel(logging.DEBUG)
    root = logging.getLogger("contract_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Determinism
# =============================================================================


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    """Clock starting at 2026-01-01 12:00 UTC; advance it explicitly."""
    return DeterministicClock()


class SequentialIds:
    """Id factory yielding ``<prefix>-1``, ``<prefix>-2``, ..."""

    def __init__(self, prefix: str = "id"):
        self.prefix = prefix
        self.count = 0

    def __call__(self) -> str:
        self.count += 1
        return f"{self.prefix}-{self.count}"


@pytest.fixture
def id_factory() -> SequentialIds:
    return SequentialIds()


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database with the snapshot tables."""
    eng = init_engine_from_url("sqlite://")
    create_tables()
    yield eng
    drop_tables()
    reset_engine()


@pytest.fixture
def session(engine) -> Generator[Session, None, None]:
    """Session on the in-memory database; rolled back after the test."""
    sess = get_session()
    try:
        yield sess
    finally:
        sess.rollback()
        sess.close()


# =============================================================================
# Kernel services
# =============================================================================


@pytest.fixture(scope="session")
def seed_blueprints():
    """The four packaged seed blueprints."""
    return load_seed_blueprints()


@pytest.fixture
def catalog(seed_blueprints, deterministic_clock, id_factory) -> TemplateCatalog:
    return TemplateCatalog(
        seeds=seed_blueprints,
        clock=deterministic_clock,
        id_factory=id_factory,
    )


@pytest.fixture
def repository(catalog, deterministic_clock, id_factory) -> ContractRepository:
    return ContractRepository(
        catalog,
        clock=deterministic_clock,
        id_factory=id_factory,
    )


@pytest.fixture
def nda(repository):
    """A freshly created NDA contract (status CREATED)."""
    return repository.create("Acme NDA", "default-nda")
