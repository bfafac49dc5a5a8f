"""
Module: contract_kernel.db.engine
Responsibility: SQLAlchemy engine construction, session factory management,
    and transactional scope utilities.  This is the single point of database
    connection configuration for snapshot persistence.
Architecture position: Kernel > DB.  May import from db/base.py.
    MUST NOT import from services/, selectors/, domain/, or outer layers
    (except create_tables/drop_tables which import models).

Two ways to hold an engine:
    - Explicit: ``build_engine`` + ``build_session_factory`` return objects
      the caller owns and disposes.  Every ContractWorkspace does this, so
      two workspaces never share a connection pool.
    - Module default: ``init_engine_from_url`` installs one process-wide
      engine used when no factory / engine is passed to ``session_scope``,
      ``create_tables`` or ``drop_tables``.

Invariants enforced:
    - SQLite is the default backend; in-memory SQLite URLs share one
      connection (StaticPool) so every session sees the same database.
    - session_scope() commits on success and rolls back on any exception.

Failure modes:
    - RuntimeError if the module default is used before
      init_engine_from_url().
"""

from contextlib import contextmanager
from typing import Any, Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from contract_kernel.logging_config import get_logger

logger = get_logger("db.engine")

# Module-level default engine and session factory
_engine: Engine | None = None
_SessionFactory: sessionmaker[Session] | None = None


def _is_memory_sqlite(database_url: str) -> bool:
    url = make_url(database_url)
    return url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:")


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create a new engine for ``database_url``.

    The caller owns the engine and must ``dispose()`` it.

    Args:
        database_url: SQLAlchemy URL, e.g. ``sqlite:///contracts.db`` or
            ``sqlite://`` for an in-memory database.
        echo: If True, log all SQL statements.
    """
    kwargs: dict[str, Any] = {}
    dialect = make_url(database_url).get_backend_name()
    if dialect == "sqlite":
        kwargs["connect_args"] = {"check_same_thread": False}
        if _is_memory_sqlite(database_url):
            kwargs["poolclass"] = StaticPool

    engine = create_engine(database_url, echo=echo, **kwargs)
    logger.info(
        "engine_initialized",
        extra={
            "dialect": dialect,
            "in_memory": _is_memory_sqlite(database_url),
            "echo": echo,
        },
    )
    return engine


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, expire_on_commit=False)


def init_engine_from_url(database_url: str, echo: bool = False) -> Engine:
    """
    Install the module-level default engine.

    Postconditions: Module-level _engine and _SessionFactory are initialized.
        A second call replaces (and disposes) the previous default engine.
        Engines built with ``build_engine`` are never touched.
    """
    global _engine, _SessionFactory

    if _engine is not None:
        _engine.dispose()

    _engine = build_engine(database_url, echo=echo)
    _SessionFactory = build_session_factory(_engine)
    return _engine


def get_engine() -> Engine:
    """
    Get the module-level default engine.

    Raises:
        RuntimeError: If engine has not been initialized.
    """
    if _engine is None:
        raise RuntimeError("Engine not initialized. Call init_engine_from_url() first.")
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    if _SessionFactory is None:
        raise RuntimeError("Engine not initialized. Call init_engine_from_url() first.")
    return _SessionFactory


def get_session() -> Session:
    """
    Get a new session from the module-level default factory.

    Raises:
        RuntimeError: If engine has not been initialized.
    """
    return get_session_factory()()


@contextmanager
def session_scope(
    factory: sessionmaker[Session] | None = None,
) -> Generator[Session, None, None]:
    """
    Provide a transactional scope around a series of operations.

    Postconditions: On normal exit, session is committed and closed.
        On exception, session is rolled back and closed.  The exception
        is re-raised to the caller.

    Usage:
        with session_scope(workspace_factory) as session:
            SnapshotStore(session).save(snapshot)
    """
    session = (factory or get_session_factory())()
    logger.debug("transaction_started")
    try:
        yield session
        session.commit()
        logger.debug("transaction_committed")
    except Exception:
        session.rollback()
        logger.warning("transaction_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def create_tables(engine: Engine | None = None) -> None:
    """Create the snapshot tables if they do not exist."""
    from contract_kernel.db.base import Base
    import contract_kernel.models  # noqa: F401  (registers tables on Base.metadata)

    Base.metadata.create_all(engine or get_engine())
    logger.info("tables_created", extra={"tables": sorted(Base.metadata.tables)})


def drop_tables(engine: Engine | None = None) -> None:
    """Drop the snapshot tables. FOR TESTING ONLY."""
    from contract_kernel.db.base import Base
    import contract_kernel.models  # noqa: F401

    Base.metadata.drop_all(engine or get_engine())
    logger.info("tables_dropped")


def reset_engine() -> None:
    """Dispose the module-level default engine and forget its factory."""
    global _engine, _SessionFactory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionFactory = None
