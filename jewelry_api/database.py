# jewelry_api/database.py
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine, Session

from jewelry_api.core.config import get_settings

settings = get_settings()

# ---------------------------------------------------------
# Engine construction
#
# PostgreSQL:
#   - pool_pre_ping=True: validate connections before using them
#   - the code allocator relies on UPDATE ... RETURNING taking a row lock
#
# SQLite (local dev + tests):
#   - pysqlite's own transaction handling is disabled and every
#     transaction is opened with BEGIN IMMEDIATE, so writers are
#     serialized instead of failing with "database is locked" on
#     lock upgrade.
#   - in-memory URLs share a single connection (StaticPool).
# ---------------------------------------------------------


def _install_sqlite_transaction_hooks(engine: Engine) -> None:
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(db_url: str, echo: bool = False) -> Engine:
    """
    Create an engine for `db_url` with the transaction semantics the
    services expect (see module notes).
    """
    if db_url.startswith("sqlite"):
        in_memory = db_url in ("sqlite://", "sqlite:///:memory:")
        engine = create_engine(
            db_url,
            echo=echo,
            connect_args={"check_same_thread": False, "timeout": 30},
            poolclass=StaticPool if in_memory else None,
        )
        _install_sqlite_transaction_hooks(engine)
        return engine

    return create_engine(
        db_url,
        echo=echo,
        pool_pre_ping=True,
    )


engine = build_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)


def create_db_and_tables(bind: Engine | None = None) -> None:
    """
    Create all tables defined in SQLModel metadata if they do not exist.

    This is called once on application startup.
    """
    SQLModel.metadata.create_all(bind or engine)


def get_session():
    """
    FastAPI dependency that yields a SQLModel Session.

    Usage:

        from fastapi import Depends

        @router.get("/example")
        def example_endpoint(session: Session = Depends(get_session)):
            ...
    """
    with Session(engine) as session:
        yield session
