"""Database configuration and session management for SQLite.

This module configures the engine that backs confirmable records. Hosts
and users live in the same database so that a confirmer id stored on a
record can be resolved with a plain primary-key lookup.

SQLite Configuration Choices:
    - **WAL (Write-Ahead Logging)**: Readers are not blocked while the
      confirmer write-through runs its single-column UPDATE.

    - **Foreign Keys**: Enabled for consistency with other SQLite setups,
      even though confirmer ids are deliberately not declared as foreign
      keys (a confirmer may be deleted without touching the records it
      confirmed).

    - **check_same_thread=False**: Required for FastAPI, whose dependency
      injection may hand a session to a different worker thread.
"""

from sqlalchemy import event as sa_event
from sqlmodel import Session, SQLModel, create_engine

from confirmable.core.config import settings

connect_args = {"check_same_thread": False}

engine = create_engine(
    settings.database_url,
    connect_args=connect_args,
    echo=settings.debug,  # Log SQL statements when DEBUG=true
)


@sa_event.listens_for(engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    """Configure SQLite pragmas on each new connection.

    These settings are connection-level, not database-level, so they must
    be set each time a new connection is established from the pool.
    """
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_and_tables():
    """Create all database tables."""
    SQLModel.metadata.create_all(engine)


def get_session():
    """Dependency for getting database session."""
    with Session(engine) as session:
        yield session
