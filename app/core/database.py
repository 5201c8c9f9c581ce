"""Database configuration and session management for SQLite.

The engine is configured with two connection-level pragmas:

    - **WAL (Write-Ahead Logging)**: readers are not blocked while the
      interest endpoints or the reconcile job write.

    - **Foreign Keys**: SQLite ships with foreign keys disabled. Enabling
      them makes EventInterest.event_id reference a real Event.

``check_same_thread=False`` is needed because FastAPI may hand a session
to a different thread than the one that opened the connection.
"""

from sqlalchemy import event as sa_event
from sqlmodel import Session, SQLModel, create_engine

from app.core.config import settings

connect_args = {"check_same_thread": False}

engine = create_engine(
    settings.database_url,
    connect_args=connect_args,
    echo=settings.debug,  # Log SQL statements when DEBUG=true
)


@sa_event.listens_for(engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    """Configure SQLite pragmas on each new connection."""
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
