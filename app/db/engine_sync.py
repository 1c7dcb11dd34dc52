# app/db/engine_sync.py
"""
SYNC engine - used by the domain services (clients, payments, dashboards).
SQLite runs in WAL mode to improve concurrency.
"""
import os
from typing import Generator

from sqlalchemy import event
from sqlmodel import Session, SQLModel, create_engine

from app.core.config import settings

DATABASE_URL_SYNC = settings.database_url

if settings.is_sqlite:
    _db_file = DATABASE_URL_SYNC.replace("sqlite:///", "", 1)
    if _db_file and _db_file != ":memory:":
        os.makedirs(os.path.dirname(os.path.abspath(_db_file)), exist_ok=True)

_connect_args = {"check_same_thread": False} if settings.is_sqlite else {}
sync_engine = create_engine(DATABASE_URL_SYNC, echo=False, connect_args=_connect_args)


# Activate WAL mode to avoid "database is locked"
if settings.is_sqlite:
    @event.listens_for(sync_engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL;")
        cursor.close()


def get_sync_session() -> Generator[Session, None, None]:
    """
    Dependency for SYNC SQLModel session injection.
    Usage: session: Session = Depends(get_sync_session)
    """
    with Session(sync_engine) as session:
        yield session


def create_sync_db_and_tables():
    """Create all tables with the SYNC engine."""
    # Import models so they are registered in SQLModel.metadata
    from app.models import Payment, User  # noqa: F401

    SQLModel.metadata.create_all(sync_engine)
