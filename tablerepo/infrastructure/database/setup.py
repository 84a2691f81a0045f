"""
Table store database setup.

Usage:
    from tablerepo.infrastructure.database import create_table_session_factory
    
    session_factory = create_table_session_factory("sqlite:///data/tables.db")
"""

import logging
from pathlib import Path
from typing import Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from .models import Base

logger = logging.getLogger(__name__)


def create_table_engine(db_url: str, echo: bool = False, wal_mode: bool = False) -> Engine:
    """
    Create SQLAlchemy engine for the table store and ensure its schema.
    
    In-memory SQLite URLs share one connection across sessions, so every
    session sees the same database.
    
    Args:
        db_url: Database URL
        echo: Whether to log SQL statements
        wal_mode: Enable SQLite WAL journal mode (file databases only)
        
    Returns:
        SQLAlchemy Engine
    """
    kwargs = {"echo": echo}
    is_sqlite = db_url.startswith("sqlite")
    if is_sqlite and (":memory:" in db_url or db_url in ("sqlite://", "sqlite:///")):
        kwargs["poolclass"] = StaticPool
        kwargs["connect_args"] = {"check_same_thread": False}
    
    engine = create_engine(db_url, **kwargs)
    
    database = engine.url.database
    if is_sqlite and database and database != ":memory:":
        Path(database).parent.mkdir(parents=True, exist_ok=True)
    
    if is_sqlite and wal_mode:
        @event.listens_for(engine, "connect")
        def _set_wal_mode(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.close()
    
    Base.metadata.create_all(engine)
    logger.debug(f"Table store schema ready at {engine.url!r}")
    return engine


def create_table_session_factory(
    db_url: Optional[str] = None,
    engine: Optional[Engine] = None,
    echo: bool = False,
    wal_mode: bool = False,
) -> sessionmaker:
    """
    Create SQLAlchemy session factory for the table store.
    
    Args:
        db_url: Database URL (ignored when engine is given)
        engine: Optional existing engine
        echo: Whether to log SQL statements
        wal_mode: Enable SQLite WAL journal mode
        
    Returns:
        SQLAlchemy sessionmaker
    """
    if engine is None:
        if db_url is None:
            raise ValueError("Either db_url or engine is required")
        engine = create_table_engine(db_url, echo=echo, wal_mode=wal_mode)
    return sessionmaker(bind=engine, expire_on_commit=False)
