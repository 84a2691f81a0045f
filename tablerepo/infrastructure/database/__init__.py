"""Database infrastructure - ORM models, mappers and the SQLAlchemy table adapter."""

from .models import Base, TableEntityORM
from .mappers import TableEntityMapper
from .setup import create_table_engine, create_table_session_factory
from .sqlalchemy_table_adapter import SQLAlchemyTableStorageAdapter

__all__ = [
    # Models
    "Base",
    "TableEntityORM",
    # Mappers
    "TableEntityMapper",
    # Setup
    "create_table_engine",
    "create_table_session_factory",
    # Adapter
    "SQLAlchemyTableStorageAdapter",
]
