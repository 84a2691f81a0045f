"""
Infrastructure Layer - Storage adapters, mappers and blob storage.

This layer implements the interfaces defined in the domain layer.
"""

from .storage import InMemoryTableStorageAdapter
from .database import SQLAlchemyTableStorageAdapter
from .mappers import DataclassEntityMapper
from .blob import FileSystemBlobRepository

__all__ = [
    "InMemoryTableStorageAdapter",
    "SQLAlchemyTableStorageAdapter",
    "DataclassEntityMapper",
    "FileSystemBlobRepository",
]
