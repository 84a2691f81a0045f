"""Table storage adapters."""

from .base import BaseTableStorageAdapter, PendingOperation
from .inmemory_table_adapter import InMemoryTable, InMemoryTableStorageAdapter

__all__ = [
    "BaseTableStorageAdapter",
    "PendingOperation",
    "InMemoryTable",
    "InMemoryTableStorageAdapter",
]
