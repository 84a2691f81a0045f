"""
Unit of Work Journal.

Ordered record of the pending, uncommitted mutations of one unit of work.

Design Decisions:
- No coalescing: every queued operation is replayed, in submission order
- No validation of per-entity conflicts (what you queue is what gets replayed)
- Snapshots are immutable tuples, so iterating one never observes later entries
- Holds references to domain entities only; mapping happens at commit time
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, List, Tuple, TypeVar

TDomain = TypeVar("TDomain")


class JournalEntryType(Enum):
    """Kind of mutation recorded in the journal."""
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class JournalEntry(Generic[TDomain]):
    """One pending mutation: an operation kind and the entity it applies to."""
    type: JournalEntryType
    entity: TDomain


class UnitOfWorkContainer(Generic[TDomain]):
    """
    Journal of pending operations against domain entities.
    
    Not thread-safe: one unit of work has a single writer, serialized by
    the caller.
    
    Usage:
        journal = UnitOfWorkContainer()
        journal.insert(customer)
        journal.delete(stale)
        for entry in journal.get_journal():
            ...
        journal.reset()
    """
    
    def __init__(self):
        self._entries: List[JournalEntry[TDomain]] = []
    
    def insert(self, entity: TDomain) -> None:
        self._append(JournalEntryType.INSERT, entity)
    
    def update(self, entity: TDomain) -> None:
        self._append(JournalEntryType.UPDATE, entity)
    
    def delete(self, entity: TDomain) -> None:
        self._append(JournalEntryType.DELETE, entity)
    
    def get_journal(self) -> Tuple[JournalEntry[TDomain], ...]:
        """
        Snapshot of the pending entries in submission order.
        
        Returns:
            Immutable tuple; entries appended later are not visible through it
        """
        return tuple(self._entries)
    
    def reset(self) -> None:
        """Drop all pending entries. Idempotent."""
        self._entries.clear()
    
    def __len__(self) -> int:
        return len(self._entries)
    
    def __bool__(self) -> bool:
        return bool(self._entries)
    
    def _append(self, entry_type: JournalEntryType, entity: TDomain) -> None:
        if entity is None:
            raise ValueError("entity must not be None")
        self._entries.append(JournalEntry(entry_type, entity))


__all__ = [
    "JournalEntryType",
    "JournalEntry",
    "UnitOfWorkContainer",
]
