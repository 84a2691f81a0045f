"""
Storage Adapter Interfaces.

Narrow contract the repository core consumes from a partitioned table
store, plus the commit hook interface adapters fire during a batch.

Batch lifecycle:
    adapter.insert(row)    # on_before_insert fires, operation queued
    adapter.update(row)    # on_before_update fires, operation queued
    adapter.commit()       # batch executed, on_batch_committed fires once
"""

from abc import ABC, abstractmethod
from typing import Generic, Optional, TypeVar, Any

from tablerepo.domain.models.filters import Filter
from tablerepo.domain.models.table_entity import CommitContext, EntityKey, EntityResolver
from tablerepo.domain.models.table_query import TableQuery

TTable = TypeVar("TTable")
T = TypeVar("T")


class ICommitHooks:
    """
    Commit lifecycle callbacks.
    
    Every method defaults to a no-op; implementers override selectively.
    Pre-commit hooks fire once per queued operation, before it joins the
    batch, and receive the storage entity (never the domain entity).
    """
    
    def on_before_insert(self, context: CommitContext) -> None:
        """Called just before an insert is queued."""
    
    def on_before_update(self, context: CommitContext) -> None:
        """Called just before an update is queued."""
    
    def on_before_delete(self, context: CommitContext) -> None:
        """Called just before a delete is queued."""
    
    def on_batch_committed(self, table_name: str, operation_count: int) -> None:
        """Called once after a batch executed successfully."""


class ITableStorageAdapter(ABC, Generic[TTable]):
    """
    Table storage adapter for one table.
    
    Mutations are queued into a batch and only take effect on commit().
    Queries read the store directly and never see queued mutations.
    """
    
    @property
    @abstractmethod
    def table_name(self) -> str:
        """Name of the table this adapter reads and writes."""
        pass
    
    @property
    @abstractmethod
    def pending_count(self) -> int:
        """Number of operations queued in the current batch."""
        pass
    
    @abstractmethod
    def register_hooks(self, hooks: ICommitHooks) -> None:
        """
        Subscribe commit hooks.
        
        Hooks fire in registration order.
        """
        pass
    
    @abstractmethod
    def insert(self, entity: TTable) -> None:
        """Queue an insert after firing on_before_insert."""
        pass
    
    @abstractmethod
    def update(self, entity: TTable) -> None:
        """Queue an update after firing on_before_update."""
        pass
    
    @abstractmethod
    def delete(self, entity: TTable) -> None:
        """Queue a delete after firing on_before_delete."""
        pass
    
    @abstractmethod
    def commit(self) -> None:
        """
        Execute the queued batch.
        
        The batch is consumed whether or not execution succeeds.
        
        Raises:
            StorageAdapterError: On any per-item or transport failure
            PostCommitHookError: The batch was stored but an
                on_batch_committed hook raised
        """
        pass
    
    @abstractmethod
    def discard(self) -> None:
        """Drop the queued batch without executing it."""
        pass
    
    @abstractmethod
    def query(self, *filters: Filter) -> TableQuery[TTable]:
        """
        Lazy, restartable query for rows matching every filter.
        
        Args:
            filters: Zero or more filters, ANDed together
        """
        pass
    
    @abstractmethod
    def query_with_resolver(self, resolver: EntityResolver, *filters: Filter) -> TableQuery[Any]:
        """
        Like query(), shaping each raw row through ``resolver``.
        """
        pass
    
    @abstractmethod
    def single(self, key: EntityKey) -> Optional[TTable]:
        """
        Point lookup by composite key.
        
        Returns:
            The row, or None if absent
        """
        pass
    
    @abstractmethod
    def first(self, *filters: Filter) -> Optional[TTable]:
        """
        First row matching every filter.
        
        Returns:
            The row, or None if nothing matches
        """
        pass
