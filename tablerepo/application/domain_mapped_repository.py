"""
Domain-Mapped Repository.

Lets application code work with domain entities while persistence runs
against a table storage adapter:

    insert/update/delete  → journaled, no I/O, no mapping
    commit                → journal replayed in order through the mapper
                            and the adapter, then the batch is executed
    query/single/first    → adapter rows mapped back to domain entities

Failure semantics:
- A failing commit() propagates the adapter's exception unmodified and
  leaves the journal untouched, so the caller can retry or roll back
- A failure while dispatching entries discards the adapter's partially
  built batch (nothing was executed yet), so a retry replays the whole
  unit of work once
- Rows already written by an adapter are never compensated
"""

import logging
from typing import Any, List, Optional, Tuple, TypeVar

from tablerepo.domain.interfaces.entity_mapper import IEntityMapper
from tablerepo.domain.interfaces.repositories import IDuplexRepository
from tablerepo.domain.interfaces.storage_adapter import ICommitHooks, ITableStorageAdapter
from tablerepo.domain.models.exceptions import PostCommitHookError
from tablerepo.domain.models.filters import Filter
from tablerepo.domain.models.journal import JournalEntry, JournalEntryType, UnitOfWorkContainer
from tablerepo.domain.models.table_entity import (
    CommitContext,
    EntityKey,
    EntityResolver,
    EntityState,
)
from tablerepo.domain.models.table_query import TableQuery

logger = logging.getLogger(__name__)

TTable = TypeVar("TTable")
TDomain = TypeVar("TDomain")


class DomainMappedRepository(IDuplexRepository[TTable, TDomain], ICommitHooks):
    """
    Unit-of-work repository over one table.
    
    Subclasses override the ICommitHooks methods to layer cross-cutting
    concerns (audit stamps, soft-delete flags) onto every commit:
    
        class AuditedRepository(DomainMappedRepository):
            def on_before_insert(self, context):
                context.entity.properties["created_at"] = datetime.now(timezone.utc)
    
    Usage:
        repo = DomainMappedRepository(InMemoryTableStorageAdapter("customers"), mapper)
        with repo:
            repo.insert(customer)
            repo.commit()
        repo.single(("eu", "42"))
    
    Not thread-safe for mutations: insert/update/delete/commit/rollback on
    one instance must be serialized by the caller. Queries read the adapter
    directly and may run alongside pending mutations.
    """
    
    def __init__(
        self,
        adapter: ITableStorageAdapter[TTable],
        mapper: IEntityMapper[TTable, TDomain],
    ):
        """
        Initialize the repository.
        
        Args:
            adapter: Storage adapter of the backing table
            mapper: Domain ↔ storage entity mapper
        """
        if adapter is None:
            raise ValueError("adapter is required")
        if mapper is None:
            raise ValueError("mapper is required")
        
        self._uow: UnitOfWorkContainer[TDomain] = UnitOfWorkContainer()
        self._adapter = adapter
        self._adapter.register_hooks(self)
        self._reset_unit_of_work()
        self._mapper = mapper
    
    @property
    def mapper(self) -> IEntityMapper[TTable, TDomain]:
        return self._mapper
    
    @property
    def adapter(self) -> ITableStorageAdapter[TTable]:
        return self._adapter
    
    @property
    def journal(self) -> Tuple[JournalEntry[TDomain], ...]:
        """Snapshot of the pending journal entries."""
        return self._uow.get_journal()
    
    # ── Unit of work ──────────────────────────────────────
    
    def __enter__(self) -> "DomainMappedRepository[TTable, TDomain]":
        return self
    
    def __exit__(self, exc_type, exc_val, exc_tb):
        """Roll back pending changes on exception."""
        if exc_type:
            self.rollback()
        return False
    
    def insert(self, entity: TDomain) -> None:
        if entity is None:
            raise ValueError("entity must not be None")
        self._uow.insert(entity)
    
    def update(self, entity: TDomain) -> None:
        if entity is None:
            raise ValueError("entity must not be None")
        self._uow.update(entity)
    
    def delete(self, entity: TDomain) -> None:
        if entity is None:
            raise ValueError("entity must not be None")
        self._uow.delete(entity)
    
    def commit(self) -> None:
        """
        Replay the journal against the adapter and execute the batch.
        
        Raises:
            StorageAdapterError: Propagated unmodified from the adapter; the
                journal is kept
            PostCommitHookError: The batch was stored; the journal is reset
        """
        journal = self._uow.get_journal()
        dispatch = {
            JournalEntryType.INSERT: self._adapter.insert,
            JournalEntryType.UPDATE: self._adapter.update,
            JournalEntryType.DELETE: self._adapter.delete,
        }
        
        try:
            for entry in journal:
                logger.debug(
                    f"Dispatching {entry.type.value} to table {self._adapter.table_name!r}"
                )
                table_entity = self.convert_to_table_entity(entry.entity)
                dispatch[entry.type](table_entity)
        except Exception:
            logger.error(
                f"Dispatch to table {self._adapter.table_name!r} failed; "
                f"{len(journal)} journal entries left pending"
            )
            self._adapter.discard()
            raise
        
        try:
            self._adapter.commit()
        except PostCommitHookError:
            # Rows are stored; only a post-batch hook failed
            self._reset_unit_of_work()
            raise
        logger.debug(f"Committed {len(journal)} journal entries to table {self._adapter.table_name!r}")
        self._reset_unit_of_work()
    
    def rollback(self) -> None:
        """Discard pending changes. Never touches stored rows."""
        self._reset_unit_of_work()
        self._adapter.discard()
    
    def _reset_unit_of_work(self) -> None:
        self._uow.reset()
    
    # ── Queries ───────────────────────────────────────────
    
    def query(self, *filters: Filter) -> List[TDomain]:
        return self.map_query(self._adapter.query(*filters))
    
    def query_with_resolver(self, resolver: EntityResolver, *filters: Filter) -> List[TDomain]:
        return self.map_query(self._adapter.query_with_resolver(resolver, *filters))
    
    def table_query(self, *filters: Filter) -> TableQuery[TTable]:
        return self._adapter.query(*filters)
    
    def single(self, key: Any) -> Optional[TDomain]:
        """
        Point lookup.
        
        Args:
            key: EntityKey, (partition_key, row_key) tuple or mapping
            
        Raises:
            InvalidEntityKeyError: If key is malformed
        """
        entity = self._adapter.single(EntityKey.of(key))
        if entity is None:
            return None
        return self.convert_from_table_entity(entity)
    
    def first(self, *filters: Filter) -> Optional[TDomain]:
        entity = self._adapter.first(*filters)
        if entity is None:
            return None
        return self.convert_from_table_entity(entity)
    
    def map_query(self, query: TableQuery[TTable]) -> List[TDomain]:
        """
        Map a table query into domain entities.
        
        Executes the query: rows are materialized before mapping.
        """
        rows = list(query)
        return [self.convert_from_table_entity(row) for row in rows]
    
    # ── Change tracking (reserved) ────────────────────────
    
    def attach(self, entity: TDomain, state: EntityState = EntityState.UNCHANGED) -> None:
        pass
    
    def detach(self, entity: TDomain) -> None:
        pass
    
    # ── Mapping ───────────────────────────────────────────
    
    def convert_to_table_entity(self, entity: TDomain) -> TTable:
        """Converts the domain entity into an entity fit for table storage."""
        return self._mapper.map_to_entity(entity)
    
    def convert_from_table_entity(self, entity: TTable) -> TDomain:
        """Converts the table storage entity into a domain entity."""
        return self._mapper.map_from_entity(entity)
    
    # ── Commit hooks (no-op defaults) ─────────────────────
    
    def on_before_insert(self, context: CommitContext) -> None:
        """Called just before a row is queued for insert."""
    
    def on_before_update(self, context: CommitContext) -> None:
        """Called just before a row is queued for update."""
    
    def on_before_delete(self, context: CommitContext) -> None:
        """Called just before a row is queued for delete."""
    
    def on_batch_committed(self, table_name: str, operation_count: int) -> None:
        """Called just after a batch has been executed."""
