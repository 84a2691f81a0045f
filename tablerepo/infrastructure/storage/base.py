"""
Base table storage adapter with the batch and hook mechanics shared by
every backend.

Subclasses must implement:
- _execute_batch(operations): apply the queued operations as one batch
- _fetch(system_filters): rows of the table, optionally narrowed by
  system-field comparisons (may over-include; results are re-filtered)
- _get(key): point lookup
"""

import logging
from abc import abstractmethod
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from tablerepo.domain.interfaces.storage_adapter import ICommitHooks, ITableStorageAdapter
from tablerepo.domain.models.exceptions import PostCommitHookError
from tablerepo.domain.models.filters import Comparison, Filter, matches, split_system_filters
from tablerepo.domain.models.table_entity import (
    CommitContext,
    CommitOperation,
    EntityKey,
    EntityResolver,
    TableEntity,
    default_resolver,
)
from tablerepo.domain.models.table_query import TableQuery

logger = logging.getLogger(__name__)


_HOOK_NAMES = {
    CommitOperation.INSERT: "on_before_insert",
    CommitOperation.UPDATE: "on_before_update",
    CommitOperation.DELETE: "on_before_delete",
}


@dataclass
class PendingOperation:
    """One queued mutation of the current batch."""
    operation: CommitOperation
    entity: TableEntity


class BaseTableStorageAdapter(ITableStorageAdapter[TableEntity]):
    """
    Queues mutations, fires commit hooks and serves queries through the
    backend primitives of a subclass.
    
    Not thread-safe for writes: one batch has a single writer.
    """
    
    def __init__(self, table_name: str):
        if not table_name:
            raise ValueError("table_name must not be empty")
        self._table_name = table_name
        self._pending: List[PendingOperation] = []
        self._hooks: List[ICommitHooks] = []
    
    @property
    def table_name(self) -> str:
        return self._table_name
    
    @property
    def pending_count(self) -> int:
        return len(self._pending)
    
    def register_hooks(self, hooks: ICommitHooks) -> None:
        self._hooks.append(hooks)
    
    # ── Mutations ─────────────────────────────────────────
    
    def insert(self, entity: TableEntity) -> None:
        self._enqueue(CommitOperation.INSERT, entity)
    
    def update(self, entity: TableEntity) -> None:
        self._enqueue(CommitOperation.UPDATE, entity)
    
    def delete(self, entity: TableEntity) -> None:
        self._enqueue(CommitOperation.DELETE, entity)
    
    def commit(self) -> None:
        operations, self._pending = self._pending, []
        
        try:
            self._execute_batch(operations)
        except Exception:
            logger.error(
                f"Batch of {len(operations)} operation(s) on table {self._table_name!r} failed"
            )
            raise
        
        logger.debug(f"Committed {len(operations)} operation(s) on table {self._table_name!r}")
        # The batch is stored; every hook runs even if an earlier one fails
        hook_error = None
        for hooks in self._hooks:
            try:
                hooks.on_batch_committed(self._table_name, len(operations))
            except Exception as e:
                logger.error(
                    f"on_batch_committed of {type(hooks).__name__} failed for table "
                    f"{self._table_name!r}: {e}",
                    exc_info=True,
                )
                if hook_error is None:
                    hook_error = e
        if hook_error is not None:
            raise PostCommitHookError(self._table_name, len(operations)) from hook_error
    
    def discard(self) -> None:
        if self._pending:
            logger.debug(
                f"Discarded {len(self._pending)} queued operation(s) on table {self._table_name!r}"
            )
        self._pending = []
    
    # ── Queries ───────────────────────────────────────────
    
    def query(self, *filters: Filter) -> TableQuery[TableEntity]:
        return self.query_with_resolver(default_resolver, *filters)
    
    def query_with_resolver(self, resolver: EntityResolver, *filters: Filter) -> TableQuery:
        for f in filters:
            if not isinstance(f, Filter):
                raise TypeError(f"Expected Filter, got {type(f).__name__}")
        return TableQuery(
            lambda: self._run_query(resolver, filters),
            table_name=self._table_name,
            filters=filters,
        )
    
    def single(self, key: EntityKey) -> Optional[TableEntity]:
        return self._get(EntityKey.of(key))
    
    def first(self, *filters: Filter) -> Optional[TableEntity]:
        return self.query(*filters).first()
    
    # ── Internals ─────────────────────────────────────────
    
    def _enqueue(self, operation: CommitOperation, entity: TableEntity) -> None:
        if entity is None:
            raise ValueError("entity must not be None")
        if not isinstance(entity, TableEntity):
            raise TypeError(f"Expected TableEntity, got {type(entity).__name__}")
        # Reject malformed keys before they join the batch
        EntityKey(entity.partition_key, entity.row_key)
        
        context = CommitContext(entity=entity, operation=operation, table_name=self._table_name)
        hook_name = _HOOK_NAMES[operation]
        for hooks in self._hooks:
            getattr(hooks, hook_name)(context)
            if context.cancelled:
                logger.warning(
                    f"{operation.value} of {entity.key} on table {self._table_name!r} "
                    f"cancelled by {type(hooks).__name__}"
                )
                return
        
        self._pending.append(PendingOperation(operation, context.entity))
    
    def _run_query(self, resolver: EntityResolver, filters: Sequence[Filter]) -> List:
        system, _ = split_system_filters(filters)
        results = []
        for row in self._fetch(system):
            if matches(row, filters):
                results.append(
                    resolver(row.partition_key, row.row_key, row.timestamp, row.properties, row.etag)
                )
        return results
    
    @abstractmethod
    def _execute_batch(self, operations: List[PendingOperation]) -> None:
        pass
    
    @abstractmethod
    def _fetch(self, system_filters: Tuple[Comparison, ...]) -> Iterable[TableEntity]:
        pass
    
    @abstractmethod
    def _get(self, key: EntityKey) -> Optional[TableEntity]:
        pass
