"""
In-Memory Table Storage Adapter.

For unit tests and fast iteration - no I/O.
Provides the same behaviour as SQLAlchemyTableStorageAdapter:
- Batches are atomic: validated against a staged copy, then swapped in
- Insert of an existing key conflicts; update/delete of a missing key fails
- timestamp and etag are stamped on every write
- Reads return copies, ordered by (partition_key, row_key)
"""

import logging
import uuid
from copy import deepcopy
from datetime import datetime, timezone
from threading import RLock
from typing import Dict, Iterable, List, Optional, Tuple

from tablerepo.domain.models.exceptions import (
    BatchCommitError,
    EntityConflictError,
    EntityNotFoundError,
)
from tablerepo.domain.models.filters import Comparison, matches
from tablerepo.domain.models.table_entity import CommitOperation, EntityKey, TableEntity
from .base import BaseTableStorageAdapter, PendingOperation

logger = logging.getLogger(__name__)


class InMemoryTable:
    """Rows of one table, shareable between adapters."""
    
    def __init__(self):
        self.rows: Dict[Tuple[str, str], TableEntity] = {}
        self.lock = RLock()
    
    def __len__(self) -> int:
        return len(self.rows)


class InMemoryTableStorageAdapter(BaseTableStorageAdapter):
    """
    Dictionary-backed table.
    
    Usage:
        adapter = InMemoryTableStorageAdapter("customers")
        adapter.insert(TableEntity("eu", "42", {"name": "Ada"}))
        adapter.commit()
        adapter.single(EntityKey("eu", "42"))
    """
    
    def __init__(self, table_name: str, table: Optional[InMemoryTable] = None):
        """
        Args:
            table_name: Logical table name
            table: Existing row store to share (a private one when omitted)
        """
        super().__init__(table_name)
        self._table = table if table is not None else InMemoryTable()
    
    def _execute_batch(self, operations: List[PendingOperation]) -> None:
        now = datetime.now(timezone.utc)
        
        with self._table.lock:
            staged = dict(self._table.rows)
            written = []
            
            for index, op in enumerate(operations):
                key = (op.entity.partition_key, op.entity.row_key)
                try:
                    if op.operation is CommitOperation.INSERT:
                        if key in staged:
                            raise EntityConflictError(self.table_name, *key)
                    elif key not in staged:
                        raise EntityNotFoundError(self.table_name, *key)
                except (EntityConflictError, EntityNotFoundError) as e:
                    raise BatchCommitError(
                        f"Operation {index} ({op.operation.value}) failed: {e}",
                        index=index,
                        operation=op.operation.value,
                    ) from e
                
                if op.operation is CommitOperation.DELETE:
                    del staged[key]
                    continue
                
                row = deepcopy(op.entity)
                row.timestamp = now
                row.etag = uuid.uuid4().hex
                staged[key] = row
                written.append((op.entity, row))
            
            self._table.rows = staged
        
        # Reflect store-owned fields back onto the caller's entities
        for entity, row in written:
            entity.timestamp = row.timestamp
            entity.etag = row.etag
    
    def _fetch(self, system_filters: Tuple[Comparison, ...]) -> Iterable[TableEntity]:
        with self._table.lock:
            rows = [self._table.rows[k] for k in sorted(self._table.rows)]
            return [deepcopy(r) for r in rows if matches(r, system_filters)]
    
    def _get(self, key: EntityKey) -> Optional[TableEntity]:
        with self._table.lock:
            row = self._table.rows.get(key.as_tuple())
            return deepcopy(row) if row else None
    
    def __len__(self) -> int:
        return len(self._table)
    
    def clear(self) -> None:
        """Remove every stored row (test helper)."""
        with self._table.lock:
            self._table.rows = {}
