"""
SQLAlchemy Table Storage Adapter.

Persists table rows through SQLAlchemy; each commit() runs the whole
batch in one database transaction (all or nothing).

Query compilation:
- Comparisons on system fields (partition_key, row_key, timestamp, etag)
  at the top level of the ANDed filters become SQL WHERE clauses
- Everything else is evaluated in process on the fetched rows
"""

import logging
import operator
import uuid
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from tablerepo.domain.models.exceptions import (
    BatchCommitError,
    EntityConflictError,
    EntityNotFoundError,
)
from tablerepo.domain.models.filters import Comparison, ComparisonOperator
from tablerepo.domain.models.table_entity import CommitOperation, EntityKey, TableEntity
from tablerepo.infrastructure.storage.base import BaseTableStorageAdapter, PendingOperation
from .mappers import TableEntityMapper
from .models import TableEntityORM

logger = logging.getLogger(__name__)


_SQL_OPERATORS = {
    ComparisonOperator.EQ: operator.eq,
    ComparisonOperator.NE: operator.ne,
    ComparisonOperator.GT: operator.gt,
    ComparisonOperator.GE: operator.ge,
    ComparisonOperator.LT: operator.lt,
    ComparisonOperator.LE: operator.le,
}

_COLUMNS = {
    "partition_key": TableEntityORM.partition_key,
    "row_key": TableEntityORM.row_key,
    "timestamp": TableEntityORM.timestamp,
    "etag": TableEntityORM.etag,
}


class SQLAlchemyTableStorageAdapter(BaseTableStorageAdapter):
    """
    SQLAlchemy implementation of ITableStorageAdapter.
    
    Thread Safety:
    - One session per commit / query, created from the session factory
    - Queries may run while a batch is being queued
    
    ACID:
    - A batch executes inside a single transaction
    - Any failure rolls the whole batch back
    """
    
    def __init__(self, session_factory: sessionmaker, table_name: str):
        """
        Initialize adapter.
        
        Args:
            session_factory: SQLAlchemy sessionmaker bound to the table store
            table_name: Logical table name
        """
        super().__init__(table_name)
        self._session_factory = session_factory
    
    def _execute_batch(self, operations: List[PendingOperation]) -> None:
        if not operations:
            return
        
        now = datetime.now(timezone.utc)
        session: Session = self._session_factory()
        index = 0
        written = []
        try:
            for index, op in enumerate(operations):
                etag = self._apply(session, op, now)
                if etag is not None:
                    written.append((op.entity, etag))
            session.commit()
        except (EntityConflictError, EntityNotFoundError, TypeError) as e:
            session.rollback()
            raise BatchCommitError(
                f"Operation {index} ({operations[index].operation.value}) failed: {e}",
                index=index,
                operation=operations[index].operation.value,
            ) from e
        except SQLAlchemyError as e:
            session.rollback()
            raise BatchCommitError(f"Batch on table {self.table_name!r} failed: {e}") from e
        finally:
            session.close()
        
        # Reflect store-owned fields back onto the caller's entities
        for entity, etag in written:
            entity.timestamp = now
            entity.etag = etag
    
    def _apply(self, session: Session, op: PendingOperation, now: datetime) -> Optional[str]:
        """Apply one operation; returns the new etag of a written row."""
        entity = op.entity
        etag = None
        existing = session.get(
            TableEntityORM, (self.table_name, entity.partition_key, entity.row_key)
        )
        
        if op.operation is CommitOperation.INSERT:
            if existing is not None:
                raise EntityConflictError(self.table_name, entity.partition_key, entity.row_key)
            etag = uuid.uuid4().hex
            orm = TableEntityMapper.to_orm(entity, self.table_name)
            orm.timestamp = now
            orm.etag = etag
            session.add(orm)
        elif existing is None:
            raise EntityNotFoundError(self.table_name, entity.partition_key, entity.row_key)
        elif op.operation is CommitOperation.UPDATE:
            etag = uuid.uuid4().hex
            TableEntityMapper.update_orm_from_entity(existing, entity)
            existing.timestamp = now
            existing.etag = etag
        else:
            session.delete(existing)
        
        # Keep later operations of the same batch consistent with this one
        session.flush()
        return etag
    
    def _fetch(self, system_filters: Tuple[Comparison, ...]) -> Iterable[TableEntity]:
        session: Session = self._session_factory()
        try:
            q = session.query(TableEntityORM).filter(TableEntityORM.table_name == self.table_name)
            for comparison in system_filters:
                column = _COLUMNS[comparison.field_name]
                value = comparison.value
                if isinstance(value, datetime):
                    # Stored timestamps are UTC
                    value = TableEntityMapper.as_utc(value)
                q = q.filter(_SQL_OPERATORS[comparison.op](column, value))
            q = q.order_by(TableEntityORM.partition_key, TableEntityORM.row_key)
            return [TableEntityMapper.to_domain(orm) for orm in q.all()]
        finally:
            session.close()
    
    def _get(self, key: EntityKey) -> Optional[TableEntity]:
        session: Session = self._session_factory()
        try:
            orm = session.get(TableEntityORM, (self.table_name, key.partition_key, key.row_key))
            return TableEntityMapper.to_domain(orm) if orm else None
        finally:
            session.close()
