"""
Table Repository Exceptions.

Exception hierarchy for the repository core and its storage adapters.

Design Principles:
- Hierarchy: All inherit from TableRepoError base
- Rich context: Exceptions carry the key / batch position involved
- Absence is never an error: lookups return None instead of raising
"""

from typing import Optional


class TableRepoError(Exception):
    """
    Base exception for table repository errors.
    
    Allows catching all repository and adapter errors with one handler.
    """
    pass


class InvalidEntityKeyError(TableRepoError, ValueError):
    """
    Invalid partition/row key.
    
    Raised when an EntityKey fails validation:
    - Not a string or empty
    - Contains characters the table store forbids in keys
    - Longer than the store's key limit
    """
    pass


class StorageAdapterError(TableRepoError):
    """
    Base exception for failures reported by a storage adapter.
    
    Propagated from DomainMappedRepository.commit() unmodified.
    """
    pass


class EntityConflictError(StorageAdapterError):
    """Insert targeted a key that already holds a row."""
    
    def __init__(self, table_name: str, partition_key: str, row_key: str):
        super().__init__(
            f"Entity ({partition_key!r}, {row_key!r}) already exists in table {table_name!r}"
        )
        self.table_name = table_name
        self.partition_key = partition_key
        self.row_key = row_key


class EntityNotFoundError(StorageAdapterError):
    """Update or delete targeted a key with no stored row."""
    
    def __init__(self, table_name: str, partition_key: str, row_key: str):
        super().__init__(
            f"Entity ({partition_key!r}, {row_key!r}) not found in table {table_name!r}"
        )
        self.table_name = table_name
        self.partition_key = partition_key
        self.row_key = row_key


class BatchCommitError(StorageAdapterError):
    """
    A batch could not be executed.
    
    Attributes:
        index: Position of the failing operation in the batch (None for
            transport-level failures not tied to one operation)
        operation: Kind of the failing operation ("insert", "update", "delete")
    """
    
    def __init__(
        self,
        message: str,
        index: Optional[int] = None,
        operation: Optional[str] = None,
    ):
        super().__init__(message)
        self.index = index
        self.operation = operation


class PostCommitHookError(TableRepoError):
    """
    An on_batch_committed hook failed after the batch was stored.
    
    Not a StorageAdapterError: the rows are written and the unit of work
    counts as committed.
    
    Attributes:
        table_name: Table whose batch was committed
        operation_count: Size of the committed batch
    """
    
    def __init__(self, table_name: str, operation_count: int):
        super().__init__(
            f"Batch of {operation_count} operation(s) on table {table_name!r} was committed "
            f"but an on_batch_committed hook failed"
        )
        self.table_name = table_name
        self.operation_count = operation_count


class BlobNotFoundError(TableRepoError):
    """Requested blob does not exist in the container."""
    
    def __init__(self, name: str):
        super().__init__(f"Blob {name!r} not found")
        self.name = name


__all__ = [
    "TableRepoError",
    "InvalidEntityKeyError",
    "StorageAdapterError",
    "EntityConflictError",
    "EntityNotFoundError",
    "BatchCommitError",
    "PostCommitHookError",
    "BlobNotFoundError",
]
