"""Domain Models - Table entities, keys, filters and the unit-of-work journal."""

from .exceptions import (
    TableRepoError,
    InvalidEntityKeyError,
    StorageAdapterError,
    EntityConflictError,
    EntityNotFoundError,
    BatchCommitError,
    PostCommitHookError,
    BlobNotFoundError,
)
from .table_entity import (
    MAX_KEY_LENGTH,
    SYSTEM_FIELDS,
    EntityKey,
    TableEntity,
    EntityState,
    CommitOperation,
    CommitContext,
    EntityResolver,
    default_resolver,
)
from .filters import (
    ComparisonOperator,
    Filter,
    Comparison,
    And,
    Or,
    Not,
    field,
    all_of,
    matches,
)
from .table_query import TableQuery
from .journal import (
    JournalEntryType,
    JournalEntry,
    UnitOfWorkContainer,
)

__all__ = [
    # Exceptions
    "TableRepoError",
    "InvalidEntityKeyError",
    "StorageAdapterError",
    "EntityConflictError",
    "EntityNotFoundError",
    "BatchCommitError",
    "PostCommitHookError",
    "BlobNotFoundError",
    # Table entities
    "MAX_KEY_LENGTH",
    "SYSTEM_FIELDS",
    "EntityKey",
    "TableEntity",
    "EntityState",
    "CommitOperation",
    "CommitContext",
    "EntityResolver",
    "default_resolver",
    # Filters
    "ComparisonOperator",
    "Filter",
    "Comparison",
    "And",
    "Or",
    "Not",
    "field",
    "all_of",
    "matches",
    # Queries
    "TableQuery",
    # Journal
    "JournalEntryType",
    "JournalEntry",
    "UnitOfWorkContainer",
]
