"""
tablerepo - Domain-mapped repositories over a partitioned table store.

Application code works with domain entities; a unit-of-work journal
buffers inserts, updates and deletes, and commit() replays them in order
through an entity mapper against a storage adapter as one batch.

Architecture follows:
- Domain-Driven Design (domain / application / infrastructure layers)
- Repository + Unit of Work pattern
- Interface-based abstractions for mappers, adapters and hooks
"""

__version__ = "0.1.0"

# Domain Models
from tablerepo.domain.models import (
    EntityKey,
    TableEntity,
    EntityState,
    CommitOperation,
    CommitContext,
    TableQuery,
    JournalEntry,
    JournalEntryType,
    UnitOfWorkContainer,
    field,
    TableRepoError,
    InvalidEntityKeyError,
    StorageAdapterError,
    BatchCommitError,
    PostCommitHookError,
    BlobNotFoundError,
)

# Domain Interfaces
from tablerepo.domain.interfaces import (
    IEntityMapper,
    ICommitHooks,
    ITableStorageAdapter,
    IDuplexRepository,
    IUnitOfWork,
    IBlobRepository,
)

# Application
from tablerepo.application import (
    DomainMappedRepository,
    RepositoryFactory,
)

# Infrastructure
from tablerepo.infrastructure import (
    InMemoryTableStorageAdapter,
    SQLAlchemyTableStorageAdapter,
    DataclassEntityMapper,
    FileSystemBlobRepository,
)

# Configuration
from tablerepo.config import TableRepoConfig, configure_logging

__all__ = [
    # Version
    "__version__",
    # Domain Models
    "EntityKey",
    "TableEntity",
    "EntityState",
    "CommitOperation",
    "CommitContext",
    "TableQuery",
    "JournalEntry",
    "JournalEntryType",
    "UnitOfWorkContainer",
    "field",
    "TableRepoError",
    "InvalidEntityKeyError",
    "StorageAdapterError",
    "BatchCommitError",
    "PostCommitHookError",
    "BlobNotFoundError",
    # Domain Interfaces
    "IEntityMapper",
    "ICommitHooks",
    "ITableStorageAdapter",
    "IDuplexRepository",
    "IUnitOfWork",
    "IBlobRepository",
    # Application
    "DomainMappedRepository",
    "RepositoryFactory",
    # Infrastructure
    "InMemoryTableStorageAdapter",
    "SQLAlchemyTableStorageAdapter",
    "DataclassEntityMapper",
    "FileSystemBlobRepository",
    # Configuration
    "TableRepoConfig",
    "configure_logging",
]
