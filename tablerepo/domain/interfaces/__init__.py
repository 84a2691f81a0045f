"""Domain Interfaces - Abstract contracts (Ports) for the domain layer."""

from .entity_mapper import IEntityMapper
from .storage_adapter import ICommitHooks, ITableStorageAdapter
from .unit_of_work import IUnitOfWork
from .repositories import IDuplexRepository
from .blob_repository import IBlobRepository

__all__ = [
    # Mapping
    "IEntityMapper",
    # Storage
    "ICommitHooks",
    "ITableStorageAdapter",
    # Repositories
    "IUnitOfWork",
    "IDuplexRepository",
    "IBlobRepository",
]
