"""
Application Factories.

Factory pattern for wiring repositories to the storage backend selected
by TableRepoConfig.

Usage:
    factory = RepositoryFactory(TableRepoConfig.for_development())
    customers = factory.create("customers", CustomerMapper())
    avatars = factory.create_blob_repository("avatars")

Repositories created by one factory share a single engine/session factory.
"""

import logging
from typing import Dict, Optional, Type

from sqlalchemy.orm import sessionmaker

from tablerepo.config import TableRepoConfig, get_config
from tablerepo.domain.interfaces.entity_mapper import IEntityMapper
from tablerepo.domain.interfaces.storage_adapter import ITableStorageAdapter
from tablerepo.infrastructure.blob import FileSystemBlobRepository
from tablerepo.infrastructure.database import (
    SQLAlchemyTableStorageAdapter,
    create_table_session_factory,
)
from tablerepo.infrastructure.storage import InMemoryTable, InMemoryTableStorageAdapter

from .domain_mapped_repository import DomainMappedRepository

logger = logging.getLogger(__name__)


class RepositoryFactory:
    """
    Factory for DomainMappedRepository instances and their adapters.
    
    In "inmemory" mode each table name maps to one shared in-memory
    adapter store, so repositories created for the same table see the
    same rows.
    """
    
    def __init__(self, config: Optional[TableRepoConfig] = None):
        """
        Args:
            config: Configuration (global config when omitted)
        """
        self._config = config or get_config()
        self._session_factory: Optional[sessionmaker] = None
        self._inmemory_tables: Dict[str, InMemoryTable] = {}
    
    @property
    def config(self) -> TableRepoConfig:
        return self._config
    
    def create_adapter(self, table_name: str) -> ITableStorageAdapter:
        """
        Create a storage adapter for ``table_name``.
        
        Returns:
            InMemoryTableStorageAdapter or SQLAlchemyTableStorageAdapter
        """
        if self._config.storage_mode == "sqlalchemy":
            return SQLAlchemyTableStorageAdapter(self._get_session_factory(), table_name)
        table = self._inmemory_tables.setdefault(table_name, InMemoryTable())
        return InMemoryTableStorageAdapter(table_name, table)
    
    def create(
        self,
        table_name: str,
        mapper: IEntityMapper,
        repository_cls: Type[DomainMappedRepository] = DomainMappedRepository,
    ) -> DomainMappedRepository:
        """
        Create a repository for one table.
        
        Args:
            table_name: Logical table name
            mapper: Domain ↔ storage entity mapper
            repository_cls: DomainMappedRepository subclass (e.g. one overriding hooks)
        """
        adapter = self.create_adapter(table_name)
        logger.debug(
            f"Created {repository_cls.__name__} for table {table_name!r} "
            f"({self._config.storage_mode})"
        )
        return repository_cls(adapter, mapper)
    
    def create_blob_repository(self, container: str) -> FileSystemBlobRepository:
        """Create a blob repository for ``container``."""
        base_url = None
        if self._config.blob_base_url:
            base_url = f"{self._config.blob_base_url.rstrip('/')}/{container}"
        return FileSystemBlobRepository(self._config.blob_storage_path, container, base_url=base_url)
    
    def _get_session_factory(self) -> sessionmaker:
        if self._session_factory is None:
            self._session_factory = create_table_session_factory(
                self._config.db_url,
                echo=self._config.log_sql,
                wal_mode=self._config.sqlite_wal_mode,
            )
        return self._session_factory

