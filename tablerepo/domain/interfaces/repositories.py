"""
Repository Interfaces.

Domain-level CRUD + query contract of a repository backed by a table
store, with the storage-entity escape hatches.
"""

from abc import abstractmethod
from typing import Any, Generic, List, Optional, TypeVar

from tablerepo.domain.models.filters import Filter
from tablerepo.domain.models.table_entity import EntityKey, EntityResolver, EntityState
from tablerepo.domain.models.table_query import TableQuery
from .unit_of_work import IUnitOfWork

TTable = TypeVar("TTable")
TDomain = TypeVar("TDomain")


class IDuplexRepository(IUnitOfWork, Generic[TTable, TDomain]):
    """
    Repository speaking domain entities on one side and storage entities
    on the other.
    
    Mutations are journaled and only reach the store on commit().
    Queries bypass the journal and never see uncommitted mutations.
    """
    
    @abstractmethod
    def insert(self, entity: TDomain) -> None:
        """
        Queue an insert.
        
        Raises:
            ValueError: If entity is None
        """
        pass
    
    @abstractmethod
    def update(self, entity: TDomain) -> None:
        """
        Queue an update.
        
        Raises:
            ValueError: If entity is None
        """
        pass
    
    @abstractmethod
    def delete(self, entity: TDomain) -> None:
        """
        Queue a delete.
        
        Raises:
            ValueError: If entity is None
        """
        pass
    
    @abstractmethod
    def query(self, *filters: Filter) -> List[TDomain]:
        """Domain entities whose rows match every filter."""
        pass
    
    @abstractmethod
    def query_with_resolver(self, resolver: EntityResolver, *filters: Filter) -> List[TDomain]:
        """Like query(), shaping raw rows through ``resolver`` before mapping."""
        pass
    
    @abstractmethod
    def table_query(self, *filters: Filter) -> TableQuery[TTable]:
        """Unmapped storage-entity query."""
        pass
    
    @abstractmethod
    def single(self, key: Any) -> Optional[TDomain]:
        """
        Point lookup by composite key.
        
        Returns:
            Domain entity if found, None otherwise
        """
        pass
    
    @abstractmethod
    def first(self, *filters: Filter) -> Optional[TDomain]:
        """
        First domain entity whose row matches every filter.
        
        Returns:
            Domain entity if found, None otherwise
        """
        pass
    
    @abstractmethod
    def attach(self, entity: TDomain, state: EntityState = EntityState.UNCHANGED) -> None:
        pass
    
    @abstractmethod
    def detach(self, entity: TDomain) -> None:
        pass
    
    @abstractmethod
    def convert_to_table_entity(self, entity: TDomain) -> TTable:
        pass
    
    @abstractmethod
    def convert_from_table_entity(self, entity: TTable) -> TDomain:
        pass
