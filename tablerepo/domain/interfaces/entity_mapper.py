"""
Entity Mapper Interface.

Bidirectional, side-effect free conversion between domain entities and
storage entities. Repositories treat mappers as swappable: different
mappers adapt the same storage shape to different domain shapes.
"""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

TTable = TypeVar("TTable")
TDomain = TypeVar("TDomain")


class IEntityMapper(ABC, Generic[TTable, TDomain]):
    """
    Domain ↔ storage entity mapper.
    
    Both directions must be total over every value the repository passes
    them, and ``map_from_entity(map_to_entity(e))`` must be observably
    equivalent to ``e`` for every field the mapper covers.
    """
    
    @abstractmethod
    def map_to_entity(self, domain: TDomain) -> TTable:
        """
        Convert a domain entity into a storage entity.
        
        Args:
            domain: Domain entity
            
        Returns:
            Storage entity carrying partition and row keys
        """
        pass
    
    @abstractmethod
    def map_from_entity(self, entity: TTable) -> TDomain:
        """
        Convert a storage entity into a domain entity.
        
        Args:
            entity: Storage entity read from the store
            
        Returns:
            Domain entity
        """
        pass
