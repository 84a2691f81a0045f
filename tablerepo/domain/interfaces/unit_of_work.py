"""
Unit of Work Interface.

Transaction boundary of a repository: mutations are buffered until an
explicit commit and discarded on rollback.
"""

from abc import ABC, abstractmethod


class IUnitOfWork(ABC):
    """
    Unit of Work pattern interface.
    
    Usage:
        with repo:
            repo.insert(customer)
            repo.update(order)
            repo.commit()  # Both dispatched as one batch
    
    Design Decisions:
    - Context manager handles the unit-of-work lifecycle
    - Automatic rollback on exception
    - Explicit commit required
    """
    
    @abstractmethod
    def __enter__(self) -> "IUnitOfWork":
        """
        Begin a unit of work.
        
        Returns:
            Self for context manager usage
        """
        pass
    
    @abstractmethod
    def __exit__(self, exc_type, exc_val, exc_tb):
        """
        End the unit of work.
        
        Automatically rolls back on exception.
        """
        pass
    
    @abstractmethod
    def commit(self):
        """
        Commit the unit of work.
        
        Raises:
            StorageAdapterError: If the store rejects the batch
        """
        pass
    
    @abstractmethod
    def rollback(self):
        """
        Discard all pending, uncommitted changes.
        """
        pass
