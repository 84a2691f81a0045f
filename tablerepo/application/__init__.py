"""
Application Layer - Repository orchestration and wiring.

This layer coordinates the unit-of-work journal, entity mappers and
storage adapters.
"""

from .domain_mapped_repository import DomainMappedRepository
from .factories import RepositoryFactory

__all__ = [
    "DomainMappedRepository",
    "RepositoryFactory",
]
