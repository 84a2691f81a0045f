"""
Domain Layer - Table entities, the unit-of-work journal and abstract contracts.

This layer contains:
- Domain Models: Keys, storage entities, filter expressions, the journal
- Domain Interfaces: Abstract contracts (Ports) for mappers, adapters and repositories
"""

from . import models
from . import interfaces

__all__ = [
    "models",
    "interfaces",
]
