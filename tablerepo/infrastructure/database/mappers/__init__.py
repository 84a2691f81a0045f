"""
Database Mappers - Shared ORM ↔ TableEntity conversion utilities.
"""

from .table_entity_mapper import TableEntityMapper

__all__ = [
    "TableEntityMapper",
]
