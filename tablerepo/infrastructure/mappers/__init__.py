"""Reusable domain ↔ TableEntity mappers."""

from .dataclass_mapper import DataclassEntityMapper

__all__ = ["DataclassEntityMapper"]
