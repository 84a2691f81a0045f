"""
Filter Expressions.

Composable boolean predicates over storage-entity fields. The repository
core only passes them through; each storage adapter compiles them to its
native query form (SQL clauses, table-store query strings, or in-process
evaluation).

Usage:
    from tablerepo.domain.models.filters import field
    
    adults = field("partition_key") == "customers"
    adults &= field("age") >= 18
    repo.query(adults, ~(field("status") == "closed"))

Multiple filters passed to a query are ANDed together.
"""

from __future__ import annotations

import operator
from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

from .table_entity import SYSTEM_FIELDS


class ComparisonOperator(Enum):
    EQ = "eq"
    NE = "ne"
    GT = "gt"
    GE = "ge"
    LT = "lt"
    LE = "le"


_PY_OPERATORS: Dict[ComparisonOperator, Callable[[Any, Any], bool]] = {
    ComparisonOperator.EQ: operator.eq,
    ComparisonOperator.NE: operator.ne,
    ComparisonOperator.GT: operator.gt,
    ComparisonOperator.GE: operator.ge,
    ComparisonOperator.LT: operator.lt,
    ComparisonOperator.LE: operator.le,
}

# Wire names of the store-owned columns
_WIRE_NAMES = {
    "partition_key": "PartitionKey",
    "row_key": "RowKey",
    "timestamp": "Timestamp",
    "etag": "ETag",
}


def _read_field(entity: Any, name: str) -> Tuple[bool, Any]:
    """Return (present, value) for a field of a storage entity."""
    has = getattr(entity, "has", None)
    if callable(has):
        if not has(name):
            return False, None
        return True, entity.get(name)
    if isinstance(entity, dict):
        return (name in entity), entity.get(name)
    if hasattr(entity, name):
        return True, getattr(entity, name)
    return False, None


class Filter(ABC):
    """Base node of a filter expression tree."""
    
    @abstractmethod
    def evaluate(self, entity: Any) -> bool:
        """Evaluate the predicate against a storage entity."""
        pass
    
    @abstractmethod
    def to_odata(self) -> str:
        """Render in the table-store query string syntax."""
        pass
    
    def __and__(self, other: "Filter") -> "Filter":
        return And(self, other)
    
    def __or__(self, other: "Filter") -> "Filter":
        return Or(self, other)
    
    def __invert__(self) -> "Filter":
        return Not(self)
    
    def __str__(self) -> str:
        return self.to_odata()


class Comparison(Filter):
    """Leaf node: ``field <op> value``."""
    
    def __init__(self, field_name: str, op: ComparisonOperator, value: Any):
        if not field_name:
            raise ValueError("field_name must not be empty")
        self.field_name = field_name
        self.op = ComparisonOperator(op)
        self.value = value
    
    @property
    def is_system_field(self) -> bool:
        return self.field_name in SYSTEM_FIELDS
    
    def evaluate(self, entity: Any) -> bool:
        present, actual = _read_field(entity, self.field_name)
        if not present:
            # A missing property differs from every value
            return self.op is ComparisonOperator.NE
        try:
            return bool(_PY_OPERATORS[self.op](actual, self.value))
        except TypeError:
            return False
    
    def to_odata(self) -> str:
        name = _WIRE_NAMES.get(self.field_name, self.field_name)
        return f"{name} {self.op.value} {format_literal(self.value)}"
    
    def __eq__(self, other: object) -> bool:
        return (
            isinstance(other, Comparison)
            and other.field_name == self.field_name
            and other.op is self.op
            and other.value == self.value
        )
    
    def __hash__(self) -> int:
        return hash((self.field_name, self.op, repr(self.value)))
    
    def __repr__(self) -> str:
        return f"Comparison({self.field_name!r}, {self.op.value}, {self.value!r})"


class _Composite(Filter):
    _joiner = ""
    
    def __init__(self, *filters: Filter):
        if not filters:
            raise ValueError(f"{type(self).__name__} requires at least one filter")
        flat = []
        for f in filters:
            if not isinstance(f, Filter):
                raise TypeError(f"Expected Filter, got {type(f).__name__}")
            # (a and b) and c -> and(a, b, c)
            if type(f) is type(self):
                flat.extend(f.filters)
            else:
                flat.append(f)
        self.filters: Tuple[Filter, ...] = tuple(flat)
    
    def to_odata(self) -> str:
        if len(self.filters) == 1:
            return self.filters[0].to_odata()
        return f" {self._joiner} ".join(f"({f.to_odata()})" for f in self.filters)
    
    def __eq__(self, other: object) -> bool:
        return type(other) is type(self) and other.filters == self.filters
    
    def __hash__(self) -> int:
        return hash((type(self).__name__, self.filters))
    
    def __repr__(self) -> str:
        inner = ", ".join(repr(f) for f in self.filters)
        return f"{type(self).__name__}({inner})"


class And(_Composite):
    _joiner = "and"
    
    def evaluate(self, entity: Any) -> bool:
        return all(f.evaluate(entity) for f in self.filters)


class Or(_Composite):
    _joiner = "or"
    
    def evaluate(self, entity: Any) -> bool:
        return any(f.evaluate(entity) for f in self.filters)


class Not(Filter):
    def __init__(self, inner: Filter):
        if not isinstance(inner, Filter):
            raise TypeError(f"Expected Filter, got {type(inner).__name__}")
        self.inner = inner
    
    def evaluate(self, entity: Any) -> bool:
        return not self.inner.evaluate(entity)
    
    def to_odata(self) -> str:
        return f"not ({self.inner.to_odata()})"
    
    def __eq__(self, other: object) -> bool:
        return isinstance(other, Not) and other.inner == self.inner
    
    def __hash__(self) -> int:
        return hash(("Not", self.inner))
    
    def __repr__(self) -> str:
        return f"Not({self.inner!r})"


class FieldRef:
    """
    Builder for comparisons on one field.
    
    Comparison operators return Filter nodes instead of booleans.
    """
    
    __hash__ = None  # type: ignore[assignment]
    
    def __init__(self, name: str):
        self.name = name
    
    def __eq__(self, value: Any) -> Comparison:  # type: ignore[override]
        return Comparison(self.name, ComparisonOperator.EQ, value)
    
    def __ne__(self, value: Any) -> Comparison:  # type: ignore[override]
        return Comparison(self.name, ComparisonOperator.NE, value)
    
    def __gt__(self, value: Any) -> Comparison:
        return Comparison(self.name, ComparisonOperator.GT, value)
    
    def __ge__(self, value: Any) -> Comparison:
        return Comparison(self.name, ComparisonOperator.GE, value)
    
    def __lt__(self, value: Any) -> Comparison:
        return Comparison(self.name, ComparisonOperator.LT, value)
    
    def __le__(self, value: Any) -> Comparison:
        return Comparison(self.name, ComparisonOperator.LE, value)


def field(name: str) -> FieldRef:
    """Start a comparison on ``name``."""
    return FieldRef(name)


def format_literal(value: Any) -> str:
    """Format a Python value as a table-store query literal."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return format_literal(value.value)
    if isinstance(value, int):
        # Values outside Int32 need the Int64 suffix
        if -(2 ** 31) <= value < 2 ** 31:
            return str(value)
        return f"{value}L"
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, datetime):
        return f"datetime'{value.isoformat()}'"
    text = str(value).replace("'", "''")
    return f"'{text}'"


def all_of(filters: Iterable[Filter]) -> Optional[Filter]:
    """AND a sequence of filters; None when the sequence is empty."""
    filters = tuple(filters)
    if not filters:
        return None
    if len(filters) == 1:
        return filters[0]
    return And(*filters)


def matches(entity: Any, filters: Iterable[Filter]) -> bool:
    """True if ``entity`` satisfies every filter (vacuously true for none)."""
    return all(f.evaluate(entity) for f in filters)


def split_system_filters(filters: Iterable[Filter]) -> Tuple[Tuple[Comparison, ...], Tuple[Filter, ...]]:
    """
    Partition top-level ANDed filters into system-field comparisons and the rest.
    
    Adapters push the first group down to their index and evaluate the
    second group in process.
    """
    system = []
    rest = []
    for f in filters:
        parts = f.filters if isinstance(f, And) else (f,)
        for part in parts:
            if isinstance(part, Comparison) and part.is_system_field:
                system.append(part)
            else:
                rest.append(part)
    return tuple(system), tuple(rest)


__all__ = [
    "ComparisonOperator",
    "Filter",
    "Comparison",
    "And",
    "Or",
    "Not",
    "FieldRef",
    "field",
    "format_literal",
    "all_of",
    "matches",
    "split_system_filters",
]
