"""
Table Entity Models.

Row-shaped storage values and the value objects around them.

Value Objects:
- EntityKey: Composite (partition_key, row_key) identifier
- TableEntity: Storage row (keys + schema-light property bag)
- CommitContext: Storage entity handed to pre-commit hooks
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, TypeVar

from .exceptions import InvalidEntityKeyError


MAX_KEY_LENGTH = 1024
_FORBIDDEN_KEY_CHARS = frozenset("/\\#?")

SYSTEM_FIELDS = ("partition_key", "row_key", "timestamp", "etag")

TTable = TypeVar("TTable")


def _validate_key_part(name: str, value: Any) -> None:
    if not isinstance(value, str):
        raise InvalidEntityKeyError(f"{name} must be a string, got {type(value).__name__}")
    if not value:
        raise InvalidEntityKeyError(f"{name} must not be empty")
    if len(value) > MAX_KEY_LENGTH:
        raise InvalidEntityKeyError(
            f"{name} must be at most {MAX_KEY_LENGTH} characters, got {len(value)}"
        )
    for c in value:
        if c in _FORBIDDEN_KEY_CHARS or ord(c) < 0x20 or 0x7F <= ord(c) <= 0x9F:
            raise InvalidEntityKeyError(f"{name} contains forbidden character {c!r}: {value!r}")


@dataclass(frozen=True)
class EntityKey:
    """
    Composite key of a table row.
    
    Validated at construction so lookups never reach the store with a
    key it would reject.
    
    Examples:
        >>> key = EntityKey("customers", "42")
        >>> EntityKey.of(("customers", "42")) == key
        True
    """
    partition_key: str
    row_key: str
    
    def __post_init__(self):
        _validate_key_part("partition_key", self.partition_key)
        _validate_key_part("row_key", self.row_key)
    
    @classmethod
    def of(cls, value: Any) -> "EntityKey":
        """
        Coerce a key-like value into an EntityKey.
        
        Accepts an EntityKey, a (partition_key, row_key) tuple or a mapping
        with partition_key/row_key entries.
        
        Raises:
            InvalidEntityKeyError: If the value has none of those shapes
        """
        if isinstance(value, EntityKey):
            return value
        if isinstance(value, tuple) and len(value) == 2:
            return cls(value[0], value[1])
        if isinstance(value, Mapping) and "partition_key" in value and "row_key" in value:
            return cls(value["partition_key"], value["row_key"])
        raise InvalidEntityKeyError(f"Cannot build an EntityKey from {value!r}")
    
    def as_tuple(self) -> Tuple[str, str]:
        return (self.partition_key, self.row_key)
    
    def __str__(self) -> str:
        return f"{self.partition_key}/{self.row_key}"


@dataclass
class TableEntity:
    """
    Storage row: partition key, row key and a schema-light property bag.
    
    timestamp and etag are owned by the store and stamped on every write.
    """
    partition_key: str
    row_key: str
    properties: Dict[str, Any] = field(default_factory=dict)
    timestamp: Optional[datetime] = None
    etag: Optional[str] = None
    
    @property
    def key(self) -> EntityKey:
        return EntityKey(self.partition_key, self.row_key)
    
    def get(self, name: str, default: Any = None) -> Any:
        """Read a property, resolving system fields first."""
        if name in SYSTEM_FIELDS:
            return getattr(self, name)
        return self.properties.get(name, default)
    
    def has(self, name: str) -> bool:
        if name in SYSTEM_FIELDS:
            return getattr(self, name) is not None
        return name in self.properties
    
    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "partition_key": self.partition_key,
            "row_key": self.row_key,
            "properties": dict(self.properties),
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "etag": self.etag,
        }
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TableEntity":
        """Deserialize from dictionary."""
        timestamp = data.get("timestamp")
        return cls(
            partition_key=data["partition_key"],
            row_key=data["row_key"],
            properties=dict(data.get("properties") or {}),
            timestamp=datetime.fromisoformat(timestamp) if timestamp else None,
            etag=data.get("etag"),
        )


class EntityState(Enum):
    """Change-tracking state passed to attach()."""
    UNCHANGED = "unchanged"
    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    DETACHED = "detached"


class CommitOperation(Enum):
    """Kind of storage mutation a CommitContext describes."""
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


@dataclass
class CommitContext:
    """
    Storage entity about to be queued on an adapter.
    
    Hooks may mutate ``entity`` in place (e.g. stamp audit fields) or call
    ``cancel()`` to drop this single operation from the batch.
    """
    entity: Any
    operation: CommitOperation
    table_name: str
    cancelled: bool = False
    
    def cancel(self) -> None:
        self.cancelled = True


# (partition_key, row_key, timestamp, properties, etag) -> TTable
EntityResolver = Callable[[str, str, Optional[datetime], Dict[str, Any], Optional[str]], TTable]


def default_resolver(
    partition_key: str,
    row_key: str,
    timestamp: Optional[datetime],
    properties: Dict[str, Any],
    etag: Optional[str],
) -> TableEntity:
    """Resolver producing plain TableEntity rows."""
    return TableEntity(
        partition_key=partition_key,
        row_key=row_key,
        properties=dict(properties),
        timestamp=timestamp,
        etag=etag,
    )


__all__ = [
    "MAX_KEY_LENGTH",
    "SYSTEM_FIELDS",
    "EntityKey",
    "TableEntity",
    "EntityState",
    "CommitOperation",
    "CommitContext",
    "EntityResolver",
    "default_resolver",
]
