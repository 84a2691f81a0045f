"""
Table Entity Mapper - TableEntity ↔ TableEntityORM conversion.

Purpose:
- Single source of truth for row (de)serialization
- Keeps property types that JSON cannot carry natively (datetime, bytes,
  UUID, Decimal) through a tagged encoding
"""

import base64
import dataclasses
import json
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

from tablerepo.domain.models.table_entity import TableEntity
from ..models import TableEntityORM

_TYPE_TAG = "__type__"


class TableEntityMapper:
    """
    Mapper for TableEntity ↔ TableEntityORM.
    
    Usage:
        orm = TableEntityMapper.to_orm(entity, "customers")
        entity = TableEntityMapper.to_domain(orm)
    """
    
    @staticmethod
    def to_domain(orm: TableEntityORM) -> TableEntity:
        """
        Convert ORM row to TableEntity.
        
        Args:
            orm: TableEntityORM instance
            
        Returns:
            TableEntity with decoded properties
        """
        return TableEntity(
            partition_key=orm.partition_key,
            row_key=orm.row_key,
            properties=TableEntityMapper.deserialize_properties(orm.properties),
            timestamp=TableEntityMapper.as_utc(orm.timestamp),
            etag=orm.etag,
        )
    
    @staticmethod
    def as_utc(value: Optional[datetime]) -> Optional[datetime]:
        """
        Timezone-aware UTC form of a stored timestamp.
        
        Backends without timezone support (SQLite) return naive values that
        hold UTC wall time.
        """
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    
    @staticmethod
    def to_orm(entity: TableEntity, table_name: str) -> TableEntityORM:
        """
        Convert TableEntity to a new ORM row.
        
        Args:
            entity: TableEntity to persist
            table_name: Logical table the row belongs to
        """
        return TableEntityORM(
            table_name=table_name,
            partition_key=entity.partition_key,
            row_key=entity.row_key,
            properties=TableEntityMapper.serialize_properties(entity.properties),
            timestamp=entity.timestamp,
            etag=entity.etag,
        )
    
    @staticmethod
    def update_orm_from_entity(orm: TableEntityORM, entity: TableEntity) -> None:
        """Replace the properties of an existing ORM row."""
        orm.properties = TableEntityMapper.serialize_properties(entity.properties)
        orm.timestamp = entity.timestamp
        orm.etag = entity.etag
    
    @staticmethod
    def serialize_properties(properties: Dict[str, Any]) -> str:
        """
        Serialize a property bag to JSON text.
        
        Handles types json.dumps can't handle directly:
        - datetime, bytes, UUID, Decimal: tagged so they decode to the same type
        - Enums: their .value
        - Dataclass value objects: their fields, as a plain dict
        """
        def default_serializer(obj):
            if isinstance(obj, datetime):
                return {_TYPE_TAG: "datetime", "value": obj.isoformat()}
            if isinstance(obj, (bytes, bytearray)):
                return {_TYPE_TAG: "bytes", "value": base64.b64encode(bytes(obj)).decode("ascii")}
            if isinstance(obj, uuid.UUID):
                return {_TYPE_TAG: "uuid", "value": str(obj)}
            if isinstance(obj, Decimal):
                return {_TYPE_TAG: "decimal", "value": str(obj)}
            if isinstance(obj, Enum):
                return obj.value
            if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
                return dataclasses.asdict(obj)
            raise TypeError(f"Property value of type {type(obj).__name__} is not storable")
        
        return json.dumps(properties or {}, default=default_serializer)
    
    @staticmethod
    def deserialize_properties(payload: str) -> Dict[str, Any]:
        """Deserialize JSON text produced by serialize_properties()."""
        if not payload:
            return {}
        
        def object_hook(obj):
            tag = obj.get(_TYPE_TAG)
            if tag is None or len(obj) != 2:
                return obj
            value = obj["value"]
            if tag == "datetime":
                return datetime.fromisoformat(value)
            if tag == "bytes":
                return base64.b64decode(value)
            if tag == "uuid":
                return uuid.UUID(value)
            if tag == "decimal":
                return Decimal(value)
            return obj
        
        return json.loads(payload, object_hook=object_hook)


__all__ = ["TableEntityMapper"]
