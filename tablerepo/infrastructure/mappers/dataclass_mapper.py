"""
Dataclass Entity Mapper.

Generic IEntityMapper for dataclass domain entities: two fields (or a
field and a fixed/computed partition) become the row keys, every other
field becomes a row property.
"""

import dataclasses
import inspect
import typing
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Type, TypeVar, Union

from tablerepo.domain.interfaces.entity_mapper import IEntityMapper
from tablerepo.domain.models.table_entity import TableEntity

TDomain = TypeVar("TDomain")

PartitionKeySource = Union[str, Callable[[Any], str]]


def _unwrap_optional(tp: Any) -> Any:
    if typing.get_origin(tp) is Union:
        args = [a for a in typing.get_args(tp) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return tp


def _is_class(tp: Any) -> bool:
    # list[str] and dict[str, int] pass isinstance(tp, type) before 3.11
    return inspect.isclass(tp) and typing.get_origin(tp) is None


def _is_enum_type(tp: Any) -> bool:
    return _is_class(tp) and issubclass(tp, Enum)


def _is_dataclass_type(tp: Any) -> bool:
    return _is_class(tp) and dataclasses.is_dataclass(tp)


def _key_to_str(value: Any) -> str:
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def _key_from_str(tp: Any, text: str) -> Any:
    tp = _unwrap_optional(tp)
    if tp is bool:
        return text == "True"
    if tp in (int, float):
        return tp(text)
    if tp is datetime:
        return datetime.fromisoformat(text)
    if _is_enum_type(tp):
        for member in tp:
            if str(member.value) == text:
                return member
        raise ValueError(f"{text!r} is not a valid {tp.__name__}")
    return text


def _property_to_store(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


def _property_from_store(tp: Any, value: Any) -> Any:
    tp = _unwrap_optional(tp)
    if value is None:
        return None
    if _is_enum_type(tp) and not isinstance(value, tp):
        return tp(value)
    if _is_dataclass_type(tp) and isinstance(value, Mapping):
        return _dataclass_from_store(tp, value)
    if tp is datetime and isinstance(value, str):
        return datetime.fromisoformat(value)
    return value


def _dataclass_from_store(cls: Any, data: Mapping[str, Any]) -> Any:
    """Rebuild a value object stored as a plain dict of its fields."""
    hints = typing.get_type_hints(cls)
    kwargs = {
        f.name: _property_from_store(hints.get(f.name, Any), data[f.name])
        for f in dataclasses.fields(cls)
        if f.init and f.name in data
    }
    return cls(**kwargs)


class DataclassEntityMapper(IEntityMapper[TableEntity, TDomain]):
    """
    Maps dataclass instances to TableEntity rows and back.
    
    Key fields are rendered with str() (Enums by value, datetimes in ISO
    format) and restored through the field's annotated type.
    
    Usage:
        @dataclass
        class Customer:
            region: str
            id: int
            name: str
        
        mapper = DataclassEntityMapper(Customer, row_key_field="id", partition_key_field="region")
        # or a fixed partition:
        mapper = DataclassEntityMapper(Customer, row_key_field="id", partition_key="customers")
    """
    
    def __init__(
        self,
        domain_cls: Type[TDomain],
        row_key_field: str,
        partition_key_field: Optional[str] = None,
        partition_key: Optional[PartitionKeySource] = None,
    ):
        if not dataclasses.is_dataclass(domain_cls):
            raise TypeError(f"{domain_cls!r} is not a dataclass")
        if (partition_key_field is None) == (partition_key is None):
            raise ValueError("Exactly one of partition_key_field or partition_key is required")
        
        self._domain_cls = domain_cls
        self._types: Dict[str, Any] = typing.get_type_hints(domain_cls)
        self._fields = [f for f in dataclasses.fields(domain_cls) if f.init]
        names = {f.name for f in self._fields}
        for key_field in (row_key_field, partition_key_field):
            if key_field is not None and key_field not in names:
                raise ValueError(f"{domain_cls.__name__} has no field {key_field!r}")
        
        self._row_key_field = row_key_field
        self._partition_key_field = partition_key_field
        self._partition_key = partition_key
    
    @property
    def domain_cls(self) -> Type[TDomain]:
        return self._domain_cls
    
    def map_to_entity(self, domain: TDomain) -> TableEntity:
        key_fields = {self._row_key_field, self._partition_key_field}
        properties = {
            f.name: _property_to_store(getattr(domain, f.name))
            for f in self._fields
            if f.name not in key_fields
        }
        return TableEntity(
            partition_key=self._partition_key_of(domain),
            row_key=_key_to_str(getattr(domain, self._row_key_field)),
            properties=properties,
        )
    
    def map_from_entity(self, entity: TableEntity) -> TDomain:
        kwargs: Dict[str, Any] = {}
        for f in self._fields:
            tp = self._types.get(f.name, Any)
            if f.name == self._row_key_field:
                kwargs[f.name] = _key_from_str(tp, entity.row_key)
            elif f.name == self._partition_key_field:
                kwargs[f.name] = _key_from_str(tp, entity.partition_key)
            elif f.name in entity.properties:
                kwargs[f.name] = _property_from_store(tp, entity.properties[f.name])
            elif f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING:
                # Older rows may predate the field
                kwargs[f.name] = None
        return self._domain_cls(**kwargs)
    
    def _partition_key_of(self, domain: TDomain) -> str:
        if self._partition_key_field is not None:
            return _key_to_str(getattr(domain, self._partition_key_field))
        if callable(self._partition_key):
            return _key_to_str(self._partition_key(domain))
        return self._partition_key
