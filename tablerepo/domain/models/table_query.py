"""
Table Query.

Lazy, restartable sequence of storage entities returned by adapters.
Each iteration re-runs the fetch, so the result reflects the store at
iteration time rather than at construction time.
"""

from typing import Callable, Generic, Iterable, Iterator, List, Optional, Tuple, TypeVar

from .filters import Filter, all_of

T = TypeVar("T")


class TableQuery(Generic[T]):
    """
    Deferred query over one table.
    
    Attributes:
        table_name: Table the query reads
        filters: ANDed filters the adapter was asked to apply
    """
    
    def __init__(
        self,
        fetch: Callable[[], Iterable[T]],
        table_name: str = "",
        filters: Tuple[Filter, ...] = (),
    ):
        self._fetch = fetch
        self.table_name = table_name
        self.filters = tuple(filters)
    
    def __iter__(self) -> Iterator[T]:
        return iter(self._fetch())
    
    def to_list(self) -> List[T]:
        """Execute the query and materialize every result."""
        return list(self)
    
    def first(self) -> Optional[T]:
        """First result, or None if the query matches nothing."""
        for item in self:
            return item
        return None
    
    @property
    def filter_string(self) -> str:
        """Table-store query string for the filters (empty when unfiltered)."""
        combined = all_of(self.filters)
        return combined.to_odata() if combined is not None else ""
    
    def __repr__(self) -> str:
        return f"TableQuery(table={self.table_name!r}, filter={self.filter_string!r})"


__all__ = ["TableQuery"]
