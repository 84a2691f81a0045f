"""
tablerepo Testing Fixtures

Provides common test doubles and contract tests for storage adapters
and repositories.

Architecture Decision:
- These helpers are part of tablerepo (not just tests) because:
  1. Users need them to test their own repositories, mappers and hooks
  2. Ensures consistent behaviour across all adapter implementations

Requires pytest (install the "test" extra).
"""

from datetime import datetime, timedelta, timezone
from typing import Any, List, Optional, Tuple

import pytest

from tablerepo.domain.interfaces.storage_adapter import ICommitHooks, ITableStorageAdapter
from tablerepo.domain.models.exceptions import (
    BatchCommitError,
    PostCommitHookError,
    StorageAdapterError,
)
from tablerepo.domain.models.filters import field
from tablerepo.domain.models.table_entity import CommitContext, EntityKey, TableEntity
from tablerepo.infrastructure.storage.inmemory_table_adapter import InMemoryTableStorageAdapter


# ═══════════════════════════════════════════════════════════════════════════════
# Recording Adapter
# ═══════════════════════════════════════════════════════════════════════════════


class RecordingStorageAdapter(InMemoryTableStorageAdapter):
    """
    In-memory adapter that records every call it receives.
    
    ``calls`` holds ("insert" | "update" | "delete" | "commit" | "discard",
    payload) tuples in call order; payload is the row key for mutations and
    the batch size for commits.
    
    Set ``fail_on_commit`` to make the next commit() raise after recording.
    
    Usage:
        adapter = RecordingStorageAdapter("customers")
        repo = DomainMappedRepository(adapter, mapper)
        repo.insert(customer)
        repo.commit()
        assert adapter.operations() == [("insert", ("eu", "42")), ("commit", 1)]
    """
    
    def __init__(self, table_name: str = "test"):
        super().__init__(table_name)
        self.calls: List[Tuple[str, Any]] = []
        self.fail_on_commit: Optional[Exception] = None
    
    def insert(self, entity: TableEntity) -> None:
        self.calls.append(("insert", (entity.partition_key, entity.row_key)))
        super().insert(entity)
    
    def update(self, entity: TableEntity) -> None:
        self.calls.append(("update", (entity.partition_key, entity.row_key)))
        super().update(entity)
    
    def delete(self, entity: TableEntity) -> None:
        self.calls.append(("delete", (entity.partition_key, entity.row_key)))
        super().delete(entity)
    
    def commit(self) -> None:
        self.calls.append(("commit", self.pending_count))
        if self.fail_on_commit is not None:
            error, self.fail_on_commit = self.fail_on_commit, None
            self.discard()
            raise error
        super().commit()
    
    def discard(self) -> None:
        self.calls.append(("discard", self.pending_count))
        super().discard()
    
    def operations(self) -> List[Tuple[str, Any]]:
        """Recorded calls without discards."""
        return [c for c in self.calls if c[0] != "discard"]


class RecordingHooks(ICommitHooks):
    """Commit hooks that record every invocation."""
    
    def __init__(self):
        self.events: List[Tuple[str, Any]] = []
    
    def on_before_insert(self, context: CommitContext) -> None:
        self.events.append(("before_insert", context.entity.row_key))
    
    def on_before_update(self, context: CommitContext) -> None:
        self.events.append(("before_update", context.entity.row_key))
    
    def on_before_delete(self, context: CommitContext) -> None:
        self.events.append(("before_delete", context.entity.row_key))
    
    def on_batch_committed(self, table_name: str, operation_count: int) -> None:
        self.events.append(("batch_committed", operation_count))


# ═══════════════════════════════════════════════════════════════════════════════
# Adapter Contract Tests
# ═══════════════════════════════════════════════════════════════════════════════


class StorageAdapterTestMixin:
    """
    Mixin providing standard tests for ITableStorageAdapter implementations.
    
    Ensures all adapters conform to the same interface and behavior.
    
    Usage:
        class TestMyAdapter(StorageAdapterTestMixin):
            def create_adapter(self, table_name: str) -> ITableStorageAdapter:
                return MyAdapter(table_name)
    """
    
    def create_adapter(self, table_name: str = "contract") -> ITableStorageAdapter:
        """Override this to create your adapter instance."""
        raise NotImplementedError("Subclass must implement create_adapter()")
    
    @staticmethod
    def _row(pk: str, rk: str, **properties) -> TableEntity:
        return TableEntity(partition_key=pk, row_key=rk, properties=properties)
    
    def _seed(self, adapter: ITableStorageAdapter, *rows: TableEntity) -> None:
        for row in rows:
            adapter.insert(row)
        adapter.commit()
    
    # ═══════════════════════════════════════════════════════════════════════
    # Batch Tests
    # ═══════════════════════════════════════════════════════════════════════
    
    def test_mutations_are_invisible_until_commit(self):
        """Queued operations do not reach the store before commit()."""
        adapter = self.create_adapter()
        adapter.insert(self._row("p", "1", name="a"))
        
        assert adapter.pending_count == 1
        assert adapter.single(EntityKey("p", "1")) is None
        
        adapter.commit()
        
        assert adapter.pending_count == 0
        assert adapter.single(EntityKey("p", "1")).properties == {"name": "a"}
    
    def test_commit_stamps_timestamp_and_etag(self):
        adapter = self.create_adapter()
        row = self._row("p", "1", name="a")
        self._seed(adapter, row)
        
        stored = adapter.single(EntityKey("p", "1"))
        assert stored.timestamp is not None
        assert stored.timestamp.utcoffset() == timedelta(0)
        assert stored.etag
        assert row.etag == stored.etag
        assert row.timestamp == stored.timestamp
    
    def test_update_replaces_properties(self):
        adapter = self.create_adapter()
        self._seed(adapter, self._row("p", "1", name="a", age=1))
        
        adapter.update(self._row("p", "1", name="b"))
        adapter.commit()
        
        assert adapter.single(EntityKey("p", "1")).properties == {"name": "b"}
    
    def test_delete_removes_row(self):
        adapter = self.create_adapter()
        self._seed(adapter, self._row("p", "1"))
        
        adapter.delete(self._row("p", "1"))
        adapter.commit()
        
        assert adapter.single(EntityKey("p", "1")) is None
    
    def test_operations_apply_in_order_within_batch(self):
        """Insert then update then delete of one key in a single batch."""
        adapter = self.create_adapter()
        adapter.insert(self._row("p", "1", v=1))
        adapter.update(self._row("p", "1", v=2))
        adapter.insert(self._row("p", "2", v=3))
        adapter.delete(self._row("p", "1"))
        adapter.commit()
        
        assert adapter.single(EntityKey("p", "1")) is None
        assert adapter.single(EntityKey("p", "2")).properties == {"v": 3}
    
    def test_duplicate_insert_fails_whole_batch(self):
        adapter = self.create_adapter()
        self._seed(adapter, self._row("p", "1"))
        
        adapter.insert(self._row("p", "2"))
        adapter.insert(self._row("p", "1"))
        
        with pytest.raises(BatchCommitError) as exc_info:
            adapter.commit()
        
        assert exc_info.value.index == 1
        assert exc_info.value.operation == "insert"
        assert adapter.single(EntityKey("p", "2")) is None
        assert adapter.pending_count == 0
    
    def test_update_of_missing_row_fails(self):
        adapter = self.create_adapter()
        adapter.update(self._row("p", "missing"))
        
        with pytest.raises(StorageAdapterError):
            adapter.commit()
    
    def test_delete_of_missing_row_fails(self):
        adapter = self.create_adapter()
        adapter.delete(self._row("p", "missing"))
        
        with pytest.raises(StorageAdapterError):
            adapter.commit()
    
    def test_discard_drops_batch(self):
        adapter = self.create_adapter()
        adapter.insert(self._row("p", "1"))
        adapter.discard()
        adapter.commit()
        
        assert adapter.single(EntityKey("p", "1")) is None
    
    def test_empty_commit_succeeds(self):
        adapter = self.create_adapter()
        adapter.commit()
        assert adapter.pending_count == 0
    
    # ═══════════════════════════════════════════════════════════════════════
    # Hook Tests
    # ═══════════════════════════════════════════════════════════════════════
    
    def test_hooks_fire_per_operation_and_once_per_batch(self):
        adapter = self.create_adapter()
        hooks = RecordingHooks()
        adapter.register_hooks(hooks)
        
        adapter.insert(self._row("p", "1"))
        adapter.insert(self._row("p", "2"))
        adapter.update(self._row("p", "1"))
        adapter.delete(self._row("p", "2"))
        
        assert hooks.events == [
            ("before_insert", "1"),
            ("before_insert", "2"),
            ("before_update", "1"),
            ("before_delete", "2"),
        ]
        
        adapter.commit()
        
        assert hooks.events[-1] == ("batch_committed", 4)
        assert [e for e in hooks.events if e[0] == "batch_committed"] == [("batch_committed", 4)]
    
    def test_batch_hook_not_fired_on_failure(self):
        adapter = self.create_adapter()
        hooks = RecordingHooks()
        adapter.register_hooks(hooks)
        adapter.update(self._row("p", "missing"))
        
        with pytest.raises(StorageAdapterError):
            adapter.commit()
        
        assert ("batch_committed", 1) not in hooks.events
    
    def test_failing_batch_hook_keeps_batch_committed(self):
        """A raising on_batch_committed neither undoes the batch nor skips other hooks."""
        class Broken(ICommitHooks):
            def on_batch_committed(self, table_name, operation_count):
                raise RuntimeError("hook failed")
        
        adapter = self.create_adapter()
        hooks = RecordingHooks()
        adapter.register_hooks(Broken())
        adapter.register_hooks(hooks)
        adapter.insert(self._row("p", "1"))
        
        with pytest.raises(PostCommitHookError) as exc_info:
            adapter.commit()
        
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert exc_info.value.operation_count == 1
        assert not isinstance(exc_info.value, StorageAdapterError)
        assert hooks.events[-1] == ("batch_committed", 1)
        assert adapter.pending_count == 0
        assert adapter.single(EntityKey("p", "1")) is not None
    
    def test_hook_can_mutate_row(self):
        class Stamp(ICommitHooks):
            def on_before_insert(self, context):
                context.entity.properties["stamped"] = True
        
        adapter = self.create_adapter()
        adapter.register_hooks(Stamp())
        self._seed(adapter, self._row("p", "1"))
        
        assert adapter.single(EntityKey("p", "1")).properties == {"stamped": True}
    
    def test_hook_can_cancel_operation(self):
        class SkipDeletes(ICommitHooks):
            def on_before_delete(self, context):
                context.cancel()
        
        adapter = self.create_adapter()
        adapter.register_hooks(SkipDeletes())
        self._seed(adapter, self._row("p", "1"))
        
        adapter.delete(self._row("p", "1"))
        
        assert adapter.pending_count == 0
        adapter.commit()
        assert adapter.single(EntityKey("p", "1")) is not None
    
    # ═══════════════════════════════════════════════════════════════════════
    # Query Tests
    # ═══════════════════════════════════════════════════════════════════════
    
    def test_query_ands_filters(self):
        adapter = self.create_adapter()
        self._seed(
            adapter,
            self._row("a", "1", age=10),
            self._row("a", "2", age=30),
            self._row("b", "3", age=40),
        )
        
        rows = adapter.query(field("partition_key") == "a", field("age") > 20).to_list()
        
        assert [(r.partition_key, r.row_key) for r in rows] == [("a", "2")]
    
    def test_query_without_filters_returns_all_in_key_order(self):
        adapter = self.create_adapter()
        self._seed(adapter, self._row("b", "1"), self._row("a", "2"), self._row("a", "1"))
        
        keys = [(r.partition_key, r.row_key) for r in adapter.query()]
        
        assert keys == [("a", "1"), ("a", "2"), ("b", "1")]
    
    def test_query_is_lazy_and_restartable(self):
        adapter = self.create_adapter()
        query = adapter.query(field("partition_key") == "p")
        
        assert query.to_list() == []
        
        self._seed(adapter, self._row("p", "1"))
        
        assert len(query.to_list()) == 1
        assert len(query.to_list()) == 1
    
    def test_query_by_timestamp_range(self):
        adapter = self.create_adapter()
        before = datetime.now(timezone.utc) - timedelta(hours=1)
        after = datetime.now(timezone.utc) + timedelta(hours=1)
        self._seed(adapter, self._row("p", "1"), self._row("p", "2"))
        
        rows = adapter.query(field("timestamp") >= before, field("timestamp") < after).to_list()
        
        assert [r.row_key for r in rows] == ["1", "2"]
        assert adapter.query(field("timestamp") >= after).to_list() == []
    
    def test_timestamp_filter_in_other_offset(self):
        adapter = self.create_adapter()
        self._seed(adapter, self._row("p", "1"))
        plus_five = timezone(timedelta(hours=5))
        before = (datetime.now(timezone.utc) - timedelta(hours=1)).astimezone(plus_five)
        
        rows = adapter.query(field("timestamp") > before).to_list()
        
        assert [r.row_key for r in rows] == ["1"]
    
    def test_query_with_resolver(self):
        adapter = self.create_adapter()
        self._seed(adapter, self._row("p", "1", name="a"))
        
        names = adapter.query_with_resolver(
            lambda pk, rk, ts, props, etag: f"{pk}:{rk}:{props['name']}"
        ).to_list()
        
        assert names == ["p:1:a"]
    
    def test_query_does_not_see_queued_operations(self):
        adapter = self.create_adapter()
        adapter.insert(self._row("p", "1"))
        
        assert adapter.query().to_list() == []
    
    def test_single_and_first_return_none_when_absent(self):
        adapter = self.create_adapter()
        
        assert adapter.single(EntityKey("p", "nope")) is None
        assert adapter.first(field("name") == "nobody") is None
    
    def test_tables_are_isolated(self):
        adapter = self.create_adapter("left")
        other = self.create_adapter("right")
        self._seed(adapter, self._row("p", "1"))
        
        assert other.single(EntityKey("p", "1")) is None
