"""
tablerepo Testing Utilities

Provides test doubles and contract tests for tablerepo components.

Usage:
    from tablerepo.testing import RecordingStorageAdapter, StorageAdapterTestMixin
"""

from tablerepo.testing.fixtures import (
    RecordingStorageAdapter,
    RecordingHooks,
    StorageAdapterTestMixin,
)

__all__ = [
    "RecordingStorageAdapter",
    "RecordingHooks",
    "StorageAdapterTestMixin",
]
