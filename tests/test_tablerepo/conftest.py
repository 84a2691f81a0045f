"""
Pytest fixtures for tablerepo tests.
"""

import pytest

from tablerepo.application import DomainMappedRepository
from tablerepo.config import reset_config
from tablerepo.infrastructure.database import create_table_session_factory
from tablerepo.testing import RecordingStorageAdapter
from tests.mocks.table_objects import create_customer_mapper


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch):
    """Keep the global config and TABLEREPO_* variables out of each test."""
    for name in (
        "TABLEREPO_STORAGE_MODE",
        "TABLEREPO_DATABASE_URL",
        "TABLEREPO_DATA_DIR",
        "TABLEREPO_BLOB_PATH",
        "TABLEREPO_BLOB_URL",
        "TABLEREPO_LOG_SQL",
        "TABLEREPO_LOG_LEVEL",
        "TABLEREPO_SQLITE_WAL",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def customer_mapper():
    return create_customer_mapper()


@pytest.fixture
def adapter():
    """Recording in-memory adapter for the customers table."""
    return RecordingStorageAdapter("customers")


@pytest.fixture
def repo(adapter, customer_mapper):
    return DomainMappedRepository(adapter, customer_mapper)


@pytest.fixture
def session_factory():
    """Session factory over an in-memory SQLite table store."""
    return create_table_session_factory("sqlite:///:memory:")
