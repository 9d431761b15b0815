"""
Shared pytest fixtures and configuration for sqlpersist tests.

This module provides:
- A file-backed SQLite data source (pooled through SQLAlchemy) per test
- A manager factory and a pre-created ACCOUNT table
- A MagicMock data source for driver-failure paths
- Settings cache cleanup for test isolation

Usage:
    Fixtures are auto-discovered by pytest. Simply use them as function
    arguments (pytest injects them automatically).

    def test_insert(account_factory):
        tx = account_factory.create_transaction_manager()
        ...
"""

import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Ensure sqlpersist package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sqlpersist.core import PersistenceManagerFactory, SqlStatement, create_data_source
from sqlpersist.core.settings import clear_settings_cache

from tests._support import CREATE_ACCOUNT_TABLE, description


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)

        if "integration" in str(test_path):
            item.add_marker(pytest.mark.integration)

        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clean_settings_cache():
    """Drop cached settings before and after each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
def data_source(tmp_path: Path):
    """Pooled data source over a fresh SQLite file."""
    ds = create_data_source(f"sqlite:///{tmp_path / 'persist.db'}")
    yield ds
    ds.dispose()


@pytest.fixture
def factory(data_source) -> PersistenceManagerFactory:
    return PersistenceManagerFactory(data_source)


@pytest.fixture
def account_factory(factory) -> PersistenceManagerFactory:
    """Factory whose database already has an empty ACCOUNT table."""
    tx = factory.create_transaction_manager()
    tx.begin()
    tx.persist(SqlStatement(CREATE_ACCOUNT_TABLE))
    tx.commit()
    return factory


@pytest.fixture
def insert_account():
    """Return a fresh INSERT statement for one account name."""

    def _insert(name: str) -> SqlStatement:
        return SqlStatement("INSERT INTO ACCOUNT(NAME) VALUES(?)").set_parameter(1, name)

    return _insert


# =============================================================================
# Mock Driver Fixtures
# =============================================================================


@pytest.fixture
def mock_data_source() -> MagicMock:
    """Data source whose connection and cursor are MagicMocks.

    The cursor reports one affected row, no generated key and no result
    description (a plain write); tests override what they need via
    ``mock_data_source.get_connection.return_value.cursor.return_value``.
    """
    data_source = MagicMock(name="data_source")
    conn = data_source.get_connection.return_value
    cursor = conn.cursor.return_value
    cursor.rowcount = 1
    cursor.lastrowid = None
    cursor.description = None
    cursor.fetchone.return_value = None
    cursor.fetchall.return_value = []
    return data_source
