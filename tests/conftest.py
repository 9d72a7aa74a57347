"""Global test fixtures and utilities for fitcoach tests"""
import pytest
from datetime import date, timedelta
from unittest.mock import AsyncMock, MagicMock

from fitcoach.db.progression_repository import InMemoryProgressionRepository
from fitcoach.models.progression import ProgressionState
from fitcoach.monitoring.metrics import ProgressionMetrics


# ============================================================================
# Date Fixtures
# ============================================================================

@pytest.fixture
def day():
    """Reference calendar day (D)"""
    return date(2024, 3, 15)


@pytest.fixture
def days_before(day):
    """Build D-n dates: days_before(2) -> D-2"""
    def _days_before(n: int) -> date:
        return day - timedelta(days=n)
    return _days_before


# ============================================================================
# User & State Fixtures
# ============================================================================

@pytest.fixture
def test_user_id():
    """Standard test user ID"""
    return "user-123456789"


@pytest.fixture
def empty_state():
    """Progression for a brand new user"""
    return ProgressionState()


# ============================================================================
# Persistence Fixtures
# ============================================================================

@pytest.fixture
def repository():
    """Fresh in-memory progression repository"""
    return InMemoryProgressionRepository()


@pytest.fixture
def disabled_metrics():
    """Metrics container that records nothing"""
    return ProgressionMetrics(enabled=False)


@pytest.fixture
def mock_cursor():
    """Mock psycopg cursor with standard query results"""
    cursor = AsyncMock()
    cursor.fetchone = AsyncMock(return_value=None)
    cursor.fetchall = AsyncMock(return_value=[])
    cursor.execute = AsyncMock()
    cursor.rowcount = 1
    return cursor


@pytest.fixture
def mock_conn(mock_cursor):
    """Mock psycopg connection whose cursor() and transaction() work with async with"""
    conn = MagicMock()
    conn.cursor.return_value.__aenter__.return_value = mock_cursor
    conn.cursor.return_value.__aexit__.return_value = False
    conn.transaction.return_value.__aenter__.return_value = None
    conn.transaction.return_value.__aexit__.return_value = False
    conn.commit = AsyncMock()
    return conn


@pytest.fixture
def mock_database(mock_conn):
    """Mock Database whose connection() yields mock_conn"""
    database = MagicMock()
    database.connection.return_value.__aenter__.return_value = mock_conn
    database.connection.return_value.__aexit__.return_value = False
    return database
