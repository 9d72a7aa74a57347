"""Unit tests for progression persistence (fitcoach/db/)"""
import pytest
from datetime import date
from unittest.mock import AsyncMock

import psycopg

from fitcoach.db.progression_queries import PostgresProgressionRepository
from fitcoach.exceptions import ConcurrentUpdateError, PersistenceError
from fitcoach.models.progression import ProgressionState, Tier


# ============================================================================
# In-memory Repository Tests
# ============================================================================

@pytest.mark.asyncio
async def test_in_memory_load_unknown_user(repository):
    """Test unknown users load as a zeroed state at version 0"""
    stored = await repository.load("nobody")

    assert stored.version == 0
    assert stored.state == ProgressionState()
    assert stored.tier is None


@pytest.mark.asyncio
async def test_in_memory_save_and_load(repository, test_user_id):
    """Test a save is visible on the next load with a bumped version"""
    state = ProgressionState(total_xp=100, current_streak=1, activity_dates={date(2024, 1, 1)})

    version = await repository.save(test_user_id, state, ["first_blood"], expected_version=0)
    stored = await repository.load(test_user_id)

    assert version == 1
    assert stored.version == 1
    assert stored.state == state
    assert repository.badge_rows(test_user_id) == {"first_blood"}


@pytest.mark.asyncio
async def test_in_memory_stale_version_rejected(repository, test_user_id):
    """Test a save against an outdated version fails and changes nothing"""
    first = ProgressionState(total_xp=100)
    await repository.save(test_user_id, first, [], expected_version=0)

    with pytest.raises(ConcurrentUpdateError):
        await repository.save(test_user_id, ProgressionState(total_xp=200), ["x"], expected_version=0)

    stored = await repository.load(test_user_id)
    assert stored.state == first
    assert repository.badge_rows(test_user_id) == set()


@pytest.mark.asyncio
async def test_in_memory_save_tier_keeps_state(repository, test_user_id):
    """Test storing a tier bumps the version and preserves progression"""
    state = ProgressionState(total_xp=300)
    await repository.save(test_user_id, state, [], expected_version=0)

    await repository.save_tier(test_user_id, Tier.ADVANCED)
    stored = await repository.load(test_user_id)

    assert stored.tier == Tier.ADVANCED
    assert stored.state == state
    assert stored.version == 2


# ============================================================================
# PostgreSQL Repository Tests
# ============================================================================

@pytest.mark.asyncio
async def test_postgres_load_missing_row(mock_database, mock_cursor, test_user_id):
    """Test a missing row yields a zeroed state"""
    mock_cursor.fetchone.return_value = None
    repo = PostgresProgressionRepository(mock_database)

    stored = await repo.load(test_user_id)

    assert stored.version == 0
    assert stored.state.total_xp == 0
    mock_cursor.execute.assert_called_once()
    assert "FROM user_progression" in mock_cursor.execute.call_args[0][0]


@pytest.mark.asyncio
async def test_postgres_load_existing_row(mock_database, mock_cursor, test_user_id):
    """Test rows and badges are mapped onto StoredProgression"""
    mock_cursor.fetchone.return_value = {
        "user_id": test_user_id,
        "total_xp": 700,
        "current_streak": 7,
        "activity_dates": [date(2024, 1, d) for d in range(1, 8)],
        "tier": 2,
        "version": 9,
    }
    mock_cursor.fetchall.return_value = [{"badge_id": "first_blood"}, {"badge_id": "iron_week"}]
    repo = PostgresProgressionRepository(mock_database)

    stored = await repo.load(test_user_id)

    assert stored.version == 9
    assert stored.tier == Tier.ADVANCED
    assert stored.state.total_xp == 700
    assert stored.state.current_streak == 7
    assert stored.state.workout_count == 7
    assert stored.state.granted_badges == frozenset({"first_blood", "iron_week"})


@pytest.mark.asyncio
async def test_postgres_save_first_row_inserts(mock_database, mock_cursor, test_user_id):
    """Test version 0 inserts the row and then the badges"""
    repo = PostgresProgressionRepository(mock_database)
    state = ProgressionState(total_xp=100, current_streak=1, activity_dates={date(2024, 1, 1)})

    version = await repo.save(test_user_id, state, ["first_blood"], expected_version=0)

    assert version == 1
    statements = [call[0][0] for call in mock_cursor.execute.call_args_list]
    assert "INSERT INTO user_progression" in statements[0]
    assert "INSERT INTO user_badges" in statements[1]
    assert mock_cursor.execute.call_args_list[1][0][1] == (test_user_id, "first_blood")


@pytest.mark.asyncio
async def test_postgres_save_updates_with_version_check(mock_database, mock_cursor, test_user_id):
    """Test later saves update guarded by the expected version"""
    repo = PostgresProgressionRepository(mock_database)
    state = ProgressionState(total_xp=500, current_streak=2)

    version = await repo.save(test_user_id, state, [], expected_version=4)

    assert version == 5
    sql, params = mock_cursor.execute.call_args[0]
    assert "UPDATE user_progression" in sql
    assert "version = %s" in sql
    assert params[-2:] == (test_user_id, 4)


@pytest.mark.asyncio
async def test_postgres_save_conflict(mock_database, mock_cursor, test_user_id):
    """Test zero affected rows raises ConcurrentUpdateError and skips badge inserts"""
    mock_cursor.rowcount = 0
    repo = PostgresProgressionRepository(mock_database)

    with pytest.raises(ConcurrentUpdateError) as exc_info:
        await repo.save(test_user_id, ProgressionState(total_xp=100), ["first_blood"], expected_version=3)

    assert exc_info.value.expected_version == 3
    assert mock_cursor.execute.call_count == 1


@pytest.mark.asyncio
async def test_postgres_save_wraps_driver_errors(mock_database, mock_cursor, test_user_id):
    """Test psycopg errors surface as PersistenceError with the cause attached"""
    mock_cursor.execute = AsyncMock(side_effect=psycopg.OperationalError("connection lost"))
    repo = PostgresProgressionRepository(mock_database)

    with pytest.raises(PersistenceError) as exc_info:
        await repo.save(test_user_id, ProgressionState(), [], expected_version=1)

    assert isinstance(exc_info.value.cause, psycopg.OperationalError)
    assert not isinstance(exc_info.value, ConcurrentUpdateError)


@pytest.mark.asyncio
async def test_postgres_save_tier(mock_database, mock_conn, mock_cursor, test_user_id):
    """Test tier upsert"""
    repo = PostgresProgressionRepository(mock_database)

    await repo.save_tier(test_user_id, Tier.ELITE)

    sql, params = mock_cursor.execute.call_args[0]
    assert "ON CONFLICT (user_id) DO UPDATE" in sql
    assert params == (test_user_id, 3)
    mock_conn.commit.assert_called_once()
