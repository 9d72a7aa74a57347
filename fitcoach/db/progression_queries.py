"""Progression database queries (PostgreSQL via psycopg)"""
import logging
from typing import Iterable

import psycopg

from fitcoach.db.connection import Database, db as default_db
from fitcoach.exceptions import ConcurrentUpdateError, PersistenceError
from fitcoach.models.progression import ProgressionState, StoredProgression, Tier

logger = logging.getLogger(__name__)


class PostgresProgressionRepository:
    """
    ProgressionRepository backed by the user_progression and user_badges tables

    The version column provides compare-and-swap; user_badges is unique on
    (user_id, badge_id) so a badge can only ever be stored once.
    """

    def __init__(self, database: Database = default_db):
        self.db = database

    async def load(self, user_id: str) -> StoredProgression:
        """Load progression and granted badges (zeroed state if no row exists)"""
        try:
            async with self.db.connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        """
                        SELECT user_id, total_xp, current_streak, activity_dates, tier, version
                        FROM user_progression
                        WHERE user_id = %s
                        """,
                        (user_id,)
                    )
                    row = await cur.fetchone()

                    if not row:
                        return StoredProgression(user_id=user_id)

                    await cur.execute(
                        "SELECT badge_id FROM user_badges WHERE user_id = %s",
                        (user_id,)
                    )
                    badge_rows = await cur.fetchall()
        except psycopg.Error as e:
            raise PersistenceError(
                f"Failed to load progression: {e}",
                user_id=user_id,
                operation="load_progression",
                cause=e
            ) from e

        state = ProgressionState(
            total_xp=row["total_xp"],
            current_streak=row["current_streak"],
            activity_dates=row["activity_dates"] or [],
            granted_badges=[badge["badge_id"] for badge in badge_rows],
        )
        return StoredProgression(
            user_id=user_id,
            state=state,
            version=row["version"],
            tier=row["tier"],
        )

    async def save(
        self,
        user_id: str,
        state: ProgressionState,
        new_badge_ids: Iterable[str],
        expected_version: int,
    ) -> int:
        """
        Write state and badge rows in one transaction

        Version 0 means "no row yet": the insert only succeeds if nobody
        created the row in the meantime.
        """
        activity_dates = sorted(state.activity_dates)

        try:
            async with self.db.connection() as conn:
                async with conn.transaction():
                    async with conn.cursor() as cur:
                        if expected_version == 0:
                            await cur.execute(
                                """
                                INSERT INTO user_progression
                                    (user_id, total_xp, current_streak, activity_dates, version)
                                VALUES (%s, %s, %s, %s, 1)
                                ON CONFLICT (user_id) DO NOTHING
                                """,
                                (user_id, state.total_xp, state.current_streak, activity_dates)
                            )
                        else:
                            await cur.execute(
                                """
                                UPDATE user_progression
                                SET total_xp = %s,
                                    current_streak = %s,
                                    activity_dates = %s,
                                    version = version + 1,
                                    updated_at = CURRENT_TIMESTAMP
                                WHERE user_id = %s AND version = %s
                                """,
                                (
                                    state.total_xp,
                                    state.current_streak,
                                    activity_dates,
                                    user_id,
                                    expected_version
                                )
                            )

                        if cur.rowcount != 1:
                            # Raising inside the transaction block rolls it back
                            raise ConcurrentUpdateError(
                                f"Progression for user {user_id} is no longer at version {expected_version}",
                                expected_version=expected_version,
                                user_id=user_id,
                                operation="save_progression",
                            )

                        for badge_id in new_badge_ids:
                            await cur.execute(
                                """
                                INSERT INTO user_badges (user_id, badge_id)
                                VALUES (%s, %s)
                                ON CONFLICT (user_id, badge_id) DO NOTHING
                                """,
                                (user_id, badge_id)
                            )
        except psycopg.Error as e:
            raise PersistenceError(
                f"Failed to save progression: {e}",
                user_id=user_id,
                operation="save_progression",
                context={"expected_version": expected_version},
                cause=e
            ) from e

        logger.info(f"Saved progression for user {user_id}: {state.total_xp} XP, streak {state.current_streak}")
        return expected_version + 1

    async def save_tier(self, user_id: str, tier: Tier) -> None:
        """Upsert the assessment tier, bumping the row version"""
        try:
            async with self.db.connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        """
                        INSERT INTO user_progression (user_id, tier, version)
                        VALUES (%s, %s, 1)
                        ON CONFLICT (user_id) DO UPDATE
                        SET tier = EXCLUDED.tier,
                            version = user_progression.version + 1,
                            updated_at = CURRENT_TIMESTAMP
                        """,
                        (user_id, int(tier))
                    )
                await conn.commit()
        except psycopg.Error as e:
            raise PersistenceError(
                f"Failed to save tier: {e}",
                user_id=user_id,
                operation="save_tier",
                cause=e
            ) from e

        logger.info(f"Stored tier {tier.label} for user {user_id}")
