"""
Progression Repository Interface (Port).

Storage contract the progression service needs. Implementations must give
at most one committed update per user per activity event: save() only
succeeds when ``expected_version`` still matches the stored row, and the
state update and badge inserts are applied together or not at all.
"""
import asyncio
import logging
from typing import Dict, Iterable, Protocol, Set

from fitcoach.exceptions import ConcurrentUpdateError
from fitcoach.models.progression import ProgressionState, StoredProgression, Tier

logger = logging.getLogger(__name__)


class ProgressionRepository(Protocol):
    """Abstract interface for progression persistence"""

    async def load(self, user_id: str) -> StoredProgression:
        """
        Load a user's progression.

        Unknown users get a zeroed state with version 0.
        """
        ...

    async def save(
        self,
        user_id: str,
        state: ProgressionState,
        new_badge_ids: Iterable[str],
        expected_version: int,
    ) -> int:
        """
        Commit a new state and insert newly granted badges.

        Returns:
            The new version number

        Raises:
            ConcurrentUpdateError: stored version differs from expected_version
            PersistenceError: storage failed
        """
        ...

    async def save_tier(self, user_id: str, tier: Tier) -> None:
        """Store the tier from the user's latest assessment"""
        ...


class InMemoryProgressionRepository:
    """Dict-backed repository with the same version check as the database"""

    def __init__(self):
        self._rows: Dict[str, StoredProgression] = {}
        self._badges: Dict[str, Set[str]] = {}
        self._lock = asyncio.Lock()

    async def load(self, user_id: str) -> StoredProgression:
        stored = self._rows.get(user_id)
        if stored is None:
            return StoredProgression(user_id=user_id)
        return stored

    async def save(
        self,
        user_id: str,
        state: ProgressionState,
        new_badge_ids: Iterable[str],
        expected_version: int,
    ) -> int:
        async with self._lock:
            current = self._rows.get(user_id)
            current_version = current.version if current else 0

            if current_version != expected_version:
                raise ConcurrentUpdateError(
                    f"Expected version {expected_version}, found {current_version}",
                    expected_version=expected_version,
                    user_id=user_id,
                    operation="save_progression",
                )

            new_version = current_version + 1
            self._rows[user_id] = StoredProgression(
                user_id=user_id,
                state=state,
                version=new_version,
                tier=current.tier if current else None,
            )
            self._badges.setdefault(user_id, set()).update(new_badge_ids)

        logger.debug(f"Saved progression for user {user_id} at version {new_version}")
        return new_version

    async def save_tier(self, user_id: str, tier: Tier) -> None:
        async with self._lock:
            current = self._rows.get(user_id) or StoredProgression(user_id=user_id)
            self._rows[user_id] = current.model_copy(update={
                "tier": tier,
                "version": current.version + 1,
            })

    def badge_rows(self, user_id: str) -> Set[str]:
        """Badge identifiers stored for a user (mirrors the user_badges table)"""
        return set(self._badges.get(user_id, set()))
