"""
ProgressionService - Progression Business Logic

The single write path for progression: every activity completion goes
through complete_activity(), which loads state, runs the pure orchestrator
and saves the result with a version check.
"""

import asyncio
import logging
from datetime import date, timedelta
from typing import List, Optional, Sequence

from fitcoach.config import PROGRESSION_MAX_ATTEMPTS
from fitcoach.db.progression_repository import ProgressionRepository
from fitcoach.exceptions import ConcurrentUpdateError, ConfigurationError
from fitcoach.gamification.achievement_system import (
    BADGE_DEFINITIONS,
    get_badge_progress,
    validate_badge_definitions,
)
from fitcoach.gamification.progression import record_activity_completion
from fitcoach.gamification.rank_system import RANKS, get_xp_breakdown, validate_rank_bands
from fitcoach.gamification.streak_system import current_streak, is_streak_at_risk, longest_streak
from fitcoach.gamification.tier_system import classify_assessment
from fitcoach.models.progression import (
    ActivitySnapshot,
    AssessmentResult,
    BadgeDefinition,
    CompletionResult,
    ProgressSummary,
    Rank,
    Tier,
)
from fitcoach.monitoring.metrics import ProgressionMetrics, metrics as default_metrics

logger = logging.getLogger(__name__)


class ProgressionService:
    """
    Service for progression features.

    Responsibilities:
    - Recording activity completions (XP, streak, badges, rank-up)
    - Classifying and storing assessment tiers
    - Building read-side progress summaries
    """

    def __init__(
        self,
        repository: ProgressionRepository,
        definitions: Sequence[BadgeDefinition] = BADGE_DEFINITIONS,
        ranks: Sequence[Rank] = RANKS,
        max_attempts: int = PROGRESSION_MAX_ATTEMPTS,
        metrics: Optional[ProgressionMetrics] = None
    ):
        """
        Initialize ProgressionService.

        Args:
            repository: Progression storage
            definitions: Badge catalogue
            ranks: Rank bands
            max_attempts: Attempts per completion when the stored row changes
                between load and save

        Raises:
            ConfigurationError: badge catalogue, rank bands or max_attempts
                are invalid
        """
        validate_badge_definitions(definitions)
        validate_rank_bands(ranks)
        if max_attempts < 1:
            raise ConfigurationError(
                f"max_attempts must be at least 1, got {max_attempts}",
                config_key="PROGRESSION_MAX_ATTEMPTS"
            )

        self.repository = repository
        self.definitions = tuple(definitions)
        self.ranks = tuple(ranks)
        self.max_attempts = max_attempts
        self.metrics = metrics or default_metrics
        logger.debug("ProgressionService initialized")

    async def complete_activity(self, user_id: str, activity_date: date) -> CompletionResult:
        """
        Record a completed activity for a user.

        Args:
            user_id: User ID
            activity_date: User-local calendar day of the activity

        Returns:
            CompletionResult for the committed state

        Raises:
            ValidationError: activity_date is not a calendar date
            ConcurrentUpdateError: still conflicting after max_attempts
            PersistenceError: storage failed
        """
        for attempt in range(1, self.max_attempts + 1):
            stored = await self.repository.load(user_id)
            result = record_activity_completion(
                stored.state,
                activity_date,
                self.definitions,
                self.ranks,
            )

            if result.was_duplicate:
                self.metrics.record_completion("duplicate")
                logger.info(f"User {user_id} already has activity on {activity_date}, skipping")
                return result

            try:
                await self.repository.save(
                    user_id,
                    result.new_state,
                    [badge.identifier for badge in result.newly_unlocked_badges],
                    expected_version=stored.version,
                )
            except ConcurrentUpdateError:
                self.metrics.record_conflict()
                if attempt == self.max_attempts:
                    raise
                logger.warning(
                    f"Progression for user {user_id} changed during update "
                    f"(attempt {attempt}/{self.max_attempts}), retrying"
                )
                continue

            self._record_outcome(user_id, result)
            return result

    def _record_outcome(self, user_id: str, result: CompletionResult) -> None:
        self.metrics.record_completion("recorded")

        logger.info(
            f"Awarded {result.xp_awarded} XP to user {user_id}. "
            f"Total: {result.new_state.total_xp} XP, streak: {result.new_state.current_streak}"
        )

        if result.ranked_up:
            self.metrics.record_rank_up(result.current_rank)
            logger.info(f"User {user_id} ranked up from {result.previous_rank} to {result.current_rank}!")

        for badge in result.newly_unlocked_badges:
            self.metrics.record_badge(badge.identifier)
            logger.info(f"User {user_id} unlocked badge: {badge.identifier} ({badge.name})")

    async def record_assessment(self, user_id: str, results: Sequence[AssessmentResult]) -> Tier:
        """
        Classify a user's latest assessment attempt and store the tier.

        Args:
            user_id: User ID
            results: All assessment attempts; the most recent decides

        Returns:
            The assigned tier
        """
        tier = classify_assessment(results)
        await self.repository.save_tier(user_id, tier)
        logger.info(f"User {user_id} assigned tier {tier.label}")
        return tier

    async def get_progress_summary(self, user_id: str, today: date) -> ProgressSummary:
        """
        Build a user's progress view as of today.

        The streak here is the wall-clock one: a user who has not been
        active today or yesterday shows 0, even though the stored streak
        keeps its last value until the next activity.
        """
        stored = await self.repository.load(user_id)
        state = stored.state

        if today in state.activity_dates:
            streak_today = current_streak(state.activity_dates, today)
        else:
            # Still alive until the end of today if yesterday was active
            streak_today = current_streak(state.activity_dates, today - timedelta(days=1))

        return ProgressSummary(
            user_id=user_id,
            tier=stored.tier,
            xp=get_xp_breakdown(state.total_xp, self.ranks),
            current_streak=streak_today,
            longest_streak=longest_streak(state.activity_dates),
            streak_at_risk=is_streak_at_risk(state.activity_dates, today),
            badges=get_badge_progress(
                ActivitySnapshot(workout_count=state.workout_count, streak=streak_today),
                state.granted_badges,
                self.definitions,
            ),
        )

    async def get_progress_summaries(self, user_ids: Sequence[str], today: date) -> List[ProgressSummary]:
        """Progress views for many users; each user is loaded independently"""
        return list(await asyncio.gather(
            *(self.get_progress_summary(user_id, today) for user_id in user_ids)
        ))
