"""
Progression Orchestrator

record_activity_completion() turns one completed activity into the next
ProgressionState plus the events worth celebrating (new badges, rank-up).

It is pure: callers load state, call it, and persist the result in a
single guarded write. Recording a date that is already in the history is
a no-op, so replaying the same (user, day) event changes nothing.

Streak reference day: the stored streak is measured as of the most recent
activity date in the history, so it stays frozen between events. Read-side
views that need a wall-clock streak recompute it with their own ``today``.
"""

from datetime import date
from typing import Sequence
import logging

from fitcoach.gamification.achievement_system import BADGE_DEFINITIONS, detect_new_badges
from fitcoach.gamification.rank_system import RANKS, has_ranked_up, rank_for_xp
from fitcoach.gamification.streak_system import current_streak
from fitcoach.gamification.xp_system import add_activity
from fitcoach.models.progression import (
    BadgeDefinition,
    CompletionResult,
    ProgressionState,
    Rank,
)
from fitcoach.validators import require_calendar_date

logger = logging.getLogger(__name__)


def record_activity_completion(
    state: ProgressionState,
    activity_date: date,
    definitions: Sequence[BadgeDefinition] = BADGE_DEFINITIONS,
    ranks: Sequence[Rank] = RANKS
) -> CompletionResult:
    """
    Apply one completed activity to a user's progression

    Args:
        state: Current progression as loaded by the caller
        activity_date: User-local calendar day of the activity
        definitions: Badge catalogue to check
        ranks: Rank bands used for rank-up detection

    Returns:
        CompletionResult with the state to persist, newly unlocked badges
        and whether the user ranked up
    """
    require_calendar_date(activity_date, "activity_date")
    previous_rank = rank_for_xp(state.total_xp, ranks).name

    if activity_date in state.activity_dates:
        logger.debug(f"Activity on {activity_date} already recorded, nothing to do")
        return CompletionResult(
            new_state=state,
            was_duplicate=True,
            previous_rank=previous_rank,
            current_rank=previous_rank,
        )

    before = state.snapshot()

    activity_dates = state.activity_dates | {activity_date}
    streak = current_streak(activity_dates, as_of=max(activity_dates))
    total_xp = add_activity(state.total_xp)

    after_state = state.model_copy(update={
        "total_xp": total_xp,
        "current_streak": streak,
        "activity_dates": activity_dates,
    })

    unlocked = detect_new_badges(
        before,
        after_state.snapshot(),
        state.granted_badges,
        definitions,
    )
    if unlocked:
        after_state = after_state.model_copy(update={
            "granted_badges": state.granted_badges | {badge.identifier for badge in unlocked},
        })

    ranked_up = has_ranked_up(state.total_xp, total_xp, ranks)

    return CompletionResult(
        new_state=after_state,
        newly_unlocked_badges=unlocked,
        ranked_up=ranked_up,
        xp_awarded=total_xp - state.total_xp,
        previous_rank=previous_rank,
        current_rank=rank_for_xp(total_xp, ranks).name,
    )
