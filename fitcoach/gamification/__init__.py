"""
Progression engine for fitcoach

Pure components, leaves first:
- Tier classification from the zero-day assessment
- XP ledger (100 XP per completed activity)
- Rank resolution from cumulative XP
- Consecutive-day streaks
- Badge unlock detection
- Activity completion orchestration
"""

from fitcoach.gamification.tier_system import classify_tier, classify_assessment, meets_or_exceeds_tier
from fitcoach.gamification.xp_system import XP_PER_ACTIVITY, xp_for_activity_count, add_activity
from fitcoach.gamification.rank_system import (
    RANKS,
    rank_for_xp,
    progress_to_next_rank,
    xp_to_next_rank,
    has_ranked_up,
)
from fitcoach.gamification.streak_system import current_streak, longest_streak
from fitcoach.gamification.achievement_system import BADGE_DEFINITIONS, detect_new_badges
from fitcoach.gamification.progression import record_activity_completion

__all__ = [
    "classify_tier",
    "classify_assessment",
    "meets_or_exceeds_tier",
    "XP_PER_ACTIVITY",
    "xp_for_activity_count",
    "add_activity",
    "RANKS",
    "rank_for_xp",
    "progress_to_next_rank",
    "xp_to_next_rank",
    "has_ranked_up",
    "current_streak",
    "longest_streak",
    "BADGE_DEFINITIONS",
    "detect_new_badges",
    "record_activity_completion",
]
