"""
Rank System

Maps cumulative XP to a named rank. Ranks are ordered, contiguous XP bands
that must partition [0, infinity):

- Recruit:   0-999
- Soldier:   1000-4999
- Commander: 5000+

All functions accept an alternative band set through ``ranks`` so callers
and tests can inject their own. Use validate_rank_bands() on any custom
set before relying on it.
"""

import math
from typing import Optional, Sequence
import logging

from fitcoach.exceptions import ConfigurationError
from fitcoach.gamification.xp_system import XP_PER_ACTIVITY
from fitcoach.models.progression import Rank, XPBreakdown
from fitcoach.validators import require_non_negative_int

logger = logging.getLogger(__name__)


RANKS = (
    Rank(
        name="Recruit",
        min_xp=0,
        max_xp=999,
        icon="shield",
        description="Just starting your journey. Every mission counts.",
    ),
    Rank(
        name="Soldier",
        min_xp=1000,
        max_xp=4999,
        icon="shield-check",
        description="Proven warrior. You've earned your stripes.",
    ),
    Rank(
        name="Commander",
        min_xp=5000,
        max_xp=None,
        icon="shield-alert",
        description="Elite operator. You lead by example.",
    ),
)


def validate_rank_bands(ranks: Sequence[Rank]) -> None:
    """
    Check that ranks partition [0, infinity) with no gaps or overlaps

    Raises:
        ConfigurationError: describing the first violation found
    """
    if not ranks:
        raise ConfigurationError("Rank set is empty", config_key="ranks")

    if ranks[0].min_xp != 0:
        raise ConfigurationError(
            f"First rank {ranks[0].name} must start at 0 XP, starts at {ranks[0].min_xp}",
            config_key="ranks"
        )

    names = [rank.name for rank in ranks]
    if len(set(names)) != len(names):
        raise ConfigurationError(f"Duplicate rank names in {names}", config_key="ranks")

    for index, rank in enumerate(ranks):
        is_last = index == len(ranks) - 1

        if rank.max_xp is None:
            if not is_last:
                raise ConfigurationError(
                    f"Only the last rank may be unbounded, {rank.name} is not last",
                    config_key="ranks"
                )
            continue

        if is_last:
            raise ConfigurationError(
                f"Last rank {rank.name} must be unbounded above",
                config_key="ranks"
            )
        if rank.max_xp < rank.min_xp:
            raise ConfigurationError(
                f"Rank {rank.name} has max_xp {rank.max_xp} below min_xp {rank.min_xp}",
                config_key="ranks"
            )

        following = ranks[index + 1]
        if following.min_xp != rank.max_xp + 1:
            raise ConfigurationError(
                f"Ranks {rank.name} and {following.name} are not contiguous "
                f"({rank.max_xp} -> {following.min_xp})",
                config_key="ranks"
            )


def _rank_index(xp: int, ranks: Sequence[Rank]) -> int:
    require_non_negative_int(xp, "xp")
    for index, rank in enumerate(ranks):
        if rank.contains(xp):
            return index
    raise ConfigurationError(f"No rank covers {xp} XP", config_key="ranks")


def rank_for_xp(xp: int, ranks: Sequence[Rank] = RANKS) -> Rank:
    """Get the rank whose band contains xp"""
    return ranks[_rank_index(xp, ranks)]


def get_rank_by_name(name: str, ranks: Sequence[Rank] = RANKS) -> Optional[Rank]:
    for rank in ranks:
        if rank.name == name:
            return rank
    return None


def next_rank(xp: int, ranks: Sequence[Rank] = RANKS) -> Optional[Rank]:
    """Rank after the current one, or None at the top"""
    index = _rank_index(xp, ranks)
    if index == len(ranks) - 1:
        return None
    return ranks[index + 1]


def xp_to_next_rank(xp: int, ranks: Sequence[Rank] = RANKS) -> int:
    """XP still needed for the next rank (0 at the top rank)"""
    upcoming = next_rank(xp, ranks)
    if upcoming is None:
        return 0
    return upcoming.min_xp - xp


def progress_to_next_rank(xp: int, ranks: Sequence[Rank] = RANKS) -> float:
    """Percentage through the current band, 100 at the top rank"""
    rank = rank_for_xp(xp, ranks)
    if rank.is_top:
        return 100.0

    band_width = rank.max_xp - rank.min_xp + 1
    progress = (xp - rank.min_xp) / band_width * 100
    return min(max(progress, 0.0), 100.0)


def workouts_to_next_rank(xp: int, ranks: Sequence[Rank] = RANKS) -> int:
    """Completed activities still needed for the next rank"""
    return math.ceil(xp_to_next_rank(xp, ranks) / XP_PER_ACTIVITY)


def has_ranked_up(previous_xp: int, current_xp: int, ranks: Sequence[Rank] = RANKS) -> bool:
    """
    Check if earning XP moved the user into a different rank

    Compares rank identity rather than XP thresholds so bands of uneven
    width behave the same way.
    """
    return _rank_index(previous_xp, ranks) != _rank_index(current_xp, ranks)


def is_rank_higher(rank_a: str, rank_b: str, ranks: Sequence[Rank] = RANKS) -> bool:
    """True if rank_a sits above rank_b; unknown names rank below everything"""
    names = [rank.name for rank in ranks]
    index_a = names.index(rank_a) if rank_a in names else -1
    index_b = names.index(rank_b) if rank_b in names else -1
    return index_a > index_b


def get_xp_breakdown(xp: int, ranks: Sequence[Rank] = RANKS) -> XPBreakdown:
    """Collect rank and progress details for display"""
    rank = rank_for_xp(xp, ranks)
    upcoming = next_rank(xp, ranks)

    return XPBreakdown(
        total_xp=xp,
        current_rank=rank.name,
        current_rank_min_xp=rank.min_xp,
        current_rank_max_xp=rank.max_xp,
        next_rank=upcoming.name if upcoming else None,
        xp_to_next_rank=xp_to_next_rank(xp, ranks),
        progress_percentage=progress_to_next_rank(xp, ranks),
        workouts_to_next_rank=workouts_to_next_rank(xp, ranks),
        is_max_rank=rank.is_top,
    )
