"""
Tier System

Assigns a training tier from the zero-day assessment (max pushups).

Tiers (closed pushup ranges, top tier unbounded):
- Novice (.223):        0-9
- Intermediate (.556): 10-25
- Advanced (.762):     26-50
- Elite (.50 Cal):     51+

Tier is a one-time classification, re-run only when the user retakes the
assessment. It is unrelated to the XP-based rank (see rank_system).
"""

from typing import List, Sequence
import logging

from fitcoach.exceptions import ValidationError
from fitcoach.models.progression import AssessmentResult, Tier, TierInfo
from fitcoach.validators import require_non_negative_int

logger = logging.getLogger(__name__)


TIER_INFO = {
    Tier.NOVICE: TierInfo(
        tier=Tier.NOVICE,
        name="Novice",
        callsign=".223",
        description="Building foundation strength",
        min_pushups=0,
        max_pushups=9,
    ),
    Tier.INTERMEDIATE: TierInfo(
        tier=Tier.INTERMEDIATE,
        name="Intermediate",
        callsign=".556",
        description="Developing tactical fitness",
        min_pushups=10,
        max_pushups=25,
    ),
    Tier.ADVANCED: TierInfo(
        tier=Tier.ADVANCED,
        name="Advanced",
        callsign=".762",
        description="Combat-ready operator",
        min_pushups=26,
        max_pushups=50,
    ),
    Tier.ELITE: TierInfo(
        tier=Tier.ELITE,
        name="Elite",
        callsign=".50 Cal",
        description="Special forces status",
        min_pushups=51,
        max_pushups=None,
    ),
}


def classify_tier(pushups: int) -> Tier:
    """
    Assign tier from max pushups

    Raises:
        ValidationError: pushups is negative or not an integer
    """
    require_non_negative_int(pushups, "pushups")

    if pushups < 10:
        return Tier.NOVICE
    if pushups <= 25:
        return Tier.INTERMEDIATE
    if pushups <= 50:
        return Tier.ADVANCED
    return Tier.ELITE


def latest_assessment(results: Sequence[AssessmentResult]) -> AssessmentResult:
    """
    Pick the attempt that determines the current tier

    Attempts with a taken_at timestamp win over undated ones; among equals
    the later entry in the sequence wins.
    """
    if not results:
        raise ValidationError(
            message="At least one assessment result is required",
            field="results",
            value=results
        )

    latest = results[0]
    for result in results[1:]:
        if latest.taken_at is None or (
            result.taken_at is not None and result.taken_at >= latest.taken_at
        ):
            latest = result
    return latest


def classify_assessment(results: Sequence[AssessmentResult]) -> Tier:
    """Tier for the most recent of a user's assessment attempts"""
    result = latest_assessment(results)
    tier = classify_tier(result.pushups)
    logger.debug(f"Classified assessment ({result.pushups} pushups) as {tier.label}")
    return tier


def get_tier_info(tier: Tier) -> TierInfo:
    return TIER_INFO[tier]


def get_all_tiers() -> List[TierInfo]:
    """All tiers, lowest first"""
    return [TIER_INFO[tier] for tier in sorted(Tier)]


def meets_or_exceeds_tier(user_tier: Tier, required_tier: Tier) -> bool:
    """Check if user tier is at or above the required tier"""
    return user_tier >= required_tier
