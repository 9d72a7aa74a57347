"""
Badge Unlock Detector

Badges unlock when a counter (total workouts or current streak) crosses a
threshold between two snapshots taken around a single completion event:

    before.metric < threshold <= after.metric

Detection is pure. It never writes anything and never grants a badge twice
as long as the caller commits each result into ``already_granted`` before
the next call. A threshold passed while nobody was watching is never
granted retroactively, so callers must run detection on every completion.

Badge catalogue:
- First Blood: complete 1 workout
- Iron Week: 7-day streak
- Double Digits: 10 workouts
- Quarter Century: 25 workouts
- Half Century: 50 workouts
- Century: 100 workouts
- Streak Master: 30-day streak
"""

from typing import AbstractSet, List, Optional, Sequence
import logging

from fitcoach.exceptions import ConfigurationError
from fitcoach.models.progression import (
    ActivitySnapshot,
    BadgeDefinition,
    BadgeProgress,
    BadgeRequirement,
)

logger = logging.getLogger(__name__)


BADGE_DEFINITIONS = (
    BadgeDefinition(
        identifier="first_blood",
        name="First Blood",
        description="Complete your first workout",
        icon="target",
        requirement_type=BadgeRequirement.WORKOUTS,
        threshold_count=1,
    ),
    BadgeDefinition(
        identifier="iron_week",
        name="Iron Week",
        description="Maintain a 7-day workout streak",
        icon="flame",
        requirement_type=BadgeRequirement.STREAK,
        threshold_count=7,
    ),
    BadgeDefinition(
        identifier="double_digits",
        name="Double Digits",
        description="Complete 10 workouts",
        icon="zap",
        requirement_type=BadgeRequirement.WORKOUTS,
        threshold_count=10,
    ),
    BadgeDefinition(
        identifier="quarter_century",
        name="Quarter Century",
        description="Complete 25 workouts",
        icon="medal",
        requirement_type=BadgeRequirement.WORKOUTS,
        threshold_count=25,
    ),
    BadgeDefinition(
        identifier="half_century",
        name="Half Century",
        description="Complete 50 workouts",
        icon="star",
        requirement_type=BadgeRequirement.WORKOUTS,
        threshold_count=50,
    ),
    BadgeDefinition(
        identifier="century",
        name="Century",
        description="Complete 100 workouts",
        icon="trophy",
        requirement_type=BadgeRequirement.WORKOUTS,
        threshold_count=100,
    ),
    BadgeDefinition(
        identifier="streak_master",
        name="Streak Master",
        description="Maintain a 30-day workout streak",
        icon="flame",
        requirement_type=BadgeRequirement.STREAK,
        threshold_count=30,
    ),
)


def validate_badge_definitions(definitions: Sequence[BadgeDefinition]) -> None:
    """
    Raises:
        ConfigurationError: if two definitions share an identifier
    """
    seen = set()
    for definition in definitions:
        if definition.identifier in seen:
            raise ConfigurationError(
                f"Duplicate badge identifier: {definition.identifier}",
                config_key="badge_definitions"
            )
        seen.add(definition.identifier)


def get_badge_definition(
    identifier: str,
    definitions: Sequence[BadgeDefinition] = BADGE_DEFINITIONS
) -> Optional[BadgeDefinition]:
    for definition in definitions:
        if definition.identifier == identifier:
            return definition
    return None


def detect_new_badges(
    before: ActivitySnapshot,
    after: ActivitySnapshot,
    already_granted: AbstractSet[str],
    definitions: Sequence[BadgeDefinition] = BADGE_DEFINITIONS
) -> List[BadgeDefinition]:
    """
    Find badges whose threshold was crossed between before and after

    Args:
        before: Counters prior to the completion event
        after: Counters after the completion event
        already_granted: Identifiers the user already holds
        definitions: Badge catalogue to check, in result order

    Returns:
        Newly unlocked definitions, in the order of ``definitions``
    """
    newly_unlocked = []

    for definition in definitions:
        # Skip if already granted
        if definition.identifier in already_granted:
            continue

        threshold = definition.threshold_count
        crossed = (
            before.metric(definition.requirement_type) < threshold
            and after.metric(definition.requirement_type) >= threshold
        )

        if crossed:
            newly_unlocked.append(definition)

    return newly_unlocked


def get_badge_progress(
    snapshot: ActivitySnapshot,
    already_granted: AbstractSet[str],
    definitions: Sequence[BadgeDefinition] = BADGE_DEFINITIONS
) -> List[BadgeProgress]:
    """
    Progress toward every badge in the catalogue

    Earned badges report full progress even if the counter has since
    dropped (a streak badge stays earned after the streak resets).
    """
    progress = []

    for definition in definitions:
        earned = definition.identifier in already_granted
        current = snapshot.metric(definition.requirement_type)
        fraction = 1.0 if earned else min(current / definition.threshold_count, 1.0)

        progress.append(BadgeProgress(
            identifier=definition.identifier,
            name=definition.name or definition.identifier,
            earned=earned,
            current=current,
            required=definition.threshold_count,
            progress=fraction,
        ))

    return progress
