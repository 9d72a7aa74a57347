"""Progression models: tiers, ranks, badges and per-user state"""
from datetime import date, datetime
from enum import Enum, IntEnum
from typing import FrozenSet, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fitcoach.validators import require_calendar_date


class Tier(IntEnum):
    """Assessment tier, ordered lowest to highest"""
    NOVICE = 0
    INTERMEDIATE = 1
    ADVANCED = 2
    ELITE = 3

    @property
    def label(self) -> str:
        return self.name.capitalize()


class BadgeRequirement(str, Enum):
    """Counter a badge threshold is measured against"""
    WORKOUTS = "workouts"
    STREAK = "streak"


class AssessmentResult(BaseModel):
    """One attempt at the zero-day fitness assessment"""
    model_config = ConfigDict(frozen=True)

    pushups: int = Field(ge=0, strict=True)
    jump_squats: int = Field(ge=0, strict=True)
    plank_seconds: int = Field(ge=0, strict=True)
    taken_at: Optional[datetime] = None


class TierInfo(BaseModel):
    """Display metadata for a tier"""
    model_config = ConfigDict(frozen=True)

    tier: Tier
    name: str
    callsign: str
    description: str
    min_pushups: int
    max_pushups: Optional[int] = None  # None = no upper bound


class Rank(BaseModel):
    """XP band; max_xp of None means unbounded above"""
    model_config = ConfigDict(frozen=True)

    name: str
    min_xp: int = Field(ge=0)
    max_xp: Optional[int] = None
    icon: str = "shield"
    description: str = ""

    @property
    def is_top(self) -> bool:
        return self.max_xp is None

    def contains(self, xp: int) -> bool:
        return xp >= self.min_xp and (self.max_xp is None or xp <= self.max_xp)


class BadgeDefinition(BaseModel):
    """Static badge unlocked by crossing a counter threshold"""
    model_config = ConfigDict(frozen=True)

    identifier: str = Field(min_length=1)
    requirement_type: BadgeRequirement
    threshold_count: int = Field(gt=0, strict=True)
    name: str = ""
    description: str = ""
    icon: str = "award"


class ActivitySnapshot(BaseModel):
    """Counters the badge detector compares before and after an event"""
    model_config = ConfigDict(frozen=True)

    workout_count: int = Field(ge=0, strict=True)
    streak: int = Field(ge=0, strict=True)

    def metric(self, requirement_type: BadgeRequirement) -> int:
        if requirement_type == BadgeRequirement.WORKOUTS:
            return self.workout_count
        return self.streak


class ProgressionState(BaseModel):
    """
    Per-user derived progression.

    total_xp and granted_badges never decrease; current_streak can reset.
    """
    model_config = ConfigDict(frozen=True)

    total_xp: int = Field(default=0, ge=0, strict=True)
    current_streak: int = Field(default=0, ge=0, strict=True)
    activity_dates: FrozenSet[date] = Field(default_factory=frozenset)
    granted_badges: FrozenSet[str] = Field(default_factory=frozenset)

    @field_validator("activity_dates", mode="before")
    @classmethod
    def validate_activity_dates(cls, v):
        """Only calendar dates; ISO strings and datetimes are not converted"""
        if isinstance(v, (set, frozenset, list, tuple)):
            for value in v:
                require_calendar_date(value, "activity_dates")
        return v

    @property
    def workout_count(self) -> int:
        return len(self.activity_dates)

    def snapshot(self) -> ActivitySnapshot:
        return ActivitySnapshot(workout_count=self.workout_count, streak=self.current_streak)


class CompletionResult(BaseModel):
    """Outcome of recording one completed activity"""
    model_config = ConfigDict(frozen=True)

    new_state: ProgressionState
    newly_unlocked_badges: List[BadgeDefinition] = Field(default_factory=list)
    ranked_up: bool = False
    was_duplicate: bool = False
    xp_awarded: int = 0
    previous_rank: str
    current_rank: str


class BadgeProgress(BaseModel):
    """Progress toward a single badge"""
    identifier: str
    name: str
    earned: bool
    current: int
    required: int
    progress: float = Field(ge=0, le=1)


class XPBreakdown(BaseModel):
    """Everything a profile card shows about XP and rank"""
    total_xp: int
    current_rank: str
    current_rank_min_xp: int
    current_rank_max_xp: Optional[int]
    next_rank: Optional[str]
    xp_to_next_rank: int
    progress_percentage: float
    workouts_to_next_rank: int
    is_max_rank: bool


class StoredProgression(BaseModel):
    """Progression state as loaded from storage, with its CAS version"""
    model_config = ConfigDict(frozen=True)

    user_id: str
    state: ProgressionState = Field(default_factory=ProgressionState)
    version: int = Field(default=0, ge=0)
    tier: Optional[Tier] = None


class ProgressSummary(BaseModel):
    """Read-side view of a user's progression for a given day"""
    user_id: str
    tier: Optional[Tier]
    xp: XPBreakdown
    current_streak: int
    longest_streak: int
    streak_at_risk: bool
    badges: List[BadgeProgress]
