"""
Ranking component input/output models.

Sections, candidates and the ranker configuration for the Explore surface.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

from src.components.entitlement import EntitlementConfig, EntitlementState
from src.domain.entities import CandidatePool, Creator, Post, ViewerContext
from src.ports.store import PoolFilters

# --- Tags ---

SectionType = Literal[
    "trending",
    "rising_stars",
    "for_you",
    "from_your_country",
    "category",
]

CandidateReason = Literal[
    "trending",
    "rising",
    "category_match",
    "similar_to_followed",
    "new_creator",
    "location_match",
]

CandidateKind = Literal["creator", "post"]


# --- Output Models ---


@dataclass(frozen=True)
class Candidate:
    """A creator or post placed in a section, with its score and reason."""

    kind: CandidateKind
    id: str
    creator_id: str
    score: float
    reason: CandidateReason
    reason_details: str
    category: str
    item: Creator | Post
    entitlement: EntitlementState | None = None  # posts only


@dataclass(frozen=True)
class Section:
    """One ranked row of the Explore surface."""

    type: SectionType
    title: str
    candidates: tuple[Candidate, ...] = ()
    category: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.candidates


# --- Configuration ---


def _non_negative(value: Any, default: float) -> float:
    """Finite number floored at 0; anything unusable falls back to default."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    try:
        number = float(value)
    except OverflowError:
        return default
    if not math.isfinite(number):
        return default
    return max(0.0, number)


def _non_negative_int(value: Any, default: int) -> int:
    return int(_non_negative(value, float(default)))


def _clamp_fields(instance: Any, defaults: dict[str, float]) -> None:
    for name, default in defaults.items():
        object.__setattr__(instance, name, _non_negative(getattr(instance, name), default))


@dataclass(frozen=True)
class TrendingWeights:
    subscriber_growth_rate: float = 0.5
    recent_engagement_rate: float = 0.3
    view_count: float = 0.2

    def __post_init__(self) -> None:
        _clamp_fields(
            self,
            {"subscriber_growth_rate": 0.5, "recent_engagement_rate": 0.3, "view_count": 0.2},
        )


@dataclass(frozen=True)
class RisingStarWeights:
    engagement_rate: float = 0.6
    follower_growth: float = 0.4

    def __post_init__(self) -> None:
        _clamp_fields(self, {"engagement_rate": 0.6, "follower_growth": 0.4})


@dataclass(frozen=True)
class ForYouWeights:
    """
    For You weights.

    recently_viewed_penalty is subtracted from posts the viewer has
    already viewed or liked.
    """

    category_affinity: float = 0.4
    similar_to_followed: float = 0.3
    recency: float = 0.2
    popularity: float = 0.1
    recently_viewed_penalty: float = 0.15

    def __post_init__(self) -> None:
        _clamp_fields(
            self,
            {
                "category_affinity": 0.4,
                "similar_to_followed": 0.3,
                "recency": 0.2,
                "popularity": 0.1,
                "recently_viewed_penalty": 0.15,
            },
        )


DEFAULT_HALF_LIFE_HOURS = 48.0
DEFAULT_LIMIT_PER_SECTION = 10
DEFAULT_RISING_STAR_WINDOW_DAYS = 30.0
DEFAULT_MAX_CONSECUTIVE_SAME_CATEGORY = 2
DEFAULT_CATEGORY_BUCKETS = 3


@dataclass(frozen=True)
class RankerConfig:
    """
    Ranker configuration.

    Built from rules.yaml or an options mapping by load_ranker_config(), or
    directly. Values are clamped on construction: weights, limits and
    windows floor at 0, a non-positive half-life falls back to 48 hours.
    """

    trending: TrendingWeights = field(default_factory=TrendingWeights)
    rising_stars: RisingStarWeights = field(default_factory=RisingStarWeights)
    for_you: ForYouWeights = field(default_factory=ForYouWeights)
    recency_half_life_hours: float = DEFAULT_HALF_LIFE_HOURS
    limit_per_section: int = DEFAULT_LIMIT_PER_SECTION
    hide_fully_locked: bool = False
    rising_star_window_days: float = DEFAULT_RISING_STAR_WINDOW_DAYS
    max_consecutive_same_category: int = DEFAULT_MAX_CONSECUTIVE_SAME_CATEGORY
    categories: tuple[str, ...] = ()
    category_bucket_count: int = DEFAULT_CATEGORY_BUCKETS
    include_local_section: bool = True
    entitlement: EntitlementConfig = field(default_factory=EntitlementConfig)

    def __post_init__(self) -> None:
        half_life = _non_negative(self.recency_half_life_hours, DEFAULT_HALF_LIFE_HOURS)
        if half_life <= 0:
            half_life = DEFAULT_HALF_LIFE_HOURS
        object.__setattr__(self, "recency_half_life_hours", half_life)
        object.__setattr__(
            self,
            "limit_per_section",
            _non_negative_int(self.limit_per_section, DEFAULT_LIMIT_PER_SECTION),
        )
        object.__setattr__(
            self,
            "rising_star_window_days",
            _non_negative(self.rising_star_window_days, DEFAULT_RISING_STAR_WINDOW_DAYS),
        )
        object.__setattr__(
            self,
            "max_consecutive_same_category",
            _non_negative_int(
                self.max_consecutive_same_category, DEFAULT_MAX_CONSECUTIVE_SAME_CATEGORY
            ),
        )
        object.__setattr__(
            self,
            "category_bucket_count",
            _non_negative_int(self.category_bucket_count, DEFAULT_CATEGORY_BUCKETS),
        )


# --- Input Models ---


@dataclass(frozen=True)
class RankInput:
    """Rank snapshots already in hand."""

    viewer: ViewerContext
    pool: CandidatePool
    now: datetime | None = None


@dataclass(frozen=True)
class RankByIdInput:
    """Rank by fetching the viewer and pool from a store."""

    viewer_id: str | None = None
    filters: PoolFilters | None = None
    now: datetime | None = None


@dataclass(frozen=True)
class RankOutput:
    """Output from run()."""

    sections: list[Section]
    errors: list[str] = field(default_factory=list)
    success: bool = True
