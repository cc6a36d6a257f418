"""
Search component models.

Creator search filters and search suggestions for the Explore surface.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

from src.domain.entities import Creator, ViewerContext

ContentRatingFilter = Literal["sfw", "nsfw", "both"]
SubscriberRange = Literal["any", "0-100", "100-500", "500-1000", "1000-5000", "5000+"]
SortBy = Literal["relevance", "popularity", "newest", "price_low", "price_high"]
SuggestionType = Literal["creator", "category", "recent"]

# Inclusive lower bound, exclusive upper bound (None = open)
SUBSCRIBER_RANGES: dict[str, tuple[int, int | None]] = {
    "any": (0, None),
    "0-100": (0, 100),
    "100-500": (100, 500),
    "500-1000": (500, 1000),
    "1000-5000": (1000, 5000),
    "5000+": (5000, None),
}

DEFAULT_CATEGORIES: tuple[str, ...] = (
    "Fashion",
    "Fitness",
    "Music",
    "Art",
    "Lifestyle",
    "Beauty",
    "Tech",
    "Dance",
    "Comedy",
    "Education",
    "Food",
    "Travel",
    "Gaming",
    "Sports",
)


@dataclass(frozen=True)
class SearchFilters:
    """Explore search filters. Unset fields do not filter."""

    min_price: float | None = None
    max_price: float | None = None
    countries: tuple[str, ...] = ()
    categories: tuple[str, ...] = ()
    content_rating: ContentRatingFilter = "both"
    verified_only: bool = False
    online_only: bool = False
    active_recently: bool = False
    new_creators_only: bool = False
    subscriber_range: SubscriberRange = "any"
    sort_by: SortBy = "relevance"


@dataclass(frozen=True)
class SearchSuggestion:
    type: SuggestionType
    text: str
    subtext: str | None = None
    creator_id: str | None = None


@dataclass(frozen=True)
class SearchConfig:
    """Search configuration from rules."""

    categories: tuple[str, ...] = DEFAULT_CATEGORIES
    active_recently_days: int = 7
    new_creator_days: int = 30
    max_recent_suggestions: int = 3
    max_category_suggestions: int = 5
    max_creator_suggestions: int = 5
    max_category_matches: int = 3


# --- Inputs / Outputs ---


@dataclass(frozen=True)
class SearchCreatorsInput:
    query: str
    creators: tuple[Creator, ...]
    filters: SearchFilters = field(default_factory=SearchFilters)
    viewer: ViewerContext | None = None
    now: datetime | None = None


@dataclass(frozen=True)
class SearchCreatorsOutput:
    creators: list[Creator]
    total: int
    errors: list[str] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class SuggestionsInput:
    query: str
    creators: tuple[Creator, ...]
    recent_searches: tuple[str, ...] = ()


@dataclass(frozen=True)
class SuggestionsOutput:
    suggestions: list[SearchSuggestion]
    errors: list[str] = field(default_factory=list)
    success: bool = True
