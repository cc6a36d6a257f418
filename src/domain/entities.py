"""
Domain snapshots for entitlement and discovery.

Snapshots are read-only values built from whatever the external store returns.
Malformed fields are coerced to their most restrictive interpretation instead
of raising, so a bad record can never unlock content.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Literal, get_args

from pydantic import BaseModel, ConfigDict, Field, field_validator

# --- Enums / Literals ---
PostVisibility = Literal["free", "subscribers", "vip", "premium"]
ContentRating = Literal["sfw", "nsfw"]

VISIBILITY_VALUES: tuple[str, ...] = get_args(PostVisibility)
DEFAULT_LOCKED_VISIBILITY: PostVisibility = "subscribers"


def _coerce_metric(value: Any) -> float | None:
    """Numeric metric or None; strings, NaN and infinities become None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


def _coerce_count(value: Any) -> int:
    metric = _coerce_metric(value)
    if metric is None or metric < 0:
        return 0
    return int(metric)


def _coerce_timestamp(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            return None
    return None


class Snapshot(BaseModel):
    """Base for store snapshots: immutable, tolerant of extra keys."""

    model_config = ConfigDict(frozen=True, extra="ignore")


# --- Viewers ---


class AnonymousViewer(Snapshot):
    """A visitor without an identity."""

    kind: Literal["anonymous"] = "anonymous"


class AuthenticatedViewer(Snapshot):
    kind: Literal["authenticated"] = "authenticated"
    id: str
    subscribed_creator_ids: frozenset[str] = Field(default_factory=frozenset)
    followed_creator_ids: frozenset[str] = Field(default_factory=frozenset)
    not_interested_creator_ids: frozenset[str] = Field(default_factory=frozenset)
    purchased_post_ids: frozenset[str] = Field(default_factory=frozenset)
    liked_post_ids: frozenset[str] = Field(default_factory=frozenset)
    viewed_post_ids: frozenset[str] = Field(default_factory=frozenset)
    country_code: str | None = None
    category_affinities: dict[str, float] = Field(default_factory=dict)
    allows_nsfw: bool = False

    @field_validator(
        "subscribed_creator_ids",
        "followed_creator_ids",
        "not_interested_creator_ids",
        "purchased_post_ids",
        "liked_post_ids",
        "viewed_post_ids",
        mode="before",
    )
    @classmethod
    def _ids_or_empty(cls, value: Any) -> Any:
        if value is None:
            return frozenset()
        if isinstance(value, (list, tuple, set, frozenset)):
            return frozenset(str(v) for v in value if v is not None)
        return frozenset()

    @field_validator("category_affinities", mode="before")
    @classmethod
    def _affinities(cls, value: Any) -> dict[str, float]:
        if not isinstance(value, dict):
            return {}
        affinities: dict[str, float] = {}
        for category, raw in value.items():
            score = _coerce_metric(raw)
            if score is not None:
                affinities[str(category)] = score
        return affinities

    @field_validator("allows_nsfw", mode="before")
    @classmethod
    def _strict_opt_in(cls, value: Any) -> bool:
        return value is True


ViewerContext = AnonymousViewer | AuthenticatedViewer

ANONYMOUS = AnonymousViewer()


# --- Creators ---


class Creator(Snapshot):
    id: str
    username: str = ""
    display_name: str = ""
    bio: str = ""
    category: str = ""
    country_code: str | None = None
    is_verified: bool = False
    is_online: bool = False
    subscriber_count: int = 0
    follower_count: int = 0
    subscription_price: float | None = None
    content_rating: ContentRating = "sfw"
    creator_since: datetime | None = None
    last_post_at: datetime | None = None

    # Ranking metrics (None scores as 0)
    subscriber_growth_rate: float | None = None
    recent_engagement_rate: float | None = None
    engagement_rate: float | None = None
    follower_growth: float | None = None
    view_count: float | None = None

    @field_validator("subscriber_count", "follower_count", mode="before")
    @classmethod
    def _counts(cls, value: Any) -> int:
        return _coerce_count(value)

    @field_validator(
        "subscription_price",
        "subscriber_growth_rate",
        "recent_engagement_rate",
        "engagement_rate",
        "follower_growth",
        "view_count",
        mode="before",
    )
    @classmethod
    def _metrics(cls, value: Any) -> float | None:
        return _coerce_metric(value)

    @field_validator("creator_since", "last_post_at", mode="before")
    @classmethod
    def _timestamps(cls, value: Any) -> datetime | None:
        return _coerce_timestamp(value)

    @field_validator("content_rating", mode="before")
    @classmethod
    def _rating(cls, value: Any) -> str:
        # Anything that is not explicitly sfw is treated as adult content
        if value is None:
            return "sfw"
        return "sfw" if value == "sfw" else "nsfw"

    @field_validator("username", "display_name", "bio", "category", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""

    @property
    def is_nsfw(self) -> bool:
        return self.content_rating == "nsfw"


# --- Posts ---


class Post(Snapshot):
    id: str
    creator_id: str
    visibility: PostVisibility = DEFAULT_LOCKED_VISIBILITY
    price: float | None = None
    published_at: datetime | None = None
    likes: int = 0
    comments: int = 0
    shares: int = 0
    views: int = 0
    is_nsfw: bool = False
    category: str = ""
    thumbnail_url: str | None = None

    @field_validator("visibility", mode="before")
    @classmethod
    def _visibility(cls, value: Any) -> str:
        if isinstance(value, str) and value in VISIBILITY_VALUES:
            return value
        return DEFAULT_LOCKED_VISIBILITY

    @field_validator("thumbnail_url", mode="before")
    @classmethod
    def _thumbnail(cls, value: Any) -> str | None:
        if isinstance(value, str) and value.strip():
            return value
        return None

    @field_validator("likes", "comments", "shares", "views", mode="before")
    @classmethod
    def _counts(cls, value: Any) -> int:
        return _coerce_count(value)

    @field_validator("price", mode="before")
    @classmethod
    def _price(cls, value: Any) -> float | None:
        return _coerce_metric(value)

    @field_validator("published_at", mode="before")
    @classmethod
    def _published(cls, value: Any) -> datetime | None:
        return _coerce_timestamp(value)

    @field_validator("is_nsfw", mode="before")
    @classmethod
    def _nsfw(cls, value: Any) -> bool:
        if isinstance(value, str):
            return value.strip().lower() in ("true", "1", "yes")
        return value is True or value == 1

    @field_validator("category", mode="before")
    @classmethod
    def _category(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""

    @property
    def has_preview(self) -> bool:
        return self.thumbnail_url is not None


# --- Pool ---


class CandidatePool(Snapshot):
    """Creators and posts returned by the store for one ranking call."""

    creators: tuple[Creator, ...] = ()
    posts: tuple[Post, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.creators and not self.posts

    def creator_by_id(self) -> dict[str, Creator]:
        return {c.id: c for c in self.creators}
