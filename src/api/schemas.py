from datetime import datetime
from typing import Literal

from pydantic import BaseModel

# --- Shared Enums/Types ---
EntitlementStateName = Literal["UNLOCKED", "LOCKED_PREVIEW", "LOCKED_NO_PREVIEW"]
Visibility = Literal["free", "subscribers", "vip", "premium"]


# --- Entitlement ---
class EntitlementResponse(BaseModel):
    post_id: str
    creator_id: str
    visibility: Visibility
    state: EntitlementStateName
    reason: str
    cta: str
    show_paywall: bool
    thumbnail_url: str | None = None  # Omitted when there is no preview
    price: float | None = None


# --- Explore ---
class CreatorSummary(BaseModel):
    id: str
    username: str
    display_name: str
    category: str
    country_code: str | None = None
    is_verified: bool
    is_online: bool
    subscriber_count: int
    subscription_price: float | None = None
    content_rating: Literal["sfw", "nsfw"]


class PostSummary(BaseModel):
    id: str
    creator_id: str
    visibility: Visibility
    category: str
    published_at: datetime | None = None
    likes: int
    comments: int
    shares: int
    thumbnail_url: str | None = None


class CandidateResponse(BaseModel):
    kind: Literal["creator", "post"]
    id: str
    creator_id: str
    score: float
    reason: str
    reason_details: str
    category: str
    entitlement: EntitlementStateName | None = None
    creator: CreatorSummary | None = None
    post: PostSummary | None = None


class SectionResponse(BaseModel):
    type: str
    title: str
    category: str | None = None
    items: list[CandidateResponse] = []


class SectionsResponse(BaseModel):
    viewer_id: str | None = None
    sections: list[SectionResponse]


class SearchResponse(BaseModel):
    query: str
    total: int
    creators: list[CreatorSummary]


class SuggestionResponse(BaseModel):
    type: Literal["creator", "category", "recent"]
    text: str
    subtext: str | None = None
    creator_id: str | None = None


class SuggestionsResponse(BaseModel):
    query: str
    suggestions: list[SuggestionResponse]
