"""
Search component - Explore creator search and suggestions.

Pure functions; results are deterministic (every sort ends on creator id).
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime, timedelta
from typing import Any

from src.components.ranking import metric, snapshot_reference_time, sort_timestamp, to_utc
from src.domain.entities import AuthenticatedViewer, CandidatePool, Creator, ViewerContext

from .models import (
    DEFAULT_CATEGORIES,
    SUBSCRIBER_RANGES,
    SearchConfig,
    SearchCreatorsInput,
    SearchCreatorsOutput,
    SearchFilters,
    SearchSuggestion,
    SuggestionsInput,
    SuggestionsOutput,
)

# --- Pure Functions ---


def matches_query(creator: Creator, query: str) -> bool:
    """Case-insensitive substring match over the searchable fields."""
    needle = query.strip().lower()
    if not needle:
        return True
    haystack = (
        creator.username,
        creator.display_name,
        creator.category,
        creator.bio,
        creator.country_code or "",
    )
    return any(needle in field.lower() for field in haystack)


def _within_days(ts: datetime | None, now: datetime | None, days: int) -> bool:
    if ts is None or now is None:
        return False
    return to_utc(ts) > to_utc(now) - timedelta(days=days)


def _passes_filters(
    creator: Creator,
    filters: SearchFilters,
    now: datetime | None,
    config: SearchConfig,
) -> bool:
    price = creator.subscription_price
    if filters.min_price is not None and (price is None or price < filters.min_price):
        return False
    if filters.max_price is not None and (price is None or price > filters.max_price):
        return False
    if filters.countries and creator.country_code not in filters.countries:
        return False
    if filters.categories and creator.category not in filters.categories:
        return False
    if filters.content_rating != "both" and creator.content_rating != filters.content_rating:
        return False
    if filters.verified_only and not creator.is_verified:
        return False
    if filters.online_only and not creator.is_online:
        return False
    if filters.active_recently and not _within_days(
        creator.last_post_at, now, config.active_recently_days
    ):
        return False
    if filters.new_creators_only and not _within_days(
        creator.creator_since, now, config.new_creator_days
    ):
        return False

    low, high = SUBSCRIBER_RANGES.get(filters.subscriber_range, (0, None))
    if creator.subscriber_count < low:
        return False
    if high is not None and creator.subscriber_count >= high:
        return False

    return True


_SORT_KEYS: dict[str, Callable[[Creator], Any]] = {
    "popularity": lambda c: (-c.subscriber_count, c.id),
    "newest": lambda c: (-sort_timestamp(c.creator_since), c.id),
    "price_low": lambda c: (
        c.subscription_price is None,
        metric(c.subscription_price),
        c.id,
    ),
    "price_high": lambda c: (
        c.subscription_price is None,
        -metric(c.subscription_price),
        c.id,
    ),
    "relevance": lambda c: (-metric(c.engagement_rate), c.id),
}


def search_creators(
    query: str,
    creators: Sequence[Creator],
    filters: SearchFilters | None = None,
    viewer: ViewerContext | None = None,
    config: SearchConfig | None = None,
    *,
    now: datetime | None = None,
) -> list[Creator]:
    """
    Search creators with Explore filters.

    Args:
        query: Free text; empty matches everything
        creators: Creators to search
        filters: Optional filters and sort order
        viewer: Optional viewer; hides their own profile and not-interested
            creators. Adult creators are hidden unless an authenticated
            viewer has opted in, so no viewer behaves like an anonymous one
        config: Search configuration
        now: Reference time for recency filters; defaults to the newest
            timestamp among the creators

    Returns:
        Matching creators in sort order
    """
    filters = filters or SearchFilters()
    config = config or SearchConfig()
    if now is None:
        now = snapshot_reference_time(CandidatePool(creators=tuple(creators)))

    hidden: frozenset[str] = frozenset()
    allow_nsfw = False
    if isinstance(viewer, AuthenticatedViewer):
        hidden = viewer.not_interested_creator_ids | {viewer.id}
        allow_nsfw = viewer.allows_nsfw

    results = [
        c
        for c in creators
        if c.id not in hidden
        and (allow_nsfw or not c.is_nsfw)
        and matches_query(c, query)
        and _passes_filters(c, filters, now, config)
    ]

    sort_key = _SORT_KEYS.get(filters.sort_by, _SORT_KEYS["relevance"])
    return sorted(results, key=sort_key)


def search_suggestions(
    query: str,
    creators: Sequence[Creator],
    recent_searches: Sequence[str] = (),
    config: SearchConfig | None = None,
) -> list[SearchSuggestion]:
    """
    Suggestions for the search box.

    With an empty query: recent searches, then categories. Otherwise creator
    name matches, then category matches.
    """
    config = config or SearchConfig()
    needle = query.strip().lower()
    suggestions: list[SearchSuggestion] = []

    if not needle:
        for search in recent_searches[: config.max_recent_suggestions]:
            suggestions.append(SearchSuggestion(type="recent", text=search))
        for category in config.categories[: config.max_category_suggestions]:
            suggestions.append(SearchSuggestion(type="category", text=category, subtext="Category"))
        return suggestions

    name_matches = sorted(
        (
            c
            for c in creators
            if needle in c.username.lower() or needle in c.display_name.lower()
        ),
        key=lambda c: (-c.subscriber_count, c.id),
    )
    for creator in name_matches[: config.max_creator_suggestions]:
        suggestions.append(
            SearchSuggestion(
                type="creator",
                text=creator.display_name or creator.username,
                subtext=f"@{creator.username}" if creator.username else None,
                creator_id=creator.id,
            )
        )

    category_matches = [c for c in config.categories if needle in c.lower()]
    for category in category_matches[: config.max_category_matches]:
        suggestions.append(SearchSuggestion(type="category", text=category, subtext="Category"))

    return suggestions


# --- Run Function (Atomic Component Pattern) ---


def run(
    input_data: SearchCreatorsInput | SuggestionsInput,
    config: SearchConfig | None = None,
) -> SearchCreatorsOutput | SuggestionsOutput:
    """Run a search operation based on input type."""
    config = config or SearchConfig()

    if isinstance(input_data, SearchCreatorsInput):
        found = search_creators(
            input_data.query,
            input_data.creators,
            input_data.filters,
            input_data.viewer,
            config,
            now=input_data.now,
        )
        return SearchCreatorsOutput(creators=found, total=len(found))

    if isinstance(input_data, SuggestionsInput):
        return SuggestionsOutput(
            suggestions=search_suggestions(
                input_data.query,
                input_data.creators,
                input_data.recent_searches,
                config,
            )
        )

    raise TypeError(f"Unknown input type: {type(input_data)}")


# --- Configuration Loader ---


def load_config_from_rules(rules: dict[str, Any]) -> SearchConfig:
    """
    Load SearchConfig from rules.yaml.

    Args:
        rules: Parsed rules dictionary

    Returns:
        SearchConfig instance
    """
    search = rules.get("search") or {}
    categories = search.get("categories")
    defaults = SearchConfig()

    return SearchConfig(
        categories=tuple(categories) if categories else DEFAULT_CATEGORIES,
        active_recently_days=search.get("active_recently_days", defaults.active_recently_days),
        new_creator_days=search.get("new_creator_days", defaults.new_creator_days),
    )
