"""
Search component - Explore creator search and suggestions.
"""

from .component import (
    load_config_from_rules,
    matches_query,
    run,
    search_creators,
    search_suggestions,
)
from .models import (
    DEFAULT_CATEGORIES,
    SUBSCRIBER_RANGES,
    ContentRatingFilter,
    SearchConfig,
    SearchCreatorsInput,
    SearchCreatorsOutput,
    SearchFilters,
    SearchSuggestion,
    SortBy,
    SubscriberRange,
    SuggestionsInput,
    SuggestionsOutput,
)

__all__ = [
    # Component functions
    "run",
    "search_creators",
    "search_suggestions",
    "matches_query",
    "load_config_from_rules",
    # Models
    "ContentRatingFilter",
    "SearchConfig",
    "SearchCreatorsInput",
    "SearchCreatorsOutput",
    "SearchFilters",
    "SearchSuggestion",
    "SortBy",
    "SubscriberRange",
    "SuggestionsInput",
    "SuggestionsOutput",
    "DEFAULT_CATEGORIES",
    "SUBSCRIBER_RANGES",
]
