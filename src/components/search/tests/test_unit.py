"""
Unit tests for the search component.

Tests:
- Query matching over name, category, bio and country
- Explore filters and sort orders
- Viewer-based hiding (self, not interested, adult content)
- Suggestions for empty and non-empty queries
"""

from datetime import UTC, datetime, timedelta

import pytest

from src.components.search import (
    DEFAULT_CATEGORIES,
    SearchConfig,
    SearchCreatorsInput,
    SearchFilters,
    SuggestionsInput,
    load_config_from_rules,
    matches_query,
    run,
    search_creators,
    search_suggestions,
)
from src.domain.entities import ANONYMOUS, AuthenticatedViewer, Creator

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=UTC)
ADULT_OK = AuthenticatedViewer(id="v_night_owl", allows_nsfw=True)


@pytest.fixture
def creators() -> tuple[Creator, ...]:
    return (
        Creator(
            id="c_amara",
            username="amara_styles",
            display_name="Amara Okafor",
            bio="Lagos street style",
            category="Fashion",
            country_code="NG",
            is_verified=True,
            is_online=True,
            subscriber_count=5200,
            subscription_price=9.99,
            engagement_rate=0.07,
            creator_since=NOW - timedelta(days=1000),
            last_post_at=NOW - timedelta(days=1),
        ),
        Creator(
            id="c_kofi",
            username="kofi_beats",
            display_name="Kofi Mensah",
            category="Music",
            country_code="GH",
            is_verified=True,
            subscriber_count=3100,
            subscription_price=4.99,
            engagement_rate=0.09,
            creator_since=NOW - timedelta(days=700),
            last_post_at=NOW - timedelta(days=10),
        ),
        Creator(
            id="c_tunde",
            username="tunde_cooks",
            display_name="Tunde Bakare",
            category="Food",
            country_code="NG",
            subscriber_count=980,
            subscription_price=0,
            engagement_rate=0.11,
            creator_since=NOW - timedelta(days=13),
            last_post_at=NOW - timedelta(days=1),
        ),
        Creator(
            id="c_ayo",
            username="ayo_codes",
            display_name="Ayo Adeyemi",
            category="Tech",
            country_code="NG",
            subscriber_count=60,
            engagement_rate=0.04,
            creator_since=NOW - timedelta(days=6),
        ),
        Creator(
            id="c_zara",
            username="zara_after_dark",
            display_name="Zara K",
            category="Lifestyle",
            country_code="KE",
            content_rating="nsfw",
            subscriber_count=2100,
            subscription_price=14.99,
            engagement_rate=0.10,
            creator_since=NOW - timedelta(days=500),
        ),
    )


def found_ids(found: list[Creator]) -> list[str]:
    return [c.id for c in found]


class TestQuery:
    def test_case_insensitive_category(self, creators: tuple[Creator, ...]) -> None:
        assert matches_query(creators[0], "FASH") is True

    def test_matches_bio(self, creators: tuple[Creator, ...]) -> None:
        assert found_ids(search_creators("lagos", creators, now=NOW)) == ["c_amara"]

    def test_matches_country_code(self, creators: tuple[Creator, ...]) -> None:
        assert found_ids(search_creators("gh", creators, now=NOW)) == ["c_kofi"]

    def test_blank_query_matches_all(self, creators: tuple[Creator, ...]) -> None:
        # Default sort is relevance: engagement rate descending
        assert found_ids(search_creators("  ", creators, viewer=ADULT_OK, now=NOW)) == [
            "c_tunde",
            "c_zara",
            "c_kofi",
            "c_amara",
            "c_ayo",
        ]


class TestViewerHiding:
    def test_anonymous_hides_adult_creators(self, creators: tuple[Creator, ...]) -> None:
        assert "c_zara" not in found_ids(search_creators("", creators, viewer=ANONYMOUS, now=NOW))

    def test_missing_viewer_hides_adult_creators(self, creators: tuple[Creator, ...]) -> None:
        assert "c_zara" not in found_ids(search_creators("", creators, now=NOW))
        output = run(SearchCreatorsInput(query="zara", creators=creators, now=NOW))
        assert output.creators == []

    def test_opted_in_viewer_sees_adult_creators(self, creators: tuple[Creator, ...]) -> None:
        viewer = AuthenticatedViewer(id="v_1", allows_nsfw=True)
        assert "c_zara" in found_ids(search_creators("", creators, viewer=viewer, now=NOW))

    def test_hides_self_and_not_interested(self, creators: tuple[Creator, ...]) -> None:
        viewer = AuthenticatedViewer(id="c_ayo", not_interested_creator_ids=["c_tunde"])
        found = found_ids(search_creators("", creators, viewer=viewer, now=NOW))
        assert found == ["c_kofi", "c_amara"]


class TestFilters:
    @pytest.mark.parametrize(
        ("filters", "expected"),
        [
            (SearchFilters(verified_only=True), {"c_amara", "c_kofi"}),
            (SearchFilters(online_only=True), {"c_amara"}),
            (SearchFilters(min_price=1, max_price=10), {"c_amara", "c_kofi"}),
            (SearchFilters(countries=("NG",)), {"c_amara", "c_tunde", "c_ayo"}),
            (SearchFilters(categories=("Music", "Tech")), {"c_kofi", "c_ayo"}),
            (SearchFilters(content_rating="nsfw"), {"c_zara"}),
            (SearchFilters(subscriber_range="1000-5000"), {"c_kofi", "c_zara"}),
            (SearchFilters(subscriber_range="5000+"), {"c_amara"}),
            (SearchFilters(active_recently=True), {"c_amara", "c_tunde"}),
            (SearchFilters(new_creators_only=True), {"c_tunde", "c_ayo"}),
        ],
    )
    def test_filter(
        self,
        creators: tuple[Creator, ...],
        filters: SearchFilters,
        expected: set[str],
    ) -> None:
        found = search_creators("", creators, filters, ADULT_OK, now=NOW)
        assert set(found_ids(found)) == expected

    @pytest.mark.parametrize(
        ("sort_by", "expected"),
        [
            ("popularity", ["c_amara", "c_kofi", "c_zara", "c_tunde", "c_ayo"]),
            ("newest", ["c_ayo", "c_tunde", "c_zara", "c_kofi", "c_amara"]),
            ("price_low", ["c_tunde", "c_kofi", "c_amara", "c_zara", "c_ayo"]),
            ("price_high", ["c_zara", "c_amara", "c_kofi", "c_tunde", "c_ayo"]),
        ],
    )
    def test_sort(
        self,
        creators: tuple[Creator, ...],
        sort_by: str,
        expected: list[str],
    ) -> None:
        filters = SearchFilters(sort_by=sort_by)  # type: ignore[arg-type]
        assert found_ids(search_creators("", creators, filters, ADULT_OK, now=NOW)) == expected


class TestSuggestions:
    def test_empty_query(self, creators: tuple[Creator, ...]) -> None:
        suggestions = search_suggestions("", creators, ["jollof", "afrobeats", "hiit", "lagos"])
        assert [s.type for s in suggestions] == ["recent"] * 3 + ["category"] * 5
        assert [s.text for s in suggestions[:3]] == ["jollof", "afrobeats", "hiit"]
        assert [s.text for s in suggestions[3:]] == list(DEFAULT_CATEGORIES[:5])

    def test_creator_then_category(self, creators: tuple[Creator, ...]) -> None:
        suggestions = search_suggestions("fi", creators)
        assert [(s.type, s.text) for s in suggestions] == [
            ("creator", "Kofi Mensah"),
            ("category", "Fitness"),
        ]
        assert suggestions[0].subtext == "@kofi_beats"
        assert suggestions[0].creator_id == "c_kofi"

    def test_creator_limit(self) -> None:
        many = tuple(
            Creator(id=f"c_{i}", username=f"dancer_{i}", subscriber_count=i) for i in range(8)
        )
        suggestions = search_suggestions("dancer", many)
        assert [s.creator_id for s in suggestions] == ["c_7", "c_6", "c_5", "c_4", "c_3"]


class TestRun:
    def test_search_input(self, creators: tuple[Creator, ...]) -> None:
        output = run(SearchCreatorsInput(query="ng", creators=creators, now=NOW))
        assert output.success is True
        assert output.total == len(output.creators)

    def test_suggestions_input(self, creators: tuple[Creator, ...]) -> None:
        output = run(SuggestionsInput(query="", creators=creators))
        assert len(output.suggestions) == 5

    def test_unknown_input(self) -> None:
        with pytest.raises(TypeError):
            run("query")  # type: ignore[arg-type]


class TestLoadConfig:
    def test_defaults(self) -> None:
        assert load_config_from_rules({}) == SearchConfig()

    def test_from_rules(self) -> None:
        config = load_config_from_rules(
            {"search": {"categories": ["Art", "Dance"], "active_recently_days": 3}}
        )
        assert config.categories == ("Art", "Dance")
        assert config.active_recently_days == 3
        assert config.new_creator_days == 30
