from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

TierName = Literal["subscribers", "vip", "premium"]


class ProjectRules(BaseModel):
    slug: str
    rules_version: str


class EntitlementRules(BaseModel):
    subscription_unlocks: list[TierName] = Field(
        default_factory=lambda: ["subscribers", "vip", "premium"]
    )
    allow_pay_per_view: bool = True


class TrendingWeightRules(BaseModel):
    subscriber_growth_rate: float = 0.5
    recent_engagement_rate: float = 0.3
    view_count: float = 0.2


class RisingStarWeightRules(BaseModel):
    engagement_rate: float = 0.6
    follower_growth: float = 0.4


class ForYouWeightRules(BaseModel):
    category_affinity: float = 0.4
    similar_to_followed: float = 0.3
    recency: float = 0.2
    popularity: float = 0.1
    recently_viewed_penalty: float = 0.15


class WeightRules(BaseModel):
    trending: TrendingWeightRules = Field(default_factory=TrendingWeightRules)
    rising_stars: RisingStarWeightRules = Field(default_factory=RisingStarWeightRules)
    for_you: ForYouWeightRules = Field(default_factory=ForYouWeightRules)


class ExploreRules(BaseModel):
    # Ranges are clamped by the ranking component, not rejected here
    weights: WeightRules = Field(default_factory=WeightRules)
    recency_half_life_hours: float = 48.0
    limit_per_section: int = 10
    hide_fully_locked: bool = False
    rising_star_window_days: float = 30.0
    max_consecutive_same_category: int = 2
    categories: list[str] = Field(default_factory=list)
    category_bucket_count: int = 3
    include_local_section: bool = True
    # Rank against the wall clock instead of the snapshot's newest timestamp
    use_wall_clock: bool = False


class SearchRules(BaseModel):
    categories: list[str] = Field(default_factory=list)
    active_recently_days: int = 7
    new_creator_days: int = 30


class ObservabilityRules(BaseModel):
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


class FixtureRules(BaseModel):
    path: str = "fixtures/explore_fixture.yaml"


class Rules(BaseModel):
    model_config = ConfigDict(extra="ignore")

    project: ProjectRules
    entitlements: EntitlementRules = Field(default_factory=EntitlementRules)
    explore: ExploreRules = Field(default_factory=ExploreRules)
    search: SearchRules = Field(default_factory=SearchRules)
    observability: ObservabilityRules = Field(default_factory=ObservabilityRules)
    fixtures: FixtureRules = Field(default_factory=FixtureRules)

    def as_dict(self) -> dict[str, Any]:
        """Plain dict for the components' load_config_from_rules()."""
        return self.model_dump()
