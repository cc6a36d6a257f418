"""
Ranking component - Explore sections for one viewer.

Builds Trending, Rising Stars, For You, From Your Country and category
bucket sections from a candidate pool snapshot.

Invariants:
- Same snapshot and config always give the same ordering (every sort ends on id)
- The viewer's own and not-interested content never appears
- Missing metrics score as 0; an empty pool gives empty sections
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from src.components.entitlement import (
    EntitlementConfig,
    is_fully_locked,
    resolve,
)
from src.components.entitlement import (
    load_config_from_rules as load_entitlement_config,
)
from src.domain.entities import (
    ANONYMOUS,
    AuthenticatedViewer,
    CandidatePool,
    Creator,
    Post,
    ViewerContext,
)

from ._scoring import (
    age_hours,
    clamp01,
    metric,
    normalize,
    recency_decay,
    reference_time,
    sort_timestamp,
    to_utc,
    weighted_sum,
)
from .models import (
    DEFAULT_CATEGORY_BUCKETS,
    DEFAULT_HALF_LIFE_HOURS,
    DEFAULT_LIMIT_PER_SECTION,
    DEFAULT_MAX_CONSECUTIVE_SAME_CATEGORY,
    DEFAULT_RISING_STAR_WINDOW_DAYS,
    Candidate,
    CandidateReason,
    ForYouWeights,
    RankByIdInput,
    RankerConfig,
    RankInput,
    RankOutput,
    RisingStarWeights,
    Section,
    TrendingWeights,
)
from .ports import CandidatePoolPort

logger = logging.getLogger(__name__)

SECTION_TITLES = {
    "trending": "Trending Creators",
    "rising_stars": "Rising Stars",
    "for_you": "Recommended For You",
    "from_your_country": "From Your Country",
}


# --- Snapshot Context ---


@dataclass(frozen=True)
class _Context:
    """Per-call values derived once from the viewer and pool."""

    viewer: AuthenticatedViewer | None
    creators_by_id: dict[str, Creator]
    followed_categories: frozenset[str]
    followed_countries: frozenset[str]
    now: datetime | None
    config: RankerConfig


def _build_context(
    viewer: ViewerContext,
    pool: CandidatePool,
    config: RankerConfig,
    now: datetime | None,
) -> _Context:
    authed = viewer if isinstance(viewer, AuthenticatedViewer) else None
    creators_by_id = pool.creator_by_id()

    followed_categories: set[str] = set()
    followed_countries: set[str] = set()
    if authed is not None:
        for creator_id in authed.followed_creator_ids:
            creator = creators_by_id.get(creator_id)
            if creator is None:
                continue
            if creator.category:
                followed_categories.add(creator.category)
            if creator.country_code:
                followed_countries.add(creator.country_code)

    if now is None:
        now = snapshot_reference_time(pool)
    else:
        now = to_utc(now)

    return _Context(
        viewer=authed,
        creators_by_id=creators_by_id,
        followed_categories=frozenset(followed_categories),
        followed_countries=frozenset(followed_countries),
        now=now,
        config=config,
    )


def snapshot_reference_time(pool: CandidatePool) -> datetime | None:
    """Newest timestamp in the pool, used as "now" when none is given."""
    stamps: list[datetime | None] = [p.published_at for p in pool.posts]
    for creator in pool.creators:
        stamps.append(creator.last_post_at)
        stamps.append(creator.creator_since)
    return reference_time(stamps)


# --- Filtering ---


def _allows_nsfw(viewer: ViewerContext) -> bool:
    return isinstance(viewer, AuthenticatedViewer) and viewer.allows_nsfw


def _is_excluded_creator(viewer: ViewerContext, creator_id: str) -> bool:
    if not isinstance(viewer, AuthenticatedViewer):
        return False
    return creator_id == viewer.id or creator_id in viewer.not_interested_creator_ids


def eligible_creators(viewer: ViewerContext, pool: CandidatePool) -> list[Creator]:
    """Creators the viewer may be shown, in pool order."""
    allow_nsfw = _allows_nsfw(viewer)
    return [
        creator
        for creator in pool.creators
        if not _is_excluded_creator(viewer, creator.id)
        and (allow_nsfw or not creator.is_nsfw)
    ]


def eligible_posts(
    viewer: ViewerContext,
    pool: CandidatePool,
    config: RankerConfig | None = None,
) -> list[Post]:
    """Posts the viewer may be shown, in pool order."""
    config = config or RankerConfig()
    allow_nsfw = _allows_nsfw(viewer)
    creators_by_id = pool.creator_by_id()

    posts: list[Post] = []
    for post in pool.posts:
        if _is_excluded_creator(viewer, post.creator_id):
            continue
        if not allow_nsfw:
            creator = creators_by_id.get(post.creator_id)
            if post.is_nsfw or (creator is not None and creator.is_nsfw):
                continue
        if config.hide_fully_locked and is_fully_locked(viewer, post, config.entitlement):
            continue
        posts.append(post)
    return posts


# --- Shared Helpers ---


def _post_category(post: Post, ctx: _Context) -> str:
    if post.category:
        return post.category
    creator = ctx.creators_by_id.get(post.creator_id)
    return creator.category if creator is not None else ""


def _in_rising_window(creator: Creator | None, ctx: _Context) -> bool:
    if creator is None or creator.creator_since is None:
        return False
    age = age_hours(creator.creator_since, ctx.now)
    if age is None:
        return False
    return age <= ctx.config.rising_star_window_days * 24.0


def _sorted(
    candidates: list[Candidate], secondary: Callable[[Candidate], float]
) -> list[Candidate]:
    """Score descending, then the section's tie-break descending, then id."""
    return sorted(candidates, key=lambda c: (-c.score, -secondary(c), c.id))


def _subscriber_count(candidate: Candidate) -> float:
    item = candidate.item
    return float(item.subscriber_count) if isinstance(item, Creator) else 0.0


def _creator_since(candidate: Candidate) -> float:
    item = candidate.item
    return sort_timestamp(item.creator_since) if isinstance(item, Creator) else float("-inf")


def _published_at(candidate: Candidate) -> float:
    item = candidate.item
    return sort_timestamp(item.published_at) if isinstance(item, Post) else float("-inf")


def apply_diversity_rules(
    ranked: Sequence[Candidate],
    max_consecutive_same_category: int = DEFAULT_MAX_CONSECUTIVE_SAME_CATEGORY,
) -> list[Candidate]:
    """
    Reorder so no more than N consecutive candidates share a category.

    Candidates that would break the run are deferred, never dropped. When
    only one category remains the rule cannot hold and order is kept.
    """
    if max_consecutive_same_category <= 0:
        return list(ranked)

    remaining = list(ranked)
    result: list[Candidate] = []

    while remaining:
        tail = result[-max_consecutive_same_category:]
        blocked: str | None = None
        if len(tail) == max_consecutive_same_category and len({c.category for c in tail}) == 1:
            blocked = tail[0].category

        pick = 0
        if blocked is not None:
            for index, candidate in enumerate(remaining):
                if candidate.category != blocked:
                    pick = index
                    break
        result.append(remaining.pop(pick))

    return result


# --- Trending ---


def build_trending(creators: Sequence[Creator], ctx: _Context) -> Section:
    """Creators by subscriber growth, recent engagement and views."""
    weights: TrendingWeights = ctx.config.trending
    growth = normalize([c.subscriber_growth_rate for c in creators])
    engagement = normalize([c.recent_engagement_rate for c in creators])
    views = normalize([c.view_count for c in creators])

    scored = [
        Candidate(
            kind="creator",
            id=creator.id,
            creator_id=creator.id,
            score=weighted_sum(
                [
                    (weights.subscriber_growth_rate, growth[i]),
                    (weights.recent_engagement_rate, engagement[i]),
                    (weights.view_count, views[i]),
                ]
            ),
            reason="trending",
            reason_details="Trending",
            category=creator.category,
            item=creator,
        )
        for i, creator in enumerate(creators)
    ]

    ranked = _sorted(scored, _subscriber_count)
    top = ranked[: ctx.config.limit_per_section]
    top = [_with_details(c, f"#{rank} Trending") for rank, c in enumerate(top, start=1)]
    return Section(type="trending", title=SECTION_TITLES["trending"], candidates=tuple(top))


def _with_details(candidate: Candidate, details: str) -> Candidate:
    return Candidate(
        kind=candidate.kind,
        id=candidate.id,
        creator_id=candidate.creator_id,
        score=candidate.score,
        reason=candidate.reason,
        reason_details=details,
        category=candidate.category,
        item=candidate.item,
        entitlement=candidate.entitlement,
    )


# --- Rising Stars ---


def build_rising_stars(
    creators: Sequence[Creator],
    ctx: _Context,
    exclude_ids: frozenset[str] = frozenset(),
) -> Section:
    """New creators (inside the window) growing fastest."""
    weights: RisingStarWeights = ctx.config.rising_stars
    pool = [c for c in creators if c.id not in exclude_ids and _in_rising_window(c, ctx)]

    engagement = normalize([c.engagement_rate for c in pool])
    growth = normalize([c.follower_growth for c in pool])

    scored: list[Candidate] = []
    for i, creator in enumerate(pool):
        age = age_hours(creator.creator_since, ctx.now) or 0.0
        days_active = max(1, math.ceil(age / 24.0))
        scored.append(
            Candidate(
                kind="creator",
                id=creator.id,
                creator_id=creator.id,
                score=weighted_sum(
                    [
                        (weights.engagement_rate, engagement[i]),
                        (weights.follower_growth, growth[i]),
                    ]
                ),
                reason="rising",
                reason_details=f"{days_active} days active",
                category=creator.category,
                item=creator,
            )
        )

    ranked = _sorted(scored, _creator_since)
    return Section(
        type="rising_stars",
        title=SECTION_TITLES["rising_stars"],
        candidates=tuple(ranked[: ctx.config.limit_per_section]),
    )


# --- For You ---


def _similar_to_followed(post: Post, category: str, ctx: _Context) -> tuple[float, bool]:
    """Similarity to followed creators and whether the creator is followed."""
    viewer = ctx.viewer
    if viewer is None:
        return 0.0, False

    if (
        post.creator_id in viewer.followed_creator_ids
        or post.creator_id in viewer.subscribed_creator_ids
    ):
        return 1.0, True

    creator = ctx.creators_by_id.get(post.creator_id)
    category_match = 1.0 if category and category in ctx.followed_categories else 0.0
    country_match = (
        1.0
        if creator is not None
        and creator.country_code
        and creator.country_code in ctx.followed_countries
        else 0.0
    )
    return (2.0 * category_match + country_match) / 3.0, False


def score_posts(
    posts: Sequence[Post],
    ctx: _Context,
    fixed_reason: CandidateReason | None = None,
) -> list[Candidate]:
    """Score posts with the For You formula; popularity is scaled over `posts`."""
    weights: ForYouWeights = ctx.config.for_you
    popularity = normalize([float(p.likes + 2 * p.comments + 3 * p.shares) for p in posts])
    affinities = ctx.viewer.category_affinities if ctx.viewer is not None else {}
    seen: frozenset[str] = frozenset()
    if ctx.viewer is not None:
        seen = ctx.viewer.viewed_post_ids | ctx.viewer.liked_post_ids

    candidates: list[Candidate] = []
    for i, post in enumerate(posts):
        category = _post_category(post, ctx)
        affinity = clamp01(affinities.get(category)) if category else 0.0
        similar, followed = _similar_to_followed(post, category, ctx)
        recency = recency_decay(post.published_at, ctx.now, ctx.config.recency_half_life_hours)

        category_term = weights.category_affinity * affinity
        similar_term = weights.similar_to_followed * similar
        score = (
            category_term
            + similar_term
            + weights.recency * recency
            + weights.popularity * popularity[i]
        )
        if post.id in seen:
            score -= weights.recently_viewed_penalty

        reason: CandidateReason
        if fixed_reason is not None:
            reason = fixed_reason
            details = f"Popular in {category}" if category else "Popular"
        elif category_term > 0 or similar_term > 0:
            if category_term >= similar_term:
                reason = "category_match"
                details = f"Popular in {category}"
            else:
                reason = "similar_to_followed"
                details = (
                    "From a creator you follow"
                    if followed
                    else "Similar to creators you follow"
                )
        elif _in_rising_window(ctx.creators_by_id.get(post.creator_id), ctx):
            reason = "new_creator"
            details = "New creator"
        else:
            reason = "trending"
            details = "Popular right now"

        candidates.append(
            Candidate(
                kind="post",
                id=post.id,
                creator_id=post.creator_id,
                score=score,
                reason=reason,
                reason_details=details,
                category=category,
                item=post,
                entitlement=resolve(
                    ctx.viewer if ctx.viewer is not None else ANONYMOUS,
                    post,
                    ctx.config.entitlement,
                ).state,
            )
        )
    return candidates


def _rank_posts(candidates: list[Candidate]) -> list[Candidate]:
    return _sorted(candidates, _published_at)


def build_for_you(posts: Sequence[Post], ctx: _Context) -> Section:
    """Posts by affinity, similarity to follows, recency and popularity."""
    ranked = _rank_posts(score_posts(posts, ctx))
    diverse = apply_diversity_rules(ranked, ctx.config.max_consecutive_same_category)
    return Section(
        type="for_you",
        title=SECTION_TITLES["for_you"],
        candidates=tuple(diverse[: ctx.config.limit_per_section]),
    )


# --- Category Buckets ---


def bucket_categories(posts: Sequence[Post], ctx: _Context) -> list[str]:
    """Configured categories, else top viewer affinities, else busiest categories."""
    config = ctx.config
    if config.categories:
        return list(dict.fromkeys(config.categories))

    count = config.category_bucket_count
    if count <= 0:
        return []

    if ctx.viewer is not None:
        liked = [
            (category, score)
            for category, score in ctx.viewer.category_affinities.items()
            if category and metric(score) > 0
        ]
        if liked:
            liked.sort(key=lambda item: (-metric(item[1]), item[0]))
            return [category for category, _ in liked[:count]]

    counts = Counter(c for c in (_post_category(p, ctx) for p in posts) if c)
    busiest = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return [category for category, _ in busiest[:count]]


def build_category_bucket(category: str, posts: Sequence[Post], ctx: _Context) -> Section:
    in_bucket = [p for p in posts if _post_category(p, ctx) == category]
    ranked = _rank_posts(score_posts(in_bucket, ctx, fixed_reason="category_match"))
    title = f"Because you like {category}" if ctx.viewer is not None else f"Popular in {category}"
    return Section(
        type="category",
        title=title,
        candidates=tuple(ranked[: ctx.config.limit_per_section]),
        category=category,
    )


# --- From Your Country ---


def build_local(creators: Sequence[Creator], ctx: _Context) -> Section | None:
    """Creators from the viewer's country they do not already follow."""
    viewer = ctx.viewer
    if viewer is None or not viewer.country_code:
        return None

    local = [
        c
        for c in creators
        if c.country_code == viewer.country_code
        and c.id not in viewer.followed_creator_ids
        and c.id not in viewer.subscribed_creator_ids
    ]
    sizes = normalize([float(c.subscriber_count) for c in local])
    scored = [
        Candidate(
            kind="creator",
            id=creator.id,
            creator_id=creator.id,
            score=sizes[i],
            reason="location_match",
            reason_details=f"Creator from {creator.country_code}",
            category=creator.category,
            item=creator,
        )
        for i, creator in enumerate(local)
    ]
    ranked = _sorted(scored, _subscriber_count)
    return Section(
        type="from_your_country",
        title=SECTION_TITLES["from_your_country"],
        candidates=tuple(ranked[: ctx.config.limit_per_section]),
    )


# --- Main Entry ---


def rank(
    viewer: ViewerContext,
    pool: CandidatePool,
    config: RankerConfig | None = None,
    *,
    now: datetime | None = None,
) -> list[Section]:
    """
    Rank a candidate pool into Explore sections.

    Pure function over the snapshot. Trending, Rising Stars and For You are
    always present (possibly empty); From Your Country and category buckets
    only when they have candidates.

    Args:
        viewer: AnonymousViewer or AuthenticatedViewer
        pool: Creators and posts to rank
        config: Ranker configuration (defaults when None)
        now: Reference time; defaults to the newest timestamp in the pool

    Returns:
        Ordered list of sections
    """
    config = config or RankerConfig()
    ctx = _build_context(viewer, pool, config, now)

    creators = eligible_creators(viewer, pool)
    posts = eligible_posts(viewer, pool, config)

    trending = build_trending(creators, ctx)
    trending_ids = frozenset(c.id for c in trending.candidates)
    sections = [
        trending,
        build_rising_stars(creators, ctx, exclude_ids=trending_ids),
        build_for_you(posts, ctx),
    ]

    if config.include_local_section:
        local = build_local(creators, ctx)
        if local is not None and not local.is_empty:
            sections.append(local)

    for category in bucket_categories(posts, ctx):
        bucket = build_category_bucket(category, posts, ctx)
        if not bucket.is_empty:
            sections.append(bucket)

    return sections


# --- Run Function (Atomic Component Pattern) ---


def run(
    input_data: RankInput | RankByIdInput,
    config: RankerConfig | None = None,
    store: CandidatePoolPort | None = None,
) -> RankOutput:
    """
    Run a ranking based on input type.

    Args:
        input_data: Snapshots, or a viewer id to fetch from the store
        config: Ranker configuration
        store: Required for RankByIdInput

    Returns:
        RankOutput with sections or errors
    """
    config = config or RankerConfig()

    if isinstance(input_data, RankInput):
        return RankOutput(
            sections=rank(input_data.viewer, input_data.pool, config, now=input_data.now)
        )

    if isinstance(input_data, RankByIdInput):
        if store is None:
            return RankOutput(sections=[], errors=["No snapshot store configured"], success=False)

        viewer = store.get_viewer_snapshot(input_data.viewer_id)
        pool = store.get_candidate_pool(input_data.filters)
        return RankOutput(sections=rank(viewer, pool, config, now=input_data.now))

    raise TypeError(f"Unknown input type: {type(input_data)}")


# --- Configuration Loader ---

_MISSING = object()


def _lookup(options: Mapping[str, Any], *keys: str) -> Any:
    """First present key; options accept camelCase or snake_case."""
    for key in keys:
        if key in options:
            return options[key]
    return _MISSING


def _section(options: Mapping[str, Any], *keys: str) -> Mapping[str, Any]:
    value = _lookup(options, *keys)
    return value if isinstance(value, Mapping) else {}


def _number(value: Any, default: float, name: str, minimum: float | None = 0.0) -> float:
    if value is _MISSING or value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        logger.warning("Ignoring non-numeric ranking option %s=%r", name, value)
        return default
    try:
        number = float(value)
    except ValueError:
        logger.warning("Ignoring non-numeric ranking option %s=%r", name, value)
        return default
    if not math.isfinite(number):
        logger.warning("Ignoring non-finite ranking option %s=%r", name, value)
        return default
    if minimum is not None and number < minimum:
        logger.warning("Clamping ranking option %s=%r to %s", name, value, minimum)
        return minimum
    return number


def _weight(options: Mapping[str, Any], camel: str, snake: str, default: float) -> float:
    return _number(_lookup(options, camel, snake), default, camel)


def _flag(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    return default


def load_ranker_config(
    options: Mapping[str, Any] | None = None,
    entitlement: EntitlementConfig | None = None,
) -> RankerConfig:
    """
    Build a RankerConfig from an options mapping.

    Recognized keys (camelCase or snake_case): weights.{trending,risingStars,
    forYou}, recencyHalfLifeHours, limitPerSection, hideFullyLocked,
    risingStarWindowDays, maxConsecutiveSameCategory, categories,
    categoryBucketCount, includeLocalSection. weights.forYou also takes
    recentlyViewedPenalty. Unknown keys are ignored,
    missing or unparsable ones fall back to defaults, negative weights clamp
    to zero. Never raises.
    """
    options = options or {}
    weights = _section(options, "weights")
    trending = _section(weights, "trending")
    rising = _section(weights, "risingStars", "rising_stars")
    for_you = _section(weights, "forYou", "for_you")

    half_life = _number(
        _lookup(options, "recencyHalfLifeHours", "recency_half_life_hours"),
        DEFAULT_HALF_LIFE_HOURS,
        "recencyHalfLifeHours",
    )
    if half_life <= 0:
        logger.warning("recencyHalfLifeHours must be positive, using %s", DEFAULT_HALF_LIFE_HOURS)
        half_life = DEFAULT_HALF_LIFE_HOURS

    raw_categories = _lookup(options, "categories")
    categories: tuple[str, ...] = ()
    if isinstance(raw_categories, (list, tuple)):
        categories = tuple(c for c in raw_categories if isinstance(c, str) and c)

    return RankerConfig(
        trending=TrendingWeights(
            subscriber_growth_rate=_weight(
                trending, "subscriberGrowthRate", "subscriber_growth_rate", 0.5
            ),
            recent_engagement_rate=_weight(
                trending, "recentEngagementRate", "recent_engagement_rate", 0.3
            ),
            view_count=_weight(trending, "viewCount", "view_count", 0.2),
        ),
        rising_stars=RisingStarWeights(
            engagement_rate=_weight(rising, "engagementRate", "engagement_rate", 0.6),
            follower_growth=_weight(rising, "followerGrowth", "follower_growth", 0.4),
        ),
        for_you=ForYouWeights(
            category_affinity=_weight(for_you, "categoryAffinity", "category_affinity", 0.4),
            similar_to_followed=_weight(for_you, "similarToFollowed", "similar_to_followed", 0.3),
            recency=_weight(for_you, "recency", "recency", 0.2),
            popularity=_weight(for_you, "popularity", "popularity", 0.1),
            recently_viewed_penalty=_weight(
                for_you, "recentlyViewedPenalty", "recently_viewed_penalty", 0.15
            ),
        ),
        recency_half_life_hours=half_life,
        limit_per_section=int(
            _number(
                _lookup(options, "limitPerSection", "limit_per_section"),
                DEFAULT_LIMIT_PER_SECTION,
                "limitPerSection",
            )
        ),
        hide_fully_locked=_flag(_lookup(options, "hideFullyLocked", "hide_fully_locked"), False),
        rising_star_window_days=_number(
            _lookup(options, "risingStarWindowDays", "rising_star_window_days"),
            DEFAULT_RISING_STAR_WINDOW_DAYS,
            "risingStarWindowDays",
        ),
        max_consecutive_same_category=int(
            _number(
                _lookup(options, "maxConsecutiveSameCategory", "max_consecutive_same_category"),
                DEFAULT_MAX_CONSECUTIVE_SAME_CATEGORY,
                "maxConsecutiveSameCategory",
            )
        ),
        categories=categories,
        category_bucket_count=int(
            _number(
                _lookup(options, "categoryBucketCount", "category_bucket_count"),
                DEFAULT_CATEGORY_BUCKETS,
                "categoryBucketCount",
            )
        ),
        include_local_section=_flag(
            _lookup(options, "includeLocalSection", "include_local_section"), True
        ),
        entitlement=entitlement or EntitlementConfig(),
    )


def load_config_from_rules(rules: dict[str, Any]) -> RankerConfig:
    """
    Load RankerConfig from rules.yaml.

    Args:
        rules: Parsed rules dictionary

    Returns:
        RankerConfig instance
    """
    explore = rules.get("explore") or {}
    return load_ranker_config(explore, entitlement=load_entitlement_config(rules))
