from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from src.domain.entities import (
    AuthenticatedViewer,
    CandidatePool,
    Creator,
    Post,
)


def test_post_defaults_are_restrictive():
    post = Post.model_validate({"id": "p_1", "creator_id": "c_1"})
    assert post.visibility == "subscribers"
    assert post.has_preview is False
    assert post.is_nsfw is False


def test_post_coercion():
    post = Post.model_validate(
        {
            "id": "p_1",
            "creator_id": "c_1",
            "visibility": "FREE",
            "likes": -4,
            "comments": "12",
            "is_nsfw": "yes",
            "published_at": "2026-10-18T09:00:00+00:00",
            "price": "inf",
        }
    )
    # Visibility is case sensitive; anything unknown stays locked
    assert post.visibility == "subscribers"
    assert post.likes == 0
    assert post.comments == 12
    assert post.is_nsfw is True
    assert post.published_at == datetime(2026, 10, 18, 9, 0, tzinfo=UTC)
    assert post.price is None


def test_bad_timestamp_is_none():
    post = Post.model_validate({"id": "p_1", "creator_id": "c_1", "published_at": "yesterday"})
    assert post.published_at is None


def test_creator_rating_defaults_to_adult_when_unclear():
    assert Creator.model_validate({"id": "c_1"}).is_nsfw is False
    assert Creator.model_validate({"id": "c_1", "content_rating": "sfw"}).is_nsfw is False
    assert Creator.model_validate({"id": "c_1", "content_rating": "R18"}).is_nsfw is True


def test_creator_metrics_tolerate_garbage():
    creator = Creator.model_validate(
        {"id": "c_1", "subscriber_growth_rate": "fast", "engagement_rate": True, "view_count": "10"}
    )
    assert creator.subscriber_growth_rate is None
    assert creator.engagement_rate is None
    assert creator.view_count == 10.0


def test_oversized_integers_are_treated_as_missing():
    huge = 10**400
    creator = Creator.model_validate(
        {"id": "c_1", "view_count": huge, "subscriber_count": huge, "subscription_price": -huge}
    )
    assert creator.view_count is None
    assert creator.subscriber_count == 0
    assert creator.subscription_price is None

    post = Post.model_validate({"id": "p_1", "creator_id": "c_1", "likes": huge, "price": huge})
    assert post.likes == 0
    assert post.price is None


def test_viewer_nsfw_needs_explicit_true():
    assert AuthenticatedViewer(id="v_1", allows_nsfw="true").allows_nsfw is False
    assert AuthenticatedViewer(id="v_1", allows_nsfw=True).allows_nsfw is True


def test_viewer_affinities_drop_non_numeric():
    viewer = AuthenticatedViewer(id="v_1", category_affinities={"Art": "0.5", "Music": "lots"})
    assert viewer.category_affinities == {"Art": 0.5}


def test_snapshots_are_frozen():
    viewer = AuthenticatedViewer(id="v_1")
    with pytest.raises(ValidationError):
        viewer.id = "v_2"  # type: ignore[misc]


def test_pool_helpers():
    creator = Creator(id="c_1")
    pool = CandidatePool(creators=(creator,))
    assert pool.is_empty is False
    assert pool.creator_by_id() == {"c_1": creator}
    assert CandidatePool().is_empty is True
