"""
In-memory snapshot store backed by a YAML fixture.

Fixture layout:

    viewers:  [{id, subscribed_creator_ids, purchased_post_ids, ...}]
    creators: [{id, username, category, subscriber_count, ...}]
    posts:    [{id, creator_id, visibility, published_at, ...}]

Field values go through the domain snapshot models, so malformed values are
coerced rather than rejected. Records missing a required field (an id) are
skipped with a warning.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, TypeVar

import yaml
from pydantic import ValidationError

from src.domain.entities import (
    ANONYMOUS,
    AuthenticatedViewer,
    CandidatePool,
    Creator,
    Post,
    Snapshot,
    ViewerContext,
)
from src.ports.store import PoolFilters

logger = logging.getLogger(__name__)

S = TypeVar("S", bound=Snapshot)


def _parse_records(model: type[S], records: Any, label: str) -> list[S]:
    if records is None:
        return []
    if not isinstance(records, list):
        logger.warning("Fixture section %r is not a list, ignoring it", label)
        return []

    parsed: list[S] = []
    for index, record in enumerate(records):
        if not isinstance(record, Mapping):
            logger.warning("Skipping %s #%d: not a mapping", label, index)
            continue
        try:
            parsed.append(model.model_validate(record))
        except ValidationError as e:
            logger.warning("Skipping %s #%d: %s", label, index, e.errors()[0]["msg"])
    return parsed


class FixtureSnapshotStore:
    """SnapshotStorePort implementation over fixed in-memory snapshots."""

    def __init__(
        self,
        viewers: Iterable[AuthenticatedViewer] = (),
        creators: Iterable[Creator] = (),
        posts: Iterable[Post] = (),
    ) -> None:
        self._viewers = {v.id: v for v in viewers}
        self._creators = tuple(creators)
        self._posts = tuple(posts)
        self._posts_by_id = {p.id: p for p in self._posts}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FixtureSnapshotStore:
        store = cls(
            viewers=_parse_records(AuthenticatedViewer, data.get("viewers"), "viewer"),
            creators=_parse_records(Creator, data.get("creators"), "creator"),
            posts=_parse_records(Post, data.get("posts"), "post"),
        )
        logger.debug(
            "Fixture loaded: %d viewers, %d creators, %d posts",
            len(store._viewers),
            len(store._creators),
            len(store._posts),
        )
        return store

    @classmethod
    def from_file(cls, path: Path | str) -> FixtureSnapshotStore:
        """
        Load a fixture file.
        Raises FileNotFoundError if missing, ValueError if not a YAML mapping.
        """
        fixture_path = Path(path)
        if not fixture_path.exists():
            raise FileNotFoundError(f"Fixture file not found at: {fixture_path}")

        with open(fixture_path) as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML syntax in fixture: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            raise ValueError(f"Fixture must contain a mapping: {fixture_path}")

        logger.debug("Loading fixture from %s", fixture_path)
        return cls.from_dict(data)

    # --- SnapshotStorePort ---

    def get_viewer_snapshot(self, viewer_id: str | None) -> ViewerContext:
        if not viewer_id:
            return ANONYMOUS
        viewer = self._viewers.get(viewer_id)
        if viewer is None:
            logger.debug("Unknown viewer %s, treating as anonymous", viewer_id)
            return ANONYMOUS
        return viewer

    def get_candidate_pool(self, filters: PoolFilters | None = None) -> CandidatePool:
        creators = self._creators
        if filters is not None:
            creators = tuple(c for c in creators if self._matches(c, filters))

        creator_ids = {c.id for c in creators}
        posts = tuple(p for p in self._posts if p.creator_id in creator_ids)
        return CandidatePool(creators=creators, posts=posts)

    def get_post(self, post_id: str) -> Post | None:
        return self._posts_by_id.get(post_id)

    @staticmethod
    def _matches(creator: Creator, filters: PoolFilters) -> bool:
        if filters.categories and creator.category not in filters.categories:
            return False
        if filters.country_codes and creator.country_code not in filters.country_codes:
            return False
        if filters.verified_only and not creator.is_verified:
            return False
        return True
