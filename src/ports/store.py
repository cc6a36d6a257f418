from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from src.domain.entities import CandidatePool, Post, ViewerContext


@dataclass(frozen=True)
class PoolFilters:
    """Narrows the candidate pool a store returns. Empty means no filter."""

    categories: tuple[str, ...] = ()
    country_codes: tuple[str, ...] = ()
    verified_only: bool = False


class SnapshotStorePort(Protocol):
    """
    Source of the snapshots the core ranks and resolves.

    The core never caches; every call is expected to return a fresh,
    internally consistent snapshot.
    """

    def get_viewer_snapshot(self, viewer_id: str | None) -> ViewerContext:
        """Viewer snapshot; AnonymousViewer for an absent or unknown id."""
        ...

    def get_candidate_pool(self, filters: PoolFilters | None = None) -> CandidatePool:
        """Creators and posts eligible for discovery."""
        ...

    def get_post(self, post_id: str) -> Post | None:
        """Single post snapshot, or None."""
        ...
