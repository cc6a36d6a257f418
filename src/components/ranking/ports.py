"""
Ranking component port definitions.
"""

from __future__ import annotations

from typing import Protocol

from src.domain.entities import CandidatePool, ViewerContext
from src.ports.store import PoolFilters


class CandidatePoolPort(Protocol):
    """Store interface for fetching a ranking snapshot."""

    def get_viewer_snapshot(self, viewer_id: str | None) -> ViewerContext:
        """Get the viewer snapshot (AnonymousViewer when unknown)."""
        ...

    def get_candidate_pool(self, filters: PoolFilters | None = None) -> CandidatePool:
        """Get creators and posts to rank."""
        ...
