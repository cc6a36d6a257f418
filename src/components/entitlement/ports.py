"""
Entitlement component ports.

External interfaces for resolving entitlements by id.
"""

from __future__ import annotations

from typing import Protocol

from src.domain.entities import Post, ViewerContext


class EntitlementStorePort(Protocol):
    """
    Port for fetching the snapshots a resolution needs.

    Implementations:
    - FixtureSnapshotStore: YAML fixture (dev/tests)
    """

    def get_viewer_snapshot(self, viewer_id: str | None) -> ViewerContext:
        """
        Get the viewer snapshot.

        Args:
            viewer_id: Optional viewer identifier

        Returns:
            AnonymousViewer when the id is absent or unknown
        """
        ...

    def get_post(self, post_id: str) -> Post | None:
        """Get a post snapshot, or None if it does not exist."""
        ...
