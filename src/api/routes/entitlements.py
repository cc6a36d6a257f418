from fastapi import APIRouter, Depends, HTTPException

from src.api.deps import get_entitlement_config, get_store
from src.api.schemas import EntitlementResponse
from src.components.entitlement import EntitlementConfig, get_paywall_info
from src.ports.store import SnapshotStorePort

router = APIRouter()


@router.get("/{post_id}/entitlement", response_model=EntitlementResponse)
def get_post_entitlement(
    post_id: str,
    viewer_id: str | None = None,
    store: SnapshotStorePort = Depends(get_store),
    config: EntitlementConfig = Depends(get_entitlement_config),
) -> EntitlementResponse:
    """
    Resolve what a viewer may see of a post.

    Unknown viewers are treated as anonymous. Locked results never carry the
    media URL, only the preview thumbnail when one exists.
    """
    post = store.get_post(post_id)
    if post is None:
        raise HTTPException(status_code=404, detail="Post not found")

    viewer = store.get_viewer_snapshot(viewer_id)
    return EntitlementResponse(**get_paywall_info(viewer, post, config))
